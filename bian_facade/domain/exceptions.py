"""Domain-specific exceptions"""

from typing import List


class FacadeError(Exception):
    """Base exception for the facility retrieval pipeline"""

    pass


# Client input (always 400)


class ClientInputError(FacadeError):
    """Caller sent a request that can be fixed by correcting it"""

    pass


class InvalidCustomerIdError(ClientInputError):
    """Customer id in the path is empty or blank"""

    pass


class MissingHeadersError(ClientInputError):
    """One or more mandatory correlation headers are absent"""

    def __init__(self, missing: List[str]):
        super().__init__(f"Missing required headers: {', '.join(missing)}")
        self.missing = list(missing)


# Lookup misses


class NotFoundError(FacadeError):
    pass


class CustomerNotFoundError(NotFoundError):
    """Fallback store has no facilities for the customer"""

    def __init__(self, customer_id: str):
        super().__init__(f"CustomerId '{customer_id}' not found")
        self.customer_id = customer_id


# Upstream transport


class UpstreamTransportError(FacadeError):
    pass


class UpstreamTimeout(UpstreamTransportError):
    """Upstream call timed out or was cancelled"""

    pass


class UpstreamUnreachable(UpstreamTransportError):
    """Connection refused, DNS failure or any other transport error"""

    pass


# Upstream contract


class UpstreamContractError(FacadeError):
    pass


class UpstreamInvalidPayload(UpstreamContractError):
    """Upstream answered 2xx with a body that does not decode"""

    pass


class UpstreamEmptyPayload(UpstreamContractError):
    """Upstream answered 2xx with no value"""

    pass


# Upstream relayed


class UpstreamRelayedError(FacadeError):
    pass


class UpstreamError(UpstreamRelayedError):
    """Upstream answered with a non-success status; status and body are relayed as-is"""

    def __init__(self, status_code: int, body: bytes, content_type: str = "application/json"):
        super().__init__(f"Upstream returned {status_code}")
        self.status_code = status_code
        self.body = body
        self.content_type = content_type
