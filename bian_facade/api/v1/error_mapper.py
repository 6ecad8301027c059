"""Translate pipeline failures into HTTP status codes and error bodies"""

from dataclasses import dataclass
from typing import Union

from starlette import status

from bian_facade.domain.exceptions import (
    CustomerNotFoundError,
    InvalidCustomerIdError,
    MissingHeadersError,
    UpstreamEmptyPayload,
    UpstreamError,
    UpstreamInvalidPayload,
    UpstreamTimeout,
    UpstreamUnreachable,
)
from bian_facade.domain.models import ErrorBody

VALIDATION = "Validation"
PROCESSING = "Processing"


@dataclass(frozen=True)
class MappedError:
    """Final status and body for a failed request; body is raw bytes only for relayed errors"""

    status_code: int
    body: Union[ErrorBody, bytes]
    media_type: str = "application/json"

    @property
    def relayed(self) -> bool:
        return isinstance(self.body, bytes)


def _error(status_code: int, category: str, message: str, *details: str) -> MappedError:
    return MappedError(
        status_code=status_code,
        body=ErrorBody(code=str(status_code), category=category, message=message, details=tuple(details)),
    )


def map_error(exc: Exception) -> MappedError:
    """Map a failure outcome to its response; anything unclassified becomes 500"""
    if isinstance(exc, InvalidCustomerIdError):
        return _error(status.HTTP_400_BAD_REQUEST, VALIDATION, "Invalid Customer ID format", "CustomerId is required.")

    if isinstance(exc, MissingHeadersError):
        return _error(
            status.HTTP_400_BAD_REQUEST,
            VALIDATION,
            "Missing required headers",
            *(f"Header '{name}' is required." for name in exc.missing),
        )

    if isinstance(exc, CustomerNotFoundError):
        return _error(
            status.HTTP_404_NOT_FOUND,
            PROCESSING,
            f"CustomerId '{exc.customer_id}' not found",
            "No credit cards associated to the given customer id.",
        )

    if isinstance(exc, UpstreamTimeout):
        return _error(status.HTTP_504_GATEWAY_TIMEOUT, PROCESSING, "Upstream request timed out")

    if isinstance(exc, UpstreamUnreachable):
        return _error(status.HTTP_502_BAD_GATEWAY, PROCESSING, "Upstream service unreachable")

    if isinstance(exc, UpstreamError):
        return MappedError(status_code=exc.status_code, body=exc.body, media_type=exc.content_type)

    if isinstance(exc, UpstreamInvalidPayload):
        return _error(status.HTTP_502_BAD_GATEWAY, PROCESSING, "Invalid JSON from proxy")

    if isinstance(exc, UpstreamEmptyPayload):
        return _error(status.HTTP_502_BAD_GATEWAY, PROCESSING, "Empty response from proxy")

    return _error(status.HTTP_500_INTERNAL_SERVER_ERROR, PROCESSING, "Internal server error")
