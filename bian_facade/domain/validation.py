"""Inbound request checks: path customer id and mandatory correlation headers"""

from typing import List, Mapping

from bian_facade.domain.exceptions import InvalidCustomerIdError, MissingHeadersError
from bian_facade.domain.models import RequestContext

REQUIRED_HEADERS = (
    "x-correlation-id",
    "x-channel-id",
    "x-application-id",
    "x-transaction-id",
    "x-parent-id",
)

# Accepted and documented, never validated
OPTIONAL_HEADERS = ("x-app-version", "x-request-id")


def validate_customer_id(customer_id: str | None) -> str:
    """Return the customer id unchanged, or raise if it is empty or blank"""
    if customer_id is None or not customer_id.strip():
        raise InvalidCustomerIdError("CustomerId is required.")
    return customer_id


def find_missing_headers(headers: Mapping[str, str]) -> List[str]:
    """
    List the mandatory headers that are absent or blank.

    Lookup is case-insensitive: the mapping is normalized here so plain dicts
    behave the same as Starlette's Headers.
    """
    normalized = {key.lower(): value for key, value in headers.items()}
    return [name for name in REQUIRED_HEADERS if not (normalized.get(name) or "").strip()]


def validate_headers(ctx: RequestContext) -> None:
    missing = find_missing_headers(ctx.headers)
    if missing:
        raise MissingHeadersError(missing)
