"""GET /credit-card/customer/{customerId}/retrieve - BIAN credit card facility retrieval"""

import asyncio
import logging
import time
from typing import Any, Dict, Optional

from fastapi import APIRouter, Depends, Path, Request
from fastapi.responses import JSONResponse
from fastapi.security import HTTPAuthorizationCredentials, HTTPBearer
from starlette.responses import Response

from bian_facade.api.dependencies import get_fallback_store, get_proxy_client, get_request_context, get_settings
from bian_facade.api.v1.assembler import assemble_response
from bian_facade.api.v1.error_mapper import MappedError, map_error
from bian_facade.schemas.facility import TOTAL_COUNT_HEADER, ErrorResponse, RetrieveCreditCardFacilitiesResponse
from bian_facade.config import Settings
from bian_facade.domain.exceptions import FacadeError
from bian_facade.domain.fallback_store import FallbackStore
from bian_facade.domain.models import RequestContext
from bian_facade.domain.validation import OPTIONAL_HEADERS, REQUIRED_HEADERS, validate_customer_id, validate_headers
from bian_facade.infrastructure.clients.proxy import ProxyClient, UpstreamResult
from bian_facade.infrastructure.observability.logging import log_retrieval
from bian_facade.infrastructure.observability.metrics import record_retrieval

router = APIRouter()

# Declared in the contract; token enforcement happens in front of this service
bearer_scheme = HTTPBearer(
    scheme_name="bearerAuth",
    bearerFormat="JWT",
    description="JWT Bearer token",
    auto_error=False,
)


def _header_parameter(name: str, description: str, required: bool) -> Dict[str, Any]:
    return {
        "name": name,
        "in": "header",
        "required": required,
        "schema": {"type": "string"},
        "description": description,
    }


# Display name and description for every checked or accepted header
HEADER_DOCS = {
    "x-correlation-id": ("X-Correlation-ID", "Correlation identifier for the request"),
    "x-channel-id": ("X-Channel-Id", "Identifier for the channel making the request"),
    "x-application-id": ("X-Application-Id", "Identifier for the application making the request"),
    "x-transaction-id": ("X-Transaction-Id", "Identifier for the transaction"),
    "x-parent-id": ("X-Parent-Id", "Identifier for the parent transaction"),
    "x-app-version": ("X-App-Version", "Version of the application making the request"),
    "x-request-id": ("X-Request-Id", "Unique identifier for the request"),
}

HEADER_PARAMETERS = [
    *(_header_parameter(*HEADER_DOCS[name], required=True) for name in REQUIRED_HEADERS),
    *(_header_parameter(*HEADER_DOCS[name], required=False) for name in OPTIONAL_HEADERS),
]

ERROR_RESPONSES: Dict[int | str, Dict[str, Any]] = {
    code: {"model": ErrorResponse} for code in (400, 401, 403, 404, 409, 429, 500, 502, 504)
}


@router.get(
    # path convertor lets an empty id reach the id check instead of the router's 404
    "/credit-card/customer/{customerId:path}/retrieve",
    response_model=RetrieveCreditCardFacilitiesResponse,
    operation_id="retrieveCreditCardFacility",
    responses={
        200: {
            "headers": {
                TOTAL_COUNT_HEADER: {
                    "description": "Total count of items available",
                    "schema": {"type": "integer", "format": "int32"},
                }
            }
        },
        **ERROR_RESPONSES,
    },
    openapi_extra={"parameters": HEADER_PARAMETERS},
)
async def retrieve_credit_card_facilities(
    request: Request,
    customer_id: str = Path(..., alias="customerId", description="Customer identifier"),
    ctx: RequestContext = Depends(get_request_context),
    app_settings: Settings = Depends(get_settings),
    fallback_store: FallbackStore = Depends(get_fallback_store),
    proxy_client: ProxyClient = Depends(get_proxy_client),
    _credentials: Optional[HTTPAuthorizationCredentials] = Depends(bearer_scheme),
) -> Response:
    """
    Retrieve the credit card facilities held by a customer.

    Flow:
    1. Check the customer id, then the mandatory correlation headers
    2. Resolve facilities from the fallback store or the legacy proxy
    3. Map any failure to its error response, or assemble the success body
       and Total-Count header
    """
    start_time = time.time()
    source = app_settings.facility_source

    try:
        validate_customer_id(customer_id)
        validate_headers(ctx)

        if source == "fallback":
            result = UpstreamResult(collection=fallback_store.get(customer_id))
        else:
            result = await _call_proxy(request, ctx, proxy_client, app_settings.disconnect_poll_seconds)

    except FacadeError as e:
        mapped = map_error(e)
        outcome = type(e).__name__
        record_retrieval(source, outcome)
        _log(ctx, customer_id, source, outcome, mapped.status_code, start_time)
        if mapped.status_code >= 500:
            logging.error(f"Facility retrieval failed: {e}", extra={"request_id": ctx.request_id})
        return _error_response(mapped)

    except Exception as e:
        logging.error(f"Unexpected error retrieving facilities: {e}", exc_info=True, extra={"request_id": ctx.request_id})
        mapped = map_error(e)
        record_retrieval(source, "internal_error")
        _log(ctx, customer_id, source, "internal_error", mapped.status_code, start_time)
        return _error_response(mapped)

    assembled = assemble_response(result.collection, result.total_count)
    record_retrieval(source, "success", len(result.collection))
    _log(ctx, customer_id, source, "success", 200, start_time)

    return JSONResponse(content=assembled.body, headers=assembled.headers)


async def _call_proxy(
    request: Request, ctx: RequestContext, proxy_client: ProxyClient, poll_seconds: float
) -> UpstreamResult:
    """Run the proxy call while watching for the caller going away"""
    watcher = asyncio.ensure_future(_watch_disconnect(request, ctx, poll_seconds))
    try:
        return await proxy_client.retrieve_facilities(ctx)
    finally:
        watcher.cancel()


async def _watch_disconnect(request: Request, ctx: RequestContext, poll_seconds: float) -> None:
    while not ctx.cancelled.is_set():
        if await request.is_disconnected():
            ctx.cancelled.set()
            return
        await asyncio.sleep(poll_seconds)


def _error_response(mapped: MappedError) -> Response:
    if mapped.relayed:
        return Response(content=mapped.body, status_code=mapped.status_code, media_type=mapped.media_type)
    return JSONResponse(status_code=mapped.status_code, content=mapped.body.to_dict())


def _log(ctx: RequestContext, customer_id: str, source: str, outcome: str, status_code: int, start_time: float) -> None:
    log_retrieval(
        request_id=ctx.request_id,
        correlation_id=ctx.correlation_id,
        customer_id=customer_id,
        source=source,
        outcome=outcome,
        status_code=status_code,
        duration_ms=(time.time() - start_time) * 1000,
    )
