"""Legacy proxy HTTP client for fetching credit card facilities"""

import asyncio
from dataclasses import dataclass
from typing import Optional

import httpx
from pydantic import ValidationError

from bian_facade.schemas.facility import TOTAL_COUNT_HEADER, RetrieveCreditCardFacilitiesResponse
from bian_facade.config import settings
from bian_facade.domain.exceptions import (
    UpstreamEmptyPayload,
    UpstreamError,
    UpstreamInvalidPayload,
    UpstreamTimeout,
    UpstreamUnreachable,
)
from bian_facade.domain.models import FacilityCollection, RequestContext
from bian_facade.infrastructure.observability.metrics import upstream_latency_histogram


@dataclass(frozen=True)
class UpstreamResult:
    collection: FacilityCollection
    total_count: Optional[str] = None


class ProxyClient:
    """Client for the legacy credit card proxy; one attempt per call, no retries"""

    def __init__(
        self,
        base_url: str | None = None,
        timeout: float | None = None,
        path: str | None = None,
        channel_header: str | None = None,
        transport: httpx.AsyncBaseTransport | None = None,
    ):
        self.base_url = base_url or settings.proxy_base_url
        self.timeout = timeout or settings.http_timeout_seconds
        self.path = path or settings.proxy_path
        self.channel_header = channel_header or settings.proxy_channel_header
        self.transport = transport

    async def retrieve_facilities(self, ctx: RequestContext) -> UpstreamResult:
        """
        Fetch the caller's credit card facilities from the legacy proxy.

        Only the channel id is forwarded, re-keyed to the proxy's own header name.

        Raises:
            UpstreamTimeout: Deadline exceeded or the inbound request was cancelled
            UpstreamUnreachable: Any other transport failure
            UpstreamError: Proxy answered with a non-success status
            UpstreamInvalidPayload: Success body does not decode
            UpstreamEmptyPayload: Success body is empty or null
        """
        headers = {self.channel_header: ctx.channel_id or ""}
        async with httpx.AsyncClient(base_url=self.base_url, timeout=self.timeout, transport=self.transport) as client:
            with upstream_latency_histogram.time():
                response = await self._send(client.get(self.path, headers=headers), ctx)

        return self._decode(response)

    async def _send(self, request, ctx: RequestContext) -> httpx.Response:
        call = asyncio.ensure_future(request)
        cancelled = asyncio.ensure_future(ctx.cancelled.wait())
        try:
            done, _ = await asyncio.wait(
                {call, cancelled},
                timeout=self.timeout,
                return_when=asyncio.FIRST_COMPLETED,
            )
        finally:
            cancelled.cancel()
            if not call.done():
                call.cancel()
                await asyncio.wait({call})

        if call not in done:
            reason = "cancelled by caller" if ctx.cancelled.is_set() else f"no answer after {self.timeout}s"
            raise UpstreamTimeout(f"Proxy request {reason}")

        try:
            return call.result()
        except httpx.TimeoutException as e:
            raise UpstreamTimeout(f"Proxy timeout after {self.timeout}s") from e
        except httpx.HTTPError as e:
            raise UpstreamUnreachable(f"Proxy unreachable: {e}") from e

    def _decode(self, response: httpx.Response) -> UpstreamResult:
        if not response.is_success:
            raise UpstreamError(
                status_code=response.status_code,
                body=response.content,
                content_type=response.headers.get("content-type", "application/json"),
            )

        if not response.content.strip():
            raise UpstreamEmptyPayload("Proxy returned an empty body")

        # Deeply nested arrays exhaust the parser stack
        try:
            data = response.json()
        except (ValueError, RecursionError) as e:
            raise UpstreamInvalidPayload(f"Proxy body is not JSON: {e}") from e

        if data is None:
            raise UpstreamEmptyPayload("Proxy returned null")

        try:
            collection = RetrieveCreditCardFacilitiesResponse.model_validate(data).to_domain()
        except (ValidationError, ValueError, RecursionError) as e:
            raise UpstreamInvalidPayload(f"Invalid facility data from proxy: {e}") from e

        return UpstreamResult(collection=collection, total_count=response.headers.get(TOTAL_COUNT_HEADER))
