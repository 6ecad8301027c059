"""Unit tests for the legacy proxy client"""

import ast
import asyncio
import json
import pytest
import httpx
from pathlib import Path
from bian_facade.domain.exceptions import (
    UpstreamEmptyPayload,
    UpstreamError,
    UpstreamInvalidPayload,
    UpstreamTimeout,
    UpstreamUnreachable,
)
from bian_facade.domain.models import CardRole, RequestContext
from bian_facade.infrastructure.clients import proxy


FACILITY = {
    "issuedDevice": {
        "issuedDeviceId": "LEG1",
        "devicePropertySetting": "4562 **** **** 2365",
        "cardRole": "Primary",
    },
    "billingTransactionAmount": {
        "amountValue": {"Value": "10.00"},
        "amountCurrency": {"Currencycode": "USD"},
        "decimalPointPosition": {"Text": "2"},
        "amountType": "Used",
    },
}


def json_response(payload, status_code: int = 200, headers: dict | None = None) -> httpx.Response:
    return httpx.Response(status_code, content=json.dumps(payload).encode(), headers=headers)


async def test_forwards_channel_as_canal_header(proxy_client_factory, request_context: RequestContext):
    seen = {}

    def handler(request: httpx.Request) -> httpx.Response:
        seen["url"] = str(request.url)
        seen["canal"] = request.headers.get("Canal")
        seen["correlation"] = request.headers.get("X-Correlation-ID")
        return json_response({"creditCardFacilities": [FACILITY]})

    result = await proxy_client_factory(handler).retrieve_facilities(request_context)

    assert seen["url"] == "http://legacy-proxy.test/api/proxy/v1/legacy-service/credit-card"
    assert seen["canal"] == "web"
    assert seen["correlation"] is None
    assert len(result.collection) == 1
    assert result.collection[0].issued_device.role is CardRole.PRIMARY
    assert result.total_count is None


async def test_upstream_total_count_passed_through(proxy_client_factory, request_context: RequestContext):
    def handler(request: httpx.Request) -> httpx.Response:
        return json_response({"creditCardFacilities": [FACILITY]}, headers={"Total-Count": "12"})

    result = await proxy_client_factory(handler).retrieve_facilities(request_context)

    assert result.total_count == "12"


async def test_non_success_status_relayed(proxy_client_factory, request_context: RequestContext):
    def handler(request: httpx.Request) -> httpx.Response:
        return httpx.Response(409, content=b'{"reason":"locked"}', headers={"content-type": "application/json"})

    with pytest.raises(UpstreamError) as exc_info:
        await proxy_client_factory(handler).retrieve_facilities(request_context)

    assert exc_info.value.status_code == 409
    assert exc_info.value.body == b'{"reason":"locked"}'
    assert exc_info.value.content_type == "application/json"


async def test_malformed_json_is_invalid_payload(proxy_client_factory, request_context: RequestContext):
    def handler(request: httpx.Request) -> httpx.Response:
        return httpx.Response(200, content=b"{not json")

    with pytest.raises(UpstreamInvalidPayload):
        await proxy_client_factory(handler).retrieve_facilities(request_context)


async def test_deeply_nested_json_is_invalid_payload(proxy_client_factory, request_context: RequestContext):
    def handler(request: httpx.Request) -> httpx.Response:
        return httpx.Response(200, content=b"[" * 200000 + b"]" * 200000)

    with pytest.raises(UpstreamInvalidPayload):
        await proxy_client_factory(handler).retrieve_facilities(request_context)


@pytest.mark.parametrize(
    "payload",
    [
        [FACILITY],
        {"creditCardFacilities": "none"},
        {"creditCardFacilities": [{"issuedDevice": {"cardRole": "Secondary"}}]},
        {"creditCardFacilities": [{"billingTransactionAmount": {"amountValue": {"Value": "1.5"}, "decimalPointPosition": {"Text": "2"}}}]},
        {"creditCardFacilities": [{"billingTransactionAmount": {"amountValue": {"Value": " 1_0.0E0 "}, "decimalPointPosition": {"Text": "1"}}}]},
    ],
)
async def test_wrong_shape_is_invalid_payload(proxy_client_factory, request_context: RequestContext, payload):
    def handler(request: httpx.Request) -> httpx.Response:
        return json_response(payload)

    with pytest.raises(UpstreamInvalidPayload):
        await proxy_client_factory(handler).retrieve_facilities(request_context)


@pytest.mark.parametrize("content", [b"", b"   ", b"null"])
async def test_empty_body_is_empty_payload(proxy_client_factory, request_context: RequestContext, content: bytes):
    def handler(request: httpx.Request) -> httpx.Response:
        return httpx.Response(200, content=content)

    with pytest.raises(UpstreamEmptyPayload):
        await proxy_client_factory(handler).retrieve_facilities(request_context)


async def test_transport_timeout(proxy_client_factory, request_context: RequestContext):
    def handler(request: httpx.Request) -> httpx.Response:
        raise httpx.ReadTimeout("timed out", request=request)

    with pytest.raises(UpstreamTimeout):
        await proxy_client_factory(handler).retrieve_facilities(request_context)


async def test_overall_deadline(proxy_client_factory, request_context: RequestContext):
    async def handler(request: httpx.Request) -> httpx.Response:
        await asyncio.sleep(5)
        return json_response({"creditCardFacilities": []})

    with pytest.raises(UpstreamTimeout):
        await proxy_client_factory(handler, timeout=0.05).retrieve_facilities(request_context)


async def test_connection_refused_is_unreachable(proxy_client_factory, request_context: RequestContext):
    def handler(request: httpx.Request) -> httpx.Response:
        raise httpx.ConnectError("connection refused", request=request)

    with pytest.raises(UpstreamUnreachable):
        await proxy_client_factory(handler).retrieve_facilities(request_context)


async def test_caller_cancellation_aborts_call(proxy_client_factory, request_context: RequestContext):
    started = asyncio.Event()
    aborted = asyncio.Event()

    async def handler(request: httpx.Request) -> httpx.Response:
        started.set()
        try:
            await asyncio.sleep(5)
        except asyncio.CancelledError:
            aborted.set()
            raise
        return json_response({"creditCardFacilities": []})

    async def disconnect():
        await started.wait()
        request_context.cancelled.set()

    canceller = asyncio.ensure_future(disconnect())
    with pytest.raises(UpstreamTimeout, match="cancelled"):
        await proxy_client_factory(handler).retrieve_facilities(request_context)
    await canceller

    assert aborted.is_set()


def test_client_does_not_depend_on_api_layer():
    source = Path(proxy.__file__).read_text()
    imported = [
        node.module
        for node in ast.walk(ast.parse(source))
        if isinstance(node, ast.ImportFrom) and node.module
    ]
    assert not [name for name in imported if name.startswith("bian_facade.api")]
