"""Pytest fixtures for testing"""

import pytest
import httpx
from typing import Callable
from fastapi.testclient import TestClient
from bian_facade.api.main import create_app
from bian_facade.api.dependencies import get_proxy_client
from bian_facade.config import Settings
from bian_facade.domain.fallback_store import FallbackStore, build_default_store
from bian_facade.domain.models import RequestContext
from bian_facade.infrastructure.clients.proxy import ProxyClient


PROXY_BASE_URL = "http://legacy-proxy.test"

REQUIRED_HEADERS = {
    "X-Correlation-ID": "corr-001",
    "X-Channel-Id": "web",
    "X-Application-Id": "mobile-banking",
    "X-Transaction-Id": "txn-001",
    "X-Parent-Id": "parent-001",
}


@pytest.fixture
def headers() -> dict[str, str]:
    """All five mandatory correlation headers"""
    return dict(REQUIRED_HEADERS)


@pytest.fixture
def request_context(headers: dict[str, str]) -> RequestContext:
    return RequestContext(headers=httpx.Headers(headers), request_id="req-test")


@pytest.fixture
def fallback_store() -> FallbackStore:
    return build_default_store()


@pytest.fixture
def client(fallback_store: FallbackStore) -> TestClient:
    """FastAPI test client serving from the fallback store"""
    app = create_app(Settings(facility_source="fallback"), fallback_store=fallback_store)
    return TestClient(app)


@pytest.fixture
def proxy_client_factory() -> Callable[..., ProxyClient]:
    """Build proxy clients whose transport is a handler or an ASGI app instead of the network"""

    def factory(handler=None, transport: httpx.AsyncBaseTransport | None = None, timeout: float = 10.0) -> ProxyClient:
        if transport is None:
            transport = httpx.MockTransport(handler)
        return ProxyClient(base_url=PROXY_BASE_URL, timeout=timeout, transport=transport)

    return factory


@pytest.fixture
def proxied_client(proxy_client_factory) -> Callable[..., TestClient]:
    """Create a test client in proxy mode backed by a substituted proxy transport"""

    def factory(handler=None, transport: httpx.AsyncBaseTransport | None = None, timeout: float = 10.0) -> TestClient:
        app = create_app(Settings(facility_source="proxy", proxy_base_url=PROXY_BASE_URL))
        proxy_client = proxy_client_factory(handler, transport=transport, timeout=timeout)
        app.dependency_overrides[get_proxy_client] = lambda: proxy_client
        return TestClient(app)

    return factory
