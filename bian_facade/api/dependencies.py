"""Dependency injection for FastAPI endpoints"""

from fastapi import Request

from bian_facade.config import Settings
from bian_facade.domain.fallback_store import FallbackStore
from bian_facade.domain.models import RequestContext
from bian_facade.infrastructure.clients.proxy import ProxyClient


def get_request_id(request: Request) -> str:
    """Extract request ID from request state"""
    return getattr(request.state, "request_id", "unknown")


def get_settings(request: Request) -> Settings:
    """Settings the running app was created with"""
    return request.app.state.settings


def get_fallback_store(request: Request) -> FallbackStore:
    """Read-only fallback store owned by the app"""
    return request.app.state.fallback_store


def get_proxy_client(request: Request) -> ProxyClient:
    """Provide legacy proxy client instance"""
    app_settings = get_settings(request)
    return ProxyClient(
        base_url=app_settings.proxy_base_url,
        timeout=app_settings.http_timeout_seconds,
        path=app_settings.proxy_path,
        channel_header=app_settings.proxy_channel_header,
    )


def get_request_context(request: Request) -> RequestContext:
    """Build the explicit per-request context from inbound headers"""
    return RequestContext(headers=request.headers, request_id=get_request_id(request))
