"""ASGI middleware for request tracing and metrics

Both pass the ASGI ``receive`` channel through untouched, so handlers still see
``http.disconnect`` when the caller goes away.
"""

import uuid
import time
from starlette.datastructures import Headers, MutableHeaders
from starlette.types import ASGIApp, Message, Receive, Scope, Send
from bian_facade.infrastructure.observability.metrics import request_duration_histogram


class RequestIDMiddleware:
    """Propagate the caller's X-Request-Id, or mint one, for distributed tracing"""

    def __init__(self, app: ASGIApp):
        self.app = app

    async def __call__(self, scope: Scope, receive: Receive, send: Send) -> None:
        if scope["type"] != "http":
            await self.app(scope, receive, send)
            return

        request_id = Headers(scope=scope).get("x-request-id") or str(uuid.uuid4())
        # Read back as request.state.request_id
        scope.setdefault("state", {})["request_id"] = request_id

        async def send_with_request_id(message: Message) -> None:
            if message["type"] == "http.response.start":
                MutableHeaders(scope=message)["X-Request-ID"] = request_id
            await send(message)

        await self.app(scope, receive, send_with_request_id)


class MetricsMiddleware:
    """Record HTTP request metrics"""

    def __init__(self, app: ASGIApp):
        self.app = app

    async def __call__(self, scope: Scope, receive: Receive, send: Send) -> None:
        if scope["type"] != "http":
            await self.app(scope, receive, send)
            return

        start_time = time.time()
        status_code = 500

        async def send_with_status(message: Message) -> None:
            nonlocal status_code
            if message["type"] == "http.response.start":
                status_code = message["status"]
            await send(message)

        try:
            await self.app(scope, receive, send_with_status)
        finally:
            # Label by route template so customer ids don't explode cardinality
            route = scope.get("route")
            endpoint = getattr(route, "path_format", scope["path"])

            request_duration_histogram.labels(
                method=scope["method"],
                endpoint=endpoint,
                status=status_code,
            ).observe(time.time() - start_time)
