"""FastAPI application factory"""

from fastapi import FastAPI
from prometheus_client import generate_latest, CONTENT_TYPE_LATEST
from starlette.responses import Response

from bian_facade.api.middleware import RequestIDMiddleware, MetricsMiddleware
from bian_facade.api.v1 import credit_card
from bian_facade.domain.fallback_store import FallbackStore, build_default_store
from bian_facade.infrastructure.observability.logging import setup_logging
from bian_facade.config import Settings, settings

# Setup structured logging
setup_logging(settings.log_level)


def create_app(app_settings: Settings | None = None, fallback_store: FallbackStore | None = None) -> FastAPI:
    """Create and configure FastAPI application; the app owns its settings and fallback store"""
    app_settings = app_settings or settings

    app = FastAPI(
        title="BIAN Credit Card Facility API",
        description="Facade over the legacy credit card proxy, aligned to the BIAN contract",
        version="0.1.0",
        docs_url="/docs",
        redoc_url="/redoc",
    )
    app.state.settings = app_settings
    app.state.fallback_store = fallback_store if fallback_store is not None else build_default_store()

    # Add middleware (order matters: last added = first executed)
    app.add_middleware(MetricsMiddleware)
    app.add_middleware(RequestIDMiddleware)

    # Health check endpoint
    @app.get("/health")
    def health_check():
        return {"status": "ok", "service": app_settings.service_name, "mode": app_settings.facility_source}

    # Prometheus metrics endpoint
    @app.get("/metrics")
    def metrics():
        return Response(content=generate_latest(), media_type=CONTENT_TYPE_LATEST)

    # Register API routers
    app.include_router(credit_card.router, prefix="/api/bian/v1", tags=["CR - CreditCardFacility"])

    return app


app = create_app()
