"""FastAPI application factory"""

from fastapi import FastAPI
from prometheus_client import generate_latest, CONTENT_TYPE_LATEST
from starlette.responses import Response

from negotiation_gateway.api.middleware import RequestIDMiddleware, MetricsMiddleware
from negotiation_gateway.api.v1 import negotiation, sessions
from negotiation_gateway.infrastructure.observability.logging import setup_logging
from negotiation_gateway.config import settings

# Setup structured logging
setup_logging(settings.log_level)


def create_app() -> FastAPI:
    """Create and configure FastAPI application"""
    app = FastAPI(
        title="Negotiation Gateway",
        description="Payment plan negotiation engine for the debt collection assistant",
        version="0.1.0",
        docs_url="/docs",
        redoc_url="/redoc",
    )

    # Add middleware (order matters: last added = first executed)
    app.add_middleware(MetricsMiddleware)
    app.add_middleware(RequestIDMiddleware)

    @app.get("/health")
    def health_check():
        return {"status": "ok", "service": settings.service_name}

    # Prometheus metrics endpoint
    @app.get("/metrics")
    def metrics():
        return Response(content=generate_latest(), media_type=CONTENT_TYPE_LATEST)

    # Register API routers
    app.include_router(sessions.router, prefix="/v1", tags=["sessions"])
    app.include_router(negotiation.router, prefix="/v1", tags=["negotiation"])

    return app


app = create_app()
