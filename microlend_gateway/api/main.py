"""FastAPI application factory"""

from fastapi import FastAPI
from prometheus_client import generate_latest, CONTENT_TYPE_LATEST
from starlette.responses import Response

from microlend_gateway.api.middleware import RequestIDMiddleware, MetricsMiddleware
from microlend_gateway.api.v1 import borrowers, loans, payments, collections, dashboard, portal, reminders
from microlend_gateway.infrastructure.observability.logging import setup_logging
from microlend_gateway.config import settings

# Setup structured logging
setup_logging(settings.log_level)


def create_app() -> FastAPI:
    """Create and configure FastAPI application"""
    app = FastAPI(
        title="Microlend Gateway",
        description="5-6 micro-lending: loans, collection schedules and borrower standing",
        version="0.1.0",
        docs_url="/docs",
        redoc_url="/redoc",
    )

    # Add middleware (order matters: last added = first executed)
    app.add_middleware(MetricsMiddleware)
    app.add_middleware(RequestIDMiddleware)

    # Health check endpoint
    @app.get("/health")
    def health_check():
        return {"status": "ok", "service": settings.service_name}

    # Prometheus metrics endpoint
    @app.get("/metrics")
    def metrics():
        return Response(content=generate_latest(), media_type=CONTENT_TYPE_LATEST)

    # Register API routers
    app.include_router(borrowers.router, prefix="/v1", tags=["borrowers"])
    app.include_router(loans.router, prefix="/v1", tags=["loans"])
    app.include_router(payments.router, prefix="/v1", tags=["payments"])
    app.include_router(collections.router, prefix="/v1", tags=["collections"])
    app.include_router(dashboard.router, prefix="/v1", tags=["dashboard"])
    app.include_router(portal.router, prefix="/v1", tags=["portal"])
    app.include_router(reminders.router, prefix="/v1", tags=["reminders"])

    return app


app = create_app()
