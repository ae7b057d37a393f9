"""FastAPI application factory"""

from fastapi import FastAPI
from prometheus_client import CONTENT_TYPE_LATEST, generate_latest
from starlette.responses import Response

from pot_ledger.api.middleware import MetricsMiddleware, RequestIDMiddleware
from pot_ledger.api.v1 import balances, expenses, pots, settlements
from pot_ledger.config import settings
from pot_ledger.infrastructure.observability.logging import setup_logging

# Setup structured logging
setup_logging(settings.log_level)


def create_app() -> FastAPI:
    """Create and configure FastAPI application"""
    app = FastAPI(
        title="Pot Ledger",
        description="Group expense balances and debt settlement service",
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

    @app.get("/metrics")
    def metrics():
        return Response(content=generate_latest(), media_type=CONTENT_TYPE_LATEST)

    app.include_router(pots.router, prefix="/v1", tags=["pots"])
    app.include_router(expenses.router, prefix="/v1", tags=["expenses"])
    app.include_router(balances.router, prefix="/v1", tags=["balances"])
    app.include_router(settlements.router, prefix="/v1", tags=["settlements"])

    return app


app = create_app()
