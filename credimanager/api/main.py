"""FastAPI application factory"""

import logging
from contextlib import asynccontextmanager

from fastapi import FastAPI, Request
from fastapi.responses import JSONResponse
from prometheus_client import CONTENT_TYPE_LATEST, generate_latest
from starlette.responses import Response

from credimanager.api.middleware import MetricsMiddleware, RequestIDMiddleware
from credimanager.api.v1 import advisory, borrowers, loans, payments, reports
from credimanager.config import settings
from credimanager.domain.exceptions import InvalidRecordError, InvalidScheduleError
from credimanager.infrastructure.database.session import init_db
from credimanager.infrastructure.observability.logging import setup_logging

# Setup structured logging
setup_logging(settings.log_level)


@asynccontextmanager
async def lifespan(app: FastAPI):
    init_db()
    yield


def create_app() -> FastAPI:
    """Create and configure FastAPI application"""
    app = FastAPI(
        title="CrediManager",
        description="Installment loan tracking with automatic balance, status and credit score reconciliation",
        version="0.1.0",
        docs_url="/docs",
        redoc_url="/redoc",
        lifespan=lifespan,
    )

    # Add middleware (order matters: last added = first executed)
    app.add_middleware(MetricsMiddleware)
    app.add_middleware(RequestIDMiddleware)

    @app.exception_handler(InvalidScheduleError)
    @app.exception_handler(InvalidRecordError)
    async def invalid_input_handler(request: Request, exc: Exception):
        logging.warning(f"Rejected input: {exc}", extra={"request_id": getattr(request.state, "request_id", None)})
        return JSONResponse(status_code=422, content={"detail": str(exc)})

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
    app.include_router(advisory.router, prefix="/v1", tags=["borrowers"])
    app.include_router(loans.router, prefix="/v1", tags=["loans"])
    app.include_router(payments.router, prefix="/v1", tags=["payments"])
    app.include_router(reports.router, prefix="/v1", tags=["reports"])

    return app


app = create_app()
