"""FastAPI application factory"""

import logging
from fastapi import FastAPI, Request
from fastapi.responses import JSONResponse
from prometheus_client import generate_latest, CONTENT_TYPE_LATEST
from starlette.responses import Response

from loan_engine.api.dependencies import get_request_id
from loan_engine.api.middleware import RequestIDMiddleware, MetricsMiddleware
from loan_engine.api.v1 import companies, loans, payments
from loan_engine.domain.exceptions import (
    AlreadyPaidError,
    ConflictError,
    DomainException,
    NotFoundError,
    OperationCancelledError,
    PaymentRejectedError,
    SerializationConflictError,
    ValidationError,
)
from loan_engine.infrastructure.observability.logging import setup_logging
from loan_engine.config import settings

# Setup structured logging
setup_logging(settings.log_level)

# First match wins, so subclasses come before their bases
ERROR_STATUS_CODES = [
    (NotFoundError, 404),
    (ConflictError, 409),
    (AlreadyPaidError, 409),
    (SerializationConflictError, 409),
    (ValidationError, 422),
    (PaymentRejectedError, 422),
    (OperationCancelledError, 503),
]


def status_code_for(exc: DomainException) -> int:
    for exc_type, status_code in ERROR_STATUS_CODES:
        if isinstance(exc, exc_type):
            return status_code
    return 500


async def domain_exception_handler(request: Request, exc: DomainException) -> JSONResponse:
    status_code = status_code_for(exc)
    log = logging.warning if status_code < 500 else logging.error
    log(f"Request failed: {exc}", extra={"request_id": get_request_id(request), "kind": exc.kind})
    return JSONResponse(status_code=status_code, content={"kind": exc.kind, "detail": str(exc)})


def create_app() -> FastAPI:
    """Create and configure FastAPI application"""
    app = FastAPI(
        title="Loan Engine",
        description="Loan amortization, payment and overdue tracking service",
        version="0.1.0",
        docs_url="/docs",
        redoc_url="/redoc",
    )

    # Add middleware (order matters: last added = first executed)
    app.add_middleware(MetricsMiddleware)
    app.add_middleware(RequestIDMiddleware)

    app.add_exception_handler(DomainException, domain_exception_handler)

    # Health check endpoint
    @app.get("/health")
    def health_check():
        return {"status": "ok", "service": settings.service_name}

    # Prometheus metrics endpoint
    @app.get("/metrics")
    def metrics():
        return Response(content=generate_latest(), media_type=CONTENT_TYPE_LATEST)

    # Register API routers
    app.include_router(companies.router, prefix="/v1", tags=["companies"])
    app.include_router(loans.router, prefix="/v1", tags=["loans"])
    app.include_router(payments.router, prefix="/v1", tags=["payments"])

    return app


app = create_app()
