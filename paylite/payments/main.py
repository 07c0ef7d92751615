"""HTTP surface for payment records.

Routes translate raw request values into service calls and render the
returned outcome as a status code and JSON body.
"""

import json
from contextlib import asynccontextmanager
from time import perf_counter
from uuid import uuid4

from fastapi import FastAPI, Request
from fastapi.responses import JSONResponse

from paylite.common.config import settings
from paylite.common.db import Base, SessionLocal, engine
from paylite.common.logging import configure_logging, logger, trace_id_ctx
from paylite.common.metrics import http_request_duration_seconds, http_requests_total, metrics_response
from paylite.common.startup import log_startup_config
from paylite.common.tracing import instrument_app, setup_tracing
from paylite.payments.cache import TTLCache
from paylite.payments.repository import SqlPaymentRepository
from paylite.payments.schemas import ErrorResponse, FieldError, PaymentCreatedResponse, PaymentListResponse
from paylite.payments.service import (
    BadRequest,
    BadRequestReason,
    Created,
    Found,
    Listed,
    NotFound,
    PaymentService,
    ValidationFailed,
)


BAD_REQUEST_MESSAGES = {
    BadRequestReason.REQUIRED: "Payment ID is required",
    BadRequestReason.MALFORMED: "Payment ID must be a valid UUID format",
}


def error_response(status_code: int, error: str, message: str, details: list[FieldError] | None = None) -> JSONResponse:
    body = ErrorResponse(error=error, message=message, details=details)
    return JSONResponse(status_code=status_code, content=body.model_dump(exclude_none=True))


def internal_error(action: str) -> JSONResponse:
    return error_response(500, "Internal Server Error", f"An unexpected error occurred while {action}")


def parse_body(raw: bytes):
    """Decode a JSON body leniently; undecodable input becomes `None`."""

    if not raw:
        return None
    try:
        return json.loads(raw)
    except (ValueError, RecursionError):
        logger.warning("request_body_not_json")
        return None


def build_app(service: PaymentService, create_tables: bool = False) -> FastAPI:
    """Assemble the FastAPI app around an already-wired payment service."""

    @asynccontextmanager
    async def lifespan(_: FastAPI):
        if create_tables:
            Base.metadata.create_all(engine)
        yield

    app = FastAPI(title="Payments API", lifespan=lifespan)

    @app.middleware("http")
    async def metrics_middleware(request: Request, call_next):
        """Bind the trace id and record request count and latency."""

        start = perf_counter()
        route = request.url.path
        method = request.method
        status_code = 500
        trace_id_ctx.set(request.headers.get("x-correlation-id") or str(uuid4()))
        try:
            response = await call_next(request)
            status_code = response.status_code
            route_obj = request.scope.get("route")
            if route_obj is not None and getattr(route_obj, "path", None):
                route = route_obj.path
            return response
        finally:
            elapsed = max(0.0, perf_counter() - start)
            http_request_duration_seconds.labels(
                service=settings.service_name,
                route=route,
                method=method,
            ).observe(elapsed)
            http_requests_total.labels(
                service=settings.service_name,
                route=route,
                method=method,
                status_code=str(status_code),
            ).inc()

    @app.post("/payments", status_code=201, response_model=PaymentCreatedResponse)
    async def create_payment(request: Request):
        """Create a payment from a JSON body with `amount` and `currency`."""

        outcome = await service.create_payment(parse_body(await request.body()))
        if isinstance(outcome, Created):
            return JSONResponse(status_code=201, content=PaymentCreatedResponse(id=outcome.payment_id).model_dump())
        if isinstance(outcome, ValidationFailed):
            return error_response(400, "Incorrect format data", "Validation failed", outcome.errors)
        return internal_error("creating the payment")

    @app.get("/payments", response_model=PaymentListResponse)
    async def list_payments(request: Request):
        """List payments filtered by `currency`, paged by `limit` and `skip`."""

        outcome = await service.list_payments(dict(request.query_params))
        if isinstance(outcome, Listed):
            body = PaymentListResponse(data=outcome.items, total=outcome.total, limit=outcome.limit, skip=outcome.skip)
            return JSONResponse(status_code=200, content=body.model_dump())
        if isinstance(outcome, ValidationFailed):
            return error_response(400, "Bad Request", "Invalid query parameters", outcome.errors)
        return internal_error("listing payments")

    @app.get("/payments/{payment_id}")
    async def get_payment(payment_id: str):
        """Fetch one payment by its identifier."""

        outcome = await service.get_payment(payment_id)
        if isinstance(outcome, Found):
            return JSONResponse(status_code=200, content=outcome.payment.model_dump())
        if isinstance(outcome, BadRequest):
            return error_response(400, "Bad Request", BAD_REQUEST_MESSAGES[outcome.reason])
        if isinstance(outcome, NotFound):
            return error_response(404, "Not Found", f"Payment with ID '{outcome.payment_id}' not found")
        return internal_error("retrieving the payment")

    @app.get("/metrics")
    def metrics():
        """Prometheus scrape endpoint."""

        return metrics_response()

    @app.get("/health")
    def health():
        """Liveness endpoint for container health checks."""

        return {"ok": True}

    instrument_app(app)
    return app


def create_app() -> FastAPI:
    """Production wiring: SQL repository plus one process-wide cache."""

    configure_logging()
    setup_tracing(settings.service_name)
    log_startup_config(
        settings.service_name,
        ["SERVICE_NAME", "DATABASE_URL", "CACHE_TTL_SECONDS", "CACHE_MAX_ENTRIES", "TRACING_ENABLED"],
    )
    cache = TTLCache(ttl_seconds=settings.cache_ttl_seconds, max_entries=settings.cache_max_entries)
    service = PaymentService(SqlPaymentRepository(SessionLocal), cache)
    return build_app(service, create_tables=settings.create_tables_on_startup)
