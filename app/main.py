"""
Procurement RFP service — FastAPI application.

Wires the lifespan (logging, database, AI client), the request-ID
middleware, the error envelope handlers and the routers.
"""

import time
import uuid
from contextlib import asynccontextmanager

from fastapi import FastAPI, Request
from fastapi.exceptions import RequestValidationError
from fastapi.responses import JSONResponse
from loguru import logger
from starlette.exceptions import HTTPException as StarletteHTTPException

from .config import get_settings
from .database import Database
from .exceptions import ServiceError
from .logging_config import setup_logging
from .routers import ai, email_webhook, proposals, rfps, vendors
from .schemas.errors import ErrorResponse
from .services.ai_service import HuggingFaceClient


@asynccontextmanager
async def lifespan(app: FastAPI):
    settings = get_settings()
    setup_logging(settings)

    # Tests install their own Database and AI client before startup
    owns_db = getattr(app.state, "db", None) is None
    owns_ai = getattr(app.state, "ai", None) is None
    if owns_db:
        app.state.db = Database.from_settings(settings)
    if settings.auto_create_tables:
        app.state.db.create_tables()
    if owns_ai:
        app.state.ai = HuggingFaceClient.from_settings(settings)
    logger.info("Startup complete ({}, AI model {})", settings.environment, settings.hf_model)

    yield

    if owns_ai:
        await app.state.ai.aclose()
        app.state.ai = None
    if owns_db:
        app.state.db.close()
        app.state.db = None
    logger.info("Shutdown complete")


app = FastAPI(title="Procurement RFP Service", version="1.0.0", lifespan=lifespan)


# ── Request ID + timing ──────────────────────────────────────────────


@app.middleware("http")
async def request_context(request: Request, call_next):
    request_id = uuid.uuid4().hex[:8]
    request.state.request_id = request_id
    start = time.perf_counter()
    with logger.contextualize(request_id=request_id):
        response = await call_next(request)
        elapsed_ms = (time.perf_counter() - start) * 1000
        logger.info(
            "{} {} → {} ({:.1f} ms)",
            request.method, request.url.path, response.status_code, elapsed_ms,
        )
    response.headers["X-Request-ID"] = request_id
    return response


# ── Error envelope ───────────────────────────────────────────────────


def _request_id(request: Request) -> str:
    return getattr(request.state, "request_id", "")


def _error_response(request: Request, status_code: int, body: ErrorResponse, extra: dict | None = None):
    content = body.model_dump(exclude_none=True)
    content["request_id"] = _request_id(request)
    if extra:
        content.update(extra)
    return JSONResponse(status_code=status_code, content=content)


@app.exception_handler(ServiceError)
async def service_error_handler(request: Request, exc: ServiceError):
    if exc.status_code >= 500:
        logger.error("{} {} failed: {}", request.method, request.url.path, exc.message)
    return _error_response(
        request,
        exc.status_code,
        ErrorResponse(message=exc.message, errors=exc.errors, data=exc.data),
        exc.extra,
    )


@app.exception_handler(RequestValidationError)
async def validation_error_handler(request: Request, exc: RequestValidationError):
    errors = []
    for err in exc.errors():
        loc = ".".join(str(p) for p in err.get("loc", ()) if p != "body")
        errors.append(f"{loc}: {err.get('msg')}" if loc else str(err.get("msg")))
    return _error_response(
        request, 400, ErrorResponse(message="Validation error", errors=errors)
    )


@app.exception_handler(StarletteHTTPException)
async def http_error_handler(request: Request, exc: StarletteHTTPException):
    return _error_response(
        request, exc.status_code, ErrorResponse(message=str(exc.detail))
    )


@app.exception_handler(Exception)
async def unhandled_error_handler(request: Request, exc: Exception):
    logger.opt(exception=exc).error("Unhandled error on {} {}", request.method, request.url.path)
    detail = None if get_settings().is_production else str(exc)
    return _error_response(
        request, 500, ErrorResponse(message="Something went wrong", error=detail)
    )


# ── Routes ───────────────────────────────────────────────────────────

app.include_router(vendors.router)
app.include_router(rfps.router)
app.include_router(proposals.router)
app.include_router(email_webhook.router)
app.include_router(ai.router)


@app.get("/health")
async def health():
    return {"status": "ok"}
