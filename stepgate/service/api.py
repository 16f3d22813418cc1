"""stepgate FastAPI application."""

from __future__ import annotations

import time
from collections.abc import AsyncIterator
from contextlib import asynccontextmanager

import structlog
from fastapi import FastAPI, Request, Response
from fastapi.encoders import jsonable_encoder
from fastapi.exceptions import RequestValidationError
from fastapi.responses import JSONResponse
from prometheus_client import CONTENT_TYPE_LATEST, Counter, Histogram, generate_latest

from stepgate import __version__
from stepgate.config import get_settings
from stepgate.methods.router import router as methods_router

logger = structlog.get_logger()

_start_time: float = 0.0

_UNMETERED = frozenset({"/health", "/ready", "/metrics"})

REQUEST_COUNT = Counter(
    "stepgate_http_requests_total",
    "HTTP requests by route",
    ["method", "route", "status"],
)
REQUEST_DURATION = Histogram(
    "stepgate_http_request_duration_seconds",
    "HTTP request duration by route",
    ["method", "route"],
)
REJECTED_BODIES = Counter(
    "stepgate_rejected_bodies_total",
    "Request bodies that failed schema validation",
    ["route"],
)


def _route(request: Request) -> str:
    route = request.scope.get("route")
    return getattr(route, "path", request.url.path)


@asynccontextmanager
async def lifespan(_app: FastAPI) -> AsyncIterator[None]:
    global _start_time
    _start_time = time.monotonic()
    settings = get_settings()
    logger.info(
        "stepgate.startup",
        version=__version__,
        rest_api=settings.rest_api_logical_id,
        authorization_passthrough=settings.authorization_passthrough,
    )
    yield
    logger.info("stepgate.shutdown")


app = FastAPI(
    title="stepgate",
    version=__version__,
    lifespan=lifespan,
    docs_url=None,
    redoc_url=None,
    openapi_url=None,
)

app.include_router(methods_router)


@app.exception_handler(RequestValidationError)
async def request_validation_handler(request: Request, exc: RequestValidationError) -> JSONResponse:
    """Malformed endpoint bindings or context: 422 with the field errors."""
    errors = exc.errors()
    REJECTED_BODIES.labels(route=_route(request)).inc()
    logger.warning(
        "http.request.invalid",
        path=request.url.path,
        errors=len(errors),
        fields=[".".join(str(p) for p in e.get("loc", ())) for e in errors],
    )
    return JSONResponse(
        status_code=422,
        content={"detail": jsonable_encoder(errors), "type": "validation_error"},
    )


@app.get("/health")
async def health() -> dict:
    return {"status": "ok", "version": __version__}


@app.get("/ready")
async def ready() -> dict:
    settings = get_settings()
    return {
        "status": "ready",
        "uptime_seconds": round(time.monotonic() - _start_time, 2),
        "rest_api_logical_id": settings.rest_api_logical_id,
        "credentials_role_logical_id": settings.credentials_role_logical_id,
        "authorization_passthrough": settings.authorization_passthrough,
    }


@app.get("/metrics")
async def metrics() -> Response:
    return Response(content=generate_latest(), media_type=CONTENT_TYPE_LATEST)


@app.middleware("http")
async def request_metrics(request: Request, call_next) -> Response:  # type: ignore[no-untyped-def]
    start = time.monotonic()
    response: Response = await call_next(request)
    elapsed = time.monotonic() - start
    if request.url.path in _UNMETERED:
        return response

    route = _route(request)
    REQUEST_COUNT.labels(method=request.method, route=route, status=response.status_code).inc()
    REQUEST_DURATION.labels(method=request.method, route=route).observe(elapsed)
    logger.info(
        "http.request",
        method=request.method,
        route=route,
        status=response.status_code,
        elapsed_ms=round(elapsed * 1000, 2),
    )
    return response
