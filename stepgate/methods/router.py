"""Method compiler API routes."""

from __future__ import annotations

import structlog
from fastapi import APIRouter
from prometheus_client import Counter

from stepgate.methods.compiler import compile_methods
from stepgate.methods.errors import StepGateError
from stepgate.methods.models import (
    CompileRequest,
    CompileResponse,
    ValidateRequest,
    ValidateResponse,
)
from stepgate.methods.validator import validate_endpoints

logger = structlog.get_logger()

router = APIRouter(prefix="/methods", tags=["methods"])

METHODS_COMPILED = Counter(
    "stepgate_methods_compiled_total",
    "API Gateway methods compiled",
    ["authorization_type"],
)
COMPILE_FAILURES = Counter(
    "stepgate_compile_failures_total",
    "Compilation requests rejected",
    ["reason"],
)


@router.post("/validate", response_model=ValidateResponse)
async def validate(request: ValidateRequest) -> ValidateResponse:
    """Validate endpoint bindings before compilation."""
    result = validate_endpoints(request.endpoints, request.context)
    logger.info("methods.validate", endpoints=len(request.endpoints), valid=result.valid, errors=len(result.errors))
    return result


@router.post("/compile", response_model=CompileResponse)
async def compile(request: CompileRequest) -> CompileResponse:
    """Compile endpoint bindings into API Gateway method resources."""
    validation = validate_endpoints(request.endpoints, request.context)
    if not validation.valid:
        COMPILE_FAILURES.labels(reason="validation").inc()
        return CompileResponse(resources={}, errors=validation.errors)

    try:
        resources = await compile_methods(request.endpoints, request.context, request.resources)
    except StepGateError as e:
        COMPILE_FAILURES.labels(reason=type(e).__name__).inc()
        logger.warning("methods.compile.error", error=e.message, endpoint=e.endpoint, field=e.field)
        return CompileResponse(resources={}, errors=[str(e)])

    for endpoint in request.endpoints:
        METHODS_COMPILED.labels(authorization_type=endpoint.effective_authorization).inc()
    return CompileResponse(resources=resources)
