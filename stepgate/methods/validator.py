"""Endpoint validation: catches configurations the compiler would reject."""

from __future__ import annotations

from stepgate.config import Settings, get_settings
from stepgate.methods.compiler import known_logical_ids
from stepgate.methods.models import (
    AUTHORIZER_TYPES,
    HTTP_METHODS,
    KNOWN_AUTHORIZATION_TYPES,
    AuthorizationType,
    CompilationContext,
    EndpointBinding,
    ValidateResponse,
)
from stepgate.methods.references import workflow_logical_id


def validate_endpoints(
    endpoints: list[EndpointBinding],
    context: CompilationContext,
    settings: Settings | None = None,
) -> ValidateResponse:
    """Validate endpoints against the declared workflows and path resources."""
    settings = settings or get_settings()
    errors: list[str] = []
    warnings: list[str] = []
    seen: set[tuple[str, str]] = set()
    known = known_logical_ids(context, settings)

    for endpoint in endpoints:
        label = endpoint.label

        if endpoint.workflow not in context.workflows:
            errors.append(f"{label}: workflow {endpoint.workflow!r} is not declared")

        if endpoint.method not in HTTP_METHODS:
            errors.append(f"{label}: unsupported HTTP method {endpoint.method!r}")

        if endpoint.path:
            if endpoint.path not in context.resource_logical_ids:
                errors.append(f"{label}: no resource logical ID for path {endpoint.path!r}")
            if endpoint.path not in context.resource_names:
                errors.append(f"{label}: no resource name for path {endpoint.path!r}")

        if endpoint.custom_name:
            custom_id = workflow_logical_id(endpoint.workflow, endpoint.custom_name)
            if custom_id not in known:
                errors.append(f"{label}: custom workflow {custom_id!r} is not a declared resource")

        key = (endpoint.path, endpoint.method)
        if key in seen:
            errors.append(f"{label}: declared more than once")
        seen.add(key)

        auth = endpoint.effective_authorization
        if auth not in KNOWN_AUTHORIZATION_TYPES and not settings.authorization_passthrough:
            errors.append(f"{label}: unknown authorization type {auth!r}")
        if auth in AUTHORIZER_TYPES and not endpoint.authorizer_id:
            errors.append(f"{label}: authorization type {auth} requires an authorizer")
        if endpoint.authorizer_id and auth in (AuthorizationType.NONE, AuthorizationType.AWS_IAM):
            warnings.append(f"{label}: authorizer {endpoint.authorizer_id!r} is ignored for authorization type {auth}")
        elif endpoint.authorizer_id and endpoint.authorizer_id not in known:
            errors.append(f"{label}: authorizer {endpoint.authorizer_id!r} is not a declared resource")

        if endpoint.cors and endpoint.cors.origin and endpoint.cors.origins:
            warnings.append(f"{label}: cors origins override cors origin")

    return ValidateResponse(valid=len(errors) == 0, errors=errors, warnings=warnings)
