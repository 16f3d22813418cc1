"""Endpoint-to-method compiler.

Turns validated endpoint bindings into ``AWS::ApiGateway::Method`` resources
keyed by logical ID. Each endpoint compiles independently; the fragments are
merged into the caller's resource map only once every endpoint has compiled,
so a failure leaves the caller's map untouched.
"""

from __future__ import annotations

import asyncio
from typing import Any

import structlog

from stepgate.config import Settings, get_settings
from stepgate.methods.errors import ConfigurationError, TemplateAssemblyError
from stepgate.methods.integration import compile_integration
from stepgate.methods.models import (
    KNOWN_AUTHORIZATION_TYPES,
    PSEUDO_PARAMETERS,
    AuthorizationType,
    CompilationContext,
    EndpointBinding,
    MethodProperties,
    MethodResource,
    Ref,
)
from stepgate.methods.references import (
    collect_references,
    method_logical_id,
    resource_id_ref,
    resource_name,
    workflow_logical_id,
)
from stepgate.methods.responses import build_error_method_responses, build_method_responses

logger = structlog.get_logger()

Resources = dict[str, dict[str, Any]]


def authorization_type(endpoint: EndpointBinding, settings: Settings) -> str:
    auth = endpoint.effective_authorization
    if auth not in KNOWN_AUTHORIZATION_TYPES and not settings.authorization_passthrough:
        raise ConfigurationError(
            f"Unknown authorization type {auth!r}",
            endpoint=endpoint.label,
            field="authorizationType",
        )
    return auth


def known_logical_ids(context: CompilationContext, settings: Settings) -> set[str]:
    """Everything a compiled method may reference."""
    known = set(PSEUDO_PARAMETERS)
    known.update(context.external_logical_ids)
    known.update(context.resource_logical_ids.values())
    known.update(workflow_logical_id(w) for w in context.workflows)
    known.add(context.rest_api_logical_id or settings.rest_api_logical_id)
    known.add(context.credentials_role_logical_id or settings.credentials_role_logical_id)
    return known


def _check_references(endpoint: EndpointBinding, resource: dict[str, Any], known: set[str]) -> None:
    for field, logical_id in collect_references(resource):
        if logical_id not in known:
            raise TemplateAssemblyError(
                f"Reference to undeclared resource {logical_id!r}",
                endpoint=endpoint.label,
                field=field,
            )


def compile_method(
    endpoint: EndpointBinding,
    context: CompilationContext,
    settings: Settings | None = None,
) -> Resources:
    """Compile one endpoint into a single-entry resource fragment."""
    settings = settings or get_settings()

    if endpoint.workflow not in context.workflows:
        raise ConfigurationError(
            f"Workflow {endpoint.workflow!r} is not declared",
            endpoint=endpoint.label,
            field="workflow",
        )

    auth = authorization_type(endpoint, settings)
    rest_api = context.rest_api_logical_id or settings.rest_api_logical_id
    role = context.credentials_role_logical_id or settings.credentials_role_logical_id

    authorizer = None
    if endpoint.authorizer_id and auth not in (AuthorizationType.NONE, AuthorizationType.AWS_IAM):
        authorizer = Ref(endpoint.authorizer_id)

    properties = MethodProperties(
        http_method=endpoint.method.upper(),
        request_parameters={},
        authorization_type=auth,
        authorizer_id=authorizer,
        api_key_required=endpoint.private,
        resource_id=resource_id_ref(endpoint, context, rest_api),
        rest_api_id=Ref(rest_api),
        integration=compile_integration(endpoint, credentials_role=role),
        method_responses=[
            *build_method_responses(endpoint.cors),
            *build_error_method_responses(endpoint.cors),
        ],
    )
    resource = MethodResource(properties=properties).to_cfn()
    _check_references(endpoint, resource, known_logical_ids(context, settings))

    logical_id = method_logical_id(resource_name(endpoint, context), endpoint.method)
    return {logical_id: resource}


def merge_resources(base: Resources, fragment: Resources, *, endpoint: str | None = None) -> Resources:
    """Return ``base`` plus ``fragment``; an existing logical ID is an error."""
    merged = dict(base)
    for logical_id, resource in fragment.items():
        if logical_id in merged:
            raise ConfigurationError(
                f"Logical ID {logical_id!r} is already defined",
                endpoint=endpoint,
                field=logical_id,
            )
        merged[logical_id] = resource
    return merged


async def compile_methods(
    endpoints: list[EndpointBinding],
    context: CompilationContext,
    resources: Resources | None = None,
    settings: Settings | None = None,
) -> Resources:
    """Compile every endpoint and merge the methods into a copy of ``resources``."""
    settings = settings or get_settings()

    async def _compile(endpoint: EndpointBinding) -> Resources:
        return compile_method(endpoint, context, settings)

    results = await asyncio.gather(*[_compile(e) for e in endpoints], return_exceptions=True)
    failures = [r for r in results if isinstance(r, BaseException)]
    if failures:
        raise failures[0]
    fragments: list[Resources] = list(results)

    compiled = dict(resources or {})
    for endpoint, fragment in zip(endpoints, fragments):
        compiled = merge_resources(compiled, fragment, endpoint=endpoint.label)

    logger.info(
        "methods.compile",
        endpoints=len(endpoints),
        methods=len(fragments),
        resources=len(compiled),
    )
    return compiled
