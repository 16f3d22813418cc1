"""Logical IDs and references used by compiled methods."""

from __future__ import annotations

import re
from collections.abc import Iterator
from typing import Any

from stepgate.methods.errors import ConfigurationError
from stepgate.methods.models import CompilationContext, EndpointBinding, GetAtt, Ref

_NON_ALPHANUMERIC = re.compile(r"[^0-9A-Za-z]")

WORKFLOW_SUFFIX = "StepFunctionsStateMachine"


def normalize_name(name: str) -> str:
    """Drop non-alphanumerics and upper-case the first character."""
    stripped = _NON_ALPHANUMERIC.sub("", name)
    return stripped[:1].upper() + stripped[1:]


def workflow_logical_id(workflow_name: str, custom_name: str | None = None) -> str:
    if custom_name:
        return normalize_name(custom_name)
    return f"{normalize_name(workflow_name)}{WORKFLOW_SUFFIX}"


def resolve_workflow_ref(workflow_name: str, custom_name: str | None = None) -> Ref:
    """Reference to the workflow an endpoint starts.

    A custom name points at a workflow resource declared outside this
    compilation and wins over ``workflow_name``.
    """
    return Ref(workflow_logical_id(workflow_name, custom_name))


def method_logical_id(resource_name: str, method: str) -> str:
    return f"ApiGatewayMethod{resource_name}{normalize_name(method.lower())}"


def resource_name(endpoint: EndpointBinding, context: CompilationContext) -> str:
    if not endpoint.path:
        return ""
    try:
        return context.resource_names[endpoint.path]
    except KeyError:
        raise ConfigurationError(
            f"No resource name for path {endpoint.path!r}",
            endpoint=endpoint.label,
            field="path",
        ) from None


def resource_id_ref(endpoint: EndpointBinding, context: CompilationContext, rest_api_logical_id: str) -> Ref | GetAtt:
    if not endpoint.path:
        return GetAtt(rest_api_logical_id, "RootResourceId")
    try:
        return Ref(context.resource_logical_ids[endpoint.path])
    except KeyError:
        raise ConfigurationError(
            f"No resource logical ID for path {endpoint.path!r}",
            endpoint=endpoint.label,
            field="path",
        ) from None


def collect_references(node: Any, path: str = "") -> Iterator[tuple[str, str]]:
    """Yield ``(field path, logical ID)`` for every Ref and Fn::GetAtt in a dumped resource."""
    if isinstance(node, dict):
        if set(node) == {"Ref"}:
            yield path, node["Ref"]
            return
        if set(node) == {"Fn::GetAtt"}:
            yield path, node["Fn::GetAtt"][0]
            return
        for key, value in node.items():
            yield from collect_references(value, f"{path}.{key}" if path else key)
    elif isinstance(node, list):
        for i, value in enumerate(node):
            yield from collect_references(value, f"{path}[{i}]")
