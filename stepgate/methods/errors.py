"""Errors raised while compiling API Gateway methods."""

from __future__ import annotations


class StepGateError(Exception):
    """Base error carrying the offending endpoint and field."""

    def __init__(self, message: str, *, endpoint: str | None = None, field: str | None = None) -> None:
        self.message = message
        self.endpoint = endpoint
        self.field = field
        super().__init__(self._render())

    def _render(self) -> str:
        context = []
        if self.endpoint:
            context.append(f"endpoint {self.endpoint}")
        if self.field:
            context.append(f"field {self.field!r}")
        if not context:
            return self.message
        return f"{self.message} ({', '.join(context)})"


class ConfigurationError(StepGateError):
    """Endpoint configuration cannot be compiled as given."""


class TemplateAssemblyError(StepGateError):
    """A compiled template broke an internal invariant."""
