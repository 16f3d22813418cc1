"""Integration and method responses, with optional CORS headers.

Header values set on an integration response are response-parameter
expressions, so static values are wrapped in single quotes (``'*'``). The
method response declares each header the integration response sets, which is
what lets API Gateway pass it through.
"""

from __future__ import annotations

from stepgate.methods.models import CorsConfig, IntegrationResponse, MethodResponse

ALLOW_ORIGIN = "method.response.header.Access-Control-Allow-Origin"
ALLOW_HEADERS = "method.response.header.Access-Control-Allow-Headers"
ALLOW_CREDENTIALS = "method.response.header.Access-Control-Allow-Credentials"

SUCCESS_STATUS = "200"
CLIENT_ERROR_STATUS = "400"
CLIENT_ERROR_PATTERN = r"4\d{2}"


def _quote(value: str) -> str:
    return f"'{value}'"


def cors_response_parameters(cors: CorsConfig | None) -> dict[str, str]:
    if cors is None:
        return {}
    params = {ALLOW_ORIGIN: _quote(cors.allow_origin)}
    if cors.headers:
        params[ALLOW_HEADERS] = _quote(",".join(cors.headers))
    if cors.allow_credentials:
        params[ALLOW_CREDENTIALS] = _quote("true")
    return params


def _declared_headers(cors: CorsConfig | None) -> dict[str, bool]:
    return {key: True for key in cors_response_parameters(cors)}


def build_integration_responses(cors: CorsConfig | None = None) -> list[IntegrationResponse]:
    return [
        IntegrationResponse(
            status_code=SUCCESS_STATUS,
            response_parameters=cors_response_parameters(cors),
        )
    ]


def build_method_responses(cors: CorsConfig | None = None) -> list[MethodResponse]:
    return [
        MethodResponse(
            status_code=SUCCESS_STATUS,
            response_parameters=_declared_headers(cors),
        )
    ]


def build_error_integration_responses(cors: CorsConfig | None = None) -> list[IntegrationResponse]:
    return [
        IntegrationResponse(
            status_code=CLIENT_ERROR_STATUS,
            selection_pattern=CLIENT_ERROR_PATTERN,
            response_parameters=cors_response_parameters(cors),
        )
    ]


def build_error_method_responses(cors: CorsConfig | None = None) -> list[MethodResponse]:
    return [
        MethodResponse(
            status_code=CLIENT_ERROR_STATUS,
            response_parameters=_declared_headers(cors),
        )
    ]
