"""Environment-driven settings for the method compiler."""

from __future__ import annotations

import os

import structlog
from pydantic import BaseModel

logger = structlog.get_logger()

_TRUTHY = {"1", "true", "yes", "on"}


class Settings(BaseModel):
    authorization_passthrough: bool = True
    credentials_role_logical_id: str = "ApigatewayToStepFunctionsRole"
    rest_api_logical_id: str = "ApiGatewayRestApi"


_settings: Settings | None = None


def get_settings() -> Settings:
    global _settings
    if _settings is not None:
        return _settings

    passthrough = os.environ.get("STEPGATE_AUTHORIZATION_PASSTHROUGH", "true").strip().lower()
    _settings = Settings(
        authorization_passthrough=passthrough in _TRUTHY,
        credentials_role_logical_id=os.environ.get("STEPGATE_CREDENTIALS_ROLE", "ApigatewayToStepFunctionsRole"),
        rest_api_logical_id=os.environ.get("STEPGATE_REST_API_ID", "ApiGatewayRestApi"),
    )
    logger.info(
        "stepgate.settings.init",
        authorization_passthrough=_settings.authorization_passthrough,
        credentials_role=_settings.credentials_role_logical_id,
    )
    return _settings
