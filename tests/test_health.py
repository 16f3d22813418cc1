"""Health, readiness and metrics endpoint tests."""

from __future__ import annotations

import os
from unittest.mock import patch

import pytest
from httpx import AsyncClient
from stepgate import __version__


@pytest.mark.asyncio
async def test_health(client: AsyncClient) -> None:
    resp = await client.get("/health")
    assert resp.status_code == 200
    assert resp.json() == {"status": "ok", "version": __version__}


@pytest.mark.asyncio
async def test_ready(client: AsyncClient) -> None:
    resp = await client.get("/ready")
    assert resp.status_code == 200
    data = resp.json()
    assert data["status"] == "ready"
    assert "uptime_seconds" in data
    assert data["rest_api_logical_id"] == "ApiGatewayRestApi"
    assert data["authorization_passthrough"] is True


@pytest.mark.asyncio
async def test_ready_reports_environment_settings(client: AsyncClient) -> None:
    with patch.dict(os.environ, {"STEPGATE_REST_API_ID": "PublicApi", "STEPGATE_AUTHORIZATION_PASSTHROUGH": "off"}):
        resp = await client.get("/ready")
    data = resp.json()
    assert data["rest_api_logical_id"] == "PublicApi"
    assert data["authorization_passthrough"] is False


@pytest.mark.asyncio
async def test_metrics_exposes_compiler_counters(client: AsyncClient) -> None:
    resp = await client.get("/metrics")
    assert resp.status_code == 200
    assert "stepgate_methods_compiled_total" in resp.text
