"""Shared test fixtures."""

from __future__ import annotations

import os

import pytest
from httpx import ASGITransport, AsyncClient

os.environ.setdefault("STEPGATE_AUTHORIZATION_PASSTHROUGH", "true")

from stepgate import config  # noqa: E402
from stepgate.methods.models import CompilationContext  # noqa: E402
from stepgate.service.api import app  # noqa: E402


@pytest.fixture
async def client() -> AsyncClient:
    transport = ASGITransport(app=app)
    async with AsyncClient(transport=transport, base_url="http://test") as ac:
        yield ac


@pytest.fixture(autouse=True)
def reset_settings() -> None:
    config._settings = None
    yield
    config._settings = None


@pytest.fixture
def context() -> CompilationContext:
    return CompilationContext(
        workflows={"first", "second"},
        resource_logical_ids={"foo/bar": "apiGatewayResourceLogicalId", "foo": "apiGatewayResourceFoo"},
        resource_names={"foo/bar": "apiGatewayResourceNames", "foo": "Foo"},
    )
