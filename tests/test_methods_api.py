"""Tests for the /methods HTTP routes."""

from __future__ import annotations

import pytest
from httpx import AsyncClient

CONTEXT = {
    "workflows": ["first"],
    "resourceLogicalIds": {"foo/bar": "apiGatewayResourceLogicalId"},
    "resourceNames": {"foo/bar": "apiGatewayResourceNames"},
}

ENDPOINT = {"workflow": "first", "path": "foo/bar", "method": "post", "useIAMAuth": True, "cors": True}


@pytest.mark.asyncio
async def test_validate_endpoint(client: AsyncClient) -> None:
    resp = await client.post("/methods/validate", json={"endpoints": [ENDPOINT], "context": CONTEXT})
    assert resp.status_code == 200
    assert resp.json()["valid"] is True


@pytest.mark.asyncio
async def test_compile_endpoint(client: AsyncClient) -> None:
    resp = await client.post("/methods/compile", json={"endpoints": [ENDPOINT], "context": CONTEXT})
    assert resp.status_code == 200
    data = resp.json()
    assert data["errors"] == []
    method = data["resources"]["ApiGatewayMethodapiGatewayResourceNamesPost"]
    assert method["Properties"]["AuthorizationType"] == "AWS_IAM"
    response_parameters = method["Properties"]["Integration"]["IntegrationResponses"][0]["ResponseParameters"]
    assert response_parameters["method.response.header.Access-Control-Allow-Origin"] == "'*'"


@pytest.mark.asyncio
async def test_compile_merges_existing_resources(client: AsyncClient) -> None:
    existing = {"FirstStepFunctionsStateMachine": {"Type": "AWS::StepFunctions::StateMachine", "Properties": {}}}
    resp = await client.post(
        "/methods/compile",
        json={"endpoints": [ENDPOINT], "context": CONTEXT, "resources": existing},
    )
    assert set(resp.json()["resources"]) == {"FirstStepFunctionsStateMachine", "ApiGatewayMethodapiGatewayResourceNamesPost"}


@pytest.mark.asyncio
async def test_compile_reports_validation_errors(client: AsyncClient) -> None:
    endpoint = {**ENDPOINT, "workflow": "ghost"}
    resp = await client.post("/methods/compile", json={"endpoints": [endpoint], "context": CONTEXT})
    assert resp.status_code == 200
    data = resp.json()
    assert data["resources"] == {}
    assert data["errors"] == ["POST foo/bar: workflow 'ghost' is not declared"]


@pytest.mark.asyncio
async def test_compile_reports_undeclared_custom_workflow(client: AsyncClient) -> None:
    endpoint = {**ENDPOINT, "customName": "external"}
    resp = await client.post("/methods/compile", json={"endpoints": [endpoint], "context": CONTEXT})
    data = resp.json()
    assert data["resources"] == {}
    assert data["errors"] == ["POST foo/bar: custom workflow 'External' is not a declared resource"]


@pytest.mark.asyncio
async def test_compile_reports_logical_id_collision(client: AsyncClient) -> None:
    existing = {"ApiGatewayMethodapiGatewayResourceNamesPost": {"Type": "AWS::ApiGateway::Method"}}
    resp = await client.post(
        "/methods/compile",
        json={"endpoints": [ENDPOINT], "context": CONTEXT, "resources": existing},
    )
    data = resp.json()
    assert data["resources"] == {}
    assert "is already defined" in data["errors"][0]
    assert "POST foo/bar" in data["errors"][0]


@pytest.mark.asyncio
async def test_compile_rejects_malformed_body(client: AsyncClient) -> None:
    resp = await client.post("/methods/compile", json={"endpoints": [{"path": "x"}], "context": CONTEXT})
    assert resp.status_code == 422


@pytest.mark.asyncio
async def test_malformed_body_reports_field_errors(client: AsyncClient) -> None:
    endpoint = {**ENDPOINT, "cors": {"origin": "http://it's.example.com"}}
    resp = await client.post("/methods/validate", json={"endpoints": [endpoint], "context": CONTEXT})
    assert resp.status_code == 422
    data = resp.json()
    assert data["type"] == "validation_error"
    assert data["detail"][0]["loc"][:3] == ["body", "endpoints", 0]

    metrics = await client.get("/metrics")
    assert 'stepgate_rejected_bodies_total{route="/methods/validate"}' in metrics.text


@pytest.mark.asyncio
async def test_requests_are_metered_by_route(client: AsyncClient) -> None:
    await client.post("/methods/validate", json={"endpoints": [ENDPOINT], "context": CONTEXT})
    resp = await client.get("/metrics")
    assert 'route="/methods/validate"' in resp.text
    assert "stepgate_http_requests_total" in resp.text
