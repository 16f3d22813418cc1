"""Backend integration that starts a Step Functions execution."""

from __future__ import annotations

from stepgate.config import get_settings
from stepgate.methods.models import AuthorizationType, EndpointBinding, GetAtt, Integration, Join, Ref
from stepgate.methods.references import resolve_workflow_ref
from stepgate.methods.request_templates import build_request_templates
from stepgate.methods.responses import build_error_integration_responses, build_integration_responses

START_EXECUTION_URI = Join(
    parts=[
        "arn:",
        Ref("AWS::Partition"),
        ":apigateway:",
        Ref("AWS::Region"),
        ":states:action/StartExecution",
    ]
)


def build_integration(
    workflow_name: str,
    custom_name: str | None = None,
    *,
    iam_auth: bool = False,
    credentials_role: str | None = None,
) -> Integration:
    """Integration body without responses."""
    role = credentials_role or get_settings().credentials_role_logical_id
    return Integration(
        type="AWS",
        integration_http_method="POST",
        uri=START_EXECUTION_URI,
        credentials=GetAtt(role, "Arn"),
        passthrough_behavior="NEVER",
        request_templates=build_request_templates(
            resolve_workflow_ref(workflow_name, custom_name),
            iam_auth=iam_auth,
        ),
    )


def compile_integration(endpoint: EndpointBinding, credentials_role: str | None = None) -> Integration:
    integration = build_integration(
        endpoint.workflow,
        endpoint.custom_name,
        iam_auth=endpoint.effective_authorization == AuthorizationType.AWS_IAM,
        credentials_role=credentials_role,
    )
    responses = [
        *build_integration_responses(endpoint.cors),
        *build_error_integration_responses(endpoint.cors),
    ]
    return integration.model_copy(update={"integration_responses": responses})
