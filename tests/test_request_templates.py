"""Golden tests for the StartExecution request templates."""

from __future__ import annotations

import pytest
from stepgate.methods.models import Ref
from stepgate.methods.request_templates import FORM, JSON, build_request_templates

WORKFLOW = Ref("FirstStepFunctionsStateMachine")

NAME_AND_ARN = (
    ', "name" : "${context.requestTimeEpoch}-${context.requestId}", "stateMachineArn" : "'
)

GOLDEN = {
    (JSON, False): [
        "#set( $body = $util.escapeJavaScript($input.json('$')) )\n\n",
        '{"input" : "$body"' + NAME_AND_ARN,
        {"Ref": "FirstStepFunctionsStateMachine"},
        '"}',
    ],
    (JSON, True): [
        "#set( $body = $util.escapeJavaScript($input.json('$')) )\n"
        "#if( $body == '{}' )#set( $fields = '}' )"
        "#elseif( $body.startsWith('{') )#set( $fields = ', ' + $body.substring(1) )"
        "#else#set( $fields = ', \\\"body\\\" : ' + $body + '}' )#end\n\n",
        '{"input" : "{\\"cognitoIdentityId\\" : \\"$context.identity.cognitoIdentityId\\"$fields"' + NAME_AND_ARN,
        {"Ref": "FirstStepFunctionsStateMachine"},
        '"}',
    ],
    (FORM, False): [
        "#set( $body = $util.escapeJavaScript($util.escapeJavaScript($input.body)) )\n\n",
        '{"input" : "{\\"body\\" : \\"$body\\"}"' + NAME_AND_ARN,
        {"Ref": "FirstStepFunctionsStateMachine"},
        '"}',
    ],
    (FORM, True): [
        "#set( $body = $util.escapeJavaScript($util.escapeJavaScript($input.body)) )\n\n",
        '{"input" : "{\\"cognitoIdentityId\\" : \\"$context.identity.cognitoIdentityId\\", \\"body\\" : \\"$body\\"}"'
        + NAME_AND_ARN,
        {"Ref": "FirstStepFunctionsStateMachine"},
        '"}',
    ],
}


@pytest.mark.parametrize(("content_type", "iam_auth"), list(GOLDEN))
def test_template_matches_golden(content_type: str, iam_auth: bool) -> None:
    template = build_request_templates(WORKFLOW, iam_auth=iam_auth)[content_type]
    assert template.model_dump() == {"Fn::Join": ["", GOLDEN[(content_type, iam_auth)]]}


def test_both_content_types_are_produced() -> None:
    assert set(build_request_templates(WORKFLOW)) == {JSON, FORM}


def test_workflow_reference_is_third_segment() -> None:
    for iam_auth in (False, True):
        for template in build_request_templates(Ref("Custom"), iam_auth=iam_auth).values():
            assert template.model_dump()["Fn::Join"][1][2] == {"Ref": "Custom"}


def test_cognito_identity_only_with_iam() -> None:
    with_iam = build_request_templates(WORKFLOW, iam_auth=True)
    without_iam = build_request_templates(WORKFLOW, iam_auth=False)

    assert '"{\\"cognitoIdentityId\\" : \\"$context.identity.cognitoIdentityId\\"' in (
        with_iam[JSON].model_dump()["Fn::Join"][1][1]
    )
    assert '"{\\"cognitoIdentityId\\" : \\"$context.identity.cognitoIdentityId\\",' in (
        with_iam[FORM].model_dump()["Fn::Join"][1][1]
    )
    for template in without_iam.values():
        assert "cognitoIdentityId" not in str(template.model_dump())
