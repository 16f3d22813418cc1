"""Request mapping templates that start a workflow execution.

Each template is an ``Fn::Join`` of four segments: the directive header that
reads the request body into ``$body``, the execution request up to the state
machine ARN, the workflow ``Ref``, and the closing ``"}``.
"""

from __future__ import annotations

from stepgate.methods.encoding import Expression, Segment, coalesce, escape, json_object, json_string
from stepgate.methods.models import Join, Ref

JSON = "application/json"
FORM = "application/x-www-form-urlencoded"

BODY = Expression("$body")
FIELDS = Expression("$fields")
COGNITO_IDENTITY_ID = Expression("$context.identity.cognitoIdentityId")
EXECUTION_NAME = Expression("${context.requestTimeEpoch}-${context.requestId}")

# $body holds the JSON payload escaped once, ready to sit inside a string literal.
SET_JSON_BODY = "#set( $body = $util.escapeJavaScript($input.json('$')) )"

# Form bodies are raw text that ends up inside a string inside the input string, so they are escaped twice.
SET_FORM_BODY = "#set( $body = $util.escapeJavaScript($util.escapeJavaScript($input.body)) )"

# $fields continues an object that already holds cognitoIdentityId: the caller's
# top-level members for an object payload, the payload under "body" otherwise.
SET_JSON_FIELDS = (
    "#if( $body == '{}' )#set( $fields = '}' )"
    "#elseif( $body.startsWith('{') )#set( $fields = ', ' + $body.substring(1) )"
    "#else#set( $fields = ', " + escape('"body" : ') + "' + $body + '}' )#end"
)


def _header(*directives: str) -> str:
    return "".join(f"{d}\n" for d in directives) + "\n"


def _start_execution(header: str, execution_input: list[Segment], workflow_ref: Ref) -> Join:
    body = json_object(
        ("input", execution_input),
        ("name", json_string(EXECUTION_NAME)),
        ("stateMachineArn", json_string(workflow_ref)),
    )
    return Join(parts=[header, *coalesce(body)])


def json_template(workflow_ref: Ref, iam_auth: bool = False) -> Join:
    if not iam_auth:
        return _start_execution(_header(SET_JSON_BODY), json_string(BODY), workflow_ref)

    identity = json_object(("cognitoIdentityId", json_string(COGNITO_IDENTITY_ID)), rest=FIELDS)
    return _start_execution(
        _header(SET_JSON_BODY, SET_JSON_FIELDS),
        json_string(*identity),
        workflow_ref,
    )


def form_template(workflow_ref: Ref, iam_auth: bool = False) -> Join:
    members: list[tuple[str, list[Segment]]] = []
    if iam_auth:
        members.append(("cognitoIdentityId", json_string(COGNITO_IDENTITY_ID)))
    members.append(("body", json_string(BODY)))
    return _start_execution(_header(SET_FORM_BODY), json_string(*json_object(*members)), workflow_ref)


def build_request_templates(workflow_ref: Ref, iam_auth: bool = False) -> dict[str, Join]:
    """Request templates keyed by content type."""
    return {
        JSON: json_template(workflow_ref, iam_auth),
        FORM: form_template(workflow_ref, iam_auth),
    }
