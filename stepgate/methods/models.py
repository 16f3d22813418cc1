"""Pydantic models for endpoint bindings and the API Gateway resources compiled from them."""

from __future__ import annotations

from enum import StrEnum
from typing import Any

from pydantic import AliasChoices, BaseModel, ConfigDict, Field, field_serializer, field_validator, model_serializer
from pydantic.alias_generators import to_pascal

HTTP_METHODS = frozenset({"get", "post", "put", "patch", "delete", "head", "options", "any"})

PSEUDO_PARAMETERS = frozenset(
    {
        "AWS::AccountId",
        "AWS::Partition",
        "AWS::Region",
        "AWS::StackId",
        "AWS::StackName",
        "AWS::URLSuffix",
    }
)


class AuthorizationType(StrEnum):
    NONE = "NONE"
    AWS_IAM = "AWS_IAM"
    CUSTOM = "CUSTOM"
    COGNITO_USER_POOLS = "COGNITO_USER_POOLS"


KNOWN_AUTHORIZATION_TYPES = frozenset(a.value for a in AuthorizationType)
AUTHORIZER_TYPES = frozenset({AuthorizationType.CUSTOM.value, AuthorizationType.COGNITO_USER_POOLS.value})


# ---------- intrinsic functions ----------


class Ref(BaseModel):
    model_config = ConfigDict(frozen=True)

    logical_id: str

    def __init__(self, logical_id: str) -> None:
        super().__init__(logical_id=logical_id)

    @model_serializer
    def serialize(self) -> dict[str, str]:
        return {"Ref": self.logical_id}


class GetAtt(BaseModel):
    model_config = ConfigDict(frozen=True)

    logical_id: str
    attribute: str

    def __init__(self, logical_id: str, attribute: str) -> None:
        super().__init__(logical_id=logical_id, attribute=attribute)

    @model_serializer
    def serialize(self) -> dict[str, list[str]]:
        return {"Fn::GetAtt": [self.logical_id, self.attribute]}


class Join(BaseModel):
    """``Fn::Join`` over literal segments and references, in order."""

    model_config = ConfigDict(frozen=True)

    delimiter: str = ""
    parts: list[str | Ref | GetAtt]

    @model_serializer
    def serialize(self) -> dict[str, list[Any]]:
        parts = [p if isinstance(p, str) else p.model_dump() for p in self.parts]
        return {"Fn::Join": [self.delimiter, parts]}


# ---------- CloudFormation resource records ----------


class CfnModel(BaseModel):
    """Resource record whose fields dump under their CloudFormation (PascalCase) names."""

    model_config = ConfigDict(alias_generator=to_pascal, populate_by_name=True, frozen=True)

    def to_cfn(self) -> dict[str, Any]:
        return self.model_dump(by_alias=True, exclude_none=True)


class IntegrationResponse(CfnModel):
    status_code: str
    selection_pattern: str | None = None
    response_parameters: dict[str, str] = Field(default_factory=dict)
    response_templates: dict[str, str] = Field(default_factory=dict)


class MethodResponse(CfnModel):
    status_code: str
    response_parameters: dict[str, bool] = Field(default_factory=dict)
    response_models: dict[str, str] = Field(default_factory=dict)


class Integration(CfnModel):
    type: str = "AWS"
    integration_http_method: str = "POST"
    uri: Join
    credentials: GetAtt | None = None
    passthrough_behavior: str = "NEVER"
    request_templates: dict[str, Join] = Field(default_factory=dict)
    integration_responses: list[IntegrationResponse] = Field(default_factory=list)


class MethodProperties(CfnModel):
    http_method: str
    request_parameters: dict[str, bool] = Field(default_factory=dict)
    authorization_type: str = AuthorizationType.NONE.value
    authorizer_id: Ref | None = None
    api_key_required: bool = False
    resource_id: Ref | GetAtt
    rest_api_id: Ref
    integration: Integration
    method_responses: list[MethodResponse] = Field(default_factory=list)

    @field_serializer("resource_id")
    def serialize_resource_id(self, value: Ref | GetAtt) -> dict[str, Any]:
        return value.model_dump()


class MethodResource(CfnModel):
    type: str = "AWS::ApiGateway::Method"
    properties: MethodProperties


# ---------- endpoint bindings ----------


class CorsConfig(BaseModel):
    model_config = ConfigDict(frozen=True, populate_by_name=True)

    origin: str | None = None
    origins: list[str] | None = None
    headers: list[str] | None = None
    allow_credentials: bool = Field(default=False, alias="allowCredentials")

    @field_validator("origins", "headers")
    @classmethod
    def dedupe(cls, value: list[str] | None) -> list[str] | None:
        if value is None:
            return None
        return list(dict.fromkeys(value))

    @field_validator("origin", "origins", "headers")
    @classmethod
    def reject_quotes(cls, value: str | list[str] | None) -> str | list[str] | None:
        values = [value] if isinstance(value, str) else value or []
        for v in values:
            if "'" in v:
                raise ValueError(f"{v!r} cannot contain a single quote")
        return value

    @property
    def allow_origin(self) -> str:
        """Origin header value before quoting: ``origins`` joined with ``,``, else ``origin``, else ``*``."""
        if self.origins:
            return ",".join(self.origins)
        return self.origin or "*"


class EndpointBinding(BaseModel):
    """One HTTP route bound to one workflow."""

    model_config = ConfigDict(frozen=True, populate_by_name=True)

    workflow: str = Field(..., validation_alias=AliasChoices("workflow", "stateMachineName", "stateMachine"))
    path: str = ""
    method: str
    custom_name: str | None = Field(default=None, alias="customName")
    authorization_type: str | None = Field(default=None, alias="authorizationType")
    use_iam_auth: bool = Field(default=False, alias="useIAMAuth")
    authorizer_id: str | None = Field(default=None, alias="authorizerId")
    private: bool = False
    cors: CorsConfig | None = None

    @field_validator("path")
    @classmethod
    def trim_path(cls, value: str) -> str:
        return value.strip().strip("/")

    @field_validator("method")
    @classmethod
    def lower_method(cls, value: str) -> str:
        return value.strip().lower()

    @field_validator("cors", mode="before")
    @classmethod
    def cors_flag(cls, value: Any) -> Any:
        if value is True:
            return {}
        if value is False:
            return None
        return value

    @property
    def effective_authorization(self) -> str:
        if self.use_iam_auth:
            return AuthorizationType.AWS_IAM.value
        return self.authorization_type or AuthorizationType.NONE.value

    @property
    def label(self) -> str:
        return f"{self.method.upper()} {self.path or '/'}"


class CompilationContext(BaseModel):
    """Inputs supplied by the surrounding template assembler."""

    model_config = ConfigDict(populate_by_name=True)

    workflows: set[str] = Field(default_factory=set)
    resource_logical_ids: dict[str, str] = Field(default_factory=dict, alias="resourceLogicalIds")
    resource_names: dict[str, str] = Field(default_factory=dict, alias="resourceNames")
    rest_api_logical_id: str | None = Field(default=None, alias="restApiLogicalId")
    credentials_role_logical_id: str | None = Field(default=None, alias="credentialsRoleLogicalId")
    external_logical_ids: set[str] = Field(default_factory=set, alias="externalLogicalIds")


# ---------- API bodies ----------


class ValidateRequest(BaseModel):
    endpoints: list[EndpointBinding]
    context: CompilationContext


class ValidateResponse(BaseModel):
    valid: bool
    errors: list[str] = Field(default_factory=list)
    warnings: list[str] = Field(default_factory=list)


class CompileRequest(BaseModel):
    endpoints: list[EndpointBinding]
    context: CompilationContext
    resources: dict[str, dict[str, Any]] = Field(default_factory=dict)


class CompileResponse(BaseModel):
    resources: dict[str, dict[str, Any]]
    errors: list[str] = Field(default_factory=list)
