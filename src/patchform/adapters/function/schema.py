"""Pydantic models for the function request and response envelopes.

Field names follow the protobuf JSON mapping (camelCase keys, enum values
as their full names, durations such as ``"60s"``). Connection detail values
are base64 strings on the wire.
"""

from __future__ import annotations

from pydantic import BaseModel, ConfigDict, Field, JsonValue
from pydantic.alias_generators import to_camel


class FunctionBaseModel(BaseModel):
    model_config = ConfigDict(extra="ignore", populate_by_name=True, alias_generator=to_camel)


class RequestMeta(FunctionBaseModel):
    tag: str = ""


class ResponseMeta(FunctionBaseModel):
    tag: str = ""
    ttl: str = "60s"


class ResourcePayload(FunctionBaseModel):
    resource: dict[str, JsonValue] = Field(default_factory=dict)
    connection_details: dict[str, str] = Field(default_factory=dict)
    ready: str | None = None


class StatePayload(FunctionBaseModel):
    composite: ResourcePayload | None = None
    resources: dict[str, ResourcePayload] = Field(default_factory=dict)


class ResultPayload(FunctionBaseModel):
    severity: str
    message: str


class RunFunctionRequest(FunctionBaseModel):
    meta: RequestMeta | None = None
    input: dict[str, JsonValue] | None = None
    observed: StatePayload | None = None
    desired: StatePayload | None = None
    context: dict[str, JsonValue] | None = None


class RunFunctionResponse(FunctionBaseModel):
    meta: ResponseMeta
    desired: StatePayload
    context: dict[str, JsonValue] | None = None
    results: list[ResultPayload] = Field(default_factory=list["ResultPayload"])
