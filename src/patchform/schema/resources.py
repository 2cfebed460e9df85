"""The top-level input document: composed templates, patch sets and environment patches."""

from __future__ import annotations

from enum import StrEnum

from pydantic import Field, JsonValue

from .base import InputModel
from .patches import Patch


class ReadinessCheckType(StrEnum):
    NON_EMPTY = "NonEmpty"
    MATCH_STRING = "MatchString"
    MATCH_INTEGER = "MatchInteger"
    MATCH_TRUE = "MatchTrue"
    MATCH_FALSE = "MatchFalse"
    MATCH_CONDITION = "MatchCondition"
    NONE = "None"


class MatchConditionReadinessCheck(InputModel):
    type: str = "Ready"
    status: str = "True"


class ReadinessCheck(InputModel):
    type: str = ""
    field_path: str | None = None
    match_string: str | None = None
    match_integer: int | None = None
    match_condition: MatchConditionReadinessCheck | None = None


class ConnectionDetailType(StrEnum):
    FROM_CONNECTION_SECRET_KEY = "FromConnectionSecretKey"
    FROM_FIELD_PATH = "FromFieldPath"
    FROM_VALUE = "FromValue"


class ConnectionDetail(InputModel):
    name: str = ""
    type: str = ""
    value: str | None = None
    from_connection_secret_key: str | None = None
    from_field_path: str | None = None


class ConditionSpec(InputModel):
    """A boolean expression gating whether resources are rendered."""

    expression: str = ""


class ComposedTemplate(InputModel):
    name: str = ""
    base: dict[str, JsonValue] | None = None
    condition: ConditionSpec | None = None
    patches: list[Patch] = Field(default_factory=list["Patch"])
    connection_details: list[ConnectionDetail] = Field(
        default_factory=list["ConnectionDetail"]
    )
    readiness_checks: list[ReadinessCheck] = Field(default_factory=list["ReadinessCheck"])


class PatchSet(InputModel):
    name: str = ""
    patches: list[Patch] = Field(default_factory=list["Patch"])


class Environment(InputModel):
    patches: list[Patch] = Field(default_factory=list["Patch"])


class Resources(InputModel):
    api_version: str | None = None
    kind: str | None = None
    metadata: dict[str, JsonValue] | None = None
    condition: ConditionSpec | None = None
    patch_sets: list[PatchSet] = Field(default_factory=list["PatchSet"])
    environment: Environment | None = None
    resources: list[ComposedTemplate] = Field(default_factory=list["ComposedTemplate"])
