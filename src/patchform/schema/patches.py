"""Patch declarations and their policies."""

from __future__ import annotations

from enum import StrEnum

from pydantic import Field, field_validator

from .base import InputModel
from .transforms import Transform


class PatchType(StrEnum):
    FROM_COMPOSITE_FIELD_PATH = "FromCompositeFieldPath"
    FROM_ENVIRONMENT_FIELD_PATH = "FromEnvironmentFieldPath"
    PATCH_SET = "PatchSet"
    TO_COMPOSITE_FIELD_PATH = "ToCompositeFieldPath"
    TO_ENVIRONMENT_FIELD_PATH = "ToEnvironmentFieldPath"
    COMBINE_FROM_ENVIRONMENT = "CombineFromEnvironment"
    COMBINE_FROM_COMPOSITE = "CombineFromComposite"
    COMBINE_TO_COMPOSITE = "CombineToComposite"
    COMBINE_TO_ENVIRONMENT = "CombineToEnvironment"


FIELD_PATH_PATCH_TYPES: frozenset[PatchType] = frozenset(
    {
        PatchType.FROM_COMPOSITE_FIELD_PATH,
        PatchType.FROM_ENVIRONMENT_FIELD_PATH,
        PatchType.TO_COMPOSITE_FIELD_PATH,
        PatchType.TO_ENVIRONMENT_FIELD_PATH,
    }
)

COMBINE_PATCH_TYPES: frozenset[PatchType] = frozenset(
    {
        PatchType.COMBINE_FROM_COMPOSITE,
        PatchType.COMBINE_FROM_ENVIRONMENT,
        PatchType.COMBINE_TO_COMPOSITE,
        PatchType.COMBINE_TO_ENVIRONMENT,
    }
)


class FromFieldPathPolicy(StrEnum):
    OPTIONAL = "Optional"
    REQUIRED = "Required"


class ToFieldPathPolicy(StrEnum):
    REPLACE = "Replace"
    MERGE_OBJECTS = "MergeObjects"
    MERGE_OBJECTS_APPEND_ARRAYS = "MergeObjectsAppendArrays"
    FORCE_MERGE_OBJECTS = "ForceMergeObjects"
    FORCE_MERGE_OBJECTS_APPEND_ARRAYS = "ForceMergeObjectsAppendArrays"
    # Deprecated spellings kept for older configurations.
    MERGE_OBJECT = "MergeObject"
    APPEND_ARRAY = "AppendArray"


class PatchPolicy(InputModel):
    from_field_path: FromFieldPathPolicy | None = None
    to_field_path: ToFieldPathPolicy | None = None


class CombineStrategy(StrEnum):
    STRING = "string"


class CombineVariable(InputModel):
    from_field_path: str = ""


class StringCombine(InputModel):
    fmt: str


class Combine(InputModel):
    variables: list[CombineVariable] = Field(default_factory=list["CombineVariable"])
    strategy: str = ""
    string: StringCombine | None = None


class Patch(InputModel):
    type: PatchType = PatchType.FROM_COMPOSITE_FIELD_PATH
    from_field_path: str | None = None
    to_field_path: str | None = None
    combine: Combine | None = None
    patch_set_name: str | None = None
    transforms: list[Transform] = Field(default_factory=list["Transform"])
    policy: PatchPolicy | None = None

    @field_validator("type", mode="before")
    @classmethod
    def _default_type(cls, value: object) -> object:
        return value or PatchType.FROM_COMPOSITE_FIELD_PATH

    @property
    def source_path(self) -> str:
        return self.from_field_path or ""

    @property
    def target_path(self) -> str:
        """The path written to; field path patches default it to ``from_field_path``."""

        if self.to_field_path:
            return self.to_field_path
        if self.type in FIELD_PATH_PATCH_TYPES:
            return self.source_path
        return ""

    @property
    def from_policy(self) -> FromFieldPathPolicy:
        if self.policy is None or self.policy.from_field_path is None:
            return FromFieldPathPolicy.OPTIONAL
        return self.policy.from_field_path

    @property
    def to_policy(self) -> ToFieldPathPolicy:
        if self.policy is None or self.policy.to_field_path is None:
            return ToFieldPathPolicy.REPLACE
        return self.policy.to_field_path
