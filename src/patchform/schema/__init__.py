"""Pydantic models for the declarative input document."""

from __future__ import annotations

from .base import InputModel
from .patches import (
    COMBINE_PATCH_TYPES,
    FIELD_PATH_PATCH_TYPES,
    Combine,
    CombineStrategy,
    CombineVariable,
    FromFieldPathPolicy,
    Patch,
    PatchPolicy,
    PatchType,
    StringCombine,
    ToFieldPathPolicy,
)
from .resources import (
    ComposedTemplate,
    ConditionSpec,
    ConnectionDetail,
    ConnectionDetailType,
    Environment,
    MatchConditionReadinessCheck,
    PatchSet,
    ReadinessCheck,
    ReadinessCheckType,
    Resources,
)
from .transforms import (
    ConvertTransform,
    ConvertTransformFormat,
    MatchFallbackTo,
    MatchPatternType,
    MatchTransform,
    MatchTransformPattern,
    MathTransform,
    MathTransformType,
    StringConversionType,
    StringTransform,
    StringTransformJoin,
    StringTransformRegexp,
    StringTransformReplace,
    StringTransformType,
    Transform,
    TransformType,
)

__all__ = [
    "COMBINE_PATCH_TYPES",
    "FIELD_PATH_PATCH_TYPES",
    "Combine",
    "CombineStrategy",
    "CombineVariable",
    "ComposedTemplate",
    "ConditionSpec",
    "ConnectionDetail",
    "ConnectionDetailType",
    "ConvertTransform",
    "ConvertTransformFormat",
    "Environment",
    "FromFieldPathPolicy",
    "InputModel",
    "MatchConditionReadinessCheck",
    "MatchFallbackTo",
    "MatchPatternType",
    "MatchTransform",
    "MatchTransformPattern",
    "MathTransform",
    "MathTransformType",
    "Patch",
    "PatchPolicy",
    "PatchSet",
    "PatchType",
    "ReadinessCheck",
    "ReadinessCheckType",
    "Resources",
    "StringCombine",
    "StringConversionType",
    "StringTransform",
    "StringTransformJoin",
    "StringTransformRegexp",
    "StringTransformReplace",
    "StringTransformType",
    "ToFieldPathPolicy",
    "Transform",
    "TransformType",
]
