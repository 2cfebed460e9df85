"""Transform declarations."""

from __future__ import annotations

from enum import StrEnum

from pydantic import Field, JsonValue

from .base import InputModel


class TransformType(StrEnum):
    MAP = "map"
    MATCH = "match"
    MATH = "math"
    STRING = "string"
    CONVERT = "convert"


class MathTransformType(StrEnum):
    MULTIPLY = "Multiply"
    CLAMP_MIN = "ClampMin"
    CLAMP_MAX = "ClampMax"


class MathTransform(InputModel):
    type: MathTransformType = MathTransformType.MULTIPLY
    multiply: int | None = None
    clamp_min: int | None = None
    clamp_max: int | None = None


class MatchPatternType(StrEnum):
    LITERAL = "literal"
    REGEXP = "regexp"


class MatchFallbackTo(StrEnum):
    VALUE = "Value"
    INPUT = "Input"


class MatchTransformPattern(InputModel):
    type: MatchPatternType = MatchPatternType.LITERAL
    literal: str | None = None
    regexp: str | None = None
    result: JsonValue = None


class MatchTransform(InputModel):
    patterns: list[MatchTransformPattern] = Field(default_factory=list["MatchTransformPattern"])
    fallback_value: JsonValue = None
    fallback_to: MatchFallbackTo = MatchFallbackTo.VALUE


class StringTransformType(StrEnum):
    FORMAT = "Format"
    CONVERT = "Convert"
    TRIM_PREFIX = "TrimPrefix"
    TRIM_SUFFIX = "TrimSuffix"
    REGEXP = "Regexp"
    JOIN = "Join"
    REPLACE = "Replace"


class StringConversionType(StrEnum):
    TO_UPPER = "ToUpper"
    TO_LOWER = "ToLower"
    TO_BASE64 = "ToBase64"
    FROM_BASE64 = "FromBase64"
    TO_JSON = "ToJson"
    TO_SHA1 = "ToSha1"
    TO_SHA256 = "ToSha256"
    TO_SHA512 = "ToSha512"
    TO_ADLER32 = "ToAdler32"


class StringTransformRegexp(InputModel):
    match: str = ""
    group: int | None = None


class StringTransformJoin(InputModel):
    separator: str = ""


class StringTransformReplace(InputModel):
    search: str = ""
    replace: str = ""


class StringTransform(InputModel):
    type: StringTransformType
    fmt: str | None = None
    convert: str | None = None
    trim: str | None = None
    regexp: StringTransformRegexp | None = None
    join: StringTransformJoin | None = None
    replace: StringTransformReplace | None = None


class ConvertTransformFormat(StrEnum):
    NONE = "none"
    QUANTITY = "quantity"
    JSON = "json"


class ConvertTransform(InputModel):
    """Convert a value to ``to_type``.

    ``to_type`` and ``format`` stay plain strings so an unknown value is
    reported by validation (or at resolution time) rather than at parse time.
    """

    to_type: str
    format: str | None = None

    @property
    def effective_format(self) -> str:
        return self.format or ConvertTransformFormat.NONE


class Transform(InputModel):
    type: TransformType
    math: MathTransform | None = None
    map: dict[str, JsonValue] | None = None
    match: MatchTransform | None = None
    string: StringTransform | None = None
    convert: ConvertTransform | None = None
