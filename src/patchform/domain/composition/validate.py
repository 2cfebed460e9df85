"""Structural validation of the input document.

Each validator raises the first :class:`ValidationFieldError` it finds,
anchored at the offending field relative to the object it was given.
Callers nest the error under their own position, so a problem deep in a
template reads ``resources[0].patches[2].transforms[0].math.multiply: ...``.
"""

from __future__ import annotations

import re
from contextlib import contextmanager
from typing import TYPE_CHECKING, Final

from patchform.domain.errors import ValidationFieldError
from patchform.domain.values import ValueType
from patchform.schema import (
    COMBINE_PATCH_TYPES,
    FIELD_PATH_PATCH_TYPES,
    CombineStrategy,
    ConnectionDetailType,
    ConvertTransformFormat,
    MatchPatternType,
    MathTransformType,
    PatchType,
    ReadinessCheckType,
    StringTransformType,
    TransformType,
)

if TYPE_CHECKING:
    from collections.abc import Iterator

    from patchform.schema import (
        Combine,
        ComposedTemplate,
        ConditionSpec,
        ConnectionDetail,
        ConvertTransform,
        Environment,
        MatchConditionReadinessCheck,
        MatchTransform,
        MatchTransformPattern,
        MathTransform,
        Patch,
        PatchSet,
        ReadinessCheck,
        Resources,
        StringTransform,
        Transform,
    )

_ENVIRONMENT_PATCH_TYPES: Final[frozenset[PatchType]] = frozenset(
    {
        PatchType.FROM_COMPOSITE_FIELD_PATH,
        PatchType.TO_COMPOSITE_FIELD_PATH,
        PatchType.COMBINE_FROM_COMPOSITE,
        PatchType.COMBINE_TO_COMPOSITE,
        PatchType.FROM_ENVIRONMENT_FIELD_PATH,
        PatchType.TO_ENVIRONMENT_FIELD_PATH,
    }
)

_MATH_OPERANDS: Final[dict[MathTransformType, tuple[str, str]]] = {
    MathTransformType.MULTIPLY: ("multiply", "multiply"),
    MathTransformType.CLAMP_MIN: ("clampMin", "clamp min"),
    MathTransformType.CLAMP_MAX: ("clampMax", "clamp max"),
}


@contextmanager
def _nested(parent: str) -> Iterator[None]:
    try:
        yield
    except ValidationFieldError as exc:
        raise exc.within(parent) from exc


def validate_resources(resources: Resources) -> None:
    for index, patch_set in enumerate(resources.patch_sets):
        with _nested(f"patchSets[{index}]"):
            validate_patch_set(patch_set)
    environment_patches = resources.environment.patches if resources.environment else []
    if not resources.resources and not environment_patches:
        raise ValidationFieldError.required(
            "resources", "resources or environment patches are required"
        )
    for index, template in enumerate(resources.resources):
        with _nested(f"resources[{index}]"):
            validate_composed_template(template)
    if resources.environment is not None:
        with _nested("environment"):
            validate_environment(resources.environment)
    if resources.condition is not None:
        with _nested("condition"):
            validate_condition(resources.condition)


def validate_composed_template(template: ComposedTemplate) -> None:
    if not template.name:
        raise ValidationFieldError.required("name", "name is required")
    for index, patch in enumerate(template.patches):
        with _nested(f"patches[{index}]"):
            validate_patch(patch)
    for index, detail in enumerate(template.connection_details):
        with _nested(f"connectionDetails[{index}]"):
            validate_connection_detail(detail)
    for index, check in enumerate(template.readiness_checks):
        with _nested(f"readinessChecks[{index}]"):
            validate_readiness_check(check)
    if template.condition is not None:
        with _nested("condition"):
            validate_condition(template.condition)


def validate_patch_set(patch_set: PatchSet) -> None:
    if not patch_set.name:
        raise ValidationFieldError.required("name", "name is required")
    for index, patch in enumerate(patch_set.patches):
        with _nested(f"patches[{index}]"):
            validate_patch(patch)


def validate_environment(environment: Environment) -> None:
    for index, patch in enumerate(environment.patches):
        if patch.type not in _ENVIRONMENT_PATCH_TYPES:
            raise ValidationFieldError.invalid(
                f"patches[{index}].type", str(patch.type), "invalid environment patch type"
            )
        with _nested(f"patches[{index}]"):
            validate_patch(patch)


def validate_condition(condition: ConditionSpec) -> None:
    if not condition.expression:
        raise ValidationFieldError.required("expression", "expression is required")


def validate_patch(patch: Patch) -> None:
    """Check that ``patch`` carries the fields its type needs."""

    if patch.type in FIELD_PATH_PATCH_TYPES:
        if not patch.from_field_path:
            raise ValidationFieldError.required(
                "fromFieldPath", f"fromFieldPath must be set for patch type {patch.type}"
            )
    elif patch.type is PatchType.PATCH_SET:
        if not patch.patch_set_name:
            raise ValidationFieldError.required(
                "patchSetName", f"patchSetName must be set for patch type {patch.type}"
            )
    elif patch.type in COMBINE_PATCH_TYPES:
        if patch.combine is None:
            raise ValidationFieldError.required(
                "combine", f"combine must be set for patch type {patch.type}"
            )
        if not patch.to_field_path:
            raise ValidationFieldError.required(
                "toFieldPath", f"toFieldPath must be set for patch type {patch.type}"
            )
        with _nested("combine"):
            validate_combine(patch.combine)

    for index, transform in enumerate(patch.transforms):
        with _nested(f"transforms[{index}]"):
            validate_transform(transform)


def validate_combine(combine: Combine) -> None:
    match combine.strategy:
        case CombineStrategy.STRING:
            if combine.string is None:
                raise ValidationFieldError.required(
                    "string", f"string must be set for combine strategy {combine.strategy}"
                )
        case "":
            raise ValidationFieldError.required("strategy", "a combine strategy must be provided")
        case _:
            raise ValidationFieldError.invalid(
                "strategy", combine.strategy, "unknown strategy type"
            )

    if not combine.variables:
        raise ValidationFieldError.required("variables", "at least one variable must be provided")
    for index, variable in enumerate(combine.variables):
        if not variable.from_field_path:
            raise ValidationFieldError.required(
                f"variables[{index}].fromFieldPath",
                "fromFieldPath must be set for each combine variable",
            )


def validate_transform(transform: Transform) -> None:
    config = {
        TransformType.MATH: transform.math,
        TransformType.MAP: transform.map,
        TransformType.MATCH: transform.match,
        TransformType.STRING: transform.string,
        TransformType.CONVERT: transform.convert,
    }[transform.type]
    if config is None:
        raise ValidationFieldError.required(
            str(transform.type), f"given transform type {transform.type} requires configuration"
        )

    with _nested(str(transform.type)):
        match transform.type:
            case TransformType.MATH:
                assert transform.math is not None
                validate_math_transform(transform.math)
            case TransformType.MAP:
                if not transform.map:
                    raise ValidationFieldError.required(
                        "pairs",
                        "at least one pair must be specified if a map transform is specified",
                    )
            case TransformType.MATCH:
                assert transform.match is not None
                validate_match_transform(transform.match)
            case TransformType.STRING:
                assert transform.string is not None
                validate_string_transform(transform.string)
            case TransformType.CONVERT:
                assert transform.convert is not None
                validate_convert_transform(transform.convert)


def validate_math_transform(transform: MathTransform) -> None:
    field, label = _MATH_OPERANDS[transform.type]
    operand = {
        MathTransformType.MULTIPLY: transform.multiply,
        MathTransformType.CLAMP_MIN: transform.clamp_min,
        MathTransformType.CLAMP_MAX: transform.clamp_max,
    }[transform.type]
    if operand is None:
        raise ValidationFieldError.required(
            field, f"must specify a value if a {label} math transform is specified"
        )


def validate_match_transform(transform: MatchTransform) -> None:
    if not transform.patterns:
        raise ValidationFieldError.required(
            "patterns", "at least one pattern must be specified if a match transform is specified"
        )
    for index, pattern in enumerate(transform.patterns):
        with _nested(f"patterns[{index}]"):
            validate_match_pattern(pattern)


def validate_match_pattern(pattern: MatchTransformPattern) -> None:
    match pattern.type:
        case MatchPatternType.LITERAL:
            if pattern.literal is None:
                raise ValidationFieldError.required(
                    "literal", "literal pattern type requires a literal"
                )
        case MatchPatternType.REGEXP:
            if pattern.regexp is None:
                raise ValidationFieldError.required(
                    "regexp", "regexp pattern type requires a regexp"
                )
            _check_regexp("regexp", pattern.regexp)


def validate_string_transform(transform: StringTransform) -> None:  # noqa: C901
    match transform.type:
        case StringTransformType.FORMAT:
            if transform.fmt is None:
                raise ValidationFieldError.required("fmt", "format transform requires a format")
        case StringTransformType.CONVERT:
            if transform.convert is None:
                raise ValidationFieldError.required(
                    "convert", "convert transform requires a conversion type"
                )
        case StringTransformType.TRIM_PREFIX | StringTransformType.TRIM_SUFFIX:
            if transform.trim is None:
                raise ValidationFieldError.required("trim", "trim transform requires a trim value")
        case StringTransformType.REGEXP:
            if transform.regexp is None:
                raise ValidationFieldError.required(
                    "regexp", "regexp transform requires a regexp"
                )
            if not transform.regexp.match:
                raise ValidationFieldError.required(
                    "regexp.match", "regexp transform requires a match"
                )
            _check_regexp("regexp.match", transform.regexp.match)
        case StringTransformType.JOIN:
            if transform.join is None:
                raise ValidationFieldError.required("join", "join transform requires a join")
        case StringTransformType.REPLACE:
            if transform.replace is None:
                raise ValidationFieldError.required(
                    "replace", "replace transform requires a replace"
                )
            if not transform.replace.search:
                raise ValidationFieldError.required(
                    "replace.search", "replace transform requires a search"
                )


def validate_convert_transform(transform: ConvertTransform) -> None:
    if transform.effective_format not in set(ConvertTransformFormat):
        raise ValidationFieldError.invalid("format", transform.format, "invalid format")
    if transform.to_type not in set(ValueType):
        raise ValidationFieldError.invalid("toType", transform.to_type, "invalid type")


def validate_readiness_check(check: ReadinessCheck) -> None:
    if check.type not in set(ReadinessCheckType):
        raise ValidationFieldError.invalid("type", check.type, "unknown readiness check type")
    match ReadinessCheckType(check.type):
        case ReadinessCheckType.NONE:
            return
        case ReadinessCheckType.MATCH_STRING:
            if check.match_string is None:
                raise ValidationFieldError.required(
                    "matchString", "cannot be nil for type MatchString"
                )
        case ReadinessCheckType.MATCH_INTEGER:
            if check.match_integer is None:
                raise ValidationFieldError.required(
                    "matchInteger", "cannot be nil for type MatchInteger"
                )
        case ReadinessCheckType.MATCH_CONDITION:
            if check.match_condition is not None:
                with _nested("matchCondition"):
                    validate_match_condition(check.match_condition)
            return
        case _:
            pass
    if check.field_path is None:
        raise ValidationFieldError.required("fieldPath", "cannot be empty")


def validate_match_condition(condition: MatchConditionReadinessCheck) -> None:
    if not condition.type:
        raise ValidationFieldError.required("type", "cannot be empty for type MatchCondition")
    if not condition.status:
        raise ValidationFieldError.required("status", "cannot be empty for type MatchCondition")


def validate_connection_detail(detail: ConnectionDetail) -> None:
    if not detail.type:
        raise ValidationFieldError.required("type", "connection detail type is required")
    if detail.type not in set(ConnectionDetailType):
        raise ValidationFieldError.invalid("type", detail.type, "unknown connection detail type")
    if not detail.name:
        raise ValidationFieldError.required("name", "name is required")
    match ConnectionDetailType(detail.type):
        case ConnectionDetailType.FROM_VALUE:
            if detail.value is None:
                raise ValidationFieldError.required(
                    "value", "value connection detail requires a value"
                )
        case ConnectionDetailType.FROM_CONNECTION_SECRET_KEY:
            if detail.from_connection_secret_key is None:
                raise ValidationFieldError.required(
                    "fromConnectionSecretKey",
                    "from connection secret key connection detail requires a key",
                )
        case ConnectionDetailType.FROM_FIELD_PATH:
            if detail.from_field_path is None:
                raise ValidationFieldError.required(
                    "fromFieldPath", "from field path connection detail requires a field path"
                )


def _check_regexp(field: str, pattern: str) -> None:
    try:
        re.compile(pattern)
    except re.error:
        raise ValidationFieldError.invalid(field, pattern, "invalid regexp") from None
