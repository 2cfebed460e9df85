from __future__ import annotations

from typing import Any

import pytest

from patchform.domain.composition import validate_resources
from patchform.domain.errors import ValidationFieldError
from patchform.schema import Resources


def _resources(**config: Any) -> Resources:
    return Resources.model_validate(config)


def _template(*patches: dict[str, Any], **extra: Any) -> dict[str, Any]:
    return {"name": "bucket", "base": {"kind": "Bucket"}, "patches": list(patches), **extra}


def _error(resources: Resources) -> str:
    with pytest.raises(ValidationFieldError) as exc:
        validate_resources(resources)
    return str(exc.value)


def test_valid_resources_pass() -> None:
    resources = _resources(
        patchSets=[{"name": "common", "patches": [{"fromFieldPath": "spec.region"}]}],
        resources=[
            _template(
                {"type": "PatchSet", "patchSetName": "common"},
                {
                    "fromFieldPath": "spec.size",
                    "transforms": [
                        {"type": "map", "map": {"small": "t3.small"}},
                        {"type": "string", "string": {"type": "Format", "fmt": "%s"}},
                    ],
                },
                readinessChecks=[{"type": "MatchCondition"}],
                connectionDetails=[{"name": "user", "type": "FromValue", "value": "admin"}],
            )
        ],
    )

    validate_resources(resources)


def test_environment_patches_alone_are_valid() -> None:
    validate_resources(
        _resources(environment={"patches": [{"fromFieldPath": "spec.region", "toFieldPath": "r"}]})
    )


def test_resources_or_environment_patches_are_required() -> None:
    assert _error(_resources()) == (
        "resources: Required value: resources or environment patches are required"
    )


def test_template_name_is_required() -> None:
    assert _error(_resources(resources=[{"base": {}}])) == (
        "resources[0].name: Required value: name is required"
    )


def test_field_path_patch_requires_source() -> None:
    assert _error(_resources(resources=[_template({"toFieldPath": "spec.x"})])) == (
        "resources[0].patches[0].fromFieldPath: Required value: "
        "fromFieldPath must be set for patch type FromCompositeFieldPath"
    )


def test_combine_requires_variables() -> None:
    patch = {
        "type": "CombineFromComposite",
        "toFieldPath": "metadata.name",
        "combine": {"strategy": "string", "string": {"fmt": "%s"}},
    }

    assert _error(_resources(resources=[_template(patch)])) == (
        "resources[0].patches[0].combine.variables: Required value: "
        "at least one variable must be provided"
    )


def test_combine_requires_known_strategy() -> None:
    patch = {
        "type": "CombineFromComposite",
        "toFieldPath": "metadata.name",
        "combine": {"strategy": "concat", "variables": [{"fromFieldPath": "a"}]},
    }

    assert _error(_resources(resources=[_template(patch)])) == (
        'resources[0].patches[0].combine.strategy: Invalid value: "concat": unknown strategy type'
    )


def test_math_transform_requires_operand() -> None:
    patch = {"fromFieldPath": "spec.size", "transforms": [{"type": "math", "math": {}}]}

    assert _error(_resources(resources=[_template(patch)])) == (
        "resources[0].patches[0].transforms[0].math.multiply: Required value: "
        "must specify a value if a multiply math transform is specified"
    )


def test_map_transform_requires_pairs() -> None:
    patch = {"fromFieldPath": "spec.size", "transforms": [{"type": "map", "map": {}}]}

    assert _error(_resources(resources=[_template(patch)])) == (
        "resources[0].patches[0].transforms[0].map.pairs: Required value: "
        "at least one pair must be specified if a map transform is specified"
    )


def test_transform_requires_configuration() -> None:
    patch = {"fromFieldPath": "spec.size", "transforms": [{"type": "match"}]}

    assert _error(_resources(resources=[_template(patch)])) == (
        "resources[0].patches[0].transforms[0].match: Required value: "
        "given transform type match requires configuration"
    )


def test_string_regexp_must_compile() -> None:
    patch = {
        "fromFieldPath": "spec.size",
        "transforms": [
            {"type": "string", "string": {"type": "Regexp", "regexp": {"match": "[a-z"}}}
        ],
    }

    assert _error(_resources(resources=[_template(patch)])) == (
        "resources[0].patches[0].transforms[0].string.regexp.match: "
        'Invalid value: "[a-z": invalid regexp'
    )


def test_convert_format_must_be_known() -> None:
    patch = {
        "fromFieldPath": "spec.size",
        "transforms": [{"type": "convert", "convert": {"toType": "string", "format": "yaml"}}],
    }

    assert _error(_resources(resources=[_template(patch)])) == (
        'resources[0].patches[0].transforms[0].convert.format: Invalid value: "yaml": '
        "invalid format"
    )


def test_transforms_of_combine_patches_are_checked() -> None:
    patch = {
        "type": "CombineFromComposite",
        "toFieldPath": "metadata.name",
        "combine": {
            "strategy": "string",
            "variables": [{"fromFieldPath": "a"}],
            "string": {"fmt": "%s"},
        },
        "transforms": [{"type": "math", "math": {"type": "ClampMin"}}],
    }

    assert _error(_resources(resources=[_template(patch)])) == (
        "resources[0].patches[0].transforms[0].math.clampMin: Required value: "
        "must specify a value if a clamp min math transform is specified"
    )


def test_environment_patch_type_is_checked() -> None:
    environment = {
        "patches": [
            {
                "type": "CombineToEnvironment",
                "toFieldPath": "x",
                "combine": {"strategy": "string", "variables": [{"fromFieldPath": "a"}]},
            }
        ]
    }

    assert _error(_resources(environment=environment)) == (
        'environment.patches[0].type: Invalid value: "CombineToEnvironment": '
        "invalid environment patch type"
    )


def test_patch_set_name_is_required() -> None:
    resources = _resources(
        patchSets=[{"patches": []}],
        resources=[_template()],
    )

    assert _error(resources) == "patchSets[0].name: Required value: name is required"


def test_readiness_check_field_path_is_required() -> None:
    template = _template(readinessChecks=[{"type": "NonEmpty"}])

    assert _error(_resources(resources=[template])) == (
        "resources[0].readinessChecks[0].fieldPath: Required value: cannot be empty"
    )


def test_connection_detail_type_is_checked() -> None:
    template = _template(connectionDetails=[{"name": "user", "type": "FromSecret"}])

    assert _error(_resources(resources=[template])) == (
        'resources[0].connectionDetails[0].type: Invalid value: "FromSecret": '
        "unknown connection detail type"
    )


def test_condition_expression_is_required() -> None:
    resources = _resources(condition={"expression": ""}, resources=[_template()])

    assert _error(resources) == "condition.expression: Required value: expression is required"
