from __future__ import annotations

import pytest

from patchform.domain.errors import TransformError
from patchform.domain.transforms import resolve, resolve_transforms
from patchform.schema import Transform


def _transforms(*configs: dict[str, object]) -> list[Transform]:
    return [Transform.model_validate(config) for config in configs]


def test_resolve_transforms_chains_outputs() -> None:
    transforms = _transforms(
        {"type": "convert", "convert": {"toType": "int64"}},
        {"type": "math", "math": {"multiply": 3}},
    )

    assert resolve_transforms(transforms, "10") == 30


def test_resolve_transforms_without_transforms_returns_input() -> None:
    assert resolve_transforms([], {"a": 1}) == {"a": 1}


def test_resolve_transforms_wraps_errors_with_index() -> None:
    transforms = _transforms(
        {"type": "string", "string": {"type": "Convert", "convert": "ToUpper"}},
        {"type": "map", "map": {"A": "b"}},
    )

    with pytest.raises(TransformError) as exc:
        resolve_transforms(transforms, "x")

    assert str(exc.value) == "transform at index 1 returned error: key X is not found in map"


def test_resolve_requires_configuration_for_type() -> None:
    with pytest.raises(TransformError) as exc:
        resolve(Transform.model_validate({"type": "math"}), 1)

    assert str(exc.value) == "given transform type math requires configuration"


def test_resolve_dispatches_match_transform() -> None:
    transform = Transform.model_validate(
        {"type": "match", "match": {"patterns": [{"literal": "a", "result": "b"}]}}
    )

    assert resolve(transform, "a") == "b"
