"""Pattern-matching transform: the first matching pattern picks the result."""

from __future__ import annotations

import copy
import re
from typing import TYPE_CHECKING

from patchform.domain.errors import TransformError
from patchform.domain.values import describe_type
from patchform.schema import MatchFallbackTo, MatchPatternType

if TYPE_CHECKING:
    from patchform.domain.values import Value
    from patchform.schema import MatchTransform, MatchTransformPattern


def resolve_match(transform: MatchTransform, value: Value) -> Value:
    """Return the result of the first pattern matching ``value``.

    Without a match the fallback value is returned, or the input itself when
    ``fallbackTo`` is ``Input``. Declaring both is an error.
    """

    for index, pattern in enumerate(transform.patterns):
        try:
            matched = matches(pattern, value)
        except TransformError as exc:
            raise TransformError(f"cannot match pattern at index {index}: {exc}") from exc
        if matched:
            return copy.deepcopy(pattern.result)

    if transform.fallback_to is MatchFallbackTo.INPUT:
        if transform.fallback_value is not None:
            raise TransformError("cannot set both a fallback value and the fallback to input flag")
        return value
    return copy.deepcopy(transform.fallback_value)


def matches(pattern: MatchTransformPattern, value: Value) -> bool:
    match pattern.type:
        case MatchPatternType.LITERAL:
            if pattern.literal is None:
                raise TransformError(f"literal is required by type {pattern.type}")
            return _require_string(value) == pattern.literal
        case MatchPatternType.REGEXP:
            if pattern.regexp is None:
                raise TransformError(f"regexp is required by type {pattern.type}")
            try:
                compiled = re.compile(pattern.regexp)
            except re.error as exc:
                raise TransformError(f"cannot compile regexp: {exc}") from exc
            return compiled.search(_require_string(value)) is not None
    raise TransformError(f"unsupported pattern type '{pattern.type}'")


def _require_string(value: Value) -> str:
    if not isinstance(value, str):
        raise TransformError(f"unsupported input type '{describe_type(value)}'")
    return value
