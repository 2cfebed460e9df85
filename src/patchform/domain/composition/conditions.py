"""Gate rendering on boolean expressions over the run state."""

from __future__ import annotations

from typing import TYPE_CHECKING, Protocol

from patchform.domain.errors import ConditionError
from patchform.domain.values import describe_type

if TYPE_CHECKING:
    from collections.abc import Mapping

    from patchform.domain.values import Value
    from patchform.schema import ConditionSpec


class ConditionEvaluator(Protocol):
    """Evaluates an expression against named variables.

    The engine passes ``observed`` and ``desired``, each holding the
    ``composite`` resource and the composed ``resources`` by name.
    """

    def __call__(self, expression: str, variables: Mapping[str, Value]) -> object: ...


def evaluate_condition(
    condition: ConditionSpec | None,
    evaluator: ConditionEvaluator | None,
    variables: Mapping[str, Value],
) -> bool:
    """Whether rendering should go ahead; a missing condition always passes."""

    if condition is None:
        return True
    if not condition.expression:
        return False
    if evaluator is None:
        raise ConditionError("no condition evaluator is configured")
    try:
        result = evaluator(condition.expression, variables)
    except ConditionError:
        raise
    except Exception as exc:
        raise ConditionError(f"cannot evaluate expression: {exc}") from exc
    if not isinstance(result, bool):
        raise ConditionError(
            f"expression must return a boolean, got {describe_type(result)} instead"
        )
    return result
