"""Readiness checks evaluated against observed composed resources."""

from __future__ import annotations

import logging
from typing import TYPE_CHECKING, Final

from patchform.domain.errors import (
    FieldPathNotFoundError,
    PatchformError,
    ReadinessCheckError,
    ValidationFieldError,
)
from patchform.domain.fieldpath import get_bool, get_integer, get_string, get_value
from patchform.schema import MatchConditionReadinessCheck, ReadinessCheckType

from .validate import validate_readiness_check

if TYPE_CHECKING:
    from collections.abc import Sequence

    from patchform.domain.values import Document
    from patchform.schema import ReadinessCheck

log = logging.getLogger(__name__)

CONDITION_READY: Final[str] = "Ready"
STATUS_TRUE: Final[str] = "True"
STATUS_UNKNOWN: Final[str] = "Unknown"


def condition_status(document: Document, condition_type: str) -> str:
    """Status of the ``status.conditions`` entry of ``condition_type``, ``Unknown`` if absent."""

    status = document.get("status")
    conditions = status.get("conditions") if isinstance(status, dict) else None
    if not isinstance(conditions, list):
        return STATUS_UNKNOWN
    for condition in conditions:
        if isinstance(condition, dict) and condition.get("type") == condition_type:
            value = condition.get("status")
            return value if isinstance(value, str) else STATUS_UNKNOWN
    return STATUS_UNKNOWN


def is_ready(document: Document, checks: Sequence[ReadinessCheck]) -> bool:
    """Whether ``document`` passes every check.

    Without checks a resource is ready when its ``Ready`` condition is ``True``.
    """

    if not checks:
        return condition_status(document, CONDITION_READY) == STATUS_TRUE
    for index, check in enumerate(checks):
        try:
            ready = run_readiness_check(check, document)
        except PatchformError as exc:
            raise ReadinessCheckError(
                f"cannot run readiness check at index {index}: {exc}"
            ) from exc
        if not ready:
            log.debug("Readiness check %d (%s) not satisfied", index, check.type)
            return False
    return True


def run_readiness_check(check: ReadinessCheck, document: Document) -> bool:
    try:
        validate_readiness_check(check)
    except ValidationFieldError as exc:
        raise ReadinessCheckError(f"invalid: {exc}") from exc

    path = check.field_path or ""
    try:
        match ReadinessCheckType(check.type):
            case ReadinessCheckType.NONE:
                return True
            case ReadinessCheckType.NON_EMPTY:
                get_value(document, path)
                return True
            case ReadinessCheckType.MATCH_STRING:
                return get_string(document, path) == check.match_string
            case ReadinessCheckType.MATCH_INTEGER:
                return get_integer(document, path) == check.match_integer
            case ReadinessCheckType.MATCH_TRUE:
                return get_bool(document, path) is True
            case ReadinessCheckType.MATCH_FALSE:
                return get_bool(document, path) is False
            case ReadinessCheckType.MATCH_CONDITION:
                expected = check.match_condition or MatchConditionReadinessCheck()
                return condition_status(document, expected.type) == expected.status
    except FieldPathNotFoundError:
        return False
    return False
