"""Error hierarchy raised by the resolution engine.

Messages compose the way nested failures read in logs: an outer error
prefixes its own context to the inner message (``outer: inner``), and the
original exception stays reachable through ``__cause__``.
"""

from __future__ import annotations

from enum import StrEnum
from typing import TYPE_CHECKING

if TYPE_CHECKING:
    from .values import Value


class PatchformError(RuntimeError):
    """Base class for every error raised while resolving patches."""


class FieldPathError(PatchformError):
    """Raised when a field path cannot be parsed or evaluated."""


class FieldPathSyntaxError(FieldPathError):
    """Raised when a field path string is malformed."""


class FieldPathNotFoundError(FieldPathError):
    """Raised when a field path does not resolve to a value."""


class FieldPathTypeError(FieldPathError):
    """Raised when a document has the wrong shape for a field path."""


class TransformError(PatchformError):
    """Raised when a transform cannot produce an output."""


class CombineError(PatchformError):
    """Raised when combine variables cannot be merged into one value."""


class PatchError(PatchformError):
    """Raised when a patch cannot be applied."""


class PatchSetError(PatchformError):
    """Raised when patch set references cannot be expanded."""


class ReadinessCheckError(PatchformError):
    """Raised when a readiness check cannot be evaluated."""


class ConnectionDetailError(PatchformError):
    """Raised when connection details cannot be extracted."""


class ConditionError(PatchformError):
    """Raised when a gating condition cannot be evaluated."""


class FieldErrorType(StrEnum):
    REQUIRED = "Required value"
    INVALID = "Invalid value"


class ValidationFieldError(PatchformError):
    """A configuration problem anchored at a field of the input document.

    Rendered like Kubernetes field errors, e.g.
    ``resources[0].patches[1].combine.variables: Required value: at least one
    variable must be provided``.
    """

    def __init__(
        self,
        type: FieldErrorType,  # noqa: A002
        field: str,
        detail: str,
        bad_value: Value = None,
    ) -> None:
        self.type = type
        self.field = field
        self.detail = detail
        self.bad_value = bad_value
        super().__init__(self._render())

    def _render(self) -> str:
        if self.type is FieldErrorType.INVALID:
            body = f"{self.type}: {_quote(self.bad_value)}"
        else:
            body = str(self.type)
        if self.detail:
            body = f"{body}: {self.detail}"
        return f"{self.field}: {body}"

    def within(self, parent: str) -> ValidationFieldError:
        """Return a copy anchored below ``parent`` (``parent.field`` or ``parent[0]``)."""

        field = self.field if self.field.startswith("[") else f".{self.field}"
        return ValidationFieldError(self.type, f"{parent}{field}", self.detail, self.bad_value)

    @classmethod
    def required(cls, field: str, detail: str) -> ValidationFieldError:
        return cls(FieldErrorType.REQUIRED, field, detail)

    @classmethod
    def invalid(cls, field: str, value: Value, detail: str) -> ValidationFieldError:
        return cls(FieldErrorType.INVALID, field, detail, value)


def _quote(value: Value) -> str:
    if isinstance(value, str):
        return f'"{value}"'
    if value is None:
        return "null"
    if isinstance(value, bool):
        return "true" if value else "false"
    return str(value)
