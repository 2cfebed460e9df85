"""Run state exchanged with the orchestrator: observed and desired documents, results."""

from __future__ import annotations

from dataclasses import dataclass, field
from enum import StrEnum
from typing import TYPE_CHECKING

if TYPE_CHECKING:
    from .values import Document, Value


class Severity(StrEnum):
    FATAL = "SEVERITY_FATAL"
    WARNING = "SEVERITY_WARNING"
    NORMAL = "SEVERITY_NORMAL"


class Ready(StrEnum):
    UNSPECIFIED = "READY_UNSPECIFIED"
    TRUE = "READY_TRUE"
    FALSE = "READY_FALSE"


@dataclass(slots=True, kw_only=True)
class Resource:
    """A document plus the connection details and readiness reported alongside it."""

    resource: Document = field(default_factory=dict)
    connection_details: dict[str, bytes] = field(default_factory=dict)
    ready: Ready = Ready.UNSPECIFIED


@dataclass(slots=True, kw_only=True)
class State:
    composite: Resource = field(default_factory=Resource)
    resources: dict[str, Resource] = field(default_factory=dict)


@dataclass(slots=True, kw_only=True)
class Result:
    severity: Severity
    message: str


@dataclass(slots=True, kw_only=True)
class RunRequest:
    tag: str = ""
    input: dict[str, Value] | None = None
    observed: State = field(default_factory=State)
    desired: State = field(default_factory=State)
    context: dict[str, Value] = field(default_factory=dict)


@dataclass(slots=True, kw_only=True)
class RunResponse:
    tag: str = ""
    ttl_seconds: int
    desired: State
    context: dict[str, Value] = field(default_factory=dict)
    results: list[Result] = field(default_factory=list["Result"])

    @property
    def fatal(self) -> bool:
        return any(result.severity is Severity.FATAL for result in self.results)
