"""Field path parsing and rendering.

A field path addresses a value inside a document, for example
``spec.containers[0].image`` or ``metadata.labels[example.org/name]``.
Bracketed text is an array index when it is an unsigned integer, a
wildcard when it is ``*`` and a literal object key otherwise, which is how
keys containing dots are written.
"""

from __future__ import annotations

from dataclasses import dataclass
from functools import lru_cache
from typing import Final, TypeAlias

from patchform.domain.errors import FieldPathSyntaxError

WILDCARD_TOKEN: Final[str] = "*"


@dataclass(frozen=True, slots=True)
class Field:
    name: str

    def __str__(self) -> str:
        if any(char in self.name for char in ".[]*"):
            return f"[{self.name}]"
        return f".{self.name}"


@dataclass(frozen=True, slots=True)
class Index:
    index: int

    def __str__(self) -> str:
        return f"[{self.index}]"


@dataclass(frozen=True, slots=True)
class Wildcard:
    def __str__(self) -> str:
        return f"[{WILDCARD_TOKEN}]"


WILDCARD: Final[Wildcard] = Wildcard()

Segment: TypeAlias = "Field | Index | Wildcard"


@dataclass(frozen=True, slots=True)
class FieldPath:
    """An immutable, parsed field path."""

    segments: tuple[Segment, ...] = ()

    @classmethod
    def parse(cls, path: str) -> FieldPath:
        return _parse(path)

    def __str__(self) -> str:
        return "".join(str(segment) for segment in self.segments).removeprefix(".")

    def __len__(self) -> int:
        return len(self.segments)

    @property
    def has_wildcards(self) -> bool:
        return any(isinstance(segment, Wildcard) for segment in self.segments)

    def prefix(self, length: int) -> FieldPath:
        return FieldPath(self.segments[:length])

    def replace(self, position: int, segment: Segment) -> FieldPath:
        segments = list(self.segments)
        segments[position] = segment
        return FieldPath(tuple(segments))


def parse(path: str) -> FieldPath:
    """Parse ``path`` into a :class:`FieldPath`; the empty string addresses the root."""

    return _parse(path)


@lru_cache(maxsize=1024)
def _parse(path: str) -> FieldPath:
    segments: list[Segment] = []
    position = 0
    length = len(path)
    expect_name = True

    while position < length:
        char = path[position]
        if char == "[":
            close = path.find("]", position)
            if close == -1:
                raise FieldPathSyntaxError(
                    f"invalid field path {path!r}: unterminated '[' at position {position}"
                )
            content = path[position + 1 : close]
            if not content:
                raise FieldPathSyntaxError(
                    f"invalid field path {path!r}: empty brackets at position {position}"
                )
            segments.append(_bracket_segment(content))
            position = close + 1
            if position < length and path[position] not in ".[":
                raise FieldPathSyntaxError(
                    f"invalid field path {path!r}: unexpected {path[position]!r} "
                    f"at position {position}"
                )
            expect_name = False
            continue
        if char == "]":
            raise FieldPathSyntaxError(
                f"invalid field path {path!r}: unexpected ']' at position {position}"
            )
        if char == ".":
            if expect_name:
                raise FieldPathSyntaxError(
                    f"invalid field path {path!r}: empty field name at position {position}"
                )
            position += 1
            if position == length:
                raise FieldPathSyntaxError(
                    f"invalid field path {path!r}: trailing '.' at position {position - 1}"
                )
            expect_name = True
            continue

        end = position
        while end < length and path[end] not in ".[]":
            end += 1
        name = path[position:end]
        segments.append(WILDCARD if name == WILDCARD_TOKEN else Field(name))
        position = end
        expect_name = False

    return FieldPath(tuple(segments))


def _bracket_segment(content: str) -> Segment:
    if content == WILDCARD_TOKEN:
        return WILDCARD
    if content.isascii() and content.isdigit():
        return Index(int(content))
    return Field(content)
