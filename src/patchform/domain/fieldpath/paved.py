"""Read, write and expand field paths against documents."""

from __future__ import annotations

from typing import TYPE_CHECKING, TypeAlias

from patchform.domain.errors import (
    FieldPathError,
    FieldPathNotFoundError,
    FieldPathTypeError,
)

from .merge import merge_values
from .segments import Field, FieldPath, Index, Wildcard, parse

if TYPE_CHECKING:
    from patchform.domain.values import Document, Value

    from .merge import MergeOptions

PathLike: TypeAlias = "str | FieldPath"


def as_path(path: PathLike) -> FieldPath:
    return path if isinstance(path, FieldPath) else parse(path)


def get_value(document: Document, path: PathLike) -> Value:
    """Return the value at ``path``.

    Raises :class:`FieldPathNotFoundError` when a key or index along the way
    is absent and :class:`FieldPathTypeError` when the document has the wrong
    shape, e.g. when indexing into a string.
    """

    field_path = as_path(path)
    node: Value = document
    for position, segment in enumerate(field_path.segments):
        match segment:
            case Index(index=index):
                if node is None:
                    raise FieldPathNotFoundError(
                        f"{field_path.prefix(position + 1)}: no such element"
                    )
                if not isinstance(node, list):
                    raise FieldPathTypeError(f"{field_path.prefix(position)}: not an array")
                if index >= len(node):
                    raise FieldPathNotFoundError(
                        f"{field_path.prefix(position + 1)}: no such element"
                    )
                node = node[index]
            case Field(name=name):
                if node is None:
                    raise FieldPathNotFoundError(
                        f"{field_path.prefix(position + 1)}: no such field"
                    )
                if not isinstance(node, dict):
                    raise FieldPathTypeError(f"{field_path.prefix(position)}: not an object")
                if name not in node:
                    raise FieldPathNotFoundError(
                        f"{field_path.prefix(position + 1)}: no such field"
                    )
                node = node[name]
            case Wildcard():
                raise FieldPathError(f"{field_path}: cannot read a value through a wildcard")
    return node


def get_string(document: Document, path: PathLike) -> str:
    value = get_value(document, path)
    if not isinstance(value, str):
        raise FieldPathTypeError(f"{as_path(path)}: not a string")
    return value


def get_bool(document: Document, path: PathLike) -> bool:
    value = get_value(document, path)
    if not isinstance(value, bool):
        raise FieldPathTypeError(f"{as_path(path)}: not a bool")
    return value


def get_integer(document: Document, path: PathLike) -> int:
    """Return an integer, accepting integral floats as decoded from wire JSON."""

    value = get_value(document, path)
    if isinstance(value, bool):
        raise FieldPathTypeError(f"{as_path(path)}: not a (int64) number")
    if isinstance(value, float) and value.is_integer():
        return int(value)
    if not isinstance(value, int):
        raise FieldPathTypeError(f"{as_path(path)}: not a (int64) number")
    return value


def set_value(document: Document, path: PathLike, value: Value) -> None:
    """Write ``value`` at ``path``, creating intermediate objects and arrays.

    Arrays grown to reach an index are padded with ``None``.
    """

    field_path = as_path(path)
    if not field_path.segments:
        raise FieldPathError("cannot set a value at an empty field path")
    _set(document, field_path, 0, value)


def _set(node: Value, field_path: FieldPath, position: int, value: Value) -> Value:
    segment = field_path.segments[position]
    final = position == len(field_path) - 1
    match segment:
        case Index(index=index):
            if node is None:
                node = []
            if not isinstance(node, list):
                raise FieldPathTypeError(f"{field_path.prefix(position)}: not an array")
            if index >= len(node):
                node.extend([None] * (index + 1 - len(node)))
            node[index] = value if final else _set(node[index], field_path, position + 1, value)
        case Field(name=name):
            if node is None:
                node = {}
            if not isinstance(node, dict):
                raise FieldPathTypeError(f"{field_path.prefix(position)}: not an object")
            child = node.get(name)
            node[name] = value if final else _set(child, field_path, position + 1, value)
        case Wildcard():
            raise FieldPathError(f"{field_path}: cannot set a value through a wildcard")
    return node


def merge_value(
    document: Document,
    path: PathLike,
    value: Value,
    options: MergeOptions | None = None,
) -> None:
    """Write ``value`` at ``path``, merging it into the existing value when options are given."""

    field_path = as_path(path)
    if options is None:
        set_value(document, field_path, value)
        return
    try:
        current = get_value(document, field_path)
    except FieldPathNotFoundError:
        current = None
    set_value(document, field_path, merge_values(current, value, options))


def expand_wildcards(document: Document, path: PathLike) -> list[FieldPath]:
    """Expand every wildcard in ``path`` against ``document``.

    Array wildcards expand to each index and object wildcards to each key,
    in document order. Only paths that exist in full are returned, so an
    absent prefix (or leaf) yields an empty list. A wildcard over a scalar
    raises :class:`FieldPathTypeError`.
    """

    return _expand(document, as_path(path))


def _expand(document: Document, field_path: FieldPath) -> list[FieldPath]:
    for position, segment in enumerate(field_path.segments):
        if not isinstance(segment, Wildcard):
            continue
        try:
            node = get_value(document, field_path.prefix(position))
        except FieldPathNotFoundError:
            return []
        if isinstance(node, list):
            candidates: list[Field | Index] = [Index(index) for index in range(len(node))]
        elif isinstance(node, dict):
            candidates = [Field(key) for key in node]
        else:
            raise FieldPathTypeError(f"{field_path}: unexpected wildcard usage")
        expanded: list[FieldPath] = []
        for candidate in candidates:
            expanded.extend(_expand(document, field_path.replace(position, candidate)))
        return expanded

    try:
        get_value(document, field_path)
    except FieldPathNotFoundError:
        return []
    return [field_path]
