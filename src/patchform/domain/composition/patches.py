"""Apply individual patches between documents.

A patch reads a value from a source document, runs it through its
transforms and writes the result into a target document. Which documents
play source and target depends on the patch type:

* composed resources receive values from the observed composite
  (``FromCompositeFieldPath``, ``CombineFromComposite``) or from the
  environment (``FromEnvironmentFieldPath``, ``CombineFromEnvironment``);
* composed resources send values from their observed state to the desired
  composite (``ToCompositeFieldPath``, ``CombineToComposite``) or to the
  environment (``ToEnvironmentFieldPath``, ``CombineToEnvironment``).

Environment patches reuse the same types with the environment standing in
for the composed resource.
"""

from __future__ import annotations

import copy
import logging
from dataclasses import dataclass
from typing import TYPE_CHECKING

from patchform.domain.errors import (
    FieldPathError,
    FieldPathNotFoundError,
    PatchError,
)
from patchform.domain.fieldpath import (
    MergeOptions,
    expand_wildcards,
    get_value,
    merge_value,
    parse,
)
from patchform.domain.transforms import resolve_transforms
from patchform.domain.values import marshal_json
from patchform.schema import (
    COMBINE_PATCH_TYPES,
    FromFieldPathPolicy,
    PatchType,
    ToFieldPathPolicy,
)

from .combine import combine

if TYPE_CHECKING:
    from patchform.domain.values import Document, Value
    from patchform.schema import Patch

log = logging.getLogger(__name__)

_TO_COMPOSED_TYPES: frozenset[PatchType] = frozenset(
    {
        PatchType.FROM_COMPOSITE_FIELD_PATH,
        PatchType.COMBINE_FROM_COMPOSITE,
        PatchType.FROM_ENVIRONMENT_FIELD_PATH,
        PatchType.COMBINE_FROM_ENVIRONMENT,
    }
)

_MERGE_OPTIONS: dict[ToFieldPathPolicy, MergeOptions | None] = {
    ToFieldPathPolicy.REPLACE: None,
    ToFieldPathPolicy.MERGE_OBJECTS: MergeOptions(keep_map_values=True),
    ToFieldPathPolicy.MERGE_OBJECT: MergeOptions(keep_map_values=True),
    ToFieldPathPolicy.MERGE_OBJECTS_APPEND_ARRAYS: MergeOptions(
        keep_map_values=True, append_slice=True
    ),
    ToFieldPathPolicy.FORCE_MERGE_OBJECTS: MergeOptions(),
    ToFieldPathPolicy.FORCE_MERGE_OBJECTS_APPEND_ARRAYS: MergeOptions(append_slice=True),
    ToFieldPathPolicy.APPEND_ARRAY: MergeOptions(append_slice=True),
}


@dataclass(slots=True, kw_only=True)
class CompositeDocuments:
    """Documents shared by every patch of one run."""

    observed: Document
    desired: Document
    environment: Document


def merge_options_for(policy: ToFieldPathPolicy) -> MergeOptions | None:
    """Merge behaviour for a ``toFieldPath`` policy; ``None`` means replace."""

    return _MERGE_OPTIONS[policy]


def to_composed_resource(patch: Patch) -> bool:
    """Whether ``patch`` writes into the composed resource (or environment) it belongs to."""

    return patch.type in _TO_COMPOSED_TYPES


def apply_field_path_patch(patch: Patch, source: Document, target: Document) -> None:
    """Copy ``fromFieldPath`` of ``source`` to ``toFieldPath`` of ``target``.

    A missing source value is a no-op under the ``Optional`` policy and
    raises ``FieldPathNotFoundError`` under ``Required``.
    """

    try:
        value = get_value(source, patch.source_path)
    except FieldPathNotFoundError:
        if patch.from_policy is FromFieldPathPolicy.REQUIRED:
            raise
        log.debug("Skipping %s patch: %s not found", patch.type, patch.source_path)
        return
    _write(patch, target, resolve_transforms(patch.transforms, value))


def apply_combine_patch(patch: Patch, source: Document, target: Document) -> None:
    """Combine the variable values of ``source`` into ``toFieldPath`` of ``target``."""

    if patch.combine is None:
        raise PatchError(f"combine is required by type {patch.type}")
    if not patch.target_path:
        raise PatchError(f"toFieldPath is required by type {patch.type}")

    values: list[Value] = []
    for variable in patch.combine.variables:
        try:
            values.append(get_value(source, variable.from_field_path))
        except FieldPathNotFoundError:
            if patch.from_policy is FromFieldPathPolicy.REQUIRED:
                raise
            log.debug(
                "Skipping %s patch: variable %s not found", patch.type, variable.from_field_path
            )
            return

    combined = combine(patch.combine, values)
    _write(patch, target, resolve_transforms(patch.transforms, combined))


def apply_environment_patch(patch: Patch, documents: CompositeDocuments) -> None:
    """Apply an environment patch between the composite and the environment."""

    match patch.type:
        case (
            PatchType.FROM_COMPOSITE_FIELD_PATH
            | PatchType.TO_ENVIRONMENT_FIELD_PATH
            | PatchType.COMBINE_FROM_COMPOSITE
        ):
            _apply(patch, documents.observed, documents.environment)
        case (
            PatchType.TO_COMPOSITE_FIELD_PATH
            | PatchType.FROM_ENVIRONMENT_FIELD_PATH
            | PatchType.COMBINE_TO_COMPOSITE
        ):
            _apply(patch, documents.environment, documents.desired)
        case _:
            raise PatchError(f"patch type {patch.type} is not supported for environment patches")


def apply_composed_patch(
    patch: Patch,
    documents: CompositeDocuments,
    *,
    observed: Document | None,
    desired: Document,
) -> None:
    """Apply a patch declared on a composed resource template.

    Patches reading from the composed resource are skipped while it has
    not been observed yet.
    """

    if observed is None and not to_composed_resource(patch):
        log.debug("Skipping %s patch: composed resource not observed yet", patch.type)
        return

    match patch.type:
        case PatchType.FROM_COMPOSITE_FIELD_PATH | PatchType.COMBINE_FROM_COMPOSITE:
            _apply(patch, documents.observed, desired)
        case PatchType.FROM_ENVIRONMENT_FIELD_PATH | PatchType.COMBINE_FROM_ENVIRONMENT:
            _apply(patch, documents.environment, desired)
        case PatchType.TO_COMPOSITE_FIELD_PATH | PatchType.COMBINE_TO_COMPOSITE:
            if observed is not None:
                _apply(patch, observed, documents.desired)
        case PatchType.TO_ENVIRONMENT_FIELD_PATH | PatchType.COMBINE_TO_ENVIRONMENT:
            if observed is not None:
                _apply(patch, observed, documents.environment)
        case PatchType.PATCH_SET:
            pass


def _apply(patch: Patch, source: Document, target: Document) -> None:
    if patch.type in COMBINE_PATCH_TYPES:
        apply_combine_patch(patch, source, target)
    else:
        apply_field_path_patch(patch, source, target)


def _write(patch: Patch, target: Document, value: Value) -> None:
    try:
        marshal_json(value)
    except (ValueError, TypeError) as exc:
        raise PatchError(f"cannot convert value to JSON: {exc}") from exc

    options = merge_options_for(patch.to_policy)
    path = parse(patch.target_path)

    if not path.has_wildcards:
        try:
            merge_value(target, path, copy.deepcopy(value), options)
        except FieldPathError as exc:
            raise PatchError(f"cannot patch to object: {exc}") from exc
        return

    # Work on a copy so a failure part way through leaves ``target`` untouched.
    scratch = copy.deepcopy(target)
    expanded = expand_wildcards(scratch, path)
    if not expanded:
        raise PatchError(f"cannot expand ToFieldPath {patch.target_path}")
    for concrete in expanded:
        merge_value(scratch, concrete, copy.deepcopy(value), options)
    target.clear()
    target.update(scratch)
