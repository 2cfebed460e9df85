"""Inline named patch sets into the templates that reference them."""

from __future__ import annotations

from typing import TYPE_CHECKING

from patchform.domain.errors import PatchSetError
from patchform.schema import PatchType

if TYPE_CHECKING:
    from collections.abc import Sequence

    from patchform.schema import ComposedTemplate, Patch, PatchSet


def expand_patch_sets(
    patch_sets: Sequence[PatchSet],
    templates: Sequence[ComposedTemplate],
) -> list[ComposedTemplate]:
    """Return copies of ``templates`` with every ``PatchSet`` patch replaced in place.

    The patches of the referenced set are spliced in at the position of the
    reference, preserving their order. Patch sets may not nest.
    """

    by_name: dict[str, list[Patch]] = {}
    for patch_set in patch_sets:
        if any(patch.type is PatchType.PATCH_SET for patch in patch_set.patches):
            raise PatchSetError("a patch in a PatchSet cannot be of type PatchSet")
        by_name[patch_set.name] = list(patch_set.patches)

    expanded: list[ComposedTemplate] = []
    for template in templates:
        patches: list[Patch] = []
        for patch in template.patches:
            if patch.type is not PatchType.PATCH_SET:
                patches.append(patch)
                continue
            if not patch.patch_set_name:
                raise PatchSetError(f"patchSetName is required by type {patch.type}")
            try:
                patches.extend(by_name[patch.patch_set_name])
            except KeyError:
                raise PatchSetError(
                    f"cannot find PatchSet by name {patch.patch_set_name}"
                ) from None
        expanded.append(template.model_copy(update={"patches": patches}))
    return expanded
