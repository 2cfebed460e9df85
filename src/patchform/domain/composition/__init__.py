"""Patch resolution, readiness and connection details for composed resources."""

from __future__ import annotations

from .combine import combine
from .conditions import ConditionEvaluator, evaluate_condition
from .connection import extract_connection_details
from .engine import (
    CompositionEngine,
    ConnectionDetailExtractor,
    ReadinessChecker,
    compose,
    condition_variables,
)
from .patches import (
    CompositeDocuments,
    apply_combine_patch,
    apply_composed_patch,
    apply_environment_patch,
    apply_field_path_patch,
    merge_options_for,
    to_composed_resource,
)
from .patchsets import expand_patch_sets
from .readiness import condition_status, is_ready, run_readiness_check
from .validate import validate_resources

__all__ = [
    "CompositeDocuments",
    "CompositionEngine",
    "ConditionEvaluator",
    "ConnectionDetailExtractor",
    "ReadinessChecker",
    "apply_combine_patch",
    "apply_composed_patch",
    "apply_environment_patch",
    "apply_field_path_patch",
    "combine",
    "compose",
    "condition_status",
    "condition_variables",
    "evaluate_condition",
    "expand_patch_sets",
    "extract_connection_details",
    "is_ready",
    "merge_options_for",
    "run_readiness_check",
    "to_composed_resource",
    "validate_resources",
]
