"""Orchestrate one patch-and-transform run.

A run reads the input document, applies environment patches, renders every
composed resource template and reports readiness and connection details.
Problems that make the whole run meaningless become a single Fatal result
and leave the request's desired state untouched; problems confined to one
composed resource become Warning results and the run carries on.
"""

from __future__ import annotations

import copy
import logging
from dataclasses import dataclass, field
from typing import TYPE_CHECKING, Protocol

from pydantic import ValidationError

from patchform.config import DEFAULT_CACHE_TTL_SECONDS, DEFAULT_ENVIRONMENT_KEY
from patchform.domain.errors import (
    ConditionError,
    FieldPathNotFoundError,
    PatchformError,
    PatchSetError,
    ValidationFieldError,
)
from patchform.domain.state import Ready, Resource, Result, RunResponse, Severity
from patchform.domain.values import describe_type
from patchform.schema import Resources

from .conditions import evaluate_condition
from .connection import extract_connection_details
from .patches import (
    CompositeDocuments,
    apply_composed_patch,
    apply_environment_patch,
    to_composed_resource,
)
from .patchsets import expand_patch_sets
from .readiness import is_ready
from .validate import validate_resources

if TYPE_CHECKING:
    from collections.abc import Mapping, Sequence

    from patchform.config import EngineConfig
    from patchform.domain.state import RunRequest, State
    from patchform.domain.values import Document, Value
    from patchform.schema import ComposedTemplate, ConnectionDetail, ReadinessCheck

    from .conditions import ConditionEvaluator

log = logging.getLogger(__name__)


class ReadinessChecker(Protocol):
    def __call__(self, document: Document, checks: Sequence[ReadinessCheck]) -> bool: ...


class ConnectionDetailExtractor(Protocol):
    def __call__(
        self,
        document: Document,
        observed_details: Mapping[str, bytes],
        rules: Sequence[ConnectionDetail],
    ) -> dict[str, bytes]: ...


class _FatalError(PatchformError):
    """Ends a run with a Fatal result."""


@dataclass(slots=True, kw_only=True)
class _Run:
    request: RunRequest
    desired: State
    documents: CompositeDocuments
    variables: dict[str, Value]
    results: list[Result]
    existing: int = 0
    warnings: int = 0

    def warn(self, message: str) -> None:
        log.info("Warning: %s", message)
        self.results.append(Result(severity=Severity.WARNING, message=message))
        self.warnings += 1


@dataclass(slots=True, kw_only=True)
class CompositionEngine:
    """Render desired composed resources from a run request."""

    cache_ttl_seconds: int = DEFAULT_CACHE_TTL_SECONDS
    environment_key: str = DEFAULT_ENVIRONMENT_KEY
    condition_evaluator: ConditionEvaluator | None = None
    readiness_checker: ReadinessChecker = field(default=is_ready)
    connection_extractor: ConnectionDetailExtractor = field(default=extract_connection_details)

    def run(self, request: RunRequest) -> RunResponse:
        log.info("Running function (tag=%s)", request.tag or "<none>")
        response = RunResponse(
            tag=request.tag,
            ttl_seconds=self.cache_ttl_seconds,
            desired=copy.deepcopy(request.desired),
            context=copy.deepcopy(request.context),
        )
        try:
            rendered = self._render(request, response.results)
        except _FatalError as exc:
            log.error("Fatal: %s", exc)
            response.results.append(Result(severity=Severity.FATAL, message=str(exc)))
            return response
        if rendered is not None:
            response.desired, response.context = rendered
        return response

    def _render(
        self, request: RunRequest, results: list[Result]
    ) -> tuple[State, dict[str, Value]] | None:
        resources = _load_input(request)
        variables = condition_variables(request)
        try:
            if not evaluate_condition(resources.condition, self.condition_evaluator, variables):
                log.info("Condition evaluated to false; desired state left unchanged")
                return None
        except ConditionError as exc:
            raise _FatalError(f"cannot evaluate condition: {exc}") from exc

        desired = copy.deepcopy(request.desired)
        observed_composite = request.observed.composite.resource
        for key in ("apiVersion", "kind"):
            if key in observed_composite:
                desired.composite.resource[key] = copy.deepcopy(observed_composite[key])

        try:
            templates = expand_patch_sets(resources.patch_sets, resources.resources)
        except PatchSetError as exc:
            raise _FatalError(f"cannot resolve PatchSets: {exc}") from exc

        context = copy.deepcopy(request.context)
        run = _Run(
            request=request,
            desired=desired,
            documents=CompositeDocuments(
                observed=observed_composite,
                desired=desired.composite.resource,
                environment=self._load_environment(context),
            ),
            variables=variables,
            results=results,
        )

        environment_patches = resources.environment.patches if resources.environment else []
        for index, patch in enumerate(environment_patches):
            try:
                apply_environment_patch(patch, run.documents)
            except PatchformError as exc:
                raise _FatalError(
                    f'cannot apply the "{patch.type}" environment patch at index {index}: {exc}'
                ) from exc

        for template in templates:
            self._render_template(template, run)

        context[self.environment_key] = run.documents.environment
        log.info(
            "Successfully processed patch-and-transform resources "
            "(resource-templates=%d, existing-resources=%d, warnings=%d)",
            len(templates),
            run.existing,
            run.warnings,
        )
        return desired, context

    def _load_environment(self, context: dict[str, Value]) -> Document:
        environment = context.get(self.environment_key)
        if environment is None:
            return {}
        if not isinstance(environment, dict):
            raise _FatalError(
                f"cannot get environment from context key {self.environment_key}: "
                f"expected an object, got {describe_type(environment)}"
            )
        return environment

    def _render_template(self, template: ComposedTemplate, run: _Run) -> None:
        name = template.name
        try:
            wanted = evaluate_condition(template.condition, self.condition_evaluator, run.variables)
        except ConditionError as exc:
            raise _FatalError(
                f'cannot evaluate condition of composed resource "{name}": {exc}'
            ) from exc
        if not wanted:
            log.debug("Skipping composed resource %s: condition evaluated to false", name)
            return

        observed = run.request.observed.resources.get(name)
        document = _materialize(template, run.desired.resources.get(name))
        if observed is not None:
            run.existing += 1
            _copy_identity(observed.resource, document)

        ordered = sorted(
            enumerate(template.patches),
            key=lambda item: not to_composed_resource(item[1]),
        )
        for index, patch in ordered:
            try:
                apply_composed_patch(
                    patch,
                    run.documents,
                    observed=observed.resource if observed is not None else None,
                    desired=document,
                )
            except FieldPathNotFoundError as exc:
                if observed is None:
                    run.warn(
                        f'not adding new composed resource "{name}" to desired state because '
                        f"\"{patch.type}\" patch at index {index} has "
                        f"'policy.fromFieldPath: Required': {exc}"
                    )
                    return
                run.warn(
                    f'cannot render composed resource "{name}" "{patch.type}" patch at index '
                    f"{index}: ignoring 'policy.fromFieldPath: Required' because 'to' resource "
                    f"already exists: {exc}"
                )
            except PatchformError as exc:
                raise _FatalError(
                    f'cannot render composed resource "{name}" "{patch.type}" patch at index '
                    f"{index}: {exc}"
                ) from exc

        rendered = Resource(resource=document)
        if observed is not None:
            self._observe(template, observed, rendered, run)
        run.desired.resources[name] = rendered
        log.debug("Rendered composed resource %s (existing=%s)", name, observed is not None)

    def _observe(
        self, template: ComposedTemplate, observed: Resource, rendered: Resource, run: _Run
    ) -> None:
        name = template.name
        try:
            details = self.connection_extractor(
                observed.resource, observed.connection_details, template.connection_details
            )
        except PatchformError as exc:
            run.warn(
                "cannot extract composite resource connection details from composed "
                f'resource "{name}": {exc}'
            )
        else:
            run.desired.composite.connection_details.update(details)

        try:
            ready = self.readiness_checker(observed.resource, template.readiness_checks)
        except PatchformError as exc:
            run.warn(f'cannot check readiness of composed resource "{name}": {exc}')
            ready = False
        if ready:
            rendered.ready = Ready.TRUE


def compose(
    request: RunRequest,
    *,
    config: EngineConfig | None = None,
    condition_evaluator: ConditionEvaluator | None = None,
) -> RunResponse:
    """Run one request with an engine configured from ``config``."""

    if config is None:
        engine = CompositionEngine(condition_evaluator=condition_evaluator)
    else:
        engine = CompositionEngine(
            cache_ttl_seconds=config.cache_ttl_seconds,
            environment_key=config.environment_context_key,
            condition_evaluator=condition_evaluator,
        )
    return engine.run(request)


def condition_variables(request: RunRequest) -> dict[str, Value]:
    """Variables visible to gating expressions."""

    return {
        "observed": _state_variables(request.observed),
        "desired": _state_variables(request.desired),
    }


def _state_variables(state: State) -> dict[str, Value]:
    return {
        "composite": {"resource": copy.deepcopy(state.composite.resource)},
        "resources": {
            name: {"resource": copy.deepcopy(resource.resource)}
            for name, resource in state.resources.items()
        },
    }


def _load_input(request: RunRequest) -> Resources:
    try:
        resources = Resources.model_validate(request.input or {})
    except ValidationError as exc:
        raise _FatalError(f"cannot get Function input: {exc}") from exc
    try:
        validate_resources(resources)
    except ValidationFieldError as exc:
        raise _FatalError(f"invalid Function input: {exc}") from exc
    return resources


def _materialize(template: ComposedTemplate, prior: Resource | None) -> Document:
    if template.base is not None:
        return copy.deepcopy(template.base)
    if prior is not None:
        return copy.deepcopy(prior.resource)
    raise _FatalError(
        f'composed resource "{template.name}" has no base template, and was not produced '
        "by a previous Function in the pipeline"
    )


def _copy_identity(observed: Document, document: Document) -> None:
    """Carry the observed name and namespace over; drop them when the observed value is empty."""

    observed_metadata = observed.get("metadata")
    for key in ("name", "namespace"):
        value = observed_metadata.get(key) if isinstance(observed_metadata, dict) else None
        metadata = document.get("metadata")
        if value:
            if not isinstance(metadata, dict):
                metadata = {}
                document["metadata"] = metadata
            metadata[key] = value
        elif isinstance(metadata, dict):
            metadata.pop(key, None)
