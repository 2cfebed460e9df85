"""Translate function envelopes to and from the domain run state."""

from __future__ import annotations

import base64
from logging import getLogger
from typing import TYPE_CHECKING

from patchform.domain.state import Ready, Resource, RunRequest, State

from .schema import (
    RequestMeta,
    ResourcePayload,
    ResponseMeta,
    ResultPayload,
    RunFunctionRequest,
    RunFunctionResponse,
    StatePayload,
)

if TYPE_CHECKING:
    from collections.abc import Mapping

    from patchform.domain.state import RunResponse

log = getLogger(__name__)


def parse_request(payload: RunFunctionRequest | Mapping[str, object]) -> RunRequest:
    """Build a :class:`RunRequest` from a request envelope or its decoded JSON."""

    if not isinstance(payload, RunFunctionRequest):
        payload = RunFunctionRequest.model_validate(payload)
    meta = payload.meta or RequestMeta()
    request = RunRequest(
        tag=meta.tag,
        input=dict(payload.input) if payload.input is not None else None,
        observed=_state_from_payload(payload.observed),
        desired=_state_from_payload(payload.desired),
        context=dict(payload.context or {}),
    )
    log.debug(
        "Parsed request (tag=%s, observed=%d, desired=%d)",
        request.tag or "<none>",
        len(request.observed.resources),
        len(request.desired.resources),
    )
    return request


def build_response(response: RunResponse) -> RunFunctionResponse:
    return RunFunctionResponse(
        meta=ResponseMeta(tag=response.tag, ttl=f"{response.ttl_seconds}s"),
        desired=_state_to_payload(response.desired),
        context=dict(response.context) or None,
        results=[
            ResultPayload(severity=str(result.severity), message=result.message)
            for result in response.results
        ],
    )


def _state_from_payload(payload: StatePayload | None) -> State:
    if payload is None:
        return State()
    return State(
        composite=_resource_from_payload(payload.composite),
        resources={
            name: _resource_from_payload(resource) for name, resource in payload.resources.items()
        },
    )


def _resource_from_payload(payload: ResourcePayload | None) -> Resource:
    if payload is None:
        return Resource()
    return Resource(
        resource=dict(payload.resource),
        connection_details={
            key: base64.b64decode(value, validate=True)
            for key, value in payload.connection_details.items()
        },
        ready=Ready(payload.ready) if payload.ready else Ready.UNSPECIFIED,
    )


def _state_to_payload(state: State) -> StatePayload:
    return StatePayload(
        composite=_resource_to_payload(state.composite),
        resources={
            name: _resource_to_payload(resource) for name, resource in state.resources.items()
        },
    )


def _resource_to_payload(resource: Resource) -> ResourcePayload:
    return ResourcePayload(
        resource=resource.resource,
        connection_details={
            key: base64.b64encode(value).decode("ascii")
            for key, value in resource.connection_details.items()
        },
        ready=None if resource.ready is Ready.UNSPECIFIED else str(resource.ready),
    )
