from __future__ import annotations

import copy
from typing import TYPE_CHECKING

import pytest

from patchform.domain.state import Resource, RunRequest, State

if TYPE_CHECKING:
    from collections.abc import Callable

    from patchform.domain.values import Document, Value


@pytest.fixture
def observed_composite() -> Document:
    return {
        "apiVersion": "example.org/v1",
        "kind": "XBucket",
        "metadata": {"name": "my-xr"},
        "spec": {
            "region": "us-east-1",
            "widgets": "10",
            "labels": {"team": "platform"},
        },
    }


@pytest.fixture
def bucket_base() -> Document:
    return {
        "apiVersion": "s3.example.org/v1",
        "kind": "Bucket",
        "spec": {"forProvider": {"acl": "private"}},
    }


@pytest.fixture
def make_request(observed_composite: Document) -> Callable[..., RunRequest]:
    def factory(
        input_document: dict[str, Value],
        *,
        observed_resources: dict[str, Resource] | None = None,
        desired: State | None = None,
        context: dict[str, Value] | None = None,
    ) -> RunRequest:
        return RunRequest(
            tag="test",
            input=input_document,
            observed=State(
                composite=Resource(resource=copy.deepcopy(observed_composite)),
                resources=observed_resources or {},
            ),
            desired=desired or State(),
            context=context or {},
        )

    return factory
