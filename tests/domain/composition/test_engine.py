from __future__ import annotations

import copy
from typing import TYPE_CHECKING, Any, TypeAlias

from patchform.config import DEFAULT_ENVIRONMENT_KEY, EngineConfig
from patchform.domain.composition import CompositionEngine, compose, condition_variables
from patchform.domain.state import Ready, Resource, Result, Severity, State

if TYPE_CHECKING:
    from collections.abc import Callable, Mapping

    from patchform.domain.state import RunRequest
    from patchform.domain.values import Document, Value

    MakeRequest: TypeAlias = "Callable[..., RunRequest]"

REGION_PATCH: dict[str, Any] = {
    "fromFieldPath": "spec.region",
    "toFieldPath": "spec.forProvider.region",
}


def _input(*resources: dict[str, Any], **extra: Any) -> dict[str, Any]:
    return {
        "apiVersion": "pt.fn.crossplane.io/v1beta1",
        "kind": "Resources",
        "resources": list(resources),
        **extra,
    }


def _bucket(base: Document | None, *patches: dict[str, Any], **extra: Any) -> dict[str, Any]:
    template: dict[str, Any] = {"name": "bucket", "patches": list(patches), **extra}
    if base is not None:
        template["base"] = base
    return template


def _observed_bucket(**status: Value) -> dict[str, Resource]:
    document: Document = {
        "apiVersion": "s3.example.org/v1",
        "kind": "Bucket",
        "metadata": {"name": "my-xr-bucket-abc12"},
        "status": dict(status),
    }
    return {"bucket": Resource(resource=document)}


def _evaluator(expression: str, variables: Mapping[str, Value]) -> object:
    return {"yes": True, "no": False, "maybe": "perhaps"}[expression]


def test_run_renders_composed_resources(
    make_request: MakeRequest, bucket_base: Document
) -> None:
    request = make_request(_input(_bucket(bucket_base, REGION_PATCH)))

    response = CompositionEngine().run(request)

    assert response.results == []
    assert response.tag == "test"
    assert response.ttl_seconds == 60
    assert response.desired.composite.resource == {
        "apiVersion": "example.org/v1",
        "kind": "XBucket",
    }
    bucket = response.desired.resources["bucket"]
    assert bucket.resource == {
        "apiVersion": "s3.example.org/v1",
        "kind": "Bucket",
        "spec": {"forProvider": {"acl": "private", "region": "us-east-1"}},
    }
    assert bucket.ready is Ready.UNSPECIFIED
    assert response.context == {DEFAULT_ENVIRONMENT_KEY: {}}


def test_run_does_not_mutate_the_request(
    make_request: MakeRequest, bucket_base: Document
) -> None:
    request = make_request(
        _input(_bucket(bucket_base, REGION_PATCH)),
        context={DEFAULT_ENVIRONMENT_KEY: {"zone": "a"}},
    )
    snapshot = copy.deepcopy(request)

    CompositionEngine().run(request)

    assert request == snapshot


def test_run_reports_invalid_input_as_fatal(make_request: MakeRequest) -> None:
    desired = State(resources={"other": Resource(resource={"kind": "Other"})})
    request = make_request(_input({"base": {}}), desired=desired)

    response = CompositionEngine().run(request)

    assert response.results == [
        Result(
            severity=Severity.FATAL,
            message="invalid Function input: resources[0].name: Required value: name is required",
        )
    ]
    assert response.fatal
    assert response.desired == desired


def test_run_reports_unparseable_input_as_fatal(make_request: MakeRequest) -> None:
    response = CompositionEngine().run(make_request({"resources": "nope"}))

    assert len(response.results) == 1
    assert response.results[0].severity is Severity.FATAL
    assert response.results[0].message.startswith("cannot get Function input: ")


def test_required_patch_drops_new_resource_with_warning(
    make_request: MakeRequest, bucket_base: Document
) -> None:
    patch = {
        "fromFieldPath": "spec.missing",
        "toFieldPath": "spec.forProvider.x",
        "policy": {"fromFieldPath": "Required"},
    }
    request = make_request(_input(_bucket(bucket_base, REGION_PATCH, patch)))

    response = CompositionEngine().run(request)

    assert response.results == [
        Result(
            severity=Severity.WARNING,
            message=(
                'not adding new composed resource "bucket" to desired state because '
                "\"FromCompositeFieldPath\" patch at index 1 has 'policy.fromFieldPath: "
                "Required': spec.missing: no such field"
            ),
        )
    ]
    assert "bucket" not in response.desired.resources


def test_required_patch_on_existing_resource_warns_and_continues(
    make_request: MakeRequest, bucket_base: Document
) -> None:
    patch = {
        "fromFieldPath": "spec.missing",
        "toFieldPath": "spec.forProvider.x",
        "policy": {"fromFieldPath": "Required"},
    }
    request = make_request(
        _input(_bucket(bucket_base, patch, REGION_PATCH)),
        observed_resources=_observed_bucket(),
    )

    response = CompositionEngine().run(request)

    assert response.results == [
        Result(
            severity=Severity.WARNING,
            message=(
                'cannot render composed resource "bucket" "FromCompositeFieldPath" patch at '
                "index 0: ignoring 'policy.fromFieldPath: Required' because 'to' resource "
                "already exists: spec.missing: no such field"
            ),
        )
    ]
    rendered = response.desired.resources["bucket"].resource
    assert rendered["spec"] == {"forProvider": {"acl": "private", "region": "us-east-1"}}


def test_patch_sets_are_expanded(make_request: MakeRequest, bucket_base: Document) -> None:
    request = make_request(
        _input(
            _bucket(bucket_base, {"type": "PatchSet", "patchSetName": "common"}),
            patchSets=[{"name": "common", "patches": [REGION_PATCH]}],
        )
    )

    response = CompositionEngine().run(request)

    assert response.results == []
    rendered = response.desired.resources["bucket"].resource
    assert rendered["spec"] == {"forProvider": {"acl": "private", "region": "us-east-1"}}


def test_undefined_patch_set_is_fatal(make_request: MakeRequest, bucket_base: Document) -> None:
    request = make_request(
        _input(_bucket(bucket_base, {"type": "PatchSet", "patchSetName": "missing"}))
    )

    response = CompositionEngine().run(request)

    assert response.results == [
        Result(
            severity=Severity.FATAL,
            message="cannot resolve PatchSets: cannot find PatchSet by name missing",
        )
    ]
    assert response.desired == State()


def test_existing_resource_feeds_composite_and_keeps_identity(
    make_request: MakeRequest, bucket_base: Document
) -> None:
    patch = {
        "type": "ToCompositeFieldPath",
        "fromFieldPath": "status.atProvider.arn",
        "toFieldPath": "status.bucketArn",
    }
    request = make_request(
        _input(_bucket(bucket_base, patch)),
        observed_resources=_observed_bucket(atProvider={"arn": "arn:aws:s3:::bucket"}),
    )

    response = CompositionEngine().run(request)

    assert response.results == []
    assert response.desired.composite.resource["status"] == {"bucketArn": "arn:aws:s3:::bucket"}
    rendered = response.desired.resources["bucket"].resource
    assert rendered["metadata"] == {"name": "my-xr-bucket-abc12"}


def test_patches_flow_between_observed_and_desired(
    make_request: MakeRequest, bucket_base: Document
) -> None:
    to_composite = {
        "type": "ToCompositeFieldPath",
        "fromFieldPath": "spec.forProvider.region",
        "toFieldPath": "status.region",
    }
    observed = _observed_bucket()
    observed["bucket"].resource["spec"] = {"forProvider": {"region": "eu-west-1"}}
    request = make_request(
        _input(_bucket(bucket_base, to_composite, REGION_PATCH)),
        observed_resources=observed,
    )

    response = CompositionEngine().run(request)

    assert response.results == []
    assert response.desired.composite.resource["status"] == {"region": "eu-west-1"}
    rendered = response.desired.resources["bucket"].resource
    assert rendered["spec"] == {"forProvider": {"acl": "private", "region": "us-east-1"}}


def test_patch_errors_keep_the_declared_index(
    make_request: MakeRequest, bucket_base: Document
) -> None:
    to_composite = {
        "type": "ToCompositeFieldPath",
        "fromFieldPath": "status.atProvider.arn",
        "toFieldPath": "status.bucketArn",
    }
    failing = {
        "fromFieldPath": "spec.region",
        "toFieldPath": "spec.forProvider.region",
        "transforms": [{"type": "map", "map": {"eu-west-1": "eu"}}],
    }
    request = make_request(_input(_bucket(bucket_base, to_composite, failing)))

    response = CompositionEngine().run(request)

    assert response.results == [
        Result(
            severity=Severity.FATAL,
            message=(
                'cannot render composed resource "bucket" "FromCompositeFieldPath" patch at '
                "index 1: transform at index 0 returned error: key us-east-1 is not found in map"
            ),
        )
    ]
    assert response.desired == State()


def test_non_finite_patch_value_is_fatal(
    make_request: MakeRequest, bucket_base: Document
) -> None:
    ratio = {
        "fromFieldPath": "spec.widgets",
        "toFieldPath": "spec.forProvider.ratio",
        "transforms": [
            {"type": "map", "map": {"10": "NaN"}},
            {"type": "convert", "convert": {"toType": "float64"}},
        ],
    }
    request = make_request(_input(_bucket(bucket_base, ratio)))

    response = CompositionEngine().run(request)

    assert response.results == [
        Result(
            severity=Severity.FATAL,
            message=(
                'cannot render composed resource "bucket" "FromCompositeFieldPath" patch at '
                "index 0: cannot convert value to JSON: json: unsupported value: NaN"
            ),
        )
    ]
    assert response.desired == State()


def test_non_finite_value_in_string_transform_is_fatal(
    make_request: MakeRequest, bucket_base: Document
) -> None:
    ratio = {
        "fromFieldPath": "spec.widgets",
        "toFieldPath": "spec.forProvider.ratio",
        "transforms": [
            {"type": "map", "map": {"10": "NaN"}},
            {"type": "convert", "convert": {"toType": "float64"}},
            {"type": "string", "string": {"type": "Convert", "convert": "ToJson"}},
        ],
    }
    request = make_request(_input(_bucket(bucket_base, ratio)))

    response = CompositionEngine().run(request)

    assert response.results == [
        Result(
            severity=Severity.FATAL,
            message=(
                'cannot render composed resource "bucket" "FromCompositeFieldPath" patch at '
                "index 0: transform at index 2 returned error: cannot marshal input to JSON: "
                "json: unsupported value: NaN"
            ),
        )
    ]
    assert response.desired == State()


def test_ready_existing_resource_reports_readiness_and_connection_details(
    make_request: MakeRequest, bucket_base: Document
) -> None:
    observed = _observed_bucket(
        atProvider={"endpoint": "bucket.s3.example.org"},
        conditions=[{"type": "Ready", "status": "True"}],
    )
    observed["bucket"].connection_details = {"password": b"s3cret"}
    connection_details = [
        {
            "name": "password",
            "type": "FromConnectionSecretKey",
            "fromConnectionSecretKey": "password",
        },
        {
            "name": "endpoint",
            "type": "FromFieldPath",
            "fromFieldPath": "status.atProvider.endpoint",
        },
        {"name": "user", "type": "FromValue", "value": "admin"},
    ]
    request = make_request(
        _input(_bucket(bucket_base, connectionDetails=connection_details)),
        observed_resources=observed,
    )

    response = CompositionEngine().run(request)

    assert response.results == []
    assert response.desired.resources["bucket"].ready is Ready.TRUE
    assert response.desired.composite.connection_details == {
        "password": b"s3cret",
        "endpoint": b"bucket.s3.example.org",
        "user": b"admin",
    }


def test_readiness_failure_is_a_warning(
    make_request: MakeRequest, bucket_base: Document
) -> None:
    check = {"type": "MatchString", "fieldPath": "status.phase", "matchString": "Running"}
    request = make_request(
        _input(_bucket(bucket_base, readinessChecks=[check])),
        observed_resources=_observed_bucket(phase=3),
    )

    response = CompositionEngine().run(request)

    assert response.results == [
        Result(
            severity=Severity.WARNING,
            message=(
                'cannot check readiness of composed resource "bucket": '
                "cannot run readiness check at index 0: status.phase: not a string"
            ),
        )
    ]
    assert response.desired.resources["bucket"].ready is Ready.UNSPECIFIED


def test_injected_readiness_checker_is_used(
    make_request: MakeRequest, bucket_base: Document
) -> None:
    request = make_request(
        _input(_bucket(bucket_base)), observed_resources=_observed_bucket()
    )
    engine = CompositionEngine(readiness_checker=lambda document, checks: True)

    response = engine.run(request)

    assert response.desired.resources["bucket"].ready is Ready.TRUE


def test_template_without_base_is_fatal(make_request: MakeRequest) -> None:
    response = CompositionEngine().run(make_request(_input(_bucket(None, REGION_PATCH))))

    assert response.results == [
        Result(
            severity=Severity.FATAL,
            message=(
                'composed resource "bucket" has no base template, and was not produced '
                "by a previous Function in the pipeline"
            ),
        )
    ]


def test_template_without_base_patches_previous_desired_resource(
    make_request: MakeRequest,
) -> None:
    desired = State(
        resources={
            "bucket": Resource(resource={"kind": "Bucket"}),
            "queue": Resource(resource={"kind": "Queue"}),
        }
    )
    request = make_request(_input(_bucket(None, REGION_PATCH)), desired=desired)

    response = CompositionEngine().run(request)

    assert response.results == []
    assert response.desired.resources["bucket"].resource == {
        "kind": "Bucket",
        "spec": {"forProvider": {"region": "us-east-1"}},
    }
    assert response.desired.resources["queue"].resource == {"kind": "Queue"}
    assert request.desired.resources["bucket"].resource == {"kind": "Bucket"}


def test_desired_resources_without_template_pass_through(
    make_request: MakeRequest, bucket_base: Document
) -> None:
    other = Resource(
        resource={
            "apiVersion": "example.org/v1",
            "kind": "Other",
            "metadata": {"labels": {"tier": "gold"}},
            "spec": {"sizes": [1, 2.5, None], "enabled": False},
        },
        connection_details={"token": b"abc"},
        ready=Ready.TRUE,
    )
    request = make_request(
        _input(_bucket(bucket_base, REGION_PATCH)),
        desired=State(resources={"other": other}),
    )

    response = CompositionEngine().run(request)

    assert response.results == []
    assert set(response.desired.resources) == {"other", "bucket"}
    assert response.desired.resources["other"] == request.desired.resources["other"]


def test_connection_details_from_later_templates_win(
    make_request: MakeRequest, bucket_base: Document
) -> None:
    queue = {
        "name": "queue",
        "base": {"apiVersion": "sqs.example.org/v1", "kind": "Queue"},
        "connectionDetails": [{"name": "endpoint", "type": "FromValue", "value": "queue"}],
    }
    bucket = _bucket(
        bucket_base,
        connectionDetails=[
            {"name": "endpoint", "type": "FromValue", "value": "bucket"},
            {"name": "region", "type": "FromValue", "value": "us-east-1"},
        ],
    )
    observed = _observed_bucket()
    observed["queue"] = Resource(
        resource={
            "apiVersion": "sqs.example.org/v1",
            "kind": "Queue",
            "metadata": {"name": "my-xr-queue-xyz89"},
        }
    )
    request = make_request(_input(bucket, queue), observed_resources=observed)

    response = CompositionEngine().run(request)

    assert response.results == []
    assert response.desired.composite.connection_details == {
        "endpoint": b"queue",
        "region": b"us-east-1",
    }


def test_identity_copy_leaves_metadata_absent_when_observed_has_none(
    make_request: MakeRequest, bucket_base: Document
) -> None:
    observed = {
        "bucket": Resource(resource={"apiVersion": "s3.example.org/v1", "kind": "Bucket"})
    }
    request = make_request(_input(_bucket(bucket_base)), observed_resources=observed)

    response = CompositionEngine().run(request)

    assert response.results == []
    assert "metadata" not in response.desired.resources["bucket"].resource


def test_identity_copy_drops_names_missing_from_observed(
    make_request: MakeRequest, bucket_base: Document
) -> None:
    base = {**bucket_base, "metadata": {"name": "stale", "labels": {"team": "a"}}}
    observed = {
        "bucket": Resource(
            resource={"apiVersion": "s3.example.org/v1", "kind": "Bucket", "metadata": {}}
        )
    }
    request = make_request(_input(_bucket(base)), observed_resources=observed)

    response = CompositionEngine().run(request)

    assert response.desired.resources["bucket"].resource["metadata"] == {
        "labels": {"team": "a"}
    }


def test_environment_patches_feed_templates_and_context(
    make_request: MakeRequest, bucket_base: Document
) -> None:
    environment = {
        "patches": [
            {"fromFieldPath": "spec.region", "toFieldPath": "region"},
            {
                "type": "ToCompositeFieldPath",
                "fromFieldPath": "network.id",
                "toFieldPath": "status.networkId",
            },
        ]
    }
    from_environment = {
        "type": "FromEnvironmentFieldPath",
        "fromFieldPath": "region",
        "toFieldPath": "spec.forProvider.region",
    }
    request = make_request(
        _input(_bucket(bucket_base, from_environment), environment=environment),
        context={DEFAULT_ENVIRONMENT_KEY: {"network": {"id": "net-1"}}, "other": 1},
    )

    response = CompositionEngine().run(request)

    assert response.results == []
    assert response.context == {
        DEFAULT_ENVIRONMENT_KEY: {"network": {"id": "net-1"}, "region": "us-east-1"},
        "other": 1,
    }
    assert response.desired.composite.resource["status"] == {"networkId": "net-1"}
    rendered = response.desired.resources["bucket"].resource
    assert rendered["spec"]["forProvider"]["region"] == "us-east-1"  # type: ignore[index]


def test_environment_must_be_an_object(
    make_request: MakeRequest, bucket_base: Document
) -> None:
    request = make_request(
        _input(_bucket(bucket_base)), context={DEFAULT_ENVIRONMENT_KEY: "not-an-object"}
    )

    response = CompositionEngine().run(request)

    assert response.results == [
        Result(
            severity=Severity.FATAL,
            message=(
                f"cannot get environment from context key {DEFAULT_ENVIRONMENT_KEY}: "
                "expected an object, got string"
            ),
        )
    ]
    assert response.context == {DEFAULT_ENVIRONMENT_KEY: "not-an-object"}


def test_false_condition_leaves_desired_state_unchanged(
    make_request: MakeRequest, bucket_base: Document
) -> None:
    request = make_request(_input(_bucket(bucket_base), condition={"expression": "no"}))

    response = CompositionEngine(condition_evaluator=_evaluator).run(request)

    assert response.results == []
    assert response.desired == State()
    assert response.context == {}


def test_condition_without_evaluator_is_fatal(
    make_request: MakeRequest, bucket_base: Document
) -> None:
    request = make_request(_input(_bucket(bucket_base), condition={"expression": "yes"}))

    response = CompositionEngine().run(request)

    assert response.results == [
        Result(
            severity=Severity.FATAL,
            message="cannot evaluate condition: no condition evaluator is configured",
        )
    ]


def test_non_boolean_condition_is_fatal(
    make_request: MakeRequest, bucket_base: Document
) -> None:
    request = make_request(_input(_bucket(bucket_base), condition={"expression": "maybe"}))

    response = CompositionEngine(condition_evaluator=_evaluator).run(request)

    assert response.results == [
        Result(
            severity=Severity.FATAL,
            message=(
                "cannot evaluate condition: expression must return a boolean, "
                "got string instead"
            ),
        )
    ]


def test_template_condition_skips_resource(
    make_request: MakeRequest, bucket_base: Document
) -> None:
    skipped = {"name": "queue", "base": {"kind": "Queue"}, "condition": {"expression": "no"}}
    request = make_request(
        _input(_bucket(bucket_base, condition={"expression": "yes"}), skipped)
    )

    response = CompositionEngine(condition_evaluator=_evaluator).run(request)

    assert response.results == []
    assert set(response.desired.resources) == {"bucket"}


def test_compose_uses_configuration(make_request: MakeRequest, bucket_base: Document) -> None:
    config = EngineConfig(cache_ttl_seconds=30, environment_context_key="env")

    response = compose(make_request(_input(_bucket(bucket_base))), config=config)

    assert response.ttl_seconds == 30
    assert response.context == {"env": {}}


def test_condition_variables_expose_observed_and_desired(
    make_request: MakeRequest, observed_composite: Document
) -> None:
    desired = State(resources={"bucket": Resource(resource={"kind": "Bucket"})})
    request = make_request(_input(), desired=desired)

    assert condition_variables(request) == {
        "observed": {"composite": {"resource": observed_composite}, "resources": {}},
        "desired": {
            "composite": {"resource": {}},
            "resources": {"bucket": {"resource": {"kind": "Bucket"}}},
        },
    }
