"""Tests for strategic merge patch synthesis."""
import pytest

from k8s_random_secret.patch import SerializationError, create_two_way_merge_patch, with_resource_version
from k8s_random_secret.secret import DEFAULT_ANNOTATION, SecretObject


@pytest.fixture
def existing():
    return SecretObject(
        namespace="ns1",
        name="db-pass",
        annotations={"owner": "team-a"},
        labels={"app": "db"},
        data={"username": "YWRtaW4="},
        type="Opaque",
        resource_version="7",
    )


def test_identical_objects_yield_empty_patch(existing):
    assert create_two_way_merge_patch(existing, existing) == {}


def test_patch_touches_only_marker_and_key(existing):
    desired = existing.with_changes(
        annotations={DEFAULT_ANNOTATION: "2024-01-01T00:00:00+00:00"},
        string_data={"password": "s3cret"},
    )

    patch = create_two_way_merge_patch(existing, desired)

    assert patch == {
        "metadata": {"annotations": {DEFAULT_ANNOTATION: "2024-01-01T00:00:00+00:00"}},
        "stringData": {"password": "s3cret"},
    }


def test_changed_value_is_included(existing):
    desired = SecretObject(**{**existing.__dict__, "data": {"username": "cm9vdA=="}})
    assert create_two_way_merge_patch(existing, desired) == {"data": {"username": "cm9vdA=="}}


def test_removed_key_is_null(existing):
    desired = SecretObject(**{**existing.__dict__, "labels": {}})
    assert create_two_way_merge_patch(existing, desired) == {"metadata": {"labels": {"app": None}}}


def test_unserializable_object_raises(existing):
    broken = SecretObject(**{**existing.__dict__, "annotations": {"bad": object()}})
    with pytest.raises(SerializationError):
        create_two_way_merge_patch(existing, broken)


def test_resource_version_added_without_mutating_input():
    patch = {"metadata": {"annotations": {DEFAULT_ANNOTATION: "t"}}}
    conditional = with_resource_version(patch, "7")
    assert conditional["metadata"] == {"annotations": {DEFAULT_ANNOTATION: "t"}, "resourceVersion": "7"}
    assert "resourceVersion" not in patch["metadata"]


def test_resource_version_added_when_metadata_absent():
    assert with_resource_version({"stringData": {"k": "v"}}, "9") == {
        "stringData": {"k": "v"},
        "metadata": {"resourceVersion": "9"},
    }


def test_empty_patch_stays_empty():
    assert with_resource_version({}, "7") == {}


def test_unknown_resource_version_leaves_patch_alone():
    patch = {"stringData": {"k": "v"}}
    assert with_resource_version(patch, None) is patch
