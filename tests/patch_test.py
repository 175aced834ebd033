"""Tests for patch application."""

from __future__ import annotations

import json
from typing import Any

import pytest

from seldonfake import (
    BadRequestError,
    PatchType,
    UnsupportedPatchTypeError,
    apply_json_patch,
    apply_merge_patch,
    apply_patch,
)


@pytest.fixture
def document() -> dict[str, Any]:
    return {
        "metadata": {"name": "dep1", "labels": {"app": "x", "a/b": "1"}},
        "spec": {"predictors": [{"name": "one"}, {"name": "two"}]},
    }


def test_json_patch(document: dict[str, Any]) -> None:
    original = json.loads(json.dumps(document))
    result = apply_json_patch(
        document,
        [
            {"op": "replace", "path": "/metadata/labels/app", "value": "y"},
            {"op": "remove", "path": "/metadata/labels/a~1b"},
            {"op": "add", "path": "/spec/predictors/-", "value": {"n": 3}},
            {"op": "add", "path": "/spec/predictors/0", "value": {"n": 0}},
            {"op": "copy", "from": "/metadata/name", "path": "/spec/name"},
            {"op": "move", "from": "/spec/name", "path": "/spec/alias"},
            {"op": "test", "path": "/spec/alias", "value": "dep1"},
        ],
    )
    assert result == {
        "metadata": {"name": "dep1", "labels": {"app": "y"}},
        "spec": {
            "predictors": [
                {"n": 0},
                {"name": "one"},
                {"name": "two"},
                {"n": 3},
            ],
            "alias": "dep1",
        },
    }
    assert document == original


@pytest.mark.parametrize(
    "operations",
    [
        [{"op": "test", "path": "/metadata/name", "value": "other"}],
        [{"op": "remove", "path": "/metadata/missing"}],
        [{"op": "replace", "path": "/spec/predictors/5", "value": 1}],
        [{"op": "add", "path": "/nope/deeper", "value": 1}],
        [{"op": "frobnicate", "path": "/spec"}],
        [{"op": "add", "path": "spec", "value": 1}],
        [{"op": "remove", "path": "/spec/predictors/01"}],
        ["not an operation"],
        [{"op": "add", "path": 5, "value": 1}],
        [{"op": "copy", "from": ["spec"], "path": "/spec/name"}],
        [{"op": "remove", "path": "/spec/predictors/²"}],
    ],
)
def test_json_patch_errors(
    document: dict[str, Any], operations: list[Any]
) -> None:
    with pytest.raises(BadRequestError):
        apply_json_patch(document, operations)


def test_merge_patch(document: dict[str, Any]) -> None:
    result = apply_merge_patch(
        document,
        {
            "metadata": {"labels": {"app": None, "tier": "web"}},
            "spec": {"predictors": [{"name": "only"}]},
            "status": {"state": "Available"},
        },
    )
    assert result == {
        "metadata": {"name": "dep1", "labels": {"a/b": "1", "tier": "web"}},
        "spec": {"predictors": [{"name": "only"}]},
        "status": {"state": "Available"},
    }
    assert document["metadata"]["labels"]["app"] == "x"


def test_apply_patch(document: dict[str, Any]) -> None:
    data = b'{"spec": {"replicas": 2}}'
    for patch_type in (PatchType.merge, PatchType.strategic_merge):
        result = apply_patch(document, patch_type, data)
        assert result["spec"]["replicas"] == 2
        assert result["spec"]["predictors"] == document["spec"]["predictors"]

    data = b'[{"op": "add", "path": "/spec/replicas", "value": 3}]'
    result = apply_patch(document, PatchType.json, data)
    assert result["spec"]["replicas"] == 3


@pytest.mark.parametrize(
    ("patch_type", "data"),
    [
        (PatchType.merge, b"{not json"),
        (PatchType.merge, b"[]"),
        (PatchType.json, b"{}"),
        (PatchType.json, b'[{"op": "add", "path": "/spec"}]'),
    ],
)
def test_apply_patch_errors(
    document: dict[str, Any], patch_type: PatchType, data: bytes
) -> None:
    with pytest.raises(BadRequestError) as excinfo:
        apply_patch(document, patch_type, data)
    assert excinfo.value.status == 400


def test_apply_patch_unsupported(document: dict[str, Any]) -> None:
    with pytest.raises(UnsupportedPatchTypeError) as excinfo:
        apply_patch(document, PatchType.apply, b"spec: {}")
    assert excinfo.value.status == 415
