"""Tests for the object tracker."""

from __future__ import annotations

import pytest

from seldonfake import (
    SELDON_DEPLOYMENTS_KIND,
    SELDON_DEPLOYMENTS_RESOURCE,
    AlreadyExistsError,
    BadRequestError,
    EventType,
    FakeSettings,
    KubernetesObject,
    NotFoundError,
    ObjectMeta,
    ObjectTracker,
    SeldonDeploymentList,
)

from .support.deployments import make_deployment

RESOURCE = SELDON_DEPLOYMENTS_RESOURCE


@pytest.fixture
def tracker() -> ObjectTracker:
    return ObjectTracker(FakeSettings(watch_buffer_size=10))


def test_create_get(tracker: ObjectTracker) -> None:
    deployment = make_deployment("dep1", labels={"app": "x"})
    stored = tracker.create(RESOURCE, deployment, "default")
    assert stored.metadata.resource_version == "1"
    assert deployment.metadata.resource_version == ""

    # Neither the input nor the returned object alias the stored state.
    deployment.metadata.labels["app"] = "changed"
    stored.metadata.labels["app"] = "changed"
    result = tracker.get(RESOURCE, "default", "dep1")
    assert result.metadata.labels == {"app": "x"}
    assert result.metadata.resource_version == "1"

    with pytest.raises(AlreadyExistsError) as excinfo:
        tracker.create(RESOURCE, deployment, "default")
    assert excinfo.value.status == 409
    with pytest.raises(NotFoundError) as not_found:
        tracker.get(RESOURCE, "other", "dep1")
    assert not_found.value.status == 404


def test_namespace_handling(tracker: ObjectTracker) -> None:
    deployment = make_deployment("dep1", namespace="")
    stored = tracker.create(RESOURCE, deployment, "prod")
    assert stored.metadata.namespace == "prod"

    mismatched = make_deployment("dep2", namespace="dev")
    with pytest.raises(BadRequestError):
        tracker.create(RESOURCE, mismatched, "prod")

    with pytest.raises(BadRequestError):
        tracker.create(RESOURCE, make_deployment(""), "default")


def test_update_delete(tracker: ObjectTracker) -> None:
    with pytest.raises(NotFoundError):
        tracker.update(RESOURCE, make_deployment("dep1"), "default")

    tracker.create(RESOURCE, make_deployment("dep1"), "default")
    updated = make_deployment("dep1", labels={"app": "y"})
    updated.metadata.resource_version = "stale"
    result = tracker.update(RESOURCE, updated, "default")
    assert result.metadata.resource_version == "2"
    assert result.metadata.labels == {"app": "y"}

    removed = tracker.delete(RESOURCE, "default", "dep1")
    assert removed.metadata.labels == {"app": "y"}
    with pytest.raises(NotFoundError):
        tracker.delete(RESOURCE, "default", "dep1")
    with pytest.raises(NotFoundError):
        tracker.get(RESOURCE, "default", "dep1")


def test_list(tracker: ObjectTracker) -> None:
    tracker.create(RESOURCE, make_deployment("b"), "default")
    tracker.create(RESOURCE, make_deployment("a"), "default")
    tracker.create(RESOURCE, make_deployment("c", namespace="prod"), "prod")

    result = tracker.list(RESOURCE, SELDON_DEPLOYMENTS_KIND, "default")
    assert isinstance(result, SeldonDeploymentList)
    assert result.kind == "SeldonDeploymentList"
    assert result.metadata.resource_version == "3"
    assert [d.metadata.name for d in result.items] == ["b", "a"]

    everything = tracker.list(RESOURCE, SELDON_DEPLOYMENTS_KIND, "")
    assert [d.metadata.name for d in everything.items] == ["b", "a", "c"]
    assert tracker.list_objects(RESOURCE, "missing") == []


def test_add(tracker: ObjectTracker) -> None:
    tracker.add(make_deployment("dep1", labels={"app": "x"}))
    tracker.add(make_deployment("dep1", labels={"app": "y"}))
    stored = tracker.get(RESOURCE, "default", "dep1")
    assert stored.metadata.labels == {"app": "y"}
    assert tracker.resource_version == "2"

    widget = KubernetesObject(
        api_version="example.com/v1",
        kind="Widget",
        metadata=ObjectMeta(name="w", namespace="default"),
    )
    with pytest.raises(ValueError, match="not registered"):
        tracker.add(widget)


@pytest.mark.asyncio
async def test_watch(tracker: ObjectTracker) -> None:
    watcher = tracker.watch(RESOURCE, "default")
    everywhere = tracker.watch(RESOURCE, "")
    tracker.create(RESOURCE, make_deployment("dep1"), "default")
    tracker.create(RESOURCE, make_deployment("x2", namespace="prod"), "prod")
    tracker.update(
        RESOURCE, make_deployment("dep1", labels={"app": "y"}), "default"
    )
    tracker.delete(RESOURCE, "default", "dep1")

    seen = []
    for _ in range(3):
        event = await anext(watcher)
        seen.append((event.type, event.object.metadata.name))
    assert seen == [
        (EventType.added, "dep1"),
        (EventType.modified, "dep1"),
        (EventType.deleted, "dep1"),
    ]

    seen = []
    for _ in range(4):
        event = await anext(everywhere)
        seen.append((event.type, event.object.metadata.name))
    assert seen == [
        (EventType.added, "dep1"),
        (EventType.added, "x2"),
        (EventType.modified, "dep1"),
        (EventType.deleted, "dep1"),
    ]

    watcher.stop()
    everywhere.stop()
    tracker.create(RESOURCE, make_deployment("dep3"), "default")
    assert [e async for e in watcher] == []


@pytest.mark.asyncio
async def test_watch_event_copies(tracker: ObjectTracker) -> None:
    watcher = tracker.watch(RESOURCE, "default")
    tracker.create(RESOURCE, make_deployment("dep1"), "default")
    event = await anext(watcher)
    event.object.metadata.labels["mutated"] = "true"
    assert tracker.get(RESOURCE, "default", "dep1").metadata.labels == {}
    watcher.stop()
