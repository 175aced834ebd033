"""Tests for action recording and reactor dispatch."""

from __future__ import annotations

import threading
from typing import Any

import pytest
from structlog.testing import capture_logs

from seldonfake import (
    SELDON_DEPLOYMENTS_RESOURCE,
    Action,
    Clientset,
    CreateAction,
    Fake,
    FakeSeldonDeployments,
    FakeWatcher,
    GetAction,
    GroupVersionResource,
    NoReactionError,
    NotFoundError,
    SeldonDeployment,
    UpdateAction,
    Verb,
    WatchAction,
)

from .support.deployments import make_deployment


def get_action(name: str = "dep1") -> GetAction:
    return GetAction(
        resource=SELDON_DEPLOYMENTS_RESOURCE, namespace="default", name=name
    )


def test_invokes_default() -> None:
    fake = Fake()
    assert fake.invokes(get_action(), "default") == "default"
    assert fake.actions == [get_action()]


def test_reactor_order() -> None:
    fake = Fake()
    calls: list[str] = []

    def skip(action: Action) -> tuple[bool, Any]:
        calls.append("skip")
        return False, None

    def first(action: Action) -> tuple[bool, Any]:
        calls.append("first")
        return True, "first"

    def second(action: Action) -> tuple[bool, Any]:
        calls.append("second")
        return True, "second"

    fake.add_reactor("*", "*", first)
    fake.add_reactor("*", "*", second)
    fake.prepend_reactor("get", "seldondeployments", skip)
    fake.prepend_reactor("create", "*", second)
    fake.prepend_reactor("get", "pods", second)
    assert fake.invokes(get_action()) == "first"
    assert calls == ["skip", "first"]
    assert [r.verb for r in fake.reaction_chain] == [
        "get",
        "create",
        "get",
        "*",
        "*",
    ]


def test_reactor_error() -> None:
    fake = Fake()

    def fail(action: Action) -> tuple[bool, Any]:
        raise NotFoundError("injected")

    fake.add_reactor("get", "seldondeployments", fail)
    with pytest.raises(NotFoundError, match="injected"):
        fake.invokes(get_action())
    assert len(fake.actions) == 1


def test_action_copies() -> None:
    fake = Fake()
    received: list[Action] = []

    def record(action: Action) -> tuple[bool, Any]:
        received.append(action)
        return True, None

    fake.add_reactor("*", "*", record)
    deployment = make_deployment("dep1")
    action = CreateAction(
        resource=SELDON_DEPLOYMENTS_RESOURCE,
        namespace="default",
        object=deployment,
    )
    fake.invokes(action)
    deployment.metadata.labels["changed"] = "true"
    assert isinstance(received[0], CreateAction)
    received[0].object.metadata.labels["reactor"] = "true"

    recorded = fake.actions[0]
    assert isinstance(recorded, CreateAction)
    assert recorded.object.metadata.labels == {}
    assert recorded is not received[0]

    # The returned list is a copy.
    fake.actions.clear()
    assert len(fake.actions) == 1
    fake.clear_actions()
    assert fake.actions == []


def test_action_matches() -> None:
    action = get_action()
    assert action.verb == Verb.get
    assert action.matches("get", "seldondeployments")
    assert action.matches("*", "seldondeployments")
    assert action.matches("get", "*")
    assert not action.matches("list", "seldondeployments")
    assert not action.matches("get", "pods")

    other = GetAction(
        resource=GroupVersionResource("", "v1", "pods"), name="pod"
    )
    assert other.namespace == ""
    assert not other.matches("get", "seldondeployments")


def test_invokes_watch() -> None:
    fake = Fake()
    action = WatchAction(
        resource=SELDON_DEPLOYMENTS_RESOURCE, namespace="default"
    )
    with pytest.raises(NoReactionError):
        fake.invokes_watch(action)

    watcher = FakeWatcher()
    fake.add_watch_reactor("pods", lambda _: (True, FakeWatcher()))
    fake.add_watch_reactor("*", lambda _: (False, None))
    fake.add_watch_reactor("seldondeployments", lambda _: (True, watcher))
    assert fake.invokes_watch(action) is watcher
    assert [a.verb for a in fake.actions] == [Verb.watch, Verb.watch]

    replacement = FakeWatcher()
    fake.prepend_watch_reactor("*", lambda _: (True, replacement))
    assert fake.invokes_watch(action) is replacement


def test_logging() -> None:
    fake = Fake()
    with capture_logs() as logs:
        fake.invokes(get_action())
    assert logs == [
        {
            "event": "Recorded action",
            "log_level": "debug",
            "verb": "get",
            "resource": str(SELDON_DEPLOYMENTS_RESOURCE),
            "namespace": "default",
            "name": "dep1",
            "subresource": None,
        }
    ]


@pytest.mark.asyncio
async def test_clientset_override(
    clientset: Clientset, client: FakeSeldonDeployments
) -> None:
    await client.create(make_deployment("dep1"))

    replacement = make_deployment("replacement")
    clientset.prepend_reactor(
        "get", "seldondeployments", lambda _: (True, replacement)
    )
    result = await client.get("dep1")
    assert result.metadata.name == "replacement"

    # Other verbs still reach the tracker.
    await client.delete("dep1")
    objects = clientset.tracker.list_objects(SELDON_DEPLOYMENTS_RESOURCE, "")
    assert objects == []
    assert [a.verb for a in clientset.actions] == [
        Verb.create,
        Verb.get,
        Verb.delete,
    ]


@pytest.mark.asyncio
async def test_clientset_errors_recorded(
    clientset: Clientset, client: FakeSeldonDeployments
) -> None:
    with pytest.raises(NotFoundError):
        await client.get("missing")
    with pytest.raises(NotFoundError):
        await client.update(make_deployment("missing"))
    actions = clientset.actions
    assert [a.verb for a in actions] == [Verb.get, Verb.update]
    assert isinstance(actions[0], GetAction)
    assert actions[0].name == "missing"
    assert isinstance(actions[1], UpdateAction)
    assert isinstance(actions[1].object, SeldonDeployment)


def test_concurrent_invokes(clientset: Clientset) -> None:
    def create(prefix: str) -> None:
        for i in range(25):
            action = CreateAction(
                resource=SELDON_DEPLOYMENTS_RESOURCE,
                namespace="default",
                object=make_deployment(f"{prefix}-{i}"),
            )
            clientset.invokes(action)

    threads = [
        threading.Thread(target=create, args=(f"t{n}",)) for n in range(4)
    ]
    for thread in threads:
        thread.start()
    for thread in threads:
        thread.join()

    # Each action is recorded and applied as one step, so the log order
    # matches the order of resource versions handed out by the tracker.
    actions = clientset.actions
    assert len(actions) == 100
    tracker = clientset.tracker
    versions = []
    for action in actions:
        assert isinstance(action, CreateAction)
        name = action.object.metadata.name
        stored = tracker.get(SELDON_DEPLOYMENTS_RESOURCE, "default", name)
        versions.append(int(stored.metadata.resource_version))
    assert versions == list(range(1, 101))
