"""Action recording and dispatch through reactor chains."""

from __future__ import annotations

import copy
import threading
from collections.abc import Callable
from dataclasses import dataclass
from typing import Any

import structlog
from pydantic import ValidationError
from structlog.stdlib import BoundLogger

from ._actions import (
    Action,
    CreateAction,
    DeleteAction,
    DeleteCollectionAction,
    GetAction,
    ListAction,
    PatchAction,
    UpdateAction,
)
from ._exceptions import BadRequestError, NoReactionError
from ._labels import parse_selector
from ._patch import apply_patch
from ._tracker import ObjectTracker
from ._watch import FakeWatcher

__all__ = [
    "Fake",
    "ReactionFunc",
    "Reactor",
    "WatchReactionFunc",
    "WatchReactor",
    "object_reaction",
    "watch_reaction",
]

type ReactionFunc = Callable[[Action], tuple[bool, Any]]
"""A reactor callback.

Returns whether it handled the action and, if so, the result. Raising an
exception is how a reactor injects an error.
"""

type WatchReactionFunc = Callable[[Action], tuple[bool, FakeWatcher | None]]
"""A watch reactor callback, returning a watcher if it handled the action."""


@dataclass
class Reactor:
    """A reaction registered for a verb and resource."""

    verb: str
    """Verb handled, or ``*`` for all verbs."""

    resource: str
    """Plural resource handled, or ``*`` for all resources."""

    reaction: ReactionFunc
    """Callback to run for matching actions."""

    def handles(self, action: Action) -> bool:
        return action.matches(self.verb, self.resource)


@dataclass
class WatchReactor:
    """A watch reaction registered for a resource."""

    resource: str
    """Plural resource handled, or ``*`` for all resources."""

    reaction: WatchReactionFunc
    """Callback to run for matching watch actions."""

    def handles(self, action: Action) -> bool:
        return action.matches("watch", self.resource)


class Fake:
    """Records actions and dispatches them through reactor chains.

    Every request made through a fake client ends up in `invokes` or
    `invokes_watch`. The action is appended to the action log before any
    reactor runs, so the log mirrors the calls made regardless of whether
    they succeed. Reactors are then tried in order; the first one that
    handles the action decides the result, and an exception it raises is
    propagated to the caller untouched.

    One lock is held for the whole of each invocation, so actions are applied
    one at a time in the order they arrive.

    Parameters
    ----------
    logger
        Logger to use. The ``seldonfake`` logger is used if none is given.

    Attributes
    ----------
    reaction_chain
        Reactors for all verbs except watch, in the order they are tried.
    watch_reaction_chain
        Reactors for watches, in the order they are tried.
    """

    def __init__(self, *, logger: BoundLogger | None = None) -> None:
        self.reaction_chain: list[Reactor] = []
        self.watch_reaction_chain: list[WatchReactor] = []
        self._logger = logger or structlog.get_logger("seldonfake")
        self._lock = threading.RLock()
        self._actions: list[Action] = []

    @property
    def actions(self) -> list[Action]:
        """Copy of the recorded actions, in call order."""
        with self._lock:
            return list(self._actions)

    def add_reactor(
        self, verb: str, resource: str, reaction: ReactionFunc
    ) -> None:
        """Append a reactor to the end of the chain."""
        with self._lock:
            self.reaction_chain.append(Reactor(verb, resource, reaction))

    def prepend_reactor(
        self, verb: str, resource: str, reaction: ReactionFunc
    ) -> None:
        """Insert a reactor at the start of the chain.

        This is the usual way to inject errors ahead of the default object
        reaction.
        """
        with self._lock:
            self.reaction_chain.insert(0, Reactor(verb, resource, reaction))

    def add_watch_reactor(
        self, resource: str, reaction: WatchReactionFunc
    ) -> None:
        """Append a watch reactor to the end of the watch chain."""
        with self._lock:
            reactor = WatchReactor(resource, reaction)
            self.watch_reaction_chain.append(reactor)

    def prepend_watch_reactor(
        self, resource: str, reaction: WatchReactionFunc
    ) -> None:
        """Insert a watch reactor at the start of the watch chain."""
        with self._lock:
            reactor = WatchReactor(resource, reaction)
            self.watch_reaction_chain.insert(0, reactor)

    def clear_actions(self) -> None:
        """Forget all recorded actions."""
        with self._lock:
            self._actions = []

    def invokes(self, action: Action, default: Any = None) -> Any:
        """Record an action and run it through the reaction chain.

        Parameters
        ----------
        action
            Action to perform.
        default
            Result to return if no reactor handles the action.

        Returns
        -------
        Any
            Result of the first reactor that handled the action.
        """
        with self._lock:
            self._record(action)
            for reactor in list(self.reaction_chain):
                if not reactor.handles(action):
                    continue
                handled, result = reactor.reaction(copy.deepcopy(action))
                if handled:
                    return result
            return default

    def invokes_watch(self, action: Action) -> FakeWatcher:
        """Record a watch action and run it through the watch chain.

        Raises
        ------
        NoReactionError
            Raised if no watch reactor handled the action.
        """
        with self._lock:
            self._record(action)
            for reactor in list(self.watch_reaction_chain):
                if not reactor.handles(action):
                    continue
                handled, watcher = reactor.reaction(copy.deepcopy(action))
                if handled and watcher is not None:
                    return watcher
            msg = f"Unhandled watch of {action.resource}"
            raise NoReactionError(msg)

    def _record(self, action: Action) -> None:
        """Append a copy of an action to the log. Must hold the lock."""
        self._actions.append(copy.deepcopy(action))
        self._logger.debug(
            "Recorded action",
            verb=action.verb.value,
            resource=str(action.resource),
            namespace=action.namespace,
            name=getattr(action, "name", None),
            subresource=action.subresource or None,
        )


def _patch(tracker: ObjectTracker, action: PatchAction) -> Any:
    """Apply a patch action to the tracker."""
    resource = action.resource
    namespace = action.namespace
    with tracker.lock:
        current = tracker.get(resource, namespace, action.name)
        document = current.model_dump(mode="json", exclude_none=True)
        patched = apply_patch(document, action.patch_type, action.patch)
        if action.subresource == "status":
            if "status" in patched:
                document["status"] = patched["status"]
            else:
                document.pop("status", None)
            patched = document
        metadata = patched.setdefault("metadata", {})
        if not isinstance(metadata, dict):
            msg = f"Patched {resource.resource} metadata is not an object"
            raise BadRequestError(msg)
        metadata["name"] = action.name
        metadata["namespace"] = current.metadata.namespace
        try:
            obj = type(current).model_validate(patched)
        except ValidationError as e:
            msg = f"Patched {resource.resource} is invalid: {e!s}"
            raise BadRequestError(msg) from e
        return tracker.update(resource, obj, namespace)


def _delete_collection(
    tracker: ObjectTracker, action: DeleteCollectionAction
) -> None:
    """Delete every object in scope matching the action's label selector."""
    selector = parse_selector(action.list_options.label_selector)
    with tracker.lock:
        for obj in tracker.list_objects(action.resource, action.namespace):
            if selector.matches(obj.metadata.labels):
                name = obj.metadata.name
                tracker.delete(action.resource, obj.metadata.namespace, name)


def object_reaction(tracker: ObjectTracker) -> ReactionFunc:
    """Build the default reaction that applies actions to a tracker.

    Parameters
    ----------
    tracker
        Store to apply actions to.

    Returns
    -------
    ReactionFunc
        Reaction that handles every verb except watch.
    """

    def reaction(action: Action) -> tuple[bool, Any]:
        resource = action.resource
        namespace = action.namespace
        result: Any = None
        with tracker.lock:
            match action:
                case GetAction():
                    result = tracker.get(resource, namespace, action.name)
                case ListAction():
                    result = tracker.list(resource, action.kind, namespace)
                case CreateAction():
                    result = tracker.create(resource, action.object, namespace)
                case UpdateAction():
                    result = tracker.update(resource, action.object, namespace)
                case DeleteAction():
                    tracker.delete(resource, namespace, action.name)
                case DeleteCollectionAction():
                    _delete_collection(tracker, action)
                case PatchAction():
                    result = _patch(tracker, action)
                case _:
                    return False, None
        return True, result

    return reaction


def watch_reaction(tracker: ObjectTracker) -> WatchReactionFunc:
    """Build the default watch reaction that watches a tracker."""

    def reaction(action: Action) -> tuple[bool, FakeWatcher | None]:
        return True, tracker.watch(action.resource, action.namespace)

    return reaction
