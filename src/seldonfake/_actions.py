"""Descriptions of requests made against the fake."""

from __future__ import annotations

from dataclasses import dataclass, field
from enum import StrEnum
from typing import Any

from ._identity import GroupVersionKind, GroupVersionResource
from ._models import DeleteOptions, ListOptions, PatchType

__all__ = [
    "Action",
    "CreateAction",
    "DeleteAction",
    "DeleteCollectionAction",
    "GetAction",
    "ListAction",
    "PatchAction",
    "UpdateAction",
    "Verb",
    "WatchAction",
]


class Verb(StrEnum):
    """Verb of an action, as named in Kubernetes RBAC rules."""

    get = "get"
    list = "list"
    watch = "watch"
    create = "create"
    update = "update"
    delete = "delete"
    delete_collection = "delete-collection"
    patch = "patch"


@dataclass(kw_only=True)
class Action:
    """Base description of one request.

    Every request made through a fake client is turned into one of the
    subclasses of this class, recorded in the action log, and handed to the
    reactor chain.
    """

    verb: Verb
    """What the request does."""

    resource: GroupVersionResource
    """Resource the request is for."""

    namespace: str = ""
    """Namespace of the request, empty for cluster-wide requests."""

    subresource: str = ""
    """Subresource the request is for, such as ``status``."""

    def matches(self, verb: str, resource: str) -> bool:
        """Check whether this action is for a verb and resource plural.

        Parameters
        ----------
        verb
            Verb to compare against, or ``*`` to match any verb.
        resource
            Plural resource name to compare against, or ``*`` to match any
            resource.

        Returns
        -------
        bool
            Whether both the verb and the resource match.
        """
        if verb != "*" and verb != self.verb.value:
            return False
        return resource in ("*", self.resource.resource)


@dataclass(kw_only=True)
class GetAction(Action):
    """Retrieve one object by name."""

    verb: Verb = Verb.get
    name: str


@dataclass(kw_only=True)
class ListAction(Action):
    """List objects in a namespace."""

    verb: Verb = Verb.list
    kind: GroupVersionKind
    list_options: ListOptions = field(default_factory=ListOptions)


@dataclass(kw_only=True)
class WatchAction(Action):
    """Start a watch on a namespace."""

    verb: Verb = Verb.watch
    list_options: ListOptions = field(default_factory=ListOptions)


@dataclass(kw_only=True)
class CreateAction(Action):
    """Store a new object."""

    verb: Verb = Verb.create
    object: Any


@dataclass(kw_only=True)
class UpdateAction(Action):
    """Replace an existing object."""

    verb: Verb = Verb.update
    object: Any


@dataclass(kw_only=True)
class DeleteAction(Action):
    """Remove one object by name."""

    verb: Verb = Verb.delete
    name: str
    delete_options: DeleteOptions = field(default_factory=DeleteOptions)


@dataclass(kw_only=True)
class DeleteCollectionAction(Action):
    """Remove every object matching a label selector."""

    verb: Verb = Verb.delete_collection
    list_options: ListOptions = field(default_factory=ListOptions)


@dataclass(kw_only=True)
class PatchAction(Action):
    """Apply a patch payload to one object."""

    verb: Verb = Verb.patch
    name: str
    patch_type: PatchType
    patch: bytes
