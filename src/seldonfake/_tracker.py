"""In-memory store of objects shared by fake clients."""

from __future__ import annotations

import builtins
import threading
from collections import defaultdict
from functools import partial

import structlog
from structlog.stdlib import BoundLogger

from ._config import FakeSettings
from ._exceptions import AlreadyExistsError, BadRequestError, NotFoundError
from ._identity import GroupVersionKind, GroupVersionResource
from ._models import KubernetesList, KubernetesObject, ListMeta
from ._scheme import Scheme, default_scheme
from ._watch import EventType, FakeWatcher

__all__ = ["ObjectTracker"]


class ObjectTracker:
    """Store of objects keyed by resource, namespace, and name.

    This is the state behind a fake clientset. Objects are stored as deep
    copies and returned as deep copies, so neither the caller's object nor an
    object returned by the tracker can be used to change the stored state
    behind the tracker's back.

    Every write stamps the stored object with the next value of a single
    monotonic resource version counter and emits one event to the watchers of
    the object's namespace and to cluster-wide watchers.

    All state is guarded by one re-entrant lock. Callers that need a
    read-modify-write cycle to be atomic, such as patch handling, may hold
    `lock` around several calls.

    Parameters
    ----------
    settings
        Watch buffering settings. Read from the environment if not given.
    scheme
        Registry of known kinds. Defaults to one containing
        ``SeldonDeployment``.
    logger
        Logger to use. The ``seldonfake`` logger is used if none is given.

    Attributes
    ----------
    lock
        Lock guarding all tracker state.
    scheme
        Registry of known kinds.
    """

    def __init__(
        self,
        settings: FakeSettings | None = None,
        *,
        scheme: Scheme | None = None,
        logger: BoundLogger | None = None,
    ) -> None:
        self.lock = threading.RLock()
        self.scheme = scheme or default_scheme()
        self._settings = settings or FakeSettings()
        self._logger = logger or structlog.get_logger("seldonfake")
        self._objects: defaultdict[
            GroupVersionResource, dict[tuple[str, str], KubernetesObject]
        ] = defaultdict(dict)
        self._watchers: defaultdict[
            tuple[GroupVersionResource, str], builtins.list[FakeWatcher]
        ] = defaultdict(list)
        self._resource_version = 0

    @property
    def resource_version(self) -> str:
        """Resource version of the most recent write."""
        with self.lock:
            return str(self._resource_version)

    def add(self, obj: KubernetesObject) -> KubernetesObject:
        """Seed an object, replacing any existing object with the same name.

        The resource is looked up from the object's ``apiVersion`` and
        ``kind`` in the scheme. Seeding emits watch events like any other
        write.

        Parameters
        ----------
        obj
            Object to store.

        Returns
        -------
        KubernetesObject
            Copy of the stored object.

        Raises
        ------
        ValueError
            Raised if the object's kind is not registered in the scheme.
        """
        resource = self.scheme.lookup_object(obj).resource
        with self.lock:
            key = (obj.metadata.namespace, obj.metadata.name)
            exists = key in self._objects[resource]
            return self._store(
                resource, obj, obj.metadata.namespace, replace=exists
            )

    def get(
        self, resource: GroupVersionResource, namespace: str, name: str
    ) -> KubernetesObject:
        """Retrieve one object.

        Raises
        ------
        NotFoundError
            Raised if there is no such object.
        """
        with self.lock:
            obj = self._objects[resource].get((namespace, name))
            if obj is None:
                msg = f"{resource.resource} {namespace}/{name} not found"
                raise NotFoundError(msg)
            return obj.model_copy(deep=True)

    def list_objects(
        self, resource: GroupVersionResource, namespace: str
    ) -> builtins.list[KubernetesObject]:
        """Return copies of all objects of a resource in a namespace.

        Objects are returned in the order they were first stored. An empty
        namespace returns objects from every namespace.
        """
        with self.lock:
            return [
                o.model_copy(deep=True)
                for (ns, _), o in self._objects[resource].items()
                if not namespace or ns == namespace
            ]

    def create(
        self,
        resource: GroupVersionResource,
        obj: KubernetesObject,
        namespace: str,
    ) -> KubernetesObject:
        """Store a new object.

        If the object has no namespace, it takes the namespace of the
        request.

        Returns
        -------
        KubernetesObject
            Copy of the stored object, including its new resource version.

        Raises
        ------
        AlreadyExistsError
            Raised if an object with that name already exists.
        BadRequestError
            Raised if the object has no name or its namespace does not match
            the namespace of the request.
        """
        with self.lock:
            return self._store(resource, obj, namespace, replace=False)

    def update(
        self,
        resource: GroupVersionResource,
        obj: KubernetesObject,
        namespace: str,
    ) -> KubernetesObject:
        """Replace an existing object.

        The resource version of the incoming object is ignored, so stale
        updates are accepted.

        Raises
        ------
        BadRequestError
            Raised if the object has no name or its namespace does not match
            the namespace of the request.
        NotFoundError
            Raised if there is no such object.
        """
        with self.lock:
            return self._store(resource, obj, namespace, replace=True)

    def delete(
        self, resource: GroupVersionResource, namespace: str, name: str
    ) -> KubernetesObject:
        """Remove an object.

        Returns
        -------
        KubernetesObject
            The last state of the removed object.

        Raises
        ------
        NotFoundError
            Raised if there is no such object.
        """
        with self.lock:
            obj = self._objects[resource].pop((namespace, name), None)
            if obj is None:
                msg = f"{resource.resource} {namespace}/{name} not found"
                raise NotFoundError(msg)
            self._emit(resource, namespace, EventType.deleted, obj)
            return obj.model_copy(deep=True)

    def watch(
        self, resource: GroupVersionResource, namespace: str
    ) -> FakeWatcher:
        """Start watching writes to a resource.

        Only writes made after this call are delivered. An empty namespace
        watches every namespace.
        """
        logger = self._logger.bind(
            resource=str(resource), namespace=namespace
        )
        watcher = FakeWatcher(
            buffer_size=self._settings.watch_buffer_size,
            overflow=self._settings.watch_overflow,
            on_stop=partial(self._unregister, resource, namespace),
            logger=logger,
        )
        with self.lock:
            self._watchers[(resource, namespace)].append(watcher)
        logger.debug("Started watcher")
        return watcher

    def _emit(
        self,
        resource: GroupVersionResource,
        namespace: str,
        event_type: EventType,
        obj: KubernetesObject,
    ) -> None:
        """Send an event to interested watchers. Must hold the lock."""
        # Copy, since a watcher that overflows unregisters itself.
        watchers = list(self._watchers.get((resource, namespace), []))
        if namespace:
            watchers.extend(self._watchers.get((resource, ""), []))
        for watcher in watchers:
            watcher.action(event_type, obj.model_copy(deep=True))

    def _store(
        self,
        resource: GroupVersionResource,
        obj: KubernetesObject,
        namespace: str,
        *,
        replace: bool,
    ) -> KubernetesObject:
        """Create or replace an object. Must hold the lock."""
        stored = obj.model_copy(deep=True)
        name = stored.metadata.name
        if not name:
            raise BadRequestError(f"{resource.resource} name is required")
        if not stored.metadata.namespace:
            stored.metadata.namespace = namespace
        elif stored.metadata.namespace != namespace:
            msg = (
                f"Request namespace {namespace} does not match object"
                f" namespace {stored.metadata.namespace}"
            )
            raise BadRequestError(msg)

        objects = self._objects[resource]
        key = (namespace, name)
        if replace and key not in objects:
            msg = f"{resource.resource} {namespace}/{name} not found"
            raise NotFoundError(msg)
        if not replace and key in objects:
            msg = f"{resource.resource} {namespace}/{name} already exists"
            raise AlreadyExistsError(msg)

        self._resource_version += 1
        stored.metadata.resource_version = str(self._resource_version)
        objects[key] = stored
        event_type = EventType.modified if replace else EventType.added
        self._emit(resource, namespace, event_type, stored)
        return stored.model_copy(deep=True)

    def _unregister(
        self,
        resource: GroupVersionResource,
        namespace: str,
        watcher: FakeWatcher,
    ) -> None:
        """Forget a stopped watcher."""
        with self.lock:
            watchers = self._watchers.get((resource, namespace), [])
            if watcher in watchers:
                watchers.remove(watcher)

    def list(
        self,
        resource: GroupVersionResource,
        kind: GroupVersionKind,
        namespace: str,
    ) -> KubernetesList:
        """List all objects of a resource in a namespace.

        No filtering beyond the namespace is applied. An empty namespace
        lists every namespace.

        Parameters
        ----------
        resource
            Resource to list.
        kind
            Kind of the objects, used to pick the list model. The list kind
            is this kind with ``List`` appended.
        namespace
            Namespace to list, or the empty string for all namespaces.

        Returns
        -------
        KubernetesList
            Fresh list whose metadata carries the current resource version.

        Raises
        ------
        ValueError
            Raised if the kind is not registered in the scheme.
        """
        list_model = self.scheme.lookup(kind).list_model
        with self.lock:
            items = self.list_objects(resource, namespace)
            metadata = ListMeta(resource_version=str(self._resource_version))
        return list_model(
            api_version=kind.api_version,
            kind=f"{kind.kind}List",
            metadata=metadata,
            items=items,
        )
