"""Generic typed facade over a fake."""

from __future__ import annotations

from typing import Any

from ._actions import (
    CreateAction,
    DeleteAction,
    DeleteCollectionAction,
    GetAction,
    ListAction,
    PatchAction,
    UpdateAction,
    WatchAction,
)
from ._fake import Fake
from ._identity import GroupVersionKind, GroupVersionResource
from ._labels import parse_selector
from ._models import (
    CreateOptions,
    DeleteOptions,
    GetOptions,
    KubernetesList,
    KubernetesObject,
    ListOptions,
    PatchOptions,
    PatchType,
    UpdateOptions,
)
from ._watch import FakeWatcher

__all__ = ["FakeResourceClient"]


class FakeResourceClient[T: KubernetesObject, L: KubernetesList]:
    """Typed client for one kind, bound to one namespace.

    Subclasses set the class attributes describing the kind. Every method
    builds an action, hands it to the fake, and checks that the result has
    the expected type. A result of the wrong type means a reactor is broken
    and raises `TypeError` rather than being converted.

    Parameters
    ----------
    fake
        Shared fake that records and dispatches actions.
    namespace
        Namespace all requests are scoped to. The empty string means all
        namespaces for `list`, `watch`, and `delete_collection`.
    """

    resource: GroupVersionResource
    """Resource identity of the kind."""

    kind: GroupVersionKind
    """Kind identity, used to type list results."""

    model: type[T]
    """Model of single objects."""

    list_model: type[L]
    """Model of list results."""

    def __init__(self, fake: Fake, namespace: str = "") -> None:
        self.fake = fake
        self.namespace = namespace

    async def get(self, name: str, options: GetOptions | None = None) -> T:
        """Retrieve an object by name.

        Raises
        ------
        NotFoundError
            Raised if there is no such object in the namespace.
        """
        action = GetAction(
            resource=self.resource, namespace=self.namespace, name=name
        )
        return self._cast(self.fake.invokes(action, self._empty()))

    async def watch(self, options: ListOptions | None = None) -> FakeWatcher:
        """Watch for changes to objects in the namespace.

        Events are not filtered by the label selector in ``options``. Callers
        that need filtering must apply it to the events themselves.
        """
        action = WatchAction(
            resource=self.resource,
            namespace=self.namespace,
            list_options=options or ListOptions(),
        )
        return self.fake.invokes_watch(action)

    async def create(
        self, obj: T, options: CreateOptions | None = None
    ) -> T:
        """Create an object.

        Returns
        -------
        KubernetesObject
            The stored object, with its resource version set.

        Raises
        ------
        AlreadyExistsError
            Raised if an object with that name already exists.
        """
        action = CreateAction(
            resource=self.resource, namespace=self.namespace, object=obj
        )
        return self._cast(self.fake.invokes(action, self._empty()))

    async def update(
        self, obj: T, options: UpdateOptions | None = None
    ) -> T:
        """Replace an object.

        Raises
        ------
        NotFoundError
            Raised if there is no such object.
        """
        action = UpdateAction(
            resource=self.resource, namespace=self.namespace, object=obj
        )
        return self._cast(self.fake.invokes(action, self._empty()))

    async def delete(
        self, name: str, options: DeleteOptions | None = None
    ) -> None:
        """Delete an object by name.

        Raises
        ------
        NotFoundError
            Raised if there is no such object.
        """
        action = DeleteAction(
            resource=self.resource,
            namespace=self.namespace,
            name=name,
            delete_options=options or DeleteOptions(),
        )
        self.fake.invokes(action, self._empty())

    async def delete_collection(
        self,
        options: DeleteOptions | None = None,
        list_options: ListOptions | None = None,
    ) -> None:
        """Delete every object in the namespace matching a label selector.

        Nothing matching is not an error.
        """
        action = DeleteCollectionAction(
            resource=self.resource,
            namespace=self.namespace,
            list_options=list_options or ListOptions(),
        )
        self.fake.invokes(action, self._empty_list())

    async def patch(
        self,
        name: str,
        patch_type: PatchType,
        data: bytes,
        options: PatchOptions | None = None,
        *subresources: str,
    ) -> T:
        """Patch an object.

        Parameters
        ----------
        name
            Name of the object to patch.
        patch_type
            Content type of ``data``.
        data
            Raw patch payload.
        options
            Patch options (not enforced).
        *subresources
            Path of the subresource to patch, such as ``status``.

        Returns
        -------
        KubernetesObject
            The patched object as stored.

        Raises
        ------
        NotFoundError
            Raised if there is no such object.
        BadRequestError
            Raised if the patch cannot be applied.
        """
        action = PatchAction(
            resource=self.resource,
            namespace=self.namespace,
            subresource="/".join(subresources),
            name=name,
            patch_type=patch_type,
            patch=data,
        )
        return self._cast(self.fake.invokes(action, self._empty()))

    async def list(self, options: ListOptions | None = None) -> L:
        """List objects in the namespace matching a label selector.

        The fake returns every object in the namespace and the label selector
        is applied here. Field selectors are accepted but not enforced.

        Raises
        ------
        InvalidSelectorError
            Raised if the label selector cannot be parsed.
        """
        options = options or ListOptions()
        action = ListAction(
            resource=self.resource,
            kind=self.kind,
            namespace=self.namespace,
            list_options=options,
        )
        result = self.fake.invokes(action, self._empty_list())
        if not isinstance(result, self.list_model):
            msg = f"Expected {self.list_model.__name__}, got {result!r}"
            raise TypeError(msg)
        selector = parse_selector(options.label_selector)
        items = [
            i for i in result.items if selector.matches(i.metadata.labels)
        ]
        return result.model_copy(update={"items": items})

    def _cast(self, result: Any) -> T:
        if not isinstance(result, self.model):
            msg = f"Expected {self.model.__name__}, got {result!r}"
            raise TypeError(msg)
        return result

    def _empty(self) -> T:
        return self.model.model_construct()

    def _empty_list(self) -> L:
        return self.list_model.model_construct()
