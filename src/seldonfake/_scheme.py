"""Registry mapping kinds to their models and resources."""

from __future__ import annotations

from dataclasses import dataclass

from ._identity import (
    SELDON_DEPLOYMENTS_KIND,
    SELDON_DEPLOYMENTS_RESOURCE,
    GroupVersionKind,
    GroupVersionResource,
    guess_resource,
    split_api_version,
)
from ._models import (
    KubernetesList,
    KubernetesObject,
    SeldonDeployment,
    SeldonDeploymentList,
)

__all__ = [
    "KindInfo",
    "Scheme",
    "default_scheme",
]


@dataclass(frozen=True)
class KindInfo:
    """Everything the tracker needs to know about one kind."""

    kind: GroupVersionKind
    resource: GroupVersionResource
    model: type[KubernetesObject]
    list_model: type[KubernetesList]


class Scheme:
    """Registry of the kinds a tracker can store.

    The tracker uses this to find the resource of an object seeded without
    naming one, and to build the typed list returned for a list request.
    """

    def __init__(self) -> None:
        self._kinds: dict[GroupVersionKind, KindInfo] = {}

    def register(
        self,
        kind: GroupVersionKind,
        model: type[KubernetesObject],
        list_model: type[KubernetesList],
        resource: GroupVersionResource | None = None,
    ) -> None:
        """Register a kind.

        Parameters
        ----------
        kind
            Kind identity.
        model
            Model for single objects of this kind.
        list_model
            Model for lists of objects of this kind.
        resource
            Resource identity. If not given, it is guessed from the kind.
        """
        self._kinds[kind] = KindInfo(
            kind=kind,
            resource=resource or guess_resource(kind),
            model=model,
            list_model=list_model,
        )

    def lookup(self, kind: GroupVersionKind) -> KindInfo:
        """Find a registered kind.

        Raises
        ------
        ValueError
            Raised if the kind was never registered.
        """
        if kind not in self._kinds:
            raise ValueError(f"Kind {kind} is not registered")
        return self._kinds[kind]

    def lookup_object(self, obj: KubernetesObject) -> KindInfo:
        """Find the registered kind of an object from its type information.

        Raises
        ------
        ValueError
            Raised if the object's kind was never registered.
        """
        group, version = split_api_version(obj.api_version)
        return self.lookup(GroupVersionKind(group, version, obj.kind))


def default_scheme() -> Scheme:
    """Build a scheme with ``SeldonDeployment`` registered."""
    scheme = Scheme()
    scheme.register(
        SELDON_DEPLOYMENTS_KIND,
        SeldonDeployment,
        SeldonDeploymentList,
        SELDON_DEPLOYMENTS_RESOURCE,
    )
    return scheme
