"""Resource identities for dispatch and typing."""

from __future__ import annotations

from dataclasses import dataclass

__all__ = [
    "SELDON_DEPLOYMENTS_KIND",
    "SELDON_DEPLOYMENTS_RESOURCE",
    "GroupVersionKind",
    "GroupVersionResource",
    "guess_resource",
    "split_api_version",
]


@dataclass(frozen=True)
class GroupVersionResource:
    """Identity of a resource as used in API paths.

    This is the key under which the tracker stores objects and the identity
    recorded on every action.
    """

    group: str
    """API group, empty for the core group."""

    version: str
    """API version within the group."""

    resource: str
    """Plural, lower-case resource name."""

    def __str__(self) -> str:
        if self.group:
            return f"{self.group}/{self.version}/{self.resource}"
        return f"{self.version}/{self.resource}"


@dataclass(frozen=True)
class GroupVersionKind:
    """Identity of a resource as used in object type information."""

    group: str
    """API group, empty for the core group."""

    version: str
    """API version within the group."""

    kind: str
    """Kind, in the capitalization Kubernetes uses."""

    @property
    def api_version(self) -> str:
        """The ``apiVersion`` string for objects of this kind."""
        if self.group:
            return f"{self.group}/{self.version}"
        return self.version

    def __str__(self) -> str:
        return f"{self.api_version}, Kind={self.kind}"


def split_api_version(api_version: str) -> tuple[str, str]:
    """Split an ``apiVersion`` string into group and version.

    Parameters
    ----------
    api_version
        Value of ``apiVersion``, such as ``machinelearning.seldon.io/v1`` or
        ``v1`` for the core group.

    Returns
    -------
    tuple of str, str
        The group (empty for the core group) and the version.
    """
    if "/" not in api_version:
        return "", api_version
    group, version = api_version.split("/", 1)
    return group, version


def guess_resource(kind: GroupVersionKind) -> GroupVersionResource:
    """Guess the plural resource of a kind.

    This follows the same naive pluralization rules that Kubernetes client
    libraries use when no discovery information is available. It is good
    enough for seeding test objects.

    Parameters
    ----------
    kind
        Kind to convert.

    Returns
    -------
    GroupVersionResource
        Resource identity with a guessed plural name.
    """
    singular = kind.kind.lower()
    if singular.endswith(("s", "x", "z", "ch", "sh")):
        plural = singular + "es"
    elif singular.endswith("y") and singular[-2:-1] not in "aeiou":
        plural = singular[:-1] + "ies"
    else:
        plural = singular + "s"
    return GroupVersionResource(
        group=kind.group, version=kind.version, resource=plural
    )


SELDON_DEPLOYMENTS_RESOURCE = GroupVersionResource(
    group="machinelearning.seldon.io",
    version="v1alpha2",
    resource="seldondeployments",
)
"""Resource identity of ``SeldonDeployment`` objects."""

SELDON_DEPLOYMENTS_KIND = GroupVersionKind(
    group="machinelearning.seldon.io",
    version="v1alpha2",
    kind="SeldonDeployment",
)
"""Kind identity of ``SeldonDeployment`` objects."""
