"""Fake clientset for the ``machinelearning.seldon.io`` API group."""

from __future__ import annotations

from structlog.stdlib import BoundLogger

from ._client import FakeResourceClient
from ._config import FakeSettings
from ._fake import Fake, object_reaction, watch_reaction
from ._identity import SELDON_DEPLOYMENTS_KIND, SELDON_DEPLOYMENTS_RESOURCE
from ._models import KubernetesObject, SeldonDeployment, SeldonDeploymentList
from ._scheme import Scheme
from ._tracker import ObjectTracker

__all__ = [
    "Clientset",
    "FakeMachinelearningV1alpha2",
    "FakeSeldonDeployments",
    "new_simple_clientset",
]


class FakeSeldonDeployments(
    FakeResourceClient[SeldonDeployment, SeldonDeploymentList]
):
    """Fake client for ``SeldonDeployment`` objects in one namespace."""

    resource = SELDON_DEPLOYMENTS_RESOURCE
    kind = SELDON_DEPLOYMENTS_KIND
    model = SeldonDeployment
    list_model = SeldonDeploymentList


class FakeMachinelearningV1alpha2:
    """Fake client for the ``machinelearning.seldon.io/v1alpha2`` group."""

    def __init__(self, fake: Fake) -> None:
        self.fake = fake

    def seldon_deployments(
        self, namespace: str = ""
    ) -> FakeSeldonDeployments:
        """Return a client for ``SeldonDeployment`` objects.

        Parameters
        ----------
        namespace
            Namespace to scope requests to, or the empty string for all
            namespaces.
        """
        return FakeSeldonDeployments(self.fake, namespace)


class Clientset(Fake):
    """A fake wired to an object tracker.

    The default object and watch reactions are installed at the end of the
    chains, so reactors added with `~Fake.prepend_reactor` run first and can
    override or fail any request.

    Parameters
    ----------
    tracker
        Store shared by every client handed out by this clientset.
    logger
        Logger to use. The ``seldonfake`` logger is used if none is given.
    """

    def __init__(
        self, tracker: ObjectTracker, *, logger: BoundLogger | None = None
    ) -> None:
        super().__init__(logger=logger)
        self._tracker = tracker
        self.add_reactor("*", "*", object_reaction(tracker))
        self.add_watch_reactor("*", watch_reaction(tracker))

    @property
    def tracker(self) -> ObjectTracker:
        """The store behind this clientset."""
        return self._tracker

    def machinelearning_v1alpha2(self) -> FakeMachinelearningV1alpha2:
        """Return the client for the ``v1alpha2`` API group version."""
        return FakeMachinelearningV1alpha2(self)


def new_simple_clientset(
    *objects: KubernetesObject,
    settings: FakeSettings | None = None,
    scheme: Scheme | None = None,
    logger: BoundLogger | None = None,
) -> Clientset:
    """Build a clientset whose tracker is seeded with objects.

    Parameters
    ----------
    *objects
        Objects to seed. Their resources are looked up in the scheme.
    settings
        Tracker settings. Read from the environment if not given.
    scheme
        Registry of known kinds. Defaults to one containing
        ``SeldonDeployment``.
    logger
        Logger to use. The ``seldonfake`` logger is used if none is given.

    Returns
    -------
    Clientset
        Clientset with an empty action log.

    Examples
    --------
    .. code-block:: python

       clientset = new_simple_clientset(deployment)
       client = clientset.machinelearning_v1alpha2().seldon_deployments("ns")
       await client.get(deployment.metadata.name)
    """
    tracker = ObjectTracker(settings, scheme=scheme, logger=logger)
    for obj in objects:
        tracker.add(obj)
    return Clientset(tracker, logger=logger)
