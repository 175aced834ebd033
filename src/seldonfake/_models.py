"""Models for SeldonDeployment objects and request options."""

from __future__ import annotations

from datetime import datetime
from enum import StrEnum
from typing import Any

from pydantic import BaseModel, ConfigDict, Field
from pydantic.alias_generators import to_camel

from ._identity import SELDON_DEPLOYMENTS_KIND

__all__ = [
    "CreateOptions",
    "DeleteOptions",
    "GetOptions",
    "KubernetesList",
    "KubernetesModel",
    "KubernetesObject",
    "ListMeta",
    "ListOptions",
    "ObjectMeta",
    "PatchOptions",
    "PatchType",
    "SeldonDeployment",
    "SeldonDeploymentList",
    "UpdateOptions",
]


class KubernetesModel(BaseModel):
    """Base for models that use Kubernetes camel-case keys.

    Models can be initialized with either camel-case or snake-case keys.
    ``model_dump`` and ``model_dump_json`` default to camel-case output so that
    the result looks like what the API server would return.
    """

    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True)

    def model_dump(self, **kwargs: Any) -> dict[str, Any]:
        """Export the model as a dictionary, by alias unless told otherwise."""
        kwargs.setdefault("by_alias", True)
        return super().model_dump(**kwargs)

    def model_dump_json(self, **kwargs: Any) -> str:
        """Export the model as JSON, by alias unless told otherwise."""
        kwargs.setdefault("by_alias", True)
        return super().model_dump_json(**kwargs)


class ObjectMeta(KubernetesModel):
    """Metadata carried by every stored object."""

    name: str = Field("", title="Name of the object")

    namespace: str = Field(
        "",
        title="Namespace",
        description="Empty for cluster-scoped objects",
    )

    labels: dict[str, str] = Field(default_factory=dict, title="Labels")

    annotations: dict[str, str] = Field(
        default_factory=dict, title="Annotations"
    )

    resource_version: str = Field(
        "",
        title="Resource version",
        description="Set by the tracker on every write",
    )

    uid: str = Field("", title="Unique ID")

    generation: int | None = Field(None, title="Generation")

    creation_timestamp: datetime | None = Field(
        None, title="Creation timestamp"
    )


class ListMeta(KubernetesModel):
    """Metadata of a list result."""

    resource_version: str = Field(
        "", title="Resource version of the store at list time"
    )

    continue_: str | None = Field(
        None, alias="continue", title="Continuation token"
    )


class KubernetesObject(KubernetesModel):
    """Common shape of a stored object."""

    api_version: str

    kind: str

    metadata: ObjectMeta = Field(default_factory=ObjectMeta)


class SeldonDeployment(KubernetesObject):
    """A ``SeldonDeployment`` custom resource.

    The ``spec`` and ``status`` are kept opaque. The fake never looks inside
    them except when applying patches.
    """

    api_version: str = SELDON_DEPLOYMENTS_KIND.api_version

    kind: str = SELDON_DEPLOYMENTS_KIND.kind

    spec: dict[str, Any] = Field(default_factory=dict, title="Spec")

    status: dict[str, Any] | None = Field(None, title="Status")


class KubernetesList(KubernetesModel):
    """Common shape of a list result."""

    api_version: str

    kind: str

    metadata: ListMeta = Field(default_factory=ListMeta)

    items: list[Any] = Field(default_factory=list)


class SeldonDeploymentList(KubernetesList):
    """A list of ``SeldonDeployment`` objects."""

    api_version: str = SELDON_DEPLOYMENTS_KIND.api_version

    kind: str = f"{SELDON_DEPLOYMENTS_KIND.kind}List"

    items: list[SeldonDeployment] = Field(default_factory=list)


class PatchType(StrEnum):
    """Content type of a patch payload."""

    json = "application/json-patch+json"
    merge = "application/merge-patch+json"
    strategic_merge = "application/strategic-merge-patch+json"
    apply = "application/apply-patch+yaml"


class GetOptions(KubernetesModel):
    """Options for a get request. Accepted but not enforced."""

    resource_version: str | None = None


class ListOptions(KubernetesModel):
    """Options for list, watch, and delete-collection requests.

    Only ``label_selector`` changes behavior. The field selector and resource
    version are recorded on the action but never enforced.
    """

    label_selector: str | None = None

    field_selector: str | None = None

    resource_version: str | None = None

    timeout_seconds: int | None = None

    limit: int | None = None

    continue_: str | None = Field(None, alias="continue")


class CreateOptions(KubernetesModel):
    """Options for a create request. Accepted but not enforced."""

    dry_run: list[str] | None = None

    field_manager: str | None = None


class UpdateOptions(KubernetesModel):
    """Options for an update request. Accepted but not enforced."""

    dry_run: list[str] | None = None

    field_manager: str | None = None


class DeleteOptions(KubernetesModel):
    """Options for delete requests. Accepted but not enforced."""

    dry_run: list[str] | None = None

    grace_period_seconds: int | None = None

    propagation_policy: str | None = None


class PatchOptions(KubernetesModel):
    """Options for a patch request. Accepted but not enforced."""

    dry_run: list[str] | None = None

    field_manager: str | None = None

    force: bool | None = None
