"""In-memory fake client for SeldonDeployment resources."""

from ._actions import (
    Action,
    CreateAction,
    DeleteAction,
    DeleteCollectionAction,
    GetAction,
    ListAction,
    PatchAction,
    UpdateAction,
    Verb,
    WatchAction,
)
from ._client import FakeResourceClient
from ._clientset import (
    Clientset,
    FakeMachinelearningV1alpha2,
    FakeSeldonDeployments,
    new_simple_clientset,
)
from ._config import FakeSettings, WatchOverflowPolicy
from ._exceptions import (
    AlreadyExistsError,
    BadRequestError,
    InvalidSelectorError,
    NoReactionError,
    NotFoundError,
    StatusError,
    UnsupportedPatchTypeError,
)
from ._fake import (
    Fake,
    ReactionFunc,
    Reactor,
    WatchReactionFunc,
    WatchReactor,
    object_reaction,
    watch_reaction,
)
from ._identity import (
    SELDON_DEPLOYMENTS_KIND,
    SELDON_DEPLOYMENTS_RESOURCE,
    GroupVersionKind,
    GroupVersionResource,
    guess_resource,
    split_api_version,
)
from ._labels import Operator, Requirement, Selector, parse_selector
from ._models import (
    CreateOptions,
    DeleteOptions,
    GetOptions,
    KubernetesList,
    KubernetesModel,
    KubernetesObject,
    ListMeta,
    ListOptions,
    ObjectMeta,
    PatchOptions,
    PatchType,
    SeldonDeployment,
    SeldonDeploymentList,
    UpdateOptions,
)
from ._patch import apply_json_patch, apply_merge_patch, apply_patch
from ._scheme import KindInfo, Scheme, default_scheme
from ._tracker import ObjectTracker
from ._watch import EventType, FakeWatcher, WatchEvent

__all__ = [
    "SELDON_DEPLOYMENTS_KIND",
    "SELDON_DEPLOYMENTS_RESOURCE",
    "Action",
    "AlreadyExistsError",
    "BadRequestError",
    "Clientset",
    "CreateAction",
    "CreateOptions",
    "DeleteAction",
    "DeleteCollectionAction",
    "DeleteOptions",
    "EventType",
    "Fake",
    "FakeMachinelearningV1alpha2",
    "FakeResourceClient",
    "FakeSeldonDeployments",
    "FakeSettings",
    "FakeWatcher",
    "GetAction",
    "GetOptions",
    "GroupVersionKind",
    "GroupVersionResource",
    "InvalidSelectorError",
    "KindInfo",
    "KubernetesList",
    "KubernetesModel",
    "KubernetesObject",
    "ListAction",
    "ListMeta",
    "ListOptions",
    "NoReactionError",
    "NotFoundError",
    "ObjectMeta",
    "ObjectTracker",
    "Operator",
    "PatchAction",
    "PatchOptions",
    "PatchType",
    "ReactionFunc",
    "Reactor",
    "Requirement",
    "Scheme",
    "Selector",
    "SeldonDeployment",
    "SeldonDeploymentList",
    "StatusError",
    "UnsupportedPatchTypeError",
    "UpdateAction",
    "UpdateOptions",
    "Verb",
    "WatchAction",
    "WatchEvent",
    "WatchOverflowPolicy",
    "WatchReactionFunc",
    "WatchReactor",
    "apply_json_patch",
    "apply_merge_patch",
    "apply_patch",
    "default_scheme",
    "guess_resource",
    "new_simple_clientset",
    "object_reaction",
    "parse_selector",
    "split_api_version",
    "watch_reaction",
]
