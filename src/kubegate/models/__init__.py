from .base_models import KubeBaseModel
from .resource_models import (
    ApiGroupInfo,
    DiscoveredResource,
    GenericObject,
    ResourceCoordinate,
    ResourcePage,
    ResourceScope,
)
from .responses import GatewayResponse, entry_type
from .workload_models import DaemonSet, Deployment, ObjectMeta, StatefulSet

__all__ = [
    "KubeBaseModel",
    "ApiGroupInfo",
    "DiscoveredResource",
    "GenericObject",
    "ResourceCoordinate",
    "ResourcePage",
    "ResourceScope",
    "GatewayResponse",
    "entry_type",
    "DaemonSet",
    "Deployment",
    "ObjectMeta",
    "StatefulSet",
]
