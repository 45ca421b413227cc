from .client_factory import KubernetesClientFactory
from .k8s_client import KubernetesClient
from .registry import ClusterRegistry

__all__ = ["KubernetesClientFactory", "KubernetesClient", "ClusterRegistry"]
