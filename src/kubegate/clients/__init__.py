from .kubernetes.client_factory import KubernetesClientFactory
from .kubernetes.registry import ClusterRegistry

__all__ = ["KubernetesClientFactory", "ClusterRegistry"]
