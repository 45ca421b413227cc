from .exceptions import *
from .base_client import BaseClient
from .utils import *

__all__ = [
    "BaseClient",
    "KubeGateException",
    "ClusterNotFoundException",
    "ResourceKindUnmappableException",
    "AmbiguousKindException",
    "ManifestDecodeException",
    "ResourceNotFoundException",
    "ResourceValidationException",
    "TransportException",
    "ClientConnectionException",
    "ConfigurationException",
    "retry_with_backoff",
    "run_blocking",
    "gather_with_concurrency",
    "setup_logging",
]
