"""Kubernetes client factory."""

from pathlib import Path
from typing import Dict, Any, Optional
import structlog

from .k8s_client import KubernetesClient

logger = structlog.get_logger(__name__)


class KubernetesClientFactory:
    """Builds one unconnected client per datacenter from the kubeconfig layout."""

    def __init__(self, config: Dict[str, Any]):
        self.config = config
        self.config_path = config.get("config_path", "./conf")
        self.config_suffix = config.get("config_suffix", ".kubeconfig")
        self.kubeconfigs: Dict[str, str] = dict(config.get("kubeconfigs") or {})
        self.context = config.get("context")

        self.logger = logger.bind(factory="kubernetes")

    def kubeconfig_location(self, datacenter: str) -> str:
        """``<config_path>/<datacenter><config_suffix>`` unless an explicit path is configured."""
        if datacenter in self.kubeconfigs:
            return self.kubeconfigs[datacenter]
        return str(Path(self.config_path) / f"{datacenter}{self.config_suffix}")

    def create_client(self, datacenter: str, kubeconfig_data: Optional[bytes] = None) -> KubernetesClient:
        """Create the client for one datacenter."""
        location = None if kubeconfig_data else self.kubeconfig_location(datacenter)
        self.logger.debug("Creating Kubernetes client", cluster=datacenter, kubeconfig=location)
        return KubernetesClient(
            config_dict=self.config,
            kubeconfig_path=location,
            context=self.context,
            kubeconfig_data=kubeconfig_data,
            cluster_name=datacenter
        )
