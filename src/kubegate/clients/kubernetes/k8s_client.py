# src/kubegate/clients/kubernetes/k8s_client.py
"""Connection to one Kubernetes cluster (datacenter)."""

from typing import Dict, Any, Optional
import yaml
import structlog
from kubernetes import client, config
from kubernetes.client.rest import ApiException

from kubegate.core.base_client import BaseClient
from kubegate.core.exceptions import ClientConnectionException, KubeGateException
from kubegate.core.utils import run_blocking
from .discovery import DiscoveryClient
from .transport import RestTransport, status_message

logger = structlog.get_logger(__name__)


class KubernetesClient(BaseClient):
    """Validated credentials plus a schema-less transport and a discovery handle for one cluster.

    The client is connected once by the cluster registry and not mutated afterwards.
    An ``api_client`` may be injected in place of loading a kubeconfig.
    """

    def __init__(self,
                 config_dict: Dict[str, Any],
                 kubeconfig_path: Optional[str] = None,
                 context: Optional[str] = None,
                 kubeconfig_data: Optional[bytes] = None,
                 cluster_name: Optional[str] = None,
                 api_client: Optional[Any] = None):
        super().__init__(config_dict, "KubernetesClient", cluster_name)
        self.kubeconfig_path = kubeconfig_path
        self.context = context
        self.kubeconfig_data = kubeconfig_data
        self.logger = logger.bind(client=self.name, cluster=self.cluster_name)

        self.api_client = api_client
        self.transport: Optional[RestTransport] = None
        self.discovery: Optional[DiscoveryClient] = None
        self.server_version: Optional[str] = None

    async def connect(self) -> None:
        """Load credentials and validate them against the cluster."""
        try:
            await run_blocking(self._connect, timeout=self.connect_timeout, cluster_id=self.cluster_name)
        except ClientConnectionException:
            raise
        except KubeGateException as e:
            raise ClientConnectionException("Kubernetes", f"{self.cluster_name}: {e.message}")

        self._connected = True
        self.logger.info(f"Kubernetes client connected to cluster: {self.cluster_name}",
                         server_version=self.server_version)

    def _connect(self) -> None:
        try:
            if self.api_client is None:
                self.api_client = client.ApiClient(self._load_configuration())
            self.transport = RestTransport(self.api_client, self.cluster_name, self.request_timeout)
            self.discovery = DiscoveryClient(self.transport)
            version = self.transport.request("GET", "/version", request_timeout=self.connect_timeout)
            self.server_version = version.get("gitVersion")
        except ApiException as e:
            raise ClientConnectionException("Kubernetes", f"{self.cluster_name}: {status_message(e)}")
        except KubeGateException:
            raise
        except Exception as e:
            raise ClientConnectionException("Kubernetes", f"{self.cluster_name}: {e}")

    def _load_configuration(self) -> client.Configuration:
        # A private Configuration per cluster; the global default is never touched.
        configuration = client.Configuration()
        if self.kubeconfig_data:
            kubeconfig_dict = yaml.safe_load(self.kubeconfig_data.decode('utf-8'))
            config.load_kube_config_from_dict(kubeconfig_dict, context=self.context,
                                              client_configuration=configuration)
            self.logger.debug("Loaded kubeconfig from provided data")
        elif self.kubeconfig_path:
            config.load_kube_config(config_file=self.kubeconfig_path, context=self.context,
                                    client_configuration=configuration)
            self.logger.debug(f"Loaded kubeconfig from {self.kubeconfig_path}")
        else:
            config.load_kube_config(context=self.context, client_configuration=configuration)
            self.logger.debug("Loaded default kubeconfig")
        return configuration

    async def disconnect(self) -> None:
        """Release the underlying connection pool."""
        if self.api_client is not None and hasattr(self.api_client, "close"):
            self.api_client.close()
        self._connected = False
        self.logger.info("Kubernetes client disconnected")

    async def health_check(self) -> bool:
        """Query the cluster's version endpoint."""
        if not self._connected or not self.transport:
            return False
        try:
            await run_blocking(self.transport.request, "GET", "/version",
                               timeout=self.request_timeout, cluster_id=self.cluster_name)
            return True
        except (ApiException, KubeGateException) as e:
            self.logger.warning("Kubernetes health check failed", error=str(e))
            return False
