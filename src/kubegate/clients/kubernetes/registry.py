"""Registry of connected clusters, built once at startup."""

from types import MappingProxyType
from typing import Any, Dict, ItemsView, Iterable, List, Mapping
import structlog

from kubegate.core.exceptions import ClusterNotFoundException
from kubegate.core.utils import gather_with_concurrency
from .client_factory import KubernetesClientFactory
from .k8s_client import KubernetesClient

logger = structlog.get_logger(__name__)


class ClusterRegistry:
    """Read-only mapping of datacenter id to connected ``KubernetesClient``.

    A datacenter whose connection cannot be established is left out; looking it
    up later raises ``ClusterNotFoundException`` like any unknown id.
    """

    def __init__(self, connections: Mapping[str, KubernetesClient]):
        self._connections: Mapping[str, KubernetesClient] = MappingProxyType(dict(connections))

    @classmethod
    async def build(cls,
                    datacenters: Iterable[str],
                    factory: KubernetesClientFactory,
                    max_concurrency: int = 5) -> "ClusterRegistry":
        """Connect every datacenter in parallel and keep the ones that succeed."""
        names = list(dict.fromkeys(datacenters))
        if not names:
            logger.warning("no datacenter was found")
            return cls({})

        clients = [factory.create_client(name) for name in names]
        results = await gather_with_concurrency(
            [k8s.connect() for k8s in clients],
            max_concurrency=max_concurrency,
            return_exceptions=True
        )

        connections: Dict[str, KubernetesClient] = {}
        for name, k8s, result in zip(names, clients, results):
            if isinstance(result, BaseException):
                logger.warning(f"could not load the {name} kube config", cluster=name, error=str(result))
                continue
            connections[name] = k8s
            logger.info(f"Loading {name} kube config succeed", cluster=name)

        logger.info("Cluster registry ready", loaded=len(connections), configured=len(names))
        return cls(connections)

    @classmethod
    async def from_settings(cls, settings: Any) -> "ClusterRegistry":
        """Build the registry from ``Settings.kubernetes`` and ``Settings.gateway``."""
        factory = KubernetesClientFactory({
            **settings.kubernetes.model_dump(),
            "request_timeout_seconds": settings.gateway.request_timeout_seconds,
            "connect_timeout_seconds": settings.gateway.connect_timeout_seconds,
        })
        return await cls.build(
            settings.kubernetes.datacenters,
            factory,
            max_concurrency=settings.gateway.startup_concurrency
        )

    def lookup(self, cluster_id: str) -> KubernetesClient:
        try:
            return self._connections[cluster_id]
        except KeyError:
            raise ClusterNotFoundException(cluster_id) from None

    @property
    def cluster_ids(self) -> List[str]:
        return list(self._connections)

    def items(self) -> ItemsView[str, KubernetesClient]:
        return self._connections.items()

    def __contains__(self, cluster_id: object) -> bool:
        return cluster_id in self._connections

    def __len__(self) -> int:
        return len(self._connections)

    async def close(self) -> None:
        """Disconnect every cluster; called once at process exit."""
        for k8s in self._connections.values():
            await k8s.disconnect()
