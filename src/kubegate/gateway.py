"""Gateway facade: list, get and create any resource kind in any registered cluster."""

from typing import Dict, Optional, Union

import structlog

from kubegate.clients.kubernetes.registry import ClusterRegistry
from kubegate.clients.kubernetes.resource_client import GenericResourceClient
from kubegate.config.settings import GatewaySettings
from kubegate.core.exceptions import KubeGateException, TransportException
from kubegate.discovery.kind_resolver import KindResolver
from kubegate.mappers.manifest_mapper import decode_manifest
from kubegate.mappers.resource_mapper import ResourceDataMapper
from kubegate.models.base_models import KubeBaseModel
from kubegate.models.resource_models import GenericObject, ResourcePage

logger = structlog.get_logger(__name__)


class ResourceGateway:
    """
    Entry points called by the request layer.

    Each call moves through cluster lookup, kind resolution and execution, and
    either returns a result or raises the ``KubeGateException`` of the stage
    that failed. Nothing is retried at this layer and no state is kept between
    calls apart from the per-cluster kind caches.
    """

    def __init__(self,
                 registry: ClusterRegistry,
                 settings: Optional[GatewaySettings] = None,
                 mapper: Optional[ResourceDataMapper] = None):
        self.registry = registry
        self.settings = settings or GatewaySettings()
        self.mapper = mapper or ResourceDataMapper(enabled=self.settings.typed_views)

        self._resolvers: Dict[str, KindResolver] = {}
        self._clients: Dict[str, GenericResourceClient] = {}
        for cluster_id, connection in registry.items():
            self._resolvers[cluster_id] = KindResolver(
                connection,
                retry_attempts=self.settings.discovery_retry_attempts,
                backoff_factor=self.settings.discovery_backoff_factor
            )
            self._clients[cluster_id] = GenericResourceClient(
                connection,
                default_list_limit=self.settings.default_list_limit
            )

        self.logger = logger.bind(component="gateway")

    def resolver(self, cluster_id: str) -> KindResolver:
        """The kind resolver of ``cluster_id``; raises ``ClusterNotFoundException`` for unknown ids."""
        self.registry.lookup(cluster_id)
        return self._resolvers[cluster_id]

    async def list_resources(self,
                             cluster_id: str,
                             kind: str,
                             namespace: Optional[str] = None,
                             label_selector: str = "",
                             limit: Optional[int] = None,
                             continue_token: Optional[str] = None,
                             timeout: Optional[float] = None) -> ResourcePage:
        """List the first page of ``kind`` in ``namespace`` matching ``label_selector``."""
        namespace = self._namespace(namespace)
        try:
            resolver, resource_client = self._cluster(cluster_id)
            coordinate = await resolver.resolve(kind)
            page = await resource_client.list(
                coordinate,
                namespace,
                label_selector=label_selector,
                limit=limit,
                continue_token=continue_token,
                timeout=timeout
            )
            return self.mapper.map_page(coordinate, page)
        except KubeGateException as e:
            self._forget_stale_kinds(cluster_id, e)
            self._log_failure("list", cluster_id, kind, e)
            raise

    async def get_resource(self,
                           cluster_id: str,
                           kind: str,
                           namespace: Optional[str],
                           name: str,
                           timeout: Optional[float] = None) -> Union[KubeBaseModel, GenericObject]:
        """Get one object, as a typed view when its kind has one."""
        namespace = self._namespace(namespace)
        try:
            resolver, resource_client = self._cluster(cluster_id)
            coordinate = await resolver.resolve(kind)
            obj = await resource_client.get(coordinate, namespace, name, timeout=timeout)
            return self.mapper.to_view(coordinate, obj)
        except KubeGateException as e:
            self._log_failure("get", cluster_id, kind, e)
            raise

    async def create_resource(self,
                              cluster_id: str,
                              kind: Optional[str],
                              namespace: Optional[str],
                              raw_manifest: Union[bytes, str],
                              timeout: Optional[float] = None) -> str:
        """Create the object described by ``raw_manifest`` and return its name.

        The manifest's own apiVersion and kind decide what is created; ``kind``
        is only checked against it.
        """
        namespace = self._namespace(namespace)
        try:
            resolver, resource_client = self._cluster(cluster_id)
            manifest = decode_manifest(raw_manifest)
            if kind and not _same_kind(kind, manifest["kind"]):
                self.logger.warning("requested kind differs from manifest, using manifest",
                                    requested=kind, manifest_kind=manifest["kind"])
            coordinate = await resolver.resolve(manifest["kind"], api_version=manifest["apiVersion"])
            return await resource_client.create(coordinate, namespace, manifest, timeout=timeout)
        except KubeGateException as e:
            self._forget_stale_kinds(cluster_id, e)
            self._log_failure("create", cluster_id, kind, e)
            raise

    def _cluster(self, cluster_id: str):
        return self.resolver(cluster_id), self._clients[cluster_id]

    def _forget_stale_kinds(self, cluster_id: str, error: KubeGateException) -> None:
        # A 404 on a collection means the cached coordinate is no longer served,
        # e.g. its CustomResourceDefinition was removed.
        if isinstance(error, TransportException) and error.status == 404:
            self._resolvers[cluster_id].invalidate()

    def _namespace(self, namespace: Optional[str]) -> str:
        return self.settings.default_namespace if namespace is None else namespace

    def _log_failure(self, action: str, cluster_id: str, kind: Optional[str], error: KubeGateException) -> None:
        self.logger.error(f"{action} failed", cluster=cluster_id, kind=kind,
                          error_kind=error.error_kind, error=error.message)


def _same_kind(requested: str, manifest_kind: str) -> bool:
    requested = requested.strip().lower()
    manifest_kind = manifest_kind.lower()
    return requested in (manifest_kind, f"{manifest_kind}s") or requested.startswith(f"{manifest_kind}s.")
