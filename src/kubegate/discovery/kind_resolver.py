"""Per-cluster resolution of kind names to resource coordinates."""

import asyncio
from typing import Any, Dict, List, Optional, Tuple

import structlog
from kubernetes.client.rest import ApiException

from kubegate.clients.kubernetes.k8s_client import KubernetesClient
from kubegate.clients.kubernetes.transport import translate_api_error
from kubegate.core.exceptions import (
    AmbiguousKindException,
    KubeGateException,
    ResourceKindUnmappableException,
    TransportException,
)
from kubegate.core.utils import gather_with_concurrency, retry_with_backoff, run_blocking
from kubegate.models.resource_models import ApiGroupInfo, DiscoveredResource, ResourceCoordinate

logger = structlog.get_logger(__name__)

CORE_GROUP = ""


class KindResolver:
    """Maps kind names to ``ResourceCoordinate`` for exactly one cluster.

    Coordinates and the discovery document are cached for the life of the
    process. A lookup that the cached document cannot answer triggers one fresh
    discovery round; if that round has no match either,
    ``ResourceKindUnmappableException`` is raised. Callers that queued behind a
    round share its outcome, failures included, instead of starting their own.

    Accepted names: kind (case-insensitive), plural, singular and short names,
    optionally qualified with a group as ``<name>.<group>``. When the same name
    is served by several groups the core group wins; among non-core groups the
    lookup is ambiguous and fails instead of picking one.
    """

    def __init__(self,
                 connection: KubernetesClient,
                 retry_attempts: int = 3,
                 backoff_factor: float = 0.5,
                 max_concurrency: int = 10):
        self.connection = connection
        self.cluster_name = connection.cluster_name
        self.max_concurrency = max_concurrency
        self.discovery_rounds = 0

        self._coordinates: Dict[Tuple[str, str], ResourceCoordinate] = {}
        self._document: Optional[List[DiscoveredResource]] = None
        # outcome of the latest completed round
        self._rounds_completed = 0
        self._round_error: Optional[KubeGateException] = None
        self._lock = asyncio.Lock()
        self._fetch_document = retry_with_backoff(
            max_retries=retry_attempts,
            backoff_factor=backoff_factor,
            max_wait=10.0,
            retry_on=(TransportException,)
        )(self._scan)
        self.logger = logger.bind(cluster=self.cluster_name)

    async def resolve(self, kind_name: str, api_version: Optional[str] = None) -> ResourceCoordinate:
        """Resolve ``kind_name``, restricted to ``api_version`` when one is given."""
        key = (kind_name.strip().lower(), api_version or "")
        coordinate = self._coordinates.get(key)
        if coordinate is not None:
            return coordinate

        seen = self._rounds_completed
        async with self._lock:
            coordinate = self._coordinates.get(key)
            if coordinate is not None:
                return coordinate

            # a round that finished while this call waited for the lock is fresh
            fresh = self._rounds_completed != seen
            if fresh and self._round_error is not None:
                raise self._round_error

            if self._document is not None:
                coordinate = self._match(self._document, kind_name, api_version)
                if coordinate is None and not fresh:
                    self.logger.debug("kind missing from cached discovery, rescanning", kind=kind_name)
                    coordinate = await self._rescan(kind_name, api_version)
            else:
                coordinate = await self._rescan(kind_name, api_version)

            if coordinate is None:
                raise ResourceKindUnmappableException(kind_name, self.cluster_name)

            self._coordinates[key] = coordinate
            self.logger.debug("resolved kind", kind=kind_name, coordinate=str(coordinate))
            return coordinate

    def invalidate(self) -> None:
        """Forget every cached coordinate and the discovery document."""
        self._coordinates.clear()
        self._document = None
        self.logger.info("kind cache invalidated")

    async def _rescan(self, kind_name: str, api_version: Optional[str]) -> Optional[ResourceCoordinate]:
        """Run one discovery round and record its outcome for queued callers."""
        self._round_error = None
        try:
            self._document = await self._fetch_document()
        except KubeGateException as e:
            self._round_error = e
            raise
        finally:
            self._rounds_completed += 1

        return self._match(self._document, kind_name, api_version)

    def _match(self,
               document: List[DiscoveredResource],
               kind_name: str,
               api_version: Optional[str]) -> Optional[ResourceCoordinate]:
        name = kind_name.strip()
        candidates = [r for r in document if r.matches(name)]
        if not candidates and "." in name:
            resource, _, group = name.partition(".")
            candidates = [r for r in document if r.group == group.lower() and r.matches(resource)]

        if api_version:
            group, _, version = api_version.rpartition("/")
            candidates = [r for r in candidates if r.group == group and r.version == version]

        if not candidates:
            return None

        groups = {r.group for r in candidates}
        if len(groups) > 1:
            if CORE_GROUP not in groups:
                raise AmbiguousKindException(name, self.cluster_name, list(groups))
            candidates = [r for r in candidates if r.group == CORE_GROUP]

        chosen = next((r for r in candidates if r.preferred), candidates[0])
        return chosen.to_coordinate()

    async def _scan(self) -> List[DiscoveredResource]:
        """One discovery round over every group version the cluster serves."""
        self.connection.ensure_connected()
        self.discovery_rounds += 1
        discovery = self.connection.discovery
        timeout = self.connection.request_timeout

        try:
            groups: List[ApiGroupInfo] = await run_blocking(
                discovery.server_groups,
                request_timeout=timeout,
                timeout=timeout,
                cluster_id=self.cluster_name
            )
        except ApiException as e:
            raise translate_api_error(self.cluster_name, e)

        group_versions = [(group, version) for group in groups for version in _ordered_versions(group)]
        results = await gather_with_concurrency(
            [
                run_blocking(
                    discovery.server_resources,
                    group.name,
                    version,
                    request_timeout=timeout,
                    timeout=timeout,
                    cluster_id=self.cluster_name
                )
                for group, version in group_versions
            ],
            max_concurrency=self.max_concurrency,
            return_exceptions=True
        )

        document: List[DiscoveredResource] = []
        for (group, version), result in zip(group_versions, results):
            group_version = f"{group.name}/{version}" if group.name else version
            if isinstance(result, ApiException):
                # Aggregated APIs can be down without the cluster being unusable.
                self.logger.warning("skipping unavailable group version",
                                    group_version=group_version, status=result.status)
                continue
            if isinstance(result, BaseException):
                raise result
            document.extend(_to_resources(group, version, result))

        self.logger.debug("discovery round complete", groups=len(groups), resources=len(document))
        return document


def _ordered_versions(group: ApiGroupInfo) -> List[str]:
    """Group versions with the preferred one first, otherwise in server order."""
    if group.preferred_version and group.preferred_version in group.versions:
        return [group.preferred_version] + [v for v in group.versions if v != group.preferred_version]
    return list(group.versions)


def _to_resources(group: ApiGroupInfo, version: str, entries: List[Dict[str, Any]]) -> List[DiscoveredResource]:
    resources = []
    for entry in entries:
        name = entry.get("name", "")
        if not name or "/" in name:
            # subresources such as deployments/scale
            continue
        resources.append(DiscoveredResource(
            group=group.name,
            version=version,
            name=name,
            kind=entry.get("kind", ""),
            namespaced=bool(entry.get("namespaced")),
            preferred=version == group.preferred_version,
            singular_name=entry.get("singularName") or "",
            short_names=entry.get("shortNames") or [],
            verbs=entry.get("verbs") or [],
        ))
    return resources
