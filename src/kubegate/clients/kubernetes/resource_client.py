"""Generic list/get/create against a resolved resource coordinate."""

import copy
from typing import Any, Dict, Optional

import structlog
from kubernetes.client.rest import ApiException

from kubegate.core.exceptions import ResourceValidationException
from kubegate.core.utils import run_blocking, safe_get
from kubegate.models.resource_models import GenericObject, ResourceCoordinate, ResourcePage
from .k8s_client import KubernetesClient
from .transport import translate_api_error

logger = structlog.get_logger(__name__)

# Server-populated metadata that the API server refuses on create.
SERVER_METADATA_FIELDS = (
    "resourceVersion",
    "uid",
    "creationTimestamp",
    "generation",
    "managedFields",
    "selfLink",
)


class GenericResourceClient:
    """Schema-less CRUD for one cluster.

    Every call is bounded by a timeout (the caller's, or the connection's
    default) and is never retried here.
    """

    def __init__(self, connection: KubernetesClient, default_list_limit: int = 100):
        self.connection = connection
        self.cluster_name = connection.cluster_name
        self.default_list_limit = default_list_limit
        self.logger = logger.bind(cluster=self.cluster_name)

    async def list(self,
                   coordinate: ResourceCoordinate,
                   namespace: Optional[str],
                   label_selector: str = "",
                   limit: Optional[int] = None,
                   continue_token: Optional[str] = None,
                   timeout: Optional[float] = None) -> ResourcePage:
        """Return the first page of objects; the continuation token is passed through."""
        _require_verb(coordinate, "list")
        query = {
            "labelSelector": label_selector,
            "limit": limit if limit and limit > 0 else self.default_list_limit,
            "continue": continue_token,
        }
        data = await self._call("GET", coordinate.path(namespace), coordinate,
                                namespace=namespace, query=query, timeout=timeout)

        items = data.get("items") or []
        for item in items:
            # List items come back without their own type meta.
            item.setdefault("apiVersion", coordinate.api_version)
            item.setdefault("kind", coordinate.kind)

        metadata = data.get("metadata") or {}
        self.logger.debug(f"Listed {len(items)} {coordinate.resource_name}", namespace=namespace)
        return ResourcePage(
            items=items,
            continue_token=metadata.get("continue") or None,
            resource_version=metadata.get("resourceVersion")
        )

    async def get(self,
                  coordinate: ResourceCoordinate,
                  namespace: Optional[str],
                  name: str,
                  timeout: Optional[float] = None) -> GenericObject:
        _require_verb(coordinate, "get")
        if not name:
            raise ResourceValidationException(f"a name is required to get {coordinate.kind}")
        return await self._call("GET", coordinate.path(namespace, name), coordinate,
                                name=name, namespace=namespace, timeout=timeout)

    async def create(self,
                     coordinate: ResourceCoordinate,
                     namespace: Optional[str],
                     payload: GenericObject,
                     timeout: Optional[float] = None) -> str:
        """Create ``payload`` and return the name the cluster assigned.

        For namespaced kinds the payload's own ``metadata.namespace`` wins over
        the ``namespace`` argument.
        """
        _require_verb(coordinate, "create")
        body = prepare_create_body(payload)
        metadata = body.setdefault("metadata", {})
        if coordinate.namespaced:
            namespace = metadata.get("namespace") or namespace
            if not namespace:
                raise ResourceValidationException(f"{coordinate.kind} is namespaced but no namespace was given")
            metadata["namespace"] = namespace
        else:
            namespace = None
            metadata.pop("namespace", None)

        result = await self._call("POST", coordinate.path(namespace), coordinate,
                                  namespace=namespace, body=body, timeout=timeout)
        name = safe_get(result, "metadata.name") or metadata.get("name")
        self.logger.info(f"created {coordinate.kind} {name!r} succeed", namespace=namespace)
        return name

    async def _call(self,
                    method: str,
                    path: str,
                    coordinate: ResourceCoordinate,
                    name: Optional[str] = None,
                    namespace: Optional[str] = None,
                    query: Optional[Dict[str, Any]] = None,
                    body: Optional[Dict[str, Any]] = None,
                    timeout: Optional[float] = None) -> Dict[str, Any]:
        self.connection.ensure_connected()
        timeout = timeout or self.connection.request_timeout
        try:
            return await run_blocking(
                self.connection.transport.request,
                method,
                path,
                query=query,
                body=body,
                request_timeout=timeout,
                timeout=timeout,
                cluster_id=self.cluster_name
            )
        except ApiException as e:
            raise translate_api_error(
                self.cluster_name,
                e,
                kind=coordinate.kind,
                name=name,
                namespace=namespace if coordinate.namespaced else None
            )


def prepare_create_body(payload: GenericObject) -> GenericObject:
    """Copy ``payload`` without status and server-populated metadata."""
    if not isinstance(payload, dict):
        raise ResourceValidationException("a create payload must be an object")
    body = copy.deepcopy(payload)
    body.pop("status", None)
    metadata = body.get("metadata")
    if isinstance(metadata, dict):
        for field in SERVER_METADATA_FIELDS:
            metadata.pop(field, None)
    elif metadata is not None:
        raise ResourceValidationException("metadata must be an object")
    return body


def _require_verb(coordinate: ResourceCoordinate, verb: str) -> None:
    if not coordinate.supports(verb):
        raise ResourceValidationException(
            f"{coordinate.resource_name}.{coordinate.api_version} does not support {verb}; "
            f"supported verbs: {', '.join(coordinate.verbs)}"
        )
