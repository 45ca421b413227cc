"""Pytest fixtures: an in-memory API server behind a fake ``ApiClient``."""

import copy
import json
import threading
import time
from typing import Any, Dict, List, Optional, Tuple

import pytest
import pytest_asyncio
from kubernetes.client.rest import ApiException

from kubegate.clients.kubernetes.k8s_client import KubernetesClient
from kubegate.clients.kubernetes.registry import ClusterRegistry
from kubegate.config.settings import GatewaySettings
from kubegate.gateway import ResourceGateway


def _resource(name, kind, namespaced=True, short_names=None, singular=None):
    return {
        "name": name,
        "kind": kind,
        "namespaced": namespaced,
        "singularName": singular if singular is not None else kind.lower(),
        "shortNames": short_names or [],
        "verbs": ["create", "get", "list"],
    }


# group version -> APIResourceList entries, in server order
DISCOVERY: Dict[str, List[Dict[str, Any]]] = {
    "v1": [
        _resource("pods", "Pod", short_names=["po"]),
        _resource("pods/log", "Pod"),
        _resource("namespaces", "Namespace", namespaced=False, short_names=["ns"]),
        _resource("events", "Event", short_names=["ev"]),
        _resource("configmaps", "ConfigMap", short_names=["cm"]),
    ],
    "apps/v1": [
        _resource("deployments", "Deployment", short_names=["deploy"]),
        _resource("deployments/scale", "Scale"),
        _resource("statefulsets", "StatefulSet", short_names=["sts"]),
        _resource("daemonsets", "DaemonSet", short_names=["ds"]),
        _resource("workloads", "Workload"),
    ],
    "events.k8s.io/v1": [
        _resource("events", "Event", short_names=["ev"]),
    ],
    "autoscaling/v2": [
        _resource("horizontalpodautoscalers", "HorizontalPodAutoscaler", short_names=["hpa"]),
    ],
    "autoscaling/v1": [
        _resource("horizontalpodautoscalers", "HorizontalPodAutoscaler", short_names=["hpa"]),
    ],
    "rbac.authorization.k8s.io/v1": [
        _resource("clusterroles", "ClusterRole", namespaced=False),
    ],
    "example.com/v1": [
        _resource("widgets", "Widget"),
    ],
    "other.io/v1": [
        _resource("widgets", "Widget"),
    ],
}

PREFERRED = {"autoscaling": "v2"}


def api_error(status: int, reason: str, message: str) -> ApiException:
    error = ApiException(status=status, reason=reason)
    error.body = json.dumps({"kind": "Status", "status": "Failure", "message": message,
                             "reason": reason, "code": status})
    return error


class FakeApiClient:
    """Answers ``call_api`` like an API server, from memory."""

    def __init__(self,
                 discovery: Optional[Dict[str, List[Dict[str, Any]]]] = None,
                 preferred: Optional[Dict[str, str]] = None):
        self.discovery = copy.deepcopy(DISCOVERY if discovery is None else discovery)
        self.preferred = dict(PREFERRED if preferred is None else preferred)
        self.objects: Dict[Tuple[str, str, Optional[str]], Dict[str, Dict[str, Any]]] = {}
        self.calls: List[Tuple[str, str, Dict[str, Any], Any]] = []
        self.failures: Dict[str, List[BaseException]] = {}
        self.delay = 0.0
        self.closed = False
        self._lock = threading.Lock()
        self._uid = 0

    # test helpers

    def fail(self, path: str, *errors: BaseException) -> None:
        """Raise ``errors`` in turn for the next calls to ``path``."""
        self.failures.setdefault(path, []).extend(errors)

    def add(self, group_version: str, resource: str, obj: Dict[str, Any]) -> None:
        namespace = obj.get("metadata", {}).get("namespace")
        self.objects.setdefault((group_version, resource, namespace), {})[obj["metadata"]["name"]] = copy.deepcopy(obj)

    def calls_to(self, prefix: str) -> List[Tuple[str, str, Dict[str, Any], Any]]:
        return [call for call in self.calls if call[1].startswith(prefix)]

    @property
    def discovery_calls(self) -> int:
        return len([call for call in self.calls if call[1] == "/apis"])

    def close(self) -> None:
        self.closed = True

    # ApiClient surface

    def call_api(self, resource_path, method, query_params=None, header_params=None, body=None, **kwargs):
        query = dict(query_params or [])
        with self._lock:
            self.calls.append((method, resource_path, query, copy.deepcopy(body)))
            pending = self.failures.get(resource_path)
            error = pending.pop(0) if pending else None
        if self.delay:
            time.sleep(self.delay)
        if error is not None:
            raise error

        if resource_path == "/version":
            return {"major": "1", "minor": "29", "gitVersion": "v1.29.2"}
        if resource_path == "/api":
            return {"kind": "APIVersions", "versions": [gv for gv in self.discovery if "/" not in gv]}
        if resource_path == "/apis":
            return {"kind": "APIGroupList", "groups": self._groups()}

        group_version, namespace, resource, name = self._parse(resource_path)
        if resource is None:
            if group_version not in self.discovery:
                raise api_error(404, "NotFound", "the server could not find the requested resource")
            return {"kind": "APIResourceList", "groupVersion": group_version,
                    "resources": copy.deepcopy(self.discovery[group_version])}

        with self._lock:
            if method == "GET" and name:
                return self._get(group_version, resource, namespace, name)
            if method == "GET":
                return self._list(group_version, resource, namespace, query)
            if method == "POST":
                return self._create(group_version, resource, namespace, body)
        raise api_error(405, "MethodNotAllowed", f"{method} is not supported")

    def _groups(self) -> List[Dict[str, Any]]:
        groups: Dict[str, List[str]] = {}
        for gv in self.discovery:
            if "/" in gv:
                group, version = gv.split("/")
                groups.setdefault(group, []).append(version)
        result = []
        for group, versions in groups.items():
            preferred = self.preferred.get(group, versions[0])
            result.append({
                "name": group,
                "versions": [{"groupVersion": f"{group}/{v}", "version": v} for v in versions],
                "preferredVersion": {"groupVersion": f"{group}/{preferred}", "version": preferred},
            })
        return result

    @staticmethod
    def _parse(path: str):
        segments = path.strip("/").split("/")
        if segments[0] == "api":
            group_version, rest = segments[1], segments[2:]
        else:
            group_version, rest = f"{segments[1]}/{segments[2]}", segments[3:]
        if not rest:
            return group_version, None, None, None
        namespace = None
        if rest[0] == "namespaces" and len(rest) >= 3:
            namespace, rest = rest[1], rest[2:]
        return group_version, namespace, rest[0], rest[1] if len(rest) > 1 else None

    def _get(self, group_version, resource, namespace, name):
        obj = self.objects.get((group_version, resource, namespace), {}).get(name)
        if obj is None:
            raise api_error(404, "NotFound", f'{resource} "{name}" not found')
        return copy.deepcopy(obj)

    def _list(self, group_version, resource, namespace, query):
        items = []
        for (gv, res, ns), objects in self.objects.items():
            if gv == group_version and res == resource and (namespace is None or ns == namespace):
                items.extend(objects.values())
        selector = query.get("labelSelector")
        if selector:
            key, _, value = selector.partition("=")
            items = [i for i in items if i.get("metadata", {}).get("labels", {}).get(key) == value]
        limit = int(query.get("limit") or len(items) or 1)
        page, remaining = items[:limit], items[limit:]
        listed = []
        for item in page:
            item = copy.deepcopy(item)
            item.pop("apiVersion", None)
            item.pop("kind", None)
            listed.append(item)
        metadata = {"resourceVersion": "1000"}
        if remaining:
            metadata["continue"] = "next-page"
        return {"kind": "List", "apiVersion": "v1", "metadata": metadata, "items": listed}

    def _create(self, group_version, resource, namespace, body):
        metadata = body.get("metadata") or {}
        if metadata.get("resourceVersion"):
            raise api_error(400, "BadRequest", "resourceVersion should not be set on objects to be created")
        if namespace and metadata.get("namespace") not in (None, namespace):
            raise api_error(400, "BadRequest",
                            "the namespace of the provided object does not match the namespace sent on the request")
        name = metadata.get("name")
        if not name and metadata.get("generateName"):
            name = f"{metadata['generateName']}x7k2p"
        if not name:
            raise api_error(422, "Invalid", f"{resource} is invalid: metadata.name: Required value")
        if name in self.objects.get((group_version, resource, namespace), {}):
            raise api_error(409, "AlreadyExists", f'{resource} "{name}" already exists')

        self._uid += 1
        created = copy.deepcopy(body)
        created["metadata"] = dict(metadata, name=name, uid=f"uid-{self._uid}",
                                   resourceVersion=str(1000 + self._uid),
                                   creationTimestamp="2026-01-01T00:00:00Z")
        if namespace:
            created["metadata"]["namespace"] = namespace
        self.objects.setdefault((group_version, resource, namespace), {})[name] = created
        return copy.deepcopy(created)


def deployment(name: str, namespace: str = "team-x", replicas: Any = 2, labels=None) -> Dict[str, Any]:
    return {
        "apiVersion": "apps/v1",
        "kind": "Deployment",
        "metadata": {"name": name, "namespace": namespace, "labels": labels or {"app": name}},
        "spec": {
            "replicas": replicas,
            "selector": {"matchLabels": {"app": name}},
            "template": {
                "metadata": {"labels": {"app": name}},
                "spec": {"containers": [{"name": "web", "image": "nginx:1.25",
                                         "ports": [{"containerPort": 80}]}]},
            },
        },
        "status": {"replicas": 2, "readyReplicas": 2, "availableReplicas": 2},
    }


@pytest.fixture
def gateway_settings() -> GatewaySettings:
    return GatewaySettings(
        request_timeout_seconds=5,
        connect_timeout_seconds=5,
        discovery_retry_attempts=3,
        discovery_backoff_factor=0,
    )


@pytest.fixture
def fake_api() -> FakeApiClient:
    return FakeApiClient()


@pytest_asyncio.fixture
async def connection(fake_api) -> KubernetesClient:
    k8s = KubernetesClient({"request_timeout_seconds": 5}, cluster_name="prod-a", api_client=fake_api)
    await k8s.connect()
    return k8s


@pytest.fixture
def registry(connection) -> ClusterRegistry:
    return ClusterRegistry({"prod-a": connection})


@pytest.fixture
def gateway(registry, gateway_settings) -> ResourceGateway:
    return ResourceGateway(registry, gateway_settings)
