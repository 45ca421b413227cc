"""Discovery handle enumerating a cluster's API groups and resources."""

from typing import Any, Dict, List, Optional

from kubegate.models.resource_models import ApiGroupInfo
from .transport import RestTransport


class DiscoveryClient:
    """Reads the discovery documents served under ``/api`` and ``/apis``."""

    def __init__(self, transport: RestTransport):
        self.transport = transport

    def server_groups(self, request_timeout: Optional[float] = None) -> List[ApiGroupInfo]:
        """Return every API group, the core group first."""
        core = self.transport.request("GET", "/api", request_timeout=request_timeout)
        core_versions = list(core.get("versions") or [])
        groups = [ApiGroupInfo(
            name="",
            versions=core_versions,
            preferred_version=core_versions[0] if core_versions else None,
        )]

        apis = self.transport.request("GET", "/apis", request_timeout=request_timeout)
        for group in apis.get("groups") or []:
            preferred = (group.get("preferredVersion") or {}).get("version")
            versions = [v["version"] for v in group.get("versions") or [] if v.get("version")]
            groups.append(ApiGroupInfo(name=group["name"], versions=versions, preferred_version=preferred))
        return groups

    def server_resources(self, group: str, version: str,
                         request_timeout: Optional[float] = None) -> List[Dict[str, Any]]:
        """Return the APIResourceList entries for one group version."""
        path = f"/apis/{group}/{version}" if group else f"/api/{version}"
        document = self.transport.request("GET", path, request_timeout=request_timeout)
        return list(document.get("resources") or [])
