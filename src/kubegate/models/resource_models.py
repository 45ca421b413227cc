"""Resource coordinate and discovery data models."""

from enum import Enum
from typing import Any, Dict, Iterator, List, Optional, Tuple
from urllib.parse import quote

from pydantic import BaseModel, ConfigDict, Field

from kubegate.core.exceptions import ResourceValidationException


class ResourceScope(str, Enum):
    """Whether instances of a kind live inside a namespace."""
    NAMESPACED = "Namespaced"
    CLUSTER_WIDE = "ClusterWide"


class ResourceCoordinate(BaseModel):
    """Fully qualified address of one kind in one cluster's API surface."""

    model_config = ConfigDict(frozen=True)

    group: str = Field("", description="API group, empty for the core group")
    version: str
    resource_name: str = Field(..., description="Plural, lower-case API resource name")
    kind: str
    scope: ResourceScope
    verbs: Tuple[str, ...] = Field((), description="Verbs from discovery, empty when unknown")

    @property
    def api_version(self) -> str:
        return f"{self.group}/{self.version}" if self.group else self.version

    @property
    def namespaced(self) -> bool:
        return self.scope == ResourceScope.NAMESPACED

    def supports(self, verb: str) -> bool:
        return not self.verbs or verb in self.verbs

    def path(self, namespace: Optional[str] = None, name: Optional[str] = None) -> str:
        """Build the REST path for the collection, or for one object when ``name`` is given.

        ``namespace`` is ignored for cluster-wide kinds; an empty namespace on a
        namespaced kind addresses the collection across all namespaces. Both
        values are escaped as single path segments.
        """
        if self.group:
            path = f"/apis/{self.group}/{self.version}"
        else:
            path = f"/api/{self.version}"
        if self.namespaced and namespace:
            path += f"/namespaces/{path_segment(namespace)}"
        path += f"/{self.resource_name}"
        if name:
            path += f"/{path_segment(name)}"
        return path

    def __str__(self) -> str:
        return f"{self.resource_name}.{self.api_version}"


class DiscoveredResource(BaseModel):
    """One entry of a group version's APIResourceList."""

    model_config = ConfigDict(frozen=True)

    group: str
    version: str
    name: str
    kind: str
    namespaced: bool
    preferred: bool = False
    singular_name: str = ""
    short_names: List[str] = Field(default_factory=list)
    verbs: List[str] = Field(default_factory=list)

    def matches(self, kind_name: str) -> bool:
        """Case-insensitive match on kind, plural, singular or short name."""
        needle = kind_name.lower()
        return (
            self.kind.lower() == needle
            or self.name == needle
            or (bool(self.singular_name) and self.singular_name == needle)
            or needle in self.short_names
        )

    def to_coordinate(self) -> ResourceCoordinate:
        return ResourceCoordinate(
            group=self.group,
            version=self.version,
            resource_name=self.name,
            kind=self.kind,
            scope=ResourceScope.NAMESPACED if self.namespaced else ResourceScope.CLUSTER_WIDE,
            verbs=tuple(self.verbs),
        )


class ApiGroupInfo(BaseModel):
    """An API group with its served versions, preferred version first."""

    name: str
    versions: List[str]
    preferred_version: Optional[str] = None


class ResourcePage(BaseModel):
    """First page of a list call; items are generic objects or typed views."""

    items: List[Any] = Field(default_factory=list)
    continue_token: Optional[str] = None
    resource_version: Optional[str] = None

    def __iter__(self) -> Iterator[Any]:  # type: ignore[override]
        return iter(self.items)

    def __len__(self) -> int:
        return len(self.items)

    def __getitem__(self, index: int) -> Any:
        return self.items[index]


GenericObject = Dict[str, Any]


def path_segment(value: str) -> str:
    """Escape ``value`` so it addresses exactly one path segment."""
    if value in (".", ".."):
        raise ResourceValidationException(f"{value!r} is not a valid object or namespace name")
    return quote(value, safe="")
