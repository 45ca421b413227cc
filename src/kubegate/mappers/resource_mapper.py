"""Typed views derived from generic objects."""

from typing import Dict, Tuple, Type, Union, Optional
from pydantic import ValidationError
import structlog

from kubegate.core.utils import safe_get
from kubegate.models.base_models import KubeBaseModel
from kubegate.models.resource_models import GenericObject, ResourceCoordinate, ResourcePage
from kubegate.models.workload_models import DaemonSet, Deployment, StatefulSet

logger = structlog.get_logger(__name__)

TYPED_VIEWS: Dict[Tuple[str, str, str], Type[KubeBaseModel]] = {
    ("apps", "v1", "Deployment"): Deployment,
    ("apps", "v1", "StatefulSet"): StatefulSet,
    ("apps", "v1", "DaemonSet"): DaemonSet,
}


class ResourceDataMapper:
    """Converts generic objects into typed views for the recognized kinds."""

    def __init__(self, enabled: bool = True,
                 views: Optional[Dict[Tuple[str, str, str], Type[KubeBaseModel]]] = None):
        self.enabled = enabled
        self.views = TYPED_VIEWS if views is None else views

    def supports(self, coordinate: ResourceCoordinate) -> bool:
        return self.enabled and self._key(coordinate) in self.views

    def to_view(self, coordinate: ResourceCoordinate, obj: GenericObject) -> Union[KubeBaseModel, GenericObject]:
        """Return the typed view of ``obj``, or ``obj`` itself when none applies or conversion fails."""
        if not self.supports(coordinate):
            return obj
        view = self.views[self._key(coordinate)]
        try:
            return view.model_validate(obj)
        except ValidationError as e:
            logger.warning(
                "Typed conversion failed, returning generic object",
                kind=coordinate.kind,
                name=safe_get(obj, "metadata.name"),
                errors=e.error_count()
            )
            return obj

    def map_page(self, coordinate: ResourceCoordinate, page: ResourcePage) -> ResourcePage:
        if not self.supports(coordinate):
            return page
        return page.model_copy(update={"items": [self.to_view(coordinate, item) for item in page.items]})

    @staticmethod
    def _key(coordinate: ResourceCoordinate) -> Tuple[str, str, str]:
        return (coordinate.group, coordinate.version, coordinate.kind)
