from .manifest_mapper import decode_manifest
from .resource_mapper import ResourceDataMapper, TYPED_VIEWS

__all__ = [
    "decode_manifest",
    "ResourceDataMapper",
    "TYPED_VIEWS",
]
