"""Decoding of raw YAML or JSON manifests into generic objects."""

import json
from typing import Union

import yaml

from kubegate.core.exceptions import ManifestDecodeException
from kubegate.models.resource_models import GenericObject


def decode_manifest(raw: Union[bytes, str]) -> GenericObject:
    """Decode a single-document manifest that declares its own apiVersion and kind."""
    if isinstance(raw, bytes):
        try:
            text = raw.decode("utf-8")
        except UnicodeDecodeError as e:
            raise ManifestDecodeException(f"manifest is not valid UTF-8: {e.reason}")
    else:
        text = raw

    if text.lstrip().startswith(("{", "[")):
        try:
            documents = [json.loads(text)]
        except json.JSONDecodeError as e:
            raise ManifestDecodeException(f"invalid JSON manifest: {e.msg}", line=e.lineno, column=e.colno)
    else:
        try:
            documents = [doc for doc in yaml.safe_load_all(text) if doc is not None]
        except yaml.MarkedYAMLError as e:
            mark = e.problem_mark or e.context_mark
            raise ManifestDecodeException(
                f"invalid YAML manifest: {e.problem or e.context}",
                line=mark.line + 1 if mark else None,
                column=mark.column + 1 if mark else None
            )
        except yaml.YAMLError as e:
            raise ManifestDecodeException(f"invalid YAML manifest: {e}")

    if not documents:
        raise ManifestDecodeException("manifest is empty")
    if len(documents) > 1:
        raise ManifestDecodeException(f"manifest must hold a single document, found {len(documents)}")

    manifest = documents[0]
    if not isinstance(manifest, dict):
        raise ManifestDecodeException("manifest must be an object")
    for field in ("apiVersion", "kind"):
        if not isinstance(manifest.get(field), str) or not manifest[field]:
            raise ManifestDecodeException(f"manifest must declare {field}")
    metadata = manifest.get("metadata")
    if metadata is not None and not isinstance(metadata, dict):
        raise ManifestDecodeException("manifest metadata must be an object")
    return manifest
