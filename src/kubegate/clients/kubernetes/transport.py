"""Schema-less REST transport for one cluster's API server."""

import json
from typing import Any, Dict, Optional

import structlog
import urllib3
from kubernetes.client.rest import ApiException

from kubegate.core.exceptions import (
    KubeGateException,
    ResourceNotFoundException,
    ResourceValidationException,
    TransportException,
)

logger = structlog.get_logger(__name__)

JSON_HEADERS = {"Accept": "application/json", "Content-Type": "application/json"}
VALIDATION_STATUSES = (400, 409, 422)


class RestTransport:
    """Issues raw JSON requests through a ``kubernetes.client.ApiClient``.

    Status errors are raised as ``ApiException`` so callers can translate them
    with their own context; network failures become ``TransportException``.
    """

    def __init__(self, api_client, cluster_name: str, request_timeout: float = 30.0):
        self.api_client = api_client
        self.cluster_name = cluster_name
        self.request_timeout = request_timeout

    def request(self,
                method: str,
                path: str,
                query: Optional[Dict[str, Any]] = None,
                body: Optional[Dict[str, Any]] = None,
                request_timeout: Optional[float] = None) -> Dict[str, Any]:
        query_params = [(k, v) for k, v in (query or {}).items() if v not in (None, "")]
        try:
            data = self.api_client.call_api(
                path,
                method,
                query_params=query_params,
                header_params=dict(JSON_HEADERS),
                body=body,
                auth_settings=["BearerToken"],
                response_type="object",
                _return_http_data_only=True,
                _preload_content=True,
                _request_timeout=request_timeout or self.request_timeout,
            )
        except urllib3.exceptions.TimeoutError as e:
            raise TransportException(self.cluster_name, str(e), timeout=True)
        except urllib3.exceptions.HTTPError as e:
            raise TransportException(self.cluster_name, str(e))
        return data or {}


def status_message(error: ApiException) -> str:
    """Extract the API server's Status message from an ``ApiException``."""
    body = getattr(error, "body", None)
    if body:
        try:
            payload = json.loads(body)
        except (TypeError, ValueError):
            return str(body)
        if isinstance(payload, dict) and payload.get("message"):
            return payload["message"]
    return error.reason or f"HTTP {error.status}"


def translate_api_error(cluster_id: str,
                        error: ApiException,
                        kind: Optional[str] = None,
                        name: Optional[str] = None,
                        namespace: Optional[str] = None) -> KubeGateException:
    """Map an API server status onto the gateway's error kinds."""
    message = status_message(error)
    if error.status == 404 and name:
        return ResourceNotFoundException(kind or "resource", name, namespace)
    if error.status in VALIDATION_STATUSES:
        return ResourceValidationException(message, status=error.status)
    return TransportException(cluster_id, message, status=error.status)
