"""Custom exceptions for the kubegate gateway."""

from typing import Optional, Dict, Any, List


class KubeGateException(Exception):
    """Base exception for kubegate."""

    error_kind = "GatewayError"

    def __init__(self, message: str, details: Optional[Dict[str, Any]] = None):
        self.message = message
        self.details = details or {}
        super().__init__(self.message)


class ClusterNotFoundException(KubeGateException):
    """Raised when a cluster id is not present in the registry."""

    error_kind = "ClusterNotFound"

    def __init__(self, cluster_id: str):
        self.cluster_id = cluster_id
        super().__init__(f"the '{cluster_id}' datacenter was not found", {"cluster": cluster_id})


class ResourceKindUnmappableException(KubeGateException):
    """Raised when discovery has no resource matching a kind name."""

    error_kind = "ResourceKindUnmappable"

    def __init__(self, kind: str, cluster_id: str, message: Optional[str] = None):
        self.kind = kind
        self.cluster_id = cluster_id
        super().__init__(
            message or f"the server doesn't have a resource type '{kind}' in datacenter '{cluster_id}'",
            {"kind": kind, "cluster": cluster_id}
        )


class AmbiguousKindException(ResourceKindUnmappableException):
    """Raised when several non-core API groups expose the same kind."""

    error_kind = "AmbiguousKind"

    def __init__(self, kind: str, cluster_id: str, groups: List[str]):
        self.groups = sorted(groups)
        qualified = ", ".join(f"{kind}.{group}" for group in self.groups)
        super().__init__(
            kind,
            cluster_id,
            f"resource type '{kind}' is served by several API groups in datacenter "
            f"'{cluster_id}'; qualify it as one of: {qualified}"
        )
        self.details["groups"] = self.groups


class ManifestDecodeException(KubeGateException):
    """Raised when a manifest body is not a valid single structured document."""

    error_kind = "DecodeError"

    def __init__(self, message: str, line: Optional[int] = None, column: Optional[int] = None):
        self.line = line
        self.column = column
        if line is not None:
            message = f"{message} (line {line}, column {column})"
        super().__init__(message, {"line": line, "column": column})


class ResourceNotFoundException(KubeGateException):
    """Raised when a Get finds no object on the cluster."""

    error_kind = "NotFound"

    def __init__(self, kind: str, name: str, namespace: Optional[str] = None):
        self.kind = kind
        self.name = name
        self.namespace = namespace
        where = f" in namespace '{namespace}'" if namespace else ""
        super().__init__(
            f"{kind} '{name}' not found{where}",
            {"kind": kind, "name": name, "namespace": namespace}
        )


class ResourceValidationException(KubeGateException):
    """Raised when the cluster rejects a payload (schema, admission, conflict)."""

    error_kind = "ValidationError"

    def __init__(self, message: str, status: Optional[int] = None):
        self.status = status
        super().__init__(message, {"status": status})


class TransportException(KubeGateException):
    """Raised when talking to a cluster fails (network, timeout, authorization)."""

    error_kind = "TransportError"

    def __init__(self, cluster_id: str, message: str, status: Optional[int] = None, timeout: bool = False):
        self.cluster_id = cluster_id
        self.status = status
        self.timeout = timeout
        super().__init__(
            f"request to datacenter '{cluster_id}' failed: {message}",
            {"cluster": cluster_id, "status": status, "timeout": timeout}
        )


class ClientConnectionException(KubeGateException):
    """Raised when client connections fail."""

    error_kind = "ConnectionError"

    def __init__(self, client_type: str, message: str, details: Optional[Dict[str, Any]] = None):
        self.client_type = client_type
        super().__init__(f"{client_type} connection failed: {message}", details)


class ConfigurationException(KubeGateException):
    """Raised when configuration is invalid."""

    error_kind = "ConfigurationError"
