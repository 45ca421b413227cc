"""Structured result envelope returned to callers of the gateway."""

from typing import Any, Optional

from pydantic import BaseModel, Field

from kubegate.core.exceptions import KubeGateException


def entry_type(action: str, kind: str) -> str:
    """Label a request the way the envelope reports it, e.g. ``LIST_DEPLOYMENT``."""
    return f"{action}_{kind}".upper()


class GatewayResponse(BaseModel):
    """Envelope carrying either data or an error kind and message."""

    entry_type: str
    status: str = Field(..., description="success or failure")
    error_kind: Optional[str] = None
    message: str = ""
    data: Any = None

    @classmethod
    def success(cls, entry_type: str, data: Any = None, message: str = "") -> "GatewayResponse":
        return cls(entry_type=entry_type, status="success", message=message, data=_plain(data))

    @classmethod
    def failure(cls, entry_type: str, error: KubeGateException) -> "GatewayResponse":
        return cls(
            entry_type=entry_type,
            status="failure",
            error_kind=error.error_kind,
            message=error.message,
            data=error.details or None,
        )

    @property
    def ok(self) -> bool:
        return self.status == "success"


def _plain(data: Any) -> Any:
    """Turn typed views and pages into plain JSON-ready structures."""
    if isinstance(data, BaseModel):
        if hasattr(data, "to_api_dict"):
            return data.to_api_dict()
        return {name: _plain(getattr(data, name)) for name in type(data).model_fields}
    if isinstance(data, list):
        return [_plain(item) for item in data]
    if isinstance(data, dict):
        return {key: _plain(value) for key, value in data.items()}
    return data
