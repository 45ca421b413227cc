"""Base interface for one connection to one cluster."""

from abc import ABC, abstractmethod
from typing import Dict, Any, Optional
import structlog

from .exceptions import ClientConnectionException

logger = structlog.get_logger(__name__)


class BaseClient(ABC):
    """A connection that is opened once at startup and shared read-only afterwards.

    ``config`` carries ``request_timeout_seconds`` and ``connect_timeout_seconds``;
    both bound every call made through the connection.
    """

    def __init__(self, config: Dict[str, Any], name: Optional[str] = None, cluster_name: Optional[str] = None):
        self.config = config
        self.name = name or self.__class__.__name__
        self.cluster_name = cluster_name or config.get("cluster_name", "unknown")
        self.request_timeout = float(config.get("request_timeout_seconds", 30.0))
        self.connect_timeout = float(config.get("connect_timeout_seconds", 10.0))
        self._connected = False
        self.logger = logger.bind(client=self.name, cluster=self.cluster_name)

    @abstractmethod
    async def connect(self) -> None:
        """Load credentials and validate them against the cluster."""

    @abstractmethod
    async def disconnect(self) -> None:
        """Release the connection; only called at process exit."""

    @abstractmethod
    async def health_check(self) -> bool:
        pass

    @property
    def is_connected(self) -> bool:
        return self._connected

    def ensure_connected(self) -> None:
        """Raise unless ``connect`` has succeeded."""
        if not self._connected:
            raise ClientConnectionException(self.name, f"datacenter '{self.cluster_name}' is not connected")

    async def __aenter__(self):
        await self.connect()
        return self

    async def __aexit__(self, exc_type, exc_val, exc_tb):
        await self.disconnect()
