# config/settings.py
from pydantic import Field, field_validator
from pydantic_settings import BaseSettings, SettingsConfigDict
from typing import Dict, List, Optional
from enum import Enum
from dotenv import load_dotenv

# Load .env file explicitly
load_dotenv()


class LogLevel(str, Enum):
    DEBUG = "DEBUG"
    INFO = "INFO"
    WARNING = "WARNING"
    ERROR = "ERROR"
    CRITICAL = "CRITICAL"


class Environment(str, Enum):
    DEVELOPMENT = "development"
    STAGING = "staging"
    PRODUCTION = "production"


class KubernetesSettings(BaseSettings):
    model_config = SettingsConfigDict(env_prefix="K8S_")

    config_path: str = Field("./conf", description="Directory holding one kubeconfig per datacenter")
    config_suffix: str = Field(".kubeconfig", description="Suffix appended to the datacenter name")
    datacenters: List[str] = Field(default_factory=list, description="Cluster identifiers to load at startup")
    kubeconfigs: Dict[str, str] = Field(default_factory=dict, description="Explicit kubeconfig path per datacenter")
    context: Optional[str] = Field(None, description="Kubernetes context to use")


class GatewaySettings(BaseSettings):
    model_config = SettingsConfigDict(env_prefix="GATEWAY_")

    request_timeout_seconds: float = Field(30.0, gt=0, description="Default bound for one cluster call")
    connect_timeout_seconds: float = Field(10.0, gt=0, description="Bound for validating one cluster at startup")
    default_namespace: str = Field("default", description="Namespace used when a request names none")
    default_list_limit: int = Field(100, gt=0, description="Page size applied when a list has no limit")
    discovery_retry_attempts: int = Field(3, ge=1, description="Attempts for one discovery scan")
    discovery_backoff_factor: float = Field(0.5, ge=0, description="Backoff factor between discovery attempts")
    startup_concurrency: int = Field(5, ge=1, description="Clusters connected in parallel at startup")
    typed_views: bool = Field(True, description="Convert recognized kinds to typed views")


class Settings(BaseSettings):
    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        case_sensitive=False,
        extra="ignore"
    )

    environment: Environment = Field(Environment.DEVELOPMENT, description="Environment")
    debug: bool = Field(False, description="Debug mode")
    log_level: LogLevel = Field(LogLevel.INFO, description="Log level")
    log_format: str = Field("text", description="Log format (json or text)")

    kubernetes: KubernetesSettings = Field(default_factory=lambda: KubernetesSettings())
    gateway: GatewaySettings = Field(default_factory=lambda: GatewaySettings())

    @field_validator('environment', mode='before')
    @classmethod
    def validate_environment(cls, v):
        if isinstance(v, str):
            return Environment(v.lower())
        return v

    @field_validator('log_level', mode='before')
    @classmethod
    def validate_log_level(cls, v):
        if isinstance(v, str):
            return LogLevel(v.upper())
        return v

    @classmethod
    def create_from_env(cls) -> "Settings":
        """Create settings instance from environment variables."""
        return cls()
