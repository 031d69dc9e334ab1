"""
Shared configuration management for the Policy Assembly services.
"""

from typing import List

from pydantic import Field
from pydantic_settings import BaseSettings, SettingsConfigDict


class BaseConfig(BaseSettings):
    """Base configuration class with common settings."""

    model_config = SettingsConfigDict(
        env_file=".env",
        env_prefix="POLICY_",
        case_sensitive=False,
        extra="allow"
    )

    # Environment
    env: str = Field(default="local", description="Deployment environment")
    log_level: str = Field(default="info", description="Log level")

    # Document generation
    default_detail_level: str = Field(default="standard", description="Tier used when answers omit one")
    firm_name_aliases: List[str] = Field(
        default_factory=lambda: ["MEMA Financial Services", "MFS"],
        description="Legal entity names normalised to {{firm.name}} at ingestion"
    )

    # Observability
    enable_metrics: bool = Field(default=True, description="Expose Prometheus metrics")


class ServiceConfig(BaseConfig):
    """Service-specific configuration."""

    service_name: str
    port: int
    host: str = "0.0.0.0"

    def __init__(self, service_name: str, port: int, **kwargs):
        super().__init__(service_name=service_name, port=port, **kwargs)


def get_config(service_name: str, port: int) -> ServiceConfig:
    """Get configuration for a specific service."""
    return ServiceConfig(service_name=service_name, port=port)
