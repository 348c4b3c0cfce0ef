"""
Shared configuration management for the RPSSL game services.
"""

from pydantic import Field, field_validator
from pydantic_settings import BaseSettings, SettingsConfigDict


class BaseConfig(BaseSettings):
    """Base configuration class with common settings."""

    model_config = SettingsConfigDict(
        env_prefix="GAME_",
        env_file=".env",
        case_sensitive=False,
        extra="ignore",
        frozen=True,
    )

    # Environment
    env: str = Field(default="local")
    log_level: str = Field(default="info")

    # Upstream random-number service
    random_service_url: str = Field(default="http://localhost:8090", min_length=1)
    random_service_timeout: float = Field(default=10.0, gt=0)

    # PostgreSQL
    postgres_dsn: str = Field(default="postgres://localhost:5432/rpssl", min_length=1)
    postgres_min_pool_size: int = Field(default=2, ge=0)
    postgres_max_pool_size: int = Field(default=10, ge=1)

    # Scoreboard
    latest_results_count: int = Field(default=10, gt=0)

    @field_validator("log_level")
    @classmethod
    def _check_log_level(cls, value: str) -> str:
        if value.lower() not in {"debug", "info", "warning", "error", "critical"}:
            raise ValueError(f"Unknown log level: {value}")
        return value.lower()

    @field_validator("random_service_url")
    @classmethod
    def _strip_trailing_slash(cls, value: str) -> str:
        return value.rstrip("/")


class ServiceConfig(BaseConfig):
    """Service-specific configuration."""

    service_name: str
    port: int
    host: str = "0.0.0.0"


def get_config(service_name: str, port: int, **overrides) -> ServiceConfig:
    """Get configuration for a specific service."""
    return ServiceConfig(service_name=service_name, port=port, **overrides)
