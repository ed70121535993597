"""Pydantic models for parsing the config.yaml configuration file.

These models mirror the structure of config.yaml and handle validation and
type conversion of the YAML configuration data.
"""

from __future__ import annotations

from typing import Literal

from pydantic import BaseModel, Field, computed_field


class AppConfig(BaseModel):
    """Application configuration model."""

    environment: Literal["development", "production", "test"] = Field(
        default="development", description="Application environment"
    )
    name: str = Field(default="storefront", description="Application name")


class LoggingConfig(BaseModel):
    """Logging configuration model."""

    level: str = Field(default="INFO", description="Logging level")
    format: Literal["json", "plain"] = Field(default="plain", description="Log format")
    file: str | None = Field(default=None, description="Log file path")
    max_size_mb: int = Field(default=10, description="Maximum log file size in MB")
    backup_count: int = Field(
        default=5, description="Number of backup log files to keep"
    )


class DatabaseConfig(BaseModel):
    """Local cache database configuration model."""

    url: str = Field(
        default="sqlite://",
        description="SQLAlchemy URL of the local cache database",
    )
    echo: bool = Field(default=False, description="Echo SQL statements")
    timeout: int = Field(default=20, description="SQLite lock timeout in seconds")

    @computed_field
    @property
    def is_memory(self) -> bool:
        """Whether the cache lives in an in-memory SQLite database."""
        return self.url in ("sqlite://", "sqlite:///:memory:")

    @computed_field
    @property
    def connection_string(self) -> str:
        return self.url


class RemoteConfig(BaseModel):
    """Remote document service configuration model."""

    base_url: str = Field(
        default="http://localhost:8080/v1",
        description="Base URL of the catalog document service",
    )
    api_key: str | None = Field(default=None, description="Bearer token for the service")
    timeout_seconds: float = Field(default=10.0, description="Request timeout")
    poll_interval_seconds: float = Field(
        default=15.0, description="Interval between realtime polls"
    )
    retry_backoff_base_seconds: float = Field(
        default=1.0, description="First retry delay after a failed poll"
    )
    retry_backoff_cap_seconds: float = Field(
        default=60.0, description="Upper bound of the retry delay"
    )
    active_only: bool = Field(
        default=False,
        description="Request only active documents; remote deactivations then never reach the cache",
    )


class NotificationsConfig(BaseModel):
    """Local notification configuration model."""

    authorization_options: list[str] = Field(
        default=["alert", "badge", "sound"],
        description="Options requested from the notifier on session start",
    )
    categories: list[str] = Field(
        default=["favorites", "cart", "checkout"],
        description="Notification categories registered on session start",
    )


class ConfigData(BaseModel):
    """Root configuration model that matches the config.yaml structure."""

    app: AppConfig = Field(
        default_factory=AppConfig, description="Application configuration"
    )
    logging: LoggingConfig = Field(
        default_factory=LoggingConfig, description="Logging configuration"
    )
    database: DatabaseConfig = Field(
        default_factory=DatabaseConfig, description="Local cache database configuration"
    )
    remote: RemoteConfig = Field(
        default_factory=RemoteConfig, description="Remote document service configuration"
    )
    notifications: NotificationsConfig = Field(
        default_factory=NotificationsConfig, description="Notification configuration"
    )
