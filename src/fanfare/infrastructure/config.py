"""Configuration management for the time-series store."""

from __future__ import annotations

from functools import lru_cache
from pathlib import Path
from typing import Literal

from pydantic import BaseModel, Field
from pydantic_settings import BaseSettings, SettingsConfigDict


class StorageConfig(BaseModel):
    """LMDB environment configuration."""

    map_size: int = Field(
        default=10 * 1024**3, ge=1048576, description="Maximum database size in bytes (default 10GB)"
    )
    max_readers: int = Field(default=126, ge=1, description="Maximum concurrent read transactions")
    sync: bool = Field(default=True, description="Flush to disk on every commit")
    subdir: bool = Field(
        default=True, description="Database path is a directory holding data.mdb and lock.mdb"
    )


class ObservabilityConfig(BaseModel):
    """Observability configuration."""

    log_level: Literal["DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL"] = Field(
        default="WARNING", description="Log level"
    )
    log_format: Literal["json", "console"] = Field(default="console", description="Log format")
    otel_endpoint: str | None = Field(
        default=None, description="OpenTelemetry collector endpoint"
    )
    otel_service_name: str = Field(default="fanfare", description="Service name for tracing")
    otel_console_export: bool = Field(
        default=False, description="Also print finished spans to the console"
    )
    metrics_textfile: Path | None = Field(
        default=None, description="File the CLI writes Prometheus metrics to after each command"
    )


class Config(BaseSettings):
    """Main configuration for the time-series store."""

    model_config = SettingsConfigDict(
        env_prefix="FANFARE_",
        env_nested_delimiter="__",
        case_sensitive=False,
    )

    storage: StorageConfig = Field(default_factory=StorageConfig)
    observability: ObservabilityConfig = Field(default_factory=ObservabilityConfig)

    def ensure_directories(self) -> None:
        """Ensure the metrics textfile directory exists."""
        if self.observability.metrics_textfile is not None:
            self.observability.metrics_textfile.parent.mkdir(parents=True, exist_ok=True)


@lru_cache
def get_config() -> Config:
    """Get the global configuration instance."""
    config = Config()
    config.ensure_directories()
    return config
