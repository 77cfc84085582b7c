"""Dependency injection container for the fanfare CLI."""

from __future__ import annotations

from dataclasses import dataclass
from typing import ClassVar

import structlog
from opentelemetry import trace

from fanfare.infrastructure.config import Config, get_config
from fanfare.infrastructure.logging import get_logger, setup_logging
from fanfare.infrastructure.metrics import MetricsRegistry, get_metrics
from fanfare.infrastructure.tracing import setup_tracing


@dataclass
class Container:
    """Cross-cutting services shared by one CLI invocation."""

    config: Config
    logger: structlog.BoundLogger
    tracer: trace.Tracer
    metrics: MetricsRegistry

    _instance: ClassVar[Container | None] = None

    @classmethod
    def create(cls, config: Config | None = None) -> Container:
        """Create and initialize the container with all dependencies."""
        if cls._instance is not None:
            return cls._instance

        config = config or get_config()
        setup_logging(
            level=config.observability.log_level,
            log_format=config.observability.log_format,
        )
        tracer = setup_tracing(
            service_name=config.observability.otel_service_name,
            otlp_endpoint=config.observability.otel_endpoint,
            console_export=config.observability.otel_console_export,
        )
        logger = get_logger("fanfare")

        cls._instance = cls(
            config=config,
            logger=logger,
            tracer=tracer,
            metrics=get_metrics(),
        )

        logger.debug(
            "fanfare_container_initialized",
            map_size=config.storage.map_size,
            metrics_textfile=str(config.observability.metrics_textfile),
        )

        return cls._instance

    @classmethod
    def reset(cls) -> None:
        """Reset the container (useful for testing)."""
        cls._instance = None
