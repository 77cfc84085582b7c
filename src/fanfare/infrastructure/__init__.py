"""Infrastructure layer - cross-cutting concerns."""

from fanfare.infrastructure.config import Config, get_config
from fanfare.infrastructure.logging import get_logger, setup_logging
from fanfare.infrastructure.metrics import MetricsRegistry, get_metrics, setup_metrics
from fanfare.infrastructure.tracing import get_tracer, setup_tracing, trace_span

__all__ = [
    "Config",
    "get_config",
    "setup_logging",
    "get_logger",
    "setup_metrics",
    "get_metrics",
    "MetricsRegistry",
    "setup_tracing",
    "get_tracer",
    "trace_span",
]
