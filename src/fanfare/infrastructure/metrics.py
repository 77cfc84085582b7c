"""Prometheus metrics for the time-series store.

The CLI is short-lived, so there is no scrape endpoint: when a textfile
path is configured the registry is written there after each command, in
the format node_exporter's textfile collector picks up.
"""

from __future__ import annotations

from pathlib import Path

from prometheus_client import (
    REGISTRY,
    CollectorRegistry,
    Counter,
    Histogram,
    Info,
    write_to_textfile,
)


class MetricsRegistry:
    """Registry of all time-series store metrics."""

    def __init__(self, registry: CollectorRegistry | None = None) -> None:
        """Initialize metrics registry."""
        self._registry = registry or REGISTRY

        # Ingestion metrics
        self.records_ingested_total = Counter(
            "fanfare_records_ingested_total",
            "Total number of records appended to a database",
            registry=self._registry,
        )

        self.write_runs_total = Counter(
            "fanfare_write_runs_total",
            "Total number of write runs",
            ["status"],  # committed, aborted
            registry=self._registry,
        )

        self.ingest_errors_total = Counter(
            "fanfare_ingest_errors_total",
            "Total number of write runs aborted by an input error",
            ["kind"],
            registry=self._registry,
        )

        # Query metrics
        self.records_read_total = Counter(
            "fanfare_records_read_total",
            "Total number of records returned by read",
            ["strategy"],  # full, literal, glob
            registry=self._registry,
        )

        # Command metrics
        self.command_duration_seconds = Histogram(
            "fanfare_command_duration_seconds",
            "CLI command duration in seconds",
            ["command"],
            buckets=(0.001, 0.005, 0.01, 0.05, 0.1, 0.5, 1.0, 5.0, 30.0, 120.0),
            registry=self._registry,
        )

        self.info = Info(
            "fanfare",
            "Time-series store information",
            registry=self._registry,
        )

    @property
    def registry(self) -> CollectorRegistry:
        return self._registry

    def export(self, path: Path) -> None:
        """Write the registry to path in the Prometheus text format."""
        write_to_textfile(str(path), self._registry)


# Global metrics registry
_metrics: MetricsRegistry | None = None


def setup_metrics(registry: CollectorRegistry | None = None) -> MetricsRegistry:
    """
    Set up the global metrics registry.

    Args:
        registry: Optional custom registry

    Returns:
        The metrics registry
    """
    global _metrics
    _metrics = MetricsRegistry(registry)

    from fanfare import __version__
    _metrics.info.info({
        "version": __version__,
    })

    return _metrics


def get_metrics() -> MetricsRegistry:
    """Get the global metrics registry."""
    global _metrics
    if _metrics is None:
        _metrics = setup_metrics()
    return _metrics
