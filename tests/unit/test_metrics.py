"""Unit tests for the metrics registry."""

from __future__ import annotations

from pathlib import Path

import pytest

from fanfare.infrastructure.metrics import MetricsRegistry


@pytest.mark.unit
class TestMetricsRegistry:
    """Tests for MetricsRegistry."""

    def test_command_duration(self, metrics_registry: MetricsRegistry) -> None:
        """Command timings are observed per command."""
        with metrics_registry.command_duration_seconds.labels(command="read").time():
            pass

        count = metrics_registry.registry.get_sample_value(
            "fanfare_command_duration_seconds_count", {"command": "read"}
        )
        assert count == 1

    def test_export(self, metrics_registry: MetricsRegistry, temp_dir: Path) -> None:
        """The registry is written in the Prometheus text format."""
        metrics_registry.records_ingested_total.inc(3)
        target = temp_dir / "fanfare.prom"

        metrics_registry.export(target)

        text = target.read_text()
        assert "# TYPE fanfare_records_ingested_total counter" in text
        assert "fanfare_records_ingested_total 3.0" in text
