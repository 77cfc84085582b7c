"""Pytest configuration and fixtures for fanfare tests."""

from __future__ import annotations

import tempfile
from pathlib import Path
from typing import Generator

import pytest
from prometheus_client import CollectorRegistry

from fanfare.adapters.outbound import InMemoryKeyValueStore, LMDBKeyValueStore
from fanfare.infrastructure.config import Config, ObservabilityConfig, StorageConfig
from fanfare.infrastructure.container import Container
from fanfare.infrastructure.metrics import MetricsRegistry
from fanfare.ports.outbound import OpenMode


@pytest.fixture
def temp_dir() -> Generator[Path, None, None]:
    """Provide a temporary directory for tests."""
    with tempfile.TemporaryDirectory() as tmpdir:
        yield Path(tmpdir)


@pytest.fixture
def test_config(temp_dir: Path) -> Config:
    """Provide a test configuration with a small map and no fsync."""
    return Config(
        storage=StorageConfig(
            map_size=16 * 1024 * 1024,  # 16MB for tests
            sync=False,  # Faster for tests
        ),
        observability=ObservabilityConfig(log_level="WARNING"),
    )


@pytest.fixture
def db_path(temp_dir: Path) -> Path:
    """Path of a database that does not exist yet."""
    return temp_dir / "db"


@pytest.fixture
def metrics_registry() -> MetricsRegistry:
    """Provide a fresh metrics registry for each test."""
    # Use a separate registry to avoid conflicts between tests
    registry = CollectorRegistry(auto_describe=True)
    return MetricsRegistry(registry=registry)


@pytest.fixture
def memory_store() -> InMemoryKeyValueStore:
    """Provide an empty in-memory store opened read-write."""
    return InMemoryKeyValueStore()


@pytest.fixture
def lmdb_store(db_path: Path, test_config: Config) -> Generator[LMDBKeyValueStore, None, None]:
    """Provide a fresh LMDB store opened read-write."""
    store = LMDBKeyValueStore(db_path, OpenMode.READ_WRITE_EXCLUSIVE, test_config.storage)
    yield store
    store.close()


@pytest.fixture(autouse=True)
def reset_container() -> Generator[None, None, None]:
    """Drop the cached container between tests."""
    Container.reset()
    yield
    Container.reset()


# Markers for test categories
def pytest_configure(config: pytest.Config) -> None:
    """Configure custom pytest markers."""
    config.addinivalue_line("markers", "unit: Unit tests (fast, isolated)")
    config.addinivalue_line("markers", "integration: Integration tests")
