"""SeriesDatabase - the embeddable entry point of the time-series store.

Usage:
    from fanfare.application import SeriesDatabase
    from fanfare.ports.outbound import OpenMode

    with SeriesDatabase("/var/lib/tracks", OpenMode.READ_WRITE_EXCLUSIVE) as db:
        db.write(["oceanic-airlines 2001-01-13T12:09:14.026490 ff 37.68 -122.60"])

    with SeriesDatabase("/var/lib/tracks") as db:
        for line in db.read_lines("oceanic-*"):
            print(line)
"""

from __future__ import annotations

from pathlib import Path
from typing import Iterable, Iterator

from fanfare.adapters.outbound.lmdb_store import LMDBKeyValueStore
from fanfare.application.ingestion import IngestionPipeline
from fanfare.application.metadata import MetadataReporter
from fanfare.application.query import QueryEngine
from fanfare.domain.entities import DataPoint
from fanfare.domain.exceptions import StorageError
from fanfare.infrastructure.config import Config, get_config
from fanfare.infrastructure.metrics import MetricsRegistry
from fanfare.ports.inbound.series_database import DatabaseInfo, IngestionReport
from fanfare.ports.outbound.kv_store import KeyValueStore, OpenMode


class SeriesDatabase:
    """A series database at one path, opened in one mode.

    Implements the SeriesDatabasePort protocol on top of any
    KeyValueStore; by default an LMDB environment at ``path``.
    """

    def __init__(
        self,
        path: str | Path | None = None,
        mode: OpenMode = OpenMode.READ_ONLY_SHARED,
        config: Config | None = None,
        metrics: MetricsRegistry | None = None,
        store: KeyValueStore | None = None,
    ) -> None:
        """Initialize the database handle.

        Args:
            path: LMDB environment directory. Ignored when store is given.
            mode: How the store is opened.
            config: Configuration; defaults to get_config().
            metrics: Optional metrics registry.
            store: An already opened store to use instead of LMDB.
        """
        if path is None and store is None:
            raise ValueError("either path or store is required")
        self._path = Path(path) if path is not None else None
        self._mode = store.mode if store is not None else mode
        self._config = config or get_config()
        self._metrics = metrics
        self._store = store

    @classmethod
    def from_store(
        cls, store: KeyValueStore, metrics: MetricsRegistry | None = None
    ) -> SeriesDatabase:
        """Wrap an opened store."""
        return cls(store=store, metrics=metrics)

    @property
    def mode(self) -> OpenMode:
        return self._mode

    @property
    def is_open(self) -> bool:
        return self._store is not None

    def open(self) -> SeriesDatabase:
        """Open the underlying store if it is not open yet.

        Raises:
            DatabaseNotFound: If opened read-only and nothing exists at path.
            StorageError: If the storage engine cannot open the path.
        """
        if self._store is None:
            self._store = LMDBKeyValueStore(self._path, self._mode, self._config.storage)
        return self

    def close(self) -> None:
        if self._store is not None:
            self._store.close()
            self._store = None

    def write(self, lines: Iterable[str]) -> IngestionReport:
        store = self._require_open()
        if not self._mode.writable:
            raise StorageError("write requires a database opened read-write")
        return IngestionPipeline(store, self._metrics).run(lines)

    def read(self, pattern: str | None = None) -> Iterator[DataPoint]:
        return QueryEngine(self._require_open(), self._metrics).points(pattern)

    def read_lines(self, pattern: str | None = None) -> Iterator[str]:
        return QueryEngine(self._require_open(), self._metrics).lines(pattern)

    def infos(self) -> DatabaseInfo:
        return MetadataReporter(self._require_open()).report()

    def _require_open(self) -> KeyValueStore:
        if self._store is None:
            raise StorageError("database is not open")
        return self._store

    def __enter__(self) -> SeriesDatabase:
        return self.open()

    def __exit__(self, exc_type, exc, tb) -> None:
        self.close()
