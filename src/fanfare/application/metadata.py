"""Metadata Reporter - stored schema and number of data points."""

from __future__ import annotations

from fanfare.domain.entities import SENTINEL_KEY
from fanfare.domain.services import schema_from_sentinel
from fanfare.infrastructure.logging import get_logger
from fanfare.infrastructure.tracing import trace_span
from fanfare.ports.inbound.series_database import DatabaseInfo
from fanfare.ports.outbound.kv_store import KeyValueStore

logger = get_logger(__name__)


class MetadataReporter:
    """Reports what a store holds without decoding any data point."""

    def __init__(self, store: KeyValueStore) -> None:
        self._store = store

    def report(self) -> DatabaseInfo:
        """Return the schema code string and the data point count.

        The count excludes the sentinel and never goes below zero.

        Raises:
            CorruptRecord: If the stored schema is not a valid code string.
        """
        with trace_span("fanfare.infos"), self._store.begin_read() as txn:
            stored = txn.get(SENTINEL_KEY)
            entries = max(txn.count() - 1, 0)

        schema_code = schema_from_sentinel(stored).code if stored is not None else None
        logger.debug("infos_reported", schema=schema_code, entries=entries)
        return DatabaseInfo(schema_code=schema_code, entries=entries)
