"""Ingestion Pipeline - line stream to one committed write transaction.

A write run is all or nothing: every line is appended inside a single
write transaction, which is committed only once the stream is exhausted.
The first rejected line aborts the transaction and the database is left
exactly as it was.

Per-line check order:
    1. missing fields (series name, timestamp, code string)
    2. schema resolution (establish on an empty database, else exact match)
    3. field count
    4. timestamp
    5. values
    6. append (key must exceed every stored key)

Usage:
    pipeline = IngestionPipeline(store)
    report = pipeline.run(sys.stdin)
"""

from __future__ import annotations

from typing import Iterable, Iterator

from fanfare.domain.entities import SENTINEL_KEY
from fanfare.domain.exceptions import (
    IngestError,
    OutOfOrderInsertion,
    SchemaMismatch,
    UnreadableInput,
)
from fanfare.domain.services import RecordEncoder, parse_line, schema_from_sentinel
from fanfare.domain.value_objects import Schema
from fanfare.infrastructure.logging import get_logger
from fanfare.infrastructure.metrics import MetricsRegistry
from fanfare.infrastructure.tracing import trace_span
from fanfare.ports.inbound.series_database import IngestionReport
from fanfare.ports.outbound.kv_store import KeyOrderError, KeyValueStore, WriteTransaction

logger = get_logger(__name__)


def _numbered(lines: Iterable[str]) -> Iterator[tuple[int, str]]:
    """Yield (1-based line number, line), reporting undecodable input as an IngestError."""
    iterator = iter(lines)
    line_number = 0
    while True:
        line_number += 1
        try:
            line = next(iterator)
        except StopIteration:
            return
        except UnicodeDecodeError as e:
            raise UnreadableInput(f"not valid {e.encoding}: {e.reason}", line_number) from e
        yield line_number, line


class IngestionPipeline:
    """Appends a stream of input lines to a store in one transaction.

    The schema is read from the sentinel once per run and threaded through
    the run; nothing is cached between runs.
    """

    def __init__(self, store: KeyValueStore, metrics: MetricsRegistry | None = None) -> None:
        """Initialize the pipeline.

        Args:
            store: Store opened in READ_WRITE_EXCLUSIVE mode.
            metrics: Optional metrics registry to record runs in.
        """
        self._store = store
        self._metrics = metrics

    def run(self, lines: Iterable[str]) -> IngestionReport:
        """Ingest every line and commit.

        Args:
            lines: Input lines; trailing newlines are ignored.

        Returns:
            What the committed run wrote.

        Raises:
            IngestError: On the first rejected line, with its line number.
            StorageError: If the storage engine fails.
        """
        with trace_span("fanfare.write") as span:
            txn = self._store.begin_write()
            logger.debug("write_run_started")
            try:
                report = self._ingest(txn, lines)
            except Exception as e:
                txn.abort()
                self._record_abort(e)
                raise
            txn.commit()

            span.set_attribute("fanfare.records_written", report.records_written)
            if self._metrics is not None:
                self._metrics.records_ingested_total.inc(report.records_written)
                self._metrics.write_runs_total.labels(status="committed").inc()
            logger.info(
                "write_run_committed",
                records=report.records_written,
                schema=report.schema_code,
                schema_created=report.schema_created,
            )
            return report

    def _ingest(self, txn: WriteTransaction, lines: Iterable[str]) -> IngestionReport:
        stored = txn.get(SENTINEL_KEY)
        schema = schema_from_sentinel(stored) if stored is not None else None
        encoder = RecordEncoder(schema) if schema is not None else None
        schema_created = False
        written = 0

        for line_number, line in _numbered(lines):
            try:
                record = parse_line(line)

                if schema is None:
                    schema = Schema.parse(record.code)
                    txn.put(SENTINEL_KEY, schema.to_bytes())
                    encoder = RecordEncoder(schema)
                    schema_created = True
                    logger.info("schema_established", schema=schema.code)
                elif not schema.matches(record.code):
                    raise SchemaMismatch(schema.code, record.code)

                key, value = encoder.encode(record)
                try:
                    txn.append(key.to_bytes(), value)
                except KeyOrderError:
                    raise OutOfOrderInsertion(record.series, record.timestamp) from None
            except IngestError as e:
                raise e.at_line(line_number)
            written += 1

        return IngestionReport(
            records_written=written,
            schema_code=schema.code if schema is not None else None,
            schema_created=schema_created,
        )

    def _record_abort(self, error: Exception) -> None:
        if self._metrics is not None:
            self._metrics.write_runs_total.labels(status="aborted").inc()
            if isinstance(error, IngestError):
                self._metrics.ingest_errors_total.labels(kind=type(error).__name__).inc()
        logger.warning(
            "write_run_aborted",
            error=str(error),
            line=getattr(error, "line_number", None),
        )
