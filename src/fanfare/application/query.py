"""Query Engine - stored records back to data points and text lines.

The optional series filter selects how the store is scanned:

    none     full scan from ("", 1), skipping the sentinel
    literal  a filter without * ? [ ]: the inclusive key range
             [(name, 0) .. (name, 2^64-1)], keeping exact name matches
             only ("air-10" sorts inside the range of "air-1")
    glob     full scan, keeping names matched by the shell-style pattern

Results are produced lazily. The read transaction stays open while the
iterator is consumed and is released when it is exhausted or closed.
"""

from __future__ import annotations

from dataclasses import dataclass
from enum import Enum
from fnmatch import fnmatchcase
from typing import Callable, Iterator

from fanfare.domain.entities import FIRST_DATA_KEY, SENTINEL_KEY, DataPoint, series_range
from fanfare.domain.exceptions import InvalidFilterPattern
from fanfare.domain.services import RecordDecoder, schema_from_sentinel
from fanfare.infrastructure.logging import get_logger
from fanfare.infrastructure.metrics import MetricsRegistry
from fanfare.infrastructure.tracing import trace_span
from fanfare.ports.outbound.kv_store import KeyValueStore

logger = get_logger(__name__)

GLOB_CHARACTERS = frozenset("*?[]")


class ScanStrategy(Enum):
    """How the key space is walked for a filter."""

    FULL = "full"
    LITERAL = "literal"
    GLOB = "glob"


@dataclass(frozen=True)
class ScanPlan:
    """Key bounds to iterate and the series names to keep."""

    strategy: ScanStrategy
    start: bytes
    end: bytes | None
    accept: Callable[[str], bool]


def is_literal(pattern: str) -> bool:
    """True if the pattern names exactly one series."""
    return GLOB_CHARACTERS.isdisjoint(pattern)


def validate_glob(pattern: str) -> None:
    """Reject a glob whose bracket expression is never closed.

    ``]`` right after ``[`` or ``[!`` is a member of the set, as in fnmatch.

    Raises:
        InvalidFilterPattern: On the first unclosed ``[``.
    """
    i = 0
    n = len(pattern)
    while i < n:
        if pattern[i] != "[":
            i += 1
            continue
        j = i + 1
        if j < n and pattern[j] == "!":
            j += 1
        if j < n and pattern[j] == "]":
            j += 1
        close = pattern.find("]", j)
        if close == -1:
            raise InvalidFilterPattern(pattern, f"unclosed '[' at position {i}")
        i = close + 1


def plan_scan(pattern: str | None) -> ScanPlan:
    """Choose the scan strategy for an optional series filter.

    Raises:
        InvalidFilterPattern: If the filter is a malformed glob.
    """
    if pattern is None:
        return ScanPlan(ScanStrategy.FULL, FIRST_DATA_KEY, None, lambda name: True)

    if is_literal(pattern):
        start, end = series_range(pattern)
        return ScanPlan(ScanStrategy.LITERAL, start, end, lambda name: name == pattern)

    validate_glob(pattern)
    return ScanPlan(
        ScanStrategy.GLOB, FIRST_DATA_KEY, None, lambda name: fnmatchcase(name, pattern)
    )


class QueryEngine:
    """Reads data points from a store, optionally filtered by series name."""

    def __init__(self, store: KeyValueStore, metrics: MetricsRegistry | None = None) -> None:
        self._store = store
        self._metrics = metrics

    def points(self, pattern: str | None = None) -> Iterator[DataPoint]:
        """Yield stored data points in key order.

        The filter is validated before this returns; storage errors and
        corrupt records surface while iterating.

        Raises:
            InvalidFilterPattern: If the filter is a malformed glob.
        """
        return self._scan(self._plan(pattern), formatted=False)

    def lines(self, pattern: str | None = None) -> Iterator[str]:
        """Yield stored data points rendered as output lines."""
        return self._scan(self._plan(pattern), formatted=True)

    def _plan(self, pattern: str | None) -> ScanPlan:
        with trace_span("fanfare.read.plan", {"fanfare.filter": pattern or ""}) as span:
            plan = plan_scan(pattern)
            span.set_attribute("fanfare.strategy", plan.strategy.value)
        logger.debug("read_strategy_selected", strategy=plan.strategy.value, filter=pattern)
        return plan

    def _scan(self, plan: ScanPlan, formatted: bool) -> Iterator:
        emitted = 0
        try:
            with self._store.begin_read() as txn:
                stored = txn.get(SENTINEL_KEY)
                if stored is None:
                    logger.debug("read_no_schema")
                    return
                decoder = RecordDecoder(schema_from_sentinel(stored))

                for key, value in txn.iterate(plan.start, plan.end):
                    point = decoder.decode(key, value)
                    if not plan.accept(point.series):
                        continue
                    emitted += 1
                    yield decoder.format(point) if formatted else point
        finally:
            if self._metrics is not None:
                self._metrics.records_read_total.labels(strategy=plan.strategy.value).inc(emitted)
            logger.debug("read_finished", strategy=plan.strategy.value, records=emitted)
