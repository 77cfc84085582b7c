"""Series database port - the API offered to clients.

Clients (the CLI, embedding applications) write line streams, read data
points back and ask for metadata through this contract.
"""

from __future__ import annotations

from abc import abstractmethod
from dataclasses import dataclass
from typing import Iterable, Iterator, Protocol

from fanfare.domain.entities import DataPoint


@dataclass(frozen=True)
class IngestionReport:
    """Outcome of one committed write run."""

    records_written: int
    schema_code: str | None
    schema_created: bool = False


@dataclass(frozen=True)
class DatabaseInfo:
    """Stored schema and number of data points."""

    schema_code: str | None
    entries: int

    def lines(self) -> list[str]:
        """Human-readable report, one item per line."""
        out = []
        if self.schema_code is not None:
            out.append(f"values code: {self.schema_code}")
        out.append(f"number of entries: {self.entries}")
        return out


class SeriesDatabasePort(Protocol):
    """Protocol for reading and writing a series database."""

    @abstractmethod
    def write(self, lines: Iterable[str]) -> IngestionReport:
        """Ingest every line in one transaction; all or nothing.

        Raises:
            IngestError: On the first rejected line; nothing is stored.
        """
        ...

    @abstractmethod
    def read(self, pattern: str | None = None) -> Iterator[DataPoint]:
        """Yield stored data points in key order, optionally filtered.

        Args:
            pattern: Series name, literal or shell-style glob.
        """
        ...

    @abstractmethod
    def read_lines(self, pattern: str | None = None) -> Iterator[str]:
        """Like read(), rendered as output lines without newlines."""
        ...

    @abstractmethod
    def infos(self) -> DatabaseInfo:
        """Return the stored schema and data point count."""
        ...
