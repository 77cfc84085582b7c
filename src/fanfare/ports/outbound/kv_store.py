"""Key-value store port for the ordered storage engine.

This outbound port defines the contract the time-series store needs from
its storage engine: byte keys kept in byte-lexicographic order, read and
write transactions, bounded forward iteration and an append-only insert
that refuses keys not greater than the current maximum.

Implementations:
    - LMDBKeyValueStore: LMDB environment on disk
    - InMemoryKeyValueStore: sorted in-memory store for tests
"""

from __future__ import annotations

from abc import abstractmethod
from enum import Enum
from typing import Iterator, Protocol


class OpenMode(Enum):
    """How a store is opened.

    READ_WRITE_EXCLUSIVE takes the single writer slot; READ_ONLY_SHARED
    never does and may run alongside a writer and other readers.
    """

    READ_WRITE_EXCLUSIVE = "rw"
    READ_ONLY_SHARED = "ro"

    @property
    def writable(self) -> bool:
        return self is OpenMode.READ_WRITE_EXCLUSIVE


class ReadTransaction(Protocol):
    """A consistent snapshot of the store.

    Usable as a context manager; leaving the block releases the snapshot.
    """

    @abstractmethod
    def get(self, key: bytes) -> bytes | None:
        """Return the value stored under key, or None."""
        ...

    @abstractmethod
    def count(self) -> int:
        """Return the number of stored entries."""
        ...

    @abstractmethod
    def first(self) -> tuple[bytes, bytes] | None:
        """Return the entry with the smallest key, or None if empty."""
        ...

    @abstractmethod
    def iterate(
        self, start: bytes | None = None, end: bytes | None = None
    ) -> Iterator[tuple[bytes, bytes]]:
        """Yield entries in ascending key order.

        Args:
            start: Smallest key to yield (inclusive); None for the first key.
            end: Largest key to yield (inclusive); None for no upper bound.
        """
        ...

    @abstractmethod
    def abort(self) -> None:
        """Release the transaction without committing anything."""
        ...

    def __enter__(self) -> ReadTransaction: ...

    def __exit__(self, exc_type, exc, tb) -> None: ...


class WriteTransaction(ReadTransaction, Protocol):
    """The single write transaction of a store.

    Changes become visible to new readers only on commit. As a context
    manager it commits when the block succeeds and aborts otherwise.
    """

    @abstractmethod
    def put(self, key: bytes, value: bytes) -> None:
        """Store value under key, replacing any previous value."""
        ...

    @abstractmethod
    def append(self, key: bytes, value: bytes) -> None:
        """Store a pair whose key must exceed every stored key.

        Raises:
            KeyOrderError: If key is not strictly greater than the
                current maximum key.
        """
        ...

    @abstractmethod
    def commit(self) -> None:
        """Make all changes of this transaction durable and visible."""
        ...


class KeyValueStore(Protocol):
    """Protocol for the ordered transactional storage engine.

    Thread Safety:
        One process-level writer at a time; readers are never blocked.
    """

    @property
    @abstractmethod
    def mode(self) -> OpenMode:
        ...

    @abstractmethod
    def begin_write(self) -> WriteTransaction:
        """Begin the write transaction.

        Raises:
            StorageError: If the store was opened read-only or the engine
                cannot grant the writer slot.
        """
        ...

    @abstractmethod
    def begin_read(self) -> ReadTransaction:
        """Begin a read transaction on the latest committed state."""
        ...

    @abstractmethod
    def close(self) -> None:
        """Close the store; open transactions must be finished first."""
        ...


class KeyOrderError(Exception):
    """Raised when an appended key does not exceed the greatest stored key."""

    def __init__(self, key: bytes) -> None:
        super().__init__(f"appended key {key!r} is not greater than the last key")
        self.key = key
