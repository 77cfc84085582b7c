"""In-memory key-value store adapter.

A simple in-memory implementation of the KeyValueStore port for testing
and embedding. Keys are kept sorted with bisect. Commits publish a new
sorted key list and value map, so read transactions begun earlier keep
their snapshot. Data is not persisted across restarts.

Usage:
    store = InMemoryKeyValueStore()
    with store.begin_write() as txn:
        txn.append(b"a", b"1")
"""

from __future__ import annotations

from bisect import bisect_left, bisect_right
from dataclasses import dataclass, field
from typing import Iterator

from fanfare.domain.exceptions import StorageError
from fanfare.ports.outbound.kv_store import KeyOrderError, OpenMode


@dataclass
class _MemoryState:
    """Committed contents shared by every handle on one store."""

    keys: list[bytes] = field(default_factory=list)
    values: dict[bytes, bytes] = field(default_factory=dict)
    writer_active: bool = False


class InMemoryReadTransaction:
    """Snapshot of the committed keys and values."""

    def __init__(self, keys: list[bytes], values: dict[bytes, bytes]) -> None:
        self._keys = keys
        self._values = values

    def get(self, key: bytes) -> bytes | None:
        return self._values.get(key)

    def count(self) -> int:
        return len(self._keys)

    def first(self) -> tuple[bytes, bytes] | None:
        if not self._keys:
            return None
        key = self._keys[0]
        return key, self._values[key]

    def iterate(
        self, start: bytes | None = None, end: bytes | None = None
    ) -> Iterator[tuple[bytes, bytes]]:
        lo = 0 if start is None else bisect_left(self._keys, start)
        hi = len(self._keys) if end is None else bisect_right(self._keys, end)
        for key in self._keys[lo:hi]:
            yield key, self._values[key]

    def abort(self) -> None:
        pass

    def __enter__(self) -> InMemoryReadTransaction:
        return self

    def __exit__(self, exc_type, exc, tb) -> None:
        self.abort()


class InMemoryWriteTransaction(InMemoryReadTransaction):
    """Private copy of the store contents, published on commit."""

    def __init__(self, state: _MemoryState) -> None:
        super().__init__(list(state.keys), dict(state.values))
        self._state = state
        self._finished = False

    def put(self, key: bytes, value: bytes) -> None:
        if key not in self._values:
            self._keys.insert(bisect_left(self._keys, key), key)
        self._values[key] = value

    def append(self, key: bytes, value: bytes) -> None:
        if self._keys and key <= self._keys[-1]:
            raise KeyOrderError(key)
        self._keys.append(key)
        self._values[key] = value

    def commit(self) -> None:
        if self._finished:
            raise StorageError("transaction already finished")
        self._finished = True
        # Rebind rather than mutate so open readers keep their snapshot.
        self._state.keys = self._keys
        self._state.values = self._values
        self._state.writer_active = False

    def abort(self) -> None:
        if not self._finished:
            self._finished = True
            self._state.writer_active = False

    def __enter__(self) -> InMemoryWriteTransaction:
        return self

    def __exit__(self, exc_type, exc, tb) -> None:
        if exc_type is None and not self._finished:
            self.commit()
        else:
            self.abort()


class InMemoryKeyValueStore:
    """In-memory implementation of the KeyValueStore protocol."""

    def __init__(
        self,
        mode: OpenMode = OpenMode.READ_WRITE_EXCLUSIVE,
        state: _MemoryState | None = None,
    ) -> None:
        """Initialize a store, empty unless it shares another handle's state."""
        self._mode = mode
        self._state = state if state is not None else _MemoryState()

    @property
    def mode(self) -> OpenMode:
        return self._mode

    def reopen(self, mode: OpenMode) -> InMemoryKeyValueStore:
        """Return another handle on the same contents, opened in mode."""
        return InMemoryKeyValueStore(mode, self._state)

    def begin_write(self) -> InMemoryWriteTransaction:
        if not self._mode.writable:
            raise StorageError("store is opened read-only")
        if self._state.writer_active:
            raise StorageError("a write transaction is already active")
        self._state.writer_active = True
        return InMemoryWriteTransaction(self._state)

    def begin_read(self) -> InMemoryReadTransaction:
        return InMemoryReadTransaction(self._state.keys, self._state.values)

    def close(self) -> None:
        pass
