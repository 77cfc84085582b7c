"""Unit tests for InMemoryKeyValueStore."""

from __future__ import annotations

import pytest

from fanfare.adapters.outbound import InMemoryKeyValueStore
from fanfare.domain.exceptions import StorageError
from fanfare.ports.outbound import KeyOrderError, OpenMode


@pytest.mark.unit
class TestInMemoryKeyValueStore:
    """Tests for the in-memory storage engine."""

    def test_empty(self, memory_store: InMemoryKeyValueStore) -> None:
        """A new store holds nothing."""
        with memory_store.begin_read() as txn:
            assert txn.count() == 0
            assert txn.first() is None
            assert txn.get(b"a") is None
            assert list(txn.iterate()) == []

    def test_append_and_iterate(self, memory_store: InMemoryKeyValueStore) -> None:
        """Appended pairs come back in key order."""
        with memory_store.begin_write() as txn:
            txn.append(b"a", b"1")
            txn.append(b"b", b"2")
            txn.append(b"c", b"3")

        with memory_store.begin_read() as txn:
            assert txn.count() == 3
            assert txn.first() == (b"a", b"1")
            assert list(txn.iterate()) == [(b"a", b"1"), (b"b", b"2"), (b"c", b"3")]

    def test_iterate_bounds_are_inclusive(self, memory_store: InMemoryKeyValueStore) -> None:
        """Both start and end keys are yielded when present."""
        with memory_store.begin_write() as txn:
            for key in (b"a", b"b", b"c", b"d"):
                txn.append(key, key)

        with memory_store.begin_read() as txn:
            assert [k for k, _ in txn.iterate(b"b", b"c")] == [b"b", b"c"]
            assert [k for k, _ in txn.iterate(b"bb")] == [b"c", b"d"]
            assert [k for k, _ in txn.iterate(end=b"b")] == [b"a", b"b"]

    def test_append_rejects_smaller_key(self, memory_store: InMemoryKeyValueStore) -> None:
        """Append refuses keys not greater than the current maximum."""
        with memory_store.begin_write() as txn:
            txn.append(b"b", b"1")

            with pytest.raises(KeyOrderError):
                txn.append(b"a", b"2")
            with pytest.raises(KeyOrderError):
                txn.append(b"b", b"2")

    def test_put_anywhere(self, memory_store: InMemoryKeyValueStore) -> None:
        """Put stores keys in order regardless of insertion order."""
        with memory_store.begin_write() as txn:
            txn.put(b"b", b"1")
            txn.put(b"a", b"2")
            txn.put(b"b", b"3")

        with memory_store.begin_read() as txn:
            assert list(txn.iterate()) == [(b"a", b"2"), (b"b", b"3")]

    def test_abort_discards(self, memory_store: InMemoryKeyValueStore) -> None:
        """Aborted transactions leave no trace."""
        txn = memory_store.begin_write()
        txn.append(b"a", b"1")
        txn.abort()

        with memory_store.begin_read() as read:
            assert read.count() == 0

    def test_exception_aborts(self, memory_store: InMemoryKeyValueStore) -> None:
        """Leaving the block with an exception aborts."""
        with pytest.raises(RuntimeError):
            with memory_store.begin_write() as txn:
                txn.append(b"a", b"1")
                raise RuntimeError("boom")

        with memory_store.begin_read() as read:
            assert read.count() == 0

    def test_readers_keep_their_snapshot(self, memory_store: InMemoryKeyValueStore) -> None:
        """A read transaction does not see later commits."""
        reader = memory_store.begin_read()

        with memory_store.begin_write() as txn:
            txn.append(b"a", b"1")

        assert reader.count() == 0
        with memory_store.begin_read() as fresh:
            assert fresh.count() == 1

    def test_single_writer(self, memory_store: InMemoryKeyValueStore) -> None:
        """Only one write transaction may be active at a time."""
        txn = memory_store.begin_write()

        with pytest.raises(StorageError):
            memory_store.begin_write()

        txn.abort()
        memory_store.begin_write().abort()

    def test_read_only_handle(self, memory_store: InMemoryKeyValueStore) -> None:
        """A read-only handle sees committed data but cannot write."""
        with memory_store.begin_write() as txn:
            txn.append(b"a", b"1")

        reader = memory_store.reopen(OpenMode.READ_ONLY_SHARED)

        assert reader.mode is OpenMode.READ_ONLY_SHARED
        with reader.begin_read() as txn:
            assert txn.get(b"a") == b"1"
        with pytest.raises(StorageError):
            reader.begin_write()

    def test_commit_twice(self, memory_store: InMemoryKeyValueStore) -> None:
        """A finished transaction cannot be committed again."""
        txn = memory_store.begin_write()
        txn.commit()

        with pytest.raises(StorageError):
            txn.commit()
