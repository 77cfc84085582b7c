"""Outbound adapters - implementations of outbound ports.

These adapters implement the ordered key-value storage engine the
time-series store is built on.
"""

from fanfare.adapters.outbound.lmdb_store import (
    LMDBKeyValueStore,
    LMDBReadTransaction,
    LMDBWriteTransaction,
)
from fanfare.adapters.outbound.memory_store import (
    InMemoryKeyValueStore,
    InMemoryReadTransaction,
    InMemoryWriteTransaction,
)

__all__ = [
    "InMemoryKeyValueStore",
    "InMemoryReadTransaction",
    "InMemoryWriteTransaction",
    "LMDBKeyValueStore",
    "LMDBReadTransaction",
    "LMDBWriteTransaction",
]
