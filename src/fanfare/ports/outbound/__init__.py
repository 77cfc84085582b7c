"""Outbound ports - interfaces for external dependencies.

Outbound ports define contracts for external systems that the
time-series store depends on: here, the ordered key-value engine.
"""

from fanfare.ports.outbound.kv_store import (
    KeyOrderError,
    KeyValueStore,
    OpenMode,
    ReadTransaction,
    WriteTransaction,
)

__all__ = [
    "KeyOrderError",
    "KeyValueStore",
    "OpenMode",
    "ReadTransaction",
    "WriteTransaction",
]
