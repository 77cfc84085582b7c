"""Adapters layer - concrete implementations of port interfaces.

Adapters provide the actual implementations:
- Inbound adapters: Handle incoming requests (the command line)
- Outbound adapters: Implement external dependencies (the LMDB storage engine)
"""

from fanfare.adapters.outbound import (
    InMemoryKeyValueStore,
    LMDBKeyValueStore,
)

__all__ = [
    # Outbound adapters
    "InMemoryKeyValueStore",
    "LMDBKeyValueStore",
]
