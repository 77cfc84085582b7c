"""Ports layer - interface definitions following Hexagonal Architecture.

Ports are abstract interfaces (protocols) that define contracts:
- Inbound ports: APIs offered to clients (e.g., SeriesDatabasePort)
- Outbound ports: Dependencies on external systems (e.g., KeyValueStore)

Adapters implement these ports with concrete functionality.
"""

from fanfare.ports.inbound import (
    DatabaseInfo,
    IngestionReport,
    SeriesDatabasePort,
)
from fanfare.ports.outbound import (
    KeyOrderError,
    KeyValueStore,
    OpenMode,
    ReadTransaction,
    WriteTransaction,
)

__all__ = [
    # Inbound ports
    "DatabaseInfo",
    "IngestionReport",
    "SeriesDatabasePort",
    # Outbound ports
    "KeyOrderError",
    "KeyValueStore",
    "OpenMode",
    "ReadTransaction",
    "WriteTransaction",
]
