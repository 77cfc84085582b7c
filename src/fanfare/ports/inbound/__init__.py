"""Inbound ports - API contracts for the time-series store.

Inbound ports define the interfaces that clients and upper layers
use to interact with a series database.
"""

from fanfare.ports.inbound.series_database import (
    DatabaseInfo,
    IngestionReport,
    SeriesDatabasePort,
)

__all__ = [
    "DatabaseInfo",
    "IngestionReport",
    "SeriesDatabasePort",
]
