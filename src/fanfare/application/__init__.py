"""Application layer for the time-series store.

The application layer orchestrates domain logic to fulfill use cases.

Exports:
    - SeriesDatabase: Entry point bundling the use cases below
    - IngestionPipeline: write - line stream to one committed transaction
    - QueryEngine: read - stored records to data points and lines
    - MetadataReporter: infos - schema code string and entry count
"""

from fanfare.application.ingestion import IngestionPipeline
from fanfare.application.metadata import MetadataReporter
from fanfare.application.query import QueryEngine, ScanPlan, ScanStrategy, plan_scan
from fanfare.application.series_database import SeriesDatabase

__all__ = [
    "SeriesDatabase",
    "IngestionPipeline",
    "QueryEngine",
    "MetadataReporter",
    "ScanPlan",
    "ScanStrategy",
    "plan_scan",
]
