"""Domain entities for the time-series store.

Exports:
    Data points:
        - DataPoint: One timestamped row of a series
        - SeriesKey: Composite (series, timestamp) storage key
        - SENTINEL, SENTINEL_KEY: Reserved smallest key holding the schema
        - FIRST_DATA_KEY: Smallest key a data point can be stored under
        - encode_key / decode_key: SeriesKey byte helpers
        - series_range: Inclusive key bounds of one series
"""

from fanfare.domain.entities.data_point import (
    FIRST_DATA_KEY,
    SENTINEL,
    SENTINEL_KEY,
    TIMESTAMP_SIZE,
    DataPoint,
    SeriesKey,
    decode_key,
    encode_key,
    series_range,
)

__all__ = [
    "DataPoint",
    "SeriesKey",
    "SENTINEL",
    "SENTINEL_KEY",
    "FIRST_DATA_KEY",
    "TIMESTAMP_SIZE",
    "decode_key",
    "encode_key",
    "series_range",
]
