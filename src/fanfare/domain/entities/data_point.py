"""Data points and the composite key they are stored under.

Key layout:
    [series name, UTF-8 (variable)] [timestamp, u64 big-endian (8 bytes)]

Byte-lexicographic key order therefore groups all points of a series
together and sorts them by timestamp. The sentinel key ("", 0) is eight
zero bytes, the smallest key any record can have; it holds the schema
code string instead of a data point.
"""

from __future__ import annotations

from dataclasses import dataclass

from fanfare.domain.exceptions import MalformedKey, Utf8DecodeError
from fanfare.domain.value_objects import (
    MAX_STORED_TIMESTAMP,
    MIN_STORED_TIMESTAMP,
    Number,
    format_timestamp,
    from_stored,
)

TIMESTAMP_SIZE = 8


@dataclass(frozen=True, slots=True)
class SeriesKey:
    """Composite (series, timestamp) key of one stored record.

    Attributes:
        series: Series name
        timestamp: Unsigned nanosecond timestamp as stored

    Example:
        >>> SeriesKey("air-1", 1).to_bytes()
        b'air-1\\x00\\x00\\x00\\x00\\x00\\x00\\x00\\x01'
    """

    series: str
    timestamp: int

    def __post_init__(self) -> None:
        if not MIN_STORED_TIMESTAMP <= self.timestamp <= MAX_STORED_TIMESTAMP:
            raise ValueError(f"timestamp must fit in 64 unsigned bits, got {self.timestamp}")

    def to_bytes(self) -> bytes:
        return self.series.encode("utf-8") + self.timestamp.to_bytes(
            TIMESTAMP_SIZE, byteorder="big", signed=False
        )

    @classmethod
    def from_bytes(cls, data: bytes) -> SeriesKey:
        """Split a stored key into series name and timestamp.

        Raises:
            MalformedKey: If the key is shorter than a timestamp.
            Utf8DecodeError: If the series name is not valid UTF-8.
        """
        if len(data) < TIMESTAMP_SIZE:
            raise MalformedKey(
                f"key must hold at least {TIMESTAMP_SIZE} bytes, got {len(data)}"
            )
        split = len(data) - TIMESTAMP_SIZE
        try:
            series = data[:split].decode("utf-8")
        except UnicodeDecodeError as e:
            raise Utf8DecodeError(f"series name is not valid UTF-8: {e}") from e
        timestamp = int.from_bytes(data[split:], byteorder="big", signed=False)
        return cls(series, timestamp)


SENTINEL = SeriesKey("", 0)
SENTINEL_KEY = SENTINEL.to_bytes()

# First key after the sentinel; a full scan starts here.
FIRST_DATA_KEY = SeriesKey("", 1).to_bytes()


def encode_key(series: str, timestamp: int) -> bytes:
    return SeriesKey(series, timestamp).to_bytes()


def decode_key(data: bytes) -> tuple[str, int]:
    key = SeriesKey.from_bytes(data)
    return key.series, key.timestamp


def series_range(series: str) -> tuple[bytes, bytes]:
    """Inclusive key bounds covering every timestamp of one series."""
    return (
        encode_key(series, MIN_STORED_TIMESTAMP),
        encode_key(series, MAX_STORED_TIMESTAMP),
    )


@dataclass(frozen=True)
class DataPoint:
    """One timestamped row of a series.

    ``timestamp`` is the unsigned value kept in the key; ``nanos`` is the
    signed nanosecond count it stands for.
    """

    series: str
    timestamp: int
    values: tuple[Number, ...]

    @property
    def nanos(self) -> int:
        return from_stored(self.timestamp)

    @property
    def formatted_timestamp(self) -> str:
        return format_timestamp(self.nanos)
