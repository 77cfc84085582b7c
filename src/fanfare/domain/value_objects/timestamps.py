"""Canonical timestamp text and its nanosecond representation.

Timestamps are written as ``YYYY-MM-DDTHH:MM:SS[.fraction]`` and read as
naive UTC. They are counted in signed nanoseconds since the Unix epoch and
stored as the same 64 bits reinterpreted as an unsigned integer, so the
big-endian key encoding sorts post-epoch instants chronologically.
Pre-epoch instants become large unsigned values and sort after every
post-epoch instant of the same series; decoding reinterprets them back to
signed so their text still round-trips.
"""

from __future__ import annotations

import re
from datetime import datetime, timedelta

from fanfare.domain.exceptions import TimestampParseError

NANOS_PER_SECOND = 1_000_000_000
TIMESTAMP_FORMAT = "YYYY-MM-DDTHH:MM:SS[.fraction]"

MIN_STORED_TIMESTAMP = 0
MAX_STORED_TIMESTAMP = (1 << 64) - 1

_I64_MIN = -(1 << 63)
_I64_MAX = (1 << 63) - 1
_U64_MASK = MAX_STORED_TIMESTAMP

_EPOCH = datetime(1970, 1, 1)

_TIMESTAMP = re.compile(
    r"(?P<year>[+-]?[0-9]{4,})-(?P<month>[0-9]{2})-(?P<day>[0-9]{2})"
    r"T(?P<hour>[0-9]{2}):(?P<minute>[0-9]{2}):(?P<second>[0-9]{2})"
    r"(?:\.(?P<fraction>[0-9]+))?"
)


def parse_timestamp(text: str) -> int:
    """Parse canonical timestamp text into signed nanoseconds since the epoch.

    Fraction digits past nanosecond precision are ignored.

    Raises:
        TimestampParseError: If the text is malformed, names an invalid
            date or time, or lies outside the signed 64-bit nanosecond range.
    """
    match = _TIMESTAMP.fullmatch(text)
    if match is None:
        raise TimestampParseError(text, f"expected {TIMESTAMP_FORMAT}")

    # A leap second (:60) is accepted in any minute and lands on the
    # first second of the next minute.
    second = int(match["second"])
    leap = second == 60
    try:
        moment = datetime(
            int(match["year"]),
            int(match["month"]),
            int(match["day"]),
            int(match["hour"]),
            int(match["minute"]),
            59 if leap else second,
        )
    except ValueError as e:
        raise TimestampParseError(text, str(e)) from e

    fraction = match["fraction"] or ""
    subsecond = int(fraction[:9].ljust(9, "0"))

    delta = moment - _EPOCH
    seconds = delta.days * 86_400 + delta.seconds + (1 if leap else 0)
    nanos = seconds * NANOS_PER_SECOND + subsecond
    if not _I64_MIN <= nanos <= _I64_MAX:
        raise TimestampParseError(text, "outside the representable nanosecond range")
    return nanos


def to_stored(nanos: int) -> int:
    """Reinterpret signed nanoseconds as the unsigned value kept in keys."""
    return nanos & _U64_MASK


def from_stored(stored: int) -> int:
    """Reinterpret an unsigned key timestamp as signed nanoseconds."""
    if stored > _I64_MAX:
        return stored - (1 << 64)
    return stored


def format_timestamp(nanos: int) -> str:
    """Render signed nanoseconds since the epoch as canonical timestamp text.

    The fraction uses as few of 3, 6 or 9 digits as represent the
    sub-second part exactly, and is omitted entirely when it is zero.
    """
    seconds, subsecond = divmod(nanos, NANOS_PER_SECOND)
    moment = _EPOCH + timedelta(seconds=seconds)
    text = (
        f"{moment.year:04d}-{moment.month:02d}-{moment.day:02d}"
        f"T{moment.hour:02d}:{moment.minute:02d}:{moment.second:02d}"
    )
    return text + _format_fraction(subsecond)


def _format_fraction(subsecond: int) -> str:
    if subsecond == 0:
        return ""
    if subsecond % 1_000_000 == 0:
        return f".{subsecond // 1_000_000:03d}"
    if subsecond % 1_000 == 0:
        return f".{subsecond // 1_000:06d}"
    return f".{subsecond:09d}"
