"""Value objects for the time-series store domain.

Value objects are immutable types that represent domain concepts.
They have no identity - two value objects with the same attributes are equal.

Exports:
    Value types:
        - ValueType: Scalar kinds a value column can hold (f, F, u, U, i, I)
        - TypeCodec: Parse/pack/render entry of the type dispatch table
        - Schema: Ordered value types fixed at the first write
        - Number: int | float

    Timestamps:
        - parse_timestamp / format_timestamp: Canonical text <-> nanoseconds
        - to_stored / from_stored: Signed <-> unsigned key reinterpretation
        - MIN_STORED_TIMESTAMP, MAX_STORED_TIMESTAMP: Key timestamp bounds
"""

from fanfare.domain.value_objects.timestamps import (
    MAX_STORED_TIMESTAMP,
    MIN_STORED_TIMESTAMP,
    NANOS_PER_SECOND,
    TIMESTAMP_FORMAT,
    format_timestamp,
    from_stored,
    parse_timestamp,
    to_stored,
)
from fanfare.domain.value_objects.value_types import (
    Number,
    Schema,
    TypeCodec,
    ValueType,
)

__all__ = [
    # Value types
    "Number",
    "Schema",
    "TypeCodec",
    "ValueType",
    # Timestamps
    "MAX_STORED_TIMESTAMP",
    "MIN_STORED_TIMESTAMP",
    "NANOS_PER_SECOND",
    "TIMESTAMP_FORMAT",
    "format_timestamp",
    "from_stored",
    "parse_timestamp",
    "to_stored",
]
