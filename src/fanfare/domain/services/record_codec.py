"""Record codec: input lines to stored pairs and stored pairs back to text.

Input line grammar (whitespace separated):
    <series> <timestamp> <code string> <value_0> ... <value_{k-1}>

Output line grammar (single spaces):
    <series> <timestamp> <value_0> ... <value_{k-1}>

Value blob layout is the concatenation of each value at its fixed
big-endian width, in schema order.
"""

from __future__ import annotations

import struct
from dataclasses import dataclass
from typing import Sequence

from fanfare.domain.entities import DataPoint, SeriesKey, decode_key
from fanfare.domain.exceptions import (
    CorruptRecord,
    MalformedValue,
    MissingField,
    NumericParseError,
    UnknownTypeCode,
    WrongFieldCount,
)
from fanfare.domain.value_objects import Number, Schema, parse_timestamp, to_stored


@dataclass(frozen=True)
class InputRecord:
    """One input line split into its fields, nothing parsed yet."""

    series: str
    timestamp: str
    code: str
    tokens: tuple[str, ...]


def parse_line(line: str) -> InputRecord:
    """Split an input line into series, timestamp, code string and values.

    Raises:
        MissingField: If the series, timestamp or code string is absent.
    """
    fields = line.split()
    for index, name in enumerate(("series name", "timestamp", "code string")):
        if len(fields) <= index:
            raise MissingField(name)
    return InputRecord(
        series=fields[0],
        timestamp=fields[1],
        code=fields[2],
        tokens=tuple(fields[3:]),
    )


def encode_values(schema: Schema, tokens: Sequence[str]) -> bytes:
    """Parse value tokens by their schema types and pack them.

    Raises:
        WrongFieldCount: If there is not exactly one token per schema field.
        NumericParseError: On the first token its type cannot parse.
    """
    if len(tokens) != len(schema):
        raise WrongFieldCount(len(schema), len(tokens))

    values: list[Number] = []
    for index, (value_type, token) in enumerate(zip(schema, tokens)):
        try:
            values.append(value_type.parse(token))
        except ValueError:
            raise NumericParseError(index, token, value_type.codec.name) from None
    return schema.struct.pack(*values)


def decode_values(schema: Schema, data: bytes) -> tuple[Number, ...]:
    """Unpack a stored value blob into numbers in schema order.

    Raises:
        MalformedValue: If the blob length is not the schema's value width.
    """
    if len(data) != schema.value_width:
        raise MalformedValue(
            f"value blob holds {len(data)} bytes, schema {schema.code!r} needs {schema.value_width}"
        )
    try:
        return schema.struct.unpack(data)
    except struct.error as e:
        raise MalformedValue(str(e)) from e


def render_values(schema: Schema, values: Sequence[Number]) -> list[str]:
    """Render numbers as canonical text by their schema types."""
    return [value_type.render(value) for value_type, value in zip(schema, values)]


def format_line(schema: Schema, point: DataPoint) -> str:
    """Render a data point as one output line (no newline)."""
    return " ".join(
        [point.series, point.formatted_timestamp, *render_values(schema, point.values)]
    )


def schema_from_sentinel(raw: bytes) -> Schema:
    """Parse the code string stored under the sentinel key.

    Raises:
        CorruptRecord: If the stored code string is not a valid schema.
    """
    try:
        return Schema.from_bytes(raw)
    except UnknownTypeCode as e:
        raise CorruptRecord(f"stored schema {raw!r} is invalid: {e}") from e


class RecordEncoder:
    """Encodes input records of one schema into (key, value) pairs."""

    def __init__(self, schema: Schema) -> None:
        self._schema = schema

    @property
    def schema(self) -> Schema:
        return self._schema

    def encode(self, record: InputRecord) -> tuple[SeriesKey, bytes]:
        """Build the storage key and value blob of one record.

        Checks run in this order: field count, timestamp, values.

        Raises:
            WrongFieldCount, TimestampParseError, NumericParseError
        """
        if len(record.tokens) != len(self._schema):
            raise WrongFieldCount(len(self._schema), len(record.tokens))
        nanos = parse_timestamp(record.timestamp)
        value = encode_values(self._schema, record.tokens)
        return SeriesKey(record.series, to_stored(nanos)), value


class RecordDecoder:
    """Decodes stored (key, value) pairs of one schema."""

    def __init__(self, schema: Schema) -> None:
        self._schema = schema

    @property
    def schema(self) -> Schema:
        return self._schema

    def decode(self, key: bytes, value: bytes) -> DataPoint:
        """Decode one stored pair.

        Raises:
            MalformedKey, Utf8DecodeError, MalformedValue
        """
        series, timestamp = decode_key(key)
        return DataPoint(
            series=series,
            timestamp=timestamp,
            values=decode_values(self._schema, value),
        )

    def format(self, point: DataPoint) -> str:
        return format_line(self._schema, point)
