"""Unit tests for the record codec and storage keys."""

from __future__ import annotations

import pytest

from fanfare.domain.entities import (
    FIRST_DATA_KEY,
    SENTINEL_KEY,
    DataPoint,
    SeriesKey,
    decode_key,
    encode_key,
    series_range,
)
from fanfare.domain.exceptions import (
    CorruptRecord,
    MalformedKey,
    MalformedValue,
    MissingField,
    NumericParseError,
    TimestampParseError,
    Utf8DecodeError,
    WrongFieldCount,
)
from fanfare.domain.services import (
    RecordDecoder,
    RecordEncoder,
    decode_values,
    encode_values,
    format_line,
    parse_line,
    schema_from_sentinel,
)
from fanfare.domain.value_objects import Schema, to_stored


@pytest.mark.unit
class TestSeriesKey:
    """Tests for the composite storage key."""

    def test_layout(self) -> None:
        """Name bytes are followed by a big-endian timestamp."""
        assert SeriesKey("air-1", 1).to_bytes() == b"air-1" + b"\x00" * 7 + b"\x01"

    def test_sentinel_is_smallest(self) -> None:
        """The sentinel is eight zero bytes and sorts before any data key."""
        assert SENTINEL_KEY == b"\x00" * 8
        assert SENTINEL_KEY < FIRST_DATA_KEY < encode_key("a", 0)

    def test_ordering(self) -> None:
        """Keys sort by series name, then by timestamp."""
        assert encode_key("a", 2) < encode_key("a", 10) < encode_key("b", 0)

    def test_round_trip(self) -> None:
        """Keys decode into the name and timestamp they encode."""
        key = SeriesKey("oceanic-airlines", 2**63 + 5)

        assert SeriesKey.from_bytes(key.to_bytes()) == key

    def test_decode_key(self) -> None:
        """decode_key splits raw bytes into name and stored timestamp."""
        assert decode_key(encode_key("air-1", 7)) == ("air-1", 7)
        assert decode_key(SENTINEL_KEY) == ("", 0)

        with pytest.raises(MalformedKey):
            decode_key(b"short")

    def test_rejects_short_key(self) -> None:
        """A key shorter than a timestamp is malformed."""
        with pytest.raises(MalformedKey):
            SeriesKey.from_bytes(b"abc")

    def test_rejects_invalid_utf8(self) -> None:
        """A name that is not UTF-8 is reported as such."""
        with pytest.raises(Utf8DecodeError):
            SeriesKey.from_bytes(b"\xff" + b"\x00" * 8)

    def test_rejects_out_of_range_timestamp(self) -> None:
        """Key timestamps are unsigned 64-bit."""
        with pytest.raises(ValueError):
            SeriesKey("a", -1)
        with pytest.raises(ValueError):
            SeriesKey("a", 2**64)

    def test_series_range_covers_longer_names(self) -> None:
        """A series' byte range also holds names it prefixes."""
        start, end = series_range("air-1")

        assert start <= encode_key("air-1", 0) <= end
        assert start <= encode_key("air-1", 2**64 - 1) <= end
        assert start <= encode_key("air-10", 0) <= end
        assert not start <= encode_key("air-2", 0) <= end


@pytest.mark.unit
class TestParseLine:
    """Tests for parse_line."""

    def test_fields(self) -> None:
        """A line splits into series, timestamp, code and value tokens."""
        record = parse_line("air-1  1970-01-01T00:00:00\tuI 5 -6\n")

        assert record.series == "air-1"
        assert record.timestamp == "1970-01-01T00:00:00"
        assert record.code == "uI"
        assert record.tokens == ("5", "-6")

    @pytest.mark.parametrize(
        ("line", "field_name"),
        [
            ("", "series name"),
            ("   \n", "series name"),
            ("air-1", "timestamp"),
            ("air-1 1970-01-01T00:00:00", "code string"),
        ],
    )
    def test_missing_fields(self, line: str, field_name: str) -> None:
        """The first absent field is named."""
        with pytest.raises(MissingField) as exc_info:
            parse_line(line)

        assert exc_info.value.field_name == field_name
        assert str(exc_info.value) == f"missing {field_name}"


@pytest.mark.unit
class TestValues:
    """Tests for packing and unpacking value blobs."""

    def test_encode(self) -> None:
        """Tokens pack big-endian at their schema widths."""
        data = encode_values(Schema.parse("uI"), ["1", "-2"])

        assert data == b"\x00\x00\x00\x01" + b"\xff" * 7 + b"\xfe"

    def test_wrong_count(self) -> None:
        """There must be one token per schema field."""
        with pytest.raises(WrongFieldCount) as exc_info:
            encode_values(Schema.parse("ff"), ["1"])

        assert exc_info.value.expected == 2
        assert exc_info.value.actual == 1

    def test_bad_token(self) -> None:
        """The first unparsable token is reported with its index and type."""
        with pytest.raises(NumericParseError) as exc_info:
            encode_values(Schema.parse("uuF"), ["1", "2", "x"])

        assert exc_info.value.field_index == 2
        assert exc_info.value.token == "x"
        assert exc_info.value.type_name == "f64"

    def test_decode(self) -> None:
        """Blobs unpack in schema order."""
        schema = Schema.parse("iUF")
        data = encode_values(schema, ["-3", "18446744073709551615", "0.25"])

        assert decode_values(schema, data) == (-3, 2**64 - 1, 0.25)

    def test_decode_wrong_width(self) -> None:
        """A blob of the wrong length is malformed."""
        with pytest.raises(MalformedValue):
            decode_values(Schema.parse("F"), b"\x00" * 4)

    def test_format_line(self) -> None:
        """Output lines hold name, timestamp and values, single spaced."""
        point = DataPoint("air-1", 1_500_000_000, (7, 0.5))

        assert format_line(Schema.parse("uF"), point) == "air-1 1970-01-01T00:00:01.500 7 0.5"


@pytest.mark.unit
class TestSentinel:
    """Tests for schema_from_sentinel."""

    def test_valid(self) -> None:
        """A stored code string is the schema."""
        assert schema_from_sentinel(b"ff") == Schema.parse("ff")

    @pytest.mark.parametrize("raw", [b"fz", b"\xff\xfe"])
    def test_invalid_is_corrupt(self, raw: bytes) -> None:
        """An invalid stored schema is corruption, not an input error."""
        with pytest.raises(CorruptRecord):
            schema_from_sentinel(raw)


@pytest.mark.unit
class TestRecordEncoder:
    """Tests for RecordEncoder."""

    def test_encode(self) -> None:
        """A record becomes its key and value blob."""
        encoder = RecordEncoder(Schema.parse("u"))

        key, value = encoder.encode(parse_line("a 1970-01-01T00:00:01 u 9"))

        assert key == SeriesKey("a", 1_000_000_000)
        assert value == b"\x00\x00\x00\x09"

    def test_pre_epoch_key(self) -> None:
        """Pre-epoch timestamps are stored reinterpreted as unsigned."""
        encoder = RecordEncoder(Schema.parse("u"))

        key, _ = encoder.encode(parse_line("a 1969-12-31T23:59:59 u 9"))

        assert key.timestamp == to_stored(-1_000_000_000)

    def test_count_checked_before_timestamp(self) -> None:
        """A wrong value count wins over a bad timestamp."""
        encoder = RecordEncoder(Schema.parse("uu"))

        with pytest.raises(WrongFieldCount):
            encoder.encode(parse_line("a never uu 1"))

    def test_timestamp_checked_before_values(self) -> None:
        """A bad timestamp wins over a bad value."""
        encoder = RecordEncoder(Schema.parse("u"))

        with pytest.raises(TimestampParseError):
            encoder.encode(parse_line("a never u x"))


@pytest.mark.unit
class TestRecordDecoder:
    """Tests for RecordDecoder."""

    def test_decode_and_format(self) -> None:
        """Stored pairs decode into points and render as lines."""
        schema = Schema.parse("Iu")
        encoder = RecordEncoder(schema)
        decoder = RecordDecoder(schema)
        key, value = encoder.encode(parse_line("temp 1969-12-31T23:59:59.5 Iu -1 2"))

        point = decoder.decode(key.to_bytes(), value)

        assert point.series == "temp"
        assert point.nanos == -500_000_000
        assert point.values == (-1, 2)
        assert decoder.format(point) == "temp 1969-12-31T23:59:59.500 -1 2"
