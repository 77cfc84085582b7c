"""Error taxonomy for the time-series store.

Every failure the store reports derives from FanfareError, so callers
(the CLI in particular) can turn any of them into a message and a
non-zero exit status without catching unrelated exceptions.

Ingestion errors carry the 1-based number of the input line that
caused them once the pipeline has seen it.
"""

from __future__ import annotations


class FanfareError(Exception):
    """Base class for all store errors."""


# ---------------------------------------------------------------- ingestion


class IngestError(FanfareError):
    """An input record was rejected; the whole write run is aborted."""

    def __init__(self, message: str, line_number: int | None = None) -> None:
        super().__init__(message)
        self.message = message
        self.line_number = line_number

    def at_line(self, line_number: int) -> IngestError:
        """Attach the input line number and return self for re-raising."""
        if self.line_number is None:
            self.line_number = line_number
        return self

    def __str__(self) -> str:
        if self.line_number is None:
            return self.message
        return f"line {self.line_number}: {self.message}"


class UnreadableInput(IngestError):
    """An input line could not be decoded as text."""

    def __init__(self, reason: str, line_number: int | None = None) -> None:
        super().__init__(f"unreadable input: {reason}", line_number)
        self.reason = reason


class MissingField(IngestError):
    """A line lacks its series name, timestamp or code string."""

    def __init__(self, field_name: str, line_number: int | None = None) -> None:
        super().__init__(f"missing {field_name}", line_number)
        self.field_name = field_name


class UnknownTypeCode(IngestError):
    """A code string contains a character that is not a value type."""

    def __init__(self, code: str, position: int, line_number: int | None = None) -> None:
        super().__init__(
            f"invalid code character {code!r} at position {position}", line_number
        )
        self.code = code
        self.position = position


class WrongFieldCount(IngestError):
    """The number of value tokens differs from the code string length."""

    def __init__(self, expected: int, actual: int, line_number: int | None = None) -> None:
        super().__init__(
            f"wrong number of values: expected {expected}, got {actual}", line_number
        )
        self.expected = expected
        self.actual = actual


class TimestampParseError(IngestError):
    """A timestamp is not in YYYY-MM-DDTHH:MM:SS[.fraction] form or out of range."""

    def __init__(self, text: str, reason: str, line_number: int | None = None) -> None:
        super().__init__(f"invalid timestamp {text!r}: {reason}", line_number)
        self.text = text
        self.reason = reason


class NumericParseError(IngestError):
    """A value token cannot be parsed as its field's numeric type."""

    def __init__(
        self,
        field_index: int,
        token: str,
        type_name: str,
        line_number: int | None = None,
    ) -> None:
        super().__init__(
            f"invalid value {token!r} for field {field_index} ({type_name})", line_number
        )
        self.field_index = field_index
        self.token = token
        self.type_name = type_name


class SchemaMismatch(IngestError):
    """A record's code string differs from the schema stored in the database."""

    def __init__(self, expected: str, actual: str, line_number: int | None = None) -> None:
        super().__init__(
            f"invalid code: database schema is {expected!r}, record has {actual!r}",
            line_number,
        )
        self.expected = expected
        self.actual = actual


class OutOfOrderInsertion(IngestError):
    """A record's key is not strictly greater than the greatest stored key."""

    def __init__(self, series: str, timestamp: str, line_number: int | None = None) -> None:
        super().__init__(
            f"inserted value not ordered: {series} {timestamp}", line_number
        )
        self.series = series
        self.timestamp = timestamp


# ---------------------------------------------------------------- read path


class DatabaseNotFound(FanfareError):
    """Read or infos against a path that holds no database."""

    def __init__(self, path: str) -> None:
        super().__init__(f"database not found: {path}")
        self.path = path


class CorruptRecord(FanfareError):
    """Stored data cannot be decoded."""


class MalformedKey(CorruptRecord):
    """A stored key is shorter than a timestamp or otherwise unusable."""


class Utf8DecodeError(MalformedKey):
    """The series name part of a stored key is not valid UTF-8."""


class MalformedValue(CorruptRecord):
    """A stored value blob does not match the schema width."""


class InvalidFilterPattern(FanfareError):
    """A read filter is not a valid glob pattern."""

    def __init__(self, pattern: str, reason: str) -> None:
        super().__init__(f"invalid filter pattern {pattern!r}: {reason}")
        self.pattern = pattern
        self.reason = reason


# ---------------------------------------------------------------- engine


class StorageError(FanfareError):
    """The storage engine failed or was used in the wrong open mode."""
