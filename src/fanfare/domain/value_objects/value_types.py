"""Value types and schemas for stored records.

A schema is written as a compact code string, one character per value
column:

    f - 32 bit float              (4 bytes)
    F - 64 bit float              (8 bytes)
    u - 32 bit unsigned integer   (4 bytes)
    U - 64 bit unsigned integer   (8 bytes)
    i - 32 bit signed integer     (4 bytes)
    I - 64 bit signed integer     (8 bytes)

All values are stored big-endian at their fixed width. Each type owns a
parser for its textual form and a renderer back to text; both live in a
single dispatch table so call sites never branch on the type code.
"""

from __future__ import annotations

import math
import re
import struct
from dataclasses import dataclass
from enum import Enum
from fractions import Fraction
from functools import cached_property
from typing import Callable, ClassVar, Iterator, Union

import numpy as np

from fanfare.domain.exceptions import UnknownTypeCode

Number = Union[int, float]

# Grammar of the native numeric parsers: no surrounding whitespace, no
# digit separators, ASCII digits only.
_SIGNED_INTEGER = re.compile(r"[+-]?[0-9]+")
_UNSIGNED_INTEGER = re.compile(r"\+?[0-9]+")
_FLOAT = re.compile(
    r"[+-]?(?:inf|infinity|nan|(?:[0-9]+\.?[0-9]*|\.[0-9]+)(?:[eE][+-]?[0-9]+)?)",
    re.IGNORECASE,
)


class ValueType(Enum):
    """Scalar kinds a value column can hold, keyed by their code character."""

    FLOAT = "f"
    DOUBLE = "F"
    UNSIGNED = "u"
    UNSIGNED_LONG = "U"
    SIGNED = "i"
    SIGNED_LONG = "I"

    @classmethod
    def from_code(cls, code: str, position: int = 0) -> ValueType:
        """Look up a value type by its code character.

        Raises:
            UnknownTypeCode: If the character names no value type.
        """
        try:
            return cls(code)
        except ValueError:
            raise UnknownTypeCode(code, position) from None

    @property
    def code(self) -> str:
        return self.value

    @property
    def codec(self) -> TypeCodec:
        return _CODECS[self]

    @property
    def width(self) -> int:
        """Stored size of one value in bytes."""
        return _CODECS[self].width

    def parse(self, token: str) -> Number:
        """Parse a textual token; raises ValueError when it is not canonical."""
        return _CODECS[self].parse(token)

    def render(self, value: Number) -> str:
        return _CODECS[self].render(value)


@dataclass(frozen=True)
class TypeCodec:
    """How one value type is parsed, packed and rendered."""

    name: str
    struct_token: str
    width: int
    parse: Callable[[str], Number]
    render: Callable[[Number], str]


def _integer_parser(bits: int, signed: bool) -> Callable[[str], int]:
    if signed:
        pattern = _SIGNED_INTEGER
        low, high = -(1 << (bits - 1)), (1 << (bits - 1)) - 1
    else:
        pattern = _UNSIGNED_INTEGER
        low, high = 0, (1 << bits) - 1

    def parse(token: str) -> int:
        if pattern.fullmatch(token) is None:
            raise ValueError(f"not an integer: {token!r}")
        value = int(token)
        if not low <= value <= high:
            raise ValueError(f"{value} out of range [{low}, {high}]")
        return value

    return parse


def _parse_double(token: str) -> float:
    if _FLOAT.fullmatch(token) is None:
        raise ValueError(f"not a float: {token!r}")
    return float(token)


_FLOAT32_MAX = Fraction(float(np.finfo(np.float32).max))
# Halfway between the largest float32 and 2**128; ties round to infinity.
_FLOAT32_OVERFLOW = _FLOAT32_MAX + Fraction(2) ** 103


def _parse_float(token: str) -> float:
    """Parse a token to the float32 nearest its exact decimal value.

    Rounding through float64 first can land on a float32 halfway point and
    round the wrong way, so the candidate is checked against the exact value.
    """
    value = _parse_double(token)
    # Non-finite and float64-underflowing tokens are already exact at float32.
    if not math.isfinite(value) or value == 0.0:
        return value

    exact = Fraction(token)
    if abs(exact) >= _FLOAT32_OVERFLOW:
        return math.copysign(math.inf, value)

    with np.errstate(over="ignore", under="ignore"):
        candidate = np.float32(value)
    if not np.isfinite(candidate):
        candidate = np.float32(math.copysign(float(_FLOAT32_MAX), value))

    candidate_exact = Fraction(float(candidate))
    if candidate_exact == exact:
        return float(candidate)

    direction = np.float32(math.inf if exact > candidate_exact else -math.inf)
    neighbour = np.nextafter(candidate, direction)
    if not np.isfinite(neighbour):
        return float(candidate)

    candidate_error = abs(exact - candidate_exact)
    neighbour_error = abs(exact - Fraction(float(neighbour)))
    if neighbour_error < candidate_error or (
        neighbour_error == candidate_error and int(neighbour.view(np.uint32)) & 1 == 0
    ):
        return float(neighbour)
    return float(candidate)


def _render_integer(value: Number) -> str:
    return str(int(value))


def _float_renderer(dtype: type[np.floating]) -> Callable[[Number], str]:
    def render(value: Number) -> str:
        if math.isnan(value):
            return "NaN"
        # Shortest text that round-trips at this width, never in exponent form.
        return np.format_float_positional(dtype(value), unique=True, trim="-")

    return render


_CODECS: dict[ValueType, TypeCodec] = {
    ValueType.FLOAT: TypeCodec("f32", "f", 4, _parse_float, _float_renderer(np.float32)),
    ValueType.DOUBLE: TypeCodec("f64", "d", 8, _parse_double, _float_renderer(np.float64)),
    ValueType.UNSIGNED: TypeCodec("u32", "I", 4, _integer_parser(32, False), _render_integer),
    ValueType.UNSIGNED_LONG: TypeCodec("u64", "Q", 8, _integer_parser(64, False), _render_integer),
    ValueType.SIGNED: TypeCodec("i32", "i", 4, _integer_parser(32, True), _render_integer),
    ValueType.SIGNED_LONG: TypeCodec("i64", "q", 8, _integer_parser(64, True), _render_integer),
}


@dataclass(frozen=True)
class Schema:
    """Ordered value types of every record in one database.

    The schema is fixed by the first record ever written and stored
    verbatim, as its code string, under the sentinel key.

    Example:
        >>> schema = Schema.parse("fU")
        >>> schema.value_width
        12
        >>> schema.code
        'fU'
    """

    types: tuple[ValueType, ...]

    BYTE_ORDER: ClassVar[str] = ">"

    @classmethod
    def parse(cls, code_string: str) -> Schema:
        """Build a schema from a code string.

        Raises:
            UnknownTypeCode: On the first character that names no value type.
        """
        return cls(
            tuple(ValueType.from_code(c, position) for position, c in enumerate(code_string))
        )

    @classmethod
    def from_bytes(cls, data: bytes) -> Schema:
        """Build a schema from the raw bytes stored under the sentinel key."""
        try:
            code_string = data.decode("ascii")
        except UnicodeDecodeError:
            raise UnknownTypeCode(repr(data), 0) from None
        return cls.parse(code_string)

    @property
    def code(self) -> str:
        """The code string this schema was parsed from."""
        return "".join(t.code for t in self.types)

    def to_bytes(self) -> bytes:
        return self.code.encode("ascii")

    @property
    def value_width(self) -> int:
        """Total stored size of one record's values in bytes."""
        return sum(t.width for t in self.types)

    @cached_property
    def struct(self) -> struct.Struct:
        """Packer for a whole value blob in schema order."""
        return struct.Struct(self.BYTE_ORDER + "".join(t.codec.struct_token for t in self.types))

    def matches(self, code_string: str) -> bool:
        """True if a record's code string is byte-identical to this schema."""
        return code_string == self.code

    def __len__(self) -> int:
        return len(self.types)

    def __iter__(self) -> Iterator[ValueType]:
        return iter(self.types)
