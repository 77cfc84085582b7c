"""Domain services for business logic.

Services implement domain logic that doesn't naturally fit within a
single entity: here, the codec between text lines and stored pairs.
"""

from fanfare.domain.services.record_codec import (
    InputRecord,
    RecordDecoder,
    RecordEncoder,
    decode_values,
    encode_values,
    format_line,
    parse_line,
    render_values,
    schema_from_sentinel,
)

__all__ = [
    "InputRecord",
    "RecordDecoder",
    "RecordEncoder",
    "decode_values",
    "encode_values",
    "format_line",
    "parse_line",
    "render_values",
    "schema_from_sentinel",
]
