"""Parsers for bulk WHOIS dumps."""

from .dump import open_dump, parse_type
from .rpsl import (
    FramerState,
    RecordFramer,
    get_key_value,
    merge_attribute,
    normalize_record,
    parse_records,
)

__all__ = [
    "parse_type",
    "open_dump",
    "parse_records",
    "RecordFramer",
    "FramerState",
    "get_key_value",
    "merge_attribute",
    "normalize_record",
]
