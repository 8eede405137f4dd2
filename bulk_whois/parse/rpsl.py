"""Framing parser for RPSL-style registry records.

A bulk WHOIS dump is a sequence of ``key: value`` blocks separated by blank
lines. RecordFramer turns lines into records one at a time; it never looks
ahead and never keeps more than the record currently being built.
"""

import enum
import logging
from collections.abc import Callable, Iterable, Sequence

from ..config import ALWAYS_LIST_ATTRIBUTES
from ..errors import ConfigurationError

logger = logging.getLogger(__name__)

AttributeValue = str | list[str]
Record = dict[str, AttributeValue]
Predicate = Callable[[Record], bool]
Sink = Callable[[Record], None]

COMMENT_PREFIXES = ("#", "%")


class FramerState(enum.Enum):
    IDLE = "idle"
    OPEN = "open"


def get_key_value(line: str) -> tuple[str | None, str | None]:
    """
    Split an attribute line at its first colon.

    Args:
        line: A single line, without terminator

    Returns:
        (key, value) with surrounding whitespace removed, or (None, None)
        when the line has no non-empty key and value or is a comment
    """
    key, sep, value = line.partition(":")
    key = key.strip()
    value = value.strip()

    if not sep or not key or not value or key.startswith(COMMENT_PREFIXES):
        return None, None

    return key, value


def merge_attribute(record: Record, key: str, value: str) -> None:
    """Add value under key, turning repeated keys into lists in source order."""
    if key not in record:
        record[key] = value
    elif isinstance(record[key], list):
        record[key].append(value)
    else:
        record[key] = [record[key], value]


def normalize_record(record: Record) -> Record:
    """Force attributes in ALWAYS_LIST_ATTRIBUTES to lists."""
    for key in ALWAYS_LIST_ATTRIBUTES:
        if key in record and not isinstance(record[key], list):
            record[key] = [record[key]]
    return record


def require_predicate(predicate: Predicate | None) -> Predicate:
    if predicate is None:
        raise ConfigurationError("A filter predicate must be specified")
    if not callable(predicate):
        raise ConfigurationError(f"Filter predicate is not callable: {predicate!r}")
    return predicate


class RecordFramer:
    """
    State machine turning lines into records of a single type.

    Lines are pushed with feed(). A record opens on a line starting with
    "<record_type>:" and closes on an empty line; closed records that pass
    the predicate are handed to emit.

    A start line seen while a record is already open does not close it: it
    goes through the attribute path like any other line, so two records
    missing their blank separator come out merged.
    """

    def __init__(
        self,
        record_type: str,
        predicate: Predicate,
        emit: Sink,
        fields: Sequence[str] | None = None,
    ):
        self.record_type = record_type
        self.predicate = require_predicate(predicate)
        self.emit = emit
        self.fields = frozenset(fields or ())
        self._prefix = f"{record_type}:"
        self._current: Record | None = None

        self.records_seen = 0
        self.records_emitted = 0

    @property
    def state(self) -> FramerState:
        return FramerState.IDLE if self._current is None else FramerState.OPEN

    def feed(self, line: str) -> None:
        if self._current is None:
            if line.startswith(self._prefix):
                self._current = {self.record_type: line[len(self._prefix):].strip()}
            return

        if len(line) == 0:
            self._close()
            return

        key, value = get_key_value(line)
        if key and (not self.fields or key in self.fields):
            merge_attribute(self._current, key, value)

    def feed_many(self, lines: Iterable[str]) -> None:
        for line in lines:
            self.feed(line)

    def finish(self) -> None:
        """Signal end of input; a record still open is dropped."""
        if self._current is not None:
            logger.debug(
                "Dropping unterminated %s record at end of input", self.record_type
            )
            self._current = None

    def _close(self) -> None:
        record = normalize_record(self._current)
        self._current = None
        self.records_seen += 1

        if self.predicate(record):
            self.records_emitted += 1
            self.emit(record)


def parse_records(
    lines: Iterable[str],
    record_type: str,
    predicate: Predicate | None,
    fields: Sequence[str] | None = None,
    sink: Sink | None = None,
) -> list[Record]:
    """
    Parse records of one type from an iterable of lines.

    Args:
        lines: Lines without terminators
        record_type: Attribute name opening the wanted records (e.g. "person")
        predicate: Filter; only records for which it returns True are kept
        fields: Optional allow-list of attribute keys (the type key is always kept)
        sink: Optional callback receiving each kept record instead of buffering it

    Returns:
        Kept records in source order (empty when a sink is supplied)

    Raises:
        ConfigurationError: If no predicate is supplied
    """
    records: list[Record] = []
    framer = RecordFramer(
        record_type,
        predicate,
        emit=sink if sink is not None else records.append,
        fields=fields,
    )
    framer.feed_many(lines)
    framer.finish()
    return records
