"""Read records from a cached (possibly gzipped) registry dump."""

import asyncio
import gzip
import itertools
import logging
import zlib
from collections.abc import Sequence
from pathlib import Path
from typing import TextIO

from ..config import PARSE_BATCH_SIZE
from ..errors import DecodeError
from .rpsl import Predicate, Record, RecordFramer, Sink, require_predicate

logger = logging.getLogger(__name__)

GZIP_MAGIC = b"\x1f\x8b"

# Raised by gzip/zlib on corrupted or truncated input, and by a missing or unreadable file
DECODE_ERRORS = (OSError, EOFError, zlib.error, UnicodeDecodeError)


def is_gzipped(filepath: Path) -> bool:
    with open(filepath, "rb") as f:
        return f.read(2) == GZIP_MAGIC


def open_dump(filepath: Path | str) -> TextIO:
    """
    Open a dump file for line iteration, decompressing it if gzipped.

    Undecodable bytes are replaced rather than rejected; registries publish
    dumps in mixed encodings.
    """
    filepath = Path(filepath)
    if is_gzipped(filepath):
        return gzip.open(filepath, "rt", encoding="utf-8", errors="replace")
    return open(filepath, "r", encoding="utf-8", errors="replace")


def read_batch(handle: TextIO, size: int) -> list[str]:
    """Read up to size lines, without their terminators."""
    return [line.rstrip("\r\n") for line in itertools.islice(handle, size)]


def discard_corrupted_file(filepath: Path) -> None:
    try:
        filepath.unlink()
        logger.warning("Deleted corrupted cache file %s", filepath)
    except FileNotFoundError:
        logger.info("Corrupted file %s already deleted", filepath)


async def parse_type(
    filepath: Path | str,
    record_type: str,
    predicate: Predicate | None,
    fields: Sequence[str] | None = None,
    sink: Sink | None = None,
    delete_corrupted: bool = False,
    batch_size: int = PARSE_BATCH_SIZE,
) -> list[Record]:
    """
    Parse all records of one type from a dump file.

    Lines are read in batches in a worker thread; each batch is framed on the
    event loop thread, so predicate and sink always run there. The whole file
    is read even if no record matches.

    Args:
        filepath: Cached dump (gzip or plain text)
        record_type: Attribute name opening the wanted records
        predicate: Filter; only records for which it returns True are kept
        fields: Optional allow-list of attribute keys
        sink: Optional callback receiving each kept record instead of buffering it
        delete_corrupted: Delete the file when it cannot be decoded
        batch_size: Number of lines read per suspension point

    Returns:
        Kept records in source order (empty when a sink is supplied)

    Raises:
        ConfigurationError: If no predicate is supplied (before the file is opened)
        DecodeError: If the file cannot be opened, decompressed or read
    """
    predicate = require_predicate(predicate)
    filepath = Path(filepath)

    records: list[Record] = []
    framer = RecordFramer(
        record_type,
        predicate,
        emit=sink if sink is not None else records.append,
        fields=fields,
    )

    try:
        with open_dump(filepath) as handle:
            while True:
                batch = await asyncio.to_thread(read_batch, handle, batch_size)
                if not batch:
                    break
                framer.feed_many(batch)
    except DECODE_ERRORS as e:
        logger.error("Error reading %s: %s", filepath, e)
        if delete_corrupted:
            discard_corrupted_file(filepath)
        else:
            logger.error("Delete the cache file %s", filepath)
        raise DecodeError(f"Cannot decode {filepath}: {e}", path=filepath) from e

    framer.finish()
    logger.debug(
        "Parsed %d %s records from %s, kept %d",
        framer.records_seen,
        record_type,
        filepath,
        framer.records_emitted,
    )
    return records
