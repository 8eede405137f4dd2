#!/usr/bin/env python3
"""Command-line interface for bulk WHOIS dumps."""

import argparse
import asyncio
import json
import logging
import sys

from .config import setup_logging
from .connector import Connector
from .errors import BulkWhoisError, ConfigurationError
from .parse.rpsl import Predicate, Record
from .profiles import get_profile, list_profiles

logger = logging.getLogger(__name__)


def build_predicate(conditions: list[str]) -> Predicate:
    """
    Build a record filter from KEY=TEXT conditions.

    A record matches when, for every condition, some value of KEY contains
    TEXT (case-insensitive). No conditions match every record.
    """
    parsed: list[tuple[str, str]] = []
    for condition in conditions:
        key, sep, text = condition.partition("=")
        if not sep or not key:
            raise ConfigurationError(f"Invalid condition {condition!r}, expected KEY=TEXT")
        parsed.append((key.strip(), text.strip().lower()))

    def predicate(record: Record) -> bool:
        for key, text in parsed:
            value = record.get(key)
            if value is None:
                return False
            values = value if isinstance(value, list) else [value]
            if not any(text in v.lower() for v in values):
                return False
        return True

    return predicate


def write_record(record: Record) -> None:
    sys.stdout.write(json.dumps(record, ensure_ascii=False))
    sys.stdout.write("\n")


async def _run(args: argparse.Namespace) -> int:
    overrides = {}
    if args.cache_days is not None:
        overrides["ttl_days"] = args.cache_days
    if args.delete_corrupted:
        overrides["delete_corrupted_cache_file"] = True

    profile = get_profile(args.registry, cache_dir=args.cache_dir, **overrides)
    connector = Connector(profile)

    if args.download:
        path = await connector.obtain_source(force=args.force)
        logger.info("[%s] Dump available at %s", connector.name, path)
        return 0

    predicate = build_predicate(args.where or [])
    count = 0

    def sink(record: Record) -> None:
        nonlocal count
        count += 1
        write_record(record)

    await connector.get_objects(args.type, predicate, fields=args.field, sink=sink)
    logger.info("[%s] %d records written", connector.name, count)
    return 0


def main() -> int:
    """Main CLI entry point."""
    parser = argparse.ArgumentParser(
        description="Download and parse bulk WHOIS dumps of Regional Internet Registries",
        formatter_class=argparse.RawDescriptionHelpFormatter,
    )

    parser.add_argument(
        "--list-registries",
        action="store_true",
        help="List the known registries and exit",
    )

    parser.add_argument(
        "--registry",
        metavar="NAME",
        help="Registry to use (see --list-registries)",
    )

    parser.add_argument(
        "--download",
        action="store_true",
        help="Only refresh the cached dump (skipped while the cache is valid)",
    )

    parser.add_argument(
        "--force",
        action="store_true",
        help="With --download, download even if the cache is valid",
    )

    parser.add_argument(
        "--type",
        action="append",
        metavar="TYPE",
        help="Record type to extract (e.g. inetnum); repeat for several types",
    )

    parser.add_argument(
        "--field",
        action="append",
        metavar="KEY",
        help="Attribute to keep in output records; repeat for several (default: all)",
    )

    parser.add_argument(
        "--where",
        action="append",
        metavar="KEY=TEXT",
        help="Keep only records whose KEY contains TEXT; repeat to combine",
    )

    parser.add_argument(
        "--cache-dir",
        metavar="DIR",
        help="Base cache directory (default: .cache/)",
    )

    parser.add_argument(
        "--cache-days",
        type=int,
        metavar="DAYS",
        help="Override the cache lifetime of the registry",
    )

    parser.add_argument(
        "--delete-corrupted",
        action="store_true",
        help="Delete the cached dump when it cannot be decoded",
    )

    args = parser.parse_args()

    # Configure logging (records go to stdout, logs to stderr)
    setup_logging()

    if args.list_registries:
        for name in list_profiles():
            profile = get_profile(name)
            print(f"{name}\t{profile.dump_url}\t{profile.ttl_days}d")
        return 0

    if not args.registry:
        parser.print_help()
        return 0

    if not args.download and not args.type:
        logger.error("Specify at least one --type, or --download")
        return 1

    try:
        return asyncio.run(_run(args))
    except BulkWhoisError as e:
        logger.error("%s", e)
        return 1


if __name__ == "__main__":
    sys.exit(main())
