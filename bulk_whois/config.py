"""Configuration for bulk WHOIS registry sources."""

import logging
from typing import Final

# Bulk RPSL dumps published by the Regional Internet Registries
REGISTRY_DUMP_URLS: Final[dict[str, str]] = {
    "lacnic-rr": "http://ftp.lacnic.net/lacnic/rr/lacnic.db.gz",
    "ripe": "https://ftp.ripe.net/ripe/dbase/ripe.db.gz",
    "afrinic": "https://ftp.afrinic.net/pub/dbase/afrinic.db.gz",
    "apnic-route": "https://ftp.apnic.net/apnic/whois/apnic.db.route.gz",
    "arin-rr": "https://ftp.arin.net/pub/rr/arin.db.gz",
}

# Per-registry cache lifetime in days (registries not listed use DEFAULT_CACHE_DAYS)
REGISTRY_CACHE_DAYS: Final[dict[str, int]] = {
    "lacnic-rr": 2,
}

DEFAULT_CACHE_DIR: Final[str] = ".cache/"
DEFAULT_USER_AGENT: Final[str] = "bulk-whois-parser"
DEFAULT_CACHE_DAYS: Final[int] = 1

DOWNLOAD_MAX_ATTEMPTS: Final[int] = 3
DOWNLOAD_TIMEOUT: Final[float] = 60.0
DOWNLOAD_CHUNK_SIZE: Final[int] = 1024 * 1024

# Number of decompressed lines read per suspension point while parsing
PARSE_BATCH_SIZE: Final[int] = 10_000

# Attributes always returned as lists, even with a single occurrence
ALWAYS_LIST_ATTRIBUTES: Final[tuple[str, ...]] = ("remarks", "members")


def setup_logging() -> None:
    """Configure logging for the application."""
    logging.basicConfig(
        level=logging.INFO,
        format="%(asctime)s - %(message)s",
        datefmt="%Y-%m-%d %H:%M:%S",
    )
