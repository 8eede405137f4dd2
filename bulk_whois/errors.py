"""Exceptions raised by bulk WHOIS fetching and parsing."""

from pathlib import Path


class BulkWhoisError(Exception):
    """Base class for all bulk WHOIS errors."""

    pass


class ConfigurationError(BulkWhoisError):
    """Raised when a call or profile is misconfigured (e.g. no filter predicate)."""

    pass


class FetchError(BulkWhoisError):
    """Raised when a registry dump could not be downloaded."""

    def __init__(self, message: str, url: str, path: Path | str | None = None):
        super().__init__(message)
        self.url = url
        self.path = Path(path) if path is not None else None


class DecodeError(BulkWhoisError):
    """Raised when a cached dump cannot be decompressed or decoded."""

    def __init__(self, message: str, path: Path | str):
        super().__init__(message)
        self.path = Path(path)
