"""Cache utilities for downloaded registry dumps."""

from datetime import datetime, timezone
from pathlib import Path


def cache_age_days(path: Path | str, now: datetime | None = None) -> int | None:
    """
    Compute the age of a cached file in whole days.

    Args:
        path: Path to the cached file
        now: Reference time (defaults to the current UTC time)

    Returns:
        Number of whole days since the file was last modified (rounded down),
        or None if the file does not exist
    """
    path = Path(path)
    if not path.exists():
        return None

    if now is None:
        now = datetime.now(timezone.utc)

    modified = datetime.fromtimestamp(path.stat().st_mtime, tz=timezone.utc)

    # timedelta.days is floored, so 47 hours counts as 1 day
    return (now - modified).days


def is_cache_valid(path: Path | str, ttl_days: int, now: datetime | None = None) -> bool:
    """
    Check if a cached file is still usable.

    Args:
        path: Path to the cached file
        ttl_days: Maximum age in whole days
        now: Reference time (defaults to the current UTC time)

    Returns:
        True if the file exists and is at most ttl_days days old, False otherwise
    """
    age = cache_age_days(path, now=now)
    if age is None:
        return False

    return age <= ttl_days
