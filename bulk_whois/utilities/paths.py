"""Path utilities for cached registry dumps."""

import hashlib
from pathlib import Path


def content_hash(identifier: str) -> str:
    """
    Hash a source identifier (usually the dump URL) into a cache file name.

    Args:
        identifier: Stable identifier of the cached content

    Returns:
        Hex MD5 digest of the identifier
    """
    return hashlib.md5(identifier.encode("utf-8")).hexdigest()


def get_cache_file_name(cache_dir: Path | str, identifier: str) -> Path:
    """
    Determine the cache file path for a source identifier.

    Args:
        cache_dir: Directory holding cached dumps (e.g. ".cache/ripe/")
        identifier: Stable identifier of the cached content

    Returns:
        Path of the form cache_dir/md5(identifier)
    """
    joined = "/".join([str(cache_dir), content_hash(identifier)])
    while "//" in joined:
        joined = joined.replace("//", "/")
    return Path(joined)


def split_cache_path(path: Path | str) -> tuple[Path, str]:
    """Split a cache file path into (directory, file name)."""
    path = Path(path)
    return path.parent, path.name
