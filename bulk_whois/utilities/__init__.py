"""Utilities for fetching and caching registry dumps."""

from .cache import cache_age_days, is_cache_valid
from .download import download_file
from .file_io import download_and_read_file, read_cached_content
from .paths import content_hash, get_cache_file_name, split_cache_path

__all__ = [
    "download_file",
    "download_and_read_file",
    "read_cached_content",
    "is_cache_valid",
    "cache_age_days",
    "content_hash",
    "get_cache_file_name",
    "split_cache_path",
]
