"""File I/O utilities for cached registry data."""

import asyncio
import json
import logging
from pathlib import Path
from typing import Any

from .cache import is_cache_valid
from .download import download_file
from .paths import split_cache_path

logger = logging.getLogger(__name__)


async def read_cached_content(filepath: Path | str, as_json: bool = False) -> Any:
    """Read the full text of a cached file, optionally parsed as JSON.

    Freshness is not checked; use this when the caller already knows the
    file is valid.

    Args:
        filepath: Path to the cached file
        as_json: Parse the content as JSON

    Returns:
        File contents as string, or the parsed JSON value

    Raises:
        OSError: If the file cannot be read
        json.JSONDecodeError: If as_json is set and the content is not JSON
    """
    content = await asyncio.to_thread(Path(filepath).read_text, encoding="utf-8")
    if as_json:
        return json.loads(content)
    return content


async def download_and_read_file(
    url: str,
    filepath: Path | str,
    ttl_days: int = 1,
    as_json: bool = True,
    **download_options,
) -> Any:
    """Return the content of url, downloading it only if the cached copy is stale.

    Args:
        url: URL to download from
        filepath: Cache file holding the downloaded content
        ttl_days: Maximum age of the cache file in whole days
        as_json: Parse the content as JSON
        **download_options: Passed to download_file (user_agent, client, ...)

    Returns:
        File contents as string, or the parsed JSON value

    Raises:
        FetchError: If the download failed
    """
    if not is_cache_valid(filepath, ttl_days):
        directory, file_name = split_cache_path(filepath)
        await download_file(url, directory, file_name, **download_options)
    else:
        logger.info("Using cached copy of %s", url)

    return await read_cached_content(filepath, as_json=as_json)
