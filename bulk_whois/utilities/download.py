"""Download utilities for registry dump files."""

import asyncio
import logging
import os
from pathlib import Path

import httpx

from ..config import DEFAULT_USER_AGENT, DOWNLOAD_MAX_ATTEMPTS, DOWNLOAD_TIMEOUT
from ..errors import FetchError
from .retry import ServerError, stream_request_with_retry

logger = logging.getLogger(__name__)


async def download_file(
    url: str,
    directory: Path | str,
    file_name: str,
    max_attempts: int = DOWNLOAD_MAX_ATTEMPTS,
    user_agent: str = DEFAULT_USER_AGENT,
    client: httpx.AsyncClient | None = None,
) -> Path:
    """
    Download a file into directory/file_name.

    The body is streamed into a sibling ".part" file which is renamed onto the
    target only once the transfer completed, so readers of the target never
    observe a truncated download. On failure the ".part" file is removed and
    any previous target is left untouched.

    Args:
        url: URL to download from
        directory: Destination directory (created if missing)
        file_name: Destination file name
        max_attempts: Maximum number of attempts for transient errors
        user_agent: User-Agent header sent with the request
        client: Optional httpx AsyncClient to reuse (a new one is created otherwise)

    Returns:
        Path of the downloaded file

    Raises:
        FetchError: If the download failed after all retries
    """
    directory = Path(directory)
    directory.mkdir(parents=True, exist_ok=True)

    target = directory / file_name
    partial = target.with_name(f"{target.name}.part")
    headers = {"User-Agent": user_agent}

    owns_client = client is None
    if client is None:
        client = httpx.AsyncClient(timeout=DOWNLOAD_TIMEOUT, follow_redirects=True)

    try:
        size = await stream_request_with_retry(
            client, url, partial, headers=headers, max_attempts=max_attempts
        )
        os.replace(partial, target)
    except (httpx.HTTPError, ServerError, OSError) as e:
        partial.unlink(missing_ok=True)
        logger.error("Error downloading %s: %s", url, e)
        raise FetchError(f"Error downloading {url}: {e}", url=url, path=target) from e
    except asyncio.CancelledError:
        partial.unlink(missing_ok=True)
        raise
    finally:
        if owns_client:
            await client.aclose()

    logger.info("Downloaded %s (%d bytes) → %s", url, size, target)
    return target
