"""Retry utilities for handling transient download errors."""

import logging
from pathlib import Path

import httpx
from tenacity import (
    before_sleep_log,
    retry,
    retry_if_exception_type,
    stop_after_attempt,
    wait_exponential,
    wait_none,
)

from ..config import DOWNLOAD_CHUNK_SIZE

logger = logging.getLogger(__name__)


class ServerError(Exception):
    """Raised when server returns 5xx error, triggering retry."""

    pass


async def stream_request_with_retry(
    client: httpx.AsyncClient,
    url: str,
    destination: Path,
    headers: dict[str, str] | None = None,
    max_attempts: int = 3,
    min_wait: int = 1,
    max_wait: int = 10,
    chunk_size: int = DOWNLOAD_CHUNK_SIZE,
) -> int:
    """
    Stream an HTTP GET response body into a file, retrying transient errors.

    Every attempt rewrites destination from the start, so a transfer that
    broke halfway never leaves mixed content behind.

    Retries on:
    - All network/transport errors (ConnectError, RemoteProtocolError, ReadError, etc.)
    - Server errors (5xx status codes)

    Does not retry on:
    - Client errors (4xx status codes), raised as httpx.HTTPStatusError

    Args:
        client: httpx AsyncClient instance
        url: URL to request
        destination: File the response body is written to
        headers: Optional request headers
        max_attempts: Maximum number of attempts (default: 3)
        min_wait: Minimum wait between retries in seconds (default: 1)
        max_wait: Maximum wait between retries in seconds (default: 10)
        chunk_size: Size of the chunks read from the response body

    Returns:
        Number of bytes written

    Raises:
        httpx.TransportError: After retries exhausted for network errors
        ServerError: After retries exhausted for 5xx errors
        httpx.HTTPStatusError: On 4xx responses
    """

    # Use no wait in tests (when min_wait=0) for speed
    if min_wait == 0:
        wait_strategy = wait_none()
        # Don't log retries in tests
        before_sleep_callback = None
    else:
        wait_strategy = wait_exponential(multiplier=1, min=min_wait, max=max_wait)
        # Log retry attempts at WARNING level
        before_sleep_callback = before_sleep_log(logger, logging.WARNING)

    @retry(
        stop=stop_after_attempt(max_attempts),
        wait=wait_strategy,
        retry=retry_if_exception_type((httpx.TransportError, ServerError)),
        before_sleep=before_sleep_callback,
        reraise=True,
    )
    async def _request() -> int:
        async with client.stream("GET", url, headers=headers) as response:
            # Raise ServerError for 5xx to trigger retry
            if 500 <= response.status_code < 600:
                raise ServerError(
                    f"Server returned {response.status_code} for {url}"
                )
            response.raise_for_status()

            written = 0
            with open(destination, "wb") as f:
                async for chunk in response.aiter_bytes(chunk_size):
                    f.write(chunk)
                    written += len(chunk)
            return written

    return await _request()
