"""Fetch, cache and parse the bulk WHOIS dump of one registry."""

import asyncio
import logging
import weakref
from collections.abc import Sequence
from pathlib import Path

from .config import DOWNLOAD_MAX_ATTEMPTS
from .errors import ConfigurationError
from .parse.dump import parse_type
from .parse.rpsl import Predicate, Record, Sink, require_predicate
from .profiles import RegistryProfile
from .utilities.cache import cache_age_days, is_cache_valid
from .utilities.download import download_file

logger = logging.getLogger(__name__)

# Download locks per event loop, then per resolved cache path. A lock is bound
# to the loop it was first contended on, so locks are never shared across loops.
_download_locks: weakref.WeakKeyDictionary = weakref.WeakKeyDictionary()


def _download_lock(path: Path) -> asyncio.Lock:
    loop_locks: dict[Path, asyncio.Lock] = _download_locks.setdefault(
        asyncio.get_running_loop(), {}
    )
    key = path.resolve()
    lock = loop_locks.get(key)
    if lock is None:
        lock = loop_locks[key] = asyncio.Lock()
    return lock


class Connector:
    """
    Access to the records of a single registry dump.

    All registry differences live in the RegistryProfile; the connector
    itself is the same for every registry.
    """

    def __init__(self, profile: RegistryProfile, max_attempts: int = DOWNLOAD_MAX_ATTEMPTS):
        self.profile = profile
        self.max_attempts = max_attempts
        Path(profile.cache_directory).mkdir(parents=True, exist_ok=True)

    @property
    def name(self) -> str:
        return self.profile.connector_name

    @property
    def cache_file(self) -> Path:
        return self.profile.cache_file

    def is_cache_valid(self) -> bool:
        return is_cache_valid(self.cache_file, self.profile.ttl_days)

    async def obtain_source(self, force: bool = False) -> Path:
        """
        Return the path of a fresh dump, downloading it if the cache is stale.

        Concurrent calls for the same cache file download it only once.

        Args:
            force: Download even if the cache is still valid

        Returns:
            Path of the cached dump

        Raises:
            FetchError: If the download failed
        """
        if not force and self.is_cache_valid():
            logger.info("[%s] Using cached whois data", self.name)
            return self.cache_file

        async with _download_lock(self.cache_file):
            # Another task may have refreshed the file while we waited
            if not force and self.is_cache_valid():
                logger.info("[%s] Using cached whois data", self.name)
                return self.cache_file

            age = cache_age_days(self.cache_file)
            if age is None:
                logger.info("[%s] Downloading whois data", self.name)
            else:
                logger.info(
                    "[%s] Downloading whois data (cache is %d days old)", self.name, age
                )

            try:
                return await download_file(
                    self.profile.dump_url,
                    self.cache_file.parent,
                    self.cache_file.name,
                    max_attempts=self.max_attempts,
                    user_agent=self.profile.user_agent,
                )
            except Exception:
                logger.error("[%s] Download of %s failed", self.name, self.profile.dump_url)
                raise

    async def get_objects(
        self,
        types: Sequence[str],
        predicate: Predicate | None,
        fields: Sequence[str] | None = None,
        sink: Sink | None = None,
    ) -> list[Record]:
        """
        Parse the records of the requested types from the registry dump.

        Each type is parsed by its own pass over the dump; the passes run
        concurrently and their results are concatenated in the order of types.

        Args:
            types: Record types to extract (e.g. ["inetnum", "route"])
            predicate: Filter; only records for which it returns True are kept
            fields: Optional allow-list of attribute keys
            sink: Optional callback receiving each kept record instead of buffering it

        Returns:
            Kept records, grouped by type in the requested order (empty when
            a sink is supplied)

        Raises:
            ConfigurationError: If no predicate is supplied or types is a string
            FetchError: If the dump could not be downloaded
            DecodeError: If the dump could not be decoded
        """
        predicate = require_predicate(predicate)
        if isinstance(types, str):
            raise ConfigurationError(f"types must be a sequence of record types, got {types!r}")

        dump = await self.obtain_source()

        logger.info("[%s] Parsing whois data: %s", self.name, ", ".join(types))
        tasks = [
            asyncio.ensure_future(
                parse_type(
                    dump,
                    record_type,
                    predicate,
                    fields=fields,
                    sink=sink,
                    delete_corrupted=self.profile.delete_corrupted_cache_file,
                )
            )
            for record_type in types
        ]
        try:
            results = await asyncio.gather(*tasks)
        except BaseException:
            # A failed pass fails the whole call: stop the others before raising
            for task in tasks:
                task.cancel()
            await asyncio.gather(*tasks, return_exceptions=True)
            raise

        return [record for records in results for record in records]
