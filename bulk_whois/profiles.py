"""Registry profiles: the data that distinguishes one dump source from another."""

import dataclasses
from dataclasses import dataclass
from pathlib import Path

from .config import (
    DEFAULT_CACHE_DAYS,
    DEFAULT_CACHE_DIR,
    DEFAULT_USER_AGENT,
    REGISTRY_CACHE_DAYS,
    REGISTRY_DUMP_URLS,
)
from .errors import ConfigurationError
from .utilities.paths import content_hash, get_cache_file_name


@dataclass(frozen=True)
class RegistryProfile:
    """Immutable configuration of a single registry dump source."""

    connector_name: str
    dump_url: str
    cache_directory: str
    ttl_days: int = DEFAULT_CACHE_DAYS
    user_agent: str = DEFAULT_USER_AGENT
    delete_corrupted_cache_file: bool = False

    def __post_init__(self) -> None:
        if isinstance(self.ttl_days, bool) or not isinstance(self.ttl_days, int):
            raise ConfigurationError(f"ttl_days must be an integer, got {self.ttl_days!r}")
        if self.ttl_days < 0:
            raise ConfigurationError(f"ttl_days must not be negative, got {self.ttl_days}")
        if not self.dump_url:
            raise ConfigurationError(f"No dump URL configured for {self.connector_name}")

    @property
    def cache_file_name(self) -> str:
        return content_hash(self.dump_url)

    @property
    def cache_file(self) -> Path:
        return get_cache_file_name(self.cache_directory, self.dump_url)


def list_profiles() -> list[str]:
    """Return the names of the built-in registry profiles."""
    return sorted(REGISTRY_DUMP_URLS)


def get_profile(
    name: str,
    cache_dir: str | None = None,
    **overrides,
) -> RegistryProfile:
    """
    Build the profile of a built-in registry.

    Args:
        name: Registry name (see list_profiles())
        cache_dir: Base cache directory; the profile caches under cache_dir/name/
        **overrides: Any other RegistryProfile field (dump_url, ttl_days, ...)

    Returns:
        RegistryProfile for the registry

    Raises:
        ConfigurationError: If the registry is unknown or an override is invalid
    """
    if name not in REGISTRY_DUMP_URLS:
        raise ConfigurationError(
            f"Unknown registry {name!r} (known: {', '.join(list_profiles())})"
        )

    base_dir = cache_dir or DEFAULT_CACHE_DIR
    if not base_dir.endswith("/"):
        base_dir += "/"

    profile = RegistryProfile(
        connector_name=name,
        dump_url=REGISTRY_DUMP_URLS[name],
        cache_directory=f"{base_dir}{name}/",
        ttl_days=REGISTRY_CACHE_DAYS.get(name, DEFAULT_CACHE_DAYS),
    )

    if not overrides:
        return profile

    known_fields = {f.name for f in dataclasses.fields(RegistryProfile)}
    unknown = sorted(set(overrides) - known_fields)
    if unknown:
        raise ConfigurationError(f"Unknown profile field(s): {', '.join(unknown)}")

    return dataclasses.replace(profile, **overrides)
