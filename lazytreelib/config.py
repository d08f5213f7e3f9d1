"""Configuration system for lazytreelib.

This module defines how users tune the lazy loading controller: how long
loaded children stay fresh, how long cache entries live, and how large
the default cache may grow.
"""

from dataclasses import dataclass, replace
from enum import Enum
from typing import Any

from .errors import ConfigurationError

DEFAULT_CACHE_TTL = 300.0   # 5 minutes
DEFAULT_STALE_TIME = 30.0
DEFAULT_MAX_CACHE_ENTRIES = 10000


class PlaceholderKind(Enum):
    """Kind of synthetic child injected by the enhancement pass.

    The value is the suffix appended to the parent id to form the
    placeholder's id.
    """
    LOADING = "-loading"          # Fetch in flight
    ERROR = "-error"              # Last fetch failed
    PLACEHOLDER = "-placeholder"  # Has children, none loaded yet


@dataclass
class ControllerConfig:
    """Configuration for LazyTreeController.

    Attributes:
        stale_time: Seconds after a successful fetch before an expanded
            node is refetched
        cache_ttl: Default TTL in seconds for the privately built cache
        max_cache_entries: Capacity of the privately built cache (0 = unbounded)
        clear_resets_freshness: If True, clear_cache() also forgets fetch
            timestamps so every loaded node is stale immediately
    """

    stale_time: float = DEFAULT_STALE_TIME
    cache_ttl: float = DEFAULT_CACHE_TTL
    max_cache_entries: int = DEFAULT_MAX_CACHE_ENTRIES
    clear_resets_freshness: bool = False

    def validate(self) -> None:
        """Validate configuration consistency.

        Raises:
            ConfigurationError: If configuration is invalid
        """
        if self.stale_time < 0:
            raise ConfigurationError(f"stale_time must be >= 0, got {self.stale_time}")
        if self.cache_ttl < 0:
            raise ConfigurationError(f"cache_ttl must be >= 0, got {self.cache_ttl}")
        if self.max_cache_entries < 0:
            raise ConfigurationError(
                f"max_cache_entries must be >= 0, got {self.max_cache_entries}"
            )

    def with_overrides(self, **overrides: Any) -> "ControllerConfig":
        """Return a copy with the non-None overrides applied."""
        changes = {key: value for key, value in overrides.items() if value is not None}
        if not changes:
            return self
        return replace(self, **changes)

    @classmethod
    def for_testing(cls, stale_time: float = 0.5) -> "ControllerConfig":
        """Short stale window suited to tests driven by a fake clock."""
        return cls(stale_time=stale_time, cache_ttl=60.0, max_cache_entries=100)
