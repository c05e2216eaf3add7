"""Cache entry entity."""

from dataclasses import dataclass
from datetime import datetime, timedelta
from typing import Any


@dataclass
class CacheEntry:
    """A cached payload with its expiry and tag metadata.

    Entries are owned by the cache store. ``last_access`` is kept for
    diagnostics only; eviction order is positional.
    """

    key: str
    value: Any
    created_at: datetime
    expires_at: datetime
    last_access: datetime
    ttl: timedelta
    tags: tuple[str, ...] = ()

    def is_expired(self, now: datetime) -> bool:
        """Check whether the entry is past its expiry at ``now``."""
        return now > self.expires_at

    @classmethod
    def create(
        cls,
        key: str,
        value: Any,
        now: datetime,
        ttl: timedelta,
        tags: list[str] | tuple[str, ...] | None = None,
    ) -> "CacheEntry":
        """Factory method to create a new cache entry.

        Args:
            key: The cache key.
            value: The value to cache.
            now: Current time, used as creation and access time.
            ttl: Time-to-live from ``now``.
            tags: Optional tags for group invalidation.

        Returns:
            A new CacheEntry instance.
        """
        return cls(
            key=key,
            value=value,
            created_at=now,
            expires_at=now + ttl,
            last_access=now,
            ttl=ttl,
            tags=tuple(dict.fromkeys(tags)) if tags else (),
        )
