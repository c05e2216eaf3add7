"""Cache store interface."""

from collections.abc import Callable
from datetime import timedelta
from typing import Any, Protocol

from cachefetch.core.entities.cache_config import CacheConfig
from cachefetch.core.entities.cache_entry import CacheEntry

CacheListener = Callable[[Any], None]


class ICacheStore(Protocol):
    """Contract for the cache store used by FetchService.

    Operations are synchronous: every mutation notifies subscribers
    before returning, and no await happens between a read and the
    decision that depends on it.
    """

    def get(self, key: str, default: Any = None, keep_stale: bool = False) -> Any:
        """Return the live payload for ``key`` and promote it, or ``default``.

        Args:
            key: The cache key.
            default: Returned on a miss.
            keep_stale: Leave an expired entry in place instead of purging it.
        """
        ...

    def peek(self, key: str, default: Any = None, allow_stale: bool = False) -> Any:
        """Return the payload for ``key`` without promoting it, or ``default``.

        Args:
            key: The cache key.
            default: Returned when there is no usable entry.
            allow_stale: Return an expired payload instead of purging it.
        """
        ...

    def has(self, key: str) -> bool:
        """Check whether a live entry exists for ``key``."""
        ...

    def set(
        self,
        key: str,
        value: Any,
        ttl: timedelta | None = None,
        tags: list[str] | tuple[str, ...] | None = None,
    ) -> None:
        """Insert or replace the entry for ``key``."""
        ...

    def delete(self, key: str) -> bool:
        """Remove the entry for ``key``; returns whether it existed."""
        ...

    def mutate(
        self,
        key: str,
        value: Any,
        ttl: timedelta | None = None,
        tags: list[str] | tuple[str, ...] | None = None,
    ) -> Any:
        """Replace the payload with ``value`` or ``value(old)`` if callable."""
        ...

    def invalidate_tag(self, tag: str) -> int:
        """Delete every entry tagged with ``tag``; returns the count."""
        ...

    def clear(self) -> None:
        """Remove every entry."""
        ...

    def prune_expired(self) -> int:
        """Delete every expired entry; returns the count."""
        ...

    def subscribe(self, key: str, listener: CacheListener) -> Callable[[], None]:
        """Register ``listener`` for mutations of ``key``."""
        ...

    def get_entry(self, key: str) -> CacheEntry | None:
        """Return the raw entry for ``key``, expired or not."""
        ...

    def start_pruning(self) -> None:
        """Begin periodic removal of expired entries, if configured."""
        ...

    def close(self) -> None:
        """Stop background work and drop all state."""
        ...

    @property
    def config(self) -> CacheConfig:
        """The store configuration."""
        ...

    @property
    def stats(self) -> dict[str, int]:
        """Hit, miss and size counters."""
        ...
