"""In-memory cache store implementation."""

import asyncio
import logging
import math
from collections.abc import Callable
from datetime import datetime, timedelta, timezone
from typing import Any

from cachetools import Cache, LRUCache  # type: ignore[import-untyped]

from cachefetch.core.entities.cache_config import CacheConfig
from cachefetch.core.entities.cache_entry import CacheEntry
from cachefetch.core.interfaces.cache_store import CacheListener
from cachefetch.core.services.subscribers import SubscriberRegistry
from cachefetch.core.services.tag_index import TagIndex

logger = logging.getLogger(__name__)

_MISSING = object()


def _utcnow() -> datetime:
    return datetime.now(timezone.utc)


class _EntryMap(LRUCache):
    """LRUCache that records evicted entries instead of dropping them silently."""

    def __init__(self, maxsize: float) -> None:
        super().__init__(maxsize=maxsize)
        self.evicted: list[tuple[str, CacheEntry]] = []

    def popitem(self) -> tuple[str, CacheEntry]:
        key, entry = super().popitem()
        self.evicted.append((key, entry))
        return key, entry

    def peek(self, key: str) -> CacheEntry | None:
        # Cache.__getitem__ bypasses the LRU reordering
        if key not in self:
            return None
        return Cache.__getitem__(self, key)


class InMemoryCacheStore:
    """In-memory cache store with per-entry TTL, LRU bound and tags.

    Suitable for single-process deployments. Uses cachetools for
    positional LRU ordering: every successful read and every write
    moves the entry to the most-recently-used end, and the entry at
    the other end is evicted once ``max_size`` is exceeded.

    Expired entries are purged lazily on read, or periodically when
    ``cleanup_interval`` is configured and :meth:`start_pruning` runs.
    """

    def __init__(
        self,
        config: CacheConfig | None = None,
        on_evict: Callable[[str, Any], None] | None = None,
        clock: Callable[[], datetime] | None = None,
    ) -> None:
        """Initialize the in-memory cache store.

        Args:
            config: Cache configuration. Uses defaults if not provided.
            on_evict: Called with ``(key, value)`` whenever an entry is
                removed by delete, expiry, invalidation, eviction or clear.
            clock: Returns the current aware datetime. Defaults to UTC now.
        """
        self._config = config or CacheConfig()
        self._on_evict = on_evict
        self._clock = clock or _utcnow
        maxsize = self._config.max_size if self._config.max_size is not None else math.inf
        self._entries = _EntryMap(maxsize)
        self._tags = TagIndex()
        self._subscribers = SubscriberRegistry()
        self._prune_task: asyncio.Task[None] | None = None

        # Statistics
        self._hits = 0
        self._misses = 0

    @property
    def config(self) -> CacheConfig:
        """Get the cache configuration."""
        return self._config

    @property
    def stats(self) -> dict[str, int]:
        """Get cache statistics.

        Returns:
            Dictionary with hits, misses, total reads and current size.
        """
        return {
            "hits": self._hits,
            "misses": self._misses,
            "total": self._hits + self._misses,
            "size": len(self._entries),
        }

    # Reads

    def get(self, key: str, default: Any = None, keep_stale: bool = False) -> Any:
        """Retrieve a live payload and promote it to most recently used.

        An expired entry is counted as a miss and deleted, unless
        ``keep_stale`` asks to leave it for a later stale read.

        Args:
            key: The cache key to retrieve.
            default: Returned when there is no live entry. Pass a sentinel
                to tell a cached ``None`` payload apart from a miss.
            keep_stale: Do not purge an expired entry.

        Returns:
            The cached payload, or ``default`` if not found or expired.
        """
        entry = self._entries.peek(key)
        if entry is None:
            self._misses += 1
            return default

        now = self._clock()
        if entry.is_expired(now):
            if not keep_stale:
                self.delete(key)
            self._misses += 1
            return default

        entry.last_access = now
        if self._config.sliding:
            entry.expires_at = now + entry.ttl

        # Indexing an LRUCache moves the key to the recent end
        entry = self._entries[key]
        self._hits += 1
        return entry.value

    def peek(self, key: str, default: Any = None, allow_stale: bool = False) -> Any:
        """Retrieve a payload without touching recency or statistics.

        Args:
            key: The cache key to retrieve.
            default: Returned when there is no usable entry.
            allow_stale: When True, an expired payload is returned and
                left in place. Otherwise it is purged.

        Returns:
            The cached payload, or ``default``.
        """
        entry = self._entries.peek(key)
        if entry is None:
            return default
        if not allow_stale and entry.is_expired(self._clock()):
            self.delete(key)
            return default
        return entry.value

    def has(self, key: str) -> bool:
        """Check if a live entry exists for ``key``."""
        return self.peek(key, _MISSING) is not _MISSING

    def get_entry(self, key: str) -> CacheEntry | None:
        """Return the raw entry for diagnostics, expired or not."""
        return self._entries.peek(key)

    def keys(self) -> list[str]:
        """Return the stored keys, expired ones included."""
        return list(self._entries)

    # Writes

    def set(
        self,
        key: str,
        value: Any,
        ttl: timedelta | None = None,
        tags: list[str] | tuple[str, ...] | None = None,
    ) -> None:
        """Insert or replace the entry for ``key``.

        Old tag associations are detached before the new ones are added.
        Subscribers of ``key`` receive ``value`` once, after any evictions
        triggered by the insert.

        Args:
            key: The cache key.
            value: The payload to store.
            ttl: Time-to-live. Uses the configured default if None.
            tags: Tags for group invalidation.
        """
        previous = self._entries.peek(key)
        if previous is not None:
            self._tags.remove(key, previous.tags)

        entry = CacheEntry.create(
            key=key,
            value=value,
            now=self._clock(),
            ttl=ttl if ttl is not None else self._config.default_ttl,
            tags=tags,
        )
        self._entries[key] = entry
        self._tags.add(key, entry.tags)
        self._drain_evicted()
        self._subscribers.notify(key, value)

    def delete(self, key: str) -> bool:
        """Delete an entry and notify its subscribers with None.

        Args:
            key: The cache key to delete.

        Returns:
            True if the key existed and was deleted, False otherwise.
        """
        entry = self._entries.peek(key)
        if entry is None:
            return False
        del self._entries[key]
        self._forget(key, entry)
        return True

    def mutate(
        self,
        key: str,
        value: Any,
        ttl: timedelta | None = None,
        tags: list[str] | tuple[str, ...] | None = None,
    ) -> Any:
        """Optimistically replace the payload for ``key``.

        If ``value`` is callable it is treated as an updater and called
        with the current live payload (or None). Existing tags are kept
        unless ``tags`` is given. Subscribers are notified exactly once.

        Args:
            key: The cache key.
            value: The new payload, or an updater ``old -> new``.
            ttl: Time-to-live. Uses the configured default if None.
            tags: Replacement tags.

        Returns:
            The payload that was written.
        """
        entry = self._entries.peek(key)
        current = None
        if entry is not None and not entry.is_expired(self._clock()):
            current = entry.value

        new_value = value(current) if callable(value) else value
        if tags is None and entry is not None:
            tags = entry.tags
        self.set(key, new_value, ttl=ttl, tags=tags)
        return new_value

    def invalidate_tag(self, tag: str) -> int:
        """Delete every entry tagged with ``tag``.

        Args:
            tag: The tag to invalidate.

        Returns:
            Number of entries deleted.
        """
        count = 0
        for key in self._tags.keys_for(tag):
            if self.delete(key):
                count += 1
        self._tags.drop(tag)
        logger.debug("Invalidated tag %r (%d entries)", tag, count)
        return count

    def clear(self) -> None:
        """Remove every entry and notify every subscribed key with None."""
        if self._on_evict is not None:
            for key in list(self._entries):
                entry = self._entries.peek(key)
                if entry is not None:
                    self._call_on_evict(key, entry.value)
        # MutableMapping.clear would route through popitem
        self._entries = _EntryMap(self._entries.maxsize)
        self._tags.clear()
        for key in self._subscribers.keys():
            self._subscribers.notify(key, None)

    def prune_expired(self) -> int:
        """Delete every expired entry.

        Returns:
            Number of entries deleted.
        """
        now = self._clock()
        expired = [
            key
            for key in list(self._entries)
            if (entry := self._entries.peek(key)) is not None and entry.is_expired(now)
        ]
        for key in expired:
            self.delete(key)
        if expired:
            logger.debug("Pruned %d expired entries", len(expired))
        return len(expired)

    # Subscriptions

    def subscribe(self, key: str, listener: CacheListener) -> Callable[[], None]:
        """Watch ``key`` for mutations.

        Args:
            key: The cache key to watch; it need not exist yet.
            listener: Called with the new payload, or None on removal.

        Returns:
            A callable that removes the subscription.
        """
        return self._subscribers.subscribe(key, listener)

    # Background pruning

    def start_pruning(self) -> None:
        """Start periodic pruning if ``cleanup_interval`` is configured.

        Must be called with a running event loop. The task does not keep
        the loop alive and is cancelled by :meth:`close`.
        """
        interval = self._config.cleanup_interval
        if interval is None or self._prune_task is not None:
            return
        self._prune_task = asyncio.get_running_loop().create_task(
            self._prune_periodically(interval)
        )

    async def _prune_periodically(self, interval: float) -> None:
        while True:
            await asyncio.sleep(interval)
            self.prune_expired()

    def close(self) -> None:
        """Stop pruning and drop all entries and subscriptions."""
        if self._prune_task is not None:
            self._prune_task.cancel()
            self._prune_task = None
        self.clear()
        self._subscribers.clear()

    # Internals

    def _drain_evicted(self) -> None:
        while self._entries.evicted:
            key, entry = self._entries.evicted.pop(0)
            logger.debug("Evicted least recently used key %r", key)
            self._forget(key, entry)

    def _forget(self, key: str, entry: CacheEntry) -> None:
        self._tags.remove(key, entry.tags)
        self._call_on_evict(key, entry.value)
        self._subscribers.notify(key, None)

    def _call_on_evict(self, key: str, value: Any) -> None:
        if self._on_evict is None:
            return
        try:
            self._on_evict(key, value)
        except Exception:
            logger.exception("on_evict callback failed for key %r", key)

    def __len__(self) -> int:
        """Return the number of stored entries."""
        return len(self._entries)

    @property
    def maxsize(self) -> int | None:
        """Return the maximum number of entries, or None if unbounded."""
        return self._config.max_size
