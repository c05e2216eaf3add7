"""Fetch service - main orchestrator for cached requests."""

import asyncio
import logging
from collections.abc import Awaitable, Callable
from dataclasses import replace
from datetime import timedelta
from functools import partial
from types import TracebackType
from typing import Any
from urllib.parse import urlsplit

from cachefetch.core.entities.cache_config import CacheConfig
from cachefetch.core.entities.hooks import Middleware
from cachefetch.core.entities.request_options import RequestOptions
from cachefetch.core.interfaces.cache_store import ICacheStore
from cachefetch.core.interfaces.key_builder import IKeyBuilder
from cachefetch.core.interfaces.transport import ITransport
from cachefetch.core.services.in_flight import InFlightTable
from cachefetch.core.services.request_executor import RequestExecutor
from cachefetch.core.services.retry import RetryController

logger = logging.getLogger(__name__)

# Distinguishes a miss from a cached None payload
_MISSING = object()


class FetchService:
    """Domain service that orchestrates cached, deduplicated requests.

    This is the main entry point for fetching, composing the cache
    store, key builder, transport and retry policy. A request flows
    through cache lookup, in-flight dedup, execution with retries,
    cache write, and stale fallback on failure.

    Stale fallback is observable behavior: when a fetch fails and an
    earlier payload for the same key is still held (even expired), the
    caller receives that payload and the error is only logged.

    Every instance owns its own store, in-flight table and middleware,
    so several services can coexist without sharing state.
    """

    def __init__(
        self,
        store: ICacheStore,
        key_builder: IKeyBuilder,
        transport: ITransport,
        config: CacheConfig | None = None,
        base_url: str | None = None,
        retry: RetryController | None = None,
        middleware: list[Middleware] | None = None,
    ) -> None:
        """Initialize the fetch service.

        Args:
            store: The cache store holding fetched payloads.
            key_builder: Builds cache keys from request components.
            transport: Performs the network calls.
            config: Cache configuration. Defaults to the store's.
            base_url: Prefix joined onto relative request URLs.
            retry: Retry controller. Built from ``config`` if not provided.
            middleware: Initial global middleware.
        """
        self._store = store
        self._key_builder = key_builder
        self._transport = transport
        self._config = config or store.config
        self._base_url = base_url
        self._middleware: list[Middleware] = list(middleware or [])
        self._executor = RequestExecutor(transport, self._middleware)
        self._retry = retry or RetryController(
            jitter=self._config.retry_jitter,
            max_delay=self._config.max_retry_delay,
        )
        self._in_flight = InFlightTable()
        self._revalidating: set[str] = set()
        self._background: set[asyncio.Task[Any]] = set()

    @property
    def config(self) -> CacheConfig:
        """Get the cache configuration."""
        return self._config

    @property
    def cache(self) -> ICacheStore:
        """The cache store, for manual get/set/mutate/subscribe."""
        return self._store

    @property
    def stats(self) -> dict[str, int]:
        """Get cache statistics.

        Returns:
            Dictionary with hits, misses, total reads and size.
        """
        return self._store.stats

    def add_middleware(self, middleware: Middleware) -> None:
        """Append ``middleware`` to the global list used by later calls."""
        self._middleware.append(middleware)

    def invalidate_tag(self, tag: str) -> int:
        """Invalidate cached entries by tag.

        Args:
            tag: The tag to invalidate.

        Returns:
            Number of entries invalidated.
        """
        return self._store.invalidate_tag(tag)

    def build_key(self, url: str, options: RequestOptions | None = None) -> str:
        """Return the cache key ``request`` would use for these arguments."""
        return self._key_for(self._resolve_url(url), options or RequestOptions())

    def _key_for(self, url: str, options: RequestOptions) -> str:
        if options.cache_key:
            return options.cache_key
        return self._key_builder.build(
            url=url,
            method=options.method,
            headers=options.headers,
            body=options.body,
        )

    async def request(
        self,
        url: str,
        options: RequestOptions | None = None,
        **overrides: Any,
    ) -> Any:
        """Fetch ``url``, going through cache, dedup and retries.

        Args:
            url: Absolute URL, or a path joined onto the base URL.
            options: Request options. Keyword overrides are applied on a copy.
            **overrides: Any ``RequestOptions`` field.

        Returns:
            The (transformed) payload, possibly from cache or a stale fallback.

        Raises:
            FetchError: The final failure when no stale payload is held.
        """
        options = replace(options or RequestOptions(), **overrides)
        return await self._request(self._resolve_url(url), options)

    async def _request(self, url: str, options: RequestOptions) -> Any:
        key = self._key_for(url, options)
        use_cache = options.cache and self._config.enabled

        if use_cache and not options.force:
            cached = self._store.get(key, _MISSING, keep_stale=True)
            if cached is not _MISSING:
                logger.debug("Cache hit: %s", key)
                if options.revalidate:
                    self._revalidate(url, key, options)
                return cached

        pending = self._in_flight.get(key)
        if pending is not None:
            logger.debug("Joining in-flight request: %s", key)
            # shield: one caller cancelling must not cancel the shared call
            return await asyncio.shield(pending)

        logger.debug("Fetching: %s", url)
        task = asyncio.ensure_future(self._fetch(url, key, options, use_cache))
        task.add_done_callback(_retrieve_exception)
        self._in_flight.set(key, task)
        return await asyncio.shield(task)

    async def get(self, url: str, **options: Any) -> Any:
        return await self.request(url, method="GET", **options)

    async def post(self, url: str, data: Any = None, **options: Any) -> Any:
        return await self.request(url, method="POST", body=data, **options)

    async def put(self, url: str, data: Any = None, **options: Any) -> Any:
        return await self.request(url, method="PUT", body=data, **options)

    async def patch(self, url: str, data: Any = None, **options: Any) -> Any:
        return await self.request(url, method="PATCH", body=data, **options)

    async def delete(self, url: str, **options: Any) -> Any:
        return await self.request(url, method="DELETE", **options)

    async def get_or_set(
        self,
        key: str,
        fetcher: Callable[[], Awaitable[Any]],
        ttl: timedelta | None = None,
        tags: list[str] | None = None,
    ) -> Any:
        """Return the cached value for ``key`` or load it once.

        Concurrent callers for the same key share one ``fetcher`` call.
        Failures propagate and are never cached.

        Args:
            key: The cache key.
            fetcher: Coroutine function producing the value.
            ttl: Time-to-live. Uses the configured default if None.
            tags: Tags for group invalidation.

        Returns:
            The cached or freshly loaded value.
        """
        cached = self._store.get(key, _MISSING)
        if cached is not _MISSING:
            return cached

        pending = self._in_flight.get(key)
        if pending is not None:
            return await asyncio.shield(pending)

        task = asyncio.ensure_future(self._load(key, fetcher, ttl, tags))
        task.add_done_callback(_retrieve_exception)
        self._in_flight.set(key, task)
        return await asyncio.shield(task)

    async def get_or_set_swr(
        self,
        key: str,
        fetcher: Callable[[], Awaitable[Any]],
        ttl: timedelta | None = None,
        tags: list[str] | None = None,
    ) -> Any:
        """Like :meth:`get_or_set`, but serve expired values while refreshing.

        An expired entry is returned immediately and reloaded in the
        background; background failures are logged.
        """
        entry = self._store.get_entry(key)
        if entry is None:
            return await self.get_or_set(key, fetcher, ttl, tags)

        value = self._store.get(key, _MISSING, keep_stale=True)
        if value is not _MISSING:
            return value

        if not self._in_flight.has(key):
            task = asyncio.ensure_future(self._load(key, fetcher, ttl, tags))
            self._in_flight.set(key, task)
            self._track_background(task, key)
        return entry.value

    async def aclose(self) -> None:
        """Cancel background work, close the store and the owned transport."""
        for task in list(self._background):
            task.cancel()
        self._in_flight.cancel_all()
        self._store.close()
        close = getattr(self._transport, "aclose", None)
        if close is not None:
            await close()

    async def __aenter__(self) -> "FetchService":
        self._store.start_pruning()
        return self

    async def __aexit__(
        self,
        exc_type: type[BaseException] | None,
        exc: BaseException | None,
        tb: TracebackType | None,
    ) -> None:
        await self.aclose()

    async def _fetch(
        self,
        url: str,
        key: str,
        options: RequestOptions,
        use_cache: bool,
    ) -> Any:
        task = asyncio.current_task()
        try:
            try:
                data = await self._retry.run(
                    partial(self._executor.execute, url, options), options
                )
                if options.transform is not None:
                    data = options.transform(data)
            finally:
                # Settled: later callers start a fresh request
                self._in_flight.delete(key, task)
        except Exception as exc:
            self._invoke_callback(options.on_error, exc, "on_error")
            stale = self._store.peek(key, _MISSING, allow_stale=True)
            if stale is not _MISSING:
                logger.warning("Serving stale data for %s after error: %s", key, exc)
                return stale
            raise

        if use_cache:
            self._store.set(key, data, ttl=options.ttl, tags=options.tags)
        self._invoke_callback(options.on_success, data, "on_success")
        return data

    async def _load(
        self,
        key: str,
        fetcher: Callable[[], Awaitable[Any]],
        ttl: timedelta | None,
        tags: list[str] | None,
    ) -> Any:
        task = asyncio.current_task()
        try:
            value = await fetcher()
        finally:
            self._in_flight.delete(key, task)
        self._store.set(key, value, ttl=ttl, tags=tags)
        return value

    def _revalidate(self, url: str, key: str, options: RequestOptions) -> None:
        if key in self._revalidating:
            return
        self._revalidating.add(key)
        logger.debug("Revalidating in background: %s", key)
        task = asyncio.ensure_future(
            self._request(url, replace(options, revalidate=False, force=True))
        )
        self._track_background(task, key)
        task.add_done_callback(lambda _: self._revalidating.discard(key))

    def _track_background(self, task: asyncio.Task[Any], key: str) -> None:
        self._background.add(task)
        task.add_done_callback(partial(self._background_done, key))

    def _background_done(self, key: str, task: asyncio.Task[Any]) -> None:
        self._background.discard(task)
        if task.cancelled():
            return
        exc = task.exception()
        if exc is not None:
            logger.warning("Background refresh failed for %s: %s", key, exc)

    def _invoke_callback(
        self, callback: Callable[[Any], Any] | None, value: Any, name: str
    ) -> None:
        if callback is None:
            return
        try:
            callback(value)
        except Exception:
            logger.exception("%s callback failed", name)

    def _resolve_url(self, url: str) -> str:
        if self._base_url is None or urlsplit(url).scheme:
            return url
        return f"{self._base_url.rstrip('/')}/{url.lstrip('/')}"


def _retrieve_exception(task: asyncio.Task[Any]) -> None:
    # Every awaiting caller may have been cancelled; mark the error as seen
    if not task.cancelled() and task.exception() is not None:
        logger.debug("Shared fetch failed: %s", task.exception())
