"""Convenience constructor wiring the default implementations."""

from collections.abc import Callable
from typing import Any

import httpx

from cachefetch.core.entities.cache_config import CacheConfig
from cachefetch.core.entities.hooks import Middleware
from cachefetch.core.interfaces.transport import ITransport
from cachefetch.core.services.fetch_service import FetchService
from cachefetch.infrastructure.backends.memory import InMemoryCacheStore
from cachefetch.infrastructure.key_builders.default import DefaultKeyBuilder
from cachefetch.infrastructure.transports.httpx_transport import HttpxTransport


def create_client(
    base_url: str | None = None,
    config: CacheConfig | None = None,
    transport: ITransport | None = None,
    http_client: httpx.AsyncClient | None = None,
    middleware: list[Middleware] | None = None,
    on_evict: Callable[[str, Any], None] | None = None,
) -> FetchService:
    """Create a FetchService with an in-memory store and an httpx transport.

    Args:
        base_url: Prefix joined onto relative request URLs.
        config: Cache configuration. Uses defaults if not provided.
        transport: Custom transport. Defaults to :class:`HttpxTransport`.
        http_client: httpx client for the default transport.
        middleware: Initial global middleware.
        on_evict: Called with ``(key, value)`` when an entry is removed.

    Returns:
        A ready-to-use FetchService.

    Example:
        async with create_client(base_url="https://api.example.com/v1") as client:
            users = await client.request("/users", ttl=timedelta(seconds=30))
    """
    config = config or CacheConfig()
    return FetchService(
        store=InMemoryCacheStore(config, on_evict=on_evict),
        key_builder=DefaultKeyBuilder(prefix=config.key_prefix),
        transport=transport or HttpxTransport(http_client),
        config=config,
        base_url=base_url,
        middleware=middleware,
    )
