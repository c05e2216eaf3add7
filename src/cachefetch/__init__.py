"""cachefetch - In-process request cache and fetch orchestration.

A Python library for issuing repeated, possibly concurrent HTTP
requests through a shared cache: identical in-flight requests are
deduplicated, results are kept in a bounded TTL/LRU store with tag
invalidation and change subscriptions, and each request gets retries,
timeouts, stale-while-revalidate and stale-if-error fallback.

Example:
    from datetime import timedelta

    from cachefetch import Middleware, create_client

    async def log_request(ctx):
        print("->", ctx.options.method, ctx.url)

    async with create_client(base_url="https://api.example.com/v1") as client:
        client.add_middleware(Middleware(on_request=log_request))

        posts = await client.request(
            "/posts",
            ttl=timedelta(seconds=30),
            tags=("posts",),
            retries=2,
            retry_strategy="exponential",
            timeout=5.0,
        )

        # Served from memory, no network call
        posts = await client.request("/posts")

        # Optimistic update and reactive listeners
        key = client.build_key("/posts")
        unsubscribe = client.cache.subscribe(key, print)
        client.cache.mutate(key, lambda old: (old or []) + [{"id": 101}])
        unsubscribe()

        client.invalidate_tag("posts")
"""

from cachefetch.core.entities import (
    CacheConfig,
    CacheEntry,
    CacheKey,
    HookContext,
    HookKind,
    Middleware,
    RequestOptions,
    RetryStrategy,
)
from cachefetch.core.exceptions import (
    FetchError,
    HTTPStatusError,
    NetworkError,
    RequestCancelledError,
    RequestTimeoutError,
)
from cachefetch.core.interfaces import (
    CacheListener,
    ICacheStore,
    IKeyBuilder,
    IResponse,
    ITransport,
    TransportRequest,
)
from cachefetch.core.services import (
    FetchService,
    RetryController,
    compute_backoff,
    default_retry_on,
)
from cachefetch.decorators import cached, configure, invalidates
from cachefetch.factory import create_client
from cachefetch.infrastructure import (
    DefaultKeyBuilder,
    HttpxTransport,
    InMemoryCacheStore,
)

__version__ = "0.1.0"

__all__ = [
    # Version
    "__version__",
    # Core entities
    "CacheConfig",
    "CacheEntry",
    "CacheKey",
    "RequestOptions",
    "RetryStrategy",
    # Hooks
    "HookContext",
    "HookKind",
    "Middleware",
    # Exceptions
    "FetchError",
    "HTTPStatusError",
    "NetworkError",
    "RequestCancelledError",
    "RequestTimeoutError",
    # Core interfaces
    "CacheListener",
    "ICacheStore",
    "IKeyBuilder",
    "IResponse",
    "ITransport",
    "TransportRequest",
    # Core services
    "FetchService",
    "RetryController",
    "compute_backoff",
    "default_retry_on",
    # Infrastructure implementations
    "InMemoryCacheStore",
    "DefaultKeyBuilder",
    "HttpxTransport",
    # Factory
    "create_client",
    # Decorators
    "cached",
    "invalidates",
    "configure",
]
