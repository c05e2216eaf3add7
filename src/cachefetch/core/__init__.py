"""Core domain layer for cachefetch."""

from cachefetch.core.entities import (
    CacheConfig,
    CacheEntry,
    CacheKey,
    HookContext,
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
    ICacheStore,
    IKeyBuilder,
    IResponse,
    ITransport,
    TransportRequest,
)
from cachefetch.core.services import FetchService

__all__ = [
    # Entities
    "CacheConfig",
    "CacheEntry",
    "CacheKey",
    "HookContext",
    "Middleware",
    "RequestOptions",
    "RetryStrategy",
    # Exceptions
    "FetchError",
    "HTTPStatusError",
    "NetworkError",
    "RequestCancelledError",
    "RequestTimeoutError",
    # Interfaces
    "ICacheStore",
    "IKeyBuilder",
    "IResponse",
    "ITransport",
    "TransportRequest",
    # Services
    "FetchService",
]
