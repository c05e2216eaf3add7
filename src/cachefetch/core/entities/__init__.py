"""Domain entities for cachefetch."""

from cachefetch.core.entities.cache_config import CacheConfig
from cachefetch.core.entities.cache_entry import CacheEntry
from cachefetch.core.entities.cache_key import CacheKey
from cachefetch.core.entities.hooks import HookContext, HookKind, Middleware
from cachefetch.core.entities.request_options import (
    RequestOptions,
    RetryStrategy,
    default_validate_status,
)

__all__ = [
    "CacheEntry",
    "CacheKey",
    "CacheConfig",
    "HookContext",
    "HookKind",
    "Middleware",
    "RequestOptions",
    "RetryStrategy",
    "default_validate_status",
]
