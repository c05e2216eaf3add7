"""Infrastructure layer implementations for cachefetch."""

from cachefetch.infrastructure.backends import InMemoryCacheStore
from cachefetch.infrastructure.key_builders import DefaultKeyBuilder
from cachefetch.infrastructure.transports import HttpxTransport

__all__ = [
    "InMemoryCacheStore",
    "DefaultKeyBuilder",
    "HttpxTransport",
]
