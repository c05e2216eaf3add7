"""Core interfaces (Protocol classes) for cachefetch."""

from cachefetch.core.interfaces.cache_store import CacheListener, ICacheStore
from cachefetch.core.interfaces.key_builder import IKeyBuilder
from cachefetch.core.interfaces.transport import IResponse, ITransport, TransportRequest

__all__ = [
    "CacheListener",
    "ICacheStore",
    "IKeyBuilder",
    "IResponse",
    "ITransport",
    "TransportRequest",
]
