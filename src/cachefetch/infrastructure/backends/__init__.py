"""Cache store backends."""

from cachefetch.infrastructure.backends.memory import InMemoryCacheStore

__all__ = ["InMemoryCacheStore"]
