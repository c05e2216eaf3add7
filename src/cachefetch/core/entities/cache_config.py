"""Cache configuration entity."""

from dataclasses import dataclass
from datetime import timedelta


@dataclass
class CacheConfig:
    """Cache configuration.

    Provides configuration options for the cache store and the
    fetch orchestrator: TTL defaults, size limits, background
    pruning and retry backoff bounds.

    Durations that are not TTLs (cleanup interval, jitter, retry
    delay cap) are expressed in seconds.
    """

    enabled: bool = True
    default_ttl: timedelta | None = None
    max_size: int | None = None  # None means unbounded
    key_prefix: str = "cachefetch"

    # Extend expiry on every successful read
    sliding: bool = False

    # Background pruning of expired entries, in seconds
    cleanup_interval: float | None = None

    # Exponential backoff bounds, in seconds
    retry_jitter: float = 0.1
    max_retry_delay: float = 30.0

    def __post_init__(self) -> None:
        """Set default TTL if not provided and validate bounds."""
        if self.default_ttl is None:
            self.default_ttl = timedelta(seconds=5)
        if self.default_ttl < timedelta(0):
            raise ValueError("default_ttl must not be negative")
        if self.max_size is not None and self.max_size < 1:
            raise ValueError("max_size must be at least 1 or None")
        if self.cleanup_interval is not None and self.cleanup_interval <= 0:
            raise ValueError("cleanup_interval must be positive")
        if self.retry_jitter < 0 or self.max_retry_delay < 0:
            raise ValueError("retry bounds must not be negative")
