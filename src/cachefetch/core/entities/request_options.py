"""Per-request options entity."""

import asyncio
from collections.abc import Callable
from dataclasses import dataclass, field
from datetime import timedelta
from enum import Enum
from typing import TYPE_CHECKING, Any

from cachefetch.core.entities.hooks import Middleware

if TYPE_CHECKING:
    from cachefetch.core.interfaces.transport import IResponse


class RetryStrategy(str, Enum):
    """Backoff strategy between retry attempts."""

    FIXED = "fixed"
    EXPONENTIAL = "exponential"


def default_validate_status(status: int) -> bool:
    """Accept 2xx statuses."""
    return 200 <= status <= 299


@dataclass
class RequestOptions:
    """Every option recognized by ``FetchService.request``.

    Defaults are applied here, once, at the orchestrator boundary.
    Durations other than ``ttl`` are in seconds.
    """

    # Transport request description
    method: str = "GET"
    headers: dict[str, str] = field(default_factory=dict)
    body: Any = None
    cancel_event: asyncio.Event | None = None

    # Caching
    cache: bool = True
    ttl: timedelta | None = None  # None means the service default
    force: bool = False
    revalidate: bool = False
    cache_key: str | None = None
    tags: tuple[str, ...] = ()

    # Resilience
    timeout: float | None = None
    retries: int = 0
    retry_delay: float = 0.5
    retry_strategy: RetryStrategy = RetryStrategy.FIXED
    retry_on: Callable[["IResponse | None", BaseException], bool] | None = None
    validate_status: Callable[[int], bool] = default_validate_status

    # Response handling
    parse_json: bool = True
    parser: Callable[["IResponse"], Any] | None = None
    transform: Callable[[Any], Any] | None = None
    on_success: Callable[[Any], Any] | None = None
    on_error: Callable[[BaseException], Any] | None = None
    middleware: tuple[Middleware, ...] = ()

    def __post_init__(self) -> None:
        """Normalize collection fields and validate numeric bounds."""
        self.method = self.method.upper()
        self.headers = dict(self.headers or {})
        self.tags = tuple(self.tags)
        self.middleware = tuple(self.middleware)
        self.retry_strategy = RetryStrategy(self.retry_strategy)

        if self.retries < 0:
            raise ValueError("retries must not be negative")
        if self.retry_delay < 0:
            raise ValueError("retry_delay must not be negative")
        if self.timeout is not None and self.timeout <= 0:
            raise ValueError("timeout must be positive")
        if self.ttl is not None and self.ttl < timedelta(0):
            raise ValueError("ttl must not be negative")
