"""Key builder interface."""

from collections.abc import Mapping
from typing import Any, Protocol


class IKeyBuilder(Protocol):
    """Contract for building cache keys from request components.

    Key builders are responsible for creating unique, deterministic
    cache keys: logically identical requests must map to the same key
    regardless of header insertion order.
    """

    def build(
        self,
        url: str,
        method: str | None = None,
        headers: Mapping[str, Any] | None = None,
        body: Any = None,
    ) -> str:
        """Build unique cache key for a request.

        Args:
            url: The effective request URL.
            method: HTTP method (defaults to GET).
            headers: Request headers.
            body: Request body.

        Returns:
            A unique string key for caching the request result.
        """
        ...
