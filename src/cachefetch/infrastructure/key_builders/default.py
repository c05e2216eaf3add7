"""Default key builder implementation."""

from collections.abc import Mapping
from typing import Any

from cachefetch.core.entities.cache_key import CacheKey


class DefaultKeyBuilder:
    """Default key builder using hashes of headers and body.

    Keeps the method and URL readable in the key and hashes the
    canonicalized headers and body with SHA-256, so header insertion
    order, header name case and dict key order never change the key.
    """

    def __init__(self, prefix: str = "cachefetch") -> None:
        """Initialize the key builder.

        Args:
            prefix: Prefix for all cache keys.
        """
        self._prefix = prefix

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
            body: Request body. Streams and other non-serializable bodies
                all map to the same sentinel.

        Returns:
            A unique string key for caching the request result.
        """
        return str(
            CacheKey.from_components(
                prefix=self._prefix,
                url=url,
                method=method,
                headers=headers,
                body=body,
            )
        )
