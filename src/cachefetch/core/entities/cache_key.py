"""Cache key value object."""

from collections.abc import Callable, Mapping
from dataclasses import dataclass
from typing import Any


@dataclass(frozen=True)
class CacheKey:
    """Immutable cache key value object.

    Encapsulates all components that make up a request cache key,
    providing a structured representation before joining.
    """

    prefix: str
    method: str
    url: str
    headers_hash: str
    body_hash: str

    def __str__(self) -> str:
        """Return the full cache key string.

        Returns:
            The complete cache key as a string.
        """
        return ":".join(
            [
                self.prefix,
                self.method,
                self.url,
                f"h:{self.headers_hash}",
                f"b:{self.body_hash}",
            ]
        )

    @classmethod
    def from_components(
        cls,
        prefix: str,
        url: str,
        method: str | None,
        headers: Mapping[str, Any] | None,
        body: Any,
        hash_func: Callable[[Any], str] | None = None,
    ) -> "CacheKey":
        """Create a CacheKey from raw request components.

        Args:
            prefix: Cache key prefix.
            url: The effective request URL.
            method: HTTP method; defaults to GET.
            headers: Request headers in any insertion order.
            body: Request body; non-serializable bodies hash to a sentinel.
            hash_func: Optional custom hash function.

        Returns:
            A new CacheKey instance.
        """
        from cachefetch.utils.hashing import hash_value, normalize_body, normalize_headers

        hasher = hash_func or hash_value

        return cls(
            prefix=prefix,
            method=(method or "GET").upper(),
            url=url,
            headers_hash=hasher(normalize_headers(headers)),
            body_hash=hasher(normalize_body(body)),
        )
