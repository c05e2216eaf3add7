"""Function-level cache decorators.

These decorators cache the results of arbitrary async functions in the
store of a configured FetchService, with the same in-flight dedup the
request path uses.
"""

import functools
import re
from collections.abc import Callable
from datetime import timedelta
from typing import Any, TypeVar

from cachefetch.core.services.fetch_service import FetchService
from cachefetch.utils.hashing import hash_value

F = TypeVar("F", bound=Callable[..., Any])

# Module-level fetch service reference
_fetch_service: FetchService | None = None


def configure(fetch_service: FetchService) -> None:
    """Configure the fetch service used by decorators.

    Must be called before ``@cached`` or ``@invalidates`` take effect;
    until then decorated functions run uncached.

    Args:
        fetch_service: The fetch service instance to use.

    Example:
        client = create_client()
        configure(client)
    """
    global _fetch_service
    _fetch_service = fetch_service


def get_fetch_service() -> FetchService | None:
    """Get the configured fetch service.

    Returns:
        The configured fetch service, or None if not configured.
    """
    return _fetch_service


def cached(
    ttl: timedelta | None = None,
    tags: list[str] | None = None,
    key: str | Callable[..., str] | None = None,
    stale_while_revalidate: bool = False,
) -> Callable[[F], F]:
    """Decorator for caching async function results.

    Args:
        ttl: Time-to-live for cached results. Uses config default if None.
        tags: Tags for cache invalidation. Supports {arg_name} interpolation.
        key: Custom cache key or function to generate key.
            If string, supports {arg_name} interpolation.
            If callable, receives (*args, **kwargs) and returns key string.
        stale_while_revalidate: Serve expired results immediately and
            refresh them in the background.

    Returns:
        Decorated function.

    Example:
        @cached(ttl=timedelta(minutes=10), tags=["user", "user:{id}"])
        async def get_user(id: str) -> dict:
            return await client.request(f"/users/{id}")
    """

    def decorator(func: F) -> F:
        @functools.wraps(func)
        async def wrapper(*args: Any, **kwargs: Any) -> Any:
            if _fetch_service is None:
                # Cache not configured, execute directly
                return await func(*args, **kwargs)

            cache_key = _build_cache_key(func, args, kwargs, key)
            resolved_tags = _resolve_tags(tags, args, kwargs)
            load = functools.partial(func, *args, **kwargs)

            if stale_while_revalidate:
                return await _fetch_service.get_or_set_swr(
                    cache_key, load, ttl=ttl, tags=resolved_tags
                )
            return await _fetch_service.get_or_set(
                cache_key, load, ttl=ttl, tags=resolved_tags
            )

        return wrapper  # type: ignore

    return decorator


def invalidates(
    tags: list[str],
) -> Callable[[F], F]:
    """Decorator for invalidating cache entries after a write.

    Executes the decorated function and then invalidates all cache
    entries carrying the specified tags.

    Args:
        tags: Tags to invalidate. Supports {arg_name} interpolation.

    Returns:
        Decorated function.

    Example:
        @invalidates(tags=["user:{id}"])
        async def update_user(id: str, data: dict) -> dict:
            return await client.request(f"/users/{id}", method="PUT", body=data)
    """

    def decorator(func: F) -> F:
        @functools.wraps(func)
        async def wrapper(*args: Any, **kwargs: Any) -> Any:
            # Execute function first
            result = await func(*args, **kwargs)

            if _fetch_service is not None:
                for tag in _resolve_tags(tags, args, kwargs):
                    _fetch_service.invalidate_tag(tag)

            return result

        return wrapper  # type: ignore

    return decorator


def _build_cache_key(
    func: Callable[..., Any],
    args: tuple[Any, ...],
    kwargs: dict[str, Any],
    custom_key: str | Callable[..., str] | None,
) -> str:
    """Build cache key for a function call.

    Args:
        func: The function being cached.
        args: Positional arguments.
        kwargs: Keyword arguments.
        custom_key: Custom key or key builder function.

    Returns:
        The cache key string.
    """
    if _fetch_service is None:
        raise RuntimeError("Cache not configured. Call configure() first.")

    if custom_key is not None:
        if callable(custom_key):
            return custom_key(*args, **kwargs)
        return _interpolate_string(custom_key, args, kwargs)

    prefix = _fetch_service.config.key_prefix
    name = f"{func.__module__}.{func.__qualname__}"
    return f"{prefix}:fn:{name}:{hash_value({'args': list(args), 'kwargs': kwargs})}"


def _resolve_tags(
    tags: list[str] | None,
    args: tuple[Any, ...],
    kwargs: dict[str, Any],
) -> list[str]:
    """Resolve tags with argument interpolation.

    Args:
        tags: Tag patterns with optional {arg} placeholders.
        args: Positional arguments.
        kwargs: Keyword arguments.

    Returns:
        List of resolved tag strings.
    """
    if not tags:
        return []
    return [_interpolate_string(tag, args, kwargs) for tag in tags]


def _interpolate_string(
    template: str,
    args: tuple[Any, ...],
    kwargs: dict[str, Any],
) -> str:
    """Interpolate {arg_name} placeholders in string.

    Args:
        template: String with {arg_name} placeholders.
        args: Positional arguments (ignored for name-based interpolation).
        kwargs: Keyword arguments for interpolation.

    Returns:
        Interpolated string.
    """
    pattern = r"\{(\w+)\}"

    def replacer(match: re.Match[str]) -> str:
        name = match.group(1)
        if name in kwargs:
            return str(kwargs[name])
        return match.group(0)  # Keep original if not found

    return re.sub(pattern, replacer, template)
