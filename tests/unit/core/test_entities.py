"""Tests for core entities."""

from datetime import datetime, timedelta, timezone

import pytest

from cachefetch.core.entities import (
    CacheConfig,
    CacheEntry,
    CacheKey,
    Middleware,
    RequestOptions,
    RetryStrategy,
)
from cachefetch.core.entities.hooks import HookKind

NOW = datetime(2024, 1, 1, tzinfo=timezone.utc)


class TestCacheEntry:
    """Tests for CacheEntry entity."""

    def test_create_cache_entry(self) -> None:
        """Test creating a cache entry with factory method."""
        entry = CacheEntry.create(
            key="test:key",
            value={"data": "value"},
            now=NOW,
            ttl=timedelta(minutes=5),
            tags=["User", "User:123"],
        )

        assert entry.key == "test:key"
        assert entry.value == {"data": "value"}
        assert entry.expires_at == NOW + timedelta(minutes=5)
        assert entry.last_access == NOW
        assert entry.tags == ("User", "User:123")

    def test_duplicate_tags_collapsed(self) -> None:
        """Test repeated tags are stored once, in order."""
        entry = CacheEntry.create("k", 1, now=NOW, ttl=timedelta(1), tags=["a", "b", "a"])
        assert entry.tags == ("a", "b")

    def test_is_expired(self) -> None:
        """Test expiry is strict: an entry is live at its expiry instant."""
        entry = CacheEntry.create("k", 1, now=NOW, ttl=timedelta(seconds=1))

        assert not entry.is_expired(NOW + timedelta(seconds=1))
        assert entry.is_expired(NOW + timedelta(seconds=1, microseconds=1))


class TestCacheKey:
    """Tests for CacheKey value object."""

    def test_from_components(self) -> None:
        """Test key components and string form."""
        key = CacheKey.from_components(
            prefix="p",
            url="https://x.test/a",
            method="post",
            headers={"A": "1"},
            body={"x": 1},
        )

        assert key.method == "POST"
        assert str(key) == f"p:POST:https://x.test/a:h:{key.headers_hash}:b:{key.body_hash}"

    def test_custom_hash_func(self) -> None:
        """Test a custom hash function is used for headers and body."""
        key = CacheKey.from_components(
            prefix="p",
            url="/a",
            method=None,
            headers=None,
            body=None,
            hash_func=lambda value: "fixed",
        )

        assert str(key) == "p:GET:/a:h:fixed:b:fixed"


class TestCacheConfig:
    """Tests for CacheConfig entity."""

    def test_default_config(self) -> None:
        """Test default configuration values."""
        config = CacheConfig()

        assert config.enabled is True
        assert config.default_ttl == timedelta(seconds=5)
        assert config.max_size is None
        assert config.key_prefix == "cachefetch"
        assert config.sliding is False
        assert config.cleanup_interval is None

    @pytest.mark.parametrize(
        "kwargs",
        [
            {"max_size": 0},
            {"default_ttl": timedelta(seconds=-1)},
            {"cleanup_interval": 0},
            {"retry_jitter": -1},
        ],
    )
    def test_invalid_config(self, kwargs: dict) -> None:
        """Test invalid bounds are rejected."""
        with pytest.raises(ValueError):
            CacheConfig(**kwargs)


class TestRequestOptions:
    """Tests for RequestOptions entity."""

    def test_defaults(self) -> None:
        """Test documented defaults."""
        options = RequestOptions()

        assert options.method == "GET"
        assert options.cache is True
        assert options.retries == 0
        assert options.retry_delay == 0.5
        assert options.retry_strategy is RetryStrategy.FIXED
        assert options.validate_status(200) and options.validate_status(299)
        assert not options.validate_status(300)

    def test_normalization(self) -> None:
        """Test strings and lists are normalized once."""
        options = RequestOptions(
            method="post",
            tags=["a"],
            retry_strategy="exponential",
            middleware=[Middleware()],
        )

        assert options.method == "POST"
        assert options.tags == ("a",)
        assert options.retry_strategy is RetryStrategy.EXPONENTIAL
        assert isinstance(options.middleware, tuple)

    def test_headers_none(self) -> None:
        """Test headers=None normalizes to an empty dict."""
        assert RequestOptions(headers=None).headers == {}

    @pytest.mark.parametrize(
        "kwargs",
        [
            {"retries": -1},
            {"retry_delay": -0.1},
            {"timeout": 0},
            {"ttl": timedelta(seconds=-1)},
            {"retry_strategy": "linear"},
        ],
    )
    def test_invalid_options(self, kwargs: dict) -> None:
        """Test invalid options are rejected at construction."""
        with pytest.raises(ValueError):
            RequestOptions(**kwargs)


class TestMiddleware:
    """Tests for Middleware hook lookup."""

    def test_hook_for(self) -> None:
        """Test each lifecycle point maps to its own callback."""
        def on_request(ctx):
            return None

        middleware = Middleware(on_request=on_request)

        assert middleware.hook_for(HookKind.REQUEST) is on_request
        assert middleware.hook_for(HookKind.RESPONSE) is None
        assert middleware.hook_for(HookKind.ERROR) is None
