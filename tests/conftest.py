"""Pytest configuration for cachefetch tests."""

from datetime import timedelta

import pytest
from helpers import FakeClock, FakeResponse, FakeTransport, RecordingSleep

from cachefetch import (
    CacheConfig,
    DefaultKeyBuilder,
    FetchService,
    InMemoryCacheStore,
    RetryController,
)


@pytest.fixture(autouse=True)
def reset_decorator_config():
    """Reset decorator configuration after each test."""
    import cachefetch.decorators

    original_service = cachefetch.decorators._fetch_service

    yield

    cachefetch.decorators._fetch_service = original_service


@pytest.fixture
def clock() -> FakeClock:
    """Create a controllable clock."""
    return FakeClock()


@pytest.fixture
def config() -> CacheConfig:
    """Create a cache configuration for testing."""
    return CacheConfig(default_ttl=timedelta(seconds=5), key_prefix="test")


@pytest.fixture
def store(config: CacheConfig, clock: FakeClock) -> InMemoryCacheStore:
    """Create a cache store driven by the fake clock."""
    return InMemoryCacheStore(config, clock=clock)


@pytest.fixture
def transport() -> FakeTransport:
    """Create a transport answering 200 with a JSON body."""
    return FakeTransport(FakeResponse(json_body={"value": "V"}))


@pytest.fixture
def sleeps() -> RecordingSleep:
    """Create a sleep recorder for retry delays."""
    return RecordingSleep()


@pytest.fixture
def service(
    store: InMemoryCacheStore,
    transport: FakeTransport,
    config: CacheConfig,
    sleeps: RecordingSleep,
) -> FetchService:
    """Create a fetch service wired to fakes."""
    return FetchService(
        store=store,
        key_builder=DefaultKeyBuilder(prefix=config.key_prefix),
        transport=transport,
        config=config,
        retry=RetryController(jitter=0.0, sleep=sleeps),
    )
