"""
Pytest configuration and fixtures for the user directory service tests.
"""

from pathlib import Path
from typing import Generator

import pytest
from fastapi.testclient import TestClient

from userdir.cache.memory import InMemorySessionStore, InMemoryUserCache
from userdir.core.config import Settings
from userdir.core.container import Container, clear_container_cache
from userdir.core.context import RequestContext
from userdir.main import create_app
from userdir.services.passwords import BcryptPasswordHasher
from userdir.services.session_service import SessionService
from userdir.services.user_service import UserService
from userdir.storage.memory import InMemoryUserStore


class FakeClock:
    """Manually advanced monotonic clock for TTL tests."""

    def __init__(self, start: float = 1000.0):
        self.now = start

    def __call__(self) -> float:
        return self.now

    def advance(self, seconds: float) -> None:
        self.now += seconds


class CountingUserStore(InMemoryUserStore):
    """In-memory store that counts row queries issued by listings."""

    def __init__(self):
        super().__init__()
        self.list_calls = 0

    async def find_by_name(self, ctx, name, limit, offset):
        self.list_calls += 1
        return await super().find_by_name(ctx, name, limit, offset)

    async def list_users(self, ctx, limit, offset, order_by=None):
        self.list_calls += 1
        return await super().list_users(ctx, limit, offset, order_by)


@pytest.fixture(autouse=True)
def clear_caches() -> Generator[None, None, None]:
    """
    Clear all caches before and after each test.

    This ensures test isolation by resetting singleton state.
    """
    clear_container_cache()
    yield
    clear_container_cache()


@pytest.fixture
def temp_config_file(tmp_path: Path) -> Path:
    """
    Create a temporary config.yaml file using in-memory backends.

    Args:
        tmp_path: Pytest tmp_path fixture.

    Returns:
        Path to the temporary config file.
    """
    config_content = """
store:
  provider: "memory"

cache:
  provider: "memory"
  user_ttl_seconds: 600
  key_prefix: "test-user:"

session:
  expire_seconds: 120
  key_prefix: "test-session:"
  header_name: "X-Session-Id"

server:
  request_timeout_seconds: 5.0

security:
  bcrypt_rounds: 4
"""
    config_path = tmp_path / "config.yaml"
    config_path.write_text(config_content)
    return config_path


@pytest.fixture
def test_settings(temp_config_file: Path) -> Settings:
    """
    Create test settings from temporary config file.

    Args:
        temp_config_file: Path to temporary config file.

    Returns:
        Settings instance loaded from temporary config.
    """
    return Settings.from_yaml(temp_config_file)


@pytest.fixture
def test_container(test_settings: Settings) -> Container:
    """
    Create a test container with test settings.

    Args:
        test_settings: Test settings fixture.

    Returns:
        Container instance with test settings.
    """
    return Container(settings=test_settings)


@pytest.fixture
def client(test_container: Container) -> Generator[TestClient, None, None]:
    """
    Create a test client for an app wired to in-memory backends.

    Yields:
        TestClient instance.
    """
    with TestClient(create_app(test_container)) as test_client:
        yield test_client


@pytest.fixture
def ctx() -> RequestContext:
    """Request context with a generous deadline."""
    return RequestContext.with_timeout(30.0)


@pytest.fixture
def clock() -> FakeClock:
    """Manually advanced clock."""
    return FakeClock()


@pytest.fixture
def user_store() -> CountingUserStore:
    """Fresh in-memory user store that counts listing queries."""
    return CountingUserStore()


@pytest.fixture
def user_cache(clock: FakeClock) -> InMemoryUserCache:
    """Fresh in-memory user cache driven by the fake clock."""
    return InMemoryUserCache(clock=clock)


@pytest.fixture
def session_store(clock: FakeClock) -> InMemorySessionStore:
    """Fresh in-memory session store driven by the fake clock."""
    return InMemorySessionStore(clock=clock)


@pytest.fixture
def hasher() -> BcryptPasswordHasher:
    """Fast bcrypt hasher."""
    return BcryptPasswordHasher(rounds=4)


@pytest.fixture
def user_service(
    user_store: InMemoryUserStore,
    user_cache: InMemoryUserCache,
    hasher: BcryptPasswordHasher,
) -> UserService:
    """User service over in-memory backends."""
    return UserService(user_store, user_cache, hasher, cache_ttl_seconds=3600)


@pytest.fixture
def session_service(session_store: InMemorySessionStore) -> SessionService:
    """Session service over the in-memory session store."""
    return SessionService(session_store)
