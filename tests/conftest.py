"""Pytest configuration for pasties tests."""
import pytest
from fastapi.testclient import TestClient
from redis.exceptions import ConnectionError as RedisConnectionError

from pasties.database import InMemoryStore, PasteDatabase
from pasties.main import create_app
from pasties.manager import PasteManager


class FakeClock:
    """Settable clock returning Unix seconds."""

    def __init__(self, now: int = 1_700_000_000):
        self.now = now

    def __call__(self) -> int:
        return self.now


@pytest.fixture
def store():
    return InMemoryStore()


@pytest.fixture
def database(store):
    return PasteDatabase(store)


@pytest.fixture
def clock():
    return FakeClock()


@pytest.fixture
def manager(database, clock):
    return PasteManager(database, clock=clock)


@pytest.fixture
def client(manager):
    """Test client for an app backed by the in-memory store."""
    return TestClient(create_app(manager))


class BrokenStore(InMemoryStore):
    """In-memory store whose named operations fail like a lost Redis connection."""

    def __init__(self, *broken):
        super().__init__()
        self.broken = set(broken)

    def _check(self, operation):
        if operation in self.broken:
            raise RedisConnectionError(f"{operation} failed")

    def hset(self, key, mapping):
        self._check("hset")
        return super().hset(key, mapping)

    def hgetall(self, key):
        self._check("hgetall")
        return super().hgetall(key)

    def exists(self, key):
        self._check("exists")
        return super().exists(key)

    def rename(self, src, dst):
        self._check("rename")
        return super().rename(src, dst)

    def delete(self, key):
        self._check("delete")
        return super().delete(key)

    def ping(self):
        self._check("ping")
        return super().ping()


@pytest.fixture
def broken_store():
    """Factory for stores failing on the given operations."""
    return BrokenStore
