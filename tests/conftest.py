"""Test fixtures for redis-ctrl."""

import pytest

from redis_ctrl.manifest import RedisEntry
from redis_ctrl.store import InMemoryStore

from .fakes import FakeClock, FakeKeyValueClient


@pytest.fixture
def store() -> InMemoryStore:
    """Create an in-memory store for testing."""
    return InMemoryStore()


@pytest.fixture
def kv_client() -> FakeKeyValueClient:
    """Create a key-value client that records writes."""
    return FakeKeyValueClient()


@pytest.fixture
def clock() -> FakeClock:
    """Create a deterministic clock."""
    return FakeClock()


@pytest.fixture
def entry() -> RedisEntry:
    """A RedisEntry with no expiry."""
    return RedisEntry(name="entry-1", namespace="default", key="k1", value="v1")
