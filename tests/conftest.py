"""Shared fixtures for stores and caches."""

import pytest

from daggerdex.cache import CacheStore
from daggerdex.storage.kv import MemoryStore
from daggerdex.storage.sqlite_store import SqliteStore


@pytest.fixture
def store(tmp_path):
    """Fresh SqliteStore with schema initialized."""
    db = SqliteStore(tmp_path / "test.db")
    db.init_db()
    yield db
    db.close()


@pytest.fixture
def memory_store():
    return MemoryStore()


@pytest.fixture
def cache(memory_store):
    """CacheStore over an isolated in-memory backend."""
    return CacheStore(memory_store)


@pytest.fixture
def workspace(tmp_path):
    """Workspace directory containing a dagger.json marker."""
    ws = tmp_path / "workspace"
    ws.mkdir()
    (ws / "dagger.json").write_text('{"name": "app"}')
    return ws
