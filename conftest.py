"""
Shared pytest fixtures for the data access layer.
"""

import sys
from pathlib import Path

import pytest

# Ensure src on path
sys.path.insert(0, str(Path(__file__).parent / "src"))

from dex_data.config.state import ConfigState  # noqa: E402
from dex_data.infrastructure.cache import InMemoryCache  # noqa: E402
from dex_data.shared.models.enums import RelationMode  # noqa: E402
from dex_data.storage.repositories import PonderDb  # noqa: E402
from tests.fixtures import RecordingStore, SqliteStore  # noqa: E402


@pytest.fixture
def sqlite_store():
    store = SqliteStore()
    yield store
    store.conn.close()


@pytest.fixture
def recording_store():
    return RecordingStore()


@pytest.fixture
def ponder_db(sqlite_store):
    return PonderDb(sqlite_store, relation_mode=RelationMode.SEQUENTIAL)


@pytest.fixture
def memory_cache():
    return InMemoryCache()


@pytest.fixture
def settings():
    """Defaults only; no YAML or environment involved."""
    return ConfigState()
