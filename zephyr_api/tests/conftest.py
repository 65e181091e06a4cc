"""
Shared fixtures for the Zephyr API test suite.

Points the application database at a throwaway SQLite file before any
application module is imported.
"""

import os
import tempfile

os.environ.setdefault(
    "ZEPHYR_DATABASE_URL",
    "sqlite:///" + os.path.join(tempfile.gettempdir(), "test_zephyr_api.db"),
)

import pytest

from zephyr_api.services.history_store import HistoryStore
from zephyr_api.services.storage import InMemoryStorage


@pytest.fixture
def storage():
    return InMemoryStorage()


@pytest.fixture
def store(storage):
    return HistoryStore(storage)
