"""
Pytest configuration and shared fixtures.

MESSAGES_TABLE is seeded here so settings resolve without a .env file.
The settings cache is cleared before any test runs.
"""

import os
from unittest.mock import MagicMock

import pytest

os.environ.setdefault("MESSAGES_TABLE", "MessagesTable")
os.environ.setdefault("LOG_LEVEL", "DEBUG")

from message_store.config import TableConfig, get_settings  # noqa: E402
from message_store.store import InMemoryStoreClient  # noqa: E402

get_settings.cache_clear()

TABLE_NAME = os.environ["MESSAGES_TABLE"]


@pytest.fixture
def table_config():
    return TableConfig(table_name=TABLE_NAME)


@pytest.fixture
def memory_store():
    """Fresh in-memory store for each test."""
    return InMemoryStoreClient()


@pytest.fixture
def mock_store():
    """Store client double recording every call."""
    store = MagicMock()
    store.put.return_value = None
    store.scan.return_value = []
    store.delete.return_value = None
    return store


@pytest.fixture
def clean_settings(monkeypatch):
    """Clear cached settings before and after a test that changes the environment."""
    get_settings.cache_clear()
    yield monkeypatch
    get_settings.cache_clear()
