"""
Pytest configuration and fixtures for testing.

Provides Motor driver doubles so the client facade can be exercised
without a running MongoDB server.
"""

import asyncio
from typing import Any
from unittest.mock import AsyncMock, MagicMock

import pytest

from mongo_plugin.config.settings import MongoConfig, default_config
from mongo_plugin.db.client import Client

# =============================================================================
# Driver Doubles
# =============================================================================


class FakeCursor:
    """
    Async cursor double yielding prepared documents.

    Args:
        documents: Documents to yield in order
        error: Raised after all documents were yielded, if given
        close_error: Raised by close(), if given
    """

    def __init__(
        self,
        documents: list[Any],
        error: BaseException | None = None,
        close_error: BaseException | None = None,
    ) -> None:
        self._documents = list(documents)
        self._error = error
        self.close = AsyncMock(side_effect=close_error)

    def __aiter__(self):
        return self._iterate()

    async def _iterate(self):
        for document in self._documents:
            yield document
        if self._error is not None:
            raise self._error


async def never_returns(*args, **kwargs):
    """Side effect for driver calls that should hit a deadline."""
    await asyncio.sleep(10)


# =============================================================================
# Database Fixtures
# =============================================================================


@pytest.fixture
def mock_collection() -> MagicMock:
    """Collection double with async driver methods."""
    collection = MagicMock(name="collection")
    collection.drop = AsyncMock(return_value=None)
    collection.create_indexes = AsyncMock(
        side_effect=lambda models: [model.document["name"] for model in models]
    )
    collection.drop_index = AsyncMock(return_value=None)
    collection.list_indexes = MagicMock(return_value=FakeCursor([]))
    return collection


@pytest.fixture
def mock_db(mock_collection: MagicMock) -> MagicMock:
    """Database double; every collection lookup returns mock_collection."""
    db = MagicMock(name="database")
    db.__getitem__.return_value = mock_collection
    db.list_collection_names = AsyncMock(return_value=[])
    db.create_collection = AsyncMock(return_value=mock_collection)
    db.command = AsyncMock(return_value={"ok": 1.0})
    return db


@pytest.fixture
def mock_motor_client(mock_db: MagicMock) -> MagicMock:
    """Motor client double answering ping and server_info."""
    client = MagicMock(name="motor_client")
    client.__getitem__.return_value = mock_db
    client.admin.command = AsyncMock(return_value={"ok": 1.0})
    client.server_info = AsyncMock(return_value={"version": "7.0.4", "ok": 1.0})
    client.close = MagicMock(return_value=None)
    return client


@pytest.fixture
def config() -> MongoConfig:
    """Baseline configuration."""
    return default_config()


@pytest.fixture
def client(mock_motor_client: MagicMock, mock_db: MagicMock, config: MongoConfig) -> Client:
    """Client facade over the driver doubles."""
    return Client(mock_motor_client, mock_db, config)


@pytest.fixture
def patch_motor(monkeypatch, mock_motor_client: MagicMock) -> MagicMock:
    """
    Replace AsyncIOMotorClient in the client module.

    Returns the class double; its return value is mock_motor_client.
    """
    factory = MagicMock(name="AsyncIOMotorClient", return_value=mock_motor_client)
    monkeypatch.setattr("mongo_plugin.db.client.AsyncIOMotorClient", factory)
    return factory
