"""
Database connection and management module.

Provides async MongoDB connectivity through the Motor driver.
"""

from mongo_plugin.db.client import Client, build_client_options, new_client
from mongo_plugin.db.errors import (
    MongoClientError,
    MongoConnectionError,
    MongoDecodeError,
    MongoOperationError,
)
from mongo_plugin.db.indexes import IndexDefinition, ensure_indexes, get_index_definitions

__all__ = [
    "Client",
    "new_client",
    "build_client_options",
    "MongoClientError",
    "MongoConnectionError",
    "MongoOperationError",
    "MongoDecodeError",
    "IndexDefinition",
    "ensure_indexes",
    "get_index_definitions",
]
