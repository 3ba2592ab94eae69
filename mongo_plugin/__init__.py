"""
Async MongoDB connection plugin.

Connection settings, URI resolution and a thin client facade over the
Motor driver for collection, index and statistics operations.
"""

from mongo_plugin.config.settings import MongoConfig, default_config
from mongo_plugin.db.client import Client, new_client
from mongo_plugin.db.errors import (
    MongoClientError,
    MongoConnectionError,
    MongoDecodeError,
    MongoOperationError,
)

__version__ = "0.1.0"

__all__ = [
    "Client",
    "MongoClientError",
    "MongoConfig",
    "MongoConnectionError",
    "MongoDecodeError",
    "MongoOperationError",
    "default_config",
    "new_client",
]
