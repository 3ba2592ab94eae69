"""
MongoDB client facade using the Motor async driver.

Wraps a Motor client and the selected database with helpers for
collection, index and statistics operations. Each helper is a single
driver call; driver failures are re-raised as MongoClientError subclasses.
"""

import asyncio
import time
from collections.abc import Awaitable, Callable, Mapping, Sequence
from typing import Any, TypeVar

import structlog
from bson.errors import BSONError
from motor.motor_asyncio import (
    AsyncIOMotorClient,
    AsyncIOMotorCollection,
    AsyncIOMotorDatabase,
)
from pydantic import ValidationError
from pymongo import IndexModel, ReadPreference
from pymongo.errors import PyMongoError

from mongo_plugin.config.settings import MongoConfig, default_config
from mongo_plugin.db.errors import (
    CONNECT,
    PING,
    MongoConnectionError,
    MongoDecodeError,
    MongoOperationError,
)
from mongo_plugin.models.index import IndexInfo
from mongo_plugin.validators.custom_types import to_milliseconds

logger = structlog.get_logger(__name__)

T = TypeVar("T")


def build_client_options(cfg: MongoConfig) -> dict[str, Any]:
    """
    Translate a MongoConfig into Motor client keyword options.

    Zero durations are left out so the driver default applies. The
    replica set name is only passed when set.
    """
    options: dict[str, Any] = {
        "maxPoolSize": cfg.max_pool_size,
        "minPoolSize": cfg.min_pool_size,
    }

    if cfg.max_conn_idle.total_seconds() > 0:
        options["maxIdleTimeMS"] = to_milliseconds(cfg.max_conn_idle)
    if cfg.connect_timeout.total_seconds() > 0:
        options["connectTimeoutMS"] = to_milliseconds(cfg.connect_timeout)
    if cfg.server_timeout.total_seconds() > 0:
        options["serverSelectionTimeoutMS"] = to_milliseconds(cfg.server_timeout)

    # compress_level is reserved; no compressors are configured.

    if cfg.replica_set:
        options["replicaSet"] = cfg.replica_set

    return options


async def _bounded(awaitable: Awaitable[T], timeout: float | None) -> T:
    """Await with an optional deadline in seconds. None or <= 0 means unbounded."""
    if timeout is None or timeout <= 0:
        return await awaitable
    return await asyncio.wait_for(awaitable, timeout)


async def _ping(motor_client: AsyncIOMotorClient, timeout: float | None) -> None:
    await _bounded(
        motor_client.admin.command("ping", read_preference=ReadPreference.PRIMARY),
        timeout,
    )


async def new_client(cfg: MongoConfig | None = None) -> "Client":
    """
    Connect to MongoDB and return a ready Client.

    Args:
        cfg: Connection settings; default_config() when omitted

    Returns:
        Client bound to cfg.database

    Raises:
        MongoConnectionError: phase "connect" when the driver client cannot
            be created or the database name is invalid, phase "ping" when
            the server does not answer
    """
    if cfg is None:
        cfg = default_config()

    timeout = cfg.timeout.total_seconds()

    logger.info(
        "Connecting to MongoDB",
        database=cfg.database,
        explicit_uri=cfg.has_explicit_uri,
        replica_set=cfg.replica_set or None,
    )

    try:
        motor_client = AsyncIOMotorClient(cfg.get_uri(), **build_client_options(cfg))
    except (PyMongoError, ValueError, TypeError) as e:
        raise MongoConnectionError(CONNECT, e) from e

    try:
        database = motor_client[cfg.database]
    except PyMongoError as e:
        motor_client.close()
        raise MongoConnectionError(CONNECT, e) from e

    try:
        await _ping(motor_client, timeout)
    except (PyMongoError, asyncio.TimeoutError) as e:
        motor_client.close()
        raise MongoConnectionError(PING, e) from e
    except asyncio.CancelledError:
        motor_client.close()
        raise

    logger.info("Successfully connected to MongoDB", database=cfg.database)

    return Client(motor_client, database, cfg)


class Client:
    """
    MongoDB client facade.

    Owns the Motor client, the selected database and the configuration
    it was built from. Create it with new_client(); release it with
    close() or by using it as an async context manager.

    Usage:
        async with await new_client(cfg) as client:
            names = await client.list_collections()
            if not await client.has_collection("users"):
                await client.create_collection("users")
    """

    def __init__(
        self,
        client: AsyncIOMotorClient,
        database: AsyncIOMotorDatabase,
        config: MongoConfig,
    ) -> None:
        self._client = client
        self._database = database
        self._config = config

    @property
    def client(self) -> AsyncIOMotorClient:
        """Get the Motor client instance."""
        return self._client

    @property
    def database(self) -> AsyncIOMotorDatabase:
        """Get the database instance."""
        return self._database

    @property
    def config(self) -> MongoConfig:
        """Get the configuration this client was built from."""
        return self._config

    @property
    def _timeout(self) -> float:
        return self._config.timeout.total_seconds()

    def get_collection(self, name: str) -> AsyncIOMotorCollection:
        """Get a collection of the selected database."""
        return self._database[name]

    async def _call(
        self,
        operation: Callable[[], Awaitable[T]],
        action: str,
        timeout: float | None,
    ) -> T:
        try:
            return await _bounded(operation(), timeout)
        except (PyMongoError, asyncio.TimeoutError) as e:
            raise MongoOperationError(action, e) from e

    # =========================================================================
    # Lifecycle
    # =========================================================================

    async def ping(self) -> None:
        """Check the connection with a primary read preference ping."""
        try:
            await _ping(self._client, self._timeout)
        except (PyMongoError, asyncio.TimeoutError) as e:
            raise MongoConnectionError(PING, e) from e

    async def close(self) -> None:
        """Close the MongoDB connection."""
        logger.info("Disconnecting from MongoDB", database=self._config.database)
        self._client.close()

    async def health_check(self) -> dict[str, Any]:
        """
        Perform a health check on the connection.

        Returns:
            dict with status and latency information
        """
        try:
            start = time.perf_counter()
            await _ping(self._client, self._timeout)
            latency_ms = (time.perf_counter() - start) * 1000

            server_info = await _bounded(self._client.server_info(), self._timeout)

            return {
                "status": "connected",
                "healthy": True,
                "latency_ms": round(latency_ms, 2),
                "server_version": server_info.get("version", "unknown"),
            }

        except (PyMongoError, asyncio.TimeoutError) as e:
            logger.warning("Health check failed", error=str(e))
            return {
                "status": "error",
                "healthy": False,
                "error": str(e) or type(e).__name__,
            }

    async def __aenter__(self) -> "Client":
        return self

    async def __aexit__(self, exc_type, exc_val, exc_tb) -> None:
        await self.close()


    # =========================================================================
    # Collections
    # =========================================================================

    async def list_collections(self, *, timeout: float | None = None) -> list[str]:
        """List collection names of the selected database."""
        return await self._call(
            lambda: self._database.list_collection_names(),
            "list collections",
            timeout,
        )

    async def create_collection(self, name: str, *, timeout: float | None = None) -> None:
        """Create a collection. Fails if it already exists."""
        await self._call(
            lambda: self._database.create_collection(name),
            f"create collection {name!r}",
            timeout,
        )

    async def drop_collection(self, name: str, *, timeout: float | None = None) -> None:
        """Drop a collection."""
        await self._call(
            lambda: self._database[name].drop(),
            f"drop collection {name!r}",
            timeout,
        )

    async def has_collection(self, name: str, *, timeout: float | None = None) -> bool:
        """Check whether a collection exists."""
        names = await self._call(
            lambda: self._database.list_collection_names(filter={"name": name}),
            f"check collection {name!r}",
            timeout,
        )
        return any(existing == name for existing in names)

    # =========================================================================
    # Indexes
    # =========================================================================

    async def create_index(
        self,
        collection: str,
        index: IndexModel,
        *,
        timeout: float | None = None,
    ) -> str:
        """
        Create one index.

        Returns:
            Name of the created index
        """
        names = await self.create_indexes(collection, [index], timeout=timeout)
        return names[0]

    async def create_indexes(
        self,
        collection: str,
        indexes: Sequence[IndexModel],
        *,
        timeout: float | None = None,
    ) -> list[str]:
        """
        Create several indexes in one command.

        Returns:
            Names of the created indexes, in input order
        """
        return await self._call(
            lambda: self._database[collection].create_indexes(list(indexes)),
            f"create indexes on {collection!r}",
            timeout,
        )

    async def drop_index(
        self,
        collection: str,
        index_name: str,
        *,
        timeout: float | None = None,
    ) -> None:
        """Drop an index by name."""
        await self._call(
            lambda: self._database[collection].drop_index(index_name),
            f"drop index {index_name!r} on {collection!r}",
            timeout,
        )

    async def list_indexes(self, collection: str, *, timeout: float | None = None) -> list[str]:
        """
        List index names of a collection in server order.

        Index documents that cannot be decoded are skipped. The cursor is
        always closed. A close failure is raised when the listing itself
        succeeded; otherwise it is logged and the listing error is kept.
        """
        action = f"list indexes of {collection!r}"

        try:
            cursor = self._database[collection].list_indexes()
        except PyMongoError as e:
            raise MongoOperationError(action, e) from e

        try:
            names = await _bounded(self._index_names(cursor, collection), timeout)
        except BSONError as e:
            await self._discard_cursor(cursor, collection)
            raise MongoDecodeError(action, e) from e
        except (PyMongoError, asyncio.TimeoutError) as e:
            await self._discard_cursor(cursor, collection)
            raise MongoOperationError(action, e) from e
        except asyncio.CancelledError:
            await self._discard_cursor(cursor, collection)
            raise

        try:
            await cursor.close()
        except PyMongoError as e:
            raise MongoOperationError(f"close index cursor of {collection!r}", e) from e

        return names

    @staticmethod
    async def _index_names(cursor: Any, collection: str) -> list[str]:
        names: list[str] = []
        async for document in cursor:
            try:
                info = IndexInfo.model_validate(document)
            except ValidationError:
                logger.debug("Skipping undecodable index document", collection=collection)
                continue
            names.append(info.name)
        return names

    @staticmethod
    async def _discard_cursor(cursor: Any, collection: str) -> None:
        try:
            await cursor.close()
        except PyMongoError as e:
            logger.warning("Failed to close index cursor", collection=collection, error=str(e))

    # =========================================================================
    # Statistics
    # =========================================================================

    async def _run_command(
        self,
        action: str,
        command: str,
        value: Any = 1,
        timeout: float | None = None,
    ) -> dict[str, Any]:
        try:
            reply = await _bounded(self._database.command(command, value), timeout)
        except BSONError as e:
            raise MongoDecodeError(action, e) from e
        except (PyMongoError, asyncio.TimeoutError) as e:
            raise MongoOperationError(action, e) from e

        if not isinstance(reply, Mapping):
            raise MongoDecodeError(
                action,
                TypeError(f"expected a document, got {type(reply).__name__}"),
            )
        return dict(reply)

    async def get_server_status(self, *, timeout: float | None = None) -> dict[str, Any]:
        """Run serverStatus and return the reply document."""
        return await self._run_command("get server status", "serverStatus", timeout=timeout)

    async def get_database_stats(self, *, timeout: float | None = None) -> dict[str, Any]:
        """Run dbStats on the selected database."""
        return await self._run_command("get database stats", "dbStats", timeout=timeout)

    async def get_collection_stats(
        self,
        collection: str,
        *,
        timeout: float | None = None,
    ) -> dict[str, Any]:
        """Run collStats for a collection."""
        return await self._run_command(
            f"get stats of collection {collection!r}",
            "collStats",
            collection,
            timeout=timeout,
        )
