"""
Baseline collection and index definitions for the admin database.

Collections are created when missing and their indexes applied by
ensure_indexes(), typically from the CLI ("indexes init") or at startup.
"""

from dataclasses import dataclass

import structlog
from pymongo import ASCENDING, DESCENDING, IndexModel

from mongo_plugin.db.client import Client

logger = structlog.get_logger(__name__)


@dataclass(frozen=True)
class IndexDefinition:
    """Index definition for a collection."""

    collection: str
    indexes: tuple[IndexModel, ...]


# =============================================================================
# Users Collection Indexes
# =============================================================================

USERS_INDEXES = IndexDefinition(
    collection="users",
    indexes=(
        IndexModel([("username", ASCENDING)], unique=True, name="username_1"),
        IndexModel([("email", ASCENDING)], unique=True, name="email_1"),
        # Mobile is optional, sparse keeps missing values out of the unique constraint
        IndexModel([("mobile", ASCENDING)], unique=True, sparse=True, name="mobile_1"),
    ),
)

# =============================================================================
# Roles and Permissions Collection Indexes
# =============================================================================

ROLES_INDEXES = IndexDefinition(
    collection="roles",
    indexes=(IndexModel([("code", ASCENDING)], unique=True, name="code_1"),),
)

PERMISSIONS_INDEXES = IndexDefinition(
    collection="permissions",
    indexes=(IndexModel([("code", ASCENDING)], unique=True, name="code_1"),),
)

# =============================================================================
# Audit Log Collection Indexes
# =============================================================================

AUDIT_LOGS_INDEXES = IndexDefinition(
    collection="audit_logs",
    indexes=(
        IndexModel([("created_at", DESCENDING)], name="created_at_-1"),
        IndexModel([("user_id", ASCENDING)], name="user_id_1"),
        IndexModel([("action", ASCENDING)], name="action_1"),
    ),
)

# =============================================================================
# File Storage Collection Indexes
# =============================================================================

FILE_STORAGE_INDEXES = IndexDefinition(
    collection="file_storage",
    indexes=(
        IndexModel([("filename", ASCENDING)], name="filename_1"),
        IndexModel([("uploaded_at", DESCENDING)], name="uploaded_at_-1"),
    ),
)

# =============================================================================
# All Index Definitions
# =============================================================================

ALL_INDEXES: tuple[IndexDefinition, ...] = (
    USERS_INDEXES,
    ROLES_INDEXES,
    PERMISSIONS_INDEXES,
    AUDIT_LOGS_INDEXES,
    FILE_STORAGE_INDEXES,
)


def get_index_definitions() -> dict[str, list[IndexModel]]:
    """
    Get all index definitions as a dictionary.

    Returns:
        Dictionary mapping collection names to their index models.
    """
    return {definition.collection: list(definition.indexes) for definition in ALL_INDEXES}


async def ensure_indexes(
    client: Client,
    definitions: tuple[IndexDefinition, ...] = ALL_INDEXES,
) -> dict[str, list[str]]:
    """
    Create missing collections and their indexes.

    Args:
        client: Connected Client
        definitions: Definitions to apply, the baseline by default

    Returns:
        Dictionary mapping collection names to created index names.

    Raises:
        MongoOperationError: on the first collection or index failure
    """
    results: dict[str, list[str]] = {}

    for definition in definitions:
        if not await client.has_collection(definition.collection):
            await client.create_collection(definition.collection)
            logger.info("Created collection", collection=definition.collection)

        results[definition.collection] = await client.create_indexes(
            definition.collection, definition.indexes
        )
        logger.info(
            "Ensured indexes",
            collection=definition.collection,
            count=len(definition.indexes),
        )

    return results
