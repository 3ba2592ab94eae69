"""
Exceptions raised by the MongoDB client facade.

Each exception keeps the underlying driver error in ``cause`` and is raised
with ``raise ... from`` so the driver traceback stays attached.
"""

CONNECT = "connect"
PING = "ping"


class MongoClientError(Exception):
    """Base exception for MongoDB client errors."""

    def __init__(self, message: str, cause: BaseException | None = None) -> None:
        super().__init__(message)
        self.cause = cause


class MongoConnectionError(MongoClientError):
    """Raised when connecting to or pinging the server fails."""

    def __init__(self, phase: str, cause: BaseException) -> None:
        super().__init__(f"failed to {phase} MongoDB: {cause}", cause)
        self.phase = phase


class MongoOperationError(MongoClientError):
    """Raised when a collection, index or command call fails."""

    def __init__(self, action: str, cause: BaseException) -> None:
        super().__init__(f"failed to {action}: {cause}", cause)
        self.action = action


class MongoDecodeError(MongoOperationError):
    """Raised when a server reply cannot be decoded into a document."""

    pass
