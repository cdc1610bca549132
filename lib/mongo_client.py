# =============================================================================
# lib/mongo_client.py - MongoDB Connection Wrapper
# =============================================================================
# This module owns the process-lifetime MongoDB connection.
#
# One MongoDatabase instance is created per application and stored on
# app.state.database, so tests can swap in a fake. The connection is
# attempted once, in the background, at startup:
# - Success is logged and the status becomes "connected"
# - Failure is logged and the status becomes "unavailable"
# Neither outcome stops the server. There is no retry.
#
# Usage:
#   database = MongoDatabase(settings.MONGODB_URI)
#   database.start()          # inside a running event loop
#   database.health()         # {"status": "connected", "error": None}
# =============================================================================

from __future__ import annotations

import asyncio
import logging
from typing import Any, Callable

from pymongo import AsyncMongoClient

from lib.utils import ApplicationError

# Set up logging for this module
logger = logging.getLogger(__name__)


STATUS_DISCONNECTED = "disconnected"
STATUS_CONNECTING = "connecting"
STATUS_CONNECTED = "connected"
STATUS_UNAVAILABLE = "unavailable"


class MongoConnectionError(ApplicationError):
    """Error while establishing the MongoDB connection."""

    def __init__(
        self,
        message: str,
        code: str = "MONGODB_CONNECTION_FAILED",
        suggestion: str | None = None,
        details: dict[str, Any] | None = None,
    ):
        super().__init__(
            message,
            code=code,
            status_code=503,
            suggestion=suggestion,
            details=details,
        )


class MongoDatabase:
    """
    Process-lifetime MongoDB connection.

    The client is created lazily by connect(). Routes that need the database
    should check `is_connected` (or call `get_client()`) at request time
    rather than assuming startup succeeded.

    Example:
        database = MongoDatabase("mongodb://localhost:27017/mindpath")
        await database.connect()
        if database.is_connected:
            db = database.get_client().get_default_database()
    """

    def __init__(
        self,
        uri: str | None,
        timeout_ms: int = 30000,
        client_factory: Callable[..., Any] = AsyncMongoClient,
    ):
        self.uri = uri
        self.timeout_ms = timeout_ms
        self._client_factory = client_factory
        self._client: Any = None
        self._connect_task: asyncio.Task | None = None
        self.status = STATUS_DISCONNECTED
        self.error: str | None = None

    @property
    def is_connected(self) -> bool:
        return self.status == STATUS_CONNECTED

    def get_client(self) -> Any:
        """
        Get the connected client.

        Raises:
            MongoConnectionError: If the startup connection did not succeed
        """
        if not self.is_connected:
            raise MongoConnectionError(
                message=f"MongoDB is {self.status}",
                code="MONGODB_UNAVAILABLE",
                suggestion="Check MONGODB_URI and that the server is reachable, then restart",
                details={"status": self.status, "error": self.error},
            )
        return self._client

    # -------------------------------------------------------------------------
    # Lifecycle
    # -------------------------------------------------------------------------

    async def connect(self) -> bool:
        """
        Open the connection and verify it with a ping.

        Never raises: every failure is logged and recorded on the instance.

        Returns:
            True if the server answered the ping, False otherwise
        """
        self.status = STATUS_CONNECTING
        self.error = None

        try:
            if not self.uri:
                raise MongoConnectionError(
                    message="MONGODB_URI is not set",
                    code="MONGODB_URI_MISSING",
                    suggestion="Set MONGODB_URI in the environment or .env file",
                )
            self._client = self._client_factory(
                self.uri,
                serverSelectionTimeoutMS=self.timeout_ms,
            )
            await self._client.admin.command("ping")
        except asyncio.CancelledError:
            self.status = STATUS_DISCONNECTED
            raise
        except Exception as e:
            self.status = STATUS_UNAVAILABLE
            self.error = str(e)
            logger.error(f"MongoDB connection error: {e}")
            return False

        self.status = STATUS_CONNECTED
        logger.info("Connected to MongoDB")
        return True

    def start(self) -> asyncio.Task:
        """
        Schedule connect() on the running loop without waiting for it.

        Returns:
            The background task (kept so close() can cancel it)
        """
        self._connect_task = asyncio.create_task(self.connect())
        return self._connect_task

    async def close(self) -> None:
        """Cancel a pending connect and close the client."""
        task = self._connect_task
        if task and not task.done():
            task.cancel()
            try:
                await task
            except asyncio.CancelledError:
                pass
        self._connect_task = None

        if self._client is not None:
            await self._client.close()
            self._client = None
            self.status = STATUS_DISCONNECTED
            logger.info("MongoDB connection closed")

    # -------------------------------------------------------------------------
    # Health
    # -------------------------------------------------------------------------

    def health(self) -> dict[str, Any]:
        """Connection status for readiness checks."""
        return {
            "status": self.status,
            "error": self.error,
        }
