"""MongoDB connection lifecycle management.

A ``ConnectionManager`` owns a single lazily established connection. The
first caller of ``acquire()`` starts the connection attempt; callers that
arrive while it is pending await the same attempt, and every later caller
gets the cached database handle without any I/O.

The check-then-set on the attempt slot never crosses an ``await``, so on a
single event loop no lock is required.
"""

import asyncio
from typing import Any, Callable, Optional

from pymongo import AsyncMongoClient
from pymongo.asynchronous.database import AsyncDatabase
from pymongo.errors import ConfigurationError as MongoConfigurationError
from pymongo.errors import PyMongoError

from ..config import DatabaseConfig, config
from ..exceptions import ConfigurationError, DatabaseConnectionError
from ..logging import get_logger

logger = get_logger(__name__)


class ConnectionManager:
    """Single cached connection to the MongoDB backing store."""

    def __init__(
        self,
        settings: Optional[DatabaseConfig] = None,
        client_factory: Callable[..., Any] = AsyncMongoClient
    ) -> None:
        self._settings = settings or config.database
        self._client_factory = client_factory
        self._client: Optional[AsyncMongoClient] = None
        self._handle: Optional[AsyncDatabase] = None
        self._attempt: Optional["asyncio.Task[AsyncDatabase]"] = None

    @property
    def is_connected(self) -> bool:
        """Whether a handle has been established and cached."""
        return self._handle is not None

    @property
    def client(self) -> Optional[AsyncMongoClient]:
        """The underlying driver client, once connected."""
        return self._client

    async def acquire(self) -> AsyncDatabase:
        """Return the cached database handle, connecting if necessary.

        Raises:
            ConfigurationError: If ``MONGODB_URL`` is missing or empty.
            DatabaseConnectionError: If the connection attempt fails. The
                failed attempt is discarded so the next call retries.
        """
        if self._handle is not None:
            return self._handle

        url = self._settings.mongodb_url
        if not url:
            raise ConfigurationError("Missing MONGODB_URL")

        if self._attempt is None:
            self._attempt = asyncio.ensure_future(self._connect(url))

        # Shielded so a cancelled waiter does not cancel the shared attempt
        return await asyncio.shield(self._attempt)

    async def _connect(self, url: str) -> AsyncDatabase:
        """Open the client and verify it with a ping before handing it out."""
        database_name = self._settings.mongodb_database
        client = None
        try:
            client = self._client_factory(
                url,
                connectTimeoutMS=self._settings.connect_timeout_ms,
                serverSelectionTimeoutMS=self._settings.server_selection_timeout_ms,
            )
            # Fail fast here rather than queueing operations on an unconfirmed link
            await client.admin.command("ping")
        except MongoConfigurationError as e:
            self._discard_attempt()
            logger.error("Invalid MongoDB configuration", error=str(e))
            raise ConfigurationError.from_exception(f"Invalid MongoDB configuration: {e}", e)
        except Exception as e:
            self._discard_attempt()
            if client is not None:
                await self._close_quietly(client)
            logger.error("Failed to connect to MongoDB", database=database_name, error=str(e))
            raise DatabaseConnectionError.from_exception(
                f"Failed to connect to MongoDB: {e}", e, {"database": database_name}
            )
        except BaseException:
            self._discard_attempt()
            if client is not None:
                await self._close_quietly(client)
            raise

        self._client = client
        self._handle = client[database_name]
        logger.info("Connected to MongoDB", database=database_name)
        return self._handle

    def _discard_attempt(self) -> None:
        # Only the running attempt may clear itself; close() may already have replaced it
        if self._attempt is asyncio.current_task():
            self._attempt = None

    @staticmethod
    async def _close_quietly(client: Any) -> None:
        try:
            await client.close()
        except (PyMongoError, OSError) as e:
            logger.warning("Failed to close MongoDB client", error=str(e))

    async def close(self) -> None:
        """Close the client and reset the cached state."""
        attempt = self._attempt
        self._attempt = None
        if attempt is not None and not attempt.done():
            attempt.cancel()
            # Let the cancelled attempt close the client it built
            await asyncio.gather(attempt, return_exceptions=True)

        if self._client is not None:
            await self._client.close()
            logger.info("Closed MongoDB connection")
        self._client = None
        self._handle = None
