"""MongoDB connection handling for run storage.

Owns the pymongo client, retries transient connection loss and exposes
the run repository once connected.
"""

import logging
import time
from collections.abc import Callable
from functools import wraps
from typing import TYPE_CHECKING, Any, TypeVar

from pymongo import MongoClient
from pymongo.database import Database
from pymongo.errors import ConnectionFailure, ServerSelectionTimeoutError

if TYPE_CHECKING:
    from lifetrack.config import StorageConfig

    from .runs import RunRepository

logger = logging.getLogger(__name__)

T = TypeVar("T")

TRANSIENT_ERRORS = (ConnectionFailure, ServerSelectionTimeoutError)


def backoff_delays(max_retries: int, base_delay: float) -> list[float]:
    """Sleep before each retry; the delay doubles every time."""
    return [base_delay * (2**attempt) for attempt in range(max_retries - 1)]


def retry_on_connection_failure(
    max_retries: int = 3,
    base_delay: float = 0.5,
) -> Callable[[Callable[..., T]], Callable[..., T]]:
    """Retry a repository call while MongoDB is unreachable.

    Only connection loss is retried. Query and validation errors go
    straight to the caller, as does the last connection error.

    Args:
        max_retries: Total attempts, including the first.
        base_delay: Seconds to wait before the first retry.
    """

    def decorator(func: Callable[..., T]) -> Callable[..., T]:
        @wraps(func)
        def wrapper(*args: Any, **kwargs: Any) -> T:
            for delay in backoff_delays(max_retries, base_delay):
                try:
                    return func(*args, **kwargs)
                except TRANSIENT_ERRORS as e:
                    logger.warning(
                        "%s lost the connection, retrying in %.1fs: %s",
                        func.__qualname__,
                        delay,
                        e,
                    )
                    time.sleep(delay)

            try:
                return func(*args, **kwargs)
            except TRANSIENT_ERRORS as e:
                logger.error("%s failed after %d attempts: %s", func.__qualname__, max_retries, e)
                raise

        return wrapper

    return decorator


class MongoStorageClient:
    """Connection to the LifeTrack database.

    Usable as a context manager: entering connects, leaving disconnects.
    """

    def __init__(
        self,
        uri: str = "mongodb://localhost:27017",
        database_name: str = "lifetrack",
        connect_timeout_ms: int = 5000,
        server_selection_timeout_ms: int = 5000,
    ) -> None:
        self._uri = uri
        self._database_name = database_name
        self._timeouts = {
            "connectTimeoutMS": connect_timeout_ms,
            "serverSelectionTimeoutMS": server_selection_timeout_ms,
        }

        self._client: MongoClient[dict[str, Any]] | None = None
        self._runs: "RunRepository | None" = None

    @classmethod
    def from_config(cls, config: "StorageConfig") -> "MongoStorageClient":
        """Build a client from the storage section of the config."""
        return cls(
            uri=config.uri,
            database_name=config.database,
            connect_timeout_ms=config.connect_timeout_ms,
            server_selection_timeout_ms=config.server_selection_timeout_ms,
        )

    @property
    def database_name(self) -> str:
        return self._database_name

    def connect(self) -> None:
        """Open the connection and prepare the run repository.

        Does nothing if already connected.

        Raises:
            ConnectionFailure: If the server does not answer a ping.
        """
        if self._client is not None:
            return

        from .runs import RunRepository

        client: MongoClient[dict[str, Any]] = MongoClient(self._uri, **self._timeouts)
        try:
            client.admin.command("ping")
        except TRANSIENT_ERRORS as e:
            logger.error("MongoDB at %s is unreachable: %s", self._uri, e)
            client.close()
            raise

        database: Database[dict[str, Any]] = client[self._database_name]
        self._client = client
        self._runs = RunRepository(database)
        logger.info("Using database '%s' at %s", self._database_name, self._uri)

    def disconnect(self) -> None:
        if self._client is None:
            return
        self._client.close()
        self._client = None
        self._runs = None
        logger.info("Closed MongoDB connection")

    def is_connected(self) -> bool:
        """Ping the server; False if never connected or unreachable."""
        if self._client is None:
            return False
        try:
            self._client.admin.command("ping")
        except TRANSIENT_ERRORS:
            return False
        return True

    @property
    def runs(self) -> "RunRepository":
        """Repository of finished runs.

        Raises:
            RuntimeError: If connect() has not been called.
        """
        if self._runs is None:
            raise RuntimeError("Not connected to MongoDB. Call connect() first.")
        return self._runs

    def __enter__(self) -> "MongoStorageClient":
        self.connect()
        return self

    def __exit__(self, exc_type: Any, exc_val: Any, exc_tb: Any) -> None:
        self.disconnect()


__all__ = ["MongoStorageClient", "backoff_delays", "retry_on_connection_failure"]
