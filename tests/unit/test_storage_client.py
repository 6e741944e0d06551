"""Unit tests for MongoDB storage client.

Tests connection management and retry logic.
"""

from unittest.mock import MagicMock, patch

import mongomock
import pytest
from pymongo.errors import ConnectionFailure, ServerSelectionTimeoutError

from lifetrack.config import StorageConfig
from lifetrack.storage import MongoStorageClient, RunRepository, retry_on_connection_failure
from lifetrack.storage.client import backoff_delays


def test_backoff_delays_double() -> None:
    assert backoff_delays(4, 0.5) == [0.5, 1.0, 2.0]
    assert backoff_delays(1, 0.5) == []


class TestRetryOnConnectionFailure:
    """Tests for the retry decorator."""

    def test_returns_on_success(self) -> None:
        @retry_on_connection_failure(max_retries=3, base_delay=0)
        def ok() -> str:
            return "done"

        assert ok() == "done"

    def test_retries_then_succeeds(self) -> None:
        calls = MagicMock(side_effect=[ConnectionFailure("down"), "done"])

        @retry_on_connection_failure(max_retries=3, base_delay=0)
        def flaky() -> str:
            return calls()

        with patch("lifetrack.storage.client.time.sleep") as sleep:
            assert flaky() == "done"
        assert calls.call_count == 2
        sleep.assert_called_once_with(0)

    def test_raises_after_last_attempt(self) -> None:
        calls = MagicMock(side_effect=ServerSelectionTimeoutError("timeout"))

        @retry_on_connection_failure(max_retries=3, base_delay=0.5)
        def broken() -> None:
            calls()

        with (
            patch("lifetrack.storage.client.time.sleep") as sleep,
            pytest.raises(ServerSelectionTimeoutError),
        ):
            broken()
        assert calls.call_count == 3
        assert [c.args[0] for c in sleep.call_args_list] == [0.5, 1.0]

    def test_other_errors_are_not_retried(self) -> None:
        calls = MagicMock(side_effect=ValueError("bad"))

        @retry_on_connection_failure(max_retries=3, base_delay=0)
        def invalid() -> None:
            calls()

        with pytest.raises(ValueError):
            invalid()
        assert calls.call_count == 1


class TestMongoStorageClient:
    """Tests for MongoStorageClient."""

    def test_runs_requires_connection(self) -> None:
        client = MongoStorageClient()
        assert not client.is_connected()
        with pytest.raises(RuntimeError, match="connect"):
            _ = client.runs

    def test_from_config(self) -> None:
        client = MongoStorageClient.from_config(StorageConfig(database="lifetrack_test"))
        assert client.database_name == "lifetrack_test"

    def test_connect_creates_repository(self) -> None:
        with patch("lifetrack.storage.client.MongoClient", mongomock.MongoClient):
            with MongoStorageClient(database_name="lifetrack_test") as client:
                assert isinstance(client.runs, RunRepository)
            assert not client.is_connected()

    def test_connect_failure_propagates(self) -> None:
        mongo = MagicMock()
        mongo.return_value.admin.command.side_effect = ServerSelectionTimeoutError("no server")

        with patch("lifetrack.storage.client.MongoClient", mongo):
            client = MongoStorageClient()
            with pytest.raises(ServerSelectionTimeoutError):
                client.connect()

        assert not client.is_connected()
