"""Run repository for MongoDB storage.

Handles storage and statistics for finished runs.
"""

import logging
from dataclasses import dataclass
from datetime import UTC, datetime
from typing import Any

from bson import ObjectId
from bson.errors import InvalidId
from pymongo import DESCENDING
from pymongo.collection import Collection
from pymongo.database import Database

from lifetrack.tracking.models import ActivityRecord

from .client import retry_on_connection_failure

logger = logging.getLogger(__name__)


def _to_storage_time(value: datetime) -> datetime:
    """Convert to the naive UTC form BSON stores."""
    if value.tzinfo is not None:
        value = value.astimezone(UTC).replace(tzinfo=None)
    return value


@dataclass
class RunStats:
    """Aggregate statistics over a user's runs."""

    total_runs: int = 0
    total_distance_m: float = 0.0
    total_duration_ms: int = 0
    average_speed_kmh: float = 0.0
    total_calories: int = 0


class RunRepository:
    """Repository for run storage operations."""

    COLLECTION_NAME = "runs"

    def __init__(self, database: Database[dict[str, Any]]) -> None:
        """Initialize repository with database connection.

        Args:
            database: MongoDB database instance.
        """
        self._collection: Collection[dict[str, Any]] = database[self.COLLECTION_NAME]
        self._ensure_indexes()

    def _ensure_indexes(self) -> None:
        """Create indexes for efficient queries."""
        self._collection.create_index([("user_id", 1), ("start_time", DESCENDING)])

    @staticmethod
    def _to_document(record: ActivityRecord) -> dict[str, Any]:
        doc = record.to_dict()
        doc["start_time"] = _to_storage_time(record.start_time)
        return doc

    @staticmethod
    def _object_id(record_id: str) -> ObjectId | None:
        try:
            return ObjectId(record_id)
        except (InvalidId, TypeError):
            return None

    @retry_on_connection_failure()
    def save(self, record: ActivityRecord) -> str:
        """Save a run and return its ID.

        Args:
            record: The finished run; user_id must already be set.

        Returns:
            The generated document ID.
        """
        doc = self._to_document(record)
        doc["created_at"] = datetime.now(UTC).replace(tzinfo=None)
        result = self._collection.insert_one(doc)
        logger.debug(f"Inserted run {result.inserted_id} for user '{record.user_id}'")
        return str(result.inserted_id)

    @retry_on_connection_failure()
    def get_by_id(self, record_id: str) -> ActivityRecord | None:
        """Retrieve a run by ID.

        Returns:
            The run, or None if the ID is unknown or malformed.
        """
        oid = self._object_id(record_id)
        if oid is None:
            return None

        doc = self._collection.find_one({"_id": oid})
        if doc is None:
            return None
        return ActivityRecord.from_dict(doc)

    @retry_on_connection_failure()
    def find_for_user(self, user_id: str, limit: int = 0) -> list[ActivityRecord]:
        """Get a user's runs, newest first.

        Args:
            user_id: Owner of the runs.
            limit: Maximum number to return (0 for all).
        """
        cursor = self._collection.find({"user_id": user_id}).sort("start_time", DESCENDING)
        if limit:
            cursor = cursor.limit(limit)
        return [ActivityRecord.from_dict(doc) for doc in cursor]

    @retry_on_connection_failure()
    def find_by_date_range(
        self,
        user_id: str,
        start: datetime,
        end: datetime,
    ) -> list[ActivityRecord]:
        """Get a user's runs that started within a range, newest first.

        Args:
            user_id: Owner of the runs.
            start: Range start (inclusive).
            end: Range end (inclusive).
        """
        cursor = self._collection.find(
            {
                "user_id": user_id,
                "start_time": {
                    "$gte": _to_storage_time(start),
                    "$lte": _to_storage_time(end),
                },
            }
        ).sort("start_time", DESCENDING)
        return [ActivityRecord.from_dict(doc) for doc in cursor]

    @retry_on_connection_failure()
    def count_for_date_range(self, user_id: str, start: datetime, end: datetime) -> int:
        """Count a user's runs that started within a range."""
        return self._collection.count_documents(
            {
                "user_id": user_id,
                "start_time": {
                    "$gte": _to_storage_time(start),
                    "$lte": _to_storage_time(end),
                },
            }
        )

    @retry_on_connection_failure()
    def update(self, record: ActivityRecord) -> bool:
        """Overwrite a stored run with the record's fields.

        Returns:
            True if a stored run matched the record's ID.

        Raises:
            ValueError: If the record has no ID.
        """
        if record.id is None:
            raise ValueError("Cannot update a run without an ID")

        oid = self._object_id(record.id)
        if oid is None:
            return False

        result = self._collection.update_one({"_id": oid}, {"$set": self._to_document(record)})
        return result.matched_count > 0

    @retry_on_connection_failure()
    def delete(self, record_id: str) -> bool:
        """Delete a run.

        Returns:
            True if a run was deleted.
        """
        oid = self._object_id(record_id)
        if oid is None:
            return False
        return self._collection.delete_one({"_id": oid}).deleted_count > 0

    @retry_on_connection_failure()
    def stats(self, user_id: str) -> RunStats:
        """Totals and averages over all of a user's runs."""
        pipeline = [
            {"$match": {"user_id": user_id}},
            {
                "$group": {
                    "_id": None,
                    "total_runs": {"$sum": 1},
                    "total_distance_m": {"$sum": "$distance_m"},
                    "total_duration_ms": {"$sum": "$duration_ms"},
                    "average_speed_kmh": {"$avg": "$avg_speed_kmh"},
                    "total_calories": {"$sum": "$calories"},
                }
            },
        ]
        results = list(self._collection.aggregate(pipeline))
        if not results:
            return RunStats()

        row = results[0]
        return RunStats(
            total_runs=int(row["total_runs"]),
            total_distance_m=float(row["total_distance_m"]),
            total_duration_ms=int(row["total_duration_ms"]),
            average_speed_kmh=float(row["average_speed_kmh"] or 0.0),
            total_calories=int(row["total_calories"]),
        )


__all__ = ["RunRepository", "RunStats"]
