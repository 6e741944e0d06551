"""Record sink backed by the run repository."""

import logging

from lifetrack.tracking.models import ActivityRecord

from .runs import RunRepository

logger = logging.getLogger(__name__)


class RepositoryRecordSink:
    """Stores finished runs for one user.

    The tracker leaves the owner blank; this sink fills it in.
    """

    def __init__(self, repository: RunRepository, user_id: str = "default") -> None:
        """Initialize sink.

        Args:
            repository: Repository the runs are saved to
            user_id: Owner assigned to every submitted run
        """
        self._repository = repository
        self._user_id = user_id

    def submit(self, record: ActivityRecord) -> str:
        record_id = self._repository.save(record.with_owner(self._user_id))
        logger.info(
            f"Stored run {record_id} for '{self._user_id}' "
            f"({record.distance_m:.0f} m, {record.calories} kcal)"
        )
        return record_id


__all__ = ["RepositoryRecordSink"]
