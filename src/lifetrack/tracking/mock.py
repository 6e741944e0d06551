"""Mock tracking collaborators for testing.

Provides controllable clock, location source and record sink
implementations for unit tests, integration tests and replays.
"""

import logging
from datetime import UTC, datetime, timedelta

from .errors import LocationUnavailable
from .location import ErrorCallback, FixCallback
from .models import ActivityRecord, PositionFix

logger = logging.getLogger(__name__)


class MockClock:
    """Manually advanced clock.

    Wall time moves in step with the monotonic reading.
    """

    def __init__(
        self,
        start_ms: int = 0,
        wall_start: datetime | None = None,
    ) -> None:
        """Initialize mock clock.

        Args:
            start_ms: Initial monotonic reading
            wall_start: Wall time matching start_ms (defaults to 2024-01-01 UTC)
        """
        self._start_ms = start_ms
        self._now_ms = start_ms
        self._wall_start = wall_start or datetime(2024, 1, 1, 7, 0, tzinfo=UTC)

    def monotonic_ms(self) -> int:
        return self._now_ms

    def now(self) -> datetime:
        return self._wall_start + timedelta(milliseconds=self._now_ms - self._start_ms)

    def advance(self, ms: int) -> None:
        """Move the clock forward by ms milliseconds."""
        if ms < 0:
            raise ValueError("Clock cannot go backwards")
        self._now_ms += ms

    def set(self, ms: int) -> None:
        """Move the clock to an absolute reading no earlier than the current one."""
        self.advance(ms - self._now_ms)


class MockLocationSource:
    """Location source driven by the test.

    Fixes passed to emit() are delivered only while subscribed, the same way
    a real source stops calling back once updates are removed.
    """

    def __init__(self) -> None:
        self._on_fix: FixCallback | None = None
        self._on_error: ErrorCallback | None = None
        self._fail_reason: str | None = None
        self.subscribe_calls: list[tuple[int, int]] = []
        self.unsubscribe_calls = 0

    @property
    def is_subscribed(self) -> bool:
        return self._on_fix is not None

    def subscribe(
        self,
        interval_ms: int,
        fastest_interval_ms: int,
        on_fix: FixCallback,
        on_error: ErrorCallback,
    ) -> None:
        self.subscribe_calls.append((interval_ms, fastest_interval_ms))
        if self._fail_reason is not None:
            reason, self._fail_reason = self._fail_reason, None
            raise LocationUnavailable(reason)
        self._on_fix = on_fix
        self._on_error = on_error

    def unsubscribe(self) -> None:
        self.unsubscribe_calls += 1
        self._on_fix = None
        self._on_error = None

    def emit(self, fix: PositionFix) -> bool:
        """Deliver a fix if subscribed.

        Returns:
            True if the fix was delivered
        """
        if self._on_fix is None:
            logger.debug("Dropping fix, no subscriber")
            return False
        self._on_fix(fix)
        return True

    def fail_with(self, reason: str) -> None:
        """Make the next subscribe() raise LocationUnavailable."""
        self._fail_reason = reason

    def report_error(self, reason: str) -> None:
        """Report an outage to the current subscriber."""
        if self._on_error is not None:
            self._on_error(LocationUnavailable(reason))


class MemoryRecordSink:
    """Record sink that keeps submitted records in memory."""

    def __init__(self, fail: bool = False) -> None:
        """Initialize sink.

        Args:
            fail: If True, every submit raises ConnectionError
        """
        self.records: list[ActivityRecord] = []
        self.fail = fail
        self.submit_calls = 0

    def submit(self, record: ActivityRecord) -> str:
        self.submit_calls += 1
        if self.fail:
            raise ConnectionError("Sink unavailable")
        record_id = f"run-{len(self.records) + 1}"
        self.records.append(record.with_id(record_id))
        return record_id


__all__ = ["MemoryRecordSink", "MockClock", "MockLocationSource"]
