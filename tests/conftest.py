"""Shared fixtures for LifeTrack tests."""

from collections.abc import Iterator
from pathlib import Path

import pytest

from lifetrack.tracking import (
    ProgressEvent,
    RunTracker,
    StatusEvent,
    StatusKind,
    TrackingError,
)
from lifetrack.tracking.mock import MemoryRecordSink, MockClock, MockLocationSource

FIXTURES_DIR = Path(__file__).parent / "fixtures"


class RecordingObserver:
    """Observer that keeps every notification it receives.

    Once attached to a tracker, reading a list first waits for the tracker's
    queued notifications to be delivered.
    """

    def __init__(self) -> None:
        self._statuses: list[StatusEvent] = []
        self._progress: list[ProgressEvent] = []
        self._errors: list[TrackingError] = []
        self._tracker: RunTracker | None = None

    def attach(self, tracker: RunTracker) -> "RecordingObserver":
        tracker.add_observer(self)
        self._tracker = tracker
        return self

    def _sync(self) -> None:
        if self._tracker is not None:
            assert self._tracker.flush_events(timeout=5)

    @property
    def statuses(self) -> list[StatusEvent]:
        self._sync()
        return self._statuses

    @property
    def progress(self) -> list[ProgressEvent]:
        self._sync()
        return self._progress

    @property
    def errors(self) -> list[TrackingError]:
        self._sync()
        return self._errors

    def on_status(self, event: StatusEvent) -> None:
        self._statuses.append(event)

    def on_progress(self, event: ProgressEvent) -> None:
        self._progress.append(event)

    def on_error(self, error: TrackingError) -> None:
        self._errors.append(error)

    def status_kinds(self) -> list[StatusKind]:
        return [event.kind for event in self.statuses]



@pytest.fixture
def clock() -> MockClock:
    """Clock starting at 0 ms."""
    return MockClock()


@pytest.fixture
def source() -> MockLocationSource:
    """Location source controlled by the test."""
    return MockLocationSource()


@pytest.fixture
def sink() -> MemoryRecordSink:
    """In-memory record sink."""
    return MemoryRecordSink()


@pytest.fixture
def observer() -> RecordingObserver:
    """Observer recording all notifications."""
    return RecordingObserver()


@pytest.fixture
def tracker(
    source: MockLocationSource,
    sink: MemoryRecordSink,
    clock: MockClock,
    observer: RecordingObserver,
) -> Iterator[RunTracker]:
    """Tracker wired to the mock collaborators."""
    tracker = RunTracker(source, sink, clock=clock)
    observer.attach(tracker)
    yield tracker
    tracker.close()


@pytest.fixture
def sample_script() -> Path:
    """Replay script of a short run with one pause."""
    return FIXTURES_DIR / "sample_run.csv"
