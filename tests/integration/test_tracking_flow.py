"""Integration tests for the run tracking flow.

Drives the tracker from a background location thread and stores the
finished run through the MongoDB repository.
"""

import threading
from datetime import UTC, datetime
from pathlib import Path

import pytest
from conftest import RecordingObserver
from mongomock import MongoClient

from lifetrack.config import TrackingConfig
from lifetrack.storage import RepositoryRecordSink, RunRepository
from lifetrack.tracking import (
    LinearEnergyModel,
    PositionFix,
    RunState,
    RunTracker,
    StatusKind,
)
from lifetrack.tracking.mock import MemoryRecordSink, MockClock, MockLocationSource
from lifetrack.tracking.replay import load_steps, replay


@pytest.fixture
def repository() -> RunRepository:
    return RunRepository(MongoClient()["lifetrack_test"])


class TestThreadedDelivery:
    """Fixes delivered from another thread while commands arrive."""

    def test_fixes_from_worker_thread_keep_order(self) -> None:
        clock = MockClock()
        source = MockLocationSource()
        sink = MemoryRecordSink()
        observer = RecordingObserver()
        fixes = [PositionFix(latitude=0.0, longitude=i * 0.0001) for i in range(200)]

        with RunTracker(source, sink, clock=clock) as tracker:
            observer.attach(tracker)
            tracker.start()

            worker = threading.Thread(target=lambda: [source.emit(f) for f in fixes])
            worker.start()
            worker.join(timeout=5)

            result = tracker.stop()
            result.future.result(timeout=5)

        assert [event.fix for event in observer.progress] == fixes
        distances = [event.distance_m for event in observer.progress]
        assert distances == sorted(distances)
        assert len(sink.records[0].location_points) == 200

    def test_stop_racing_fix_delivery(self) -> None:
        """Test no fix is accepted after the stop notification."""
        clock = MockClock()
        source = MockLocationSource()
        observer = RecordingObserver()

        with RunTracker(source, MemoryRecordSink(), clock=clock) as tracker:
            observer.attach(tracker)
            tracker.start()
            # Capture the callback so delivery continues after unsubscribe
            on_fix = tracker.on_fix

            def deliver() -> None:
                for i in range(500):
                    on_fix(PositionFix(latitude=0.0, longitude=i * 0.00001))

            worker = threading.Thread(target=deliver)
            worker.start()
            result = tracker.stop()
            count_at_stop = len(observer.progress)
            worker.join(timeout=5)

            if result.future is not None:
                result.future.result(timeout=5)

        assert len(observer.progress) == count_at_stop
        assert tracker.state == RunState.STOPPED
        if result.record is not None:
            assert len(result.record.location_points) == count_at_stop


class TestReplayToMongo:
    """Replay a script and store the run in MongoDB."""

    def test_sample_run_is_stored(
        self, sample_script: Path, repository: RunRepository
    ) -> None:
        clock = MockClock()
        source = MockLocationSource()
        sink = RepositoryRecordSink(repository, user_id="runner-1")
        observer = RecordingObserver()

        with RunTracker(
            source,
            sink,
            clock=clock,
            config=TrackingConfig(max_accuracy_m=50.0),
            energy_model=LinearEnergyModel(60.0),
        ) as tracker:
            observer.attach(tracker)
            results = replay(load_steps(sample_script), tracker, clock, source)
            record_id = results[-1].future.result(timeout=5)

        stored = repository.get_by_id(record_id)
        assert stored is not None
        assert stored.user_id == "runner-1"
        assert stored.duration_ms == 20_000
        assert stored.distance_m == pytest.approx(22.239, abs=0.01)
        assert stored.start_time == datetime(2024, 1, 1, 7, 0, tzinfo=UTC)
        assert stored.location_points == ("0.0,0.0", "0.0,0.0001", "0.0,0.0002")
        assert not stored.is_manual_entry
        assert observer.status_kinds() == [
            StatusKind.STARTED,
            StatusKind.PAUSED,
            StatusKind.RESUMED,
            StatusKind.STOPPED,
        ]

        stats = repository.stats("runner-1")
        assert stats.total_runs == 1
        assert stats.total_duration_ms == 20_000

    def test_two_runs_in_one_session(self, repository: RunRepository) -> None:
        clock = MockClock()
        source = MockLocationSource()
        sink = RepositoryRecordSink(repository, user_id="runner-2")

        with RunTracker(source, sink, clock=clock) as tracker:
            futures = []
            for _ in range(2):
                tracker.start()
                source.emit(PositionFix(latitude=0.0, longitude=0.0))
                clock.advance(60_000)
                source.emit(PositionFix(latitude=0.0, longitude=0.001))
                futures.append(tracker.stop().future)
                clock.advance(60_000)
            ids = [f.result(timeout=5) for f in futures]

        runs = repository.find_for_user("runner-2")
        assert len(runs) == 2
        assert {r.id for r in runs} == set(ids)
        assert runs[0].start_time > runs[1].start_time
