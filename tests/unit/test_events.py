"""Unit tests for the observer channel."""

import threading

from conftest import RecordingObserver

from lifetrack.tracking import (
    CallbackObserver,
    EventBus,
    InvalidStateTransition,
    PositionFix,
    ProgressEvent,
    QueuedEventBus,
    RunState,
    StatusEvent,
    StatusKind,
)


def started() -> StatusEvent:
    return StatusEvent(kind=StatusKind.STARTED, distance_m=0.0, duration_ms=0)


class TestEventBus:
    """Tests for EventBus."""

    def test_delivers_to_all_observers_in_order(self) -> None:
        bus = EventBus()
        calls: list[str] = []
        bus.subscribe(CallbackObserver(on_status=lambda e: calls.append("first")))
        bus.subscribe(CallbackObserver(on_status=lambda e: calls.append("second")))

        bus.publish_status(started())

        assert calls == ["first", "second"]

    def test_subscribe_is_idempotent(self) -> None:
        bus = EventBus()
        observer = RecordingObserver()
        bus.subscribe(observer)
        bus.subscribe(observer)

        bus.publish_status(started())

        assert len(observer.statuses) == 1

    def test_unsubscribe_stops_delivery(self) -> None:
        bus = EventBus()
        observer = RecordingObserver()
        bus.subscribe(observer)
        bus.unsubscribe(observer)

        bus.publish_status(started())

        assert observer.statuses == []
        assert bus.observers == []

    def test_unsubscribe_unknown_is_ignored(self) -> None:
        EventBus().unsubscribe(RecordingObserver())

    def test_raising_observer_is_skipped(self) -> None:
        bus = EventBus()
        observer = RecordingObserver()

        def explode(event: ProgressEvent) -> None:
            raise RuntimeError("observer failure")

        bus.subscribe(CallbackObserver(on_progress=explode))
        bus.subscribe(observer)

        event = ProgressEvent(fix=PositionFix(0.0, 0.0), distance_m=0.0, duration_ms=0)
        bus.publish_progress(event)

        assert observer.progress == [event]

    def test_errors_are_routed(self) -> None:
        bus = EventBus()
        observer = RecordingObserver()
        bus.subscribe(observer)
        error = InvalidStateTransition("stop", RunState.IDLE)

        bus.publish_error(error)

        assert observer.errors == [error]

    def test_observers_property_is_a_copy(self) -> None:
        bus = EventBus()
        bus.observers.append(RecordingObserver())
        assert bus.observers == []


class TestQueuedEventBus:
    """Tests for QueuedEventBus."""

    def test_delivers_in_order_off_the_publishing_thread(self) -> None:
        bus = QueuedEventBus()
        threads: list[threading.Thread] = []
        seen: list[object] = []

        def record(event: object) -> None:
            threads.append(threading.current_thread())
            seen.append(event)

        bus.subscribe(CallbackObserver(on_status=record, on_error=record))
        events = [started(), InvalidStateTransition("pause", RunState.IDLE), started()]
        bus.publish_status(events[0])
        bus.publish_error(events[1])
        bus.publish_status(events[2])

        assert bus.flush(timeout=5)
        assert seen == events
        assert threading.current_thread() not in threads
        bus.close()

    def test_publish_returns_while_observer_is_busy(self) -> None:
        bus = QueuedEventBus()
        release = threading.Event()
        bus.subscribe(CallbackObserver(on_status=lambda e: release.wait(5)))

        bus.publish_status(started())
        bus.publish_status(started())

        assert not bus.flush(timeout=0.05)
        release.set()
        assert bus.flush(timeout=5)
        bus.close()

    def test_close_drains_then_delivers_inline(self) -> None:
        bus = QueuedEventBus()
        observer = RecordingObserver()
        bus.subscribe(observer)
        bus.publish_status(started())

        bus.close()
        assert len(observer.statuses) == 1

        bus.publish_status(started())
        assert len(observer.statuses) == 2

    def test_flush_without_events(self) -> None:
        assert QueuedEventBus().flush(timeout=0)


class TestCallbackObserver:
    """Tests for CallbackObserver."""

    def test_missing_callbacks_are_noops(self) -> None:
        observer = CallbackObserver()
        observer.on_status(started())
        observer.on_error(InvalidStateTransition("pause", RunState.IDLE))

    def test_forwards_to_callbacks(self) -> None:
        seen: list[object] = []
        observer = CallbackObserver(on_status=seen.append, on_error=seen.append)
        event = started()
        error = InvalidStateTransition("pause", RunState.IDLE)

        observer.on_status(event)
        observer.on_error(error)

        assert seen == [event, error]


def test_invalid_transition_message() -> None:
    error = InvalidStateTransition("stop", RunState.IDLE)
    assert str(error) == "Cannot stop while idle"
    assert error.command == "stop"
    assert error.state == RunState.IDLE
