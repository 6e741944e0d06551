"""Run tracker state machine.

Coordinates start/pause/resume/stop, feeds accepted fixes into the track,
keeps active time, publishes notifications and hands the finished record
to the record sink.
"""

import logging
import math
import threading
from concurrent.futures import Executor, Future, ThreadPoolExecutor
from dataclasses import dataclass, field
from datetime import datetime
from enum import Enum
from typing import Protocol

from lifetrack.config import TrackingConfig

from .clock import Clock, SystemClock
from .errors import (
    AlreadyPaused,
    InvalidStateTransition,
    LocationUnavailable,
    NotPaused,
    PersistenceFailure,
    TrackingError,
)
from .events import QueuedEventBus, TrackingObserver
from .location import LocationSource
from .metrics import EnergyModel, LinearEnergyModel, average_speed_kmh
from .models import (
    ActivityRecord,
    PositionFix,
    ProgressEvent,
    RunState,
    StatusEvent,
    StatusKind,
    TrackSnapshot,
)
from .timer import ActivityTimer
from .track import TrackAccumulator

logger = logging.getLogger(__name__)


class Command(Enum):
    """Commands accepted from the controlling UI."""

    START = "start"
    PAUSE = "pause"
    RESUME = "resume"
    STOP = "stop"


# States each command may be issued from
ALLOWED_FROM: dict[Command, frozenset[RunState]] = {
    Command.START: frozenset({RunState.IDLE, RunState.STOPPED}),
    Command.PAUSE: frozenset({RunState.RUNNING}),
    Command.RESUME: frozenset({RunState.PAUSED}),
    Command.STOP: frozenset({RunState.RUNNING, RunState.PAUSED}),
}


class RecordSink(Protocol):
    """Persistence boundary for finished runs."""

    def submit(self, record: ActivityRecord) -> str | None:
        """Store a finished record and return its ID.

        Raises:
            Exception: Any failure to store the record
        """
        ...


@dataclass
class TransitionResult:
    """Outcome of a tracker command.

    Attributes:
        ok: False if the command was rejected
        state: Tracker state after the command
        error: The rejection, if any
        record: Record assembled by a successful stop, if any
        future: Pending persistence of that record
    """

    ok: bool
    state: RunState
    error: TrackingError | None = None
    record: ActivityRecord | None = None
    future: "Future[str | None] | None" = None


@dataclass
class TrackingSession:
    """All mutable state of one run, owned by the tracker."""

    state: RunState = RunState.IDLE
    track: TrackAccumulator = field(default_factory=TrackAccumulator)
    timer: ActivityTimer = field(default_factory=ActivityTimer)
    start_time: datetime | None = None
    rejected_fixes: int = 0


def assemble_record(
    snapshot: TrackSnapshot,
    start_time: datetime,
    duration_ms: int,
    energy_model: EnergyModel,
) -> ActivityRecord:
    """Build the finished record of a GPS-tracked run."""
    return ActivityRecord(
        start_time=start_time,
        distance_m=snapshot.distance_m,
        duration_ms=duration_ms,
        avg_speed_kmh=average_speed_kmh(snapshot.distance_m, duration_ms),
        calories=energy_model.estimate(snapshot.distance_m),
        location_points=tuple(fix.as_point() for fix in snapshot.fixes),
    )


class RunTracker:
    """Tracks a single run from start to stop.

    All commands and fix deliveries are serialized by one lock, so they are
    processed in the order received. Notifications are queued after the
    state they describe is in place and delivered in that order on a
    dispatcher thread, so observers never run on the delivery thread or
    under the lock. Storing the finished record runs on a
    background worker; its failure is published as PersistenceFailure and
    the record is kept for retry_pending().
    """

    def __init__(
        self,
        location_source: LocationSource,
        sink: RecordSink,
        clock: Clock | None = None,
        config: TrackingConfig | None = None,
        energy_model: EnergyModel | None = None,
        executor: Executor | None = None,
    ) -> None:
        """Initialize tracker.

        Args:
            location_source: Source of position fixes
            sink: Where finished records are stored
            clock: Time source (defaults to the system clock)
            config: Location and fix acceptance settings
            energy_model: Energy estimate strategy (defaults to 60 per km)
            executor: Runs record persistence (defaults to one worker thread)
        """
        self._source = location_source
        self._sink = sink
        self._clock = clock or SystemClock()
        self._config = config or TrackingConfig()
        self._energy_model = energy_model or LinearEnergyModel()
        self._owns_executor = executor is None
        self._executor = executor or ThreadPoolExecutor(
            max_workers=1, thread_name_prefix="lifetrack-persist"
        )

        self._lock = threading.RLock()
        self._session = TrackingSession()
        self._events = QueuedEventBus()
        self._pending: list[ActivityRecord] = []
        self._subscribed = False
        self._closed = False

    # -- observers -------------------------------------------------------

    def add_observer(self, observer: TrackingObserver) -> None:
        self._events.subscribe(observer)

    def remove_observer(self, observer: TrackingObserver) -> None:
        self._events.unsubscribe(observer)

    def flush_events(self, timeout: float | None = None) -> bool:
        """Wait until observers have received every published notification.

        Returns:
            False if the timeout expired first
        """
        return self._events.flush(timeout)

    # -- read side -------------------------------------------------------

    @property
    def state(self) -> RunState:
        with self._lock:
            return self._session.state

    @property
    def rejected_fixes(self) -> int:
        """Fixes dropped by the accuracy threshold in the current run."""
        with self._lock:
            return self._session.rejected_fixes

    @property
    def pending_records(self) -> list[ActivityRecord]:
        """Finished records whose persistence failed."""
        with self._lock:
            return self._pending.copy()

    def snapshot(self) -> TrackSnapshot:
        with self._lock:
            return self._session.track.snapshot()

    def elapsed_active_ms(self) -> int:
        with self._lock:
            return self._session.timer.elapsed_active(self._clock.monotonic_ms())

    # -- commands --------------------------------------------------------

    def handle_command(self, command: Command) -> TransitionResult:
        """Dispatch a command to its transition."""
        handlers = {
            Command.START: self.start,
            Command.PAUSE: self.pause,
            Command.RESUME: self.resume,
            Command.STOP: self.stop,
        }
        return handlers[command]()

    def start(self) -> TransitionResult:
        """Begin a new run from IDLE or STOPPED."""
        with self._lock:
            rejected = self._check(Command.START)
            if rejected:
                return rejected

            session = TrackingSession(state=RunState.RUNNING, start_time=self._clock.now())
            session.timer.reset(self._clock.monotonic_ms())
            self._session = session
            logger.info(f"Run started at {session.start_time.isoformat()}")

            self._subscribe()
            self._publish_status(StatusKind.STARTED)
            return TransitionResult(ok=True, state=session.state)

    def pause(self) -> TransitionResult:
        """Pause a running run; fixes are discarded until resume."""
        with self._lock:
            rejected = self._check(Command.PAUSE)
            if rejected:
                return rejected

            try:
                self._session.timer.begin_pause(self._clock.monotonic_ms())
            except AlreadyPaused as e:
                logger.error(f"Timer out of step with state: {e}")
                self._events.publish_error(e)
                return TransitionResult(ok=False, state=self._session.state, error=e)

            self._session.state = RunState.PAUSED
            self._unsubscribe()
            logger.info("Run paused")

            self._publish_status(StatusKind.PAUSED)
            return TransitionResult(ok=True, state=self._session.state)

    def resume(self) -> TransitionResult:
        """Resume a paused run."""
        with self._lock:
            rejected = self._check(Command.RESUME)
            if rejected:
                return rejected

            try:
                paused_ms = self._session.timer.end_pause(self._clock.monotonic_ms())
            except NotPaused as e:
                logger.error(f"Timer out of step with state: {e}")
                self._events.publish_error(e)
                return TransitionResult(ok=False, state=self._session.state, error=e)

            self._session.state = RunState.RUNNING
            logger.info(f"Run resumed after {paused_ms} ms paused")

            self._subscribe()
            self._publish_status(StatusKind.RESUMED)
            return TransitionResult(ok=True, state=self._session.state)

    def stop(self) -> TransitionResult:
        """Stop the run and submit its record if any fix was recorded."""
        with self._lock:
            rejected = self._check(Command.STOP)
            if rejected:
                return rejected

            session = self._session
            session.state = RunState.STOPPED
            self._unsubscribe()
            duration_ms = session.timer.stop(self._clock.monotonic_ms())
            snapshot = session.track.snapshot()

            logger.info(
                f"Run stopped: {snapshot.distance_m:.1f} m in {duration_ms} ms "
                f"({len(snapshot.fixes)} fixes)"
            )
            self._events.publish_status(
                StatusEvent(
                    kind=StatusKind.STOPPED,
                    distance_m=snapshot.distance_m,
                    duration_ms=duration_ms,
                )
            )

            record: ActivityRecord | None = None
            future: Future[str | None] | None = None
            if not snapshot.is_empty and session.start_time is not None:
                record = assemble_record(
                    snapshot, session.start_time, duration_ms, self._energy_model
                )
                future = self._submit(record)
            else:
                logger.info("Run stopped with no fixes; nothing to save")

            return TransitionResult(
                ok=True, state=session.state, record=record, future=future
            )

    # -- ingestion -------------------------------------------------------

    def on_fix(self, fix: PositionFix) -> None:
        """Accept a fix from the location source.

        Fixes that arrive outside RUNNING are discarded.
        """
        with self._lock:
            session = self._session
            if session.state != RunState.RUNNING:
                logger.debug(f"Discarding fix while {session.state.value}")
                return

            if not all(math.isfinite(v) for v in (fix.latitude, fix.longitude, fix.accuracy_m)):
                session.rejected_fixes += 1
                logger.debug(f"Rejecting non-finite fix {fix}")
                return

            threshold = self._config.max_accuracy_m
            if threshold is not None and fix.accuracy_m > threshold:
                session.rejected_fixes += 1
                logger.debug(f"Rejecting fix with accuracy {fix.accuracy_m} m > {threshold} m")
                return

            session.track.append(fix)
            self._events.publish_progress(
                ProgressEvent(
                    fix=fix,
                    distance_m=session.track.distance_m,
                    duration_ms=session.timer.elapsed_active(self._clock.monotonic_ms()),
                )
            )

    def on_location_error(self, error: LocationUnavailable) -> None:
        """Report that the source cannot currently deliver fixes."""
        logger.warning(str(error))
        self._events.publish_error(error)

    # -- persistence -----------------------------------------------------

    def retry_pending(self) -> list["Future[str | None]"]:
        """Resubmit every record whose persistence failed.

        A closed tracker keeps its pending records and returns no futures.
        """
        with self._lock:
            if self._closed:
                logger.warning(f"Tracker closed; keeping {len(self._pending)} unsaved runs")
                return []
            records, self._pending = self._pending, []
            return [self._submit(record) for record in records]

    def _submit(self, record: ActivityRecord) -> "Future[str | None]":
        # Lock held. A record the executor refuses goes back to pending.
        try:
            return self._executor.submit(self._persist, record)
        except RuntimeError as e:
            failure = PersistenceFailure(record, e)
            self._pending.append(record)
            logger.error(str(failure))
            self._events.publish_error(failure)
            future: Future[str | None] = Future()
            future.set_exception(failure)
            return future

    def _persist(self, record: ActivityRecord) -> str | None:
        try:
            record_id = self._sink.submit(record)
        except Exception as e:
            failure = PersistenceFailure(record, e)
            with self._lock:
                self._pending.append(record)
            logger.error(str(failure))
            self._events.publish_error(failure)
            raise failure from e

        logger.info(f"Saved run {record_id}")
        return record_id

    # -- teardown --------------------------------------------------------

    def close(self) -> None:
        """Stop ingestion and release the location subscription.

        A run still in progress is discarded without being saved. Queued
        notifications are delivered before this returns.
        """
        with self._lock:
            if self._closed:
                return
            self._closed = True
            self._unsubscribe()
            if self._session.state in (RunState.RUNNING, RunState.PAUSED):
                logger.info("Tracker closed mid-run; discarding unsaved track")
                self._session = TrackingSession(state=RunState.STOPPED)

        if self._owns_executor:
            self._executor.shutdown(wait=False)
        self._events.close()

    def __enter__(self) -> "RunTracker":
        return self

    def __exit__(self, exc_type: object, exc_val: object, exc_tb: object) -> None:
        self.close()

    # -- helpers (lock held) ---------------------------------------------

    def _check(self, command: Command) -> TransitionResult | None:
        state = self._session.state
        if not self._closed and state in ALLOWED_FROM[command]:
            return None

        error = InvalidStateTransition(command.value, state)
        logger.warning(str(error))
        self._events.publish_error(error)
        return TransitionResult(ok=False, state=state, error=error)

    def _subscribe(self) -> None:
        try:
            self._source.subscribe(
                self._config.location_interval_ms,
                self._config.fastest_location_interval_ms,
                self.on_fix,
                self.on_location_error,
            )
            self._subscribed = True
        except LocationUnavailable as e:
            self.on_location_error(e)

    def _unsubscribe(self) -> None:
        if self._subscribed:
            self._source.unsubscribe()
            self._subscribed = False

    def _publish_status(self, kind: StatusKind) -> None:
        session = self._session
        self._events.publish_status(
            StatusEvent(
                kind=kind,
                distance_m=session.track.distance_m,
                duration_ms=session.timer.elapsed_active(self._clock.monotonic_ms()),
            )
        )


__all__ = [
    "ALLOWED_FROM",
    "Command",
    "RecordSink",
    "RunTracker",
    "TrackingSession",
    "TransitionResult",
    "assemble_record",
]
