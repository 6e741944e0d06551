"""Observer channel for tracker notifications.

Carries status events, progress events and errors to registered observers.
"""

import logging
import threading
from collections.abc import Callable
from queue import Queue
from typing import Protocol

from .errors import TrackingError
from .models import ProgressEvent, StatusEvent

logger = logging.getLogger(__name__)


class TrackingObserver(Protocol):
    """Receives notifications from the run tracker."""

    def on_status(self, event: StatusEvent) -> None:
        """Called after a transition has completed."""
        ...

    def on_progress(self, event: ProgressEvent) -> None:
        """Called after a fix has been accepted."""
        ...

    def on_error(self, error: TrackingError) -> None:
        """Called when a command is rejected or a collaborator fails."""
        ...


class CallbackObserver:
    """Observer built from optional plain callables."""

    def __init__(
        self,
        on_status: Callable[[StatusEvent], None] | None = None,
        on_progress: Callable[[ProgressEvent], None] | None = None,
        on_error: Callable[[TrackingError], None] | None = None,
    ) -> None:
        self._on_status = on_status
        self._on_progress = on_progress
        self._on_error = on_error

    def on_status(self, event: StatusEvent) -> None:
        if self._on_status:
            self._on_status(event)

    def on_progress(self, event: ProgressEvent) -> None:
        if self._on_progress:
            self._on_progress(event)

    def on_error(self, error: TrackingError) -> None:
        if self._on_error:
            self._on_error(error)


class EventBus:
    """Publishes tracker notifications to observers in registration order.

    Delivery happens on the publishing thread. An observer that raises is
    logged and skipped; the remaining observers still receive the event.
    """

    def __init__(self) -> None:
        self._observers: list[TrackingObserver] = []
        self._lock = threading.Lock()

    def subscribe(self, observer: TrackingObserver) -> None:
        """Register an observer."""
        with self._lock:
            if observer not in self._observers:
                self._observers.append(observer)

    def unsubscribe(self, observer: TrackingObserver) -> None:
        """Remove an observer. Unknown observers are ignored."""
        with self._lock:
            if observer in self._observers:
                self._observers.remove(observer)

    @property
    def observers(self) -> list[TrackingObserver]:
        with self._lock:
            return self._observers.copy()

    def publish_status(self, event: StatusEvent) -> None:
        self._dispatch("on_status", event)

    def publish_progress(self, event: ProgressEvent) -> None:
        self._dispatch("on_progress", event)

    def publish_error(self, error: TrackingError) -> None:
        self._dispatch("on_error", error)

    def _dispatch(self, method: str, payload: object) -> None:
        for observer in self.observers:
            self._deliver(getattr(observer, method), payload)

    @staticmethod
    def _deliver(handler: Callable[[object], None], payload: object) -> None:
        try:
            handler(payload)
        except Exception as e:
            logger.error(f"Observer {handler!r} failed: {e}")


class QueuedEventBus(EventBus):
    """Event bus that hands delivery to a single dispatcher thread.

    Publishing only enqueues, so a slow observer never holds up the
    publisher. Events leave the queue in the order they were published.
    After close() the bus falls back to delivering on the publishing thread.
    """

    def __init__(self, name: str = "lifetrack-events") -> None:
        super().__init__()
        self._name = name
        self._queue: Queue[tuple[str, object] | None] = Queue()
        self._thread: threading.Thread | None = None
        self._idle = threading.Condition()
        self._outstanding = 0
        self._closed = False

    def _dispatch(self, method: str, payload: object) -> None:
        with self._idle:
            if self._closed:
                queued = False
            else:
                queued = True
                self._outstanding += 1
                self._ensure_thread()
                self._queue.put((method, payload))
        if not queued:
            super()._dispatch(method, payload)

    def flush(self, timeout: float | None = None) -> bool:
        """Wait until every queued event has been delivered.

        Returns:
            False if the timeout expired first
        """
        if threading.current_thread() is self._thread:
            return True
        with self._idle:
            return self._idle.wait_for(lambda: self._outstanding == 0, timeout)

    def close(self, timeout: float | None = None) -> None:
        """Deliver what is queued, then stop the dispatcher thread."""
        with self._idle:
            if self._closed:
                return
            self._closed = True
            thread = self._thread
            if thread is not None:
                self._queue.put(None)
        if thread is not None and thread is not threading.current_thread():
            thread.join(timeout)

    def _ensure_thread(self) -> None:
        # Caller holds self._idle
        if self._thread is None:
            self._thread = threading.Thread(target=self._run, name=self._name, daemon=True)
            self._thread.start()

    def _run(self) -> None:
        while True:
            item = self._queue.get()
            if item is None:
                return
            method, payload = item
            try:
                super()._dispatch(method, payload)
            finally:
                with self._idle:
                    self._outstanding -= 1
                    if self._outstanding == 0:
                        self._idle.notify_all()


__all__ = ["CallbackObserver", "EventBus", "QueuedEventBus", "TrackingObserver"]
