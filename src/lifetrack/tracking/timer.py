"""Active-time accounting for a run.

Tracks the start instant and accumulated pause time so that elapsed
active time excludes every pause, including one that is still open.
"""

from .errors import AlreadyPaused, NotPaused


class ActivityTimer:
    """Elapsed active time with pause accounting.

    All instants are monotonic milliseconds supplied by the caller.

    Attributes:
        started_at_ms: When the run started (None before the first reset)
        paused_total_ms: Sum of all completed pauses
        paused_at_ms: When the open pause began (None when not paused)
        stopped_at_ms: When the run was stopped (None while live)
    """

    def __init__(self) -> None:
        self.started_at_ms: int | None = None
        self.paused_total_ms = 0
        self.paused_at_ms: int | None = None
        self.stopped_at_ms: int | None = None

    @property
    def is_paused(self) -> bool:
        return self.paused_at_ms is not None

    def reset(self, now_ms: int) -> None:
        """Start timing a new run at now_ms."""
        self.started_at_ms = now_ms
        self.paused_total_ms = 0
        self.paused_at_ms = None
        self.stopped_at_ms = None

    def begin_pause(self, now_ms: int) -> None:
        """Open a pause.

        Raises:
            AlreadyPaused: If a pause is already open
        """
        if self.paused_at_ms is not None:
            raise AlreadyPaused(f"Pause already open since {self.paused_at_ms} ms")
        self.paused_at_ms = now_ms

    def end_pause(self, now_ms: int) -> int:
        """Close the open pause and fold it into the paused total.

        Returns:
            Length of the pause that was closed, in milliseconds

        Raises:
            NotPaused: If no pause is open
        """
        if self.paused_at_ms is None:
            raise NotPaused("No pause is open")
        interval = max(0, now_ms - self.paused_at_ms)
        self.paused_total_ms += interval
        self.paused_at_ms = None
        return interval

    def stop(self, now_ms: int) -> int:
        """Freeze the timer and return the final active duration."""
        self.stopped_at_ms = now_ms
        return self.elapsed_active(now_ms)

    def elapsed_active(self, now_ms: int) -> int:
        """Active duration in milliseconds at now_ms.

        Frozen while paused and after stop; never negative.
        """
        if self.started_at_ms is None:
            return 0

        if self.stopped_at_ms is not None:
            now_ms = self.stopped_at_ms

        elapsed = now_ms - self.started_at_ms - self.paused_total_ms
        if self.paused_at_ms is not None:
            elapsed -= max(0, now_ms - self.paused_at_ms)
        return max(0, elapsed)


__all__ = ["ActivityTimer"]
