"""Clock abstraction for the tracker."""

import time
from datetime import UTC, datetime
from typing import Protocol


class Clock(Protocol):
    """Source of time for the tracker."""

    def monotonic_ms(self) -> int:
        """Monotonic milliseconds, used for all elapsed-time arithmetic."""
        ...

    def now(self) -> datetime:
        """Current UTC wall time, used for the record start instant."""
        ...


class SystemClock:
    """Clock backed by the host's monotonic and wall clocks."""

    def monotonic_ms(self) -> int:
        return int(time.monotonic() * 1000)

    def now(self) -> datetime:
        return datetime.now(UTC)


__all__ = ["Clock", "SystemClock"]
