"""Error types for run tracking.

Custom exceptions for the tracking state machine and its collaborators.
"""

from typing import TYPE_CHECKING

if TYPE_CHECKING:
    from .models import ActivityRecord, RunState


class TrackingError(Exception):
    """Base exception for run tracking errors."""

    pass


class InvalidStateTransition(TrackingError):
    """Raised when a command is issued in a state that does not permit it."""

    def __init__(self, command: str, state: "RunState") -> None:
        """Initialize transition error.

        Args:
            command: Name of the rejected command.
            state: State the tracker was in when the command arrived.
        """
        super().__init__(f"Cannot {command} while {state.value}")
        self.command = command
        self.state = state


class AlreadyPaused(TrackingError):
    """Raised when a pause is begun while another is still open."""

    pass


class NotPaused(TrackingError):
    """Raised when a pause is ended but none is open."""

    pass


class PersistenceFailure(TrackingError):
    """Raised when the record sink fails to store a finished run."""

    def __init__(self, record: "ActivityRecord", cause: Exception) -> None:
        """Initialize persistence error.

        Args:
            record: The finished record that could not be stored.
            cause: The underlying sink error.
        """
        super().__init__(f"Failed to persist run started at {record.start_time}: {cause}")
        self.record = record
        self.cause = cause


class LocationUnavailable(TrackingError):
    """Raised when the location source cannot deliver fixes."""

    def __init__(self, reason: str) -> None:
        """Initialize location error.

        Args:
            reason: Why fixes are unavailable (e.g. permission denied).
        """
        super().__init__(f"Location unavailable: {reason}")
        self.reason = reason


__all__ = [
    "AlreadyPaused",
    "InvalidStateTransition",
    "LocationUnavailable",
    "NotPaused",
    "PersistenceFailure",
    "TrackingError",
]
