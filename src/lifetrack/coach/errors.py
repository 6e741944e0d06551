"""Coach failures.

Each failure names the model that was asked and whether asking again
later can succeed. RunCoach retries only retryable failures.
"""

# Status codes worth asking again: rate limit, overload and server faults
RETRYABLE_STATUS_CODES = frozenset({408, 409, 429, 500, 502, 503, 504, 529})


class CoachError(Exception):
    """A coaching message could not be generated."""

    retryable = False

    def __init__(self, message: str, model: str | None = None) -> None:
        super().__init__(message)
        self.model = model


class CoachTimeoutError(CoachError):
    """The model did not answer in time."""

    retryable = True


class CoachConnectivityError(CoachError):
    """The API could not be reached."""

    retryable = True


class CoachAuthError(CoachError):
    """The API key was refused. Asking again cannot help."""


class CoachAPIError(CoachError):
    """The API answered with an error status."""

    def __init__(
        self, message: str, status_code: int | None = None, model: str | None = None
    ) -> None:
        super().__init__(message, model=model)
        self.status_code = status_code
        self.retryable = status_code in RETRYABLE_STATUS_CODES


__all__ = [
    "RETRYABLE_STATUS_CODES",
    "CoachAPIError",
    "CoachAuthError",
    "CoachConnectivityError",
    "CoachError",
    "CoachTimeoutError",
]
