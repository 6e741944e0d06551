"""Coach module for LifeTrack.

Generates motivational and run summary text through the Claude API.
"""

from .client import CoachClient, CoachClientConfig, CoachResponse
from .coach import RunCoach, TextGenerator
from .errors import (
    CoachAPIError,
    CoachAuthError,
    CoachConnectivityError,
    CoachError,
    CoachTimeoutError,
)
from .prompts import build_motivational_prompt, build_run_summary_prompt, format_duration

__all__ = [
    "CoachAPIError",
    "CoachAuthError",
    "CoachClient",
    "CoachClientConfig",
    "CoachConnectivityError",
    "CoachError",
    "CoachResponse",
    "CoachTimeoutError",
    "RunCoach",
    "TextGenerator",
    "build_motivational_prompt",
    "build_run_summary_prompt",
    "format_duration",
]
