"""Run tracking module for LifeTrack.

Provides the GPS run tracker: state machine, track accumulation,
active-time accounting and derived metrics.
"""

from .clock import Clock, SystemClock
from .errors import (
    AlreadyPaused,
    InvalidStateTransition,
    LocationUnavailable,
    NotPaused,
    PersistenceFailure,
    TrackingError,
)
from .events import CallbackObserver, EventBus, QueuedEventBus, TrackingObserver
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
from .tracker import Command, RecordSink, RunTracker, TransitionResult

__all__ = [
    "ActivityRecord",
    "ActivityTimer",
    "AlreadyPaused",
    "CallbackObserver",
    "Clock",
    "Command",
    "EnergyModel",
    "EventBus",
    "InvalidStateTransition",
    "LinearEnergyModel",
    "LocationSource",
    "LocationUnavailable",
    "NotPaused",
    "PersistenceFailure",
    "PositionFix",
    "ProgressEvent",
    "QueuedEventBus",
    "RecordSink",
    "RunState",
    "RunTracker",
    "StatusEvent",
    "StatusKind",
    "SystemClock",
    "TrackAccumulator",
    "TrackSnapshot",
    "TrackingError",
    "TrackingObserver",
    "TransitionResult",
    "average_speed_kmh",
]
