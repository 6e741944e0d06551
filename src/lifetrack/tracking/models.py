"""Data models for run tracking.

Defines position fixes, tracker states, observer events and the
finished activity record.
"""

from dataclasses import dataclass, field, replace
from datetime import UTC, datetime
from enum import Enum
from typing import Any

from .metrics import EnergyModel, LinearEnergyModel, average_speed_kmh


@dataclass(frozen=True)
class PositionFix:
    """One geolocation sample.

    Attributes:
        latitude: Latitude in degrees
        longitude: Longitude in degrees
        accuracy_m: Horizontal accuracy radius in meters (lower is better)
        timestamp_ms: Monotonic timestamp when the fix was observed
    """

    latitude: float
    longitude: float
    accuracy_m: float = 0.0
    timestamp_ms: int = 0

    def as_point(self) -> str:
        """Format as the "lat,lon" string stored in a record path."""
        return f"{self.latitude},{self.longitude}"


class RunState(Enum):
    """State of the run tracker."""

    IDLE = "idle"
    RUNNING = "running"
    PAUSED = "paused"
    STOPPED = "stopped"


class StatusKind(Enum):
    """Kind of a status notification."""

    STARTED = "started"
    PAUSED = "paused"
    RESUMED = "resumed"
    STOPPED = "stopped"


@dataclass(frozen=True)
class StatusEvent:
    """Emitted after every successful transition."""

    kind: StatusKind
    distance_m: float
    duration_ms: int


@dataclass(frozen=True)
class ProgressEvent:
    """Emitted after every accepted fix."""

    fix: PositionFix
    distance_m: float
    duration_ms: int


@dataclass(frozen=True)
class TrackSnapshot:
    """Immutable view of the current track."""

    fixes: tuple[PositionFix, ...]
    distance_m: float

    @property
    def is_empty(self) -> bool:
        return not self.fixes


@dataclass(frozen=True)
class ActivityRecord:
    """Summary of one completed run.

    Attributes:
        start_time: When the run started (UTC)
        distance_m: Total distance in meters
        duration_ms: Active duration in milliseconds, paused time excluded
        avg_speed_kmh: Average speed in kilometers per hour
        calories: Estimated energy expenditure
        location_points: Ordered "lat,lon" path points
        notes: Optional free-text note
        is_manual_entry: True if entered by hand rather than GPS-tracked
        user_id: Owner identifier, filled in by the storage layer
        id: Storage document ID
    """

    start_time: datetime
    distance_m: float
    duration_ms: int
    avg_speed_kmh: float
    calories: int
    location_points: tuple[str, ...] = field(default_factory=tuple)
    notes: str = ""
    is_manual_entry: bool = False
    user_id: str = ""
    id: str | None = None

    @classmethod
    def manual(
        cls,
        start_time: datetime,
        distance_m: float,
        duration_ms: int,
        notes: str = "",
        energy_model: EnergyModel | None = None,
    ) -> "ActivityRecord":
        """Build a manually entered run with derived speed and calories."""
        model = energy_model or LinearEnergyModel()
        return cls(
            start_time=start_time,
            distance_m=distance_m,
            duration_ms=duration_ms,
            avg_speed_kmh=average_speed_kmh(distance_m, duration_ms),
            calories=model.estimate(distance_m),
            notes=notes,
            is_manual_entry=True,
        )

    def with_owner(self, user_id: str) -> "ActivityRecord":
        """Return a copy owned by the given user."""
        return replace(self, user_id=user_id)

    def with_id(self, record_id: str) -> "ActivityRecord":
        """Return a copy carrying the storage ID."""
        return replace(self, id=record_id)

    def to_dict(self) -> dict[str, Any]:
        """Convert to dictionary for MongoDB storage."""
        return {
            "user_id": self.user_id,
            "start_time": self.start_time,
            "distance_m": self.distance_m,
            "duration_ms": self.duration_ms,
            "avg_speed_kmh": self.avg_speed_kmh,
            "calories": self.calories,
            "location_points": list(self.location_points),
            "notes": self.notes,
            "is_manual_entry": self.is_manual_entry,
        }

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> "ActivityRecord":
        """Create from MongoDB document."""
        start_time = data.get("start_time", datetime.now(UTC))
        if start_time.tzinfo is None:
            start_time = start_time.replace(tzinfo=UTC)

        return cls(
            id=str(data["_id"]) if data.get("_id") else None,
            user_id=data.get("user_id", ""),
            start_time=start_time,
            distance_m=float(data.get("distance_m", 0.0)),
            duration_ms=int(data.get("duration_ms", 0)),
            avg_speed_kmh=float(data.get("avg_speed_kmh", 0.0)),
            calories=int(data.get("calories", 0)),
            location_points=tuple(data.get("location_points", [])),
            notes=data.get("notes", ""),
            is_manual_entry=data.get("is_manual_entry", False),
        )


__all__ = [
    "ActivityRecord",
    "PositionFix",
    "ProgressEvent",
    "RunState",
    "StatusEvent",
    "StatusKind",
    "TrackSnapshot",
]
