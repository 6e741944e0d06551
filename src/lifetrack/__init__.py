"""LifeTrack - GPS run tracking for the life. lifestyle tracker.

LifeTrack provides:
- A run tracker with start/pause/resume/stop and pause-aware timing
- Distance, average speed and energy estimates from position fixes
- MongoDB storage of finished runs
- Claude-generated coaching text for finished runs

Usage:
    python -m lifetrack runs/morning.csv --profile dev
"""

__version__ = "0.1.0"

from .config import LifeTrackConfig
from .config.loader import load_config
from .tracking import ActivityRecord, PositionFix, RunState, RunTracker

__all__ = [
    "ActivityRecord",
    "LifeTrackConfig",
    "PositionFix",
    "RunState",
    "RunTracker",
    "__version__",
    "load_config",
]
