"""Scripted replay of a run.

Drives a tracker from a CSV script of commands and fixes, using the mock
clock and location source so a recorded session can be reproduced exactly.

Script columns:
    offset_s: seconds since the start of the script
    action:   start | pause | resume | stop | fix
    lat, lon, accuracy: only read for fix rows
"""

import csv
import logging
import math
from collections.abc import Iterable
from dataclasses import dataclass
from pathlib import Path

from .mock import MockClock, MockLocationSource
from .models import PositionFix
from .tracker import Command, RunTracker, TransitionResult

logger = logging.getLogger(__name__)

FIX_ACTION = "fix"
REQUIRED_COLUMNS = ("offset_s", "action")


@dataclass(frozen=True)
class ReplayStep:
    """One scripted command or fix."""

    offset_ms: int
    action: str
    latitude: float = 0.0
    longitude: float = 0.0
    accuracy_m: float = 0.0


def _text(row: dict[str, str | None], column: str) -> str:
    # DictReader fills the columns of a short row with None
    value = row.get(column)
    if value is None or not value.strip():
        raise ValueError(f"Missing {column}")
    return value.strip()


def _number(row: dict[str, str | None], column: str) -> float:
    value = float(_text(row, column))
    if not math.isfinite(value):
        raise ValueError(f"{column} is not a finite number: {value}")
    return value


def parse_step(row: dict[str, str | None]) -> ReplayStep:
    """Parse one CSV row.

    Raises:
        ValueError: If a field is missing, the action is unknown, or a
            number is invalid
    """
    action = _text(row, "action").lower()
    offset_s = _number(row, "offset_s")
    if offset_s < 0:
        raise ValueError(f"Negative offset: {offset_s}")
    offset_ms = int(round(offset_s * 1000))

    if action == FIX_ACTION:
        accuracy = row.get("accuracy")
        return ReplayStep(
            offset_ms=offset_ms,
            action=action,
            latitude=_number(row, "lat"),
            longitude=_number(row, "lon"),
            accuracy_m=_number(row, "accuracy") if accuracy and accuracy.strip() else 0.0,
        )

    Command(action)  # validates the name
    return ReplayStep(offset_ms=offset_ms, action=action)


def load_steps(path: str | Path) -> list[ReplayStep]:
    """Load a replay script sorted by offset.

    Raises:
        ValueError: If a required column is missing or a row is invalid
    """
    p = Path(path)
    with p.open("r", encoding="utf-8", newline="") as f:
        reader = csv.DictReader(f)
        fieldnames = reader.fieldnames or []
        missing = [c for c in REQUIRED_COLUMNS if c not in fieldnames]
        if missing:
            raise ValueError(f"Replay script {p} is missing columns: {', '.join(missing)}")

        steps = []
        for line_no, row in enumerate(reader, start=2):
            try:
                steps.append(parse_step(row))
            except (KeyError, TypeError, ValueError) as e:
                raise ValueError(f"{p}:{line_no}: invalid row: {e}") from e

    # Stable sort keeps the file order for equal offsets
    return sorted(steps, key=lambda s: s.offset_ms)


def replay(
    steps: Iterable[ReplayStep],
    tracker: RunTracker,
    clock: MockClock,
    source: MockLocationSource,
) -> list[TransitionResult]:
    """Play steps into the tracker.

    Args:
        steps: Steps in offset order
        tracker: Tracker wired to clock and source
        clock: Clock advanced to each step's offset
        source: Source that delivers the fix steps

    Returns:
        Results of every command step, in order
    """
    base_ms = clock.monotonic_ms()
    results = []
    for step in steps:
        clock.set(base_ms + step.offset_ms)
        if step.action == FIX_ACTION:
            fix = PositionFix(
                latitude=step.latitude,
                longitude=step.longitude,
                accuracy_m=step.accuracy_m,
                timestamp_ms=clock.monotonic_ms(),
            )
            source.emit(fix)
        else:
            result = tracker.handle_command(Command(step.action))
            if not result.ok:
                logger.warning(f"Step at {step.offset_ms} ms rejected: {result.error}")
            results.append(result)
    return results


__all__ = ["ReplayStep", "load_steps", "parse_step", "replay"]
