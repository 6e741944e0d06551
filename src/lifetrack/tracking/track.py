"""Track accumulator.

Holds the ordered fixes of the current run and the running distance.
"""

from .geo import distance_between
from .models import PositionFix, TrackSnapshot


class TrackAccumulator:
    """Append-only sequence of accepted fixes with cumulative distance.

    The distance always equals the sum of distances between consecutive
    fixes in the order they were appended.
    """

    def __init__(self) -> None:
        self._fixes: list[PositionFix] = []
        self._distance_m = 0.0

    @property
    def distance_m(self) -> float:
        return self._distance_m

    def __len__(self) -> int:
        return len(self._fixes)

    def reset(self) -> None:
        """Clear all fixes and the distance."""
        self._fixes.clear()
        self._distance_m = 0.0

    def append(self, fix: PositionFix) -> float:
        """Store a fix and add the distance from the previous one.

        Args:
            fix: The accepted fix

        Returns:
            Distance added in meters (0.0 for the first fix)
        """
        increment = 0.0
        if self._fixes:
            increment = distance_between(self._fixes[-1], fix)
            self._distance_m += increment
        self._fixes.append(fix)
        return increment

    def snapshot(self) -> TrackSnapshot:
        """Copy of the current fixes and distance."""
        return TrackSnapshot(fixes=tuple(self._fixes), distance_m=self._distance_m)


__all__ = ["TrackAccumulator"]
