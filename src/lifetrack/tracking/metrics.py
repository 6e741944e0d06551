"""Derived run metrics.

Average speed and energy expenditure from distance and active duration.
"""

from typing import Protocol

DEFAULT_KCAL_PER_KM = 60.0


def average_speed_kmh(distance_m: float, duration_ms: int) -> float:
    """Average speed in kilometers per hour.

    Args:
        distance_m: Distance covered in meters
        duration_ms: Active duration in milliseconds

    Returns:
        Speed in km/h, or 0.0 when the duration is not positive
    """
    if duration_ms <= 0:
        return 0.0

    hours = duration_ms / 1000 / 60 / 60
    kilometers = distance_m / 1000
    return kilometers / hours


class EnergyModel(Protocol):
    """Strategy for estimating energy expenditure of a run."""

    def estimate(self, distance_m: float) -> int:
        """Estimate energy units for the given distance."""
        ...


class LinearEnergyModel:
    """Flat per-kilometer energy estimate.

    A rough heuristic that ignores body mass, pace and elevation.
    """

    def __init__(self, kcal_per_km: float = DEFAULT_KCAL_PER_KM) -> None:
        if kcal_per_km < 0:
            raise ValueError(f"kcal_per_km must be non-negative, got {kcal_per_km}")
        self._kcal_per_km = kcal_per_km

    @property
    def kcal_per_km(self) -> float:
        return self._kcal_per_km

    def estimate(self, distance_m: float) -> int:
        return int(distance_m / 1000 * self._kcal_per_km)


__all__ = [
    "DEFAULT_KCAL_PER_KM",
    "EnergyModel",
    "LinearEnergyModel",
    "average_speed_kmh",
]
