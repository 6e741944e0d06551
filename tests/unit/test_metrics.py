"""Unit tests for derived run metrics."""

import pytest

from lifetrack.tracking import LinearEnergyModel, average_speed_kmh


class TestAverageSpeed:
    """Tests for average_speed_kmh."""

    def test_zero_duration_returns_zero(self) -> None:
        assert average_speed_kmh(5_000.0, 0) == 0.0

    def test_negative_duration_returns_zero(self) -> None:
        assert average_speed_kmh(5_000.0, -10) == 0.0

    def test_ten_km_in_an_hour(self) -> None:
        assert average_speed_kmh(10_000.0, 3_600_000) == pytest.approx(10.0)

    def test_five_km_in_twenty_five_minutes(self) -> None:
        assert average_speed_kmh(5_000.0, 25 * 60 * 1000) == pytest.approx(12.0)

    def test_zero_distance(self) -> None:
        assert average_speed_kmh(0.0, 60_000) == 0.0


class TestLinearEnergyModel:
    """Tests for LinearEnergyModel."""

    def test_default_is_sixty_per_km(self) -> None:
        model = LinearEnergyModel()
        assert model.kcal_per_km == 60.0
        assert model.estimate(1_000.0) == 60
        assert model.estimate(5_000.0) == 300

    def test_truncates_partial_units(self) -> None:
        assert LinearEnergyModel().estimate(999.0) == 59

    def test_zero_distance(self) -> None:
        assert LinearEnergyModel().estimate(0.0) == 0

    def test_coefficient_is_configurable(self) -> None:
        assert LinearEnergyModel(kcal_per_km=75.0).estimate(2_000.0) == 150

    def test_negative_coefficient_rejected(self) -> None:
        with pytest.raises(ValueError, match="non-negative"):
            LinearEnergyModel(kcal_per_km=-1.0)
