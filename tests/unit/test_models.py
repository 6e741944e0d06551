"""Unit tests for tracking data models."""

from datetime import UTC, datetime

import pytest

from lifetrack.tracking import ActivityRecord, LinearEnergyModel, PositionFix


@pytest.fixture
def record() -> ActivityRecord:
    return ActivityRecord(
        start_time=datetime(2024, 3, 10, 6, 30, tzinfo=UTC),
        distance_m=5_000.0,
        duration_ms=1_500_000,
        avg_speed_kmh=12.0,
        calories=300,
        location_points=("0.0,0.0", "0.0,0.0001"),
        notes="easy pace",
        user_id="runner-1",
    )


class TestPositionFix:
    """Tests for PositionFix."""

    def test_as_point(self) -> None:
        assert PositionFix(latitude=51.5, longitude=-0.12).as_point() == "51.5,-0.12"

    def test_is_immutable(self) -> None:
        fix = PositionFix(latitude=1.0, longitude=2.0)
        with pytest.raises(AttributeError):
            fix.latitude = 3.0  # type: ignore[misc]


class TestActivityRecord:
    """Tests for ActivityRecord."""

    def test_to_dict(self, record: ActivityRecord) -> None:
        data = record.to_dict()

        assert data["user_id"] == "runner-1"
        assert data["start_time"] == record.start_time
        assert data["distance_m"] == 5_000.0
        assert data["duration_ms"] == 1_500_000
        assert data["calories"] == 300
        assert data["location_points"] == ["0.0,0.0", "0.0,0.0001"]
        assert data["is_manual_entry"] is False
        assert "_id" not in data

    def test_from_dict(self, record: ActivityRecord) -> None:
        data = record.to_dict()
        data["_id"] = "65f0c0ffee"

        restored = ActivityRecord.from_dict(data)

        assert restored == record.with_id("65f0c0ffee")

    def test_from_dict_treats_naive_time_as_utc(self, record: ActivityRecord) -> None:
        data = record.to_dict()
        data["start_time"] = datetime(2024, 3, 10, 6, 30)

        restored = ActivityRecord.from_dict(data)

        assert restored.start_time == record.start_time
        assert restored.start_time.tzinfo is UTC

    def test_from_dict_fills_defaults(self) -> None:
        restored = ActivityRecord.from_dict(
            {"start_time": datetime(2024, 1, 1, tzinfo=UTC), "distance_m": 10}
        )
        assert restored.id is None
        assert restored.distance_m == 10.0
        assert restored.location_points == ()
        assert restored.notes == ""

    def test_with_owner_returns_copy(self, record: ActivityRecord) -> None:
        owned = record.with_owner("runner-2")
        assert owned.user_id == "runner-2"
        assert record.user_id == "runner-1"

    def test_manual_uses_energy_model(self) -> None:
        record = ActivityRecord.manual(
            start_time=datetime(2024, 1, 1, tzinfo=UTC),
            distance_m=2_000.0,
            duration_ms=600_000,
            energy_model=LinearEnergyModel(kcal_per_km=80.0),
        )
        assert record.is_manual_entry
        assert record.calories == 160
        assert record.avg_speed_kmh == pytest.approx(12.0)
