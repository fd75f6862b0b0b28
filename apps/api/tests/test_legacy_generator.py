"""
Tests for the flat legacy generator.
"""

from datetime import date

import pytest

from services.plan_framework.athlete_input import PlanInputError
from services.plan_framework.constants import WorkoutType
from services.plan_framework.legacy_generator import (
    LegacyPlanGenerator,
    apportion_workout_types,
    distance_category,
    weekly_volume_km,
)

START = date(2025, 1, 6)


class TestDistanceCategory:

    @pytest.mark.parametrize("distance,tier", [
        ("3", 5), ("5", 5), ("8", 10), ("10", 10), ("10.9", 10),
        ("12", 21), ("21.1", 21), ("42.195", 42), ("100", 42), ("7,5", 10),
    ])
    def test_tiers(self, distance, tier):
        assert distance_category(distance) == tier

    def test_not_a_number(self):
        with pytest.raises(PlanInputError):
            distance_category("marathon")


class TestApportionment:

    @pytest.mark.parametrize("count,expected", [
        (1, ["easy"]),
        (3, ["easy", "easy", "moderate"]),
        (10, ["easy"] * 7 + ["moderate"] * 2 + ["intense"]),
    ])
    def test_known_splits(self, count, expected):
        assert apportion_workout_types(count) == expected

    @pytest.mark.parametrize("count", range(0, 8))
    def test_counts_sum_exactly(self, count):
        kinds = apportion_workout_types(count)
        assert len(kinds) == count
        assert set(kinds) <= {"easy", "moderate", "intense"}


class TestVolume:

    def test_ramp_peak_and_taper(self):
        # 10 km tier, 10 weeks, 3 sessions: peak in week 8
        assert weekly_volume_km(25, 1, 10, 3) == pytest.approx(26.25)
        assert weekly_volume_km(25, 8, 10, 3) == pytest.approx(37.5)
        assert weekly_volume_km(25, 10, 10, 3) == pytest.approx(37.5 * 0.6)

    def test_frequency_scales_volume(self):
        assert weekly_volume_km(25, 1, 10, 6) == pytest.approx(2 * weekly_volume_km(25, 1, 10, 3))


class TestGenerate:

    def test_defaults_to_tier_minimum(self):
        plan = LegacyPlanGenerator().generate("finish", "10", 3, ["Seg", "Qua", "Sáb"], start_date=START)

        assert plan.engine == "legacy"
        assert len(plan.weeks) == 10
        assert plan.zones.is_empty
        assert plan.vdot is None

    @pytest.mark.parametrize("requested,expected", [(4, 8), (10, 10), (30, 12)])
    def test_duration_clamped_to_tier(self, requested, expected):
        plan = LegacyPlanGenerator().generate("finish", "5", 3, ["Mon", "Wed", "Sat"], requested, start_date=START)
        assert len(plan.weeks) == expected

    def test_sessions(self):
        plan = LegacyPlanGenerator().generate("finish", "10", 3, ["Sat", "Mon", "Wed", "Fri"], start_date=START)
        week1 = plan.get_week(1)

        assert [s.date.weekday() for s in week1] == [0, 2, 4]
        assert [s.workout_type for s in week1] == [WorkoutType.EASY, WorkoutType.EASY, WorkoutType.TEMPO]
        assert [s.rpe for s in week1] == [3, 3, 5]
        # 26.25 km over 3 sessions at 6:00/km
        assert all(s.distance_km == 8.8 for s in week1)
        assert all(s.duration_minutes == 52 for s in week1)

    def test_fewer_days_than_frequency(self):
        plan = LegacyPlanGenerator().generate("finish", "42", 5, ["Sun", "Tue"], start_date=START)
        assert all(len(plan.get_week(w.index)) == 2 for w in plan.weeks)

    def test_objective_in_notes(self):
        plan = LegacyPlanGenerator().generate("sub 25", "5", 3, ["Mon"], start_date=START)
        assert "Objective: sub 25" in plan.notes
