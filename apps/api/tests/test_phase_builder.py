"""
Tests for periodization: week count, ramp, cutback and event overrides.
"""

from datetime import date, timedelta

import pytest

from services.plan_framework.config import ConfigService
from services.plan_framework.constants import Phase, WeekTag
from services.plan_framework.phase_builder import PhaseBuilder, weeks_between

START = date(2025, 1, 6)
BASE = 300


# ===================================================================
# Week count and dates
# ===================================================================


class TestWeekCount:

    def test_default_weeks_without_event(self):
        weeks = PhaseBuilder().build_periodization(START, BASE)
        assert len(weeks) == 12
        assert all(w.phase != Phase.REGEN for w in weeks)

    def test_explicit_weeks_without_event(self):
        assert len(PhaseBuilder().build_periodization(START, BASE, weeks=8)) == 8

    def test_default_weeks_from_config(self):
        ConfigService.set("plan_rules.default_plan_weeks", 6)
        assert len(PhaseBuilder().build_periodization(START, BASE)) == 6

    @pytest.mark.parametrize("days_to_event", [0, 6, 7, 30, 84, 112, 150])
    def test_event_week_count_plus_regen(self, days_to_event):
        event = START + timedelta(days=days_to_event)
        weeks = PhaseBuilder().build_periodization(START, BASE, event_date=event)

        assert len(weeks) == weeks_between(START, event) + 1 + 1
        assert weeks[-1].phase == Phase.REGEN
        assert [w.phase for w in weeks].count(Phase.REGEN) == 1

    def test_indices_contiguous_and_dates_weekly(self):
        weeks = PhaseBuilder().build_periodization(START, BASE, event_date=START + timedelta(days=70))
        assert [w.index for w in weeks] == list(range(1, len(weeks) + 1))
        for prev, cur in zip(weeks, weeks[1:]):
            assert cur.start_date - prev.start_date == timedelta(days=7)
        assert weeks[0].start_date == START


# ===================================================================
# Load model
# ===================================================================


class TestLoad:

    def test_ramp_and_cutback_without_event(self):
        weeks = PhaseBuilder().build_periodization(START, BASE, weeks=12)

        for w in weeks:
            ramp = BASE * (1 + 0.05 * (w.index - 1))
            if w.index % 4 == 0:
                assert w.tag == WeekTag.STABILIZER
                assert w.target_load == pytest.approx(ramp * 0.9)
                assert w.target_load < ramp
            else:
                assert w.tag is None
                assert w.target_load == pytest.approx(ramp)

    def test_cutback_weeks_drop_below_previous_week(self):
        weeks = PhaseBuilder().build_periodization(START, BASE, weeks=12)
        assert weeks[3].target_load < weeks[2].target_load
        assert weeks[7].target_load < weeks[6].target_load

    def test_sixteen_week_event_tail(self):
        event = START + timedelta(weeks=16)
        weeks = PhaseBuilder().build_periodization(START, BASE, event_date=event)

        race_weeks, regen = weeks[-5:-1], weeks[-1]
        assert [w.tag for w in race_weeks] == [
            WeekTag.SHOCK, WeekTag.STABILIZER, WeekTag.POLISH, WeekTag.COMPETITIVE,
        ]
        assert race_weeks[2].phase == Phase.TAPER
        assert race_weeks[3].phase == Phase.RACE
        assert regen.start_date == race_weeks[3].start_date + timedelta(days=7)

    def test_final_overrides_replace_ramp(self):
        event = START + timedelta(weeks=16)
        weeks = PhaseBuilder().build_periodization(START, BASE, event_date=event)
        by_index = {w.index: w for w in weeks}

        def ramp(i):
            return BASE * (1 + 0.05 * (i - 1))

        # week 16 is both a 4th week and polish: polish factor only
        assert by_index[14].target_load == pytest.approx(ramp(14) * 1.05)
        assert by_index[15].target_load == pytest.approx(ramp(15) * 0.90)
        assert by_index[16].target_load == pytest.approx(ramp(16) * 0.70)
        assert by_index[17].target_load == pytest.approx(max(0.4 * BASE, 120))
        assert by_index[18].target_load == pytest.approx(max(0.3 * BASE, 90))

    def test_race_and_regen_floors(self):
        weeks = PhaseBuilder().build_periodization(START, 180, event_date=START + timedelta(weeks=6))
        assert weeks[-2].target_load == 120
        assert weeks[-1].target_load == 90

    def test_short_event_plan_has_no_overrides(self):
        weeks = PhaseBuilder().build_periodization(START, BASE, event_date=START + timedelta(days=14))
        assert len(weeks) == 4  # 3 weeks + regen
        assert all(w.tag is None for w in weeks)

    def test_rules_override_from_config(self):
        ConfigService.set("plan_rules.periodization.cutback_reduction", 0.2)
        weeks = PhaseBuilder().build_periodization(START, BASE, weeks=4)
        assert weeks[3].target_load == pytest.approx(BASE * 1.15 * 0.8)


# ===================================================================
# Phase labels
# ===================================================================


class TestPhaseLabels:

    def test_thirds_without_event(self):
        weeks = PhaseBuilder().build_periodization(START, BASE, weeks=12)
        assert [w.phase for w in weeks] == (
            [Phase.BASE] * 4 + [Phase.BUILD] * 4 + [Phase.SPECIFIC] * 4
        )

    def test_tiny_block_is_build(self):
        weeks = PhaseBuilder().build_periodization(START, BASE, weeks=2)
        assert [w.phase for w in weeks] == [Phase.BUILD, Phase.BUILD]

    def test_to_dict(self):
        week = PhaseBuilder().build_periodization(START, BASE, weeks=4)[3]
        assert week.to_dict() == {
            "index": 4,
            "start_date": "2025-01-27",
            "target_load": round(BASE * 1.15 * 0.9, 1),
            "phase": "specific",
            "tag": "stabilizer",
        }
