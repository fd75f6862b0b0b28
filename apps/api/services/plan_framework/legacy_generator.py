"""
Legacy Flat Generator

Simple volume-based plans for goal distances outside the advanced engine's
range. One of four distance tiers sets the duration and base volume; the
weekly volume ramps linearly, peaks at 80% of the plan and tapers to 60%
of the peak. Sessions follow a fixed 70/20/10 easy/moderate/intense split.

No fitness score is involved, so zones are empty and durations assume a
nominal 6:00 min/km.

Usage:
    plan = LegacyPlanGenerator().generate(
        objective="finish",
        distance="10",
        weekly_frequency=3,
        available_days=["Seg", "Qua", "Sáb"],
        start_date=date(2025, 1, 6),
    )
"""

import logging
import math
from datetime import date, timedelta
from typing import List, Optional, Sequence, Union

from .athlete_input import PlanInputError, parse_weekdays
from .constants import (
    LEGACY_DISTANCE_TEMPLATES,
    LEGACY_INTENSITY_SPLIT,
    LEGACY_NOMINAL_PACE_MIN_PER_KM,
    LEGACY_PEAK_POSITION,
    Phase,
    Weekday,
    WorkoutType,
)
from .generator import Plan
from .pace_engine import TrainingZones
from .phase_builder import PeriodWeek
from .week_scheduler import Session

logger = logging.getLogger(__name__)


LEGACY_WORKOUTS = {
    "easy": (WorkoutType.EASY, 3, "Comfortable conversation pace"),
    "moderate": (WorkoutType.TEMPO, 5, "Conversation gets difficult"),
    "intense": (WorkoutType.INTERVAL, 8, "No conversation"),
}

PEAK_MULTIPLIER = 1.5
RAMP_GAIN = 0.5
TAPER_DROP = 0.4


def distance_category(distance: Union[str, float]) -> int:
    """Tier key (5, 10, 21 or 42) for a goal distance in km."""
    try:
        km = int(float(str(distance).replace(",", ".")))
    except ValueError:
        raise PlanInputError(f"distance must be a number, got {distance!r}", "distance_km")
    for tier in sorted(LEGACY_DISTANCE_TEMPLATES):
        if km <= tier:
            return tier
    return max(LEGACY_DISTANCE_TEMPLATES)


def weekly_volume_km(base_km: float, week: int, total_weeks: int, frequency: int) -> float:
    """Linear ramp to the peak week, then a linear taper to 60% of the peak."""
    peak_week = math.floor(total_weeks * LEGACY_PEAK_POSITION)
    scale = frequency / 3

    if week < peak_week:
        return base_km * (1 + RAMP_GAIN * week / total_weeks) * scale
    if week == peak_week:
        return base_km * PEAK_MULTIPLIER * scale
    taper = 1 - TAPER_DROP * (week - peak_week) / (total_weeks - peak_week)
    return base_km * PEAK_MULTIPLIER * taper * scale


def apportion_workout_types(session_count: int) -> List[str]:
    """
    Split session_count by the easy/moderate/intense ratios.

    Largest-remainder apportionment: counts are non-negative and always
    sum to session_count. Ties go to the earlier (easier) type.
    """
    if session_count <= 0:
        return []

    kinds = list(LEGACY_INTENSITY_SPLIT)
    quotas = {k: session_count * LEGACY_INTENSITY_SPLIT[k] for k in kinds}
    counts = {k: math.floor(quotas[k]) for k in kinds}

    leftover = session_count - sum(counts.values())
    by_remainder = sorted(kinds, key=lambda k: (-(quotas[k] - counts[k]), kinds.index(k)))
    for k in by_remainder[:leftover]:
        counts[k] += 1

    out: List[str] = []
    for k in kinds:
        out.extend([k] * counts[k])
    return out


class LegacyPlanGenerator:
    """Flat-volume plan generator."""

    def generate(
        self,
        objective: str,
        distance: str,
        weekly_frequency: int,
        available_days: Sequence[Union[str, Weekday]],
        duration_weeks: Optional[int] = None,
        *,
        start_date: date,
        athlete_id: str = "",
        athlete_name: str = "",
    ) -> Plan:
        """
        Generate a flat plan.

        Args:
            objective: Athlete's stated objective (passed through to notes)
            distance: Goal distance in km, as entered ("10", "21.1")
            weekly_frequency: Sessions per week
            available_days: Day names; the earliest weekly_frequency are used
            duration_weeks: Plan length, clamped to the tier's range
                (defaults to the tier minimum)
            start_date: First day of week 1
            athlete_id: Copied onto the plan
            athlete_name: Copied onto the plan

        Returns:
            Plan with the same shape as the advanced engine's
        """
        if weekly_frequency < 1:
            raise PlanInputError("weekly_frequency must be at least 1", "weekly_frequency")

        tier = distance_category(distance)
        template = LEGACY_DISTANCE_TEMPLATES[tier]
        total_weeks = duration_weeks or template["min_weeks"]
        total_weeks = max(template["min_weeks"], min(template["max_weeks"], total_weeks))

        days = [d.day_index for d in parse_weekdays(available_days)][:weekly_frequency]
        kinds = apportion_workout_types(len(days))
        peak_week = math.floor(total_weeks * LEGACY_PEAK_POSITION)

        weeks: List[PeriodWeek] = []
        sessions: List[Session] = []
        for week in range(1, total_weeks + 1):
            volume = weekly_volume_km(template["base_volume_km"], week, total_weeks, weekly_frequency)
            week_start = start_date + timedelta(days=7 * (week - 1))
            weeks.append(PeriodWeek(
                index=week,
                start_date=week_start,
                target_load=volume * LEGACY_NOMINAL_PACE_MIN_PER_KM,
                phase=self._phase(week, peak_week),
            ))
            sessions.extend(self._week_sessions(week, week_start, volume, days, kinds))

        logger.info(
            f"Generated legacy plan: {tier} km tier, {total_weeks} weeks, "
            f"{len(days)} sessions/week"
        )
        return Plan(
            athlete_id=athlete_id,
            athlete_name=athlete_name,
            zones=TrainingZones.empty(),
            sessions=sessions,
            notes=self._notes(objective, tier, total_weeks, peak_week),
            weeks=weeks,
            vdot=None,
            engine="legacy",
        )

    @staticmethod
    def _phase(week: int, peak_week: int) -> Phase:
        if week < peak_week:
            return Phase.BUILD
        if week == peak_week:
            return Phase.SPECIFIC
        return Phase.TAPER

    @staticmethod
    def _week_sessions(
        week: int,
        week_start: date,
        volume_km: float,
        days: List[int],
        kinds: List[str],
    ) -> List[Session]:
        if not days:
            return []
        per_session_km = volume_km / len(days)
        minutes = round(per_session_km * LEGACY_NOMINAL_PACE_MIN_PER_KM)
        km = round(per_session_km, 1)

        out = []
        for day, kind in zip(days, kinds):
            workout_type, rpe, effort = LEGACY_WORKOUTS[kind]
            out.append(Session(
                week_number=week,
                date=week_start + timedelta(days=day),
                workout_type=workout_type,
                description=f"{workout_type.value} {minutes} min (~{km:g} km). {effort}.",
                duration_minutes=minutes,
                distance_km=km,
                rpe=rpe,
                notes="",
            ))
        return out

    @staticmethod
    def _notes(objective: str, tier: int, total_weeks: int, peak_week: int) -> List[str]:
        split = "/".join(str(round(v * 100)) for v in LEGACY_INTENSITY_SPLIT.values())
        notes = [
            f"Flat plan for the {tier} km tier: {total_weeks} weeks, {split} easy/moderate/intense split.",
            f"Volume peaks in week {peak_week} and tapers to 60% of the peak by the last week.",
            "Durations assume 6:00 min/km. Run a 5k or 10k time trial for personal pace zones.",
        ]
        if objective:
            notes.append(f"Objective: {objective}")
        return notes
