"""
Plan Generator

Main orchestrator for plan generation.
Coordinates all components to produce complete training plans.

Usage:
    generator = PlanGenerator()
    plan = generator.generate(athlete)

    # Route by goal distance (advanced engine for 15-50 km, legacy otherwise)
    plan = generate_training_plan(athlete)
"""

import logging
import math
from dataclasses import dataclass
from datetime import date, timedelta
from typing import Any, Dict, List, Optional, Tuple

from services.vdot_calculator import (
    VDOTEstimate,
    best_vdot_from_text,
    calculate_equivalent_race_time,
    format_time,
)
from .athlete_input import AthleteInput
from .config import ConfigService
from .constants import (
    ADVANCED_MAX_DISTANCE_KM,
    ADVANCED_MIN_DISTANCE_KM,
    RPE_BY_WORKOUT,
    Focus,
    Phase,
    WorkoutType,
)
from .pace_engine import PaceEngine, TrainingZones
from .phase_builder import PeriodWeek, PhaseBuilder
from .week_scheduler import (
    Session,
    WeekScheduler,
    choose_long_run_day,
    select_training_days,
)

logger = logging.getLogger(__name__)


NO_TEST_NOTE = (
    "No valid test detected. Run a 5k or 10k time trial to calculate "
    "VDOT and A1–A6 paces."
)

RACE_DAY_NOTE = (
    "Race strategy: start controlled, settle into goal pace by the second "
    "kilometer and finish strong. Use only the fueling practiced in training."
)

# Fallback plan (no usable race result)
FALLBACK_EASY_MINUTES = 45
FALLBACK_FARTLEK_MINUTES = 45
FALLBACK_LONG_START_MINUTES = 60
FALLBACK_LONG_GROWTH_MINUTES = 5
FALLBACK_LONG_MAX_MINUTES = 90


@dataclass(frozen=True)
class Plan:
    """Complete generated training plan. Read-only once built."""
    athlete_id: str
    athlete_name: str
    zones: TrainingZones
    sessions: Tuple[Session, ...]
    notes: Tuple[str, ...]
    weeks: Tuple[PeriodWeek, ...] = ()
    vdot: Optional[float] = None
    engine: str = "advanced"

    def __post_init__(self):
        for name in ("sessions", "notes", "weeks"):
            object.__setattr__(self, name, tuple(getattr(self, name)))

    def get_week(self, week_number: int) -> List[Session]:
        """Get all sessions for a specific week."""
        return [s for s in self.sessions if s.week_number == week_number]

    def to_dict(self) -> Dict[str, Any]:
        """Convert to dictionary for JSON serialization."""
        return {
            "athlete_id": self.athlete_id,
            "athlete_name": self.athlete_name,
            "engine": self.engine,
            "vdot": round(self.vdot, 1) if self.vdot is not None else None,
            "zones": self.zones.to_dict(),
            "weeks": [w.to_dict() for w in self.weeks],
            "sessions": [s.to_dict() for s in self.sessions],
            "notes": list(self.notes),
        }


class PlanGenerator:
    """
    Build a personalized plan from one athlete snapshot.

    Flow: race results -> VDOT -> zones + periodization -> weekly sessions.
    A missing or unparsable race result is not an error; it produces a
    conservative fixed-structure plan with empty zones.
    """

    def __init__(self):
        self.pace_engine = PaceEngine()
        self.phase_builder = PhaseBuilder()
        self.scheduler = WeekScheduler()

    def generate(self, athlete: AthleteInput) -> Plan:
        """
        Generate a complete plan.

        Args:
            athlete: Validated athlete input

        Returns:
            Plan with zones, sessions sorted by date, and notes
        """
        estimate = best_vdot_from_text(athlete.time_estimates)
        if estimate.vdot is None:
            logger.warning(
                f"No race result parsed for athlete {athlete.athlete_id or '?'}; using fallback plan"
            )
            return self._generate_fallback(athlete)

        zones = self.pace_engine.calculate_from_vdot(estimate.vdot)
        base_minutes = self.base_weekly_minutes(athlete)
        weeks = self.phase_builder.build_periodization(
            start_date=athlete.start_date,
            base_weekly_minutes=base_minutes,
            event_date=athlete.event_date,
            weeks=athlete.plan_duration_weeks,
        )
        focus = self.determine_focus(estimate)

        sessions: List[Session] = []
        for week in weeks:
            week_sessions = self.scheduler.build_week(
                week_number=week.index,
                week_start=week.start_date,
                target_minutes=week.target_load,
                zones=zones,
                available_days=athlete.available_days,
                weekly_frequency=athlete.weekly_frequency,
                goal_distance_km=athlete.distance_km,
                phase=week.phase,
                focus=focus,
                tag=week.tag,
            )
            if athlete.event_date and self._contains(week, athlete.event_date):
                week_sessions = self._race_week(week, week_sessions, athlete, zones)
            sessions.extend(week_sessions)

        sessions.sort(key=lambda s: s.date)

        plan = Plan(
            athlete_id=athlete.athlete_id,
            athlete_name=athlete.athlete_name,
            zones=zones,
            sessions=sessions,
            notes=self._build_notes(athlete, estimate, focus),
            weeks=weeks,
            vdot=estimate.vdot,
        )
        logger.info(
            f"Generated plan for athlete {athlete.athlete_id or '?'}: {len(weeks)} weeks, "
            f"{len(sessions)} sessions, VDOT {estimate.vdot:.1f}, focus={focus.value}"
        )
        return plan

    # ------------------------------------------------------------------ #
    # Inputs to the scheduler
    # ------------------------------------------------------------------ #

    @staticmethod
    def base_weekly_minutes(athlete: AthleteInput) -> int:
        """clamp(frequency * 60 + goal_km * 2, 180, 600)."""
        rules = ConfigService.get_base_load_rules()
        raw = (
            athlete.weekly_frequency * rules.get("minutes_per_session", 60)
            + athlete.distance_km * rules.get("minutes_per_goal_km", 2)
        )
        return max(rules.get("min_minutes", 180), min(rules.get("max_minutes", 600), round(raw)))

    @staticmethod
    def determine_focus(estimate: VDOTEstimate) -> Focus:
        """
        Compare best short-race (<=10 km) against best long-race (>=21 km) VDOT.

        Long-race fitness well ahead of short-race fitness means speed is
        the limiter, and the reverse means endurance is.
        """
        rules = ConfigService.get_focus_rules()
        short = estimate.best_vdot_within(0.0, rules.get("short_max_km", 10))
        long = estimate.best_vdot_within(rules.get("long_min_km", 21), math.inf)
        if short is None or long is None:
            return Focus.BALANCED

        gap = rules.get("vdot_gap", 0.5)
        if long > short + gap:
            return Focus.SPEED
        if short > long + gap:
            return Focus.ENDURANCE
        return Focus.BALANCED

    # ------------------------------------------------------------------ #
    # Race week
    # ------------------------------------------------------------------ #

    @staticmethod
    def _contains(week: PeriodWeek, day: date) -> bool:
        return week.start_date <= day < week.start_date + timedelta(days=7)

    def _race_week(
        self,
        week: PeriodWeek,
        week_sessions: List[Session],
        athlete: AthleteInput,
        zones: TrainingZones,
    ) -> List[Session]:
        """Drop sessions on/after the event and add the race itself."""
        limit = min(athlete.weekly_frequency, len(athlete.available_days)) - 1
        kept = [s for s in week_sessions if s.date < athlete.event_date]
        while len(kept) > max(0, limit):
            kept.pop()
        kept.append(self._race_day_session(week.index, athlete, zones))
        return kept

    @staticmethod
    def _race_day_session(week_number: int, athlete: AthleteInput, zones: TrainingZones) -> Session:
        km = athlete.distance_km
        return Session(
            week_number=week_number,
            date=athlete.event_date,
            workout_type=WorkoutType.RACE,
            description=f"Race day: {km:g} km around {zones.describe('A3')}.",
            duration_minutes=round(km * zones.midpoint_minutes("A3")),
            distance_km=float(km),
            rpe=RPE_BY_WORKOUT[WorkoutType.RACE],
            notes=RACE_DAY_NOTE,
        )

    # ------------------------------------------------------------------ #
    # Notes
    # ------------------------------------------------------------------ #

    def _build_notes(self, athlete: AthleteInput, estimate: VDOTEstimate, focus: Focus) -> List[str]:
        rules = ConfigService.get_periodization_rules()
        notes = [
            f"Fitness source {s.label} in {format_time(s.time_seconds)}: VDOT≈{s.vdot:.1f}"
            for s in estimate.samples
        ]
        notes.append(f"Current fitness: VDOT {estimate.vdot:.1f} (best of {len(estimate.samples)} result(s)).")

        notes.extend(self._structure_notes(athlete, rules))

        prediction = calculate_equivalent_race_time(estimate.vdot, athlete.distance_km * 1000)
        if prediction:
            notes.append(
                f"Predicted {athlete.distance_km:g} km at current fitness: "
                f"{prediction['time_formatted']} ({prediction['pace_km']} min/km)."
            )

        if focus == Focus.SPEED:
            notes.append("Long-race results outpace short-race speed: key sessions lean toward intervals.")
        elif focus == Focus.ENDURANCE:
            notes.append("Short-race speed outpaces long-race results: extra easy volume for endurance.")

        notes.extend(self._athlete_notes(athlete))
        return notes

    @staticmethod
    def _structure_notes(athlete: AthleteInput, rules: Dict[str, Any]) -> List[str]:
        ramp_pct = round(rules.get("weekly_ramp", 0.05) * 100)
        cutback_pct = round(rules.get("cutback_reduction", 0.10) * 100)
        every = rules.get("cutback_frequency", 4)
        notes = [
            f"Structure: {every - 1} progressive weeks (+{ramp_pct}% load per week) "
            f"followed by 1 stabilizer week.",
            f"Stabilizer weeks reduce load by {cutback_pct}% to absorb training.",
        ]
        if athlete.event_date:
            notes.append(
                "Final weeks: shock, stabilizer, polish (taper) and race week, "
                "followed by one regeneration week."
            )
        return notes

    @staticmethod
    def _athlete_notes(athlete: AthleteInput) -> List[str]:
        notes = []
        chosen = len(select_training_days(athlete.available_days, athlete.weekly_frequency))
        if chosen < athlete.weekly_frequency:
            logger.warning(
                f"Athlete {athlete.athlete_id or '?'} asked for {athlete.weekly_frequency} sessions "
                f"but has {chosen} available days"
            )
            notes.append(
                f"Only {chosen} available day(s) for {athlete.weekly_frequency} weekly sessions; "
                f"weeks are scheduled with {chosen} session(s)."
            )
        if athlete.experience:
            notes.append(f"Experience: {athlete.experience}")
        if athlete.special_observations:
            notes.append(f"Athlete observations: {athlete.special_observations}")
        return notes

    # ------------------------------------------------------------------ #
    # Fallback (no usable race result)
    # ------------------------------------------------------------------ #

    def _generate_fallback(self, athlete: AthleteInput) -> Plan:
        """
        Conservative easy / fartlek / long-run triad on a fixed baseline.

        Durations are fixed minutes with no paces, so distances are unknown.
        """
        base_minutes = ConfigService.get_base_load_rules().get("fallback_minutes", 240)
        weeks = self.phase_builder.build_periodization(
            start_date=athlete.start_date,
            base_weekly_minutes=base_minutes,
            event_date=athlete.event_date,
            weeks=athlete.plan_duration_weeks,
        )

        days = select_training_days(athlete.available_days, athlete.weekly_frequency)
        long_day = choose_long_run_day(days)
        others = [d for d in days if d != long_day]
        fartlek_day = WeekScheduler.choose_key_day(others, long_day) if others else None
        easy_day = next((d for d in others if d != fartlek_day), None)

        sessions: List[Session] = []
        for week in weeks:
            long_minutes = min(
                FALLBACK_LONG_MAX_MINUTES,
                FALLBACK_LONG_START_MINUTES + FALLBACK_LONG_GROWTH_MINUTES * (week.index - 1),
            )
            sessions.append(self._fallback_session(
                week, long_day, WorkoutType.LONG,
                f"Long run {long_minutes} min at easy, conversational effort.",
                long_minutes,
            ))
            if fartlek_day is not None:
                sessions.append(self._fallback_session(
                    week, fartlek_day, WorkoutType.FARTLEK,
                    "Fartlek: 10 min easy, 6x (2 min strong / 2 min easy), 11 min easy.",
                    FALLBACK_FARTLEK_MINUTES,
                ))
            if easy_day is not None:
                sessions.append(self._fallback_session(
                    week, easy_day, WorkoutType.EASY,
                    f"Easy run {FALLBACK_EASY_MINUTES} min at conversational effort.",
                    FALLBACK_EASY_MINUTES,
                ))

        sessions.sort(key=lambda s: s.date)

        notes = [NO_TEST_NOTE]
        notes.extend(self._structure_notes(athlete, ConfigService.get_periodization_rules()))
        notes.extend(self._athlete_notes(athlete))

        logger.info(
            f"Generated fallback plan for athlete {athlete.athlete_id or '?'}: "
            f"{len(weeks)} weeks, {len(sessions)} sessions"
        )
        return Plan(
            athlete_id=athlete.athlete_id,
            athlete_name=athlete.athlete_name,
            zones=TrainingZones.empty(),
            sessions=sessions,
            notes=notes,
            weeks=weeks,
            vdot=None,
        )

    @staticmethod
    def _fallback_session(
        week: PeriodWeek,
        day: int,
        workout_type: WorkoutType,
        description: str,
        minutes: int,
    ) -> Session:
        return Session(
            week_number=week.index,
            date=week.start_date + timedelta(days=day),
            workout_type=workout_type,
            description=description,
            duration_minutes=minutes,
            distance_km=None,
            rpe=RPE_BY_WORKOUT[workout_type],
            notes="Effort by feel until a time trial sets your paces.",
        )


def uses_advanced_engine(
    distance_km: float,
    min_km: float = ADVANCED_MIN_DISTANCE_KM,
    max_km: float = ADVANCED_MAX_DISTANCE_KM,
) -> bool:
    return min_km <= distance_km <= max_km


def generate_training_plan(
    athlete: AthleteInput,
    min_km: float = ADVANCED_MIN_DISTANCE_KM,
    max_km: float = ADVANCED_MAX_DISTANCE_KM,
) -> Plan:
    """
    Generate a plan with the engine that supports the goal distance.

    Goal distances in [min_km, max_km] use PlanGenerator; anything else
    goes to the flat LegacyPlanGenerator.
    """
    if uses_advanced_engine(athlete.distance_km, min_km, max_km):
        return PlanGenerator().generate(athlete)

    from .legacy_generator import LegacyPlanGenerator

    logger.info(f"Goal distance {athlete.distance_km:g} km outside [{min_km:g}, {max_km:g}]; using legacy generator")
    duration_weeks = athlete.plan_duration_weeks
    if duration_weeks is None and athlete.event_date is not None:
        duration_weeks = (athlete.event_date - athlete.start_date).days // 7 + 1

    return LegacyPlanGenerator().generate(
        objective=athlete.objective,
        distance=f"{athlete.distance_km:g}",
        weekly_frequency=athlete.weekly_frequency,
        available_days=athlete.available_days,
        duration_weeks=duration_weeks,
        start_date=athlete.start_date,
        athlete_id=athlete.athlete_id,
        athlete_name=athlete.athlete_name,
    )
