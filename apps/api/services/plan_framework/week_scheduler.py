"""
Week Scheduler

Turns one week's target load into placed sessions:
- long run on the preferred long-run day (Sunday, else Saturday, else latest)
- one key (quality) session, at least two days before the long run when
  the available days allow it
- easy runs on the remaining chosen days

Everything is recomputed from the inputs on each call; the same inputs
always give the same week.

Usage:
    scheduler = WeekScheduler()
    sessions = scheduler.build_week(
        week_number=3,
        week_start=date(2025, 1, 20),
        target_minutes=330,
        zones=zones,
        available_days=[Weekday.TUESDAY, Weekday.THURSDAY, Weekday.SUNDAY],
        weekly_frequency=3,
        goal_distance_km=21,
        phase=Phase.BUILD,
    )
"""

import logging
from dataclasses import dataclass
from datetime import date, timedelta
from typing import Any, Dict, Iterable, List, Optional, Sequence

from .config import ConfigService
from .constants import (
    EASY_SHARE,
    KEY_TO_LONG_MIN_GAP_DAYS,
    KEY_WORKOUT_TYPES,
    LONG_RUN_PHASE_FACTOR,
    RPE_BY_WORKOUT,
    Focus,
    Phase,
    Weekday,
    WeekTag,
    WorkoutType,
)
from .pace_engine import TrainingZones

logger = logging.getLogger(__name__)


# Fixed structures for repeat-based key sessions (minutes)
FARTLEK_STRUCTURE = {"warmup": 12, "reps": 6, "on": 2, "off": 2, "cooldown": 10}
INTERVAL_STRUCTURE = {"warmup": 15, "reps": 5, "on": 3, "off": 2, "cooldown": 10}

# Continuous threshold: 25% warm-up (max 15) / 50% main (min 15) / rest cool-down (min 10)
THRESHOLD_WARMUP_SHARE = 0.25
THRESHOLD_WARMUP_MAX = 15
THRESHOLD_MAIN_SHARE = 0.5
THRESHOLD_MAIN_MIN = 15
THRESHOLD_COOLDOWN_MIN = 10

# Long runs that finish at marathon pace
MARATHON_FINISH_PHASES = {Phase.SPECIFIC, Phase.POLISH}
MARATHON_FINISH_RPE = 5

SESSION_NOTES = {
    WorkoutType.EASY: "Conversational effort. Relaxed form, stay hydrated.",
    WorkoutType.LONG: "Even effort. Practice race-day fueling and hydration.",
    WorkoutType.FARTLEK: "Surges by feel inside the target zone. Keep 48h between hard sessions.",
    WorkoutType.THRESHOLD: "Comfortably hard, controlled breathing. Keep 48h between hard sessions.",
    WorkoutType.TEMPO: "Sharpening touch, do not race it. Keep 48h between hard sessions.",
    WorkoutType.INTERVAL: "Hard but repeatable reps. Keep 48h between hard sessions.",
}


@dataclass(frozen=True)
class Session:
    """A single scheduled workout."""
    week_number: int
    date: date
    workout_type: WorkoutType
    description: str
    duration_minutes: int
    distance_km: Optional[float]
    rpe: int
    notes: str

    @property
    def weekday(self) -> Weekday:
        return Weekday.from_index(self.date.weekday())

    def to_dict(self) -> Dict[str, Any]:
        return {
            "week_number": self.week_number,
            "date": self.date.isoformat(),
            "workout_type": self.workout_type.value,
            "description": self.description,
            "duration_minutes": self.duration_minutes,
            "distance_km": self.distance_km,
            "rpe": self.rpe,
            "notes": self.notes,
        }


def choose_long_run_day(day_indexes: Iterable[int]) -> Optional[int]:
    """Sunday if available, else Saturday, else the latest available day."""
    days = sorted(set(day_indexes))
    if not days:
        return None
    for preferred in (Weekday.SUNDAY.day_index, Weekday.SATURDAY.day_index):
        if preferred in days:
            return preferred
    return days[-1]


def select_training_days(available_days: Sequence[Weekday], weekly_frequency: int) -> List[int]:
    """
    Up to weekly_frequency distinct day indexes, in weekday order.

    The long-run day is always kept; the other slots go to the earliest
    remaining available days.
    """
    indexes = sorted({Weekday.parse(d).day_index for d in available_days})
    if not indexes or weekly_frequency <= 0:
        return []
    long_day = choose_long_run_day(indexes)
    others = [d for d in indexes if d != long_day][:max(0, weekly_frequency - 1)]
    return sorted(others + [long_day])


class WeekScheduler:
    """
    Place one week's sessions.

    Budget rules:
    - long run: progression from 8 km (+1.2 km/week), floored at 10 km and
      capped at 85% of the goal distance (80% above 30 km), scaled down
      around the event
    - what is left after the long run splits into an easy share
      (60%; 70% endurance focus; 50% speed focus) and a quality share
    - key session 35-65 min, easy runs 35-70 min each; no session is ever
      sized below these floors, so a very small target can be exceeded
    """

    def __init__(self):
        self.long_run_rules = ConfigService.get_long_run_rules()
        self.limits = ConfigService.get_session_limits()

    def build_week(
        self,
        week_number: int,
        week_start: date,
        target_minutes: float,
        zones: TrainingZones,
        available_days: Sequence[Weekday],
        weekly_frequency: int,
        goal_distance_km: float,
        phase: Phase,
        focus: Focus = Focus.BALANCED,
        tag: Optional[WeekTag] = None,
    ) -> List[Session]:
        """
        Build the sessions for one week.

        Stabilizer weeks repeat the previous week's long run instead of
        progressing it. Regen weeks have no key session.

        Returns:
            Sessions sorted by date. Fewer than weekly_frequency sessions
            are returned when fewer days are available.
        """
        if zones.is_empty:
            raise ValueError("WeekScheduler needs populated pace zones")

        days = select_training_days(available_days, weekly_frequency)
        if not days:
            return []

        long_day = choose_long_run_day(days)
        easy_pace = zones.midpoint_minutes("A2")

        progression_week = week_number - 1 if tag == WeekTag.STABILIZER else week_number
        long_km = self.long_run_km(max(1, progression_week), goal_distance_km, phase)
        long_min = round(long_km * easy_pace)
        if len(days) == 1:
            # single training day: the long run carries the whole week
            long_min = max(1, round(target_minutes))
            long_km = round(long_min / easy_pace, 1)

        sessions = [self._long_run(week_number, week_start, long_day, long_km, long_min, zones, phase)]

        other_days = [d for d in days if d != long_day]
        if other_days:
            key_type = self.key_workout_type(phase, focus)
            key_minutes = 0
            easy_days = other_days
            if key_type in KEY_WORKOUT_TYPES:
                key_budget = self.key_session_minutes(target_minutes, long_min, focus)
                key_day = self.choose_key_day(other_days, long_day)
                key = self._key_session(week_number, week_start, key_day, key_type, key_budget, zones)
                sessions.append(key)
                key_minutes = key.duration_minutes
                easy_days = [d for d in other_days if d != key_day]

            if easy_days:
                per_easy = self._clamp(
                    round((target_minutes - key_minutes - long_min) / len(easy_days)),
                    self.limits.get("easy_min_minutes", 35),
                    self.limits.get("easy_max_minutes", 70),
                )
                for d in easy_days:
                    sessions.append(self._easy_run(week_number, week_start, d, per_easy, zones))

        sessions.sort(key=lambda s: s.date)
        logger.debug(
            f"Week {week_number} ({phase.value}, focus={focus.value}): target={round(target_minutes)} min, "
            f"scheduled={sum(s.duration_minutes for s in sessions)} min over {len(sessions)} sessions"
        )
        return sessions

    # ------------------------------------------------------------------ #
    # Sizing
    # ------------------------------------------------------------------ #

    def long_run_peak_km(self, goal_distance_km: float) -> int:
        rules = self.long_run_rules
        if goal_distance_km <= rules.get("short_goal_max_km", 30):
            fraction = rules.get("peak_fraction_short", 0.85)
        else:
            fraction = rules.get("peak_fraction_long", 0.80)
        return round(goal_distance_km * fraction)

    def long_run_km(self, week_number: int, goal_distance_km: float, phase: Phase) -> float:
        """Long-run distance for a week: smoothed progression, phase-aware cap, 10 km floor."""
        rules = self.long_run_rules
        cap = self.long_run_peak_km(goal_distance_km) * LONG_RUN_PHASE_FACTOR.get(phase, 1.0)
        progression = rules.get("start_km", 8) + (week_number - 1) * rules.get("weekly_growth_km", 1.2)
        return max(rules.get("floor_km", 10), min(round(cap), round(progression)))

    def key_session_minutes(self, target_minutes: float, long_minutes: int, focus: Focus) -> int:
        limits = self.limits
        remaining = max(0, target_minutes - long_minutes)
        easy_minutes = round(remaining * EASY_SHARE[focus])
        quality_minutes = remaining - easy_minutes
        share = limits.get("key_share_speed", 0.7) if focus == Focus.SPEED else limits.get("key_share_balanced", 0.6)
        budget = round(max(quality_minutes * share, limits.get("key_floor_minutes", 40)))
        return self._clamp(budget, limits.get("key_min_minutes", 35), limits.get("key_max_minutes", 65))

    @staticmethod
    def key_workout_type(phase: Phase, focus: Focus) -> WorkoutType:
        """
        Fartlek in base, tempo in polish/taper, threshold otherwise;
        intervals for speed focus in build/specific. Regen weeks stay easy.
        """
        if phase == Phase.REGEN:
            return WorkoutType.EASY
        if focus == Focus.SPEED and phase in (Phase.BUILD, Phase.SPECIFIC):
            return WorkoutType.INTERVAL
        if phase == Phase.BASE:
            return WorkoutType.FARTLEK
        if phase in (Phase.POLISH, Phase.TAPER):
            return WorkoutType.TEMPO
        return WorkoutType.THRESHOLD

    @staticmethod
    def choose_key_day(candidates: Sequence[int], long_day: int) -> int:
        """
        Latest day at least two days before the long run; earliest
        candidate when none is far enough away.
        """
        spaced = [d for d in candidates if long_day - d >= KEY_TO_LONG_MIN_GAP_DAYS]
        if spaced:
            return spaced[-1]
        return min(candidates)

    @staticmethod
    def _clamp(value: int, lo: int, hi: int) -> int:
        return max(lo, min(hi, value))

    # ------------------------------------------------------------------ #
    # Prescriptions
    # ------------------------------------------------------------------ #

    @staticmethod
    def _distance(minutes: float, zone: str, zones: TrainingZones) -> float:
        return round(minutes / zones.midpoint_minutes(zone), 1)

    def _long_run(
        self,
        week_number: int,
        week_start: date,
        day: int,
        long_km: float,
        long_min: int,
        zones: TrainingZones,
        phase: Phase,
    ) -> Session:
        if phase in MARATHON_FINISH_PHASES:
            a3_part = round(long_min * self.long_run_rules.get("marathon_finish_fraction", 0.25))
            a2_part = long_min - a3_part
            description = (
                f"Long run: {a2_part} min at {zones.describe('A2')} "
                f"+ {a3_part} min at {zones.describe('A3')}"
            )
            distance = round(self._distance(a2_part, "A2", zones) + self._distance(a3_part, "A3", zones), 1)
            rpe = MARATHON_FINISH_RPE
        else:
            description = f"Long run {long_km:g} km at {zones.describe('A2')}."
            distance = float(long_km)
            rpe = RPE_BY_WORKOUT[WorkoutType.LONG]

        return Session(
            week_number=week_number,
            date=week_start + timedelta(days=day),
            workout_type=WorkoutType.LONG,
            description=description,
            duration_minutes=long_min,
            distance_km=distance,
            rpe=rpe,
            notes=SESSION_NOTES[WorkoutType.LONG],
        )

    def _key_session(
        self,
        week_number: int,
        week_start: date,
        day: int,
        workout_type: WorkoutType,
        budget: int,
        zones: TrainingZones,
    ) -> Session:
        if workout_type in (WorkoutType.FARTLEK, WorkoutType.INTERVAL):
            description, minutes, distance = self._repeats(workout_type, zones)
        else:
            description, minutes, distance = self._threshold(budget, zones)

        return Session(
            week_number=week_number,
            date=week_start + timedelta(days=day),
            workout_type=workout_type,
            description=description,
            duration_minutes=minutes,
            distance_km=distance,
            rpe=RPE_BY_WORKOUT[workout_type],
            notes=SESSION_NOTES[workout_type],
        )

    def _threshold(self, budget: int, zones: TrainingZones):
        warmup = min(THRESHOLD_WARMUP_MAX, round(budget * THRESHOLD_WARMUP_SHARE))
        main = max(THRESHOLD_MAIN_MIN, round(budget * THRESHOLD_MAIN_SHARE))
        cooldown = max(THRESHOLD_COOLDOWN_MIN, budget - warmup - main)
        description = "\n".join([
            f"Warm-up: {warmup} min at {zones.describe('A2')}",
            f"Main block: {main} min at {zones.describe('A4')}",
            f"Cool-down: {cooldown} min at {zones.describe('A2')}",
        ])
        distance = round(
            self._distance(warmup, "A2", zones)
            + self._distance(main, "A4", zones)
            + self._distance(cooldown, "A2", zones),
            1,
        )
        return description, warmup + main + cooldown, distance

    def _repeats(self, workout_type: WorkoutType, zones: TrainingZones):
        if workout_type == WorkoutType.FARTLEK:
            s, work_zone = FARTLEK_STRUCTURE, "A4"
        else:
            s, work_zone = INTERVAL_STRUCTURE, "A5"

        description = "\n".join([
            f"Warm-up: {s['warmup']} min at {zones.describe('A2')}",
            f"Repeat {s['reps']}x: {s['on']} min at {zones.describe(work_zone)} / {s['off']} min easy in A1–A2",
            f"Cool-down: {s['cooldown']} min at {zones.describe('A2')}",
        ])
        minutes = s["warmup"] + s["reps"] * (s["on"] + s["off"]) + s["cooldown"]
        distance = round(
            self._distance(s["warmup"], "A2", zones)
            + self._distance(s["reps"] * s["on"], work_zone, zones)
            + self._distance(s["reps"] * s["off"], "A2", zones)
            + self._distance(s["cooldown"], "A2", zones),
            1,
        )
        return description, minutes, distance

    def _easy_run(self, week_number: int, week_start: date, day: int, minutes: int, zones: TrainingZones) -> Session:
        return Session(
            week_number=week_number,
            date=week_start + timedelta(days=day),
            workout_type=WorkoutType.EASY,
            description=f"Easy run {minutes} min at {zones.describe('A2')}.",
            duration_minutes=minutes,
            distance_km=self._distance(minutes, "A2", zones),
            rpe=RPE_BY_WORKOUT[WorkoutType.EASY],
            notes=SESSION_NOTES[WorkoutType.EASY],
        )
