"""
Constants for plan generation.

These are DEFAULTS that can be overridden by config (plan_rules.yaml).
They exist here for type safety and documentation.
"""

from enum import Enum
from typing import Dict


class Weekday(str, Enum):
    """Training days. Index order is Monday=0 ... Sunday=6."""
    MONDAY = "monday"
    TUESDAY = "tuesday"
    WEDNESDAY = "wednesday"
    THURSDAY = "thursday"
    FRIDAY = "friday"
    SATURDAY = "saturday"
    SUNDAY = "sunday"

    @property
    def day_index(self) -> int:
        return WEEKDAY_INDEX[self]

    @classmethod
    def parse(cls, value: str) -> "Weekday":
        """
        Resolve a day name to a Weekday.

        Accepts English names, 3-letter abbreviations and the Portuguese
        questionnaire labels ("Seg", "Terça-feira", "Sábado", ...).
        Raises ValueError for anything else.
        """
        if isinstance(value, cls):
            return value
        key = str(value).strip().lower()
        if key in WEEKDAY_ALIASES:
            return WEEKDAY_ALIASES[key]
        raise ValueError(f"Unknown weekday: {value!r}")

    @classmethod
    def from_index(cls, idx: int) -> "Weekday":
        return WEEKDAYS_IN_ORDER[idx]


WEEKDAYS_IN_ORDER = [
    Weekday.MONDAY,
    Weekday.TUESDAY,
    Weekday.WEDNESDAY,
    Weekday.THURSDAY,
    Weekday.FRIDAY,
    Weekday.SATURDAY,
    Weekday.SUNDAY,
]

WEEKDAY_INDEX: Dict[Weekday, int] = {d: i for i, d in enumerate(WEEKDAYS_IN_ORDER)}

WEEKDAY_ALIASES: Dict[str, Weekday] = {
    # English
    "monday": Weekday.MONDAY, "mon": Weekday.MONDAY,
    "tuesday": Weekday.TUESDAY, "tue": Weekday.TUESDAY, "tues": Weekday.TUESDAY,
    "wednesday": Weekday.WEDNESDAY, "wed": Weekday.WEDNESDAY,
    "thursday": Weekday.THURSDAY, "thu": Weekday.THURSDAY, "thurs": Weekday.THURSDAY,
    "friday": Weekday.FRIDAY, "fri": Weekday.FRIDAY,
    "saturday": Weekday.SATURDAY, "sat": Weekday.SATURDAY,
    "sunday": Weekday.SUNDAY, "sun": Weekday.SUNDAY,
    # Portuguese (questionnaire labels)
    "seg": Weekday.MONDAY, "segunda": Weekday.MONDAY, "segunda-feira": Weekday.MONDAY,
    "ter": Weekday.TUESDAY, "terça": Weekday.TUESDAY, "terça-feira": Weekday.TUESDAY,
    "qua": Weekday.WEDNESDAY, "quarta": Weekday.WEDNESDAY, "quarta-feira": Weekday.WEDNESDAY,
    "qui": Weekday.THURSDAY, "quinta": Weekday.THURSDAY, "quinta-feira": Weekday.THURSDAY,
    "sex": Weekday.FRIDAY, "sexta": Weekday.FRIDAY, "sexta-feira": Weekday.FRIDAY,
    "sáb": Weekday.SATURDAY, "sab": Weekday.SATURDAY, "sábado": Weekday.SATURDAY,
    "sabado": Weekday.SATURDAY,
    "dom": Weekday.SUNDAY, "domingo": Weekday.SUNDAY,
}


class Phase(str, Enum):
    """Training phases."""
    BASE = "base"
    BUILD = "build"
    SPECIFIC = "specific"
    POLISH = "polish"
    TAPER = "taper"
    RACE = "race"
    REGEN = "regen"


class WeekTag(str, Enum):
    """Microcycle tags marking special handling around cutbacks and the event."""
    SHOCK = "shock"
    STABILIZER = "stabilizer"
    POLISH = "polish"
    COMPETITIVE = "competitive"


class WorkoutType(str, Enum):
    """Session vocabulary emitted in plans."""
    EASY = "Easy Run"
    THRESHOLD = "Threshold"
    TEMPO = "Tempo Run"
    FARTLEK = "Fartlek"
    INTERVAL = "Intervals"
    LONG = "Long Run"
    RACE = "Race Day"


class Focus(str, Enum):
    """Scheduling bias derived from short- vs long-distance fitness."""
    SPEED = "speed"
    ENDURANCE = "endurance"
    BALANCED = "balanced"


# Workouts counted as the week's quality ("key") session
KEY_WORKOUT_TYPES = {
    WorkoutType.THRESHOLD,
    WorkoutType.TEMPO,
    WorkoutType.FARTLEK,
    WorkoutType.INTERVAL,
}

# Zone names, slowest -> fastest
ZONE_NAMES = ["A1", "A2", "A3", "A4", "A5", "A6"]

ZONE_LABELS = {
    "A1": "Recovery",
    "A2": "Easy",
    "A3": "Marathon",
    "A4": "Threshold",
    "A5": "Interval",
    "A6": "Repetition",
}

# Engine routing: goal distances (km) the advanced engine supports
ADVANCED_MIN_DISTANCE_KM = 15
ADVANCED_MAX_DISTANCE_KM = 50

DEFAULT_PLAN_WEEKS = 12

# Periodization (3 ordinary weeks + 1 stabilizer, final-weeks overrides)
PERIODIZATION_RULES = {
    "weekly_ramp": 0.05,            # +5% per week over the base load
    "cutback_frequency": 4,         # every 4th week
    "cutback_reduction": 0.10,      # stabilizer weeks drop 10%
    "shock_factor": 1.05,           # 4th-from-last week
    "polish_factor": 0.70,          # 2nd-from-last week (taper)
    "race_week_fraction": 0.40,     # race week load = max(fraction * base, floor)
    "race_week_floor": 120,
    "regen_week_fraction": 0.30,    # trailing recovery week
    "regen_week_floor": 90,
}

# Baseline weekly load (minutes) = clamp(frequency * 60 + goal_km * 2)
BASE_LOAD_RULES = {
    "minutes_per_session": 60,
    "minutes_per_goal_km": 2,
    "min_minutes": 180,
    "max_minutes": 600,
    "fallback_minutes": 240,        # no parsable race result
}

# Long run progression (km)
LONG_RUN_RULES = {
    "floor_km": 10,
    "start_km": 8,
    "weekly_growth_km": 1.2,
    "peak_fraction_short": 0.85,    # goal <= 30 km
    "peak_fraction_long": 0.80,     # goal > 30 km
    "short_goal_max_km": 30,
    "marathon_finish_fraction": 0.25,
}

# Long run peak is scaled down in the weeks around the event
LONG_RUN_PHASE_FACTOR = {
    Phase.TAPER: 0.70,
    Phase.RACE: 0.50,
    Phase.REGEN: 0.50,
}

# Session sizing (minutes)
SESSION_LIMITS = {
    "key_min_minutes": 35,
    "key_max_minutes": 65,
    "key_floor_minutes": 40,
    "key_share_balanced": 0.6,
    "key_share_speed": 0.7,
    "easy_min_minutes": 35,
    "easy_max_minutes": 70,
}

# Share of the non-long-run minutes kept easy, by focus
EASY_SHARE = {
    Focus.BALANCED: 0.6,
    Focus.ENDURANCE: 0.7,
    Focus.SPEED: 0.5,
}

# Focus bias threshold: VDOT gap between best short (<=10 km) and long (>=21 km) result
FOCUS_RULES = {
    "short_max_km": 10,
    "long_min_km": 21,
    "vdot_gap": 0.5,
}

# Minimum gap in days between the key session and the long run
KEY_TO_LONG_MIN_GAP_DAYS = 2

RPE_BY_WORKOUT = {
    WorkoutType.EASY: 3,
    WorkoutType.LONG: 4,
    WorkoutType.FARTLEK: 6,
    WorkoutType.THRESHOLD: 7,
    WorkoutType.TEMPO: 7,
    WorkoutType.INTERVAL: 8,
    WorkoutType.RACE: 9,
}

# Legacy flat generator: tiers keyed by distance category (km)
LEGACY_DISTANCE_TEMPLATES = {
    5: {"min_weeks": 8, "max_weeks": 12, "base_volume_km": 15},
    10: {"min_weeks": 10, "max_weeks": 14, "base_volume_km": 25},
    21: {"min_weeks": 12, "max_weeks": 16, "base_volume_km": 40},
    42: {"min_weeks": 16, "max_weeks": 20, "base_volume_km": 60},
}

LEGACY_INTENSITY_SPLIT = {
    "easy": 0.7,
    "moderate": 0.2,
    "intense": 0.1,
}

LEGACY_PEAK_POSITION = 0.8
LEGACY_NOMINAL_PACE_MIN_PER_KM = 6.0
