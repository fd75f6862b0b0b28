# Plan Generation Framework
#
# Personalized running plans from a single athlete snapshot.
#
# Architecture:
# - Race results -> VDOT -> A1-A6 pace zones
# - Config-driven periodization (3 progressive + 1 stabilizer week, event taper)
# - Per-week session placement (long run, one key session, easy runs)
# - Flat legacy generator for goal distances outside the advanced range

from .config import ConfigService
from .athlete_input import AthleteInput, PlanInputError
from .pace_engine import PaceEngine, PaceZone, TrainingZones
from .phase_builder import PhaseBuilder, PeriodWeek
from .week_scheduler import WeekScheduler, Session
from .generator import PlanGenerator, Plan, generate_training_plan
from .legacy_generator import LegacyPlanGenerator
from .constants import Weekday, Phase, WeekTag, WorkoutType, Focus

__all__ = [
    # Core services
    'ConfigService',

    # Input
    'AthleteInput',
    'PlanInputError',

    # Generator components
    'PaceEngine',
    'PaceZone',
    'TrainingZones',
    'PhaseBuilder',
    'PeriodWeek',
    'WeekScheduler',
    'Session',

    # Main generators
    'PlanGenerator',
    'Plan',
    'generate_training_plan',
    'LegacyPlanGenerator',

    # Constants
    'Weekday',
    'Phase',
    'WeekTag',
    'WorkoutType',
    'Focus',
]
