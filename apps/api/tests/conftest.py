"""
Pytest configuration and fixtures

The engine is pure computation: no database, no network. The only shared
state is the ConfigService cache, which is reset after every test.
"""
import pytest
import sys
import os
from datetime import date

# Add the parent directory to the path so we can import from services
sys.path.insert(0, os.path.dirname(os.path.dirname(os.path.abspath(__file__))))

from services.plan_framework.config import ConfigService
from services.plan_framework.athlete_input import AthleteInput
from services.plan_framework.constants import Weekday
from services.plan_framework.pace_engine import PaceEngine


# Monday
PLAN_START = date(2025, 1, 6)


@pytest.fixture(autouse=True)
def _reset_config():
    """Drop any in-memory rule overrides a test made."""
    yield
    ConfigService._config = None


@pytest.fixture
def zones_45():
    """Zones for a 45:00 10k (VDOT ~45.3)."""
    from services.vdot_calculator import calculate_vdot_from_race_time
    return PaceEngine().calculate_from_vdot(calculate_vdot_from_race_time(10000, 2700))


@pytest.fixture
def make_athlete():
    """Factory for validated athlete input with sensible defaults."""
    def _make(**overrides) -> AthleteInput:
        values = dict(
            athlete_id="athlete-1",
            athlete_name="Ana Souza",
            start_date=PLAN_START,
            event_date=None,
            plan_duration_weeks=12,
            distance_km=21.0,
            weekly_frequency=4,
            available_days=[Weekday.TUESDAY, Weekday.THURSDAY, Weekday.SATURDAY, Weekday.SUNDAY],
            time_estimates="10k em 45:00",
        )
        values.update(overrides)
        return AthleteInput(**values)
    return _make


@pytest.fixture
def half_marathon_athlete(make_athlete):
    return make_athlete()
