"""
Athlete Input

Typed, validated input for plan generation. Every "is this field present
and valid" check happens here, so the engine only ever sees clean values.

Usage:
    athlete = AthleteInput.from_raw(
        athlete_id="a-1",
        athlete_name="Ana",
        start_date="2025-01-06",
        event_date="2025-04-27",
        distance_km=21.1,
        weekly_frequency=4,
        available_days=["Tue", "Thu", "Sat", "Sun"],
        time_estimates="10k em 45:00",
    )
"""

import math
from dataclasses import dataclass
from datetime import date
from typing import List, Optional, Sequence, Union

from .constants import Weekday


class PlanInputError(ValueError):
    """Raised for calls the engine cannot interpret (bad dates, days, counts)."""

    def __init__(self, message: str, field_name: Optional[str] = None):
        super().__init__(message)
        self.message = message
        self.field_name = field_name


def parse_iso_date(value: Union[str, date, None], field_name: str) -> Optional[date]:
    if value is None or value == "":
        return None
    if isinstance(value, date):
        return value
    try:
        return date.fromisoformat(str(value).strip())
    except ValueError:
        raise PlanInputError(f"{field_name} must be an ISO date (YYYY-MM-DD), got {value!r}", field_name)


def parse_weekdays(values: Sequence[Union[str, Weekday]]) -> List[Weekday]:
    """Unique weekdays in Monday..Sunday order."""
    days = set()
    for value in values:
        try:
            days.add(Weekday.parse(value))
        except ValueError:
            raise PlanInputError(f"Unknown weekday: {value!r}", "available_days")
    return sorted(days, key=lambda d: d.day_index)


@dataclass(frozen=True)
class AthleteInput:
    """A single snapshot of what the athlete told us."""
    athlete_id: str
    athlete_name: str
    start_date: date
    distance_km: float
    weekly_frequency: int
    available_days: List[Weekday]
    event_date: Optional[date] = None
    plan_duration_weeks: Optional[int] = None
    time_estimates: str = ""
    experience: str = ""
    special_observations: str = ""
    objective: str = ""

    def __post_init__(self):
        if not isinstance(self.start_date, date):
            raise PlanInputError("start_date is required", "start_date")
        if self.event_date is not None and self.event_date < self.start_date:
            raise PlanInputError("event_date cannot be before start_date", "event_date")
        if self.plan_duration_weeks is not None and self.plan_duration_weeks <= 0:
            raise PlanInputError("plan_duration_weeks must be positive", "plan_duration_weeks")
        if self.distance_km is None or not math.isfinite(self.distance_km) or self.distance_km <= 0:
            raise PlanInputError("distance_km must be a positive finite number", "distance_km")
        if not 1 <= self.weekly_frequency <= 7:
            raise PlanInputError("weekly_frequency must be between 1 and 7", "weekly_frequency")
        if not self.available_days:
            raise PlanInputError("available_days cannot be empty", "available_days")

    @classmethod
    def from_raw(
        cls,
        *,
        start_date: Union[str, date],
        distance_km: Union[str, float],
        weekly_frequency: Union[str, int],
        available_days: Sequence[Union[str, Weekday]],
        athlete_id: str = "",
        athlete_name: str = "",
        event_date: Union[str, date, None] = None,
        plan_duration_weeks: Union[str, int, None] = None,
        time_estimates: Optional[str] = None,
        experience: Optional[str] = None,
        special_observations: Optional[str] = None,
        objective: Optional[str] = None,
    ) -> "AthleteInput":
        """Build from loosely-typed values (strings from a form or JSON body)."""
        start = parse_iso_date(start_date, "start_date")
        if start is None:
            raise PlanInputError("start_date is required", "start_date")

        try:
            km = float(str(distance_km).replace(",", "."))
        except (TypeError, ValueError):
            raise PlanInputError(f"distance_km must be a number, got {distance_km!r}", "distance_km")

        try:
            frequency = int(weekly_frequency)
        except (TypeError, ValueError):
            raise PlanInputError(
                f"weekly_frequency must be an integer, got {weekly_frequency!r}", "weekly_frequency"
            )

        duration = None
        if plan_duration_weeks not in (None, ""):
            try:
                duration = int(plan_duration_weeks)
            except (TypeError, ValueError):
                raise PlanInputError(
                    f"plan_duration_weeks must be an integer, got {plan_duration_weeks!r}", "plan_duration_weeks"
                )

        return cls(
            athlete_id=athlete_id or "",
            athlete_name=athlete_name or "",
            start_date=start,
            event_date=parse_iso_date(event_date, "event_date"),
            plan_duration_weeks=duration,
            distance_km=km,
            weekly_frequency=frequency,
            available_days=parse_weekdays(available_days or []),
            time_estimates=time_estimates or "",
            experience=experience or "",
            special_observations=special_observations or "",
            objective=objective or "",
        )
