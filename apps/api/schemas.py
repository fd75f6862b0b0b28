from pydantic import BaseModel, ConfigDict, Field
from datetime import date
from typing import Optional, List, Dict


class PlanRequest(BaseModel):
    """One athlete snapshot, as submitted by the questionnaire."""
    model_config = ConfigDict(str_strip_whitespace=True)

    athlete_id: str = ""
    athlete_name: str = ""
    start_date: date
    event_date: Optional[date] = None
    plan_duration_weeks: Optional[int] = Field(None, ge=1, le=52, description="Required when there is no event date")
    distance_km: float = Field(..., gt=0, description="Goal distance in kilometers")
    weekly_frequency: int = Field(..., ge=1, le=7)
    available_days: List[str] = Field(..., min_length=1, description="Weekday names (English or Portuguese)")
    time_estimates: Optional[str] = Field(None, description='Free text race results, e.g. "10k em 45:00"')
    experience: Optional[str] = None
    special_observations: Optional[str] = None
    objective: Optional[str] = None


class ZonesRequest(BaseModel):
    time_estimates: str = ""


class PaceZoneResponse(BaseModel):
    label: str
    pace_min_per_km: str
    pace_max_per_km: str


class SessionResponse(BaseModel):
    week_number: int
    date: date
    workout_type: str
    description: str
    duration_minutes: int
    distance_km: Optional[float] = None
    rpe: int
    notes: str


class PeriodWeekResponse(BaseModel):
    index: int
    start_date: date
    target_load: float
    phase: str
    tag: Optional[str] = None


class PlanResponse(BaseModel):
    athlete_id: str
    athlete_name: str
    engine: str
    vdot: Optional[float] = None
    zones: Dict[str, PaceZoneResponse]
    weeks: List[PeriodWeekResponse]
    sessions: List[SessionResponse]
    notes: List[str]


class SampleScoreResponse(BaseModel):
    label: str
    distance_meters: float
    time_seconds: int
    vdot: float


class ZonesResponse(BaseModel):
    vdot: Optional[float] = None
    samples: List[SampleScoreResponse]
    zones: Dict[str, PaceZoneResponse]
