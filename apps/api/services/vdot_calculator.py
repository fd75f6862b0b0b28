"""
Training Pace Calculator - Based on Daniels' Running Formula

Fitness scores (VDOT) from race performances, and the inverse: predicted
velocities and race times for a given VDOT.

Based on publicly available formulas from Dr. Jack Daniels' research:
    VO2 (ml/kg/min) = -4.60 + 0.182258 * v + 0.000104 * v^2     (v in m/min)
    %VO2max(t)      = 0.8 + 0.1894393 * e^(-0.012778 * t)
                          + 0.2989558 * e^(-0.1932605 * t)     (t in minutes)

Not affiliated with VDOT O2 or The Run SMART Project.
"""
import logging
import math
from dataclasses import dataclass, field
from typing import Dict, List, Optional

from services.race_parser import RaceSample, extract_race_samples

logger = logging.getLogger(__name__)


# Bisection window for time prediction (minutes). 40 halvings of this
# window converge far below one second.
PREDICTION_MIN_MINUTES = 3.0
PREDICTION_MAX_MINUTES = 360.0
PREDICTION_ITERATIONS = 40

# Oxygen cost coefficients
_VO2_A = 0.000104
_VO2_B = 0.182258
_VO2_C = -4.60


@dataclass
class SampleVDOT:
    """VDOT computed for one parsed race result."""
    label: str
    distance_meters: float
    time_seconds: int
    vdot: float

    @property
    def distance_km(self) -> float:
        return self.distance_meters / 1000.0


@dataclass
class VDOTEstimate:
    """Best VDOT found in a block of text, plus every per-sample score (best first)."""
    vdot: Optional[float]
    samples: List[SampleVDOT] = field(default_factory=list)

    def best_vdot_within(self, min_km: float = 0.0, max_km: float = math.inf) -> Optional[float]:
        """Best VDOT among samples whose distance lies in [min_km, max_km]."""
        scores = [s.vdot for s in self.samples if min_km <= s.distance_km <= max_km]
        return max(scores) if scores else None


def vo2_from_velocity(velocity_m_per_min: float) -> float:
    """Oxygen cost (ml/kg/min) of running at the given velocity."""
    v = velocity_m_per_min
    return _VO2_C + _VO2_B * v + _VO2_A * v * v


def velocity_from_vo2(vo2: float) -> float:
    """
    Velocity (m/min) whose oxygen cost equals vo2.

    Positive root of the quadratic above. The discriminant is clamped at
    zero so extreme inputs saturate instead of failing.
    """
    a = _VO2_A
    b = _VO2_B
    c = -(vo2 - _VO2_C)
    disc = b * b - 4 * a * c
    return (-b + math.sqrt(max(disc, 0.0))) / (2 * a)


def percent_vo2max_at_duration(t_minutes: float) -> float:
    """Fraction of VO2max sustainable for an all-out effort of t_minutes."""
    return (
        0.8
        + 0.1894393 * math.exp(-0.012778 * t_minutes)
        + 0.2989558 * math.exp(-0.1932605 * t_minutes)
    )


def calculate_vdot_from_race_time(distance_meters: float, time_seconds: float) -> Optional[float]:
    """
    Calculate VDOT from a race time and distance.

    Args:
        distance_meters: Race distance in meters
        time_seconds: Race time in seconds

    Returns:
        VDOT score (float) or None for non-positive inputs
    """
    if distance_meters is None or time_seconds is None:
        return None
    if distance_meters <= 0 or time_seconds <= 0:
        return None

    t_minutes = time_seconds / 60.0
    velocity = distance_meters / t_minutes
    vo2 = vo2_from_velocity(velocity)
    return vo2 / percent_vo2max_at_duration(t_minutes)


def velocity_at_vo2max(vdot: float) -> float:
    """vVO2max: the velocity (m/min) at which oxygen cost equals VDOT."""
    return velocity_from_vo2(vdot)


def predict_velocity_at_duration(vdot: float, t_minutes: float) -> float:
    """Velocity (m/min) sustainable for t_minutes at the given VDOT."""
    vo2 = vdot * percent_vo2max_at_duration(t_minutes)
    return velocity_from_vo2(vo2)


def predict_time_for_distance(vdot: float, distance_meters: float) -> float:
    """
    Predicted race time (seconds) for a distance.

    No closed form exists because the sustainable velocity depends on the
    duration itself, so this bisects over [3, 360] minutes for a fixed
    number of iterations. Results outside the window saturate at its edges.
    """
    lo = PREDICTION_MIN_MINUTES
    hi = PREDICTION_MAX_MINUTES
    for _ in range(PREDICTION_ITERATIONS):
        mid = (lo + hi) / 2
        covered = predict_velocity_at_duration(vdot, mid) * mid
        if covered > distance_meters:
            hi = mid
        else:
            lo = mid
    return ((lo + hi) / 2) * 60


def calculate_equivalent_race_time(vdot: float, target_distance_meters: float) -> Optional[Dict]:
    """
    Equivalent race performance at another distance.

    Returns:
        Dictionary with predicted time and pace, or None for invalid input
    """
    if vdot is None or vdot <= 0 or target_distance_meters <= 0:
        return None

    time_seconds = predict_time_for_distance(vdot, target_distance_meters)
    pace_seconds_per_km = time_seconds / (target_distance_meters / 1000)

    return {
        "distance_m": target_distance_meters,
        "time_seconds": int(round(time_seconds)),
        "time_formatted": format_time(time_seconds),
        "pace_km": format_pace(pace_seconds_per_km / 60),
    }


def format_time(seconds: float) -> str:
    """Format a duration as h:mm:ss (or m:ss under an hour)."""
    total = int(math.floor(seconds + 0.5))
    hours = total // 3600
    minutes = (total % 3600) // 60
    secs = total % 60
    if hours > 0:
        return f"{hours}:{minutes:02d}:{secs:02d}"
    return f"{minutes}:{secs:02d}"


def format_pace(minutes_per_km: float) -> str:
    """Format a pace in minutes/km as M:SS, rounded to the nearest second."""
    total_seconds = int(math.floor(minutes_per_km * 60 + 0.5))
    return f"{total_seconds // 60}:{total_seconds % 60:02d}"


def pace_to_minutes(pace: str) -> float:
    """Parse an M:SS pace string back to decimal minutes."""
    minutes, _, seconds = pace.partition(":")
    return int(minutes) + (int(seconds) if seconds else 0) / 60.0


def vdot_for_sample(sample: RaceSample) -> Optional[SampleVDOT]:
    vdot = calculate_vdot_from_race_time(sample.distance_meters, sample.time_seconds)
    if vdot is None:
        return None
    return SampleVDOT(
        label=sample.label,
        distance_meters=sample.distance_meters,
        time_seconds=sample.time_seconds,
        vdot=vdot,
    )


def best_vdot_from_text(text: Optional[str]) -> VDOTEstimate:
    """
    Best VDOT found in free-form race results ("10k em 45:00; 21k 1:40:00").

    An empty result (vdot=None, no samples) is a normal outcome: the athlete
    simply gave no usable time.
    """
    scored = []
    for sample in extract_race_samples(text):
        result = vdot_for_sample(sample)
        if result is None:
            logger.debug(f"Skipping degenerate race sample: {sample}")
            continue
        scored.append(result)

    if not scored:
        return VDOTEstimate(vdot=None, samples=[])

    scored.sort(key=lambda s: s.vdot, reverse=True)
    return VDOTEstimate(vdot=scored[0].vdot, samples=scored)
