"""
Pace Engine

Maps a VDOT score to the six A1-A6 training zones.

Usage:
    pace_engine = PaceEngine()

    zones = pace_engine.calculate_from_vdot(45.3)
    zones.describe("A4")          # "A4 (4:29–4:40 min/km)"
    zones.midpoint_minutes("A2")  # 6.33
"""

import logging
from dataclasses import dataclass
from typing import Dict, List, Optional

from services.vdot_calculator import (
    format_pace,
    pace_to_minutes,
    percent_vo2max_at_duration,
    predict_time_for_distance,
    velocity_at_vo2max,
    velocity_from_vo2,
)
from .constants import ZONE_LABELS, ZONE_NAMES

logger = logging.getLogger(__name__)


# Bands as fractions of a reference velocity (vVO2max unless noted)
ZONE_BANDS = {
    "A1": (0.50, 0.58),
    "A2": (0.59, 0.74),
    "A3": (0.99, 1.01),     # around predicted marathon velocity
    "A4": (0.98, 1.02),     # around 60-minute race velocity
    "A5": (0.98, 1.02),     # around vVO2max
    "A6": (0.985, 1.015),   # around ~5.5-minute race velocity
}

THRESHOLD_DURATION_MINUTES = 60
REPETITION_DURATION_MINUTES = 5.5
MARATHON_METERS = 42195


@dataclass(frozen=True)
class PaceZone:
    """One training zone. pace_min is the fast end, pace_max the slow end (min/km)."""
    name: str
    label: str
    pace_min_per_km: str
    pace_max_per_km: str

    @property
    def is_empty(self) -> bool:
        return not (self.pace_min_per_km and self.pace_max_per_km)

    def midpoint_minutes(self) -> Optional[float]:
        if self.is_empty:
            return None
        return (pace_to_minutes(self.pace_min_per_km) + pace_to_minutes(self.pace_max_per_km)) / 2

    def to_dict(self) -> Dict[str, str]:
        return {
            "label": self.label,
            "pace_min_per_km": self.pace_min_per_km,
            "pace_max_per_km": self.pace_max_per_km,
        }


@dataclass(frozen=True)
class TrainingZones:
    """All six zones, ordered slowest (A1) to fastest (A6)."""
    vdot: Optional[float]
    zones: tuple

    @classmethod
    def empty(cls) -> "TrainingZones":
        """Zones with empty pace strings, used when no fitness score exists."""
        return cls(
            vdot=None,
            zones=tuple(PaceZone(name, ZONE_LABELS[name], "", "") for name in ZONE_NAMES),
        )

    @property
    def is_empty(self) -> bool:
        return all(z.is_empty for z in self.zones)

    def get(self, name: str) -> PaceZone:
        for zone in self.zones:
            if zone.name == name:
                return zone
        raise KeyError(name)

    def midpoint_minutes(self, name: str) -> Optional[float]:
        return self.get(name).midpoint_minutes()

    def describe(self, name: str) -> str:
        """Zone reference used inside session prescriptions."""
        zone = self.get(name)
        if zone.is_empty:
            return name
        return f"{name} ({zone.pace_min_per_km}–{zone.pace_max_per_km} min/km)"

    def to_dict(self) -> Dict[str, Dict[str, str]]:
        return {zone.name: zone.to_dict() for zone in self.zones}

    def as_list(self) -> List[PaceZone]:
        return list(self.zones)


def _pace_range(name: str, v_slow: float, v_fast: float) -> PaceZone:
    # faster velocity -> smaller (faster) pace
    return PaceZone(
        name=name,
        label=ZONE_LABELS[name],
        pace_min_per_km=format_pace(1000 / max(v_fast, 1e-6)),
        pace_max_per_km=format_pace(1000 / max(v_slow, 1e-6)),
    )


class PaceEngine:
    """
    Calculate training zones from a VDOT score.

    Reference velocities:
    - vVO2max (velocity where oxygen cost equals VDOT) for A1, A2, A5
    - predicted marathon velocity for A3
    - 60-minute race velocity (threshold) for A4
    - ~5.5-minute race velocity (repetition) for A6
    """

    def calculate_from_vdot(self, vdot: float) -> TrainingZones:
        """
        Calculate the six zones for a VDOT.

        Callers short-circuit to TrainingZones.empty() when no VDOT exists;
        a non-positive VDOT here is a programming error.
        """
        if vdot is None or vdot <= 0:
            raise ValueError(f"VDOT must be positive, got {vdot!r}")

        references = self.reference_velocities(vdot)
        zones = []
        for name in ZONE_NAMES:
            low, high = ZONE_BANDS[name]
            ref = references[name]
            zones.append(_pace_range(name, ref * low, ref * high))

        logger.debug(f"Zones for VDOT {vdot:.1f}: " + ", ".join(
            f"{z.name}={z.pace_min_per_km}-{z.pace_max_per_km}" for z in zones
        ))
        return TrainingZones(vdot=vdot, zones=tuple(zones))

    def reference_velocities(self, vdot: float) -> Dict[str, float]:
        """Center velocity (m/min) each zone band is applied to."""
        v_vo2max = velocity_at_vo2max(vdot)
        v_threshold = self._race_velocity(vdot, THRESHOLD_DURATION_MINUTES)
        v_repetition = self._race_velocity(vdot, REPETITION_DURATION_MINUTES)
        marathon_minutes = predict_time_for_distance(vdot, MARATHON_METERS) / 60
        v_marathon = self._race_velocity(vdot, marathon_minutes)

        return {
            "A1": v_vo2max,
            "A2": v_vo2max,
            "A3": v_marathon,
            "A4": v_threshold,
            "A5": v_vo2max,
            "A6": v_repetition,
        }

    @staticmethod
    def _race_velocity(vdot: float, t_minutes: float) -> float:
        return velocity_from_vo2(vdot * percent_vo2max_at_duration(t_minutes))
