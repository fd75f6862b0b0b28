"""
Phase Builder

Divides a plan into weekly blocks with a target load and a phase label.

Structure:
- 3 progressive weeks + 1 stabilizer (cutback) week, repeating
- With an event date, the last four weeks run shock -> stabilizer ->
  polish (taper) -> competitive (race), followed by one regen week

Usage:
    builder = PhaseBuilder()
    weeks = builder.build_periodization(
        start_date=date(2025, 1, 6),
        event_date=date(2025, 4, 28),
        base_weekly_minutes=330,
    )
"""

import logging
from datetime import date, timedelta
from dataclasses import dataclass
from typing import Any, Dict, List, Optional

from .config import ConfigService
from .constants import Phase, WeekTag

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class PeriodWeek:
    """A single calendar week of the plan."""
    index: int  # 1-based
    start_date: date
    target_load: float  # minutes
    phase: Phase
    tag: Optional[WeekTag] = None

    def to_dict(self) -> Dict[str, Any]:
        return {
            "index": self.index,
            "start_date": self.start_date.isoformat(),
            "target_load": round(self.target_load, 1),
            "phase": self.phase.value,
            "tag": self.tag.value if self.tag else None,
        }


def weeks_between(start: date, end: date) -> int:
    """Whole weeks from start to end (negative if end is earlier)."""
    return (end - start).days // 7


class PhaseBuilder:
    """
    Build the periodization for a plan.

    Load model:
    - ramp: base * (1 + ramp * (week - 1))
    - every Nth week: ramp * (1 - cutback), tagged stabilizer
    - final-weeks overrides (event date, >= 4 weeks) replace the ramp/cutback
      for those weeks rather than compounding with them
    """

    def __init__(self, rules: Optional[Dict[str, Any]] = None):
        self.rules = rules or ConfigService.get_periodization_rules()

    def total_weeks(
        self,
        start_date: date,
        event_date: Optional[date] = None,
        weeks: Optional[int] = None,
    ) -> int:
        """Weeks up to and including race week (the regen week is not counted)."""
        if event_date is not None:
            return max(1, weeks_between(start_date, event_date) + 1)
        if weeks is None:
            weeks = ConfigService.get_default_plan_weeks()
        return max(1, weeks)

    def build_periodization(
        self,
        start_date: date,
        base_weekly_minutes: float,
        event_date: Optional[date] = None,
        weeks: Optional[int] = None,
    ) -> List[PeriodWeek]:
        """
        Build the ordered list of weeks.

        Args:
            start_date: First day of week 1
            base_weekly_minutes: Week-1 target load
            event_date: Goal race date (optional)
            weeks: Plan length when there is no event date (default from config)

        Returns:
            Contiguous PeriodWeek list; a trailing regen week is appended
            when an event date is given.
        """
        total = self.total_weeks(start_date, event_date, weeks)
        has_event = event_date is not None
        final_overrides = has_event and total >= 4

        ramp_rate = self.rules.get("weekly_ramp", 0.05)
        cutback_every = self.rules.get("cutback_frequency", 4)
        cutback = self.rules.get("cutback_reduction", 0.10)

        block_weeks = total - 2 if final_overrides else total
        out: List[PeriodWeek] = []

        for i in range(1, total + 1):
            ramp = base_weekly_minutes * (1 + ramp_rate * (i - 1))
            phase = self._block_phase(i, block_weeks)
            tag = None
            load = ramp

            if cutback_every and i % cutback_every == 0:
                load = ramp * (1 - cutback)
                tag = WeekTag.STABILIZER

            if final_overrides:
                override = self._final_week_override(total - i, ramp, base_weekly_minutes)
                if override is not None:
                    load, tag, override_phase = override
                    phase = override_phase or phase

            out.append(PeriodWeek(
                index=i,
                start_date=start_date + timedelta(days=7 * (i - 1)),
                target_load=load,
                phase=phase,
                tag=tag,
            ))

        if has_event:
            last = out[-1]
            out.append(PeriodWeek(
                index=last.index + 1,
                start_date=last.start_date + timedelta(days=7),
                target_load=max(
                    base_weekly_minutes * self.rules.get("regen_week_fraction", 0.30),
                    self.rules.get("regen_week_floor", 90),
                ),
                phase=Phase.REGEN,
            ))

        logger.debug(
            f"Periodization: {len(out)} weeks from {start_date.isoformat()}"
            f" (event={'yes' if has_event else 'no'}, base={base_weekly_minutes})"
        )
        return out

    def _final_week_override(self, from_end: int, ramp: float, base: float):
        """(load, tag, phase) for the last four weeks before the event, else None."""
        cutback = self.rules.get("cutback_reduction", 0.10)
        if from_end == 3:
            return ramp * self.rules.get("shock_factor", 1.05), WeekTag.SHOCK, None
        if from_end == 2:
            return ramp * (1 - cutback), WeekTag.STABILIZER, None
        if from_end == 1:
            return ramp * self.rules.get("polish_factor", 0.70), WeekTag.POLISH, Phase.TAPER
        if from_end == 0:
            load = max(
                base * self.rules.get("race_week_fraction", 0.40),
                self.rules.get("race_week_floor", 120),
            )
            return load, WeekTag.COMPETITIVE, Phase.RACE
        return None

    @staticmethod
    def _block_phase(week: int, block_weeks: int) -> Phase:
        """
        Phase for an ordinary week: first third base, last third specific,
        build in between. Blocks under three weeks are all build.
        """
        if block_weeks < 3:
            return Phase.BUILD
        third = block_weeks // 3
        if week <= third:
            return Phase.BASE
        if week > block_weeks - third:
            return Phase.SPECIFIC
        return Phase.BUILD
