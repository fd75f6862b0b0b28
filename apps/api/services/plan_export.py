"""
Plan Export Service

Turns a generated Plan into a downloadable file.

Supported formats:
- csv: one row per session, preceded by "#" comment lines with the
  athlete, VDOT and pace zones (opens directly in Google Sheets)
- json: Plan.to_dict() wrapped with an export version

Exports depend on the Plan alone (no wall clock), so the same plan always
exports to the same bytes and the same filename.
"""

import csv
import io
import json
import logging
from dataclasses import dataclass
from typing import Callable, Dict, List, Optional

from services.plan_framework.generator import Plan
from services.plan_framework.week_scheduler import Session

logger = logging.getLogger(__name__)

EXPORT_VERSION = "1.0"

CSV_HEADERS = [
    "Week",
    "Date",
    "Day",
    "Workout Type",
    "Duration (min)",
    "Distance (km)",
    "RPE",
    "Description",
    "Notes",
]

DAY_NAMES = ["Mon", "Tue", "Wed", "Thu", "Fri", "Sat", "Sun"]

MAX_FILENAME_STEM = 50
_FILENAME_UNSAFE = '<>:"/\\|?* '


@dataclass
class ExportResult:
    """A rendered export, ready to send as a file."""
    success: bool
    format: str
    filename: str
    content: str
    content_type: str
    row_count: int
    error: Optional[str] = None


def export_plan_to_csv(plan: Plan, athlete_name: str = "") -> ExportResult:
    """
    Render a plan as CSV.

    Args:
        plan: The generated plan
        athlete_name: Overrides plan.athlete_name in the header and filename

    Returns:
        ExportResult; success is False for a plan without sessions
    """
    if not plan.sessions:
        return ExportResult(
            success=False,
            format="csv",
            filename="",
            content="",
            content_type="text/csv",
            row_count=0,
            error="No sessions found in plan",
        )

    name = athlete_name or plan.athlete_name
    output = io.StringIO()
    writer = csv.writer(output)

    for line in _csv_preamble(plan, name):
        writer.writerow([line])
    writer.writerow([])

    writer.writerow(CSV_HEADERS)
    writer.writerows(_session_row(s) for s in plan.sessions)

    logger.info(f"Exported {len(plan.sessions)} sessions to CSV ({plan.engine} engine)")
    return ExportResult(
        success=True,
        format="csv",
        filename=_export_filename(plan, name, "csv"),
        content=output.getvalue(),
        content_type="text/csv; charset=utf-8",
        row_count=len(plan.sessions),
    )


def export_plan_to_json(plan: Plan, athlete_name: str = "") -> ExportResult:
    """Render a plan as JSON ({"export_version", "plan"})."""
    name = athlete_name or plan.athlete_name
    content = json.dumps(
        {"export_version": EXPORT_VERSION, "plan": plan.to_dict()},
        indent=2,
        ensure_ascii=False,
    )

    logger.info(f"Exported {len(plan.sessions)} sessions to JSON ({plan.engine} engine)")
    return ExportResult(
        success=True,
        format="json",
        filename=_export_filename(plan, name, "json"),
        content=content,
        content_type="application/json; charset=utf-8",
        row_count=len(plan.sessions),
    )


EXPORTERS: Dict[str, Callable[[Plan, str], ExportResult]] = {
    "csv": export_plan_to_csv,
    "json": export_plan_to_json,
}


def export_plan(plan: Plan, format: str, athlete_name: str = "") -> ExportResult:
    """Dispatch to the exporter for ``format`` (csv or json)."""
    exporter = EXPORTERS.get(format)
    if exporter is None:
        return ExportResult(
            success=False,
            format=format,
            filename="",
            content="",
            content_type="text/plain",
            row_count=0,
            error=f"Unsupported export format: {format}",
        )
    return exporter(plan, athlete_name)


# =============================================================================
# HELPER FUNCTIONS
# =============================================================================

def _csv_preamble(plan: Plan, name: str) -> List[str]:
    lines = [f"# Training plan: {name or 'athlete'}"]
    if plan.vdot is not None:
        lines.append(f"# VDOT: {plan.vdot:.1f}")
    lines.extend(
        f"# {z.name} {z.label}: {z.pace_min_per_km}-{z.pace_max_per_km} min/km"
        for z in plan.zones.as_list()
        if not z.is_empty
    )
    return lines


def _session_row(session: Session) -> list:
    return [
        session.week_number,
        session.date.isoformat(),
        DAY_NAMES[session.date.weekday()],
        session.workout_type.value,
        session.duration_minutes,
        "" if session.distance_km is None else session.distance_km,
        session.rpe,
        _clean_description(session.description),
        _clean_description(session.notes),
    ]


def _export_filename(plan: Plan, name: str, extension: str) -> str:
    """<athlete>_<first session date>.<ext>"""
    if plan.sessions:
        stamp = plan.sessions[0].date.strftime("%Y%m%d")
    elif plan.weeks:
        stamp = plan.weeks[0].start_date.strftime("%Y%m%d")
    else:
        stamp = "plan"
    return f"{_sanitize_filename(name)}_{stamp}.{extension}"


def _clean_description(description: Optional[str]) -> str:
    """Single line: newlines become " | ", runs of spaces collapse."""
    if not description:
        return ""
    return " ".join(description.replace("\r", " ").replace("\n", " | ").split())


def _sanitize_filename(name: str) -> str:
    """Replace characters unsafe in filenames; empty names become "training_plan"."""
    stem = "".join("_" if ch in _FILENAME_UNSAFE else ch for ch in (name or ""))
    stem = stem.strip("_")[:MAX_FILENAME_STEM]
    return stem or "training_plan"
