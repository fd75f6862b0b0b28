"""
Plan Generation API Router

Endpoints for:
- Plan generation (advanced engine for 15-50 km goals, legacy otherwise)
- Plan export (CSV / JSON download)
- Pace zones from free-text race results
"""

import logging

from fastapi import APIRouter, Query
from fastapi.responses import Response

from core.config import settings
from core.exceptions import ExportError, PlanGenerationError, ValidationError
from schemas import PlanRequest, PlanResponse, ZonesRequest, ZonesResponse
from services.plan_export import export_plan
from services.plan_framework import (
    AthleteInput,
    PaceEngine,
    Plan,
    PlanInputError,
    TrainingZones,
    generate_training_plan,
)
from services.vdot_calculator import best_vdot_from_text

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/v1/plans", tags=["Plan Generation"])


def _athlete_from_request(request: PlanRequest) -> AthleteInput:
    duration = request.plan_duration_weeks
    if duration is None and request.event_date is None:
        duration = settings.DEFAULT_PLAN_WEEKS

    try:
        return AthleteInput.from_raw(
            athlete_id=request.athlete_id,
            athlete_name=request.athlete_name,
            start_date=request.start_date,
            event_date=request.event_date,
            plan_duration_weeks=duration,
            distance_km=request.distance_km,
            weekly_frequency=request.weekly_frequency,
            available_days=request.available_days,
            time_estimates=request.time_estimates,
            experience=request.experience,
            special_observations=request.special_observations,
            objective=request.objective,
        )
    except PlanInputError as e:
        raise ValidationError(e.message, field=e.field_name)


def _generate(request: PlanRequest) -> Plan:
    athlete = _athlete_from_request(request)
    try:
        return generate_training_plan(
            athlete,
            min_km=settings.ADVANCED_MIN_DISTANCE_KM,
            max_km=settings.ADVANCED_MAX_DISTANCE_KM,
        )
    except PlanInputError as e:
        raise ValidationError(e.message, field=e.field_name)
    except (ValueError, ZeroDivisionError) as e:
        logger.error(f"Plan generation failed for athlete {athlete.athlete_id or '?'}: {e}", exc_info=True)
        raise PlanGenerationError()


@router.post("", response_model=PlanResponse)
def create_plan(request: PlanRequest):
    """
    Generate a complete training plan.

    Missing or unparsable race results still produce a plan, with empty
    zones and a note recommending a time trial.
    """
    plan = _generate(request)
    return plan.to_dict()


@router.post("/export")
def download_plan(
    request: PlanRequest,
    format: str = Query("csv", pattern="^(csv|json)$", description="csv or json"),
):
    """Generate a plan and return it as a downloadable file."""
    plan = _generate(request)
    result = export_plan(plan, format, request.athlete_name)

    if not result.success:
        raise ExportError(result.error or "Export failed")

    logger.info(f"Exported plan for athlete {request.athlete_id or '?'} to {format} ({result.row_count} sessions)")

    return Response(
        content=result.content,
        media_type=result.content_type,
        headers={
            "Content-Disposition": f'attachment; filename="{result.filename}"'
        }
    )


@router.post("/zones", response_model=ZonesResponse)
def calculate_zones(request: ZonesRequest):
    """
    VDOT and A1-A6 zones from free-text race results.

    Nothing parsable is not an error: the response has no VDOT and
    empty pace strings.
    """
    estimate = best_vdot_from_text(request.time_estimates)
    if estimate.vdot is None:
        zones = TrainingZones.empty()
    else:
        zones = PaceEngine().calculate_from_vdot(estimate.vdot)

    return {
        "vdot": round(estimate.vdot, 1) if estimate.vdot is not None else None,
        "samples": [
            {
                "label": s.label,
                "distance_meters": s.distance_meters,
                "time_seconds": s.time_seconds,
                "vdot": round(s.vdot, 1),
            }
            for s in estimate.samples
        ],
        "zones": zones.to_dict(),
    }
