"""
Weekly Report API Endpoints

Manual generation, listing, summary regeneration and CSV export
"""
from fastapi import APIRouter, Depends, HTTPException, Response
from typing import Optional
from datetime import date as Date

from pydantic import Field, ValidationError

from ...exceptions import InvalidWeekRangeError, StandupTrackerError
from ...schemas.report import CamelModel, WeekRange
from ...services.csv_export import csv_filename, report_to_csv
from ...services.report_pipeline import WeeklyReportPipeline
from ...services.report_store import ReportStore
from ...utils import dates
from ...utils.logging import get_logger
from .deps import get_pipeline, get_report_store

logger = get_logger(__name__)

router = APIRouter()


class GenerateReportRequest(CamelModel):
    """Request to generate a weekly report"""
    week_start: Optional[Date] = Field(None, description="First day (defaults to this week's Monday)")
    week_end: Optional[Date] = Field(None, description="Last day (defaults to this week's Sunday)")
    use_ai: bool = True
    force: bool = Field(False, description="Create another report even if one exists for the week")
    custom_prompt: Optional[str] = None


class RegenerateRequest(CamelModel):
    custom_prompt: Optional[str] = None


def _resolve_week(request: GenerateReportRequest) -> WeekRange:
    if request.week_start is None and request.week_end is None:
        return dates.current_week()
    if request.week_start is None or request.week_end is None:
        raise InvalidWeekRangeError("Both weekStart and weekEnd are required")
    try:
        return WeekRange(week_start=request.week_start, week_end=request.week_end)
    except ValidationError:
        raise InvalidWeekRangeError("Start date must be before or equal to end date")


@router.post("/generate", response_model=dict, status_code=201)
async def generate_weekly_report(
    request: GenerateReportRequest,
    response: Response,
    pipeline: WeeklyReportPipeline = Depends(get_pipeline)
):
    """
    Generate a weekly report for an explicit week

    An existing report for the week is respected unless ``force`` is set.
    """

    try:
        week = _resolve_week(request)
        report = await pipeline.generate_for_week(
            week,
            use_ai=request.use_ai,
            force=request.force,
            custom_prompt=request.custom_prompt,
        )
    except InvalidWeekRangeError as e:
        raise HTTPException(status_code=400, detail=e.message)
    except StandupTrackerError as e:
        raise HTTPException(status_code=500, detail=e.message)
    except Exception as e:
        logger.error(f"Unexpected error generating weekly report: {e}", exc_info=True)
        raise HTTPException(status_code=500, detail=f"Internal server error: {str(e)}")

    if report is None:
        response.status_code = 200
        return {
            "message": f"Weekly report already exists for {week}",
            "skipped": True,
            "data": None
        }

    return {
        "message": "Weekly report generated successfully",
        "skipped": False,
        "data": report.to_payload()
    }


@router.get("", response_model=dict)
async def list_weekly_reports(
    limit: int = 10,
    offset: int = 0,
    store: ReportStore = Depends(get_report_store)
):
    """Stored weekly reports, newest first"""

    try:
        reports = await store.list_reports(limit=limit, offset=offset)
    except StandupTrackerError as e:
        raise HTTPException(status_code=500, detail=e.message)

    return {
        "reports": [report.to_payload() for report in reports],
        "total": len(reports)
    }


@router.get("/{report_id}", response_model=dict)
async def get_weekly_report(report_id: int, store: ReportStore = Depends(get_report_store)):
    """Get a specific weekly report by ID"""
    report = await _load_report(report_id, store)
    return report.to_payload()


@router.post("/{report_id}/regenerate", response_model=dict)
async def regenerate_weekly_summary(
    report_id: int,
    request: Optional[RegenerateRequest] = None,
    pipeline: WeeklyReportPipeline = Depends(get_pipeline)
):
    """Re-run the AI summary over a stored report's entries"""

    try:
        report = await pipeline.regenerate_report(
            report_id,
            custom_prompt=request.custom_prompt if request else None,
        )
    except ValueError as e:
        raise HTTPException(status_code=404, detail=str(e))
    except StandupTrackerError as e:
        raise HTTPException(status_code=500, detail=e.message)

    return {
        "message": "Weekly summary regenerated successfully",
        "data": report.to_payload()
    }


@router.get("/{report_id}/csv")
async def export_weekly_report_csv(report_id: int, store: ReportStore = Depends(get_report_store)):
    """Download a report's entries as CSV"""
    report = await _load_report(report_id, store)
    return Response(
        content=report_to_csv(report),
        media_type="text/csv",
        headers={"Content-Disposition": f'attachment; filename="{csv_filename(report)}"'},
    )


async def _load_report(report_id: int, store: ReportStore):
    try:
        report = await store.get(report_id)
    except StandupTrackerError as e:
        raise HTTPException(status_code=500, detail=e.message)

    if not report:
        raise HTTPException(status_code=404, detail="Weekly report not found")

    return report
