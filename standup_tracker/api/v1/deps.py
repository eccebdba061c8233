from fastapi import Depends, Request
from sqlalchemy.ext.asyncio import AsyncSession

from ...agents.field_draft_agent import FieldDraftAgent
from ...database import get_db
from ...services.report_pipeline import WeeklyReportPipeline
from ...services.report_store import ReportStore
from ...services.standup_service import StandupService


def get_pipeline(request: Request) -> WeeklyReportPipeline:
    """Pipeline shared with the scheduler, created in the app lifespan"""
    pipeline = getattr(request.app.state, "pipeline", None)
    if pipeline is None:
        pipeline = WeeklyReportPipeline()
        request.app.state.pipeline = pipeline
    return pipeline


def get_report_store(db: AsyncSession = Depends(get_db)) -> ReportStore:
    return ReportStore(db)


def get_standup_service(db: AsyncSession = Depends(get_db)) -> StandupService:
    return StandupService(db)


def get_field_draft_agent() -> FieldDraftAgent:
    return FieldDraftAgent()
