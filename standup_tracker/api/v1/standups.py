"""
Standup API Endpoints

Submitting daily updates, reading a day's updates and drafting fields with AI
"""
from fastapi import APIRouter, Depends, HTTPException
from typing import List, Optional
from datetime import date as Date

from pydantic import Field

from ...agents.field_draft_agent import FIELD_TYPES, FieldDraftAgent
from ...exceptions import StandupTrackerError
from ...schemas.report import CamelModel, TeamMemberUpdate
from ...services.standup_service import StandupService
from ...utils import dates
from ...utils.logging import get_logger
from .deps import get_field_draft_agent, get_standup_service

logger = get_logger(__name__)

router = APIRouter()


class SaveUpdateRequest(CamelModel):
    """A team member's update for one day"""
    member_id: str = Field(..., description="Stable team member identifier")
    name: str
    role: str
    avatar: str = ""
    yesterday: str = ""
    today: str = ""
    blockers: str = ""
    date: Optional[Date] = Field(None, description="Standup date (defaults to today)")


class DraftRequest(CamelModel):
    """Request to draft one or all standup fields"""
    name: str
    role: str
    field: Optional[str] = Field(None, description="yesterday, today or blockers; omit for all three")
    context: Optional[str] = None
    previous_entries: List[TeamMemberUpdate] = Field(default_factory=list)
    date: Optional[Date] = None


@router.post("/updates", response_model=dict, status_code=201)
async def save_standup_update(
    request: SaveUpdateRequest,
    service: StandupService = Depends(get_standup_service)
):
    """Create or replace a member's update for the day"""

    try:
        update = await service.save_update(
            member_key=request.member_id,
            name=request.name,
            role=request.role,
            yesterday=request.yesterday,
            today=request.today,
            blockers=request.blockers,
            avatar=request.avatar,
            on_date=request.date,
        )
    except ValueError as e:
        raise HTTPException(status_code=400, detail=str(e))
    except StandupTrackerError as e:
        logger.error(f"Failed to save standup update: {e}")
        raise HTTPException(status_code=500, detail=e.message)

    return {
        "message": "Standup update saved successfully",
        "data": update.to_payload()
    }


@router.get("/today", response_model=dict)
async def get_today_standup(service: StandupService = Depends(get_standup_service)):
    """Updates submitted today, in the reference timezone"""
    return await _updates_for(dates.reference_date(), service)


@router.get("/date/{day}", response_model=dict)
async def get_standup_by_date(day: Date, service: StandupService = Depends(get_standup_service)):
    """Updates submitted for a specific date"""
    return await _updates_for(day, service)


@router.post("/draft", response_model=dict)
async def draft_standup_fields(
    request: DraftRequest,
    agent: FieldDraftAgent = Depends(get_field_draft_agent)
):
    """
    Draft standup content with AI

    A failed field comes back as a manual-entry hint rather than an error.
    """

    if request.field is not None and request.field not in FIELD_TYPES:
        raise HTTPException(
            status_code=400,
            detail=f"Unknown field '{request.field}', expected one of {', '.join(FIELD_TYPES)}"
        )

    if request.field is None:
        drafts = await agent.generate_full_report(
            request.name,
            request.role,
            previous_entries=request.previous_entries,
            target_date=request.date,
        )
    else:
        content = await agent.generate_field(
            request.name,
            request.role,
            request.field,
            context=request.context,
            previous_entries=request.previous_entries,
            target_date=request.date,
        )
        drafts = {request.field: content}

    return {"data": drafts}


async def _updates_for(day: Date, service: StandupService) -> dict:
    try:
        updates = await service.get_updates_for_date(day)
    except StandupTrackerError as e:
        logger.error(f"Failed to load standup updates for {day}: {e}")
        raise HTTPException(status_code=500, detail=e.message)

    return {
        "date": day.isoformat(),
        "teamMembers": [update.to_payload() for update in updates],
        "total": len(updates)
    }
