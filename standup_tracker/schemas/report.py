"""
Report schemas

Pydantic models shared by the pipeline, the store and the API. Attribute names
are snake_case; the JSON form (API bodies and the stored report payload) uses
the camelCase keys the display layer reads.
"""
from datetime import date, datetime, timedelta
from enum import Enum
from typing import Any, Dict, List, Optional

from pydantic import BaseModel, ConfigDict, Field, field_validator, model_validator
from pydantic.alias_generators import to_camel


NO_DATA_INSIGHT = "No standup data available for this week."
AI_FAILURE_INSIGHT = "AI summary generation failed. Please review the data manually."


def _coerce_text(value: Any) -> str:
    if value is None:
        return ""
    if isinstance(value, list):
        return " ".join(str(item) for item in value if item is not None)
    return str(value)


def _coerce_text_list(value: Any) -> List[str]:
    if value is None:
        return []
    if isinstance(value, (str, int, float)):
        return [str(value)] if str(value).strip() else []
    if isinstance(value, (list, tuple)):
        return [str(item) for item in value if item is not None and not isinstance(item, (dict, list))]
    return []


class CamelModel(BaseModel):
    model_config = ConfigDict(
        alias_generator=to_camel,
        populate_by_name=True,
        extra="ignore",
    )

    def to_payload(self) -> Dict[str, Any]:
        return self.model_dump(mode="json", by_alias=True)


class ReportStatus(str, Enum):
    GENERATED = "generated"
    FAILED = "failed"
    PENDING = "pending"


class WeekRange(CamelModel):
    """Inclusive [week_start, week_end] pair, normally Monday..Sunday."""
    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True, frozen=True)

    week_start: date
    week_end: date

    @model_validator(mode="after")
    def _check_order(self) -> "WeekRange":
        if self.week_start > self.week_end:
            raise ValueError("week_start must not be after week_end")
        return self

    @property
    def days(self) -> int:
        return (self.week_end - self.week_start).days + 1

    def contains(self, day: date) -> bool:
        return self.week_start <= day <= self.week_end

    def dates(self) -> List[date]:
        return [self.week_start + timedelta(days=offset) for offset in range(self.days)]

    def __str__(self) -> str:
        return f"{self.week_start.isoformat()} to {self.week_end.isoformat()}"


class TeamMemberUpdate(CamelModel):
    """One person's submission for one calendar date."""
    id: str
    name: str
    role: str
    avatar: str = ""
    yesterday: str = ""
    today: str = ""
    blockers: str = ""
    last_updated: Optional[datetime] = None

    @field_validator("yesterday", "today", "blockers", "avatar", mode="before")
    @classmethod
    def _none_to_empty(cls, value: Any) -> str:
        return _coerce_text(value)


class StandupDay(CamelModel):
    date: date
    team_members: List[TeamMemberUpdate] = Field(default_factory=list)


class MemberSummary(CamelModel):
    role: str = ""
    key_contributions: List[str] = Field(default_factory=list)
    progress: str = ""
    concerns: List[str] = Field(default_factory=list)
    next_week_focus: str = ""

    @field_validator("role", "progress", "next_week_focus", mode="before")
    @classmethod
    def _text(cls, value: Any) -> str:
        return _coerce_text(value)

    @field_validator("key_contributions", "concerns", mode="before")
    @classmethod
    def _text_list(cls, value: Any) -> List[str]:
        return _coerce_text_list(value)


class WeeklyReportSummary(CamelModel):
    key_accomplishments: List[str] = Field(default_factory=list)
    ongoing_work: List[str] = Field(default_factory=list)
    blockers: List[str] = Field(default_factory=list)
    team_insights: str = ""
    recommendations: List[str] = Field(default_factory=list)
    member_summaries: Dict[str, MemberSummary] = Field(default_factory=dict)

    @field_validator("key_accomplishments", "ongoing_work", "blockers", "recommendations", mode="before")
    @classmethod
    def _text_list(cls, value: Any) -> List[str]:
        return _coerce_text_list(value)

    @field_validator("team_insights", mode="before")
    @classmethod
    def _text(cls, value: Any) -> str:
        return _coerce_text(value)

    @field_validator("member_summaries", mode="before")
    @classmethod
    def _members(cls, value: Any) -> Dict[str, Any]:
        if not isinstance(value, dict):
            return {}
        return {key: item for key, item in value.items() if isinstance(item, (dict, MemberSummary))}

    @classmethod
    def no_data(cls) -> "WeeklyReportSummary":
        return cls(team_insights=NO_DATA_INSIGHT)

    @classmethod
    def ai_failure(cls) -> "WeeklyReportSummary":
        return cls(team_insights=AI_FAILURE_INSIGHT)


class WeeklyReport(CamelModel):
    """The persisted weekly artifact."""
    id: Optional[int] = None
    week_start: date
    week_end: date
    total_updates: int = 0
    unique_members: int = 0
    entries: List[StandupDay] = Field(default_factory=list)
    summary: WeeklyReportSummary = Field(default_factory=WeeklyReportSummary)
    generated_at: Optional[datetime] = None
    status: ReportStatus = ReportStatus.PENDING
    error: Optional[str] = None

    @property
    def week(self) -> WeekRange:
        return WeekRange(week_start=self.week_start, week_end=self.week_end)

    def has_data(self) -> bool:
        return bool(self.entries) and self.total_updates > 0

    def member_names(self) -> List[str]:
        """Distinct member names in first-appearance order."""
        names: List[str] = []
        for day in self.entries:
            for member in day.team_members:
                if member.name not in names:
                    names.append(member.name)
        return names
