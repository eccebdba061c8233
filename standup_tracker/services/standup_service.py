from dataclasses import dataclass, field
from datetime import date, datetime
from typing import Dict, Iterable, List, Optional
from sqlalchemy import select
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.ext.asyncio import AsyncSession

from ..config import settings
from ..exceptions import StoreQueryError
from ..models.standup import StandupEntry, StandupUpdate
from ..models.team_member import TeamMember
from ..schemas.report import StandupDay, TeamMemberUpdate, WeekRange
from ..utils import dates
from ..utils.logging import get_logger

logger = get_logger(__name__)

DEFAULT_ROLE = "Developer"


@dataclass
class StandupRecord:
    """A raw update row as read from the store"""
    member_key: str
    name: Optional[str]
    role: Optional[str]
    yesterday: Optional[str] = ""
    today: Optional[str] = ""
    blockers: Optional[str] = ""
    avatar: Optional[str] = ""
    created_at: Optional[datetime] = None
    updated_at: Optional[datetime] = None
    # Date of the standup entry the update belongs to, when the store has one
    standup_date: Optional[date] = None

    @property
    def display_name(self) -> str:
        return self.name or f"Team Member {self.member_key[:8]}"

    @property
    def display_role(self) -> str:
        return self.role or DEFAULT_ROLE

    def calendar_date(self, tz_name: Optional[str] = None) -> date:
        if self.standup_date is not None:
            return self.standup_date
        if self.created_at is None:
            raise ValueError(f"Update from {self.display_name} has neither a standup date nor a timestamp")
        return dates.reference_date(self.created_at, tz_name)

    def to_update(self) -> TeamMemberUpdate:
        return TeamMemberUpdate(
            id=self.member_key,
            name=self.display_name,
            role=self.display_role,
            avatar=self.avatar,
            yesterday=self.yesterday,
            today=self.today,
            blockers=self.blockers,
            last_updated=self.created_at or self.updated_at,
        )


@dataclass
class AggregatedWeek:
    week: WeekRange
    days: List[StandupDay] = field(default_factory=list)
    total_updates: int = 0
    unique_members: int = 0

    @property
    def is_empty(self) -> bool:
        return self.total_updates == 0


def group_records(records: Iterable[StandupRecord], tz_name: Optional[str] = None) -> List[StandupDay]:
    """Group updates by reference-timezone calendar date, ascending."""
    by_date: Dict[date, List[TeamMemberUpdate]] = {}
    for record in records:
        by_date.setdefault(record.calendar_date(tz_name), []).append(record.to_update())

    return [
        StandupDay(date=day, team_members=members)
        for day, members in sorted(by_date.items())
    ]


def count_unique_members(records: Iterable[StandupRecord], by_role: Optional[bool] = None) -> int:
    """Distinct members; by default a (name, role) pair is one member."""
    if by_role is None:
        by_role = settings.count_members_by_role
    if by_role:
        return len({(record.display_name, record.display_role) for record in records})
    return len({record.display_name for record in records})


def aggregate_records(
    week: WeekRange,
    records: List[StandupRecord],
    tz_name: Optional[str] = None,
    count_by_role: Optional[bool] = None,
) -> AggregatedWeek:
    in_range = [record for record in records if week.contains(record.calendar_date(tz_name))]
    return AggregatedWeek(
        week=week,
        days=group_records(in_range, tz_name),
        total_updates=len(in_range),
        unique_members=count_unique_members(in_range, count_by_role),
    )


class StandupService:
    """Service for reading and writing standup updates"""

    def __init__(self, db: AsyncSession):
        self.db = db

    async def fetch_records(self, week: WeekRange) -> List[StandupRecord]:
        """Fetch every update whose standup date falls inside the week"""
        stmt = (
            select(StandupUpdate, StandupEntry.date, TeamMember)
            .join(StandupEntry, StandupUpdate.standup_entry_id == StandupEntry.id)
            .join(TeamMember, StandupUpdate.team_member_id == TeamMember.id)
            .where(
                StandupEntry.date >= week.week_start,
                StandupEntry.date <= week.week_end,
            )
            .order_by(StandupEntry.date.asc(), StandupUpdate.created_at.asc(), StandupUpdate.id.asc())
        )

        try:
            result = await self.db.execute(stmt)
            rows = result.all()
        except SQLAlchemyError as e:
            raise StoreQueryError("fetch_standup_updates", e) from e

        records = [
            StandupRecord(
                member_key=member.member_key,
                name=member.name,
                role=member.role,
                avatar=member.avatar,
                yesterday=update.yesterday,
                today=update.today,
                blockers=update.blockers,
                created_at=update.created_at,
                updated_at=update.updated_at,
                standup_date=entry_date,
            )
            for update, entry_date, member in rows
        ]
        logger.info(f"Found {len(records)} standup updates for {week}")
        return records

    async def aggregate_week(self, week: WeekRange) -> AggregatedWeek:
        """Load and regroup a week's updates by date"""
        records = await self.fetch_records(week)
        return aggregate_records(week, records)

    async def get_updates_for_date(self, day: date) -> List[TeamMemberUpdate]:
        aggregated = await self.aggregate_week(WeekRange(week_start=day, week_end=day))
        return aggregated.days[0].team_members if aggregated.days else []

    async def get_today_updates(self) -> List[TeamMemberUpdate]:
        """Updates submitted for the current reference-timezone day"""
        return await self.get_updates_for_date(dates.reference_date())

    async def save_update(
        self,
        member_key: str,
        name: str,
        role: str,
        yesterday: str = "",
        today: str = "",
        blockers: str = "",
        avatar: str = "",
        on_date: Optional[date] = None,
    ) -> TeamMemberUpdate:
        """Create or replace a member's update for one standup day

        The store keeps one update per member per day, so a second submission
        on the same day overwrites the first.
        """
        if not member_key or not member_key.strip():
            raise ValueError("Team member ID is required")
        if not name or not name.strip():
            raise ValueError("Team member name is required")
        if not role or not role.strip():
            raise ValueError("Team member role is required")
        if not (yesterday or today or blockers):
            raise ValueError("At least one update field (yesterday, today, or blockers) must be provided")

        day = on_date or dates.reference_date()

        try:
            entry = await self._get_or_create_entry(day)
            member = await self._upsert_member(member_key, name, role, avatar)

            stmt = select(StandupUpdate).where(
                StandupUpdate.standup_entry_id == entry.id,
                StandupUpdate.team_member_id == member.id,
            )
            result = await self.db.execute(stmt)
            update = result.scalar_one_or_none()

            if update is None:
                update = StandupUpdate(standup_entry_id=entry.id, team_member_id=member.id)
                self.db.add(update)

            update.yesterday = yesterday
            update.today = today
            update.blockers = blockers

            await self.db.commit()
            await self.db.refresh(update)
        except SQLAlchemyError as e:
            await self.db.rollback()
            raise StoreQueryError("save_standup_update", e) from e

        logger.info(f"Saved standup update for {name} on {day}")

        return StandupRecord(
            member_key=member.member_key,
            name=member.name,
            role=member.role,
            avatar=member.avatar,
            yesterday=update.yesterday,
            today=update.today,
            blockers=update.blockers,
            created_at=update.created_at,
            updated_at=update.updated_at,
            standup_date=day,
        ).to_update()

    async def _get_or_create_entry(self, day: date) -> StandupEntry:
        result = await self.db.execute(select(StandupEntry).where(StandupEntry.date == day))
        entry = result.scalar_one_or_none()
        if entry is None:
            entry = StandupEntry(date=day)
            self.db.add(entry)
            await self.db.flush()
        return entry

    async def _upsert_member(self, member_key: str, name: str, role: str, avatar: str) -> TeamMember:
        result = await self.db.execute(select(TeamMember).where(TeamMember.member_key == member_key))
        member = result.scalar_one_or_none()
        if member is None:
            member = TeamMember(member_key=member_key, name=name, role=role, avatar=avatar or "")
            self.db.add(member)
        else:
            member.name = name
            member.role = role
            member.avatar = avatar or ""
        await self.db.flush()
        return member
