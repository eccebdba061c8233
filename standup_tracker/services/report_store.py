from datetime import datetime, timezone
from typing import List, Optional
from sqlalchemy import select, func
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.ext.asyncio import AsyncSession

from ..exceptions import StoreQueryError
from ..models.weekly_report import WeeklyReportRecord
from ..schemas.report import (
    ReportStatus,
    StandupDay,
    WeekRange,
    WeeklyReport,
    WeeklyReportSummary,
)
from ..utils.logging import get_logger

logger = get_logger(__name__)


def record_to_report(record: WeeklyReportRecord) -> WeeklyReport:
    """Rebuild the report object from a stored row"""
    data = record.report_data or {}
    return WeeklyReport(
        id=record.id,
        week_start=record.week_start,
        week_end=record.week_end,
        total_updates=record.total_updates or 0,
        unique_members=record.unique_members or 0,
        entries=[StandupDay.model_validate(entry) for entry in data.get("entries") or []],
        summary=WeeklyReportSummary.model_validate(data.get("summary") or {}),
        generated_at=record.generated_at,
        status=ReportStatus(record.status or ReportStatus.PENDING.value),
        error=record.error,
    )


class ReportStore:
    """Persistence gate for weekly reports"""

    def __init__(self, db: AsyncSession):
        self.db = db

    async def exists(self, week: WeekRange) -> bool:
        """True if any report row has exactly these week dates, whatever its status"""
        stmt = select(func.count()).select_from(WeeklyReportRecord).where(
            WeeklyReportRecord.week_start == week.week_start,
            WeeklyReportRecord.week_end == week.week_end,
        )
        try:
            result = await self.db.execute(stmt)
            count = result.scalar_one()
        except SQLAlchemyError as e:
            raise StoreQueryError("check_existing_report", e) from e
        return count > 0

    async def save(self, report: WeeklyReport) -> WeeklyReport:
        """Insert a new report row with its full nested payload"""
        generated_at = report.generated_at or datetime.now(timezone.utc)
        record = WeeklyReportRecord(
            week_start=report.week_start,
            week_end=report.week_end,
            total_updates=report.total_updates,
            unique_members=report.unique_members,
            report_data=report.model_copy(update={"generated_at": generated_at}).to_payload(),
            generated_at=generated_at,
            status=report.status.value,
            error=report.error,
        )

        try:
            self.db.add(record)
            await self.db.commit()
            await self.db.refresh(record)
        except SQLAlchemyError as e:
            await self.db.rollback()
            raise StoreQueryError("save_weekly_report", e) from e

        logger.info(f"Saved {record.status} weekly report {record.id} for {report.week}")
        return report.model_copy(update={"id": record.id, "generated_at": generated_at})

    async def save_failure(self, week: WeekRange, error: str) -> WeeklyReport:
        """Record a failed generation attempt for the week"""
        return await self.save(WeeklyReport(
            week_start=week.week_start,
            week_end=week.week_end,
            status=ReportStatus.FAILED,
            error=error,
        ))

    async def get(self, report_id: int) -> Optional[WeeklyReport]:
        try:
            result = await self.db.execute(
                select(WeeklyReportRecord).where(WeeklyReportRecord.id == report_id)
            )
            record = result.scalar_one_or_none()
        except SQLAlchemyError as e:
            raise StoreQueryError("get_weekly_report", e) from e
        return record_to_report(record) if record else None

    async def get_by_week(self, week: WeekRange) -> Optional[WeeklyReport]:
        """Most recent report for the week, if any"""
        try:
            result = await self.db.execute(
                select(WeeklyReportRecord)
                .where(
                    WeeklyReportRecord.week_start == week.week_start,
                    WeeklyReportRecord.week_end == week.week_end,
                )
                .order_by(WeeklyReportRecord.generated_at.desc(), WeeklyReportRecord.id.desc())
                .limit(1)
            )
            record = result.scalar_one_or_none()
        except SQLAlchemyError as e:
            raise StoreQueryError("get_weekly_report_by_week", e) from e
        return record_to_report(record) if record else None

    async def list_reports(self, limit: int = 10, offset: int = 0) -> List[WeeklyReport]:
        """Stored reports, newest first"""
        try:
            result = await self.db.execute(
                select(WeeklyReportRecord)
                .order_by(WeeklyReportRecord.generated_at.desc(), WeeklyReportRecord.id.desc())
                .limit(limit)
                .offset(offset)
            )
            records = result.scalars().all()
        except SQLAlchemyError as e:
            raise StoreQueryError("list_weekly_reports", e) from e
        return [record_to_report(record) for record in records]

    async def update_summary(self, report_id: int, summary: WeeklyReportSummary) -> None:
        """Replace only the summary inside a stored report's payload"""
        try:
            result = await self.db.execute(
                select(WeeklyReportRecord).where(WeeklyReportRecord.id == report_id)
            )
            record = result.scalar_one_or_none()
            if record is None:
                raise ValueError(f"Weekly report {report_id} not found")

            data = dict(record.report_data or {})
            data["summary"] = summary.to_payload()
            # Reassign so the JSON column is flagged dirty
            record.report_data = data

            await self.db.commit()
        except SQLAlchemyError as e:
            await self.db.rollback()
            raise StoreQueryError("update_report_summary", e) from e

        logger.info(f"Updated summary of weekly report {report_id}")
