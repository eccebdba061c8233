from sqlalchemy import Column, String, Integer, Text, Date, DateTime, JSON, Index
from sqlalchemy.sql import func
from .base import BaseModel


class WeeklyReportRecord(BaseModel):
    __tablename__ = "weekly_reports"
    __table_args__ = (
        Index("idx_weekly_reports_week_dates", "week_start", "week_end"),
    )

    week_start = Column(Date, nullable=False)
    week_end = Column(Date, nullable=False)

    total_updates = Column(Integer, default=0)
    unique_members = Column(Integer, default=0)

    # Full nested report (entries + summary) in its camelCase JSON form
    report_data = Column(JSON, nullable=True)

    generated_at = Column(DateTime(timezone=True), server_default=func.now())
    status = Column(String, default="pending", index=True)  # pending, generated, failed
    error = Column(Text, nullable=True)
