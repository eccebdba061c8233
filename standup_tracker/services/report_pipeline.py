"""
Weekly report pipeline

aggregate -> summarize (AI or basic) -> persist, shared by the scheduler and
the manual trigger. The duplicate check and the insert run under one lock so
overlapping runs cannot both create a report for the same week.
"""
from datetime import datetime, timezone
from typing import Callable, Optional
import asyncio

from sqlalchemy.ext.asyncio import AsyncSession

from ..agents.weekly_summary_agent import WeeklySummaryAgent
from ..config import settings
from ..database import async_session
from ..exceptions import InvalidWeekRangeError
from ..schemas.report import ReportStatus, WeekRange, WeeklyReport, WeeklyReportSummary
from ..utils import dates
from ..utils.logging import get_logger
from .basic_summarizer import generate_basic_summary
from .report_store import ReportStore
from .standup_service import AggregatedWeek, StandupService

logger = get_logger(__name__)

SessionFactory = Callable[[], AsyncSession]


class WeeklyReportPipeline:
    """Generates, summarizes and stores weekly reports"""

    def __init__(
        self,
        session_factory: Optional[SessionFactory] = None,
        summary_agent: Optional[WeeklySummaryAgent] = None,
        max_range_days: Optional[int] = None,
    ):
        self.session_factory = session_factory or async_session
        self._summary_agent = summary_agent
        self.max_range_days = max_range_days or settings.max_manual_range_days
        self._lock = asyncio.Lock()

    @property
    def summary_agent(self) -> WeeklySummaryAgent:
        if self._summary_agent is None:
            self._summary_agent = WeeklySummaryAgent()
        return self._summary_agent

    @property
    def busy(self) -> bool:
        return self._lock.locked()

    def validate_week(self, week: WeekRange) -> None:
        span = (week.week_end - week.week_start).days
        if span > self.max_range_days:
            raise InvalidWeekRangeError(
                f"Date range cannot exceed {self.max_range_days} days (got {span})"
            )

    async def summarize(
        self,
        aggregated: AggregatedWeek,
        use_ai: Optional[bool] = None,
        custom_prompt: Optional[str] = None,
    ) -> WeeklyReport:
        """Attach a summary to aggregated data; no AI call for an empty week"""
        if use_ai is None:
            use_ai = settings.enable_ai_summaries

        if aggregated.is_empty:
            summary = WeeklyReportSummary.no_data()
        elif use_ai:
            summary = await self.summary_agent.summarize(aggregated.days, aggregated.week, custom_prompt)
        else:
            summary = generate_basic_summary(aggregated.days)

        return WeeklyReport(
            week_start=aggregated.week.week_start,
            week_end=aggregated.week.week_end,
            total_updates=aggregated.total_updates,
            unique_members=aggregated.unique_members,
            entries=aggregated.days,
            summary=summary,
            generated_at=datetime.now(timezone.utc),
            status=ReportStatus.GENERATED,
        )

    async def build_report(
        self,
        week: WeekRange,
        use_ai: Optional[bool] = None,
        custom_prompt: Optional[str] = None,
    ) -> WeeklyReport:
        """Aggregate and summarize a week without persisting anything"""
        self.validate_week(week)
        async with self.session_factory() as session:
            aggregated = await StandupService(session).aggregate_week(week)
        return await self.summarize(aggregated, use_ai, custom_prompt)

    async def generate_for_week(
        self,
        week: WeekRange,
        use_ai: Optional[bool] = None,
        force: bool = False,
        custom_prompt: Optional[str] = None,
        record_failures: bool = True,
    ) -> Optional[WeeklyReport]:
        """Run the full pipeline for one week

        Returns the stored report, or None when a report already exists for
        the week and ``force`` is not set. ``force`` knowingly stores an
        additional report. Errors propagate after a failed-status report has
        been recorded (best effort) when ``record_failures`` is set.
        """
        self.validate_week(week)

        async with self._lock:
            try:
                return await self._generate_and_save(week, use_ai, force, custom_prompt)
            except Exception as e:
                logger.error(f"Weekly report generation failed for {week}: {e}", exc_info=True)
                if record_failures:
                    await self._record_failure(week, e)
                raise

    async def generate_current_week(self, now: Optional[datetime] = None, **kwargs) -> Optional[WeeklyReport]:
        return await self.generate_for_week(dates.current_week(now), **kwargs)

    async def generate_previous_week(self, now: Optional[datetime] = None, **kwargs) -> Optional[WeeklyReport]:
        return await self.generate_for_week(dates.previous_week(now), **kwargs)

    async def _generate_and_save(
        self,
        week: WeekRange,
        use_ai: Optional[bool],
        force: bool,
        custom_prompt: Optional[str],
    ) -> Optional[WeeklyReport]:
        async with self.session_factory() as session:
            if await ReportStore(session).exists(week):
                if not force:
                    logger.info(f"Weekly report already exists for {week}, skipping")
                    return None
                logger.info(f"Weekly report already exists for {week}, generating another (forced)")

            logger.info(f"Generating weekly report for {week}")
            aggregated = await StandupService(session).aggregate_week(week)

        # No session is held while the LLM call runs
        report = await self.summarize(aggregated, use_ai, custom_prompt)

        async with self.session_factory() as session:
            saved = await ReportStore(session).save(report)

        logger.info(
            f"Weekly report {saved.id} generated for {week}: "
            f"{saved.total_updates} updates from {saved.unique_members} members"
        )
        return saved

    async def _record_failure(self, week: WeekRange, error: Exception) -> None:
        """Store a failed-status report; secondary failures are only logged"""
        try:
            async with self.session_factory() as session:
                store = ReportStore(session)
                if await store.exists(week):
                    logger.info(f"Weekly report already exists for {week}, skipping error save")
                    return
                await store.save_failure(week, str(error) or type(error).__name__)
        except Exception as save_error:
            logger.error(f"Error saving failed report for {week}: {save_error}")

    async def regenerate_summary(
        self,
        report: WeeklyReport,
        custom_prompt: Optional[str] = None,
        persist: bool = True,
    ) -> WeeklyReportSummary:
        """Re-run the AI summary over a stored report's own entries

        No fresh store query is made. When ``persist`` is set and the report
        has an id, only the summary of the stored row is overwritten.
        """
        if report.entries:
            summary = await self.summary_agent.summarize(report.entries, report.week, custom_prompt)
        else:
            summary = WeeklyReportSummary.no_data()

        if persist and report.id is not None:
            async with self.session_factory() as session:
                await ReportStore(session).update_summary(report.id, summary)

        return summary

    async def regenerate_report(self, report_id: int, custom_prompt: Optional[str] = None) -> WeeklyReport:
        async with self.session_factory() as session:
            report = await ReportStore(session).get(report_id)
        if report is None:
            raise ValueError(f"Weekly report {report_id} not found")

        summary = await self.regenerate_summary(report, custom_prompt)
        return report.model_copy(update={"summary": summary})
