"""
Weekly report scheduler

Polls the clock and runs the report pipeline when the weekly trigger minute
is reached. Owns its background task so the app lifespan can start and stop it.
"""
from datetime import datetime
from enum import Enum
from typing import Awaitable, Callable, Optional
import asyncio

from ..config import settings
from ..utils import dates
from ..utils.logging import get_logger
from .report_pipeline import WeeklyReportPipeline

logger = get_logger(__name__)


class TickOutcome(str, Enum):
    NOT_DUE = "not_due"
    SKIPPED = "skipped"
    GENERATED = "generated"
    FAILED = "failed"


class WeeklyReportScheduler:
    """Runs the weekly pipeline at the configured weekday, hour and minute"""

    def __init__(
        self,
        pipeline: Optional[WeeklyReportPipeline] = None,
        poll_interval: Optional[float] = None,
        clock: Optional[Callable[[], datetime]] = None,
        sleep: Optional[Callable[[float], Awaitable[None]]] = None,
        timer: Optional[Callable[[], float]] = None,
    ):
        self.pipeline = pipeline or WeeklyReportPipeline()
        self.poll_interval = poll_interval or settings.scheduler_poll_interval_seconds
        self.clock = clock or dates.now_utc
        self.sleep = sleep or asyncio.sleep
        self.timer = timer
        self._task: Optional[asyncio.Task] = None

    @property
    def running(self) -> bool:
        return self._task is not None and not self._task.done()

    def start(self) -> None:
        """Start polling; the first evaluation happens immediately"""
        if self.running:
            logger.warning("Weekly report scheduler already running")
            return

        self._task = asyncio.create_task(self._run())
        logger.info(
            f"Weekly report scheduler started (weekday={settings.report_weekday}, "
            f"{settings.report_hour:02d}:{settings.report_minute:02d} {settings.timezone}, "
            f"poll every {self.poll_interval}s)"
        )

    async def stop(self) -> None:
        """Cancel the polling task and wait for it to finish"""
        if self._task is None:
            return

        self._task.cancel()
        try:
            await self._task
        except asyncio.CancelledError:
            pass
        finally:
            self._task = None

        logger.info("Weekly report scheduler stopped")

    async def tick(self, now: Optional[datetime] = None) -> TickOutcome:
        """Evaluate the trigger once and run the pipeline if it fires

        A run already holding the pipeline is waited for rather than skipped;
        the duplicate check inside the pipeline decides whether to generate.
        """
        now = now or self.clock()
        if not dates.is_trigger_time(now):
            return TickOutcome.NOT_DUE

        week = dates.current_week(now)
        if self.pipeline.busy:
            logger.info(f"Weekly report trigger fired for {week}, waiting for the run in progress")
        else:
            logger.info(f"Weekly report trigger fired for {week}")

        try:
            report = await self.pipeline.generate_for_week(week)
        except Exception as e:
            # Failure already recorded by the pipeline; keep polling
            logger.error(f"Scheduled weekly report for {week} failed: {e}")
            return TickOutcome.FAILED

        return TickOutcome.GENERATED if report is not None else TickOutcome.SKIPPED

    async def _run(self) -> None:
        # Polls stay on a fixed grid anchored at the start time
        timer = self.timer or asyncio.get_running_loop().time
        next_at = timer()
        while True:
            try:
                await self.tick()
            except Exception as e:
                logger.error(f"Error in weekly report scheduler loop: {e}", exc_info=True)

            next_at += self.poll_interval
            now = timer()
            if now > next_at:
                missed = int((now - next_at) // self.poll_interval) + 1
                logger.warning(f"Weekly report scheduler fell behind by {missed} poll(s)")
                next_at += missed * self.poll_interval
            await self.sleep(next_at - now)
