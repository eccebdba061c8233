#!/usr/bin/env python3
"""
Manually trigger weekly report generation

Usage:
    python scripts/trigger_report.py                        # Current week
    python scripts/trigger_report.py --previous             # Last week
    python scripts/trigger_report.py --start 2024-01-01 --end 2024-01-07
    python scripts/trigger_report.py --force --no-ai        # Extra basic report
"""
import asyncio
import sys
import os
from datetime import date

sys.path.insert(0, os.path.dirname(os.path.dirname(os.path.abspath(__file__))))

from dotenv import load_dotenv

load_dotenv()

from standup_tracker.config import settings
from standup_tracker.database import init_models
from standup_tracker.exceptions import StandupTrackerError
from standup_tracker.schemas.report import WeekRange
from standup_tracker.services.report_pipeline import WeeklyReportPipeline
from standup_tracker.utils import dates
from standup_tracker.utils.logging import setup_logging


async def trigger(week: WeekRange, use_ai: bool, force: bool) -> int:
    print("=" * 60)
    print(f"📊 Generating weekly report for {week}")
    print("=" * 60)

    await init_models()
    pipeline = WeeklyReportPipeline()

    try:
        report = await pipeline.generate_for_week(week, use_ai=use_ai, force=force)
    except StandupTrackerError as e:
        print(f"❌ Report generation failed: {e.message}")
        return 1

    if report is None:
        print("⏭️  A report already exists for this week (use --force to create another)")
        return 0

    print(f"✅ Report {report.id} generated")
    print(f"  Updates: {report.total_updates}")
    print(f"  Members: {report.unique_members}")
    print(f"  Insights: {report.summary.team_insights}")
    return 0


if __name__ == "__main__":
    import argparse

    parser = argparse.ArgumentParser(description="Trigger a weekly standup report")
    parser.add_argument("--start", type=date.fromisoformat, help="Week start (YYYY-MM-DD)")
    parser.add_argument("--end", type=date.fromisoformat, help="Week end (YYYY-MM-DD)")
    parser.add_argument("--previous", action="store_true", help="Report on last week")
    parser.add_argument("--force", action="store_true", help="Create a report even if one exists")
    parser.add_argument("--no-ai", action="store_true", help="Use the basic summary instead of AI")
    args = parser.parse_args()

    setup_logging(settings.log_level, settings.log_file)

    if args.start and args.end:
        target_week = WeekRange(week_start=args.start, week_end=args.end)
    elif args.start or args.end:
        parser.error("--start and --end must be given together")
    elif args.previous:
        target_week = dates.previous_week()
    else:
        target_week = dates.current_week()

    sys.exit(asyncio.run(trigger(target_week, use_ai=not args.no_ai, force=args.force)))
