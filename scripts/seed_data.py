#!/usr/bin/env python3
"""
Seed Data Script for the Standup Tracker

Creates a working week of standup updates for a small team so the weekly
report can be generated locally.

Usage:
    python scripts/seed_data.py              # Seed the current week
    python scripts/seed_data.py --clear      # Clear all data first
    python scripts/seed_data.py --previous   # Seed last week instead
"""
import asyncio
import sys
import os
from datetime import timedelta
from sqlalchemy import delete
from sqlalchemy.ext.asyncio import AsyncSession

# Add parent directory to path
sys.path.insert(0, os.path.dirname(os.path.dirname(os.path.abspath(__file__))))

from dotenv import load_dotenv

load_dotenv()

from standup_tracker.database import async_session, init_models
from standup_tracker.models.standup import StandupEntry, StandupUpdate
from standup_tracker.models.team_member import TeamMember
from standup_tracker.models.weekly_report import WeeklyReportRecord
from standup_tracker.services.standup_service import StandupService
from standup_tracker.utils import dates


# ==================== DATA DEFINITIONS ====================

TEAM = [
    {"member_key": "a1f4c2d8-emma", "name": "Emma Rodriguez", "role": "Frontend Developer"},
    {"member_key": "b7e9a013-frank", "name": "Frank Smith", "role": "Backend Developer"},
    {"member_key": "c35d8e21-grace", "name": "Grace Lee", "role": "QA Engineer"},
    {"member_key": "d92b6f47-henry", "name": "Henry Brown", "role": "DevOps Engineer"},
]

DAILY_WORK = {
    "Emma Rodriguez": [
        ("<p>Set up the dashboard layout</p>", "<p>Build the team member cards</p>", ""),
        ("<p>Built the team member cards</p>", "<p>Add the update modal</p>", ""),
        ("<p>Added the update modal</p>", "<p>Wire the modal to the API</p>", "<p>Waiting on API schema</p>"),
        ("<p>Wired the modal to the API</p>", "<p>Polish the weekly report view</p>", ""),
        ("<p>Polished the weekly report view</p>", "<p>Write component tests</p>", ""),
    ],
    "Frank Smith": [
        ("<p>Designed the standup tables</p>", "<p>Implement the update endpoint</p>", ""),
        ("<p>Implemented the update endpoint</p>", "<p>Add the report aggregation query</p>", ""),
        ("<p>Added the aggregation query</p>", "<p>Integrate the summary model</p>", ""),
        ("<p>Integrated the summary model</p>", "<p>Harden JSON parsing</p>", "<p>Model sometimes wraps JSON in fences</p>"),
        ("<p>Hardened JSON parsing</p>", "<p>Review scheduler behaviour</p>", ""),
    ],
    "Grace Lee": [
        ("<p>Wrote the test plan</p>", "<p>Automate the update flow tests</p>", ""),
        ("<p>Automated the update flow tests</p>", "<p>Test the report export</p>", ""),
        ("<p>Tested the report export</p>", "<p>Regression pass on the dashboard</p>", "<p>Staging was down half a day</p>"),
        ("", "<p>Exploratory testing of AI drafts</p>", ""),
        ("<p>Exploratory testing of AI drafts</p>", "<p>Sign off the release</p>", ""),
    ],
    "Henry Brown": [
        ("<p>Provisioned the staging database</p>", "<p>Set up CI</p>", ""),
        ("<p>Set up CI</p>", "<p>Container image for the API</p>", ""),
        ("<p>Built the container image</p>", "<p>Restore staging</p>", "<p>Staging disk filled up</p>"),
        ("<p>Restored staging</p>", "<p>Add log shipping</p>", ""),
        ("<p>Added log shipping</p>", "<p>Prepare production rollout</p>", ""),
    ],
}


# ==================== HELPERS ====================

async def clear_all_data(session: AsyncSession):
    """Clear all data from the database"""
    print("🗑️  Clearing existing data...")

    # Delete in correct order (respecting foreign keys)
    await session.execute(delete(StandupUpdate))
    await session.execute(delete(StandupEntry))
    await session.execute(delete(TeamMember))
    await session.execute(delete(WeeklyReportRecord))

    await session.commit()
    print("✅ All data cleared")


async def create_updates(session: AsyncSession, week) -> int:
    """Create Monday..Friday updates for every team member"""
    print(f"\n📝 Creating standup updates for {week}...")

    service = StandupService(session)
    count = 0
    for offset in range(5):
        day = week.week_start + timedelta(days=offset)
        for member in TEAM:
            yesterday, today, blockers = DAILY_WORK[member["name"]][offset]
            await service.save_update(
                member_key=member["member_key"],
                name=member["name"],
                role=member["role"],
                yesterday=yesterday,
                today=today,
                blockers=blockers,
                on_date=day,
            )
            count += 1

    print(f"  ✓ Created {count} standup updates over 5 days")
    return count


# ==================== MAIN ====================

async def seed_database(clear_first: bool = False, previous_week: bool = False):
    """Main seed function"""
    print("=" * 60)
    print("🌱 Standup Tracker - Database Seeding")
    print("=" * 60)

    await init_models()
    week = dates.previous_week() if previous_week else dates.current_week()

    async with async_session() as session:
        if clear_first:
            await clear_all_data(session)
        count = await create_updates(session, week)

    print("\n" + "=" * 60)
    print("✅ Database seeding complete!")
    print("=" * 60)
    print("\n📊 Summary:")
    print(f"  Team members: {len(TEAM)}")
    print(f"  Updates: {count}")
    print(f"  Week: {week}")


if __name__ == "__main__":
    import argparse

    parser = argparse.ArgumentParser(description="Seed Standup Tracker database")
    parser.add_argument("--clear", action="store_true", help="Clear all data before seeding")
    parser.add_argument("--previous", action="store_true", help="Seed last week instead of this week")
    args = parser.parse_args()

    asyncio.run(seed_database(clear_first=args.clear, previous_week=args.previous))
