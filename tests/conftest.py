"""Shared pytest fixtures."""

import os

os.environ.setdefault("ENVIRONMENT", "testing")
os.environ.setdefault("DATABASE_URL", "sqlite+aiosqlite://")
os.environ.setdefault("ENABLE_SCHEDULED_TASKS", "false")
os.environ.setdefault("ANTHROPIC_API_KEY", "test-anthropic-key")
os.environ.setdefault("TIMEZONE", "America/Vancouver")

import json
from datetime import date
from unittest.mock import AsyncMock, Mock

import pytest
from sqlalchemy.ext.asyncio import AsyncSession, async_sessionmaker, create_async_engine
from sqlalchemy.pool import StaticPool

from standup_tracker.models.base import Base
from standup_tracker.models import standup, team_member, weekly_report  # noqa: F401
from standup_tracker.schemas.report import StandupDay, TeamMemberUpdate, WeekRange


@pytest.fixture
async def engine():
    """In-memory SQLite engine with all tables created."""
    engine = create_async_engine("sqlite+aiosqlite://", poolclass=StaticPool)
    async with engine.begin() as conn:
        await conn.run_sync(Base.metadata.create_all)
    yield engine
    await engine.dispose()


@pytest.fixture
def session_factory(engine):
    return async_sessionmaker(engine, class_=AsyncSession, expire_on_commit=False)


@pytest.fixture
async def db_session(session_factory):
    async with session_factory() as session:
        yield session


@pytest.fixture
def week():
    """Monday 2024-01-08 .. Sunday 2024-01-14."""
    return WeekRange(week_start=date(2024, 1, 8), week_end=date(2024, 1, 14))


@pytest.fixture
def make_update():
    """Factory for TeamMemberUpdate objects."""

    def _make(name: str = "Alice", role: str = "Developer", **kwargs) -> TeamMemberUpdate:
        defaults = {
            "id": f"{name.lower()}-0001",
            "name": name,
            "role": role,
            "yesterday": f"<p>{name} finished the login page.</p>",
            "today": f"<p>{name} starts on payments</p>",
            "blockers": "",
        }
        defaults.update(kwargs)
        return TeamMemberUpdate(**defaults)

    return _make


@pytest.fixture
def make_day(make_update):
    """Factory for a StandupDay with the given member names."""

    def _make(day: date, *names: str) -> StandupDay:
        return StandupDay(date=day, team_members=[make_update(name) for name in names])

    return _make


@pytest.fixture
def mock_llm_provider():
    """LLM provider whose completion returns a fixed text; set .content to change it."""
    provider = Mock()
    provider.provider = "anthropic"

    async def _complete(*args, **kwargs):
        return {
            "content": provider.content,
            "tokens_used": 42,
            "model": "test-model",
            "provider": "anthropic",
        }

    provider.content = json.dumps({
        "keyAccomplishments": ["Login page shipped"],
        "ongoingWork": ["Payments"],
        "blockers": [],
        "teamInsights": "Steady week.",
        "recommendations": ["Keep pairing"],
        "memberSummaries": {},
    })
    provider.generate_completion = AsyncMock(side_effect=_complete)
    return provider
