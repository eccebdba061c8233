"""Tests for the data aggregator and standup update storage."""

from datetime import date, datetime, timezone

import pytest

from standup_tracker.services.standup_service import (
    StandupRecord,
    StandupService,
    aggregate_records,
    count_unique_members,
    group_records,
)


def create_record(member_key: str = "7c9e6679-7425-40de", **kwargs) -> StandupRecord:
    """Helper to create StandupRecord objects for testing."""
    defaults = {
        "member_key": member_key,
        "name": "Alice",
        "role": "Developer",
        "yesterday": "<p>Did things</p>",
        "today": "<p>Doing things</p>",
        "blockers": "",
        "standup_date": date(2024, 1, 9),
    }
    defaults.update(kwargs)
    return StandupRecord(**defaults)


class TestStandupRecord:

    def test_missing_name_defaults_to_member_key_prefix(self):
        record = create_record(member_key="7c9e6679-7425-40de", name=None)
        assert record.display_name == "Team Member 7c9e6679"

    def test_missing_role_defaults_to_developer(self):
        record = create_record(role=None)
        assert record.display_role == "Developer"

    def test_none_text_fields_become_empty(self):
        update = create_record(yesterday=None, blockers=None).to_update()
        assert update.yesterday == ""
        assert update.blockers == ""


class TestGrouping:

    def test_days_sorted_ascending(self):
        records = [
            create_record(name="Bob", standup_date=date(2024, 1, 10)),
            create_record(name="Alice", standup_date=date(2024, 1, 8)),
            create_record(name="Carol", standup_date=date(2024, 1, 10)),
        ]

        days = group_records(records)

        assert [day.date for day in days] == [date(2024, 1, 8), date(2024, 1, 10)]
        assert [m.name for m in days[1].team_members] == ["Bob", "Carol"]

    def test_creation_timestamp_grouped_on_reference_date(self):
        # 03:00 UTC on the 9th is 19:00 on the 8th in Vancouver
        record = create_record(
            standup_date=None,
            created_at=datetime(2024, 1, 9, 3, 0, tzinfo=timezone.utc),
        )

        days = group_records([record], tz_name="America/Vancouver")

        assert days[0].date == date(2024, 1, 8)

    def test_entry_date_wins_over_timestamp(self):
        record = create_record(
            standup_date=date(2024, 1, 9),
            created_at=datetime(2024, 1, 9, 3, 0, tzinfo=timezone.utc),
        )

        assert group_records([record])[0].date == date(2024, 1, 9)


class TestUniqueMembers:

    def test_same_name_different_role_counts_twice(self):
        records = [
            create_record(name="Alice", role="Developer"),
            create_record(name="Alice", role="Designer"),
            create_record(name="Alice", role="Developer", standup_date=date(2024, 1, 10)),
        ]

        assert count_unique_members(records, by_role=True) == 2

    def test_name_only_counting(self):
        records = [
            create_record(name="Alice", role="Developer"),
            create_record(name="Alice", role="Designer"),
        ]

        assert count_unique_members(records, by_role=False) == 1


class TestAggregateRecords:

    def test_out_of_range_records_are_ignored(self, week):
        records = [
            create_record(standup_date=date(2024, 1, 7)),
            create_record(standup_date=date(2024, 1, 8)),
            create_record(standup_date=date(2024, 1, 15)),
        ]

        aggregated = aggregate_records(week, records)

        assert aggregated.total_updates == 1
        assert aggregated.unique_members == 1
        assert [day.date for day in aggregated.days] == [date(2024, 1, 8)]

    def test_empty_week(self, week):
        aggregated = aggregate_records(week, [])

        assert aggregated.is_empty
        assert aggregated.days == []
        assert aggregated.total_updates == 0
        assert aggregated.unique_members == 0


class TestStandupServiceStore:
    """Round trips against in-memory SQLite."""

    @pytest.mark.asyncio
    async def test_save_and_aggregate_week(self, db_session, week):
        service = StandupService(db_session)
        await service.save_update("alice-1", "Alice", "Developer", yesterday="<p>A</p>", on_date=date(2024, 1, 9))
        await service.save_update("bob-1", "Bob", "QA", today="<p>B</p>", on_date=date(2024, 1, 9))
        await service.save_update("alice-1", "Alice", "Developer", blockers="<p>C</p>", on_date=date(2024, 1, 11))
        await service.save_update("alice-1", "Alice", "Developer", yesterday="<p>next week</p>", on_date=date(2024, 1, 15))

        aggregated = await service.aggregate_week(week)

        assert aggregated.total_updates == 3
        assert aggregated.unique_members == 2
        assert [day.date for day in aggregated.days] == [date(2024, 1, 9), date(2024, 1, 11)]
        assert {m.name for m in aggregated.days[0].team_members} == {"Alice", "Bob"}

    @pytest.mark.asyncio
    async def test_second_save_same_day_replaces_update(self, db_session):
        service = StandupService(db_session)
        day = date(2024, 1, 9)
        await service.save_update("alice-1", "Alice", "Developer", yesterday="<p>first</p>", on_date=day)
        await service.save_update("alice-1", "Alice", "Developer", yesterday="<p>second</p>", on_date=day)

        updates = await service.get_updates_for_date(day)

        assert len(updates) == 1
        assert updates[0].yesterday == "<p>second</p>"

    @pytest.mark.asyncio
    async def test_save_requires_some_content(self, db_session):
        service = StandupService(db_session)

        with pytest.raises(ValueError, match="At least one update field"):
            await service.save_update("alice-1", "Alice", "Developer")

    @pytest.mark.asyncio
    async def test_save_requires_name(self, db_session):
        service = StandupService(db_session)

        with pytest.raises(ValueError, match="name is required"):
            await service.save_update("alice-1", "  ", "Developer", today="<p>x</p>")

    @pytest.mark.asyncio
    async def test_updates_for_empty_date(self, db_session):
        updates = await StandupService(db_session).get_updates_for_date(date(2024, 1, 9))
        assert updates == []
