"""Tests for reference-timezone date helpers and the trigger predicate."""

from datetime import date, datetime, timezone
from zoneinfo import ZoneInfo

import pytest

from standup_tracker.utils import dates

VANCOUVER = ZoneInfo("America/Vancouver")


class TestIsTriggerTime:
    """Friday 12:00 in the reference timezone, exact minute only."""

    def test_friday_noon_local_fires(self):
        assert dates.is_trigger_time(datetime(2024, 1, 12, 12, 0, tzinfo=VANCOUVER))

    def test_seconds_within_the_minute_fire(self):
        assert dates.is_trigger_time(datetime(2024, 1, 12, 12, 0, 59, tzinfo=VANCOUVER))

    def test_one_minute_late_does_not_fire(self):
        assert not dates.is_trigger_time(datetime(2024, 1, 12, 12, 1, tzinfo=VANCOUVER))

    def test_one_minute_early_does_not_fire(self):
        assert not dates.is_trigger_time(datetime(2024, 1, 12, 11, 59, tzinfo=VANCOUVER))

    def test_other_weekday_does_not_fire(self):
        assert not dates.is_trigger_time(datetime(2024, 1, 11, 12, 0, tzinfo=VANCOUVER))

    def test_utc_instant_converted_to_reference_zone(self):
        # 20:00 UTC in January is 12:00 PST
        assert dates.is_trigger_time(datetime(2024, 1, 12, 20, 0, tzinfo=timezone.utc))
        # Noon UTC is 04:00 in Vancouver
        assert not dates.is_trigger_time(datetime(2024, 1, 12, 12, 0, tzinfo=timezone.utc))

    def test_daylight_saving_offset(self):
        # 19:00 UTC in July is 12:00 PDT
        assert dates.is_trigger_time(datetime(2024, 7, 12, 19, 0, tzinfo=timezone.utc))

    def test_naive_datetime_treated_as_utc(self):
        assert dates.is_trigger_time(datetime(2024, 1, 12, 20, 0))

    def test_custom_schedule(self):
        moment = datetime(2024, 1, 8, 9, 30, tzinfo=VANCOUVER)
        assert dates.is_trigger_time(moment, weekday=0, hour=9, minute=30)
        assert not dates.is_trigger_time(moment)


class TestWeeks:

    def test_week_containing_is_monday_to_sunday(self):
        week = dates.week_containing(date(2024, 1, 12))

        assert week.week_start == date(2024, 1, 8)
        assert week.week_end == date(2024, 1, 14)
        assert week.days == 7

    def test_week_containing_monday_and_sunday(self):
        assert dates.week_containing(date(2024, 1, 8)).week_start == date(2024, 1, 8)
        assert dates.week_containing(date(2024, 1, 14)).week_start == date(2024, 1, 8)

    def test_current_week_uses_reference_date_not_utc_date(self):
        # Monday 03:00 UTC is still Sunday evening in Vancouver
        moment = datetime(2024, 1, 15, 3, 0, tzinfo=timezone.utc)

        assert dates.reference_date(moment) == date(2024, 1, 14)
        assert dates.current_week(moment).week_start == date(2024, 1, 8)

    def test_previous_week(self):
        week = dates.previous_week(datetime(2024, 1, 12, 20, 0, tzinfo=timezone.utc))

        assert week.week_start == date(2024, 1, 1)
        assert week.week_end == date(2024, 1, 7)

    def test_week_range_rejects_inverted_dates(self):
        from standup_tracker.schemas.report import WeekRange

        with pytest.raises(ValueError):
            WeekRange(week_start=date(2024, 1, 14), week_end=date(2024, 1, 8))
