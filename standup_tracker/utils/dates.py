"""
Reference-timezone date helpers.

Every "today", "this week" and trigger computation goes through this module so
all call sites agree on day boundaries. Naive datetimes are treated as UTC.
"""
from datetime import date, datetime, timedelta, timezone
from typing import Optional
from zoneinfo import ZoneInfo

from ..config import settings
from ..schemas.report import WeekRange


def get_zone(tz_name: Optional[str] = None) -> ZoneInfo:
    return ZoneInfo(tz_name or settings.timezone)


def now_utc() -> datetime:
    return datetime.now(timezone.utc)


def to_reference_time(moment: datetime, tz_name: Optional[str] = None) -> datetime:
    """Convert an instant to wall-clock time in the reference timezone."""
    if moment.tzinfo is None:
        moment = moment.replace(tzinfo=timezone.utc)
    return moment.astimezone(get_zone(tz_name))


def reference_date(moment: Optional[datetime] = None, tz_name: Optional[str] = None) -> date:
    """Calendar date of an instant in the reference timezone."""
    return to_reference_time(moment or now_utc(), tz_name).date()


def week_containing(day: date) -> WeekRange:
    """Monday..Sunday week that contains the given date."""
    monday = day - timedelta(days=day.weekday())
    return WeekRange(week_start=monday, week_end=monday + timedelta(days=6))


def current_week(moment: Optional[datetime] = None, tz_name: Optional[str] = None) -> WeekRange:
    return week_containing(reference_date(moment, tz_name))


def previous_week(moment: Optional[datetime] = None, tz_name: Optional[str] = None) -> WeekRange:
    return week_containing(reference_date(moment, tz_name) - timedelta(days=7))


def is_trigger_time(
    moment: Optional[datetime] = None,
    weekday: Optional[int] = None,
    hour: Optional[int] = None,
    minute: Optional[int] = None,
    tz_name: Optional[str] = None,
) -> bool:
    """True iff weekday, hour and minute match the trigger exactly.

    There is no tolerance window: a poll landing on 12:01 misses a 12:00
    trigger, so callers must poll at least once per minute.
    """
    local = to_reference_time(moment or now_utc(), tz_name)
    weekday = settings.report_weekday if weekday is None else weekday
    hour = settings.report_hour if hour is None else hour
    minute = settings.report_minute if minute is None else minute

    return local.weekday() == weekday and local.hour == hour and local.minute == minute
