"""Wall-clock helpers.

Events are stored as naive datetimes in the studio's local timezone, so
"today" and "tomorrow" are computed in that timezone too.
"""
from datetime import date, datetime, time, timedelta
from zoneinfo import ZoneInfo

from studio_ops.core.config import settings


def local_now() -> datetime:
    return datetime.now(ZoneInfo(settings.timezone)).replace(tzinfo=None)


def start_of_day(value: datetime) -> datetime:
    return value.replace(hour=0, minute=0, second=0, microsecond=0)


def end_of_day(value: datetime) -> datetime:
    return value.replace(hour=23, minute=59, second=59, microsecond=999999)


def to_local_naive(value: datetime) -> datetime:
    """Convert an aware datetime to local wall-clock time; naive values pass through."""
    if value.tzinfo is None:
        return value
    return value.astimezone(ZoneInfo(settings.timezone)).replace(tzinfo=None)


def tomorrow_window(today: date) -> tuple[datetime, datetime]:
    """Return the inclusive window of bookings to announce the day before.

    Normally that is all of tomorrow. Nothing goes out over the weekend, so
    on a Friday the window runs from Saturday through the end of Monday.
    """
    tomorrow = datetime.combine(today + timedelta(days=1), time.min)
    if tomorrow.weekday() == 5:  # Saturday
        last_day = tomorrow + timedelta(days=2)
    else:
        last_day = tomorrow
    return start_of_day(tomorrow), end_of_day(last_day)
