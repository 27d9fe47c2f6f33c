from datetime import datetime, date, timedelta
from typing import Optional, Union

import pytz

DEFAULT_TZ = pytz.utc

DateLike = Union[date, datetime, str]


def now_local(tz=None) -> datetime:
    return datetime.now(tz or DEFAULT_TZ)


def today_local(tz=None) -> date:
    return now_local(tz).date()


def now_iso(tz=None) -> str:
    return now_local(tz).isoformat()


def as_date(value: DateLike) -> date:
    """Accept a date, datetime or YYYY-MM-DD string and return a date"""
    if isinstance(value, datetime):
        return value.date()
    if isinstance(value, date):
        return value
    return parse_date_str(value)


def to_date_str(value: DateLike) -> str:
    return as_date(value).isoformat()


def parse_date_str(date_str: str, fmt: str = "%Y-%m-%d") -> date:
    return datetime.strptime(date_str, fmt).date()


def add_days(value: date, days: int) -> date:
    return value + timedelta(days=days)


def format_date_display(value: DateLike) -> str:
    """'Monday, January 12, 2026'"""
    d = as_date(value)
    return f"{d.strftime('%A')}, {d.strftime('%B')} {d.day}, {d.year}"


def format_date_short(value: DateLike) -> str:
    """'Jan 12'"""
    d = as_date(value)
    return f"{d.strftime('%b')} {d.day}"


def format_month_year(value: DateLike) -> str:
    d = as_date(value)
    return f"{d.strftime('%B')} {d.year}"


def format_week_range(week_start: DateLike) -> str:
    """'Jan 5 - 11, 2026' or 'Dec 29 - Jan 4, 2026' (year of the last day)"""
    start = as_date(week_start)
    end = start + timedelta(days=6)
    start_month = start.strftime('%b')
    end_month = end.strftime('%b')

    if start_month == end_month:
        return f"{start_month} {start.day} - {end.day}, {end.year}"
    return f"{start_month} {start.day} - {end_month} {end.day}, {end.year}"


def greeting(now: Optional[datetime] = None) -> str:
    hour = (now or now_local()).hour
    if hour < 12:
        return "Good morning"
    if hour < 17:
        return "Good afternoon"
    return "Good evening"


def format_time_12h(time24: str) -> str:
    """'13:05' -> '1:05 PM'"""
    hours, minutes = time24.split(':')
    h = int(hours)
    ampm = 'PM' if h >= 12 else 'AM'
    h12 = h % 12 or 12
    return f"{h12}:{minutes} {ampm}"


def format_duration(minutes: int) -> str:
    if minutes < 60:
        return f"{minutes}m"
    hours, mins = divmod(minutes, 60)
    return f"{hours}h {mins}m" if mins > 0 else f"{hours}h"


def format_timer(seconds: int) -> str:
    mins, secs = divmod(max(seconds, 0), 60)
    return f"{mins:02d}:{secs:02d}"
