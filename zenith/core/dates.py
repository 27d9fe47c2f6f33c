#!/usr/bin/env python3
# -*- coding: utf-8 -*-
"""
Zenith Planner - Calendar utilities
Week starts, week/month/year day listings and ISO week numbers

All weeks are Monday-first (ISO). "today" is always an argument so the
grids are deterministic; callers pass ``today_local(tz)`` at the edge.

Version: 1.0.0
"""

import calendar
from datetime import date, timedelta
from dataclasses import dataclass
from typing import List, Optional, Tuple, Iterator

from zenith.utils.datetime_utils import DateLike, as_date, today_local

GRID_CELLS = 42  # 6 rows x 7 columns


@dataclass(frozen=True)
class CalendarDay:
    """One cell of the month grid"""
    date: date
    date_str: str
    day_num: int
    is_other_month: bool
    is_today: bool


@dataclass(frozen=True)
class YearDay:
    date: date
    date_str: str
    week: int  # ISO-8601 week number
    day_of_week: int  # Monday=0 .. Sunday=6


def week_start(value: DateLike) -> date:
    """Monday on or before the given day (Sunday maps to the previous Monday)"""
    d = as_date(value)
    return d - timedelta(days=d.weekday())


def week_dates(monday: DateLike) -> List[date]:
    start = as_date(monday)
    return [start + timedelta(days=i) for i in range(7)]


def is_today(value: DateLike, today: Optional[date] = None) -> bool:
    """Calendar-date comparison, time of day is ignored"""
    return as_date(value) == (today or today_local())


def iso_week_number(value: DateLike) -> int:
    return as_date(value).isocalendar()[1]


def month_bounds(year: int, month: int) -> Tuple[date, date]:
    """First and last day of a month (month is 1-12)"""
    last_day = calendar.monthrange(year, month)[1]
    return date(year, month, 1), date(year, month, last_day)


def shift_months(value: DateLike, months: int) -> date:
    """Move by whole months, clamping the day to the target month's length"""
    d = as_date(value)
    index = d.year * 12 + (d.month - 1) + months
    year, month0 = divmod(index, 12)
    last_day = calendar.monthrange(year, month0 + 1)[1]
    return date(year, month0 + 1, min(d.day, last_day))


def iter_dates(start: DateLike, end: DateLike) -> Iterator[date]:
    current, last = as_date(start), as_date(end)
    while current <= last:
        yield current
        current += timedelta(days=1)


def date_range(start: DateLike, end: DateLike) -> List[date]:
    """Inclusive list of days; empty when end precedes start"""
    return list(iter_dates(start, end))


def days_between(start: DateLike, end: DateLike) -> int:
    """Inclusive day count (0 when end precedes start)"""
    return max(0, (as_date(end) - as_date(start)).days + 1)


def calendar_grid(year: int, month: int, today: Optional[date] = None) -> List[CalendarDay]:
    """
    Month view as exactly 42 Monday-first cells

    Leading cells come from the previous month and trailing cells from the
    next one; both are flagged ``is_other_month`` and never marked as today.
    The grid always has six rows, even for months that fit in four or five.
    """
    today = today or today_local()
    first, last = month_bounds(year, month)
    grid_start = first - timedelta(days=first.weekday())

    days = []
    for offset in range(GRID_CELLS):
        current = grid_start + timedelta(days=offset)
        other_month = not (first <= current <= last)
        days.append(CalendarDay(
            date=current,
            date_str=current.isoformat(),
            day_num=current.day,
            is_other_month=other_month,
            is_today=not other_month and current == today,
        ))
    return days


def year_days(year: int) -> List[YearDay]:
    """Every day of the year (365 or 366) with its ISO week"""
    return [
        YearDay(
            date=current,
            date_str=current.isoformat(),
            week=current.isocalendar()[1],
            day_of_week=current.weekday(),
        )
        for current in iter_dates(date(year, 1, 1), date(year, 12, 31))
    ]


def group_by_week(days: List[YearDay]) -> List[Tuple[int, List[YearDay]]]:
    """Consecutive runs of days sharing an ISO week number, in date order"""
    groups: List[Tuple[int, List[YearDay]]] = []
    for day in days:
        if groups and groups[-1][0] == day.week:
            groups[-1][1].append(day)
        else:
            groups.append((day.week, [day]))
    return groups
