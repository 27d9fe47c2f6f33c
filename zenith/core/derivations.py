#!/usr/bin/env python3
# -*- coding: utf-8 -*-
"""
Zenith Planner - Derivation engine
Pure computations over planner records: capacity, chart bars, habit
streaks and productivity statistics

Version: 1.0.0
"""

import logging
from dataclasses import dataclass, asdict
from datetime import date, timedelta
from decimal import Decimal, ROUND_HALF_UP
from enum import Enum
from typing import Dict, Iterable, List, Optional, Sequence

from zenith.core.dates import days_between
from zenith.core.models import DEFAULT_TASK_DURATION, DailyEntry, Habit, Task
from zenith.utils.datetime_utils import DateLike, as_date, today_local

logger = logging.getLogger(__name__)

# Analytics score weights
COMPLETION_WEIGHT = 0.6
HABIT_WEIGHT = 0.4


class CapacityStatus(Enum):
    NONE = "none"
    WARNING = "warning"
    DANGER = "danger"


def round_half_up(value: float, digits: int = 0):
    """Round halves away from zero (round() rounds halves to even)"""
    quantum = Decimal(1).scaleb(-digits)
    rounded = Decimal(str(value)).quantize(quantum, rounding=ROUND_HALF_UP)
    return int(rounded) if digits == 0 else float(rounded)


# ===== CAPACITY & CHARTS =====

def capacity_percent(planned_minutes: float, capacity_hours: float) -> int:
    """Planned minutes as a percentage of the daily capacity; not clamped"""
    capacity_minutes = capacity_hours * 60
    if capacity_minutes <= 0:
        logger.warning(f"⚠️ Non-positive capacity {capacity_hours}h, reporting 0%")
        return 0
    return round_half_up(planned_minutes / capacity_minutes * 100)


def capacity_status(percent: float) -> CapacityStatus:
    if percent <= 80:
        return CapacityStatus.NONE
    if percent <= 100:
        return CapacityStatus.WARNING
    return CapacityStatus.DANGER


def capacity_fill(percent: float) -> int:
    """Visual fill for a capacity ring, clamped to 0..100"""
    return int(max(0, min(percent, 100)))


def planned_minutes(tasks: Iterable[Task]) -> int:
    return sum(task.duration or DEFAULT_TASK_DURATION for task in tasks)


def bar_heights(values: Sequence[float], max_height: int = 150) -> List[int]:
    """Scale values against the largest one (floored at 1, so all-zero stays zero)"""
    peak = max([*values, 1])
    return [round_half_up(value / peak * max_height) for value in values]


# ===== HABIT STREAKS =====

def calculate_streak(completed_dates: Iterable[str], today: Optional[date] = None) -> int:
    """
    Current streak for a set of ISO completion dates

    The streak counts consecutive days ending at the most recent completion,
    which must be today or yesterday; otherwise it is 0. Today not being
    marked yet does not break a streak that ran through yesterday.
    """
    dates = sorted({as_date(d) for d in completed_dates}, reverse=True)
    if not dates:
        return 0

    today = today or today_local()
    yesterday = today - timedelta(days=1)
    if dates[0] not in (today, yesterday):
        return 0

    streak = 1
    previous = dates[0]
    for current in dates[1:]:
        if current == previous - timedelta(days=1):
            streak += 1
            previous = current
        else:
            break

    return streak


def refresh_habit_streaks(habit: Habit, today: Optional[date] = None) -> Habit:
    """Recompute the cached current streak and raise the longest-streak watermark"""
    habit.current_streak = calculate_streak(habit.completed_dates, today)
    habit.longest_streak = max(habit.longest_streak, habit.current_streak)
    return habit


def top_streaks(habits: Iterable[Habit], limit: int = 5) -> List[Habit]:
    return sorted(habits, key=lambda h: h.current_streak, reverse=True)[:limit]


# ===== PRODUCTIVITY STATISTICS =====

@dataclass
class ProductivityStats:
    start_date: str
    end_date: str
    total_tasks: int = 0
    completed_tasks: int = 0
    completion_rate: int = 0
    habit_completions: int = 0
    habit_possible: int = 0
    habit_completion_rate: int = 0
    average_mood: Optional[float] = None
    mood_days: int = 0
    focus_minutes: int = 0
    focus_hours: float = 0.0

    @property
    def productivity_score(self) -> int:
        return productivity_score(self.completion_rate, self.habit_completion_rate)

    def to_dict(self) -> Dict:
        data = asdict(self)
        data["productivity_score"] = self.productivity_score
        return data


def in_range(date_str: str, start: str, end: str) -> bool:
    # YYYY-MM-DD sorts lexicographically in date order
    return start <= date_str <= end


def productivity_stats(tasks: Iterable[Task], habits: Iterable[Habit],
                       daily_data: Dict[str, DailyEntry],
                       start: DateLike, end: DateLike) -> ProductivityStats:
    """
    Aggregate tasks, habits and daily check-ins over an inclusive date range

    Every habit is scored against every day of the range whatever its declared
    frequency, so a weekly habit can never reach 100%.
    """
    try:
        start_str, end_str = as_date(start).isoformat(), as_date(end).isoformat()
    except (TypeError, ValueError) as e:
        logger.error(f"❌ Cannot compute stats for {start!r}..{end!r}: {e}")
        return ProductivityStats(start_date=str(start), end_date=str(end))
    stats = ProductivityStats(start_date=start_str, end_date=end_str)

    tasks_in_range = [t for t in tasks if in_range(t.date, start_str, end_str)]
    completed = [t for t in tasks_in_range if t.completed]
    stats.total_tasks = len(tasks_in_range)
    stats.completed_tasks = len(completed)
    stats.completion_rate = percent(stats.completed_tasks, stats.total_tasks)

    habits = list(habits)
    range_days = days_between(start_str, end_str)
    stats.habit_completions = sum(
        1 for habit in habits for d in habit.completed_dates if in_range(d, start_str, end_str)
    )
    stats.habit_possible = len(habits) * range_days
    stats.habit_completion_rate = percent(stats.habit_completions, stats.habit_possible)

    moods = [
        entry.mood for date_str, entry in daily_data.items()
        if in_range(date_str, start_str, end_str) and entry.mood is not None
    ]
    stats.mood_days = len(moods)
    if moods:
        stats.average_mood = round_half_up(sum(moods) / len(moods), 1)

    stats.focus_minutes = planned_minutes(completed)
    stats.focus_hours = round_half_up(stats.focus_minutes / 60, 1)

    logger.debug(f"📊 Stats {start_str}..{end_str}: {stats.completed_tasks}/{stats.total_tasks} tasks, "
                 f"habits {stats.habit_completion_rate}%")
    return stats


def percent(part: int, whole: int) -> int:
    """Rounded percentage, 0 when there is nothing to measure"""
    if whole <= 0:
        return 0
    return round_half_up(part / whole * 100)


def productivity_score(completion_rate: float, habit_completion_rate: float) -> int:
    return round_half_up(completion_rate * COMPLETION_WEIGHT + habit_completion_rate * HABIT_WEIGHT)


def completed_counts_by_day(tasks: Iterable[Task], days: Sequence[date]) -> List[int]:
    counts: Dict[str, int] = {}
    for task in tasks:
        if task.completed:
            counts[task.date] = counts.get(task.date, 0) + 1
    return [counts.get(day.isoformat(), 0) for day in days]


def rating_pattern(daily_data: Dict[str, DailyEntry], days: Sequence[date],
                   attribute: str, default: int = 3) -> List[int]:
    """Per-day energy/mood values, with missing ratings shown as neutral"""
    pattern = []
    for day in days:
        entry = daily_data.get(day.isoformat())
        value = getattr(entry, attribute, None) if entry else None
        pattern.append(value if value is not None else default)
    return pattern
