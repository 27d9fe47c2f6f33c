#!/usr/bin/env python3
# -*- coding: utf-8 -*-
"""
Zenith Planner - Analytics & view-model services
Weekly, monthly, yearly and analytics summaries plus the end-of-day ritual

Everything here returns plain dictionaries; rendering is left to the caller.

Version: 1.0.0
"""

import logging
from datetime import date, datetime, timedelta
from typing import Any, Dict, List, Optional

from zenith.core.dates import (
    calendar_grid, date_range, group_by_week, month_bounds, shift_months,
    week_dates, week_start, year_days,
)
from zenith.core.derivations import (
    ProductivityStats, bar_heights, capacity_fill, capacity_percent, capacity_status,
    completed_counts_by_day, planned_minutes, productivity_stats, rating_pattern,
    round_half_up,
)
from zenith.core.models import DailyEntry, GoalPartition, Task
from zenith.core.storage import DocumentStore
from zenith.services.repositories import (
    DailyDataRepository, GoalRepository, HabitRepository, SettingsRepository,
    TaskRepository, TimeBlockRepository, UserRepository, WeeklyObjectiveRepository,
)
from zenith.utils.datetime_utils import (
    DateLike, add_days, as_date, format_date_display, format_date_short, format_duration,
    format_month_year, format_time_12h, format_week_range, greeting, now_local, today_local,
)
from zenith.utils.validators import is_blank

logger = logging.getLogger(__name__)

ANALYTICS_RANGES = ("week", "month", "quarter")
DEFAULT_CHART_HEIGHT = 150
TOP_STREAKS = 5


def range_start(range_name: str, today: date) -> date:
    """First day of an analytics range ending today"""
    if range_name == "week":
        return today - timedelta(days=7)
    if range_name == "month":
        return shift_months(today, -1)
    if range_name == "quarter":
        return shift_months(today, -3)
    raise ValueError(f"Unknown analytics range: {range_name}")


class AnalyticsService:
    """Builds view-models out of the repositories and the derivation engine"""

    def __init__(self, store: DocumentStore, chart_height: int = DEFAULT_CHART_HEIGHT, tz=None):
        self.store = store
        self.chart_height = chart_height
        self.tz = tz

        self.tasks = TaskRepository(store)
        self.habits = HabitRepository(store)
        self.time_blocks = TimeBlockRepository(store)
        self.goals = GoalRepository(store)
        self.objectives = WeeklyObjectiveRepository(store)
        self.daily_data = DailyDataRepository(store)
        self.settings = SettingsRepository(store)
        self.user = UserRepository(store)

    def _today(self, today: Optional[date]) -> date:
        return today or today_local(self.tz)

    def stats(self, start: DateLike, end: DateLike) -> ProductivityStats:
        return productivity_stats(
            self.tasks.list(),
            self.habits.list(),
            self.daily_data.entries_between(start, end),
            start,
            end,
        )

    # ===== ANALYTICS =====

    def report(self, range_name: str = "week", today: Optional[date] = None) -> Optional[Dict[str, Any]]:
        """Analytics dashboard for the last week, month or quarter"""
        today = self._today(today)
        try:
            start = range_start(range_name, today)
        except ValueError as e:
            logger.error(f"❌ {e}")
            return None

        stats = self.stats(start, today)
        days = date_range(start, today)
        tasks = self.tasks.list()
        daily = self.daily_data.entries_between(start, today)
        completed_per_day = completed_counts_by_day(tasks, days)

        logger.info(f"📊 Analytics report ({range_name}): score {stats.productivity_score}")
        return {
            "range": range_name,
            "start_date": start.isoformat(),
            "end_date": today.isoformat(),
            "stats": stats.to_dict(),
            "productivity_score": stats.productivity_score,
            "days": [d.isoformat() for d in days],
            "labels": [format_date_short(d) for d in days],
            "completed_per_day": completed_per_day,
            "bar_heights": bar_heights(completed_per_day, self.chart_height),
            "energy_pattern": rating_pattern(daily, days, "energy"),
            "mood_pattern": rating_pattern(daily, days, "mood"),
            "top_streaks": [
                {"id": h.id, "name": h.name, "current_streak": h.current_streak}
                for h in self.habits.top_streaks(TOP_STREAKS)
            ],
        }

    # ===== WEEK / MONTH / YEAR =====

    def weekly_summary(self, any_date: DateLike) -> Optional[Dict[str, Any]]:
        try:
            monday = week_start(any_date)
        except (TypeError, ValueError) as e:
            logger.error(f"❌ Cannot summarise week of {any_date!r}: {e}")
            return None
        days = week_dates(monday)
        stats = self.stats(days[0], days[-1])
        tasks = self.tasks.list()

        return {
            "week_start": monday.isoformat(),
            "week_range": format_week_range(monday),
            "days": [
                {
                    "date": d.isoformat(),
                    "tasks": [t.to_dict() for t in tasks if t.date == d.isoformat()],
                }
                for d in days
            ],
            "objectives": [o.to_dict() for o in self.objectives.list_for_week(monday)],
            "completed_tasks": stats.completed_tasks,
            "focus_hours": stats.focus_hours,
            "habit_completion_rate": stats.habit_completion_rate,
        }

    def monthly_summary(self, year: int, month: int, today: Optional[date] = None) -> Dict[str, Any]:
        first, last = month_bounds(year, month)
        today = self._today(today)
        task_dates = {t.date for t in self.tasks.list()}
        stats = self.stats(first, last)
        blocks = [
            b for b in self.time_blocks.list()
            if first.isoformat() <= b.date <= last.isoformat()
        ]

        return {
            "title": format_month_year(first),
            "grid": [
                {
                    "date": cell.date_str,
                    "day": cell.day_num,
                    "is_other_month": cell.is_other_month,
                    "is_today": cell.is_today,
                    "has_tasks": cell.date_str in task_dates,
                }
                for cell in calendar_grid(year, month, today)
            ],
            "completed_tasks": stats.completed_tasks,
            "time_blocks": len(blocks),
            "average_mood": stats.average_mood,
            "goals": [g.to_dict() for g in self.goals.list(GoalPartition.MONTHLY)],
        }

    def year_in_pixels(self, year: int) -> List[Dict[str, Any]]:
        """Every day of the year grouped by ISO week, with the mood recorded that day"""
        moods = self.daily_data.mood_for_year(year)
        return [
            {
                "week": week,
                "days": [
                    {
                        "date": day.date_str,
                        "day_of_week": day.day_of_week,
                        "mood": moods.get(day.date_str),
                    }
                    for day in days
                ],
            }
            for week, days in group_by_week(year_days(year))
        ]

    # ===== DAILY =====

    def daily_overview(self, date_str: DateLike, now: Optional[datetime] = None) -> Optional[Dict[str, Any]]:
        try:
            day = as_date(date_str)
        except (TypeError, ValueError) as e:
            logger.error(f"❌ Cannot build overview for {date_str!r}: {e}")
            return None
        now = now or now_local(self.tz)
        tasks = self.tasks.list_for_date(day)
        capacity_hours = self.settings.get().daily_capacity
        minutes = planned_minutes(tasks)
        percent = capacity_percent(minutes, capacity_hours)
        profile = self.user.get()

        return {
            "greeting": f"{greeting(now)}, {profile.name}" if profile else greeting(now),
            "date": day.isoformat(),
            "date_display": format_date_display(day),
            "tasks": [t.to_dict() for t in tasks],
            "planned_minutes": minutes,
            "planned_hours": round_half_up(minutes / 60, 1),
            "capacity_hours": capacity_hours,
            "capacity_percent": percent,
            "capacity_status": capacity_status(percent).value,
            "capacity_fill": capacity_fill(percent),
            "time_blocks": [
                {**b.to_dict(), "time_display": f"{format_time_12h(b.start_time)} - {format_time_12h(b.end_time)}"}
                for b in self.time_blocks.list_for_date(day)
            ],
            "entry": self.daily_data.get(day).to_dict(),
        }


class ShutdownRitual:
    """End-of-day review: what got done, what moves, and what matters tomorrow"""

    def __init__(self, store: DocumentStore):
        self.tasks = TaskRepository(store)
        self.daily_data = DailyDataRepository(store)

    def review(self, today: date) -> Dict[str, List[Task]]:
        tasks = self.tasks.list_for_date(today)
        return {
            "completed": [t for t in tasks if t.completed],
            "incomplete": [t for t in tasks if not t.completed],
        }

    def move_to_tomorrow(self, task_id: str, today: date) -> Optional[Task]:
        tomorrow = add_days(as_date(today), 1)
        task = self.tasks.move(task_id, tomorrow)
        if task is not None:
            logger.info(f"➡️ Task {task_id} moved to {tomorrow.isoformat()}")
        return task

    def record_wins(self, today: date, wins: str) -> Optional[DailyEntry]:
        return self.daily_data.set(today, {"wins": wins})

    def set_tomorrow_highlight(self, today: date, highlight: str) -> Optional[DailyEntry]:
        if is_blank(highlight):
            return None
        tomorrow = add_days(as_date(today), 1)
        return self.daily_data.set(tomorrow, {"highlight": highlight.strip()})

    def summary(self, today: date) -> Dict[str, Any]:
        completed = self.review(today)["completed"]
        focus_minutes = planned_minutes(completed)
        logger.info(f"🌙 Day closed: {len(completed)} tasks, {format_duration(focus_minutes)} focused")
        return {
            "completed_count": len(completed),
            "focus_minutes": focus_minutes,
            "focus_duration": format_duration(focus_minutes),
        }
