#!/usr/bin/env python3
# -*- coding: utf-8 -*-
"""
Zenith Planner - Core Data Models
Planner records with validation and JSON (camelCase) serialization

Version: 1.0.0
"""

import re
from datetime import datetime, date
from typing import Dict, List, Optional, Any
from dataclasses import dataclass, field, fields
from enum import Enum
import logging

from zenith.config import DEFAULT_SETTINGS
from zenith.utils.datetime_utils import now_iso
from zenith.utils.validators import is_valid_date, is_valid_time, is_rating

logger = logging.getLogger(__name__)

# ===== ENUMS =====

class TaskPriority(Enum):
    """Task priorities"""
    HIGH = "high"
    MEDIUM = "medium"
    LOW = "low"

class TaskCategory(Enum):
    """Task and time block categories"""
    WORK = "work"
    PERSONAL = "personal"
    HEALTH = "health"
    LEARNING = "learning"

class HabitFrequency(Enum):
    """Declared habit frequency (informational, not used for scoring)"""
    DAILY = "daily"
    WEEKDAYS = "weekdays"
    WEEKLY = "weekly"

class GoalPartition(Enum):
    """Where a goal lives inside the goals document"""
    YEARLY = "yearly"
    MONTHLY = "monthly"
    LIFE_AREA = "lifeArea"

class LifeArea(Enum):
    """Fixed personal-goal areas"""
    CAREER = "career"
    HEALTH = "health"
    RELATIONSHIPS = "relationships"
    FINANCE = "finance"
    LEARNING = "learning"
    CREATIVITY = "creativity"

class Theme(Enum):
    LIGHT = "light"
    DARK = "dark"

DEFAULT_TASK_DURATION = 30

# ===== VALIDATION HELPERS =====

class ValidationError(Exception):
    """Invalid record data"""
    pass

def validate_text(text: str, min_length: int = 1, max_length: int = 1000, field_name: str = "text") -> str:
    """Validate and strip a text field"""
    if not isinstance(text, str):
        raise ValidationError(f"{field_name} must be a string")

    text = text.strip()
    if len(text) < min_length:
        raise ValidationError(f"{field_name} must contain at least {min_length} characters")

    if len(text) > max_length:
        raise ValidationError(f"{field_name} must contain at most {max_length} characters")

    return text

def validate_enum_value(value: str, enum_class: type, field_name: str = "value") -> str:
    """Validate an enum value, returning the raw string"""
    if isinstance(value, enum_class):
        return value.value
    try:
        enum_class(value)
        return value
    except ValueError:
        valid_values = [e.value for e in enum_class]
        raise ValidationError(f"{field_name} must be one of: {valid_values}")

def validate_date_str(value: Any, field_name: str = "date") -> str:
    if isinstance(value, datetime):
        value = value.date()
    if isinstance(value, date):
        return value.isoformat()
    if not is_valid_date(value):
        raise ValidationError(f"{field_name} must be an ISO date (YYYY-MM-DD), got {value!r}")
    return value

def validate_time_str(value: Any, field_name: str = "time") -> str:
    if not is_valid_time(value):
        raise ValidationError(f"{field_name} must be HH:MM, got {value!r}")
    return value

def validate_positive_int(value: Any, field_name: str = "value") -> int:
    if isinstance(value, bool) or not isinstance(value, int) or value <= 0:
        raise ValidationError(f"{field_name} must be a positive integer")
    return value

def validate_optional_rating(value: Any, field_name: str = "rating") -> Optional[int]:
    if value is None:
        return None
    if not is_rating(value):
        raise ValidationError(f"{field_name} must be between 1 and 5")
    return value

# ===== SERIALIZATION =====

_CAMEL_RE = re.compile(r'(?<!^)(?=[A-Z])')

def snake_to_camel(name: str) -> str:
    head, *rest = name.split('_')
    return head + ''.join(part.title() for part in rest)

def camel_to_snake(name: str) -> str:
    return _CAMEL_RE.sub('_', name).lower()


class Record:
    """
    Serialization mixin for planner records

    Attributes are snake_case, the stored JSON is camelCase. Keys the model
    does not know about are kept in ``extras`` and written back unchanged.
    """

    def to_dict(self) -> Dict[str, Any]:
        data = dict(self.extras)
        for f in fields(self):
            if f.name == "extras":
                continue
            value = getattr(self, f.name)
            if isinstance(value, list):
                value = list(value)
            data[snake_to_camel(f.name)] = value
        return data

    @classmethod
    def field_names(cls) -> List[str]:
        return [f.name for f in fields(cls) if f.name != "extras"]

    @classmethod
    def from_dict(cls, data: Dict[str, Any]):
        if not isinstance(data, dict):
            raise ValidationError(f"{cls.__name__} record must be an object")

        known = set(cls.field_names())
        kwargs: Dict[str, Any] = {}
        extras: Dict[str, Any] = {}
        for key, value in data.items():
            attr = camel_to_snake(key)
            if attr in known:
                kwargs[attr] = value
            else:
                extras[key] = value

        try:
            return cls(**kwargs, extras=extras)
        except TypeError as e:
            raise ValidationError(f"Cannot build {cls.__name__}: {e}")

    def merged(self, patch: Dict[str, Any]):
        """Shallow merge of a patch (snake_case or camelCase keys) over this record"""
        data = self.to_dict()
        for key, value in patch.items():
            data[snake_to_camel(key)] = value
        return type(self).from_dict(data)

# ===== CORE MODELS =====

@dataclass
class Task(Record):
    """A planned task on a given date"""
    id: str
    title: str
    date: str
    priority: str = TaskPriority.MEDIUM.value
    category: str = TaskCategory.PERSONAL.value
    duration: int = DEFAULT_TASK_DURATION  # minutes
    completed: bool = False
    completed_at: Optional[str] = None
    created_at: str = field(default_factory=now_iso)
    extras: Dict[str, Any] = field(default_factory=dict, repr=False)

    def __post_init__(self):
        self.title = validate_text(self.title, min_length=1, max_length=200, field_name="title")
        self.date = validate_date_str(self.date)
        self.priority = validate_enum_value(self.priority, TaskPriority, "priority")
        self.category = validate_enum_value(self.category, TaskCategory, "category")
        if self.duration is None:
            self.duration = DEFAULT_TASK_DURATION
        self.duration = validate_positive_int(self.duration, "duration")
        self.completed = bool(self.completed)

    @property
    def category_icon(self) -> str:
        return category_icon(self.category)


@dataclass
class Habit(Record):
    """A tracked habit; completed_dates is a set stored as a sorted list"""
    id: str
    name: str
    frequency: str = HabitFrequency.DAILY.value
    completed_dates: List[str] = field(default_factory=list)
    current_streak: int = 0
    longest_streak: int = 0
    created_at: str = field(default_factory=now_iso)
    extras: Dict[str, Any] = field(default_factory=dict, repr=False)

    def __post_init__(self):
        self.name = validate_text(self.name, min_length=1, max_length=200, field_name="name")
        self.frequency = validate_enum_value(self.frequency, HabitFrequency, "frequency")
        if not isinstance(self.completed_dates, list):
            raise ValidationError("completedDates must be a list")
        self.completed_dates = sorted({
            validate_date_str(d, "completedDates") for d in self.completed_dates
        })
        if not isinstance(self.current_streak, int) or self.current_streak < 0:
            raise ValidationError("currentStreak must be a non-negative integer")
        if not isinstance(self.longest_streak, int) or self.longest_streak < 0:
            raise ValidationError("longestStreak must be a non-negative integer")
        self.longest_streak = max(self.longest_streak, self.current_streak)

    def is_completed_on(self, date_str: str) -> bool:
        return date_str in self.completed_dates


@dataclass
class TimeBlock(Record):
    """A scheduled block of time; blocks may overlap"""
    id: str
    title: str
    start_time: str
    end_time: str
    date: str
    category: str = TaskCategory.WORK.value
    extras: Dict[str, Any] = field(default_factory=dict, repr=False)

    def __post_init__(self):
        self.title = validate_text(self.title, min_length=1, max_length=200, field_name="title")
        self.start_time = validate_time_str(self.start_time, "startTime")
        self.end_time = validate_time_str(self.end_time, "endTime")
        self.date = validate_date_str(self.date)
        self.category = validate_enum_value(self.category, TaskCategory, "category")

    @property
    def duration_minutes(self) -> int:
        start_h, start_m = map(int, self.start_time.split(':'))
        end_h, end_m = map(int, self.end_time.split(':'))
        return max(0, (end_h * 60 + end_m) - (start_h * 60 + start_m))


@dataclass
class Goal(Record):
    id: str
    title: str
    description: Optional[str] = None
    progress: int = 0
    created_at: str = field(default_factory=now_iso)
    extras: Dict[str, Any] = field(default_factory=dict, repr=False)

    def __post_init__(self):
        self.title = validate_text(self.title, min_length=1, max_length=200, field_name="title")
        if self.description is not None:
            self.description = validate_text(self.description, min_length=0, max_length=1000,
                                             field_name="description")
        if isinstance(self.progress, bool) or not isinstance(self.progress, int) \
                or not 0 <= self.progress <= 100:
            raise ValidationError("progress must be an integer between 0 and 100")


@dataclass
class WeeklyObjective(Record):
    id: str
    title: str
    week_start: str
    completed: bool = False
    extras: Dict[str, Any] = field(default_factory=dict, repr=False)

    def __post_init__(self):
        self.title = validate_text(self.title, min_length=1, max_length=200, field_name="title")
        self.week_start = validate_date_str(self.week_start, "weekStart")
        self.completed = bool(self.completed)


@dataclass
class DailyEntry(Record):
    """Check-in data for one date (highlight, ratings, reflection)"""
    highlight: str = ""
    energy: Optional[int] = None
    mood: Optional[int] = None
    sleep: Optional[int] = None
    reflection: str = ""
    wins: str = ""
    extras: Dict[str, Any] = field(default_factory=dict, repr=False)

    def __post_init__(self):
        self.energy = validate_optional_rating(self.energy, "energy")
        self.mood = validate_optional_rating(self.mood, "mood")
        self.sleep = validate_optional_rating(self.sleep, "sleep")
        for name in ("highlight", "reflection", "wins"):
            value = getattr(self, name)
            if value is None:
                setattr(self, name, "")
            elif not isinstance(value, str):
                raise ValidationError(f"{name} must be a string")


@dataclass
class Settings(Record):
    """Planner settings; invalid values fall back to defaults"""
    work_start: str = DEFAULT_SETTINGS.work_start
    work_end: str = DEFAULT_SETTINGS.work_end
    daily_capacity: int = DEFAULT_SETTINGS.daily_capacity
    pomodoro_length: int = DEFAULT_SETTINGS.pomodoro_length
    break_length: int = DEFAULT_SETTINGS.break_length
    extras: Dict[str, Any] = field(default_factory=dict, repr=False)

    def __post_init__(self):
        if not is_valid_time(self.work_start):
            logger.warning(f"⚠️ Invalid workStart {self.work_start!r}, using default")
            self.work_start = DEFAULT_SETTINGS.work_start

        if not is_valid_time(self.work_end):
            logger.warning(f"⚠️ Invalid workEnd {self.work_end!r}, using default")
            self.work_end = DEFAULT_SETTINGS.work_end

        if not _is_int_in(self.daily_capacity, 1, 24):
            logger.warning(f"⚠️ Invalid dailyCapacity {self.daily_capacity!r}, using default")
            self.daily_capacity = DEFAULT_SETTINGS.daily_capacity

        if not _is_int_in(self.pomodoro_length, 1, 180):
            self.pomodoro_length = DEFAULT_SETTINGS.pomodoro_length

        if not _is_int_in(self.break_length, 1, 60):
            self.break_length = DEFAULT_SETTINGS.break_length


@dataclass
class UserProfile(Record):
    name: str
    work_start: str = DEFAULT_SETTINGS.work_start
    work_end: str = DEFAULT_SETTINGS.work_end
    daily_capacity: int = DEFAULT_SETTINGS.daily_capacity
    onboarding_complete: bool = False
    created_at: str = field(default_factory=now_iso)
    extras: Dict[str, Any] = field(default_factory=dict, repr=False)

    def __post_init__(self):
        self.name = validate_text(self.name, min_length=1, max_length=100, field_name="name")
        self.work_start = validate_time_str(self.work_start, "workStart")
        self.work_end = validate_time_str(self.work_end, "workEnd")
        if not _is_int_in(self.daily_capacity, 1, 24):
            raise ValidationError("dailyCapacity must be between 1 and 24 hours")

    @property
    def initial(self) -> str:
        return self.name[:1].upper()


def _is_int_in(value: Any, low: int, high: int) -> bool:
    return isinstance(value, int) and not isinstance(value, bool) and low <= value <= high


def category_icon(category: str) -> str:
    """Emoji for a task category"""
    icons = {
        TaskCategory.WORK.value: "💼",
        TaskCategory.PERSONAL.value: "🏠",
        TaskCategory.HEALTH.value: "💪",
        TaskCategory.LEARNING.value: "📚",
    }
    return icons.get(category, "📌")
