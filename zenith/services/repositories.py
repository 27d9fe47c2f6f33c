# services/repositories.py

import logging
import secrets
import string
import time
from datetime import date, datetime
from typing import Any, Dict, List, Optional, Union

from zenith.core.dates import week_start
from zenith.core.derivations import planned_minutes, refresh_habit_streaks, round_half_up, top_streaks
from zenith.core.models import (
    DailyEntry, Goal, GoalPartition, Habit, HabitFrequency, LifeArea, Record, Settings,
    Task, TaskCategory, TaskPriority, Theme, TimeBlock, UserProfile, ValidationError,
    WeeklyObjective, snake_to_camel, validate_date_str, validate_enum_value,
)
from zenith.core.storage import DocumentStore, empty_goals
from zenith.utils.datetime_utils import DateLike, now_iso

logger = logging.getLogger(__name__)

_ID_ALPHABET = string.digits + string.ascii_lowercase
STREAK_FIELDS = ("currentStreak", "longestStreak")

# ===== IDS =====

def _to_base36(number: int) -> str:
    if number == 0:
        return "0"
    digits = []
    while number:
        number, remainder = divmod(number, 36)
        digits.append(_ID_ALPHABET[remainder])
    return "".join(reversed(digits))


def generate_id() -> str:
    """Millisecond timestamp in base 36 followed by a random suffix"""
    suffix = "".join(secrets.choice(_ID_ALPHABET) for _ in range(9))
    return _to_base36(int(time.time() * 1000)) + suffix


def _camel_patch(patch: Dict[str, Any]) -> Dict[str, Any]:
    return {snake_to_camel(key): value for key, value in patch.items()}


def _checked_date(value: DateLike, action: str) -> Optional[str]:
    """ISO date string for a caller-supplied date, or None (logged) when malformed"""
    try:
        return validate_date_str(value)
    except ValidationError as e:
        logger.error(f"❌ Cannot {action}: {e}")
        return None


# ===== LIST COLLECTIONS =====

class CollectionRepository:
    """
    CRUD over one list-valued storage key

    Records are stored as camelCase dicts. Every write replaces the whole list.
    Entries that cannot be parsed are skipped in listings and written back
    untouched.
    """

    model = Record
    key_name = ""
    label = "record"

    def __init__(self, store: DocumentStore):
        self.store = store

    @property
    def key(self) -> str:
        return getattr(self.store.keys, self.key_name)

    def _load_raw(self) -> List[Dict[str, Any]]:
        value = self.store.get(self.key)
        if value is None:
            return []
        if not isinstance(value, list):
            logger.warning(f"⚠️ {self.key} is not a list, treating as empty")
            return []
        return value

    def _save_raw(self, items: List[Dict[str, Any]]) -> bool:
        return self.store.set(self.key, items)

    def _parse(self, raw: Any):
        try:
            return self.model.from_dict(raw)
        except ValidationError as e:
            logger.warning(f"⚠️ Skipping invalid {self.label} {raw.get('id') if isinstance(raw, dict) else raw!r}: {e}")
            return None

    @staticmethod
    def _index_of(items: List[Any], record_id: str) -> int:
        for index, item in enumerate(items):
            if isinstance(item, dict) and item.get("id") == record_id:
                return index
        return -1

    def list(self) -> List[Any]:
        records = (self._parse(raw) for raw in self._load_raw())
        return [record for record in records if record is not None]

    def get(self, record_id: str):
        for record in self.list():
            if record.id == record_id:
                return record
        return None

    def _append(self, record) -> Any:
        items = self._load_raw()
        items.append(record.to_dict())
        self._save_raw(items)
        logger.info(f"✅ Added {self.label} {record.id}")
        return record

    def _apply_patch(self, current, patch: Dict[str, Any], **context):
        return current.merged(patch)

    def update(self, record_id: str, patch: Dict[str, Any], **context):
        """Shallow-merge a patch over a record; None when the id is unknown"""
        items = self._load_raw()
        index = self._index_of(items, record_id)
        if index < 0:
            logger.warning(f"⚠️ {self.label.capitalize()} {record_id} not found")
            return None

        current = self._parse(items[index])
        if current is None:
            return None

        patch = _camel_patch(patch)
        patch.pop("id", None)
        try:
            updated = self._apply_patch(current, patch, **context)
        except ValidationError as e:
            logger.error(f"❌ Invalid update for {self.label} {record_id}: {e}")
            return None

        items[index] = updated.to_dict()
        self._save_raw(items)
        logger.info(f"✏️ Updated {self.label} {record_id}")
        return updated

    def delete(self, record_id: str) -> bool:
        items = self._load_raw()
        index = self._index_of(items, record_id)
        if index < 0:
            logger.warning(f"⚠️ {self.label.capitalize()} {record_id} not found")
            return False

        del items[index]
        self._save_raw(items)
        logger.info(f"🗑️ Deleted {self.label} {record_id}")
        return True


class TaskRepository(CollectionRepository):
    model = Task
    key_name = "TASKS"
    label = "task"

    def list_for_date(self, date_str: DateLike) -> List[Task]:
        target = _checked_date(date_str, "list tasks")
        if target is None:
            return []
        return [task for task in self.list() if task.date == target]

    def add(self, title: str, date: DateLike, priority: str = TaskPriority.MEDIUM.value,
            category: str = TaskCategory.PERSONAL.value, duration: Optional[int] = None) -> Optional[Task]:
        try:
            task = Task(id=generate_id(), title=title, date=validate_date_str(date),
                        priority=priority, category=category, duration=duration)
        except ValidationError as e:
            logger.error(f"❌ Cannot create task {title!r}: {e}")
            return None
        return self._append(task)

    def _apply_patch(self, current: Task, patch: Dict[str, Any], now: Optional[datetime] = None, **context):
        updated = current.merged(patch)
        # completedAt is stamped the first time only and never cleared
        if patch.get("completed") and not current.completed_at:
            updated.completed_at = now.isoformat() if now else now_iso()
        return updated

    def toggle(self, task_id: str, now: Optional[datetime] = None) -> Optional[Task]:
        task = self.get(task_id)
        if task is None:
            logger.warning(f"⚠️ Task {task_id} not found")
            return None
        return self.update(task_id, {"completed": not task.completed}, now=now)

    def move(self, task_id: str, new_date: DateLike) -> Optional[Task]:
        try:
            target = validate_date_str(new_date)
        except ValidationError as e:
            logger.error(f"❌ Cannot move task {task_id}: {e}")
            return None
        return self.update(task_id, {"date": target})

    def planned_minutes(self, date_str: DateLike) -> int:
        return planned_minutes(self.list_for_date(date_str))


class HabitRepository(CollectionRepository):
    model = Habit
    key_name = "HABITS"
    label = "habit"

    def add(self, name: str, frequency: str = HabitFrequency.DAILY.value) -> Optional[Habit]:
        try:
            habit = Habit(id=generate_id(), name=name, frequency=frequency)
        except ValidationError as e:
            logger.error(f"❌ Cannot create habit {name!r}: {e}")
            return None
        return self._append(habit)

    def _apply_patch(self, current: Habit, patch: Dict[str, Any], today: Optional[date] = None, **context):
        # cached streaks are derived from completedDates, never taken from a patch
        patch = {key: value for key, value in patch.items() if key not in STREAK_FIELDS}
        updated = current.merged(patch)
        return refresh_habit_streaks(updated, today)

    def toggle_completion(self, habit_id: str, date_str: DateLike,
                          today: Optional[date] = None) -> Optional[Habit]:
        """Mark or unmark a date and recompute the cached streaks"""
        habit = self.get(habit_id)
        if habit is None:
            logger.warning(f"⚠️ Habit {habit_id} not found")
            return None

        target = _checked_date(date_str, f"toggle habit {habit_id}")
        if target is None:
            return None
        dates = set(habit.completed_dates)
        if target in dates:
            dates.discard(target)
        else:
            dates.add(target)

        updated = self.update(habit_id, {"completedDates": sorted(dates)}, today=today)
        if updated is not None:
            logger.info(f"🔥 Habit {habit.name!r}: streak {updated.current_streak} "
                        f"(best {updated.longest_streak})")
        return updated

    def refresh_streaks(self, today: Optional[date] = None) -> List[Habit]:
        """Recompute every cached streak, e.g. after midnight"""
        items = self._load_raw()
        refreshed = []
        for index, raw in enumerate(items):
            habit = self._parse(raw)
            if habit is None:
                continue
            refresh_habit_streaks(habit, today)
            items[index] = habit.to_dict()
            refreshed.append(habit)

        if refreshed:
            self._save_raw(items)
        logger.debug(f"🔄 Refreshed streaks for {len(refreshed)} habits")
        return refreshed

    def top_streaks(self, limit: int = 5) -> List[Habit]:
        return top_streaks(self.list(), limit)


class TimeBlockRepository(CollectionRepository):
    model = TimeBlock
    key_name = "TIME_BLOCKS"
    label = "time block"

    def list_for_date(self, date_str: DateLike) -> List[TimeBlock]:
        target = _checked_date(date_str, "list time blocks")
        if target is None:
            return []
        blocks = [block for block in self.list() if block.date == target]
        return sorted(blocks, key=lambda block: block.start_time)

    def add(self, title: str, start_time: str, end_time: str, date: DateLike,
            category: str = TaskCategory.WORK.value) -> Optional[TimeBlock]:
        try:
            block = TimeBlock(id=generate_id(), title=title, start_time=start_time,
                              end_time=end_time, date=validate_date_str(date), category=category)
        except ValidationError as e:
            logger.error(f"❌ Cannot create time block {title!r}: {e}")
            return None
        return self._append(block)


class WeeklyObjectiveRepository(CollectionRepository):
    model = WeeklyObjective
    key_name = "WEEKLY_OBJECTIVES"
    label = "weekly objective"

    def list_for_week(self, week_start_str: DateLike) -> List[WeeklyObjective]:
        target = _checked_date(week_start_str, "list weekly objectives")
        if target is None:
            return []
        monday = week_start(target).isoformat()
        return [objective for objective in self.list() if objective.week_start == monday]

    def add(self, title: str, week_of: DateLike) -> Optional[WeeklyObjective]:
        try:
            monday = week_start(validate_date_str(week_of, "weekOf")).isoformat()
            objective = WeeklyObjective(id=generate_id(), title=title, week_start=monday)
        except ValidationError as e:
            logger.error(f"❌ Cannot create weekly objective {title!r}: {e}")
            return None
        return self._append(objective)

    def toggle(self, objective_id: str) -> Optional[WeeklyObjective]:
        objective = self.get(objective_id)
        if objective is None:
            logger.warning(f"⚠️ Weekly objective {objective_id} not found")
            return None
        return self.update(objective_id, {"completed": not objective.completed})

# ===== GOALS =====

class GoalRepository:
    """Goals live in one document split into yearly, monthly and life-area lists"""

    def __init__(self, store: DocumentStore):
        self.store = store

    @property
    def key(self) -> str:
        return self.store.keys.GOALS

    def _load(self) -> Dict[str, Any]:
        doc = self.store.get(self.key)
        if not isinstance(doc, dict):
            return empty_goals()
        defaults = empty_goals()
        for name in ("yearly", "monthly"):
            if not isinstance(doc.get(name), list):
                doc[name] = defaults[name]
        areas = doc.get("lifeAreas")
        if not isinstance(areas, dict):
            areas = doc["lifeAreas"] = {}
        for area in LifeArea:
            if not isinstance(areas.get(area.value), list):
                areas[area.value] = []
        return doc

    @staticmethod
    def _bucket(doc: Dict[str, Any], partition: Union[str, GoalPartition],
                area: Optional[str] = None) -> List[Dict[str, Any]]:
        partition = validate_enum_value(partition, GoalPartition, "partition")
        if partition == GoalPartition.LIFE_AREA.value:
            if area is None:
                raise ValidationError("a life area is required for life-area goals")
            area = validate_enum_value(area, LifeArea, "area")
            return doc["lifeAreas"][area]
        return doc[partition]

    def list(self, partition: Union[str, GoalPartition], area: Optional[str] = None) -> List[Goal]:
        try:
            bucket = self._bucket(self._load(), partition, area)
        except ValidationError as e:
            logger.error(f"❌ Cannot list goals: {e}")
            return []

        goals = []
        for raw in bucket:
            try:
                goals.append(Goal.from_dict(raw))
            except ValidationError as e:
                logger.warning(f"⚠️ Skipping invalid goal: {e}")
        return goals

    def add(self, partition: Union[str, GoalPartition], title: str,
            description: Optional[str] = None, area: Optional[str] = None) -> Optional[Goal]:
        doc = self._load()
        try:
            bucket = self._bucket(doc, partition, area)
            goal = Goal(id=generate_id(), title=title, description=description or None)
        except ValidationError as e:
            logger.error(f"❌ Cannot create goal {title!r}: {e}")
            return None

        bucket.append(goal.to_dict())
        self.store.set(self.key, doc)
        logger.info(f"🎯 Added goal {goal.id}")
        return goal

    def update(self, partition: Union[str, GoalPartition], goal_id: str,
               patch: Dict[str, Any], area: Optional[str] = None) -> Optional[Goal]:
        doc = self._load()
        try:
            bucket = self._bucket(doc, partition, area)
        except ValidationError as e:
            logger.error(f"❌ Cannot update goal {goal_id}: {e}")
            return None

        index = CollectionRepository._index_of(bucket, goal_id)
        if index < 0:
            logger.warning(f"⚠️ Goal {goal_id} not found")
            return None

        patch = _camel_patch(patch)
        patch.pop("id", None)
        try:
            goal = Goal.from_dict(bucket[index]).merged(patch)
        except ValidationError as e:
            logger.error(f"❌ Invalid update for goal {goal_id}: {e}")
            return None

        bucket[index] = goal.to_dict()
        self.store.set(self.key, doc)
        logger.info(f"✏️ Updated goal {goal_id}")
        return goal

    def update_progress(self, partition: Union[str, GoalPartition], goal_id: str,
                        progress: int, area: Optional[str] = None) -> Optional[Goal]:
        return self.update(partition, goal_id, {"progress": progress}, area=area)

    def delete(self, partition: Union[str, GoalPartition], goal_id: str,
               area: Optional[str] = None) -> bool:
        doc = self._load()
        try:
            bucket = self._bucket(doc, partition, area)
        except ValidationError as e:
            logger.error(f"❌ Cannot delete goal {goal_id}: {e}")
            return False

        index = CollectionRepository._index_of(bucket, goal_id)
        if index < 0:
            logger.warning(f"⚠️ Goal {goal_id} not found")
            return False

        del bucket[index]
        self.store.set(self.key, doc)
        logger.info(f"🗑️ Deleted goal {goal_id}")
        return True

    def area_progress(self) -> Dict[str, Optional[int]]:
        """Average progress per life area; None for areas without goals"""
        result: Dict[str, Optional[int]] = {}
        for area in LifeArea:
            goals = self.list(GoalPartition.LIFE_AREA, area.value)
            if goals:
                result[area.value] = round_half_up(sum(g.progress for g in goals) / len(goals))
            else:
                result[area.value] = None
        return result

# ===== DAILY DATA =====

class DailyDataRepository:
    """Sparse date -> check-in mapping"""

    def __init__(self, store: DocumentStore):
        self.store = store

    @property
    def key(self) -> str:
        return self.store.keys.DAILY_DATA

    def _load(self) -> Dict[str, Any]:
        doc = self.store.get(self.key)
        return doc if isinstance(doc, dict) else {}

    def get(self, date_str: DateLike) -> Optional[DailyEntry]:
        """The entry for a date, or a blank one (not stored) when there is none"""
        key = _checked_date(date_str, "read daily data")
        if key is None:
            return None
        raw = self._load().get(key)
        if raw is None:
            return DailyEntry()
        try:
            return DailyEntry.from_dict(raw)
        except ValidationError as e:
            logger.warning(f"⚠️ Invalid daily entry for {date_str}: {e}")
            return DailyEntry()

    def has_entry(self, date_str: DateLike) -> bool:
        key = _checked_date(date_str, "check daily data")
        return key is not None and key in self._load()

    def set(self, date_str: DateLike, patch: Dict[str, Any]) -> Optional[DailyEntry]:
        """Merge fields into the entry for a date, creating it if needed"""
        doc = self._load()
        try:
            key = validate_date_str(date_str)
            entry = self.get(key).merged(patch)
        except ValidationError as e:
            logger.error(f"❌ Invalid daily data for {date_str}: {e}")
            return None

        doc[key] = entry.to_dict()
        self.store.set(self.key, doc)
        logger.info(f"📝 Saved daily data for {key}")
        return entry

    def all(self) -> Dict[str, DailyEntry]:
        entries = {}
        for key, raw in self._load().items():
            try:
                entries[key] = DailyEntry.from_dict(raw)
            except ValidationError as e:
                logger.warning(f"⚠️ Skipping invalid daily entry {key}: {e}")
        return entries

    def entries_between(self, start: DateLike, end: DateLike) -> Dict[str, DailyEntry]:
        start_str = _checked_date(start, "read daily data range")
        end_str = _checked_date(end, "read daily data range")
        if start_str is None or end_str is None:
            return {}
        return {key: entry for key, entry in self.all().items() if start_str <= key <= end_str}

    def mood_for_year(self, year: int) -> Dict[str, int]:
        prefix = f"{year:04d}-"
        return {
            key: entry.mood for key, entry in self.all().items()
            if key.startswith(prefix) and entry.mood
        }

# ===== SETTINGS & USER =====

class SettingsRepository:

    def __init__(self, store: DocumentStore):
        self.store = store

    def get(self) -> Settings:
        raw = self.store.get(self.store.keys.SETTINGS)
        if not isinstance(raw, dict):
            return Settings()
        try:
            return Settings.from_dict(raw)
        except ValidationError as e:
            logger.warning(f"⚠️ Invalid settings, using defaults: {e}")
            return Settings()

    def update(self, patch: Dict[str, Any]) -> Settings:
        settings = self.get().merged(patch)
        self.store.set(self.store.keys.SETTINGS, settings.to_dict())
        logger.info("⚙️ Settings updated")
        return settings

    def get_theme(self) -> str:
        theme = self.store.get(self.store.keys.THEME)
        if theme in {t.value for t in Theme}:
            return theme
        return Theme.LIGHT.value

    def set_theme(self, theme: Union[str, Theme]) -> bool:
        try:
            value = validate_enum_value(theme, Theme, "theme")
        except ValidationError as e:
            logger.warning(f"⚠️ {e}")
            return False
        return self.store.set(self.store.keys.THEME, value)


class UserRepository:

    def __init__(self, store: DocumentStore):
        self.store = store
        self.settings = SettingsRepository(store)

    def get(self) -> Optional[UserProfile]:
        raw = self.store.get(self.store.keys.USER)
        if raw is None:
            return None
        try:
            return UserProfile.from_dict(raw)
        except ValidationError as e:
            logger.warning(f"⚠️ Invalid user profile: {e}")
            return None

    def set(self, profile: UserProfile) -> bool:
        return self.store.set(self.store.keys.USER, profile.to_dict())

    def has_completed_onboarding(self) -> bool:
        profile = self.get()
        return bool(profile and profile.onboarding_complete)

    def complete_onboarding(self, name: str, work_start: str = "09:00", work_end: str = "17:00",
                            daily_capacity: int = 5, now: Optional[datetime] = None) -> Optional[UserProfile]:
        """Create the profile and copy work hours and capacity into settings"""
        try:
            profile = UserProfile(
                name=name,
                work_start=work_start,
                work_end=work_end,
                daily_capacity=daily_capacity,
                onboarding_complete=True,
                created_at=now.isoformat() if now else now_iso(),
            )
        except ValidationError as e:
            logger.error(f"❌ Onboarding failed: {e}")
            return None

        self.set(profile)
        self.settings.update({
            "workStart": work_start,
            "workEnd": work_end,
            "dailyCapacity": daily_capacity,
        })
        logger.info(f"👋 Onboarding complete for {profile.name}")
        return profile

    def rename(self, name: str) -> Optional[UserProfile]:
        profile = self.get()
        if profile is None:
            logger.warning("⚠️ No user profile to rename")
            return None
        try:
            renamed = profile.merged({"name": name})
        except ValidationError as e:
            logger.error(f"❌ Cannot rename user: {e}")
            return None
        self.set(renamed)
        return renamed
