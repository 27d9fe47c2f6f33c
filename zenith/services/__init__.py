# services/__init__.py

"""
Zenith Planner services

Repositories, analytics, the focus timer and backup/restore, wired to one
injected document store by ``Planner``.
"""

import logging
from typing import Any, Dict, Optional

from zenith.config import PlannerConfig
from zenith.core.storage import DocumentStore, JsonFileDocumentStore, initialize_store, reset_store
from .analytics import AnalyticsService, ShutdownRitual
from .data_export import DataExporter, ImportDataError
from .repositories import (
    DailyDataRepository, GoalRepository, HabitRepository, SettingsRepository, TaskRepository,
    TimeBlockRepository, UserRepository, WeeklyObjectiveRepository, generate_id,
)
from .timer_service import FocusTimer

logger = logging.getLogger(__name__)


class Planner:
    """
    Every planner service bound to a single store

    There is no module-level state: tests build one Planner per in-memory
    store, the CLI builds one over the JSON file store.
    """

    def __init__(self, store: DocumentStore, config: Optional[PlannerConfig] = None):
        self.store = store
        self.config = config

        chart_height = config.planner.chart_height if config else 150
        tz = config.timezone if config else None
        export_dir = config.storage.export_dir if config else None

        self.tasks = TaskRepository(store)
        self.habits = HabitRepository(store)
        self.time_blocks = TimeBlockRepository(store)
        self.goals = GoalRepository(store)
        self.objectives = WeeklyObjectiveRepository(store)
        self.daily_data = DailyDataRepository(store)
        self.settings = SettingsRepository(store)
        self.user = UserRepository(store)

        self.analytics = AnalyticsService(store, chart_height=chart_height, tz=tz)
        self.shutdown = ShutdownRitual(store)
        self.exporter = DataExporter(store, export_dir=export_dir)

        initialize_store(store)

    @classmethod
    def from_config(cls, config: PlannerConfig) -> "Planner":
        logger.info(f"📂 Opening planner data at {config.storage.path}")
        store = JsonFileDocumentStore(config.storage.path, namespace=config.storage.namespace)
        return cls(store, config)

    def focus_timer(self, **kwargs) -> FocusTimer:
        if self.config is not None:
            kwargs.setdefault("tick_seconds", self.config.planner.focus_tick_seconds)
        return FocusTimer(self.store, **kwargs)

    def reset(self):
        reset_store(self.store)

    def health_check(self) -> Dict[str, Any]:
        info = self.store.health_check()
        info["onboarded"] = self.user.has_completed_onboarding()
        return info


__all__ = [
    'Planner',
    'AnalyticsService',
    'ShutdownRitual',
    'DataExporter',
    'ImportDataError',
    'FocusTimer',
    'TaskRepository',
    'HabitRepository',
    'TimeBlockRepository',
    'GoalRepository',
    'WeeklyObjectiveRepository',
    'DailyDataRepository',
    'SettingsRepository',
    'UserRepository',
    'generate_id',
]
