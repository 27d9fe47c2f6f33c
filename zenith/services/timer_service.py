"""
Focus session countdown
"""

import asyncio
import logging
from typing import Callable, Dict, Optional

from zenith.core.models import Task
from zenith.core.storage import DocumentStore
from zenith.services.repositories import SettingsRepository, TaskRepository
from zenith.utils.datetime_utils import format_timer

logger = logging.getLogger(__name__)


class FocusTimer:
    """
    Pomodoro countdown bound to one task

    ``remaining`` is the only mutable state and every tick either applies in
    full or is skipped, so pausing or stopping between ticks is always safe.
    """

    def __init__(self, store: DocumentStore, tick_seconds: float = 1.0,
                 on_complete: Optional[Callable[[Task], None]] = None):
        self.tasks = TaskRepository(store)
        self.settings = SettingsRepository(store)
        self.tick_seconds = tick_seconds
        self.on_complete = on_complete

        self.task: Optional[Task] = None
        self.remaining = 0
        self.active = False
        self.paused = False
        self._runner: Optional[asyncio.Task] = None

    @property
    def is_running(self) -> bool:
        return self.active and not self.paused

    @property
    def display(self) -> str:
        return format_timer(self.remaining)

    async def start(self, task_id: str) -> bool:
        """Start a session for a task; a running session is stopped first"""
        await self.stop()

        task = self.tasks.get(task_id)
        if task is None:
            logger.warning(f"⚠️ Cannot focus on unknown task {task_id}")
            return False

        self.task = task
        self.remaining = self.settings.get().pomodoro_length * 60
        self.active = True
        self.paused = False
        self._runner = asyncio.create_task(self._run())

        logger.info(f"⏰ Focus session started: {task.title} ({self.display})")
        return True

    def pause(self) -> bool:
        if not self.active or self.paused:
            return False
        self.paused = True
        logger.info(f"⏸️ Focus session paused at {self.display}")
        return True

    def resume(self) -> bool:
        if not self.active or not self.paused:
            return False
        self.paused = False
        logger.info(f"▶️ Focus session resumed at {self.display}")
        return True

    async def stop(self) -> bool:
        if self._runner is None:
            return False

        runner, self._runner = self._runner, None
        was_active = self.active
        self.active = False
        self.paused = False
        if not runner.done():
            runner.cancel()
            try:
                await runner
            except asyncio.CancelledError:
                pass

        if was_active:
            logger.info(f"⏹️ Focus session stopped at {self.display}")
        return was_active

    async def wait(self):
        """Wait for the current session to finish or be stopped"""
        runner = self._runner
        if runner is None:
            return
        try:
            await asyncio.shield(runner)
        except asyncio.CancelledError:
            # a stopped session ends the wait; cancelling the waiter itself still propagates
            if not runner.cancelled():
                raise

    def tick(self) -> int:
        """Advance the countdown by one second unless paused or stopped"""
        if not self.active or self.paused or self.remaining <= 0:
            return self.remaining

        self.remaining -= 1
        if self.remaining == 0:
            self._complete()
        return self.remaining

    def _complete(self):
        self.active = False
        task = self.tasks.update(self.task.id, {"completed": True}) if self.task else None
        logger.info("🎉 Focus session complete! Take a break.")
        if task is not None and self.on_complete is not None:
            self.on_complete(task)

    async def _run(self):
        while self.active:
            await asyncio.sleep(self.tick_seconds)
            self.tick()

    def get_info(self) -> Dict:
        return {
            "active": self.active,
            "paused": self.paused,
            "task_id": self.task.id if self.task else None,
            "remaining": self.remaining,
            "display": self.display,
        }
