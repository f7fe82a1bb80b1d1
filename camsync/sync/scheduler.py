"""Scheduled task execution with per-task single-flight."""
from __future__ import annotations

import logging
import time
from dataclasses import dataclass
from datetime import datetime
from typing import Awaitable, Callable, Optional
from zoneinfo import ZoneInfo

from apscheduler.schedulers.asyncio import AsyncIOScheduler
from apscheduler.triggers.base import BaseTrigger
from apscheduler.triggers.cron import CronTrigger
from apscheduler.triggers.interval import IntervalTrigger

from ..config import TaskSpec
from ..models import FireOutcome, TaskState
from ..telemetry.log import log_error, log_timing

logger = logging.getLogger(__name__)

TaskAction = Callable[[], Awaitable[object]]

# APScheduler must hand every tick to fire(); the TaskState gate decides what runs
MAX_OVERLAPPING_FIRINGS = 1000


@dataclass(slots=True)
class _ScheduledTask:
    spec: TaskSpec
    action: TaskAction
    state: TaskState


class TaskScheduler:
    """Run named async tasks on their own triggers, one execution per name at a time."""

    def __init__(
        self,
        zone: ZoneInfo | str,
        scheduler: Optional[AsyncIOScheduler] = None,
        clock: Optional[Callable[[], datetime]] = None,
    ) -> None:
        self.zone = ZoneInfo(zone) if isinstance(zone, str) else zone
        self._scheduler = scheduler or AsyncIOScheduler(timezone=self.zone)
        self._clock = clock
        self._tasks: dict[str, _ScheduledTask] = {}

    def now(self) -> datetime:
        if self._clock is not None:
            return self._clock()
        return datetime.now(self.zone)

    def add_task(self, spec: TaskSpec, action: TaskAction) -> None:
        if spec.name in self._tasks:
            raise ValueError(f"Task '{spec.name}' is already scheduled.")
        self._tasks[spec.name] = _ScheduledTask(spec=spec, action=action, state=TaskState(name=spec.name))
        self._scheduler.add_job(
            self.fire,
            trigger=self.build_trigger(spec),
            args=[spec.name],
            id=spec.name,
            name=spec.name,
            max_instances=MAX_OVERLAPPING_FIRINGS,
            coalesce=True,
            misfire_grace_time=None,
        )
        logger.info("Scheduled task '%s'", spec.name)

    def build_trigger(self, spec: TaskSpec) -> BaseTrigger:
        if spec.cron is not None:
            return CronTrigger.from_crontab(spec.cron, timezone=self.zone)
        return IntervalTrigger(seconds=spec.interval_seconds, timezone=self.zone)

    def task_names(self) -> list[str]:
        return list(self._tasks)

    def state(self, name: str) -> TaskState:
        return self._tasks[name].state

    def is_running(self, name: str) -> bool:
        return self._tasks[name].state.running

    async def fire(self, name: str) -> FireOutcome:
        """Handle one trigger firing for ``name``."""
        task = self._tasks[name]
        if task.state.running:
            logger.debug("Task '%s' is still running; skipping this tick", name)
            return FireOutcome.SKIPPED_BUSY

        hour = self.now().hour
        if not task.spec.allows_hour(hour):
            logger.info(
                "Won't run task '%s' now because it should run between %s and %s o'clock only.",
                name,
                task.spec.hour_from,
                task.spec.hour_to,
            )
            return FireOutcome.SKIPPED_WINDOW

        task.state.running = True
        started = time.perf_counter()
        try:
            await task.action()
        except Exception as exc:
            log_error(exc, {"task": name})
            return FireOutcome.FAILED
        finally:
            task.state.running = False

        log_timing(f"task:{name}", (time.perf_counter() - started) * 1000, {"task": name})
        return FireOutcome.SUCCEEDED

    def start(self) -> None:
        self._scheduler.start()

    def shutdown(self) -> None:
        if self._scheduler.running:
            self._scheduler.shutdown(wait=False)
