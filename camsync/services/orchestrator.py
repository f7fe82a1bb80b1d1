from __future__ import annotations

import asyncio
import logging
from typing import Awaitable, Callable, Optional

from camsync.config import Settings
from camsync.device.interfaces import DeviceClient
from camsync.models import CleanupResult, CopyResult
from camsync.services.snapshot import ImageTransform, SnapshotPublisher
from camsync.sync.cleanup import cleanup_synced_files
from camsync.sync.copier import copy_new_files
from camsync.sync.enumerator import enumerate_remote_images
from camsync.sync.scheduler import TaskScheduler
from camsync.telemetry.log import log_sync_event

logger = logging.getLogger(__name__)

CLOCK_FORMAT = "%Y-%m-%d %H:%M:%S"


class CameraSync:
    """Capture, clock, copy and cleanup tasks for one camera."""

    def __init__(
        self,
        settings: Settings,
        client: DeviceClient,
        *,
        scheduler: Optional[TaskScheduler] = None,
        transform: Optional[ImageTransform] = None,
    ) -> None:
        self.settings = settings
        self.client = client
        self.scheduler = scheduler or TaskScheduler(settings.zone)
        self.publisher = SnapshotPublisher(
            settings.local_path,
            transform=transform,
            max_size=(settings.snapshot_max_width, settings.snapshot_max_height),
            rotation=settings.snapshot_rotation,
        )

    @property
    def actions(self) -> dict[str, Callable[[], Awaitable[object]]]:
        return {
            "capture": self.capture,
            "clock": self.clock,
            "copy": self.copy,
            "cleanup": self.cleanup,
        }

    def schedule_tasks(self) -> None:
        actions = self.actions
        for spec in self.settings.tasks:
            if spec.name not in actions:
                raise ValueError(f"Unknown task '{spec.name}'; expected one of {sorted(actions)}.")
            self.scheduler.add_task(spec, actions[spec.name])

    async def capture(self) -> str:
        logger.info("Capturing...")
        path = await self.client.capture_photo()
        logger.info("Captured to %s.", path)
        return path

    async def clock(self) -> str:
        logger.info("Setting clock...")
        value = self.scheduler.now().strftime(CLOCK_FORMAT)
        await self.client.set_clock(value)
        logger.info("Set clock to %s.", value)
        return value

    async def copy(self) -> CopyResult:
        logger.info("Copying files from camera...")
        descriptors = await enumerate_remote_images(self.client, self.settings.remote_path)
        result = await copy_new_files(
            self.client,
            descriptors,
            self.settings.local_path,
            self.settings.max_files_per_copy_task,
            publisher=self.publisher,
        )
        log_sync_event(
            "copy",
            {
                "remote_files": len(descriptors),
                "transferred": len(result.transferred),
                "skipped": result.skipped,
            },
        )
        return result

    async def cleanup(self) -> CleanupResult:
        logger.info("Cleaning up old files from camera...")
        descriptors = await enumerate_remote_images(self.client, self.settings.remote_path)
        result = await cleanup_synced_files(
            self.client,
            descriptors,
            self.settings.local_path,
            self.settings.max_files_to_delete_per_cleanup_task,
        )
        log_sync_event(
            "cleanup",
            {"remote_files": len(descriptors), "deleted": len(result.deleted), "kept": result.kept},
        )
        return result

    async def run_forever(self) -> None:
        """Schedule the configured tasks and run until cancelled."""
        self.schedule_tasks()
        self.scheduler.start()
        logger.info("Scheduler started with tasks %s", ", ".join(self.scheduler.task_names()))
        try:
            await asyncio.Event().wait()
        finally:
            self.scheduler.shutdown()
            await self.client.close()
