from __future__ import annotations

from dataclasses import dataclass, field
from datetime import datetime
from enum import Enum
from pathlib import Path


@dataclass(frozen=True, slots=True)
class RemoteFile:
    name: str
    size: int
    date: datetime


@dataclass(frozen=True, slots=True)
class RemoteImageDescriptor:
    full_remote_path: str
    file: RemoteFile


class TaskPhase(str, Enum):
    IDLE = "idle"
    RUNNING = "running"


@dataclass(slots=True)
class TaskState:
    name: str
    running: bool = False

    @property
    def phase(self) -> TaskPhase:
        return TaskPhase.RUNNING if self.running else TaskPhase.IDLE


@dataclass(slots=True)
class CopyResult:
    transferred: list[Path] = field(default_factory=list)
    skipped: int = 0

    @property
    def last_transferred(self) -> Path | None:
        return self.transferred[-1] if self.transferred else None


@dataclass(slots=True)
class CleanupResult:
    deleted: list[str] = field(default_factory=list)
    kept: int = 0


class FireOutcome(str, Enum):
    SKIPPED_BUSY = "skipped_busy"
    SKIPPED_WINDOW = "skipped_window"
    SUCCEEDED = "succeeded"
    FAILED = "failed"
