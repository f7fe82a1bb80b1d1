"""Configuration management for the camera sync service."""
from typing import List, Optional
from zoneinfo import ZoneInfo

from pydantic import BaseModel, model_validator
from pydantic_settings import BaseSettings, SettingsConfigDict


class TaskSpec(BaseModel):
    """Schedule for one named task."""

    name: str
    interval_seconds: Optional[int] = None
    cron: Optional[str] = None
    hour_from: int = 0
    hour_to: int = 24

    @model_validator(mode="after")
    def validate_trigger(self) -> "TaskSpec":
        if (self.interval_seconds is None) == (self.cron is None):
            raise ValueError(f"Task '{self.name}' needs exactly one of interval_seconds or cron.")
        if self.interval_seconds is not None and self.interval_seconds <= 0:
            raise ValueError(f"Task '{self.name}' interval must be positive.")
        if not 0 <= self.hour_from <= self.hour_to <= 24:
            raise ValueError(f"Task '{self.name}' has an invalid hour window.")
        return self

    def allows_hour(self, hour: int) -> bool:
        return self.hour_from <= hour < self.hour_to


class Settings(BaseSettings):
    """Service settings loaded from environment variables."""

    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        env_prefix="CAMSYNC_",
        extra="ignore",
    )

    # Storage
    local_path: str = "./storage"
    remote_path: str = "/tmp/fuse_d/DCIM"
    timezone: str = "Europe/Berlin"

    # Task settings
    capture_interval: int = 60 * 5
    max_files_per_copy_task: int = 50
    max_files_to_delete_per_cleanup_task: int = 100
    tasks: List[TaskSpec] = []

    # Camera
    camera_host: str = "192.168.42.1"
    camera_port: int = 7878
    camera_http_port: int = 80
    camera_timeout: float = 10.0

    # Snapshot
    snapshot_max_width: int = 2048
    snapshot_max_height: int = 1536
    snapshot_rotation: int = 180

    # Logging
    log_level: str = "INFO"
    log_format: str = "json"
    log_file: Optional[str] = None

    @model_validator(mode="after")
    def default_tasks(self) -> "Settings":
        if not self.tasks:
            interval = self.capture_interval
            self.tasks = [
                TaskSpec(name="capture", interval_seconds=interval, hour_from=5, hour_to=23),
                TaskSpec(name="clock", interval_seconds=max(interval - 60, 1), hour_from=5, hour_to=23),
                TaskSpec(name="copy", interval_seconds=interval + 60, hour_from=5, hour_to=23),
                TaskSpec(name="cleanup", interval_seconds=60 * 55 * 4, hour_from=5, hour_to=23),
            ]
        return self

    @property
    def zone(self) -> ZoneInfo:
        return ZoneInfo(self.timezone)


def get_settings() -> Settings:
    """Load settings from the environment."""
    return Settings()
