"""Error types raised by device, filesystem and sync operations."""
from typing import Optional


class AppError(Exception):
    """Base exception for application errors."""
    def __init__(self, message: str, path: Optional[str] = None):
        self.message = message
        self.path = path
        super().__init__(message)


class DeviceListError(AppError):
    """A directory listing failed or returned no usable result."""


class DeviceIOError(AppError):
    """A read, delete or command call against the device failed."""


class FilesystemError(AppError):
    """A local stat, create, write or rename failed."""
