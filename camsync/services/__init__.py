"""Services for camsync."""

from .orchestrator import CameraSync
from .snapshot import PillowImageTransform, SnapshotPublisher

__all__ = ["CameraSync", "PillowImageTransform", "SnapshotPublisher"]
