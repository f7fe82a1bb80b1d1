from __future__ import annotations

import logging
import os
from pathlib import Path
from typing import Optional, Protocol, runtime_checkable

from PIL import Image, ImageOps, UnidentifiedImageError

from camsync.utils.errors import FilesystemError

logger = logging.getLogger(__name__)

SNAPSHOT_NAME = "snapshot.jpg"
SNAPSHOT_TMP_NAME = "snapshot.tmp.jpg"
SNAPSHOT_SIZE = (2048, 1536)
SNAPSHOT_ROTATION = 180


@runtime_checkable
class ImageTransform(Protocol):
    def transform(self, source: Path, destination: Path, max_size: tuple[int, int], rotation: int) -> None: ...


class PillowImageTransform:
    """Downscale into a bounding box, rotate, and write a JPEG."""

    def __init__(self, quality: int = 85):
        self.quality = quality

    def transform(self, source: Path, destination: Path, max_size: tuple[int, int], rotation: int) -> None:
        with Image.open(source) as image:
            processed = ImageOps.exif_transpose(image)
            processed = processed.convert("RGB")
            processed.thumbnail(max_size, Image.Resampling.LANCZOS)
            if rotation % 360:
                processed = processed.rotate(rotation, expand=True)
            processed.save(destination, format="JPEG", optimize=True, quality=self.quality)


class SnapshotPublisher:
    """Publish a preview of the latest copied image at a fixed path."""

    def __init__(
        self,
        local_root: str | Path,
        transform: Optional[ImageTransform] = None,
        max_size: tuple[int, int] = SNAPSHOT_SIZE,
        rotation: int = SNAPSHOT_ROTATION,
    ) -> None:
        self.local_root = Path(local_root)
        self.transform = transform or PillowImageTransform()
        self.max_size = max_size
        self.rotation = rotation

    @property
    def target(self) -> Path:
        return self.local_root / SNAPSHOT_NAME

    @property
    def temporary(self) -> Path:
        return self.local_root / SNAPSHOT_TMP_NAME

    def publish(self, source: Optional[str | Path]) -> bool:
        """Replace the snapshot with a preview of ``source``; False when there is nothing to publish."""
        if source is None or not Path(source).exists():
            return False

        logger.info("Copying snapshot from %s", source)
        try:
            self.transform.transform(Path(source), self.temporary, self.max_size, self.rotation)
            os.replace(self.temporary, self.target)
        except (OSError, ValueError, UnidentifiedImageError, Image.DecompressionBombError) as exc:
            self.temporary.unlink(missing_ok=True)
            raise FilesystemError(f"Could not publish snapshot from {source}: {exc}", path=str(source)) from exc
        return True
