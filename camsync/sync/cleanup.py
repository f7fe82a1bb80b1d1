from __future__ import annotations

import logging
from pathlib import Path
from typing import Iterable

from camsync.device.interfaces import DeviceClient
from camsync.models import CleanupResult, RemoteImageDescriptor
from camsync.utils.errors import AppError, DeviceIOError

from .paths import has_synced_copy, local_storage_path

logger = logging.getLogger(__name__)


async def cleanup_synced_files(
    client: DeviceClient,
    descriptors: Iterable[RemoteImageDescriptor],
    local_root: str | Path,
    max_files: int,
) -> CleanupResult:
    """Delete remote files whose local copy exists with a matching size."""
    result = CleanupResult()

    for descriptor in descriptors:
        if len(result.deleted) >= max_files:
            break

        local_path = local_storage_path(local_root, descriptor.file)
        if not has_synced_copy(local_path, descriptor.file):
            result.kept += 1
            continue

        logger.info("Deleting remote file %s", descriptor.full_remote_path)
        try:
            await client.delete_file(descriptor.full_remote_path)
        except AppError:
            raise
        except Exception as exc:
            raise DeviceIOError(
                f"Deleting {descriptor.full_remote_path} failed: {exc}", path=descriptor.full_remote_path
            ) from exc
        result.deleted.append(descriptor.full_remote_path)

    return result
