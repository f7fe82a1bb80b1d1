from __future__ import annotations

import asyncio
import logging
from pathlib import Path
from typing import TYPE_CHECKING, Iterable, Optional

from camsync.device.interfaces import DeviceClient
from camsync.models import CopyResult, RemoteImageDescriptor
from camsync.utils.errors import AppError, DeviceIOError, FilesystemError

from .paths import has_synced_copy, local_storage_path

if TYPE_CHECKING:
    from camsync.services.snapshot import SnapshotPublisher

logger = logging.getLogger(__name__)


async def copy_new_files(
    client: DeviceClient,
    descriptors: Iterable[RemoteImageDescriptor],
    local_root: str | Path,
    max_files: int,
    publisher: Optional[SnapshotPublisher] = None,
) -> CopyResult:
    """
    Transfer remote files that have no size-matching local copy.

    At most ``max_files`` transfers happen per call; files already synced are
    skipped without counting. When anything was transferred, the snapshot is
    republished from the last transferred file.
    """
    result = CopyResult()

    for descriptor in descriptors:
        if len(result.transferred) >= max_files:
            break

        local_path = local_storage_path(local_root, descriptor.file, create=True)
        if has_synced_copy(local_path, descriptor.file):
            result.skipped += 1
            continue

        logger.info("Copying %s -> %s", descriptor.full_remote_path, local_path)
        await _transfer(client, descriptor.full_remote_path, local_path)
        result.transferred.append(local_path)

    if publisher is not None:
        await asyncio.to_thread(publisher.publish, result.last_transferred)
    return result


async def _transfer(client: DeviceClient, remote_path: str, local_path: Path) -> None:
    try:
        handle = local_path.open("wb")
    except OSError as exc:
        raise FilesystemError(f"Could not open {local_path}: {exc}", path=str(local_path)) from exc

    with handle:
        try:
            async for chunk in client.read_stream(remote_path):
                await asyncio.to_thread(handle.write, chunk)
        except AppError:
            raise
        except OSError as exc:
            raise FilesystemError(f"Could not write {local_path}: {exc}", path=str(local_path)) from exc
        except Exception as exc:
            raise DeviceIOError(f"Reading {remote_path} failed: {exc}", path=remote_path) from exc
