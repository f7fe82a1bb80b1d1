from __future__ import annotations

import logging

from camsync.device.interfaces import DeviceClient
from camsync.models import RemoteFile, RemoteImageDescriptor
from camsync.utils.errors import DeviceListError

from .paths import join_remote

logger = logging.getLogger(__name__)


async def enumerate_remote_images(client: DeviceClient, remote_root: str) -> list[RemoteImageDescriptor]:
    """Walk ``remote_root``'s day-folders and return their files in device order."""
    descriptors: list[RemoteImageDescriptor] = []
    for folder in await _list(client, remote_root):
        folder_path = join_remote(remote_root, folder.name)
        for file in await _list(client, folder_path):
            descriptors.append(
                RemoteImageDescriptor(full_remote_path=join_remote(folder_path, file.name), file=file)
            )
    logger.debug("Enumerated %d remote files under %s", len(descriptors), remote_root)
    return descriptors


async def _list(client: DeviceClient, path: str) -> list[RemoteFile]:
    try:
        listing = await client.list_directory(path)
    except DeviceListError:
        raise
    except Exception as exc:
        raise DeviceListError(f"Listing {path} failed: {exc}", path=path) from exc
    if listing is None:
        raise DeviceListError(f"Listing {path} returned no result", path=path)
    return listing
