import asyncio
import inspect
from datetime import datetime
from pathlib import Path
from typing import AsyncIterator, Optional

import pytest

from camsync.models import RemoteFile
from camsync.utils.errors import DeviceIOError


def pytest_pyfunc_call(pyfuncitem):
    if asyncio.iscoroutinefunction(pyfuncitem.obj):
        loop = asyncio.new_event_loop()
        asyncio.set_event_loop(loop)
        try:
            sig = inspect.signature(pyfuncitem.obj)
            accepted = {name: value for name, value in pyfuncitem.funcargs.items() if name in sig.parameters}
            loop.run_until_complete(pyfuncitem.obj(**accepted))
        finally:
            loop.close()
            asyncio.set_event_loop(None)
        return True
    return None


class FakeDeviceClient:
    """In-memory camera: a tree of listings plus file contents."""

    def __init__(self) -> None:
        self.listings: dict[str, Optional[list[RemoteFile]]] = {}
        self.contents: dict[str, bytes] = {}
        self.failing_reads: set[str] = set()
        self.failing_deletes: set[str] = set()
        self.failing_lists: set[str] = set()
        self.reads: list[str] = []
        self.deletes: list[str] = []
        self.clock_values: list[str] = []
        self.captures = 0
        self.closed = False

    def add_folder(self, root: str, folder: str, date: datetime) -> str:
        self.listings.setdefault(root, []).append(RemoteFile(name=folder, size=0, date=date))
        path = f"{root.rstrip('/')}/{folder}"
        self.listings.setdefault(path, [])
        return path

    def add_file(self, folder_path: str, name: str, size: int, date: datetime) -> RemoteFile:
        remote = RemoteFile(name=name, size=size, date=date)
        self.listings.setdefault(folder_path, []).append(remote)
        self.contents[f"{folder_path}/{name}"] = b"x" * size
        return remote

    async def list_directory(self, path: str) -> Optional[list[RemoteFile]]:
        await asyncio.sleep(0)
        if path in self.failing_lists:
            raise DeviceIOError(f"listing {path} failed")
        return self.listings.get(path)

    async def read_stream(self, path: str) -> AsyncIterator[bytes]:
        self.reads.append(path)
        data = self.contents[path]
        half = len(data) // 2
        yield data[:half]
        await asyncio.sleep(0)
        if path in self.failing_reads:
            raise DeviceIOError(f"read of {path} interrupted")
        yield data[half:]

    async def delete_file(self, path: str) -> None:
        await asyncio.sleep(0)
        if path in self.failing_deletes:
            raise DeviceIOError(f"delete of {path} failed")
        self.deletes.append(path)

    async def capture_photo(self) -> str:
        self.captures += 1
        return f"/tmp/fuse_d/DCIM/100MEDIA/YDXJ{self.captures:04d}.jpg"

    async def set_clock(self, value: str) -> None:
        self.clock_values.append(value)

    async def close(self) -> None:
        self.closed = True


class RecordingTransform:
    """Image transform stand-in that copies the source bytes."""

    def __init__(self) -> None:
        self.calls: list[tuple[Path, Path, tuple[int, int], int]] = []

    def transform(self, source: Path, destination: Path, max_size: tuple[int, int], rotation: int) -> None:
        self.calls.append((source, destination, max_size, rotation))
        destination.write_bytes(source.read_bytes())


@pytest.fixture
def device() -> FakeDeviceClient:
    return FakeDeviceClient()


@pytest.fixture
def recording_transform() -> RecordingTransform:
    return RecordingTransform()
