from __future__ import annotations

from typing import AsyncIterator, Optional, Protocol, runtime_checkable

from camsync.models import RemoteFile


@runtime_checkable
class DeviceClient(Protocol):
    async def list_directory(self, path: str) -> Optional[list[RemoteFile]]: ...

    def read_stream(self, path: str) -> AsyncIterator[bytes]: ...

    async def delete_file(self, path: str) -> None: ...

    async def capture_photo(self) -> str: ...

    async def set_clock(self, value: str) -> None: ...

    async def close(self) -> None: ...
