"""Yi action camera client: JSON commands over TCP, file reads over HTTP."""
from __future__ import annotations

import asyncio
import codecs
import json
import logging
from datetime import datetime
from typing import Any, AsyncIterator, Dict, Optional

import httpx

from camsync.models import RemoteFile
from camsync.utils.errors import DeviceIOError, DeviceListError

logger = logging.getLogger(__name__)

MSG_SET_SETTING = 2
MSG_NOTIFICATION = 7
MSG_START_SESSION = 257
MSG_STOP_SESSION = 258
MSG_TAKE_PHOTO = 769
MSG_DELETE_FILE = 1281
MSG_LIST_DIRECTORY = 1282

CAMERA_FS_ROOT = "/tmp/fuse_d"
LISTING_DATE_FORMAT = "%Y-%m-%d %H:%M:%S"


def parse_listing(listing: Any) -> Optional[list[RemoteFile]]:
    """
    Convert a camera listing payload into RemoteFile entries.

    Each entry is a single-key mapping such as
    ``{"YDXJ0001.jpg": "4194304 bytes|2024-01-01 12:00:00"}``. Directory names
    carry a trailing slash and usually no size. Returns None if the payload is
    not a list.
    """
    if not isinstance(listing, list):
        return None

    files: list[RemoteFile] = []
    for entry in listing:
        if not isinstance(entry, dict) or len(entry) != 1:
            raise DeviceListError(f"Unexpected listing entry: {entry!r}")
        (name, value), = entry.items()
        files.append(_parse_entry(name, str(value)))
    return files


def _parse_entry(name: str, value: str) -> RemoteFile:
    size_part, _, date_part = value.rpartition("|")
    size = 0
    if size_part:
        try:
            size = int(size_part.split()[0])
        except (IndexError, ValueError) as exc:
            raise DeviceListError(f"Unparseable size for {name}: {value!r}") from exc
    try:
        date = datetime.strptime(date_part.strip(), LISTING_DATE_FORMAT)
    except ValueError as exc:
        raise DeviceListError(f"Unparseable date for {name}: {value!r}") from exc
    return RemoteFile(name=name.rstrip("/"), size=size, date=date)


class YiCameraClient:
    """Talks to a Yi camera on its Wi-Fi access point."""

    def __init__(
        self,
        host: str = "192.168.42.1",
        port: int = 7878,
        http_port: int = 80,
        timeout: float = 10.0,
        http_client: Optional[httpx.AsyncClient] = None,
    ):
        self.host = host
        self.port = port
        self.timeout = timeout
        self.base_url = f"http://{host}" if http_port == 80 else f"http://{host}:{http_port}"
        self.client = http_client or httpx.AsyncClient(timeout=timeout)
        self._reader: Optional[asyncio.StreamReader] = None
        self._writer: Optional[asyncio.StreamWriter] = None
        self._buffer = ""
        self._decoder = codecs.getincrementaldecoder("utf-8")(errors="replace")
        self._token = 0
        self._lock = asyncio.Lock()

    async def list_directory(self, path: str) -> Optional[list[RemoteFile]]:
        """List a remote directory; None when the camera returns no listing."""
        try:
            response = await self._command(MSG_LIST_DIRECTORY, param=f"{path} -D -S")
        except DeviceIOError as exc:
            raise DeviceListError(f"Listing {path} failed: {exc.message}", path=path) from exc
        return parse_listing(response.get("listing"))

    async def read_stream(self, path: str) -> AsyncIterator[bytes]:
        """Stream the bytes of a remote file from the camera web server."""
        url = self.file_url(path)
        try:
            async with self.client.stream("GET", url) as response:
                response.raise_for_status()
                async for chunk in response.aiter_bytes():
                    yield chunk
        except httpx.HTTPError as exc:
            raise DeviceIOError(f"Reading {path} failed: {exc}", path=path) from exc

    async def delete_file(self, path: str) -> None:
        await self._command(MSG_DELETE_FILE, param=path)

    async def capture_photo(self) -> str:
        """Take a photo and return the camera path of the new file."""
        async with self._lock:
            await self._exchange(MSG_TAKE_PHOTO)
            try:
                notification = await self._read_until(
                    lambda message: message.get("msg_id") == MSG_NOTIFICATION
                    and message.get("type") == "photo_taken"
                )
            except (OSError, asyncio.TimeoutError, asyncio.IncompleteReadError) as exc:
                self._disconnect()
                raise DeviceIOError(f"Camera did not report the captured photo: {exc}") from exc
        return str(notification.get("param", ""))

    async def set_clock(self, value: str) -> None:
        await self._command(MSG_SET_SETTING, type="camera_clock", param=value)

    async def close(self) -> None:
        if self._writer is not None:
            try:
                await self._command(MSG_STOP_SESSION)
            except DeviceIOError:
                logger.debug("Camera session was already gone on close")
            self._disconnect()
        await self.client.aclose()

    def file_url(self, path: str) -> str:
        if path.startswith(CAMERA_FS_ROOT):
            path = path[len(CAMERA_FS_ROOT):]
        return f"{self.base_url}/{path.lstrip('/')}"

    async def _command(self, msg_id: int, **fields: Any) -> Dict[str, Any]:
        async with self._lock:
            return await self._exchange(msg_id, **fields)

    async def _exchange(self, msg_id: int, **fields: Any) -> Dict[str, Any]:
        if self._writer is None:
            await self._connect()
        try:
            return await self._send(msg_id, **fields)
        except (OSError, asyncio.TimeoutError, asyncio.IncompleteReadError) as exc:
            self._disconnect()
            raise DeviceIOError(f"Camera command {msg_id} failed: {exc}") from exc

    async def _connect(self) -> None:
        try:
            self._reader, self._writer = await asyncio.wait_for(
                asyncio.open_connection(self.host, self.port), self.timeout
            )
            self._buffer = ""
            self._decoder.reset()
            self._token = 0
            response = await self._send(MSG_START_SESSION)
        except (OSError, asyncio.TimeoutError, asyncio.IncompleteReadError) as exc:
            self._disconnect()
            raise DeviceIOError(f"Could not open camera session at {self.host}:{self.port}: {exc}") from exc
        except DeviceIOError:
            self._disconnect()
            raise
        self._token = int(response.get("param", 0))
        logger.info("Opened camera session %s at %s", self._token, self.host)

    def _disconnect(self) -> None:
        if self._writer is not None:
            self._writer.close()
        self._reader = None
        self._writer = None
        self._buffer = ""
        self._decoder.reset()

    async def _send(self, msg_id: int, **fields: Any) -> Dict[str, Any]:
        message = {"msg_id": msg_id, "token": self._token, **fields}
        self._writer.write(json.dumps(message).encode("utf-8"))
        await self._writer.drain()
        response = await self._read_until(
            lambda reply: reply.get("msg_id") == msg_id and "rval" in reply
        )
        if response["rval"] != 0:
            raise DeviceIOError(f"Camera rejected command {msg_id} with rval {response['rval']}")
        return response

    async def _read_until(self, predicate) -> Dict[str, Any]:
        while True:
            message = await asyncio.wait_for(self._next_message(), self.timeout)
            if predicate(message):
                return message
            logger.debug("Ignoring camera message %s", message)

    async def _next_message(self) -> Dict[str, Any]:
        decoder = json.JSONDecoder()
        while True:
            text = self._buffer.lstrip()
            if text:
                try:
                    message, end = decoder.raw_decode(text)
                except json.JSONDecodeError:
                    pass
                else:
                    self._buffer = text[end:]
                    return message
            chunk = await self._reader.read(4096)
            if not chunk:
                raise asyncio.IncompleteReadError(chunk, None)
            self._buffer = text + self._decoder.decode(chunk)
