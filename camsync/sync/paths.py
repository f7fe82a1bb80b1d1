from __future__ import annotations

from pathlib import Path

from camsync.models import RemoteFile
from camsync.utils.errors import FilesystemError

DAY_FORMAT = "%Y%m%d"
STAMP_FORMAT = "%Y%m%d_%H%M%S"


def strip_trailing_slash(value: str) -> str:
    return value[:-1] if value.endswith("/") else value


def join_remote(parent: str, name: str) -> str:
    return f"{strip_trailing_slash(parent)}/{name}"


def local_file_name(file: RemoteFile) -> str:
    return f"{file.date.strftime(STAMP_FORMAT)}_{file.name}"


def local_storage_path(local_root: str | Path, file: RemoteFile, create: bool = False) -> Path:
    """Map a remote file to ``<root>/<YYYYMMDD>/<YYYYMMDD_HHMMSS>_<name>``."""
    directory = Path(strip_trailing_slash(str(local_root))) / file.date.strftime(DAY_FORMAT)
    if create:
        try:
            directory.mkdir(parents=True, exist_ok=True)
        except OSError as exc:
            raise FilesystemError(f"Could not create {directory}: {exc}", path=str(directory)) from exc
    return directory / local_file_name(file)


def has_synced_copy(path: Path, file: RemoteFile) -> bool:
    """True when a local file exists at ``path`` with the remote file's size."""
    try:
        stats = path.stat()
    except FileNotFoundError:
        return False
    except OSError as exc:
        raise FilesystemError(f"Could not stat {path}: {exc}", path=str(path)) from exc
    return stats.st_size == file.size
