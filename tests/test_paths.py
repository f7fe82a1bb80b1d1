from datetime import datetime
from pathlib import Path

from camsync.models import RemoteFile
from camsync.sync.paths import has_synced_copy, join_remote, local_storage_path


def test_local_storage_path_uses_day_folder_and_timestamp(tmp_path):
    remote = RemoteFile(name="a.jpg", size=1000, date=datetime(2024, 1, 1, 9, 5, 7))

    path = local_storage_path(tmp_path, remote)

    assert path == tmp_path / "20240101" / "20240101_090507_a.jpg"
    assert not path.parent.exists()


def test_local_storage_path_creates_day_folder_on_request(tmp_path):
    remote = RemoteFile(name="a.jpg", size=1000, date=datetime(2024, 1, 1, 9, 5, 7))

    path = local_storage_path(tmp_path, remote, create=True)

    assert path.parent.is_dir()


def test_local_storage_path_ignores_trailing_slash():
    remote = RemoteFile(name="b.jpg", size=1, date=datetime(2023, 12, 31, 23, 59, 59))

    assert local_storage_path("./storage/", remote) == Path("storage/20231231/20231231_235959_b.jpg")
    assert local_storage_path("./storage/", remote) == local_storage_path("./storage", remote)


def test_local_storage_path_distinguishes_date_and_name():
    moment = datetime(2024, 1, 1, 12, 0, 0)
    files = [
        RemoteFile(name="a.jpg", size=1, date=moment),
        RemoteFile(name="b.jpg", size=1, date=moment),
        RemoteFile(name="a.jpg", size=1, date=moment.replace(second=1)),
        RemoteFile(name="a.jpg", size=1, date=moment.replace(day=2)),
    ]

    paths = {local_storage_path("storage", remote) for remote in files}

    assert len(paths) == len(files)


def test_join_remote_strips_single_trailing_slash():
    assert join_remote("/tmp/fuse_d/DCIM/", "100MEDIA") == "/tmp/fuse_d/DCIM/100MEDIA"
    assert join_remote("/tmp/fuse_d/DCIM", "100MEDIA") == "/tmp/fuse_d/DCIM/100MEDIA"


def test_has_synced_copy_compares_sizes(tmp_path):
    remote = RemoteFile(name="a.jpg", size=4, date=datetime(2024, 1, 1))
    local = tmp_path / "a.jpg"

    assert not has_synced_copy(local, remote)
    local.write_bytes(b"ab")
    assert not has_synced_copy(local, remote)
    local.write_bytes(b"abcd")
    assert has_synced_copy(local, remote)
