import os
import stat

import pytest

from baur.filecopy import FileCopyClient


def _write(path, data):
    os.makedirs(os.path.dirname(path), exist_ok=True)
    with open(path, "w") as fh:
        fh.write(data)


def _read(path):
    with open(path) as fh:
        return fh.read()


@pytest.fixture
def src(tmp_path):
    path = os.path.join(str(tmp_path), "src", "artifact.bin")
    _write(path, "content")
    return path


def test_copies_into_new_directory(tmp_path, src):
    messages = []
    dst = os.path.join(str(tmp_path), "out", "nested", "artifact.bin")

    result = FileCopyClient(messages.append).upload(src, dst)

    assert result == dst
    assert _read(dst) == _read(src)
    assert any("created directory" in msg for msg in messages)


def test_overwrites_existing_file(tmp_path, src):
    dst = os.path.join(str(tmp_path), "out", "artifact.bin")
    _write(dst, "old data that is longer")

    assert FileCopyClient().upload(src, dst) == dst
    assert _read(dst) == _read(src)


def test_same_file_is_left_alone(src):
    messages = []
    assert FileCopyClient(messages.append).upload(src, src) == src
    assert _read(src) == "content"
    assert any("already exist and is the same" in msg for msg in messages)


def test_destination_directory_raises(tmp_path, src):
    dst = os.path.join(str(tmp_path), "out", "dir")
    os.makedirs(dst)
    with pytest.raises(FileExistsError):
        FileCopyClient().upload(src, dst)


def test_destination_parent_is_file_raises(tmp_path, src):
    parent = os.path.join(str(tmp_path), "afile")
    _write(parent, "x")
    with pytest.raises(NotADirectoryError):
        FileCopyClient().upload(src, os.path.join(parent, "artifact.bin"))


def test_missing_source_raises(tmp_path):
    dst = os.path.join(str(tmp_path), "out", "artifact.bin")
    with pytest.raises(FileNotFoundError):
        FileCopyClient().upload(os.path.join(str(tmp_path), "missing"), dst)


def test_permissions_are_copied(tmp_path, src):
    os.chmod(src, 0o640)
    dst = os.path.join(str(tmp_path), "out", "artifact.bin")
    FileCopyClient().upload(src, dst)
    assert stat.S_IMODE(os.stat(dst).st_mode) == stat.S_IMODE(os.stat(src).st_mode)