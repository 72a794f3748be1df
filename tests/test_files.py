import pytest

from lazyco.files import FileBufferingMode, FileOpenMode, WriteOnlyFile
from lazyco.sync_wait import sync_wait
from lazyco.task import Task

PATTERN = bytes(ord("a") + i % 26 for i in range(1024))


def test_write_a_file(tmp_path):
    path = tmp_path / "foo"

    async def write():
        with WriteOnlyFile.open(path) as f:
            initial = f.size()
            for chunk in range(10):
                await f.write(chunk * len(PATTERN), PATTERN)
            return initial, f.size()

    initial, final = sync_wait(Task(write()))
    assert initial == 0
    assert final == 10240

    data = path.read_bytes()
    assert len(data) == 10240
    for i, byte in enumerate(data):
        assert byte == ord("a") + (i % 1024) % 26


def test_write_returns_byte_count(tmp_path):
    with WriteOnlyFile.open(tmp_path / "bar") as f:
        assert sync_wait(f.write(5, b"hello")) == 5
        assert f.size() == 10
    assert (tmp_path / "bar").read_bytes() == b"\x00" * 5 + b"hello"


def test_set_size(tmp_path):
    with WriteOnlyFile.open(tmp_path / "big") as f:
        f.set_size(20 * 1024)
        assert f.size() == 20 * 1024
        f.set_size(100)
        assert f.size() == 100


def test_create_or_open_keeps_contents(tmp_path):
    path = tmp_path / "keep"
    path.write_bytes(b"abcdef")
    with WriteOnlyFile.open(path) as f:
        sync_wait(f.write(0, b"XY"))
    assert path.read_bytes() == b"XYcdef"


def test_create_always_truncates(tmp_path):
    path = tmp_path / "trunc"
    path.write_bytes(b"abcdef")
    with WriteOnlyFile.open(path, FileOpenMode.CREATE_ALWAYS) as f:
        assert f.size() == 0


def test_create_new_on_existing_raises(tmp_path):
    path = tmp_path / "exists"
    path.write_bytes(b"x")
    with pytest.raises(FileExistsError):
        WriteOnlyFile.open(path, FileOpenMode.CREATE_NEW)


def test_open_existing_on_missing_raises(tmp_path):
    with pytest.raises(FileNotFoundError):
        WriteOnlyFile.open(tmp_path / "missing", FileOpenMode.OPEN_EXISTING)


def test_write_through_mode(tmp_path):
    path = tmp_path / "sync"
    with WriteOnlyFile.open(
        path, buffering_mode=FileBufferingMode.WRITE_THROUGH
    ) as f:
        assert sync_wait(f.write(0, b"data")) == 4
    assert path.read_bytes() == b"data"


def test_closed_file_raises(tmp_path):
    f = WriteOnlyFile.open(tmp_path / "closed")
    f.close()
    with pytest.raises(ValueError):
        f.size()
    with pytest.raises(ValueError):
        f.write(0, b"x")


def test_negative_offset_rejected(tmp_path):
    with WriteOnlyFile.open(tmp_path / "neg") as f:
        with pytest.raises(ValueError):
            f.write(-1, b"x")