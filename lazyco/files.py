"""Files opened for writing, with awaitable positional writes."""

from __future__ import annotations

import enum
import os
import threading
from collections.abc import Generator
from typing import Any

_CREATE_MODE = 0o644


class FileOpenMode(enum.Enum):
    """How to treat an existing or missing file on open."""

    CREATE_OR_OPEN = "create_or_open"
    CREATE_ALWAYS = "create_always"
    CREATE_NEW = "create_new"
    OPEN_EXISTING = "open_existing"
    TRUNCATE_EXISTING = "truncate_existing"


class FileShareMode(enum.Flag):
    """Access that others are allowed concurrently; advisory on this platform."""

    NONE = 0
    READ = 1
    WRITE = 2
    READ_WRITE = READ | WRITE
    DELETE = 4


class FileBufferingMode(enum.Flag):
    """Hints about how the file will be used."""

    DEFAULT = 0
    SEQUENTIAL = 1
    RANDOM_ACCESS = 2
    UNBUFFERED = 4
    WRITE_THROUGH = 8
    TEMPORARY = 16


_OPEN_FLAGS = {
    FileOpenMode.CREATE_OR_OPEN: os.O_CREAT,
    FileOpenMode.CREATE_ALWAYS: os.O_CREAT | os.O_TRUNC,
    FileOpenMode.CREATE_NEW: os.O_CREAT | os.O_EXCL,
    FileOpenMode.OPEN_EXISTING: 0,
    FileOpenMode.TRUNCATE_EXISTING: os.O_TRUNC,
}


class _WriteOperation:
    """Awaitable that writes a buffer at an offset and returns the byte count."""

    def __init__(self, file: WritableFile, offset: int, data: Any) -> None:
        self._file = file
        self._offset = offset
        self._data = memoryview(data).cast("B")

    def __await__(self) -> Generator[Any, None, int]:
        yield from ()
        return self._file._write_at(self._offset, self._data)


class WritableFile:
    """An open file that supports sizing and positional writes."""

    def __init__(self, fd: int, share_mode: FileShareMode, buffering_mode: FileBufferingMode) -> None:
        self._fd: int | None = fd
        self.share_mode = share_mode
        self.buffering_mode = buffering_mode
        self._lock = threading.Lock()

    def _handle(self) -> int:
        if self._fd is None:
            raise ValueError("I/O operation on closed file")
        return self._fd

    def size(self) -> int:
        """The current size of the file in bytes."""
        return os.fstat(self._handle()).st_size

    def set_size(self, file_size: int) -> None:
        """Extend or truncate the file to ``file_size`` bytes."""
        if file_size < 0:
            raise ValueError("file size must not be negative")
        os.ftruncate(self._handle(), file_size)

    def write(self, offset: int, data: Any) -> _WriteOperation:
        """An awaitable that writes ``data`` at ``offset``; awaiting starts it."""
        if offset < 0:
            raise ValueError("offset must not be negative")
        self._handle()
        return _WriteOperation(self, offset, data)

    def close(self) -> None:
        """Close the file; further operations raise ValueError."""
        fd, self._fd = self._fd, None
        if fd is not None:
            os.close(fd)

    def __enter__(self) -> WritableFile:
        return self

    def __exit__(self, *args: Any) -> None:
        self.close()

    def __del__(self) -> None:
        if getattr(self, "_fd", None) is not None:
            self.close()

    def _write_at(self, offset: int, data: memoryview) -> int:
        fd = self._handle()
        written = 0
        with self._lock:
            if hasattr(os, "pwrite"):
                while written < len(data):
                    written += os.pwrite(fd, data[written:], offset + written)
            else:
                os.lseek(fd, offset, os.SEEK_SET)
                while written < len(data):
                    written += os.write(fd, data[written:])
        return written


class WriteOnlyFile(WritableFile):
    """A file opened for write-only access."""

    @classmethod
    def open(
        cls,
        path: str | os.PathLike[str],
        open_mode: FileOpenMode = FileOpenMode.CREATE_OR_OPEN,
        share_mode: FileShareMode = FileShareMode.NONE,
        buffering_mode: FileBufferingMode = FileBufferingMode.DEFAULT,
    ) -> WriteOnlyFile:
        """Open ``path`` for writing; raises OSError if that fails."""
        flags = os.O_WRONLY | _OPEN_FLAGS[open_mode] | getattr(os, "O_BINARY", 0)
        if FileBufferingMode.WRITE_THROUGH in buffering_mode:
            flags |= getattr(os, "O_DSYNC", getattr(os, "O_SYNC", 0))
        fd = os.open(os.fspath(path), flags, _CREATE_MODE)
        return cls(fd, share_mode, buffering_mode)