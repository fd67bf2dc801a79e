"""FileSource / FileSink — backends over real host files.

Both own their handle exclusively; ``close()`` releases it. Open failures
are translated into ``IoError`` at construction so a backend that exists
always holds a usable handle.
"""

from __future__ import annotations

import os
from typing import BinaryIO, Union

from guestio.errors import IoError, StreamClosedError
from guestio.streams.backend import Direction

PathLike = Union[str, os.PathLike]


def _open(path: PathLike, mode: str) -> BinaryIO:
    try:
        return open(path, mode)  # noqa: SIM115
    except OSError as err:
        raise IoError.from_os_error(err, path=os.fspath(path)) from err


class _FileBackend:
    kind = "file"
    # File contents live outside the sandbox and differ between hosts.
    deterministic = False

    def __init__(self, path: PathLike, mode: str):
        self.path = os.fspath(path)
        self._fh = _open(path, mode)

    @property
    def closed(self) -> bool:
        return self._fh.closed

    def close(self) -> None:
        self._fh.close()

    def _check_open(self) -> None:
        if self._fh.closed:
            raise StreamClosedError(type(self).__name__)

    def __repr__(self) -> str:
        state = "closed" if self.closed else "open"
        return f"{type(self).__name__}({self.path!r}, {state})"


class FileSource(_FileBackend):
    direction = Direction.READ

    def __init__(self, path: PathLike):
        super().__init__(path, "rb")

    def read(self, size: int = -1) -> bytes:
        self._check_open()
        try:
            return self._fh.read(size)
        except OSError as err:
            raise IoError.from_os_error(err, path=self.path) from err


class FileSink(_FileBackend):
    """Write-only file; created if absent, truncated if present."""

    direction = Direction.WRITE

    def __init__(self, path: PathLike):
        super().__init__(path, "wb")

    def write(self, data: bytes) -> int:
        self._check_open()
        data = bytes(data)
        try:
            self._fh.write(data)
            self._fh.flush()
        except OSError as err:
            raise IoError.from_os_error(err, path=self.path) from err
        return len(data)

    def flush(self) -> None:
        self._fh.flush()
