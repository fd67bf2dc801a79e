"""MemorySource — readable backend over an in-memory byte sequence.

The content is copied at construction, so later changes to the caller's
buffer are never visible to the guest:

    data = bytearray(b"abc")
    src = MemorySource(data)
    data[:] = b"xyz"
    src.read()   # b"abc"
"""

from __future__ import annotations

from typing import Union

from guestio.errors import StreamClosedError
from guestio.streams.backend import Direction

BytesLike = Union[bytes, bytearray, memoryview]


class MemorySource:
    kind = "memory"
    direction = Direction.READ
    deterministic = True

    def __init__(self, content: BytesLike | str = b""):
        if isinstance(content, str):
            content = content.encode("utf-8")
        self._content = bytes(content)
        self._pos = 0
        self._closed = False

    @property
    def closed(self) -> bool:
        return self._closed

    @property
    def remaining(self) -> int:
        return len(self._content) - self._pos

    def __len__(self) -> int:
        return len(self._content)

    def read(self, size: int = -1) -> bytes:
        if self._closed:
            raise StreamClosedError("MemorySource")
        if size is None or size < 0:
            end = len(self._content)
        else:
            end = min(self._pos + size, len(self._content))
        chunk = self._content[self._pos:end]
        self._pos = end
        return chunk

    def close(self) -> None:
        self._closed = True

    def __repr__(self) -> str:
        return f"MemorySource(size={len(self._content)}, remaining={self.remaining})"
