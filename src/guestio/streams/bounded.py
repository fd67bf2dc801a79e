"""BoundedSink — writable backend capped at a fixed number of bytes.

A write is committed in full or not at all. The target buffer may be held by
the host as well (to read captured output after the guest finishes), so the
sink never grows it past ``capacity`` and never leaves a partial write behind.

Buffer handles:
    OutputBuffer       — append-only, can be frozen by the host
    bytearray          — mutable; refuses to grow while a memoryview is exported
    bytes / memoryview — read-only handles; every write is rejected
"""

from __future__ import annotations

from typing import Union

from guestio.errors import BufferImmutableError, CapacityExceededError, StreamClosedError
from guestio.logging.diagnostic import log_write_rejected
from guestio.streams.backend import Direction

DEFAULT_CAPACITY = 1024 * 1024


class OutputBuffer:
    """Append-only byte buffer with a queryable immutability flag."""

    __slots__ = ("_data", "_frozen")

    def __init__(self, initial: bytes = b""):
        self._data = bytearray(initial)
        self._frozen = False

    @property
    def frozen(self) -> bool:
        return self._frozen

    def freeze(self) -> "OutputBuffer":
        self._frozen = True
        return self

    def append(self, data: bytes) -> None:
        if self._frozen:
            raise BufferImmutableError("Output buffer is frozen")
        self._data += data

    def getvalue(self) -> bytes:
        return bytes(self._data)

    def decode(self, encoding: str = "utf-8", errors: str = "strict") -> str:
        return self._data.decode(encoding, errors)

    def __len__(self) -> int:
        return len(self._data)

    def __bytes__(self) -> bytes:
        return bytes(self._data)

    def __eq__(self, other: object) -> bool:
        if isinstance(other, OutputBuffer):
            return self._data == other._data
        if isinstance(other, (bytes, bytearray, memoryview)):
            return self._data == other
        return NotImplemented

    __hash__ = None  # type: ignore[assignment]

    def __repr__(self) -> str:
        flag = ", frozen" if self._frozen else ""
        return f"OutputBuffer({bytes(self._data)!r}{flag})"


BufferHandle = Union[OutputBuffer, bytearray, bytes, memoryview]


class BoundedSink:
    kind = "bounded_buffer"
    direction = Direction.WRITE
    deterministic = True

    def __init__(self, buffer: BufferHandle | None = None, capacity: int = 0):
        if capacity < 0:
            raise ValueError(f"capacity must be >= 0, got {capacity}")
        self.buffer: BufferHandle = OutputBuffer() if buffer is None else buffer
        self.capacity = capacity
        self._closed = False

    @property
    def closed(self) -> bool:
        return self._closed

    @property
    def written(self) -> int:
        return len(self.buffer)

    @property
    def remaining(self) -> int:
        return max(0, self.capacity - len(self.buffer))

    @property
    def frozen(self) -> bool:
        buf = self.buffer
        if isinstance(buf, OutputBuffer):
            return buf.frozen
        return not isinstance(buf, bytearray)

    def write(self, data: bytes) -> int:
        if self._closed:
            raise StreamClosedError("BoundedSink")
        # len() of a non-byte memoryview counts items, not bytes.
        data = bytes(data)
        size = len(data)
        # Immutability is checked before anything else, empty writes included.
        if self.frozen:
            log_write_rejected("immutable", size, self.remaining)
            raise BufferImmutableError(f"Cannot write to a frozen {type(self.buffer).__name__} buffer")
        current = len(self.buffer)
        if current + size > self.capacity:
            remaining = max(0, self.capacity - current)
            log_write_rejected("capacity", size, remaining)
            raise CapacityExceededError(attempted=size, remaining=remaining)
        if size == 0:
            return 0
        self._append(data)
        return size

    def _append(self, data: bytes) -> None:
        buf = self.buffer
        if isinstance(buf, OutputBuffer):
            buf.append(data)
            return
        try:
            buf += data  # type: ignore[operator]
        except BufferError as err:
            # bytearray refuses to resize while a memoryview over it is alive.
            log_write_rejected("immutable", len(data), self.remaining)
            raise BufferImmutableError(f"Output buffer cannot be resized: {err}") from err

    def flush(self) -> None:
        pass

    def getvalue(self) -> bytes:
        return bytes(self.buffer)

    def close(self) -> None:
        # The buffer belongs to whoever supplied it; only the sink is closed.
        self._closed = True

    def __repr__(self) -> str:
        return f"BoundedSink(written={self.written}, capacity={self.capacity})"
