"""StreamBackend — the capability every guest stdio backend implements.

Implementations:
    FileSource    — read from a real file                  (host files)
    FileSink      — write to a real file, create/truncate  (host files)
    MemorySource  — read from an owned copy of bytes       (fixed input)
    BoundedSink   — write into a buffer with a hard cap    (captured output)
"""

from __future__ import annotations

from enum import Enum
from typing import Protocol, runtime_checkable


class Direction(str, Enum):
    READ = "read"
    WRITE = "write"


@runtime_checkable
class StreamBackend(Protocol):
    """Minimal contract shared by readable and writable backends."""

    @property
    def kind(self) -> str: ...

    @property
    def direction(self) -> Direction: ...

    # True only when nothing observable through the backend depends on the
    # host (filesystem, clock, entropy, identity).
    @property
    def deterministic(self) -> bool: ...

    @property
    def closed(self) -> bool: ...

    def close(self) -> None: ...


@runtime_checkable
class ReadableStream(StreamBackend, Protocol):
    def read(self, size: int = -1) -> bytes: ...


@runtime_checkable
class WritableStream(StreamBackend, Protocol):
    def write(self, data: bytes) -> int: ...
    def flush(self) -> None: ...


def is_readable(backend: object) -> bool:
    return isinstance(backend, ReadableStream) and backend.direction is Direction.READ


def is_writable(backend: object) -> bool:
    return isinstance(backend, WritableStream) and backend.direction is Direction.WRITE
