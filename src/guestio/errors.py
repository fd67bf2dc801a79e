"""Error taxonomy for guest stdio virtualization.

Configuration errors (``IoError`` raised while installing a backend) reach the
host that is configuring the context. Runtime errors (``StreamWriteError`` and
its subclasses) are raised from inside a guest stream operation and carry the
slot they happened on once they pass through an ``IoContext``.
"""

from __future__ import annotations

import errno
from enum import Enum
from typing import Optional


class IoErrorKind(str, Enum):
    NOT_FOUND = "not_found"
    PERMISSION_DENIED = "permission_denied"
    ALREADY_EXISTS = "already_exists"
    IS_A_DIRECTORY = "is_a_directory"
    OTHER = "other"


_ERRNO_KINDS = {
    errno.ENOENT: IoErrorKind.NOT_FOUND,
    errno.ENOTDIR: IoErrorKind.NOT_FOUND,
    errno.EACCES: IoErrorKind.PERMISSION_DENIED,
    errno.EPERM: IoErrorKind.PERMISSION_DENIED,
    errno.EROFS: IoErrorKind.PERMISSION_DENIED,
    errno.EEXIST: IoErrorKind.ALREADY_EXISTS,
    errno.EISDIR: IoErrorKind.IS_A_DIRECTORY,
}


class GuestIOError(Exception):
    """Base class for every error raised by guestio."""

    def __init__(self, message: str, slot: Optional[str] = None):
        super().__init__(message)
        self.message = message
        self.slot = slot

    def __str__(self) -> str:
        if self.slot:
            return f"[{self.slot}] {self.message}"
        return self.message


class IoError(GuestIOError):
    def __init__(
        self,
        message: str,
        kind: IoErrorKind = IoErrorKind.OTHER,
        path: Optional[str] = None,
        slot: Optional[str] = None,
    ):
        super().__init__(message, slot=slot)
        self.kind = kind
        self.path = path

    @classmethod
    def from_os_error(cls, err: OSError, path: Optional[str] = None, slot: Optional[str] = None) -> "IoError":
        kind = _ERRNO_KINDS.get(err.errno, IoErrorKind.OTHER) if err.errno is not None else IoErrorKind.OTHER
        target = path if path is not None else err.filename
        reason = err.strerror or str(err)
        message = f"{reason}: {target}" if target is not None else reason
        return cls(message, kind=kind, path=None if target is None else str(target), slot=slot)


class StreamClosedError(GuestIOError, ValueError):
    def __init__(self, backend: str, slot: Optional[str] = None):
        super().__init__(f"I/O operation on closed {backend}", slot=slot)


class StreamWriteError(GuestIOError):
    """A write into a guest-visible output stream failed."""


class CapacityExceededError(StreamWriteError):
    def __init__(self, attempted: int, remaining: int, slot: Optional[str] = None):
        super().__init__(
            f"Write of {attempted} bytes exceeds remaining capacity of {remaining} bytes",
            slot=slot,
        )
        self.attempted = attempted
        self.remaining = remaining


class BufferImmutableError(StreamWriteError):
    def __init__(self, message: str = "Output buffer is immutable", slot: Optional[str] = None):
        super().__init__(message, slot=slot)


class ContextReleasedError(GuestIOError):
    def __init__(self):
        super().__init__("IoContext was handed off and can no longer be used")


class NonDeterministicBackendError(GuestIOError):
    def __init__(self, slot: str, backend: object):
        super().__init__(f"{type(backend).__name__} is not a deterministic backend", slot=slot)
        self.backend = backend
