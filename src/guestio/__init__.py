# Package Root
from guestio.context import IoContext, Slot
from guestio.deterministic import DeterministicPreset, build_deterministic_ctx
from guestio.errors import (
    GuestIOError, IoError, IoErrorKind,
    StreamWriteError, StreamClosedError, CapacityExceededError, BufferImmutableError,
    ContextReleasedError, NonDeterministicBackendError,
)
from guestio.streams import BoundedSink, FileSink, FileSource, MemorySource, OutputBuffer

__all__ = [
    "IoContext", "Slot",
    "DeterministicPreset", "build_deterministic_ctx",
    "GuestIOError", "IoError", "IoErrorKind",
    "StreamWriteError", "StreamClosedError", "CapacityExceededError", "BufferImmutableError",
    "ContextReleasedError", "NonDeterministicBackendError",
    "BoundedSink", "FileSink", "FileSource", "MemorySource", "OutputBuffer",
]
