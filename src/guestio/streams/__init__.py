from guestio.streams.backend import Direction, ReadableStream, StreamBackend, WritableStream
from guestio.streams.bounded import BoundedSink, BufferHandle, OutputBuffer
from guestio.streams.file import FileSink, FileSource
from guestio.streams.memory import MemorySource

__all__ = [
    "Direction", "StreamBackend", "ReadableStream", "WritableStream",
    "FileSource", "FileSink", "MemorySource",
    "BoundedSink", "BufferHandle", "OutputBuffer",
]
