"""IoContext — the three stdio slots a guest sees.

Instance methods that configure a slot mutate the context and return it, so
calls chain:

    ctx = (
        IoContext.deterministic()
        .set_stdin_bytes(b"input")
        .set_stdout_buffer(out, capacity=4096)
        .set_stderr_file("guest.err")
    )
    engine.launch(module, ctx.handoff())

The context owns its backends. Replacing a slot closes the backend that was
there before, unless another slot still holds it; a failed replacement leaves
the slot untouched. There is no
internal locking: configure fully, then hand the context to the engine.
"""

from __future__ import annotations

from enum import Enum
from typing import Callable, Dict, Optional

from guestio.errors import ContextReleasedError, GuestIOError, IoError
from guestio.logging.diagnostic import log_slot_replaced
from guestio.streams.backend import ReadableStream, StreamBackend, WritableStream, is_readable, is_writable
from guestio.streams.bounded import DEFAULT_CAPACITY, BoundedSink, BufferHandle, OutputBuffer
from guestio.streams.file import FileSink, FileSource, PathLike
from guestio.streams.memory import BytesLike, MemorySource


class Slot(str, Enum):
    STDIN = "stdin"
    STDOUT = "stdout"
    STDERR = "stderr"


def _default_sink() -> BoundedSink:
    return BoundedSink(OutputBuffer(), DEFAULT_CAPACITY)


class IoContext:
    def __init__(
        self,
        stdin: Optional[ReadableStream] = None,
        stdout: Optional[WritableStream] = None,
        stderr: Optional[WritableStream] = None,
    ):
        self._slots: Dict[Slot, StreamBackend] = {}
        self._released = False
        self._install(Slot.STDIN, stdin if stdin is not None else MemorySource(b""))
        self._install(Slot.STDOUT, stdout if stdout is not None else _default_sink())
        self._install(Slot.STDERR, stderr if stderr is not None else _default_sink())

    @classmethod
    def deterministic(cls) -> "IoContext":
        """Context with no host filesystem, clock or identity reachable through it."""
        from guestio.deterministic import DeterministicPreset
        return DeterministicPreset().build()

    # ── Slot access ─────────────────────────────────────────────────

    @property
    def stdin(self) -> ReadableStream:
        return self.backend(Slot.STDIN)  # type: ignore[return-value]

    @property
    def stdout(self) -> WritableStream:
        return self.backend(Slot.STDOUT)  # type: ignore[return-value]

    @property
    def stderr(self) -> WritableStream:
        return self.backend(Slot.STDERR)  # type: ignore[return-value]

    @property
    def released(self) -> bool:
        return self._released

    @property
    def is_deterministic(self) -> bool:
        self._check_live()
        return all(getattr(b, "deterministic", False) for b in self._slots.values())

    def backend(self, slot: Slot | str) -> StreamBackend:
        self._check_live()
        return self._slots[Slot(slot)]

    # ── stdin ───────────────────────────────────────────────────────

    def set_stdin(self, backend: ReadableStream) -> "IoContext":
        return self._replace(Slot.STDIN, lambda: backend)

    def set_stdin_file(self, path: PathLike) -> "IoContext":
        """Read stdin from ``path``. Raises ``IoError`` if it cannot be opened."""
        return self._replace(Slot.STDIN, lambda: FileSource(path))

    def set_stdin_bytes(self, content: BytesLike | str) -> "IoContext":
        return self._replace(Slot.STDIN, lambda: MemorySource(content))

    set_stdin_string = set_stdin_bytes

    # ── stdout / stderr ─────────────────────────────────────────────

    def set_stdout(self, backend: WritableStream) -> "IoContext":
        return self._replace(Slot.STDOUT, lambda: backend)

    def set_stderr(self, backend: WritableStream) -> "IoContext":
        return self._replace(Slot.STDERR, lambda: backend)

    def set_stdout_file(self, path: PathLike) -> "IoContext":
        """Write stdout to ``path``, truncating it if it exists, creating it otherwise."""
        return self._replace(Slot.STDOUT, lambda: FileSink(path))

    def set_stderr_file(self, path: PathLike) -> "IoContext":
        """Write stderr to ``path``, truncating it if it exists, creating it otherwise."""
        return self._replace(Slot.STDERR, lambda: FileSink(path))

    def set_stdout_buffer(self, buffer: BufferHandle, capacity: int) -> "IoContext":
        """Capture stdout into ``buffer``, at most ``capacity`` bytes in total.

        Writes that would go past ``capacity`` raise ``CapacityExceededError``
        and writes into a frozen buffer raise ``BufferImmutableError``; both
        fail the guest operation that issued them. No encoding checks are done
        on the captured bytes.
        """
        return self._replace(Slot.STDOUT, lambda: BoundedSink(buffer, capacity))

    def set_stderr_buffer(self, buffer: BufferHandle, capacity: int) -> "IoContext":
        """Capture stderr into ``buffer``; same contract as ``set_stdout_buffer``."""
        return self._replace(Slot.STDERR, lambda: BoundedSink(buffer, capacity))

    # ── Routing (used by the execution engine) ──────────────────────

    def read(self, slot: Slot | str, size: int = -1) -> bytes:
        slot = Slot(slot)
        backend = self.backend(slot)
        if not is_readable(backend):
            raise TypeError(f"{slot.value} is not readable")
        return self._attributed(slot, lambda: backend.read(size))  # type: ignore[attr-defined]

    def write(self, slot: Slot | str, data: bytes) -> int:
        slot = Slot(slot)
        backend = self.backend(slot)
        if not is_writable(backend):
            raise TypeError(f"{slot.value} is not writable")
        return self._attributed(slot, lambda: backend.write(data))  # type: ignore[attr-defined]

    def read_stdin(self, size: int = -1) -> bytes:
        return self.read(Slot.STDIN, size)

    def write_stdout(self, data: bytes) -> int:
        return self.write(Slot.STDOUT, data)

    def write_stderr(self, data: bytes) -> int:
        return self.write(Slot.STDERR, data)

    # ── Ownership ───────────────────────────────────────────────────

    def handoff(self) -> "IoContext":
        """Move the three backends into a new context and release this one."""
        self._check_live()
        moved = IoContext.__new__(IoContext)
        moved._slots = self._slots
        moved._released = False
        self._slots = {}
        self._released = True
        return moved

    def close(self) -> None:
        for backend in self._slots.values():
            backend.close()

    def __enter__(self) -> "IoContext":
        self._check_live()
        return self

    def __exit__(self, *exc_info) -> None:
        self.close()

    def __repr__(self) -> str:
        if self._released:
            return "IoContext(released)"
        parts = ", ".join(f"{s.value}={b!r}" for s, b in self._slots.items())
        return f"IoContext({parts})"

    # ── Internal ────────────────────────────────────────────────────

    def _check_live(self) -> None:
        if self._released:
            raise ContextReleasedError()

    def _replace(self, slot: Slot, factory: Callable[[], StreamBackend]) -> "IoContext":
        self._check_live()
        try:
            backend = factory()
        except IoError as err:
            err.slot = slot.value
            raise
        previous = self._slots.get(slot)
        self._install(slot, backend)
        # A backend may sit in more than one slot; close it only once nothing uses it.
        if previous is not None and all(b is not previous for b in self._slots.values()):
            previous.close()
        return self

    def _install(self, slot: Slot, backend: StreamBackend) -> None:
        check = is_readable if slot is Slot.STDIN else is_writable
        if not check(backend):
            raise TypeError(f"{type(backend).__name__} cannot be installed as {slot.value}")
        previous = self._slots.get(slot)
        self._slots[slot] = backend
        if previous is not None:
            log_slot_replaced(slot.value, repr(previous), repr(backend))

    @staticmethod
    def _attributed(slot: Slot, op: Callable):
        try:
            return op()
        except GuestIOError as err:
            err.slot = slot.value
            raise
        except OSError as err:
            raise IoError.from_os_error(err, slot=slot.value) from err
