"""DeterministicPreset — contexts whose streams behave the same on every host.

stdin is a fixed in-memory source (empty unless the preset is given content)
and stdout/stderr are bounded in-memory sinks. Nothing here reads the clock,
the environment, an entropy source or the filesystem, so two contexts built
from equal presets observe identical guest behavior.

Every backend class declares a ``deterministic`` flag. ``build()`` refuses to
return a context holding a backend without it, which keeps the guarantee
intact if the factories below are ever pointed at a new backend type.
"""

from __future__ import annotations

from typing import TYPE_CHECKING, Callable, Union

from guestio.context import IoContext, Slot
from guestio.errors import NonDeterministicBackendError
from guestio.streams.bounded import DEFAULT_CAPACITY, BoundedSink, OutputBuffer
from guestio.streams.memory import MemorySource

if TYPE_CHECKING:
    from guestio.config.config import GuestIOConfig


class DeterministicPreset:
    def __init__(
        self,
        stdin: Union[bytes, str] = b"",
        capacity: int = DEFAULT_CAPACITY,
        stderr_capacity: int | None = None,
    ):
        if capacity < 0 or (stderr_capacity is not None and stderr_capacity < 0):
            raise ValueError("capacity must be >= 0")
        self.stdin = stdin.encode("utf-8") if isinstance(stdin, str) else bytes(stdin)
        self.capacity = capacity
        self.stderr_capacity = capacity if stderr_capacity is None else stderr_capacity
        self.stdin_factory: Callable[[], object] = lambda: MemorySource(self.stdin)
        self.stdout_factory: Callable[[], object] = lambda: BoundedSink(OutputBuffer(), self.capacity)
        self.stderr_factory: Callable[[], object] = lambda: BoundedSink(OutputBuffer(), self.stderr_capacity)

    @classmethod
    def from_config(cls, config: "GuestIOConfig") -> "DeterministicPreset":
        """Preset sized from host configuration.

        The configuration is read once here, on the host side; the contexts
        built afterwards do not look at it again.
        """
        return cls(stdin=config.deterministic_stdin, capacity=config.default_capacity)

    def build(self) -> IoContext:
        ctx = IoContext(
            stdin=self.stdin_factory(),  # type: ignore[arg-type]
            stdout=self.stdout_factory(),  # type: ignore[arg-type]
            stderr=self.stderr_factory(),  # type: ignore[arg-type]
        )
        for slot in Slot:
            backend = ctx.backend(slot)
            if not getattr(backend, "deterministic", False):
                ctx.close()
                raise NonDeterministicBackendError(slot.value, backend)
        return ctx


def build_deterministic_ctx() -> IoContext:
    return DeterministicPreset().build()
