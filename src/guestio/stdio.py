"""File-object views over an IoContext, for in-process Python guests.

    ctx = IoContext.deterministic().set_stdin_bytes(b"ada\\n")
    with redirect_stdio(ctx):
        print("hello", input())
    ctx.stdout.getvalue()   # b"hello ada\\n"

Text written through ``sys.stdout`` is encoded and handed to the slot's
backend at each flush; a rejected write raises the backend's error
(``CapacityExceededError``, ``BufferImmutableError``, ...) out of the guest
call that triggered the flush.
"""

from __future__ import annotations

import io
import sys
from contextlib import contextmanager
from typing import Iterator, TextIO, Tuple

from guestio.context import IoContext, Slot


class GuestStream(io.RawIOBase):
    """Raw binary stream bound to one slot of an IoContext."""

    def __init__(self, ctx: IoContext, slot: Slot | str):
        super().__init__()
        self._ctx = ctx
        self.slot = Slot(slot)

    def readable(self) -> bool:
        return self.slot is Slot.STDIN

    def writable(self) -> bool:
        return self.slot is not Slot.STDIN

    def readinto(self, b) -> int:
        if not self.readable():
            raise io.UnsupportedOperation(f"{self.slot.value} is not readable")
        data = self._ctx.read(self.slot, len(b))
        n = len(data)
        b[:n] = data
        return n

    def write(self, b) -> int:
        if not self.writable():
            raise io.UnsupportedOperation(f"{self.slot.value} is not writable")
        return self._ctx.write(self.slot, bytes(b))


def open_guest_text(ctx: IoContext, slot: Slot | str, encoding: str = "utf-8") -> TextIO:
    raw = GuestStream(ctx, slot)
    if raw.readable():
        return io.TextIOWrapper(io.BufferedReader(raw), encoding=encoding)
    # write_through so every text write reaches the backend as one call
    return io.TextIOWrapper(raw, encoding=encoding, write_through=True)  # type: ignore[arg-type]


@contextmanager
def redirect_stdio(ctx: IoContext, encoding: str = "utf-8") -> Iterator[Tuple[TextIO, TextIO, TextIO]]:
    """Swap ``sys.stdin/stdout/stderr`` for views over ``ctx`` while the block runs."""
    streams = (
        open_guest_text(ctx, Slot.STDIN, encoding),
        open_guest_text(ctx, Slot.STDOUT, encoding),
        open_guest_text(ctx, Slot.STDERR, encoding),
    )
    saved = (sys.stdin, sys.stdout, sys.stderr)
    sys.stdin, sys.stdout, sys.stderr = streams
    try:
        yield streams
    finally:
        sys.stdin, sys.stdout, sys.stderr = saved
