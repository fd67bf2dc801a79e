"""Tests for the file-object views and sys.std* redirection."""

import io
import logging
import os
import subprocess
import sys
import textwrap

import pytest

from guestio import IoContext, Slot
from guestio.errors import BufferImmutableError, CapacityExceededError
from guestio.stdio import GuestStream, open_guest_text, redirect_stdio
from guestio.streams import OutputBuffer


class TestGuestStream:

    def test_read_from_stdin_slot(self):
        ctx = IoContext.deterministic().set_stdin_bytes(b"abcdef")
        stream = GuestStream(ctx, Slot.STDIN)
        assert stream.readable() is True
        assert stream.writable() is False
        assert stream.read(4) == b"abcd"
        assert stream.read() == b"ef"
        assert stream.read() == b""

    def test_write_to_stdout_slot(self):
        buf = bytearray()
        ctx = IoContext.deterministic().set_stdout_buffer(buf, 10)
        stream = GuestStream(ctx, "stdout")
        assert stream.write(b"hey") == 3
        assert buf == b"hey"

    def test_wrong_direction(self):
        ctx = IoContext.deterministic()
        with pytest.raises(io.UnsupportedOperation):
            GuestStream(ctx, Slot.STDIN).write(b"x")
        with pytest.raises(io.UnsupportedOperation):
            GuestStream(ctx, Slot.STDERR).read(1)

    def test_closing_view_keeps_backend_open(self):
        ctx = IoContext.deterministic()
        stream = GuestStream(ctx, Slot.STDOUT)
        stream.close()
        assert ctx.stdout.closed is False

    def test_text_view(self):
        ctx = IoContext.deterministic().set_stdin_bytes("línea 1\nlínea 2\n".encode("utf-8"))
        text = open_guest_text(ctx, Slot.STDIN)
        assert text.readline() == "línea 1\n"
        assert text.readline() == "línea 2\n"
        assert text.readline() == ""


class TestRedirectStdio:

    def test_print_and_input_use_context(self):
        out, err = OutputBuffer(), OutputBuffer()
        ctx = (
            IoContext.deterministic()
            .set_stdin_bytes(b"ada\n")
            .set_stdout_buffer(out, 100)
            .set_stderr_buffer(err, 100)
        )

        with redirect_stdio(ctx):
            name = input()
            print("hello", name)
            print("careful", file=sys.stderr)

        assert out.getvalue() == b"hello ada\n"
        assert err.getvalue() == b"careful\n"

    def test_real_streams_restored(self):
        saved = (sys.stdin, sys.stdout, sys.stderr)
        with redirect_stdio(IoContext.deterministic()):
            assert sys.stdout is not saved[1]
        assert (sys.stdin, sys.stdout, sys.stderr) == saved

    def test_capacity_error_aborts_guest_call(self):
        out = bytearray()
        ctx = IoContext.deterministic().set_stdout_buffer(out, 8)

        with redirect_stdio(ctx):
            sys.stdout.write("fits")
            with pytest.raises(CapacityExceededError) as exc:
                sys.stdout.write("does not fit")

        assert exc.value.slot == "stdout"
        assert out == b"fits"

    def test_frozen_buffer_aborts_guest_call(self):
        err = OutputBuffer().freeze()
        ctx = IoContext.deterministic().set_stderr_buffer(err, 100)

        with redirect_stdio(ctx):
            with pytest.raises(BufferImmutableError):
                sys.stderr.write("x")

        assert err.getvalue() == b""

    def test_streams_restored_after_guest_error(self):
        saved = sys.stdout
        with pytest.raises(RuntimeError):
            with redirect_stdio(IoContext.deterministic()):
                raise RuntimeError("guest crashed")
        assert sys.stdout is saved


class TestHostLoggingIsolation:

    def test_library_logger_has_null_handler(self):
        handlers = logging.getLogger("guestio").handlers
        assert any(isinstance(h, logging.NullHandler) for h in handlers)

    def test_rejected_write_does_not_reach_guest_stderr(self):
        # Fresh interpreter: no host logging configuration and no pytest capture.
        code = textwrap.dedent("""
            import sys
            from guestio import CapacityExceededError, IoContext, OutputBuffer
            from guestio.stdio import redirect_stdio

            err = OutputBuffer()
            ctx = IoContext.deterministic().set_stdout_buffer(bytearray(), 2).set_stderr_buffer(err, 100)
            with redirect_stdio(ctx):
                try:
                    sys.stdout.write("toolong")
                except CapacityExceededError:
                    pass
            sys.__stdout__.write(repr(err.getvalue()))
        """)
        src = os.path.join(os.path.dirname(os.path.dirname(os.path.abspath(__file__))), "src")
        env = {**os.environ, "PYTHONPATH": src + os.pathsep + os.environ.get("PYTHONPATH", "")}
        result = subprocess.run([sys.executable, "-c", code], capture_output=True, text=True, env=env)

        assert result.returncode == 0, result.stderr
        assert result.stdout == "b''"
