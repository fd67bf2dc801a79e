"""Tests for DeterministicPreset."""

import pytest
from unittest.mock import patch

from guestio import DeterministicPreset, IoContext, build_deterministic_ctx
from guestio.errors import CapacityExceededError, NonDeterministicBackendError
from guestio.streams import BoundedSink, FileSource, MemorySource, OutputBuffer


def _guest_program(ctx: IoContext) -> None:
    """A fixed sequence of guest stream operations."""
    data = ctx.read_stdin()
    ctx.write_stdout(b"read " + str(len(data)).encode() + b" bytes\n")
    ctx.write_stderr(b"warning: nothing to do\n")
    ctx.write_stdout(data.upper())
    try:
        ctx.write_stdout(b"x" * 64)
    except CapacityExceededError:
        ctx.write_stderr(b"stdout full\n")


class TestDeterministicPreset:

    def test_default_layout(self):
        ctx = DeterministicPreset().build()
        assert isinstance(ctx.stdin, MemorySource)
        assert isinstance(ctx.stdout, BoundedSink)
        assert isinstance(ctx.stderr, BoundedSink)
        assert ctx.read_stdin() == b""
        assert ctx.is_deterministic is True

    def test_fresh_buffers_per_build(self):
        preset = DeterministicPreset()
        a, b = preset.build(), preset.build()
        a.write_stdout(b"only a")
        assert b.stdout.getvalue() == b""
        assert a.stdout.buffer is not b.stdout.buffer

    def test_two_builds_produce_identical_captures(self):
        runs = []
        for _ in range(2):
            ctx = DeterministicPreset(stdin=b"abc", capacity=32, stderr_capacity=64).build()
            _guest_program(ctx)
            runs.append((ctx.stdout.getvalue(), ctx.stderr.getvalue()))

        assert runs[0] == runs[1]
        assert runs[0][0] == b"read 3 bytes\nABC"
        assert runs[0][1] == b"warning: nothing to do\nstdout full\n"

    def test_build_does_not_touch_clock_or_entropy(self):
        with patch("time.time", side_effect=AssertionError("clock read")), \
             patch("os.urandom", side_effect=AssertionError("entropy read")), \
             patch("os.getpid", side_effect=AssertionError("pid read")), \
             patch("socket.gethostname", side_effect=AssertionError("hostname read")), \
             patch("builtins.open", side_effect=AssertionError("filesystem access")):
            ctx = DeterministicPreset(stdin="fixed").build()
        _guest_program(ctx)
        assert ctx.stdout.getvalue().startswith(b"read 5 bytes\n")

    def test_fixed_stdin_and_capacities(self):
        ctx = DeterministicPreset(stdin="seed", capacity=4, stderr_capacity=2).build()
        assert ctx.read_stdin() == b"seed"
        assert ctx.stdout.capacity == 4
        assert ctx.stderr.capacity == 2

    def test_negative_capacity_rejected(self):
        with pytest.raises(ValueError):
            DeterministicPreset(capacity=-1)
        with pytest.raises(ValueError):
            DeterministicPreset(stderr_capacity=-5)

    def test_non_deterministic_backend_is_refused(self, tmp_path):
        path = tmp_path / "stdin.txt"
        path.write_bytes(b"host data")

        preset = DeterministicPreset()
        preset.stdin_factory = lambda: FileSource(path)

        with pytest.raises(NonDeterministicBackendError) as exc:
            preset.build()
        assert exc.value.slot == "stdin"
        assert exc.value.backend.closed is True

    def test_custom_non_deterministic_sink_is_refused(self):
        class UnflaggedSink:
            kind = "custom"
            direction = BoundedSink.direction
            deterministic = False
            closed = False

            def write(self, data):
                return len(data)

            def flush(self):
                pass

            def close(self):
                self.closed = True

        preset = DeterministicPreset()
        preset.stderr_factory = UnflaggedSink
        with pytest.raises(NonDeterministicBackendError) as exc:
            preset.build()
        assert exc.value.slot == "stderr"

    def test_helpers_match_preset(self):
        for ctx in (build_deterministic_ctx(), IoContext.deterministic()):
            assert ctx.is_deterministic is True
            assert isinstance(ctx.stdout.buffer, OutputBuffer)


class TestPresetFromConfig:

    def test_from_config(self, monkeypatch):
        monkeypatch.setenv("GUESTIO_DEFAULT_CAPACITY", "16")
        monkeypatch.setenv("GUESTIO_DETERMINISTIC_STDIN", "configured")
        from guestio.config.config import load_config

        preset = DeterministicPreset.from_config(load_config())
        ctx = preset.build()
        assert ctx.read_stdin() == b"configured"
        assert ctx.stdout.capacity == 16
