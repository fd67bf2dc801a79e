import sys
import argparse
import runpy

from guestio.config.config import GuestIOConfig, load_config
from guestio.context import IoContext
from guestio.deterministic import DeterministicPreset
from guestio.errors import GuestIOError
from guestio.logging.diagnostic import configure_logging, diagnostic_logger as diag
from guestio.stdio import redirect_stdio
from guestio.streams.bounded import BoundedSink


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(prog="guestio", description="Run a Python script with virtualized stdio")
    parser.add_argument("script", type=str, help="Python script to run as the guest")
    stdin = parser.add_mutually_exclusive_group()
    stdin.add_argument("--stdin-file", type=str, help="Read guest stdin from this file")
    stdin.add_argument("--stdin-text", type=str, help="Use this text as guest stdin")
    parser.add_argument("--stdout-file", type=str, help="Write guest stdout to this file (truncated)")
    parser.add_argument("--stderr-file", type=str, help="Write guest stderr to this file (truncated)")
    parser.add_argument("--capacity", type=int, default=None, help="Byte capacity of captured stdout/stderr")
    return parser


def configure_context(args: argparse.Namespace, config: GuestIOConfig) -> IoContext:
    preset = DeterministicPreset.from_config(config)
    if args.capacity is not None:
        preset = DeterministicPreset(stdin=preset.stdin, capacity=args.capacity)
    ctx = preset.build()
    if args.stdin_file:
        ctx.set_stdin_file(args.stdin_file)
    elif args.stdin_text is not None:
        ctx.set_stdin_bytes(args.stdin_text)
    if args.stdout_file:
        ctx.set_stdout_file(args.stdout_file)
    if args.stderr_file:
        ctx.set_stderr_file(args.stderr_file)
    return ctx


def run_guest(script: str, ctx: IoContext) -> int:
    exit_code = 0
    with redirect_stdio(ctx):
        try:
            runpy.run_path(script, run_name="__main__")
        except SystemExit as e:
            code = e.code
            exit_code = code if isinstance(code, int) else (0 if code is None else 1)
        except GuestIOError as e:
            diag.error(f"guest stream failure: {e}")
            exit_code = 1
    return exit_code


def emit_captures(ctx: IoContext) -> None:
    for backend, real in ((ctx.stdout, sys.stdout), (ctx.stderr, sys.stderr)):
        if isinstance(backend, BoundedSink):
            real.buffer.write(backend.getvalue())
            real.flush()


def main(argv=None) -> int:
    args = build_parser().parse_args(argv)
    try:
        config = load_config()
        configure_logging(config.log_level)
        ctx = configure_context(args, config)
    except (GuestIOError, ValueError) as e:
        sys.stderr.write(f"Fatal: {e}\n")
        return 1

    with ctx.handoff() as guest_ctx:
        exit_code = run_guest(args.script, guest_ctx)
        emit_captures(guest_ctx)
    return exit_code


if __name__ == "__main__":
    sys.exit(main())
