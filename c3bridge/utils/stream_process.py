"""Process execution and streaming output handling.

This module runs subprocesses and drains their stdout and stderr concurrently,
one reader thread per stream, so a compiler that floods one pipe never blocks
on a full buffer while we wait on the other. Each line passes through an
``OutputMiddleware`` for real-time processing.

Example:
    ```python
    from c3bridge.utils.stream_process import run_command, DefaultOutputMiddleware

    return_code, stdout, stderr = run_command(
        ["c3c", "--version"], middleware=DefaultOutputMiddleware()
    )
    ```
"""

import shlex
import subprocess
from collections.abc import Mapping, Sequence
from pathlib import Path
from threading import Thread
from typing import IO, Generic, TypeAlias, TypeVar, cast


T = TypeVar("T")  # Type of processed output

# Type alias for the result of run_command
ProcessResult: TypeAlias = tuple[int, list[T], list[T]]  # (return_code, stdout, stderr)


class OutputMiddleware(Generic[T]):
    """Base class for processing command output streams.

    Implementations can format, filter, or transform output lines. Type
    parameter T is the return type of ``process``; returning None drops the
    line from the captured output.
    """

    def process(self, line: str, stream_type: str) -> T:
        """Process a line of output from a subprocess stream.

        Args:
            line: A line of text from the process output
            stream_type: Either "stdout" or "stderr"

        Returns:
            Processed output of type T
        """
        raise NotImplementedError()


class PassthroughMiddleware(OutputMiddleware[str]):
    """Capture lines unchanged without printing them."""

    def process(self, line: str, stream_type: str) -> str:
        return line


class DefaultOutputMiddleware(OutputMiddleware[str]):
    """Simple middleware that prints output with optional prefixes."""

    def __init__(self, stdout_prefix: str = "", stderr_prefix: str = "ERROR: ") -> None:
        self.stdout_prefix = stdout_prefix
        self.stderr_prefix = stderr_prefix

    def process(self, line: str, stream_type: str) -> str:
        prefix = self.stdout_prefix if stream_type == "stdout" else self.stderr_prefix
        print(f"{prefix}{line}")
        return line


class ChainedMiddleware(OutputMiddleware[str]):
    """Feed each line through several middlewares in order.

    The output of one middleware is the input of the next. A middleware
    returning None stops the chain for that line.
    """

    def __init__(self, middlewares: Sequence[OutputMiddleware[str]]) -> None:
        self.middlewares = list(middlewares)

    def process(self, line: str, stream_type: str) -> str:
        current: str | None = line
        for middleware in self.middlewares:
            if current is None:
                break
            current = middleware.process(current, stream_type)
        return cast(str, current)


def create_chained_middleware(
    middlewares: Sequence[OutputMiddleware[str]],
) -> ChainedMiddleware:
    """Factory function to chain several middlewares."""
    return ChainedMiddleware(middlewares)


def run_command(
    cmd: str | Sequence[str],
    middleware: OutputMiddleware[T] | None = None,
    cwd: Path | str | None = None,
    env: Mapping[str, str] | None = None,
) -> ProcessResult[T]:
    """Run a command and process its output through middleware.

    Args:
        cmd: Command to run, either as a string or list of arguments
        middleware: Optional middleware for processing output (uses
            DefaultOutputMiddleware if None)
        cwd: Working directory for the process
        env: Complete environment for the process; None inherits ours

    Returns:
        Tuple containing:
            - Return code from the process (0 for success, negative when
              killed by a signal on POSIX)
            - List of processed stdout lines
            - List of processed stderr lines

    Raises:
        OSError: If the executable cannot be started
    """
    if middleware is None:
        # Cast is needed because T is unbound at this point
        middleware = cast(OutputMiddleware[T], DefaultOutputMiddleware())

    if isinstance(cmd, str):
        cmd = shlex.split(cmd)

    process = subprocess.Popen(
        list(cmd),
        stdout=subprocess.PIPE,
        stderr=subprocess.PIPE,
        stdin=subprocess.DEVNULL,
        text=True,
        encoding="utf-8",
        errors="replace",
        bufsize=1,
        cwd=str(cwd) if cwd is not None else None,
        env=dict(env) if env is not None else None,
    )

    def stream_output(stream: IO[str], stream_type: str, captured: list[T]) -> None:
        for line in iter(stream.readline, ""):
            processed = middleware.process(line.rstrip("\r\n"), stream_type)
            if processed is not None:
                captured.append(processed)
        stream.close()

    stdout_lines: list[T] = []
    stderr_lines: list[T] = []

    stdout_thread = Thread(
        target=stream_output,
        args=(process.stdout, "stdout", stdout_lines),
        daemon=True,
    )
    stderr_thread = Thread(
        target=stream_output,
        args=(process.stderr, "stderr", stderr_lines),
        daemon=True,
    )

    stdout_thread.start()
    stderr_thread.start()

    return_code = process.wait()

    stdout_thread.join()
    stderr_thread.join()

    return return_code, stdout_lines, stderr_lines
