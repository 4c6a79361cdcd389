"""Compiler process runner."""

import logging
import os
import subprocess
import time
from collections.abc import Mapping, Sequence
from typing import Any, cast

from c3bridge.config.settings import DEFAULT_ENV_ALLOWLIST
from c3bridge.core.errors import SpawnError
from c3bridge.models.invocation import ExecutionResult, Invocation
from c3bridge.utils import stream_process
from c3bridge.utils.stream_process import ChainedMiddleware, OutputMiddleware


logger = logging.getLogger(__name__)


class LoggerOutputMiddleware(OutputMiddleware[str]):
    """Log compiler output as it streams in.

    stdout lines are logged at DEBUG, stderr lines at WARNING.
    """

    def __init__(
        self, logger: logging.Logger, stdout_prefix: str = "", stderr_prefix: str = ""
    ) -> None:
        self.logger = logger
        self.stdout_prefix = stdout_prefix
        self.stderr_prefix = stderr_prefix

    def process(self, line: str, stream_type: str) -> str:
        if stream_type == "stdout":
            self.logger.debug("%s%s", self.stdout_prefix, line)
        else:
            self.logger.warning("%s%s", self.stderr_prefix, line)
        return line


class ProcessRunner:
    """Run one toolchain invocation as a subprocess.

    The child sees only allow-listed variables from our environment plus the
    invocation's own overrides, so builds do not depend on whatever happens to
    be exported in a developer's shell.
    """

    def __init__(
        self,
        env_allowlist: Sequence[str] = DEFAULT_ENV_ALLOWLIST,
        middleware: OutputMiddleware[str] | None = None,
        base_environ: Mapping[str, str] | None = None,
    ) -> None:
        """Initialize process runner.

        Args:
            env_allowlist: Names of ambient variables passed to the child
            middleware: Output middleware applied to every run
            base_environ: Environment to filter (defaults to os.environ)
        """
        self.env_allowlist = tuple(env_allowlist)
        self.middleware = middleware or LoggerOutputMiddleware(logger)
        self._base_environ = base_environ
        self.logger = logging.getLogger(f"{__name__}.{self.__class__.__name__}")

    def build_environment(self, invocation: Invocation) -> dict[str, str]:
        """Compose the child environment: allow-listed ambient vars + overrides."""
        source = os.environ if self._base_environ is None else self._base_environ
        env = {name: source[name] for name in self.env_allowlist if name in source}
        env.update(invocation.env)
        return env

    def run(
        self,
        invocation: Invocation,
        middleware: OutputMiddleware[str] | None = None,
    ) -> ExecutionResult:
        """Execute the invocation and capture its output.

        Args:
            invocation: Command line, working directory and env overrides
            middleware: Extra middleware chained after the runner's own

        Returns:
            ExecutionResult; a non-zero exit code is returned, not raised

        Raises:
            SpawnError: If the executable cannot be started, or the process
                was terminated by a signal
        """
        env = self.build_environment(invocation)
        chain: OutputMiddleware[str] = self.middleware
        if middleware is not None:
            chain = ChainedMiddleware([self.middleware, middleware])

        self.logger.debug("Running: %s", invocation.command_line)
        started = time.monotonic()

        try:
            return_code, stdout_lines, stderr_lines = stream_process.run_command(
                list(invocation.argv),
                cast(OutputMiddleware[Any], chain),
                cwd=invocation.cwd,
                env=env,
            )
        except (OSError, subprocess.SubprocessError) as e:
            self.logger.error("Failed to start %s: %s", invocation.executable, e)
            raise SpawnError(
                f"Failed to start {invocation.executable}: {e}",
                command=invocation.argv,
                cause=e,
            ) from e

        duration = time.monotonic() - started

        if return_code < 0:
            self.logger.error(
                "%s was terminated by signal %d", invocation.executable, -return_code
            )
            raise SpawnError(
                f"{invocation.executable} was terminated by signal {-return_code}",
                command=invocation.argv,
            )

        self.logger.debug(
            "%s exited with code %d in %.2fs",
            invocation.executable,
            return_code,
            duration,
        )
        return ExecutionResult(
            exit_code=return_code,
            stdout="\n".join(stdout_lines),
            stderr="\n".join(stderr_lines),
            duration_seconds=duration,
        )


def create_process_runner(
    extra_env_allowlist: Sequence[str] = (),
    middleware: OutputMiddleware[str] | None = None,
) -> ProcessRunner:
    """Factory function to create a process runner.

    Args:
        extra_env_allowlist: Variables passed through in addition to the defaults
        middleware: Output middleware applied to every run

    Returns:
        Configured ProcessRunner
    """
    allowlist = DEFAULT_ENV_ALLOWLIST + tuple(
        name for name in extra_env_allowlist if name not in DEFAULT_ENV_ALLOWLIST
    )
    return ProcessRunner(env_allowlist=allowlist, middleware=middleware)
