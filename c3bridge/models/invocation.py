"""Process invocation and execution result models."""

import shlex
from pathlib import Path

from pydantic import Field

from c3bridge.models.base import FrozenModel


class Invocation(FrozenModel):
    """A concrete command line for one toolchain run."""

    argv: tuple[str, ...]
    cwd: Path | None = None
    env: dict[str, str] = Field(default_factory=dict)

    @property
    def executable(self) -> str:
        return self.argv[0]

    @property
    def command_line(self) -> str:
        """Shell-quoted rendering for logs."""
        return shlex.join(self.argv)


class ExecutionResult(FrozenModel):
    """Outcome of one finished compiler process."""

    exit_code: int
    stdout: str = ""
    stderr: str = ""
    duration_seconds: float = Field(default=0.0, ge=0)

    @property
    def succeeded(self) -> bool:
        return self.exit_code == 0
