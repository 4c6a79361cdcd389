"""Protocol definition for compiler process execution."""

from typing import Any, Protocol, runtime_checkable

from c3bridge.models.invocation import ExecutionResult, Invocation


@runtime_checkable
class ProcessRunnerProtocol(Protocol):
    """Protocol for running one toolchain invocation."""

    def run(self, invocation: Invocation, middleware: Any | None = None) -> ExecutionResult:
        """Run the invocation to completion.

        Args:
            invocation: Argument vector, working directory and env overrides
            middleware: Optional extra output middleware for this run

        Returns:
            The finished process's exit code, output and duration. A non-zero
            exit code is a normal result, not an error.

        Raises:
            SpawnError: If the process cannot be started or is killed
        """
        ...
