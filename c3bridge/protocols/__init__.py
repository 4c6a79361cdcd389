"""Protocol definitions for c3bridge components.

These use ``typing.Protocol`` with ``@runtime_checkable`` so test doubles can
be swapped in for the real process runner or toolchain locator.
"""

from .process_runner_protocol import ProcessRunnerProtocol
from .toolchain_protocol import ToolchainLocatorProtocol


__all__ = [
    "ProcessRunnerProtocol",
    "ToolchainLocatorProtocol",
]
