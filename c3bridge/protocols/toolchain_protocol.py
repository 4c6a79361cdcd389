"""Protocol definition for toolchain discovery."""

from pathlib import Path
from typing import Protocol, runtime_checkable

from c3bridge.models.toolchain import ToolchainInfo


@runtime_checkable
class ToolchainLocatorProtocol(Protocol):
    """Protocol for locating a c3c compiler."""

    def locate(self, preferred_path: Path | str | None = None) -> ToolchainInfo:
        """Find and validate a compiler.

        Args:
            preferred_path: Explicit compiler path overriding discovery

        Returns:
            The located toolchain

        Raises:
            ToolchainNotFound: If no candidate answers a version query
            ToolchainVersionUnsupported: If candidates are too old
        """
        ...
