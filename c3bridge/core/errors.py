"""Exception hierarchy for c3bridge.

Every error raised by the compilation pipeline derives from
:class:`C3BridgeError`. None of them are retried internally: a host build
script is expected to fail loudly on any of them.
"""

from collections.abc import Sequence
from pathlib import Path
from typing import TYPE_CHECKING, Any


if TYPE_CHECKING:
    from c3bridge.models.diagnostics import Diagnostic


class C3BridgeError(Exception):
    """Base exception for all c3bridge errors."""

    def __init__(self, message: str, context: dict[str, Any] | None = None) -> None:
        super().__init__(message)
        self.message = message
        self.context: dict[str, Any] = context or {}

    def __str__(self) -> str:
        return self.message


class ConfigError(C3BridgeError):
    """Raised when configuration files or settings are invalid."""


class ToolchainError(C3BridgeError):
    """Base class for toolchain discovery failures."""


class ToolchainNotFound(ToolchainError):
    """No candidate compiler executable answered a version query."""

    def __init__(self, message: str, searched: Sequence[Path] = ()) -> None:
        super().__init__(message, {"searched": [str(p) for p in searched]})
        self.searched = list(searched)


class ToolchainVersionUnsupported(ToolchainError):
    """A compiler was found but reports a version below the supported minimum."""

    def __init__(self, path: Path, version: str, minimum: str) -> None:
        super().__init__(
            f"c3c at {path} reports version {version}, "
            f"minimum supported version is {minimum}",
            {"path": str(path), "version": version, "minimum": minimum},
        )
        self.path = path
        self.version = version
        self.minimum = minimum


class ResolutionError(C3BridgeError):
    """Base class for source set resolution failures."""


class PathNotFound(ResolutionError):
    """An explicitly requested source input does not exist on disk."""

    def __init__(self, path: Path) -> None:
        super().__init__(f"Source path does not exist: {path}", {"path": str(path)})
        self.path = path


class EmptySourceSet(ResolutionError):
    """Resolution produced no compilation inputs."""

    def __init__(self, inputs: Sequence[Path] = ()) -> None:
        super().__init__(
            "No C3 source files to compile",
            {"inputs": [str(p) for p in inputs]},
        )


class SpawnError(C3BridgeError):
    """The compiler process could not be started or ended abnormally."""

    def __init__(
        self,
        message: str,
        command: Sequence[str] = (),
        cause: BaseException | None = None,
    ) -> None:
        super().__init__(message, {"command": list(command)})
        self.command = list(command)
        self.cause = cause


class DuplicateOutputPath(C3BridgeError):
    """Two in-flight compilations target the same artifact path."""

    def __init__(self, path: Path) -> None:
        super().__init__(
            f"Another compilation is already writing to {path}",
            {"path": str(path)},
        )
        self.path = path


class CompilationFailed(C3BridgeError):
    """The compiler rejected the sources; carries every collected diagnostic."""

    def __init__(
        self,
        message: str,
        diagnostics: Sequence["Diagnostic"] = (),
        exit_code: int | None = None,
    ) -> None:
        super().__init__(message, {"exit_code": exit_code})
        self.diagnostics = list(diagnostics)
        self.exit_code = exit_code

    @property
    def errors(self) -> list["Diagnostic"]:
        """Diagnostics with error severity."""
        return [d for d in self.diagnostics if d.is_error]


__all__ = [
    "C3BridgeError",
    "CompilationFailed",
    "ConfigError",
    "DuplicateOutputPath",
    "EmptySourceSet",
    "PathNotFound",
    "ResolutionError",
    "SpawnError",
    "ToolchainError",
    "ToolchainNotFound",
    "ToolchainVersionUnsupported",
]
