from .errors import (
    C3BridgeError,
    CompilationFailed,
    ConfigError,
    DuplicateOutputPath,
    EmptySourceSet,
    PathNotFound,
    ResolutionError,
    SpawnError,
    ToolchainError,
    ToolchainNotFound,
    ToolchainVersionUnsupported,
)
from .logging import setup_logging


__all__ = [
    "setup_logging",
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
