"""c3bridge - compile C3 sources for use across an FFI boundary."""

from importlib.metadata import version

from c3bridge.build import C3FFI, Build
from c3bridge.compilation import (
    BuildSession,
    CompilationService,
    create_cached_compilation_service,
    create_compilation_service,
)
from c3bridge.config import C3BridgeSettings, load_settings
from c3bridge.core.errors import (
    C3BridgeError,
    CompilationFailed,
    ConfigError,
    DuplicateOutputPath,
    EmptySourceSet,
    PathNotFound,
    SpawnError,
    ToolchainNotFound,
    ToolchainVersionUnsupported,
)
from c3bridge.models import (
    Artifact,
    CompilationRequest,
    CompiledOutput,
    CompileOptions,
    Diagnostic,
    ExportMode,
    LinkingMode,
    OptimizationLevel,
    OptimizationProfile,
    OutputKind,
    Severity,
)
from c3bridge.toolchain import host_target, to_c3_target


__version__ = version("c3bridge")

__all__ = [
    "Artifact",
    "Build",
    "BuildSession",
    "C3BridgeError",
    "C3BridgeSettings",
    "C3FFI",
    "CompilationFailed",
    "CompilationRequest",
    "CompilationService",
    "CompileOptions",
    "CompiledOutput",
    "ConfigError",
    "Diagnostic",
    "DuplicateOutputPath",
    "EmptySourceSet",
    "ExportMode",
    "LinkingMode",
    "OptimizationLevel",
    "OptimizationProfile",
    "OutputKind",
    "PathNotFound",
    "Severity",
    "SpawnError",
    "ToolchainNotFound",
    "ToolchainVersionUnsupported",
    "__version__",
    "create_cached_compilation_service",
    "create_compilation_service",
    "host_target",
    "load_settings",
    "to_c3_target",
]
