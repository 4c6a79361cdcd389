"""Domain models for c3bridge."""

from c3bridge.models.artifacts import (
    Artifact,
    CompiledOutput,
    LinkageDirective,
    LinkKind,
)
from c3bridge.models.base import C3BridgeBaseModel, FrozenModel
from c3bridge.models.diagnostics import Diagnostic, DiagnosticSource, Severity
from c3bridge.models.invocation import ExecutionResult, Invocation
from c3bridge.models.request import (
    CompilationRequest,
    CompileOptions,
    ExportMode,
    LinkingMode,
    OptimizationLevel,
    OptimizationProfile,
    OutputKind,
)
from c3bridge.models.toolchain import ToolchainInfo, ToolchainVersion


__all__ = [
    "Artifact",
    "C3BridgeBaseModel",
    "CompilationRequest",
    "CompileOptions",
    "CompiledOutput",
    "Diagnostic",
    "DiagnosticSource",
    "ExecutionResult",
    "ExportMode",
    "FrozenModel",
    "Invocation",
    "LinkKind",
    "LinkageDirective",
    "LinkingMode",
    "OptimizationLevel",
    "OptimizationProfile",
    "OutputKind",
    "Severity",
    "ToolchainInfo",
    "ToolchainVersion",
]
