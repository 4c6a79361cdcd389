"""Compilation pipeline for C3 sources."""

from .artifact_registry import ArtifactRegistry
from .compilation_cache import CompilationCache, create_compilation_cache
from .compilation_service import (
    CompilationService,
    create_cached_compilation_service,
    create_compilation_service,
)
from .diagnostic_parser import DiagnosticParser, create_diagnostic_parser
from .directives import emit_directives, linkage_for, render_directives
from .invocation_builder import (
    C3C_FLAGS,
    InvocationBuilder,
    create_invocation_builder,
    expected_output,
)
from .process_runner import LoggerOutputMiddleware, ProcessRunner, create_process_runner
from .session import BuildSession
from .source_resolver import SourceSetResolver, create_source_resolver


__all__ = [
    "C3C_FLAGS",
    "ArtifactRegistry",
    "BuildSession",
    "CompilationCache",
    "CompilationService",
    "DiagnosticParser",
    "InvocationBuilder",
    "LoggerOutputMiddleware",
    "ProcessRunner",
    "SourceSetResolver",
    "create_cached_compilation_service",
    "create_compilation_cache",
    "create_compilation_service",
    "create_diagnostic_parser",
    "create_invocation_builder",
    "create_process_runner",
    "create_source_resolver",
    "emit_directives",
    "expected_output",
    "linkage_for",
    "render_directives",
]
