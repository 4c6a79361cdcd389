"""Fluent build-script API for compiling C3 sources into host-linkable libraries.

Typical use from a host build script::

    from c3bridge import Build

    Build().file("extern/thing.c3").optimization("release").compile("thing")

``compile`` prints linkage directives (cargo format by default) and exits the
script with status 1 on failure; ``try_compile`` raises instead.
"""

import os
import sys
import threading
from collections.abc import Iterable, Mapping
from pathlib import Path
from typing import TextIO, TypeVar

from c3bridge.compilation.compilation_service import (
    CompilationService,
    create_cached_compilation_service,
)
from c3bridge.compilation.directives import emit_directives
from c3bridge.compilation.session import BuildSession
from c3bridge.config.loader import load_settings
from c3bridge.config.settings import DIRECTIVE_FORMATS, C3BridgeSettings
from c3bridge.core.errors import C3BridgeError, CompilationFailed, ConfigError
from c3bridge.core.structlog_logger import get_struct_logger
from c3bridge.models.artifacts import CompiledOutput
from c3bridge.models.request import (
    CompileOptions,
    ExportMode,
    LinkingMode,
    OptimizationLevel,
    OptimizationProfile,
    OutputKind,
)
from c3bridge.toolchain.locator import create_toolchain_locator


logger = get_struct_logger(__name__)

T = TypeVar("T")

# (compiler_path, min_version) -> session shared by Builds without their own
_shared_sessions: dict[tuple[Path | None, str], BuildSession] = {}
_shared_sessions_lock = threading.Lock()


def shared_session(settings: C3BridgeSettings) -> BuildSession:
    """Process-wide build session for the toolchain ``settings`` select.

    Every ``Build`` created without an explicit session uses this one, so the
    toolchain is located once per build script and two builders writing the
    same artifact collide with ``DuplicateOutputPath``.
    """
    key = (settings.compiler_path, settings.min_version)
    with _shared_sessions_lock:
        session = _shared_sessions.get(key)
        if session is None:
            session = BuildSession(create_toolchain_locator(settings))
            _shared_sessions[key] = session
        return session


def _add_unique(items: list[T], value: T) -> None:
    if value not in items:
        items.append(value)


class Build:
    """Builder for one C3 library (alias: ``C3FFI``).

    Defaults: static library, debug profile (``-O0`` with debug info), every
    symbol exported, output to the configured directory, else ``$OUT_DIR``,
    else ``./build``. Adders ignore values that were already added.
    """

    def __init__(
        self,
        settings: C3BridgeSettings | None = None,
        service: CompilationService | None = None,
        session: BuildSession | None = None,
    ) -> None:
        self._settings = settings
        self._service = service
        self._session = session
        self._compiler: Path | None = None
        self._output_kind = OutputKind.STATIC
        self._optimization = OptimizationProfile.DEBUG
        self._opt_level: OptimizationLevel | None = None
        self._debug_info: bool | None = None
        self._target: str | None = None
        self._inputs: list[Path] = []
        self._defines: list[str] = []
        self._include_paths: list[Path] = []
        self._c3_libs: list[str] = []
        self._link_search_paths: list[Path] = []
        self._link_libs: list[str] = []
        self._linker_args: list[str] = []
        self._extra_args: list[str] = []
        self._environment: dict[str, str] = {}
        self._export_mode = ExportMode.ALL
        self._output_dir: Path | None = None
        self._working_dir: Path | None = None
        self._directive_format: str | None = None
        self._use_cache = True

    @property
    def settings(self) -> C3BridgeSettings:
        if self._settings is None:
            self._settings = load_settings()
        return self._settings

    @property
    def service(self) -> CompilationService:
        if self._service is None:
            self._service = create_cached_compilation_service(
                self.settings, session=self._session or shared_session(self.settings)
            )
        return self._service

    # Toolchain and output

    def compiler(self, path: Path | str) -> "Build":
        """Use this c3c executable instead of searching for one."""
        self._compiler = Path(path)
        return self

    def linking_mode(self, mode: LinkingMode | str) -> "Build":
        self._output_kind = LinkingMode(mode).to_output_kind()
        return self

    def output_kind(self, kind: OutputKind | str) -> "Build":
        self._output_kind = OutputKind(kind)
        return self

    def output_dir(self, directory: Path | str) -> "Build":
        self._output_dir = Path(directory)
        return self

    def working_dir(self, directory: Path | str) -> "Build":
        """Directory relative inputs are resolved against and c3c runs in."""
        self._working_dir = Path(directory)
        return self

    def target(self, target: str) -> "Build":
        """Cross-compile for ``target`` (a c3c target or an LLVM/Rust triple)."""
        self._target = target
        return self

    def optimization(self, profile: OptimizationProfile | str) -> "Build":
        self._optimization = OptimizationProfile(profile)
        return self

    def optimization_level(self, level: OptimizationLevel | str) -> "Build":
        self._opt_level = OptimizationLevel(level)
        return self

    def debug_info(self, enabled: bool) -> "Build":
        self._debug_info = enabled
        return self

    def export_mode(self, mode: ExportMode | str) -> "Build":
        self._export_mode = ExportMode(mode)
        return self

    def directive_format(self, fmt: str) -> "Build":
        """Linkage directive format printed by ``compile``: cargo, flags or json.

        Raises:
            ConfigError: If the format is unknown
        """
        fmt = fmt.strip().lower()
        if fmt not in DIRECTIVE_FORMATS:
            raise ConfigError(
                f"Unknown directive format {fmt!r}, expected one of {list(DIRECTIVE_FORMATS)}"
            )
        self._directive_format = fmt
        return self

    def cache(self, enabled: bool) -> "Build":
        self._use_cache = enabled
        return self

    # Sources

    def file(self, path: Path | str) -> "Build":
        _add_unique(self._inputs, Path(path))
        return self

    def files(self, paths: Iterable[Path | str]) -> "Build":
        for path in paths:
            self.file(path)
        return self

    def directory(self, path: Path | str) -> "Build":
        """Compile every ``.c3``/``.c3i`` file below ``path``."""
        return self.file(path)

    # Compiler options

    def define(self, name: str) -> "Build":
        _add_unique(self._defines, name)
        return self

    def defines(self, names: Iterable[str]) -> "Build":
        for name in names:
            self.define(name)
        return self

    feature = define
    features = defines

    def include_path(self, path: Path | str) -> "Build":
        """Add a C3 library search directory (``--libdir``)."""
        _add_unique(self._include_paths, Path(path))
        return self

    def include_paths(self, paths: Iterable[Path | str]) -> "Build":
        for path in paths:
            self.include_path(path)
        return self

    c3_lib_dir = include_path
    c3_lib_dirs = include_paths

    def c3_lib(self, name: str) -> "Build":
        """Link a C3 library found in the library directories (``--lib``)."""
        _add_unique(self._c3_libs, str(name))
        return self

    def c3_libs(self, names: Iterable[str]) -> "Build":
        for name in names:
            self.c3_lib(name)
        return self

    def compiled_lib_dir(self, path: Path | str) -> "Build":
        """Add a native library search directory (``-L``)."""
        _add_unique(self._link_search_paths, Path(path))
        return self

    def compiled_lib_dirs(self, paths: Iterable[Path | str]) -> "Build":
        for path in paths:
            self.compiled_lib_dir(path)
        return self

    def compiled_lib(self, name: str) -> "Build":
        """Link a native library (``-l``)."""
        _add_unique(self._link_libs, str(name))
        return self

    def compiled_libs(self, names: Iterable[str]) -> "Build":
        for name in names:
            self.compiled_lib(name)
        return self

    def linker_argument(self, argument: str) -> "Build":
        """Pass an argument through to the linker (``-z``)."""
        _add_unique(self._linker_args, argument)
        return self

    def linker_arguments(self, arguments: Iterable[str]) -> "Build":
        for argument in arguments:
            self.linker_argument(argument)
        return self

    def arg(self, argument: str) -> "Build":
        """Append a raw c3c argument after the sources."""
        _add_unique(self._extra_args, argument)
        return self

    def args(self, arguments: Iterable[str]) -> "Build":
        for argument in arguments:
            self.arg(argument)
        return self

    def environment_variable(self, name: str, value: str) -> "Build":
        """Set an environment variable for the compiler process."""
        self._environment[name] = value
        return self

    def environment_variables(
        self, variables: Mapping[str, str] | Iterable[tuple[str, str]]
    ) -> "Build":
        items = variables.items() if isinstance(variables, Mapping) else variables
        for name, value in items:
            self.environment_variable(name, value)
        return self

    # Compilation

    def options(self, name: str) -> CompileOptions:
        """Snapshot the current configuration as compile options for ``name``."""
        return CompileOptions(
            output_dir=self._output_dir or self.settings.default_output_dir(),
            output_name=name,
            output_kind=self._output_kind,
            target=self._target or os.environ.get("TARGET"),
            optimization=self._optimization,
            opt_level=self._opt_level,
            debug_info=self._debug_info,
            defines=tuple(self._defines),
            include_paths=tuple(self._include_paths),
            c3_libs=tuple(self._c3_libs),
            link_search_paths=tuple(self._link_search_paths),
            link_libs=tuple(self._link_libs),
            linker_args=tuple(self._linker_args),
            export_mode=self._export_mode,
            extra_args=tuple(self._extra_args),
            environment=dict(self._environment),
            working_dir=self._working_dir,
        )

    def try_compile(self, name: str) -> CompiledOutput:
        """Compile the configured sources into library ``name``.

        Raises:
            C3BridgeError: On any failure, see :mod:`c3bridge.core.errors`
        """
        return self.service.compile(
            self._inputs,
            self.options(name),
            compiler_path=self._compiler,
            use_cache=self._use_cache,
        )

    def compile(
        self,
        name: str,
        stdout: TextIO | None = None,
        stderr: TextIO | None = None,
    ) -> CompiledOutput:
        """Compile and print linkage directives, exiting the script on failure.

        Raises:
            SystemExit: With status 1 after printing the failure to stderr
        """
        stderr = stderr or sys.stderr
        try:
            output = self.try_compile(name)
        except C3BridgeError as e:
            logger.error("build_failed", name=name, error=str(e))
            report_failure(e, stderr)
            raise SystemExit(1) from e

        fmt = self._directive_format or self.settings.directive_format
        emit_directives(output, fmt, stdout)
        return output


def report_failure(error: C3BridgeError, stream: TextIO) -> None:
    """Print an error and any compiler diagnostics it carries."""
    print(f"error: {error}", file=stream)
    if isinstance(error, CompilationFailed):
        for diagnostic in error.diagnostics:
            print(diagnostic.format(), file=stream)
    stream.flush()


C3FFI = Build
