"""Compilation orchestration: resolve, build, run, classify, register."""

import sqlite3
from collections.abc import Iterable
from pathlib import Path
from typing import TYPE_CHECKING

import diskcache  # type: ignore[import-untyped]

from c3bridge.compilation.compilation_cache import CompilationCache
from c3bridge.compilation.diagnostic_parser import DiagnosticParser
from c3bridge.compilation.directives import linkage_for
from c3bridge.compilation.invocation_builder import InvocationBuilder
from c3bridge.compilation.process_runner import create_process_runner
from c3bridge.compilation.session import BuildSession
from c3bridge.compilation.source_resolver import SourceSetResolver
from c3bridge.core.errors import CompilationFailed, SpawnError
from c3bridge.core.structlog_logger import (
    get_struct_logger,
    get_struct_logger_with_context,
)
from c3bridge.models.artifacts import Artifact, CompiledOutput
from c3bridge.models.diagnostics import Diagnostic, DiagnosticSource, Severity
from c3bridge.models.invocation import Invocation
from c3bridge.models.request import CompilationRequest, CompileOptions
from c3bridge.protocols.process_runner_protocol import ProcessRunnerProtocol
from c3bridge.utils.build_log_middleware import create_build_log_middleware


if TYPE_CHECKING:
    from c3bridge.config.settings import C3BridgeSettings
    from c3bridge.protocols.toolchain_protocol import ToolchainLocatorProtocol


logger = get_struct_logger(__name__)


def build_log_name(request: CompilationRequest) -> str:
    return f"{request.output_name}.build.log"


class CompilationService:
    """Turn source inputs plus options into one registered artifact.

    Sources are resolved before the toolchain is touched, so a bad input set
    never spawns a process. Every artifact in the session registry comes from
    a zero exit (or a cache hit recorded from one); any other outcome removes
    the output path and raises.
    """

    def __init__(
        self,
        session: BuildSession,
        runner: ProcessRunnerProtocol,
        resolver: SourceSetResolver | None = None,
        builder: InvocationBuilder | None = None,
        parser: DiagnosticParser | None = None,
        cache: CompilationCache | None = None,
        build_log: bool = False,
    ) -> None:
        """Initialize the compilation service.

        Args:
            session: Build session holding toolchain state and the registry
            runner: Process runner used for compiler invocations
            resolver: Source set resolver
            builder: Invocation builder
            parser: Diagnostic parser
            cache: Optional compilation cache; None disables caching
            build_log: Tee compiler output to ``<output_dir>/<name>.build.log``
        """
        self.session = session
        self.runner = runner
        self.resolver = resolver or SourceSetResolver()
        self.builder = builder or InvocationBuilder()
        self.parser = parser or DiagnosticParser()
        self.cache = cache
        self.build_log = build_log

    def compile(
        self,
        inputs: Iterable[Path | str],
        options: CompileOptions,
        compiler_path: Path | str | None = None,
        use_cache: bool = True,
    ) -> CompiledOutput:
        """Compile ``inputs`` into the artifact described by ``options``.

        Args:
            inputs: Source files and directories
            options: Output kind, location and compiler options
            compiler_path: Compiler override for this compilation
            use_cache: Consult and update the compilation cache

        Returns:
            The registered artifact with its diagnostics and linkage

        Raises:
            PathNotFound, EmptySourceSet: If the inputs do not resolve
            ToolchainNotFound, ToolchainVersionUnsupported: If no usable c3c
            DuplicateOutputPath: If the output path is already being written
            SpawnError: If c3c cannot be started or is killed
            CompilationFailed: If c3c rejects the sources
        """
        sources = self.resolver.resolve(inputs, base_dir=options.working_dir)

        request = options.with_sources(sources)
        toolchain = self.session.toolchains.get(compiler_path)
        invocation = self.builder.build(request, toolchain)
        output_path = self.builder.expected_output(request)

        log = get_struct_logger_with_context(
            __name__, library=request.output_name, kind=request.output_kind.value
        )

        with self.session.claim_output(output_path):
            cache_key = None
            if self.cache is not None and use_cache:
                cache_key = self.cache.key_for(
                    invocation,
                    sources,
                    toolchain=toolchain,
                    library_dirs=request.include_paths,
                )
                cached = self.cache.lookup(cache_key, output_path)
                if cached is not None:
                    log.info("compile_cache_hit", path=str(output_path))
                    return self._register(
                        request, output_path, cached.diagnostics, from_cache=True
                    )

            output_path.parent.mkdir(parents=True, exist_ok=True)
            log.info("compile_started", sources=len(sources), path=str(output_path))

            diagnostics = self._run(request, invocation, output_path)

            if self.cache is not None and cache_key is not None:
                self.cache.store(cache_key, output_path, diagnostics)

            log.info(
                "compile_succeeded",
                path=str(output_path),
                warnings=sum(d.severity is Severity.WARNING for d in diagnostics),
            )
            return self._register(request, output_path, diagnostics, from_cache=False)

    def _run(
        self, request: CompilationRequest, invocation: Invocation, output_path: Path
    ) -> list[Diagnostic]:
        build_log = (
            create_build_log_middleware(request.output_dir, build_log_name(request))
            if self.build_log
            else None
        )
        try:
            result = self.runner.run(invocation, build_log)
        except SpawnError:
            self._discard_output(output_path)
            raise
        finally:
            if build_log is not None:
                build_log.close()

        diagnostics = self.parser.parse_result(result)

        if not result.succeeded:
            self._discard_output(output_path)
            if not any(d.is_error for d in diagnostics):
                diagnostics.append(
                    synthetic_error(f"c3c exited with code {result.exit_code}")
                )
            logger.error(
                "compile_failed",
                name=request.output_name,
                exit_code=result.exit_code,
                errors=sum(d.is_error for d in diagnostics),
            )
            raise CompilationFailed(
                f"Compilation of {request.output_name} failed "
                f"with exit code {result.exit_code}",
                diagnostics,
                exit_code=result.exit_code,
            )

        if not output_path.is_file():
            self.session.registry.discard(output_path)
            diagnostics.append(
                synthetic_error(f"c3c reported success but {output_path} was not produced")
            )
            raise CompilationFailed(
                f"Compilation of {request.output_name} produced no output",
                diagnostics,
                exit_code=result.exit_code,
            )

        return diagnostics

    def _register(
        self,
        request: CompilationRequest,
        output_path: Path,
        diagnostics: Iterable[Diagnostic],
        from_cache: bool,
    ) -> CompiledOutput:
        artifact = self.session.registry.register(
            Artifact(
                kind=request.output_kind,
                path=output_path,
                request=request,
                from_cache=from_cache,
            )
        )
        return CompiledOutput(
            artifact=artifact,
            diagnostics=tuple(diagnostics),
            linkage=linkage_for(request, output_path),
            sources=request.sources,
        )

    def _discard_output(self, output_path: Path) -> None:
        self.session.registry.discard(output_path)
        try:
            output_path.unlink(missing_ok=True)
        except OSError as e:
            logger.warning("partial_output_not_removed", path=str(output_path), error=str(e))


def synthetic_error(message: str) -> Diagnostic:
    return Diagnostic(
        severity=Severity.ERROR,
        message=message,
        source=DiagnosticSource.ERROR,
    )


def create_compilation_service(
    settings: "C3BridgeSettings | None" = None,
    runner: ProcessRunnerProtocol | None = None,
    locator: "ToolchainLocatorProtocol | None" = None,
    cache: CompilationCache | None = None,
    session: BuildSession | None = None,
) -> CompilationService:
    """Factory function to create a compilation service.

    Args:
        settings: Loaded settings; defaults are used when None
        runner: Process runner (allow-listed environment from settings if None)
        locator: Toolchain locator (from settings if None)
        cache: Compilation cache; None means no caching
        session: Existing build session to share

    Returns:
        Configured CompilationService
    """
    from c3bridge.toolchain.locator import create_toolchain_locator

    if session is None:
        session = BuildSession(locator or create_toolchain_locator(settings))
    if runner is None:
        extra_env = settings.env_allowlist if settings is not None else ()
        runner = create_process_runner(extra_env_allowlist=extra_env)
    return CompilationService(
        session=session,
        runner=runner,
        cache=cache,
        build_log=settings.build_log if settings is not None else False,
    )


def create_cached_compilation_service(
    settings: "C3BridgeSettings",
    runner: ProcessRunnerProtocol | None = None,
    locator: "ToolchainLocatorProtocol | None" = None,
    session: BuildSession | None = None,
) -> CompilationService:
    """Compilation service with the cache configured by ``settings``.

    A cache that cannot be opened is logged and skipped, and the service
    compiles without one.
    """
    from c3bridge.compilation.compilation_cache import create_compilation_cache
    from c3bridge.core.cache import create_cache_from_settings

    cache = None
    if settings.cache_strategy != "disabled":
        try:
            cache = create_compilation_cache(
                create_cache_from_settings(settings), ttl_hours=settings.cache_ttl_hours
            )
        except (OSError, sqlite3.Error, diskcache.Timeout) as e:
            logger.warning(
                "compile_cache_unavailable", path=str(settings.cache_path), error=str(e)
            )

    return create_compilation_service(
        settings, runner=runner, locator=locator, cache=cache, session=session
    )
