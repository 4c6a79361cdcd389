"""Compile command for c3bridge CLI."""

import logging
import sys
from pathlib import Path
from typing import Annotated

import typer
from rich.console import Console

from c3bridge.build import Build
from c3bridge.cli.app import AppContext
from c3bridge.cli.decorators import handle_errors
from c3bridge.compilation.directives import emit_directives
from c3bridge.config.settings import DIRECTIVE_FORMATS
from c3bridge.core.errors import ConfigError
from c3bridge.models.request import (
    ExportMode,
    OptimizationLevel,
    OptimizationProfile,
    OutputKind,
)


logger = logging.getLogger(__name__)


@handle_errors
def compile_command(
    ctx: typer.Context,
    sources: Annotated[
        list[Path],
        typer.Argument(help="C3 source files or directories (searched recursively)"),
    ],
    name: Annotated[
        str, typer.Option("--name", "-n", help="Library or object name")
    ],
    kind: Annotated[
        OutputKind, typer.Option("--kind", "-k", help="Artifact kind")
    ] = OutputKind.STATIC,
    out_dir: Annotated[
        Path | None,
        typer.Option("--out-dir", "-o", help="Output directory (default: config, $OUT_DIR, ./build)"),
    ] = None,
    target: Annotated[
        str | None,
        typer.Option("--target", "-t", help="c3c target or LLVM triple, e.g. x86_64-unknown-linux-gnu"),
    ] = None,
    profile: Annotated[
        OptimizationProfile,
        typer.Option("--profile", "-p", help="Optimization profile"),
    ] = OptimizationProfile.DEBUG,
    opt_level: Annotated[
        OptimizationLevel | None,
        typer.Option("--opt-level", help="Explicit optimization level (overrides profile)"),
    ] = None,
    debug_info: Annotated[
        bool, typer.Option("--debug-info", help="Emit debug info (overrides profile)")
    ] = False,
    no_debug_info: Annotated[
        bool, typer.Option("--no-debug-info", help="Omit debug info (overrides profile)")
    ] = False,
    defines: Annotated[
        list[str] | None, typer.Option("--define", "-D", help="Compile-time definition")
    ] = None,
    include_paths: Annotated[
        list[Path] | None, typer.Option("--libdir", "-I", help="C3 library search directory")
    ] = None,
    c3_libs: Annotated[
        list[str] | None, typer.Option("--lib", help="C3 library to use")
    ] = None,
    link_dirs: Annotated[
        list[Path] | None, typer.Option("-L", help="Native library search directory")
    ] = None,
    link_libs: Annotated[
        list[str] | None, typer.Option("-l", help="Native library to link")
    ] = None,
    linker_args: Annotated[
        list[str] | None, typer.Option("-z", help="Argument passed to the linker")
    ] = None,
    export: Annotated[
        ExportMode, typer.Option("--export", help="Symbol export visibility")
    ] = ExportMode.ALL,
    compiler: Annotated[
        Path | None, typer.Option("--compiler", help="Path to the c3c executable")
    ] = None,
    fmt: Annotated[
        str | None,
        typer.Option("--format", "-f", help="Directive format: cargo, flags or json"),
    ] = None,
    no_cache: Annotated[
        bool, typer.Option("--no-cache", help="Always invoke the compiler")
    ] = False,
) -> None:
    """Compile C3 sources and print linkage directives on stdout."""
    app_ctx: AppContext = ctx.obj
    settings = app_ctx.settings

    directive_format = (fmt or settings.directive_format).lower()
    if directive_format not in DIRECTIVE_FORMATS:
        raise ConfigError(
            f"Unknown directive format {fmt!r}, expected one of {list(DIRECTIVE_FORMATS)}"
        )

    build = (
        Build(settings=settings)
        .files(sources)
        .output_kind(kind)
        .optimization(profile)
        .export_mode(export)
        .defines(defines or [])
        .include_paths(include_paths or [])
        .c3_libs(c3_libs or [])
        .compiled_lib_dirs(link_dirs or [])
        .compiled_libs(link_libs or [])
        .linker_arguments(linker_args or [])
        .cache(not no_cache)
    )
    if out_dir is not None:
        build.output_dir(out_dir)
    if target:
        build.target(target)
    if opt_level is not None:
        build.optimization_level(opt_level)
    if debug_info or no_debug_info:
        build.debug_info(debug_info and not no_debug_info)
    if compiler is not None:
        build.compiler(compiler)

    output = build.try_compile(name)
    logger.info("Compiled %s", output.path)

    stderr_console = Console(stderr=True)
    for warning in output.warnings:
        stderr_console.print(warning.format(), style="yellow", markup=False, highlight=False)

    emit_directives(output, directive_format, sys.stdout)


def register_commands(app: typer.Typer) -> None:
    """Register compile command with the main app.

    Args:
        app: The main Typer app
    """
    app.command(name="compile")(compile_command)
