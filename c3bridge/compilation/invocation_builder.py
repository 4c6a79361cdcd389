"""Translate compilation requests into c3c command lines."""

import logging
from pathlib import Path

from c3bridge.models.invocation import Invocation
from c3bridge.models.request import CompilationRequest, ExportMode, OutputKind
from c3bridge.models.toolchain import ToolchainInfo
from c3bridge.toolchain.locator import LIST_TARGETS_FLAG, VERSION_FLAG
from c3bridge.toolchain.targets import platform_family, to_c3_target


logger = logging.getLogger(__name__)


# Every c3c flag used by this package. Keep toolchain drift contained here.
C3C_FLAGS: dict[str, str] = {
    "version": VERSION_FLAG,
    "list_targets": LIST_TARGETS_FLAG,
    "output_dir": "--output-dir",
    "output_name": "-o",
    "target": "--target",
    "debug_on": "-g",
    "debug_off": "-g0",
    "define": "-D",
    "lib_dir": "--libdir",
    "lib": "--lib",
    "link_search": "-L",
    "link_lib": "-l",
    "linker_arg": "-z",
    "export_all": "--no-strip-unused",
}

OUTPUT_KIND_COMMANDS: dict[OutputKind, str] = {
    OutputKind.OBJECT: "compile-only",
    OutputKind.STATIC: "static-lib",
    OutputKind.SHARED: "dynamic-lib",
}

EXPORT_MODE_FLAGS: dict[ExportMode, tuple[str, ...]] = {
    ExportMode.ALL: (C3C_FLAGS["export_all"],),
    ExportMode.EXPLICIT: (),
}

# (platform family, kind) -> (file prefix, file suffix)
ARTIFACT_NAMING: dict[tuple[str, OutputKind], tuple[str, str]] = {
    ("unix", OutputKind.STATIC): ("lib", ".a"),
    ("unix", OutputKind.SHARED): ("lib", ".so"),
    ("unix", OutputKind.OBJECT): ("", ".o"),
    ("macos", OutputKind.STATIC): ("lib", ".a"),
    ("macos", OutputKind.SHARED): ("lib", ".dylib"),
    ("macos", OutputKind.OBJECT): ("", ".o"),
    ("mingw", OutputKind.STATIC): ("lib", ".a"),
    ("mingw", OutputKind.SHARED): ("", ".dll"),
    ("mingw", OutputKind.OBJECT): ("", ".o"),
    ("windows", OutputKind.STATIC): ("", ".lib"),
    ("windows", OutputKind.SHARED): ("", ".dll"),
    ("windows", OutputKind.OBJECT): ("", ".obj"),
}


def resolved_target(request: CompilationRequest) -> str | None:
    """c3c target name for the request, or None to use the host default."""
    return to_c3_target(request.target) if request.target else None


def output_stem(request: CompilationRequest, family: str | None = None) -> str:
    """Stem passed to ``-o``; c3c appends the platform extension."""
    family = family or platform_family(resolved_target(request))
    prefix, _ = ARTIFACT_NAMING[(family, request.output_kind)]
    return f"{prefix}{request.output_name}"


def expected_output(request: CompilationRequest, family: str | None = None) -> Path:
    """Absolute path of the artifact the request produces.

    Args:
        request: Compilation request
        family: Platform naming family; derived from the request target
            (or the host) when None

    Returns:
        ``<output_dir>/<prefix><name><suffix>``
    """
    family = family or platform_family(resolved_target(request))
    prefix, suffix = ARTIFACT_NAMING[(family, request.output_kind)]
    return request.output_dir.absolute() / f"{prefix}{request.output_name}{suffix}"


class InvocationBuilder:
    """Assemble the argument vector for one compilation.

    Argument order is fixed: command, output location, target, optimization,
    sorted defines, library dirs in caller order, libraries and linker
    arguments, export flag, sources, then extra arguments verbatim. The same
    request always yields the same argv.
    """

    def __init__(self) -> None:
        self.logger = logging.getLogger(f"{__name__}.{self.__class__.__name__}")

    def build(self, request: CompilationRequest, toolchain: ToolchainInfo) -> Invocation:
        argv: list[str] = [str(toolchain.path), OUTPUT_KIND_COMMANDS[request.output_kind]]

        argv += [
            C3C_FLAGS["output_dir"],
            str(request.output_dir.absolute()),
            C3C_FLAGS["output_name"],
            output_stem(request),
        ]

        target = resolved_target(request)
        if target is not None:
            if not toolchain.supports_target(target):
                self.logger.warning(
                    "Target %s is not in the toolchain's target list", target
                )
            argv += [C3C_FLAGS["target"], target]

        argv.append(f"-{request.effective_opt_level.value}")
        argv.append(
            C3C_FLAGS["debug_on"] if request.effective_debug_info else C3C_FLAGS["debug_off"]
        )

        for define in sorted(set(request.defines)):
            argv += [C3C_FLAGS["define"], define]

        for lib_dir in request.include_paths:
            argv += [C3C_FLAGS["lib_dir"], str(lib_dir)]
        for lib in request.c3_libs:
            argv += [C3C_FLAGS["lib"], lib]
        for search_path in request.link_search_paths:
            argv += [C3C_FLAGS["link_search"], str(search_path)]
        for link_lib in request.link_libs:
            argv += [C3C_FLAGS["link_lib"], link_lib]
        for linker_arg in request.linker_args:
            argv += [C3C_FLAGS["linker_arg"], linker_arg]

        argv += EXPORT_MODE_FLAGS[request.export_mode]
        argv += [str(source) for source in request.sources]
        argv += request.extra_args

        return Invocation(
            argv=tuple(argv),
            cwd=request.working_dir,
            env=dict(request.environment),
        )

    def expected_output(
        self, request: CompilationRequest, family: str | None = None
    ) -> Path:
        return expected_output(request, family)


def create_invocation_builder() -> InvocationBuilder:
    """Factory function to create an invocation builder."""
    return InvocationBuilder()
