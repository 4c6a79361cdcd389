"""Compilation request models."""

from enum import Enum
from pathlib import Path
from typing import Any

from pydantic import Field, field_validator

from c3bridge.models.base import FrozenModel


class OutputKind(str, Enum):
    """Kind of artifact produced by one compilation."""

    OBJECT = "object"
    STATIC = "static"
    SHARED = "shared"

    @property
    def is_library(self) -> bool:
        return self is not OutputKind.OBJECT


class LinkingMode(str, Enum):
    """How the host links against the compiled library."""

    STATIC = "static"
    DYNAMIC = "dynamic"

    def to_output_kind(self) -> OutputKind:
        return OutputKind.STATIC if self is LinkingMode.STATIC else OutputKind.SHARED


class OptimizationProfile(str, Enum):
    """Coarse optimization presets."""

    NONE = "none"
    DEBUG = "debug"
    RELEASE = "release"


class OptimizationLevel(str, Enum):
    """c3c optimization levels.

    O0: safe, no optimizations.
    O1: safe, high optimization.
    O2: unsafe, high optimization.
    O3: unsafe, high optimization, single module.
    O4: unsafe, highest optimization, relaxed maths, no panic messages.
    O5: unsafe, highest optimization, fast maths, no panic messages or backtrace.
    Os: unsafe, small code, no debug info.
    Oz: unsafe, tiny code, no debug info or backtrace.
    """

    O0 = "O0"
    O1 = "O1"
    O2 = "O2"
    O3 = "O3"
    O4 = "O4"
    O5 = "O5"
    OS = "Os"
    OZ = "Oz"


class ExportMode(str, Enum):
    """Symbol export visibility of the compiled module."""

    ALL = "all"
    EXPLICIT = "explicit"


# profile -> (optimization level, debug info)
PROFILE_DEFAULTS: dict[OptimizationProfile, tuple[OptimizationLevel, bool]] = {
    OptimizationProfile.NONE: (OptimizationLevel.O0, False),
    OptimizationProfile.DEBUG: (OptimizationLevel.O0, True),
    OptimizationProfile.RELEASE: (OptimizationLevel.O3, False),
}


class CompileOptions(FrozenModel):
    """Everything about a compilation except its resolved source list."""

    output_dir: Path
    output_name: str
    output_kind: OutputKind = OutputKind.STATIC
    target: str | None = None
    optimization: OptimizationProfile = OptimizationProfile.DEBUG
    opt_level: OptimizationLevel | None = None
    debug_info: bool | None = None
    defines: tuple[str, ...] = ()
    include_paths: tuple[Path, ...] = ()
    c3_libs: tuple[str, ...] = ()
    link_search_paths: tuple[Path, ...] = ()
    link_libs: tuple[str, ...] = ()
    linker_args: tuple[str, ...] = ()
    export_mode: ExportMode = ExportMode.ALL
    extra_args: tuple[str, ...] = ()
    environment: dict[str, str] = Field(default_factory=dict)
    working_dir: Path | None = None

    @field_validator("output_name")
    @classmethod
    def validate_output_name(cls, v: str) -> str:
        """Library names are bare stems, never paths."""
        if not v:
            raise ValueError("Output name must not be empty")
        if "/" in v or "\\" in v:
            raise ValueError(f"Output name must not contain path separators: {v!r}")
        return v

    @field_validator("target")
    @classmethod
    def validate_target(cls, v: str | None) -> str | None:
        if v is not None and not v.strip():
            return None
        return v

    @property
    def effective_opt_level(self) -> OptimizationLevel:
        """Explicit level if set, else the profile's level."""
        return self.opt_level or PROFILE_DEFAULTS[self.optimization][0]

    @property
    def effective_debug_info(self) -> bool:
        """Explicit debug-info toggle if set, else the profile's default."""
        if self.debug_info is not None:
            return self.debug_info
        return PROFILE_DEFAULTS[self.optimization][1]

    def with_sources(self, sources: list[Path]) -> "CompilationRequest":
        """Attach a resolved source list, producing a full request."""
        data: dict[str, Any] = self.model_dump(mode="python")
        data.pop("sources", None)
        return CompilationRequest(**data, sources=tuple(sources))


class CompilationRequest(CompileOptions):
    """A complete, read-only compilation request."""

    sources: tuple[Path, ...] = ()
