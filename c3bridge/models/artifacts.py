"""Artifact and compiled output models."""

from datetime import datetime
from enum import Enum
from pathlib import Path

from pydantic import Field

from c3bridge.models.base import FrozenModel
from c3bridge.models.diagnostics import Diagnostic, Severity
from c3bridge.models.request import CompilationRequest, OutputKind


class LinkKind(str, Enum):
    STATIC = "static"
    DYLIB = "dylib"


class LinkageDirective(FrozenModel):
    """Search path and library name the host linker needs."""

    search_path: Path
    library_name: str
    link_kind: LinkKind


class Artifact(FrozenModel):
    """A compiled output file registered for the build session."""

    kind: OutputKind
    path: Path
    request: CompilationRequest
    from_cache: bool = False
    created_at: datetime = Field(default_factory=datetime.now)


class CompiledOutput(FrozenModel):
    """What a successful ``compile`` hands back to the caller."""

    artifact: Artifact
    diagnostics: tuple[Diagnostic, ...] = ()
    linkage: LinkageDirective | None = None
    sources: tuple[Path, ...] = ()

    @property
    def path(self) -> Path:
        return self.artifact.path

    @property
    def kind(self) -> OutputKind:
        return self.artifact.kind

    @property
    def warnings(self) -> list[Diagnostic]:
        return [d for d in self.diagnostics if d.severity is Severity.WARNING]
