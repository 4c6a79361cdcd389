"""Linkage directives for host build systems."""

import json
import sys
from pathlib import Path
from typing import TextIO

from c3bridge.models.artifacts import CompiledOutput, LinkageDirective, LinkKind
from c3bridge.models.request import CompilationRequest, OutputKind


def linkage_for(request: CompilationRequest, artifact_path: Path) -> LinkageDirective | None:
    """Search path and library name for a library artifact; None for objects."""
    if request.output_kind is OutputKind.OBJECT:
        return None
    return LinkageDirective(
        search_path=artifact_path.parent,
        library_name=request.output_name,
        link_kind=LinkKind.STATIC if request.output_kind is OutputKind.STATIC else LinkKind.DYLIB,
    )


def cargo_directives(output: CompiledOutput) -> list[str]:
    lines: list[str] = []
    if output.linkage is not None:
        lines.append(f"cargo:rustc-link-search=native={output.linkage.search_path}")
        lines.append(
            f"cargo:rustc-link-lib={output.linkage.link_kind.value}"
            f"={output.linkage.library_name}"
        )
    lines.extend(f"cargo:rerun-if-changed={source}" for source in output.sources)
    # cargo only shows one line per warning directive
    lines.extend(
        f"cargo:warning={' '.join(d.format().split())}" for d in output.warnings
    )
    return lines


def flag_directives(output: CompiledOutput) -> list[str]:
    if output.linkage is None:
        return [str(output.path)]
    return [f"-L {output.linkage.search_path} -l{output.linkage.library_name}"]


def json_directives(output: CompiledOutput) -> list[str]:
    document = {
        "artifact": str(output.path),
        "kind": output.kind.value,
        "from_cache": output.artifact.from_cache,
        "linkage": output.linkage.to_dict() if output.linkage else None,
        "sources": [str(source) for source in output.sources],
        "warnings": [d.format() for d in output.warnings],
    }
    return [json.dumps(document, indent=2)]


RENDERERS = {
    "cargo": cargo_directives,
    "flags": flag_directives,
    "json": json_directives,
}


def render_directives(output: CompiledOutput, fmt: str = "cargo") -> list[str]:
    """Render the directives for ``output`` in one of the supported formats.

    Raises:
        ValueError: If the format is unknown
    """
    try:
        renderer = RENDERERS[fmt]
    except KeyError:
        raise ValueError(
            f"Unknown directive format {fmt!r}, expected one of {sorted(RENDERERS)}"
        ) from None
    return renderer(output)


def emit_directives(
    output: CompiledOutput, fmt: str = "cargo", stream: TextIO | None = None
) -> None:
    """Print directives, one per line, to ``stream`` (stdout by default)."""
    stream = stream or sys.stdout
    for line in render_directives(output, fmt):
        print(line, file=stream)
    stream.flush()
