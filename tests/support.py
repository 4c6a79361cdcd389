"""Shared helpers for c3bridge tests."""

import json
import sys
from pathlib import Path
from typing import Any

import pytest

from c3bridge.models.invocation import ExecutionResult, Invocation
from c3bridge.models.toolchain import ToolchainInfo, ToolchainVersion


# A tiny c3c look-alike. It honors the parts of the command line contract the
# pipeline relies on and reacts to marker words in source files:
#   SYNTAX_ERROR  writes a partial artifact, reports an error, exits 1
#   WARN_UNUSED   reports a warning and succeeds
#   NO_OUTPUT     exits 0 without writing an artifact
# Every compile invocation is appended to c3c_calls.jsonl next to the script.
FAKE_C3C_SCRIPT = """#!@PYTHON@
import json
import os
import sys
import time
from pathlib import Path

VERSION = "@VERSION@"
LIST_TARGETS = @LIST_TARGETS@
CALLS = Path(__file__).with_name("c3c_calls.jsonl")
SUFFIXES = {"static-lib": ".a", "dynamic-lib": ".so", "compile-only": ".o"}


def main(argv):
    if argv == ["--version"]:
        print("C3 Compiler Version:       " + VERSION)
        print("Installed directory:       " + str(Path(__file__).parent))
        print("LLVM version:              17.0.6")
        return 0
    if argv == ["--list-targets"]:
        if not LIST_TARGETS:
            print("Error: unknown option --list-targets", file=sys.stderr)
            return 1
        print("Available targets:")
        for target in ("linux-x64", "linux-aarch64", "macos-aarch64", "mingw-x64", "windows-x64"):
            print("   " + target)
        return 0

    with CALLS.open("a", encoding="utf-8") as f:
        f.write(json.dumps({"argv": argv, "cwd": os.getcwd()}) + "\\n")

    command = argv[0]
    out_dir = Path(argv[argv.index("--output-dir") + 1])
    stem = argv[argv.index("-o") + 1]
    suffix = SUFFIXES[command]
    if sys.platform == "darwin" and command == "dynamic-lib":
        suffix = ".dylib"
    output = out_dir / (stem + suffix)

    delay = float(os.environ.get("FAKE_C3C_DELAY", "0"))
    if delay:
        time.sleep(delay)
    if "FAKE_C3C_ECHO" in os.environ:
        print(os.environ["FAKE_C3C_ECHO"])

    body = [command.encode()]
    for source in [Path(a) for a in argv[1:] if a.endswith((".c3", ".c3i"))]:
        text = source.read_text(encoding="utf-8")
        if "SYNTAX_ERROR" in text:
            output.write_bytes(b"partial")
            lineno = next(
                i for i, line in enumerate(text.splitlines(), 1) if "SYNTAX_ERROR" in line
            )
            print(" %d: SYNTAX_ERROR" % lineno, file=sys.stderr)
            print("(%s:%d:5) Error: Expected ';'" % (source, lineno), file=sys.stderr)
            return 1
        if "WARN_UNUSED" in text:
            print("(%s:1:1) Warning: Unused variable 'x'" % source, file=sys.stderr)
        if "NO_OUTPUT" in text:
            return 0
        body.append(text.encode("utf-8"))

    output.write_bytes(b"\\x00".join(body))
    print("Program linked to " + str(output))
    return 0


sys.exit(main(sys.argv[1:]))
"""

TRIVIAL_SOURCE = """module thing;

fn int add(int a, int b) @export("thing_add")
{
    return a + b;
}
"""

needs_posix_exec = pytest.mark.skipif(
    sys.platform == "win32", reason="stand-in c3c is a shebang script"
)


def read_calls(c3c: Path) -> list[dict[str, Any]]:
    """Compile invocations recorded by a stand-in c3c."""
    calls_file = c3c.with_name("c3c_calls.jsonl")
    if not calls_file.exists():
        return []
    return [json.loads(line) for line in calls_file.read_text().splitlines()]


class RecordingRunner:
    """Process runner test double that never spawns anything."""

    def __init__(self, result: ExecutionResult | None = None) -> None:
        self.result = result or ExecutionResult(exit_code=0)
        self.invocations: list[Invocation] = []

    def run(self, invocation: Invocation, middleware: Any | None = None) -> ExecutionResult:
        self.invocations.append(invocation)
        return self.result


def make_toolchain_info(path: str = "/opt/c3/c3c") -> ToolchainInfo:
    """A located toolchain record without any executable behind it."""
    return ToolchainInfo(
        path=Path(path),
        version=ToolchainVersion(major=0, minor=7, patch=6),
        targets=("linux-x64",),
    )
