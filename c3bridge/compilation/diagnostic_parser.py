"""Classification of compiler output into diagnostics."""

import re
from dataclasses import dataclass, field

from c3bridge.models.diagnostics import Diagnostic, DiagnosticSource
from c3bridge.models.invocation import ExecutionResult


_KIND = r"(?P<kind>error|warning|note)"
_LOCATION = r"(?P<file>(?:[A-Za-z]:)?[^:()]+?):(?P<line>\d+)(?::(?P<column>\d+))?"

# file:line:col: error: message
GCC_PATTERN = re.compile(rf"^{_LOCATION}:\s*{_KIND}\s*:\s*(?P<message>.*)$", re.IGNORECASE)
# (file:line:col) Error: message
C3C_PATTERN = re.compile(
    rf"^\({_LOCATION}\)\s*{_KIND}\s*:\s*(?P<message>.*)$", re.IGNORECASE
)
# error: message
BARE_PATTERN = re.compile(rf"^{_KIND}\s*:\s*(?P<message>.*)$", re.IGNORECASE)

PATTERNS = (C3C_PATTERN, GCC_PATTERN, BARE_PATTERN)


@dataclass
class _Pending:
    """A recognized diagnostic still collecting continuation lines."""

    source: DiagnosticSource
    message: str
    file: str | None = None
    line: int | None = None
    column: int | None = None
    continuation: list[str] = field(default_factory=list)

    def finish(self) -> Diagnostic:
        message = "\n".join([self.message, *self.continuation]).strip()
        return Diagnostic(
            severity=self.source.severity,
            message=message,
            file=self.file,
            line=self.line,
            column=self.column,
            source=self.source,
        )


def classify_line(line: str) -> _Pending | None:
    """Match one line against the recognized diagnostic forms."""
    text = line.strip()
    for pattern in PATTERNS:
        match = pattern.match(text)
        if match is None:
            continue
        groups = match.groupdict()
        return _Pending(
            source=DiagnosticSource(groups["kind"].lower()),
            message=groups["message"].strip(),
            file=groups.get("file"),
            line=int(groups["line"]) if groups.get("line") else None,
            column=int(groups["column"]) if groups.get("column") else None,
        )
    return None


class DiagnosticParser:
    """Turn raw compiler output into an ordered list of diagnostics.

    ``error:``, ``warning:`` and ``note:`` lines are recognized in GCC form,
    in c3c's parenthesized form and bare. Unprefixed lines that follow a
    recognized diagnostic extend its message until a blank line. Every other
    non-blank line becomes an ``info`` diagnostic tagged ``unrecognized``.
    Parsing never fails.
    """

    def parse(self, raw_output: str) -> list[Diagnostic]:
        diagnostics: list[Diagnostic] = []
        pending: _Pending | None = None

        for line in raw_output.splitlines():
            if not line.strip():
                if pending is not None:
                    diagnostics.append(pending.finish())
                    pending = None
                continue

            recognized = classify_line(line)
            if recognized is not None:
                if pending is not None:
                    diagnostics.append(pending.finish())
                pending = recognized
            elif pending is not None:
                pending.continuation.append(line.rstrip())
            else:
                diagnostics.append(
                    Diagnostic(
                        severity=DiagnosticSource.UNRECOGNIZED.severity,
                        message=line.rstrip(),
                        source=DiagnosticSource.UNRECOGNIZED,
                    )
                )

        if pending is not None:
            diagnostics.append(pending.finish())
        return diagnostics

    def parse_result(self, result: ExecutionResult) -> list[Diagnostic]:
        """Diagnostics from stdout followed by those from stderr."""
        return self.parse(result.stdout) + self.parse(result.stderr)


def create_diagnostic_parser() -> DiagnosticParser:
    """Factory function to create a diagnostic parser."""
    return DiagnosticParser()
