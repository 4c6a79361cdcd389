"""Compiler diagnostic models."""

from enum import Enum

from c3bridge.models.base import FrozenModel


class Severity(str, Enum):
    ERROR = "error"
    WARNING = "warning"
    INFO = "info"


class DiagnosticSource(str, Enum):
    """Which classifier branch produced a diagnostic."""

    ERROR = "error"
    WARNING = "warning"
    NOTE = "note"
    UNRECOGNIZED = "unrecognized"

    @property
    def severity(self) -> Severity:
        if self is DiagnosticSource.ERROR:
            return Severity.ERROR
        if self is DiagnosticSource.WARNING:
            return Severity.WARNING
        return Severity.INFO


class Diagnostic(FrozenModel):
    """One compiler message with a best-effort source location."""

    severity: Severity
    message: str
    file: str | None = None
    line: int | None = None
    column: int | None = None
    source: DiagnosticSource = DiagnosticSource.UNRECOGNIZED

    @property
    def is_error(self) -> bool:
        return self.severity is Severity.ERROR

    @property
    def location(self) -> str | None:
        """``file[:line[:column]]`` or None when the file is unknown."""
        if self.file is None:
            return None
        parts = [self.file]
        if self.line is not None:
            parts.append(str(self.line))
            if self.column is not None:
                parts.append(str(self.column))
        return ":".join(parts)

    def format(self) -> str:
        """Render as a GCC-style message line."""
        if self.source is DiagnosticSource.UNRECOGNIZED:
            return self.message
        label = "note" if self.source is DiagnosticSource.NOTE else self.severity.value
        location = self.location
        prefix = f"{location}: " if location else ""
        return f"{prefix}{label}: {self.message}"
