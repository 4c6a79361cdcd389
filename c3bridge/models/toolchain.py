"""Toolchain domain models."""

import re
from pathlib import Path

from pydantic import Field

from c3bridge.models.base import FrozenModel


VERSION_PATTERN = re.compile(
    r"(?P<major>\d+)\.(?P<minor>\d+)(?:\.(?P<patch>\d+))?"
    r"(?:-(?P<prerelease>[0-9A-Za-z][0-9A-Za-z.-]*))?"
)


class ToolchainVersion(FrozenModel):
    """Parsed ``major.minor[.patch][-prerelease]`` compiler version."""

    major: int = Field(ge=0)
    minor: int = Field(ge=0)
    patch: int = Field(default=0, ge=0)
    prerelease: str | None = None

    @classmethod
    def parse(cls, text: str) -> "ToolchainVersion | None":
        """Extract the first version number found in ``text``.

        Tolerates surrounding noise such as ``C3 Compiler Version: 0.7.6``.

        Returns:
            The parsed version, or None when no version number is present
        """
        match = VERSION_PATTERN.search(text)
        if match is None:
            return None
        return cls(
            major=int(match.group("major")),
            minor=int(match.group("minor")),
            patch=int(match.group("patch") or 0),
            prerelease=match.group("prerelease"),
        )

    @property
    def sort_key(self) -> tuple[int, int, int, int, str]:
        # A pre-release sorts below the release it precedes
        return (
            self.major,
            self.minor,
            self.patch,
            0 if self.prerelease else 1,
            self.prerelease or "",
        )

    def __lt__(self, other: "ToolchainVersion") -> bool:
        return self.sort_key < other.sort_key

    def __le__(self, other: "ToolchainVersion") -> bool:
        return self.sort_key <= other.sort_key

    def __gt__(self, other: "ToolchainVersion") -> bool:
        return self.sort_key > other.sort_key

    def __ge__(self, other: "ToolchainVersion") -> bool:
        return self.sort_key >= other.sort_key

    def __str__(self) -> str:
        base = f"{self.major}.{self.minor}.{self.patch}"
        return f"{base}-{self.prerelease}" if self.prerelease else base


class ToolchainInfo(FrozenModel):
    """A located and validated c3c compiler."""

    path: Path
    version: ToolchainVersion
    targets: tuple[str, ...] = ()

    def supports_target(self, target: str) -> bool:
        """Check a c3 target name against the reported target list.

        An empty target list means the compiler could not report one, in which
        case every target is accepted and left for the compiler to judge.
        """
        return not self.targets or target in self.targets
