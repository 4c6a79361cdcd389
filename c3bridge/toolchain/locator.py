"""Discovery and validation of the c3c compiler."""

import os
import re
import shutil
import subprocess
import sys
from collections.abc import Callable, Sequence
from pathlib import Path
from typing import TYPE_CHECKING

from c3bridge.config.settings import DEFAULT_MIN_VERSION
from c3bridge.core.errors import ToolchainNotFound, ToolchainVersionUnsupported
from c3bridge.core.structlog_logger import get_struct_logger
from c3bridge.models.toolchain import ToolchainInfo, ToolchainVersion


if TYPE_CHECKING:
    from c3bridge.config.settings import C3BridgeSettings


logger = get_struct_logger(__name__)

COMPILER_NAME = "c3c"
VERSION_FLAG = "--version"
LIST_TARGETS_FLAG = "--list-targets"

# Probing a candidate should be quick; a hung binary is treated as absent
PROBE_TIMEOUT_SECONDS = 30.0

_TARGET_LINE = re.compile(r"^[a-z][a-z0-9_]*(?:-[a-z0-9_]+)?$")


def executable_name() -> str:
    return f"{COMPILER_NAME}.exe" if sys.platform == "win32" else COMPILER_NAME


def default_search_dirs() -> list[Path]:
    """Conventional install locations checked after the process search path."""
    dirs = [
        Path.home() / ".local" / "bin",
        Path("/usr/local/bin"),
        Path("/usr/bin"),
        Path("/opt/c3"),
        Path("/opt/homebrew/bin"),
    ]
    if sys.platform == "win32":
        local_app_data = os.environ.get("LOCALAPPDATA")
        if local_app_data:
            dirs.append(Path(local_app_data) / "c3")
        dirs.append(Path("C:\\c3"))
    return dirs


def parse_target_list(output: str) -> tuple[str, ...]:
    """Extract target names from ``c3c --list-targets`` output.

    Headers and other prose are skipped; only lines that look like a bare
    target name are kept.
    """
    targets: list[str] = []
    for line in output.splitlines():
        name = line.strip()
        if _TARGET_LINE.match(name) and name not in targets:
            targets.append(name)
    return tuple(targets)


class ToolchainLocator:
    """Locate a c3c executable and check that it is recent enough."""

    def __init__(
        self,
        compiler_path: Path | str | None = None,
        minimum_version: ToolchainVersion | str = DEFAULT_MIN_VERSION,
        search_dirs: Sequence[Path] | None = None,
        which: Callable[[str], str | None] = shutil.which,
    ) -> None:
        """Initialize the locator.

        Args:
            compiler_path: Configured compiler path; treated as an override
            minimum_version: Lowest accepted compiler version
            search_dirs: Install locations tried after the search path
            which: Search-path lookup, replaceable in tests
        """
        if isinstance(minimum_version, str):
            parsed = ToolchainVersion.parse(minimum_version)
            if parsed is None:
                raise ValueError(f"Invalid minimum version: {minimum_version!r}")
            minimum_version = parsed
        self.compiler_path = Path(compiler_path) if compiler_path else None
        self.minimum_version = minimum_version
        self.search_dirs = (
            list(search_dirs) if search_dirs is not None else default_search_dirs()
        )
        self._which = which

    def locate(self, preferred_path: Path | str | None = None) -> ToolchainInfo:
        """Find and validate a compiler.

        An explicit ``preferred_path`` (or the configured compiler path) is the
        only candidate considered; otherwise the search path is consulted
        first, then the conventional install locations.

        Raises:
            ToolchainNotFound: If no candidate answers a version query
            ToolchainVersionUnsupported: If answering candidates are too old
        """
        override = preferred_path or self.compiler_path
        if override is not None:
            path = Path(override).expanduser()
            info = self.probe(path)
            if info is None:
                raise ToolchainNotFound(
                    f"c3c at {path} did not answer '{VERSION_FLAG}'", [path]
                )
            self._ensure_supported(info)
            return info

        candidates = self.candidates()
        too_old: ToolchainInfo | None = None
        for candidate in candidates:
            info = self.probe(candidate)
            if info is None:
                continue
            if info.version < self.minimum_version:
                logger.warning(
                    "toolchain_version_unsupported",
                    path=str(info.path),
                    version=str(info.version),
                    minimum=str(self.minimum_version),
                )
                too_old = too_old or info
                continue
            logger.info(
                "toolchain_located",
                path=str(info.path),
                version=str(info.version),
                targets=len(info.targets),
            )
            return info

        if too_old is not None:
            self._ensure_supported(too_old)
        raise ToolchainNotFound(
            "No c3c compiler found on PATH or in standard install locations",
            candidates,
        )

    def candidates(self) -> list[Path]:
        """Existing candidate executables in search order, without duplicates."""
        found: list[Path] = []
        seen: set[Path] = set()

        on_path = self._which(COMPILER_NAME)
        paths = [Path(on_path)] if on_path else []
        paths.extend(directory / executable_name() for directory in self.search_dirs)

        for path in paths:
            if not path.is_file():
                continue
            key = path.resolve()
            if key in seen:
                continue
            seen.add(key)
            found.append(path)
        return found

    def probe(self, path: Path) -> ToolchainInfo | None:
        """Ask ``path`` for its version and targets.

        Returns:
            ToolchainInfo, or None when the candidate does not answer
        """
        output = self._query(path, VERSION_FLAG)
        if output is None:
            return None
        version = ToolchainVersion.parse(output)
        if version is None:
            logger.debug("toolchain_version_unparsed", path=str(path), output=output)
            return None

        targets_output = self._query(path, LIST_TARGETS_FLAG)
        targets = parse_target_list(targets_output) if targets_output else ()
        return ToolchainInfo(path=path.absolute(), version=version, targets=targets)

    def _query(self, path: Path, flag: str) -> str | None:
        try:
            result = subprocess.run(
                [str(path), flag],
                capture_output=True,
                text=True,
                encoding="utf-8",
                errors="replace",
                stdin=subprocess.DEVNULL,
                timeout=PROBE_TIMEOUT_SECONDS,
                check=False,
            )
        except (OSError, subprocess.SubprocessError) as e:
            logger.debug("toolchain_probe_failed", path=str(path), flag=flag, error=str(e))
            return None

        if result.returncode != 0:
            logger.debug(
                "toolchain_probe_failed",
                path=str(path),
                flag=flag,
                exit_code=result.returncode,
            )
            return None
        return f"{result.stdout}\n{result.stderr}".strip()

    def _ensure_supported(self, info: ToolchainInfo) -> None:
        if info.version < self.minimum_version:
            raise ToolchainVersionUnsupported(
                info.path, str(info.version), str(self.minimum_version)
            )


def create_toolchain_locator(
    settings: "C3BridgeSettings | None" = None,
) -> ToolchainLocator:
    """Factory function to create a toolchain locator from settings.

    Args:
        settings: Loaded settings; defaults are used when None

    Returns:
        Configured ToolchainLocator
    """
    if settings is None:
        return ToolchainLocator()
    return ToolchainLocator(
        compiler_path=settings.compiler_path,
        minimum_version=settings.minimum_version,
    )
