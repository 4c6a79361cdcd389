"""Expansion of caller inputs into an ordered list of C3 source files."""

import logging
import os
from collections.abc import Iterable, Iterator
from pathlib import Path

from c3bridge.core.errors import EmptySourceSet, PathNotFound


logger = logging.getLogger(__name__)

C3_SOURCE_EXTENSIONS = (".c3", ".c3i")


class SourceSetResolver:
    """Resolve files and directories into a deduplicated source list.

    Directories are walked recursively in sorted order and contribute every
    file with a C3 source extension. Files given explicitly are kept whatever
    their extension. Duplicates are dropped by canonical path, keeping the
    position of the first occurrence.
    """

    def __init__(
        self,
        extensions: Iterable[str] = C3_SOURCE_EXTENSIONS,
        base_dir: Path | None = None,
    ) -> None:
        """Initialize resolver.

        Args:
            extensions: File suffixes collected from directories
            base_dir: Directory relative inputs are resolved against (cwd if None)
        """
        self.extensions = tuple(ext.lower() for ext in extensions)
        self.base_dir = base_dir

    def resolve(
        self, inputs: Iterable[Path | str], base_dir: Path | None = None
    ) -> list[Path]:
        """Resolve inputs into absolute source paths.

        Args:
            inputs: Files and directories, absolute or relative
            base_dir: Overrides the resolver's base directory for this call

        Raises:
            PathNotFound: If an input does not exist
            EmptySourceSet: If nothing is left to compile
        """
        input_paths = [Path(p) for p in inputs]
        resolved: list[Path] = []
        seen: set[Path] = set()

        for input_path in input_paths:
            path = self._absolute(input_path, base_dir or self.base_dir)
            if not path.exists():
                raise PathNotFound(input_path)

            candidates = self._walk(path) if path.is_dir() else iter([path])
            for candidate in candidates:
                key = candidate.resolve()
                if key in seen:
                    logger.debug("Skipping duplicate source %s", candidate)
                    continue
                seen.add(key)
                resolved.append(key)

        if not resolved:
            raise EmptySourceSet(input_paths)

        logger.debug("Resolved %d source file(s)", len(resolved))
        return resolved

    def is_source(self, path: Path) -> bool:
        return path.suffix.lower() in self.extensions

    def _absolute(self, path: Path, base_dir: Path | None) -> Path:
        path = path.expanduser()
        if path.is_absolute():
            return path
        return (base_dir or Path.cwd()) / path

    def _walk(self, directory: Path) -> Iterator[Path]:
        for root, dirs, files in os.walk(directory):
            dirs.sort()
            for name in sorted(files):
                path = Path(root) / name
                if self.is_source(path):
                    yield path


def create_source_resolver(base_dir: Path | None = None) -> SourceSetResolver:
    """Factory function to create a source resolver."""
    return SourceSetResolver(base_dir=base_dir)
