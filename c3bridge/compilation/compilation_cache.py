"""Compilation result cache built on the generic cache system."""

import hashlib
import logging
import os
from collections.abc import Sequence
from pathlib import Path

from pydantic import ValidationError

from c3bridge.core.cache import CacheKey, CacheManager, create_memory_cache
from c3bridge.models.base import C3BridgeBaseModel
from c3bridge.models.diagnostics import Diagnostic
from c3bridge.models.invocation import Invocation
from c3bridge.models.toolchain import ToolchainInfo


logger = logging.getLogger(__name__)

CACHE_NAMESPACE = "c3c_compile"

# Files inside a --libdir that can change what c3c links in
LIBRARY_SUFFIXES = (".c3", ".c3i", ".c3l")
LIBRARY_MANIFEST = "manifest.json"


def library_files(library_dirs: Sequence[Path], base_dir: Path | None = None) -> list[Path]:
    """Library sources, archives and manifests below each library directory.

    ``.c3l`` libraries are either zip archives or directories; both are
    covered. Missing directories contribute nothing.
    """
    files: list[Path] = []
    for directory in library_dirs:
        if not directory.is_absolute():
            directory = (base_dir or Path.cwd()) / directory
        if not directory.is_dir():
            continue
        for root, dirs, names in os.walk(directory):
            dirs.sort()
            for name in sorted(names):
                if name.lower().endswith(LIBRARY_SUFFIXES) or name == LIBRARY_MANIFEST:
                    files.append(Path(root) / name)
    return files


def file_sha256(path: Path) -> str:
    digest = hashlib.sha256()
    with path.open("rb") as f:
        for chunk in iter(lambda: f.read(1024 * 1024), b""):
            digest.update(chunk)
    return digest.hexdigest()


class CachedCompilation(C3BridgeBaseModel):
    """What is remembered about one successful compilation."""

    path: Path
    size: int
    sha256: str
    diagnostics: list[Diagnostic] = []

    def is_intact(self) -> bool:
        """The recorded artifact is still on disk, unchanged."""
        try:
            if not self.path.is_file() or self.path.stat().st_size != self.size:
                return False
            return file_sha256(self.path) == self.sha256
        except OSError as e:
            logger.debug("Cannot verify cached artifact %s: %s", self.path, e)
            return False


class CompilationCache:
    """Remember successful compilations keyed by command line and sources.

    The key covers the full argument vector, the environment overrides and
    each source's path, modification time and size. A hit is only reported
    when the recorded artifact still exists with the recorded size and hash.
    The cache never fails a build: storage problems are logged and treated
    as misses.
    """

    def __init__(
        self, cache_manager: CacheManager | None = None, ttl_hours: int | None = None
    ) -> None:
        """Initialize compilation cache.

        Args:
            cache_manager: Generic cache manager (in-memory if None)
            ttl_hours: Lifetime of cache entries (no expiry if None)
        """
        self.cache = cache_manager or create_memory_cache()
        self.ttl_seconds = ttl_hours * 3600 if ttl_hours else None
        logger.debug("Initialized compilation cache with %s", type(self.cache).__name__)

    def key_for(
        self,
        invocation: Invocation,
        sources: Sequence[Path],
        toolchain: ToolchainInfo | None = None,
        library_dirs: Sequence[Path] = (),
    ) -> str:
        """Cache key for one invocation.

        Args:
            invocation: Command line, working directory and env overrides
            sources: Resolved source files
            toolchain: Compiler the invocation runs; its version and binary
                are part of the key so an in-place upgrade misses
            library_dirs: ``--libdir`` directories whose library files are
                fingerprinted like sources
        """
        cwd = str(invocation.cwd) if invocation.cwd else ""
        compiler = (
            [str(toolchain.version), CacheKey.from_path(toolchain.path)]
            if toolchain is not None
            else []
        )
        return CacheKey.from_parts(
            CACHE_NAMESPACE,
            *compiler,
            *invocation.argv,
            CacheKey.from_dict(invocation.env),
            cwd,
            *(CacheKey.from_path(source) for source in sources),
            *(
                CacheKey.from_path(path)
                for path in library_files(library_dirs, invocation.cwd)
            ),
        )


    def lookup(self, key: str, expected_path: Path) -> CachedCompilation | None:
        """Return the cached compilation if its artifact is still valid."""
        raw = self.cache.get(key)
        if raw is None:
            return None

        try:
            record = CachedCompilation.model_validate(raw)
        except ValidationError as e:
            logger.warning("Discarding unreadable cache entry %s: %s", key[:12], e)
            self.cache.delete(key)
            return None

        if record.path != expected_path or not record.is_intact():
            logger.debug("Cache entry for %s is stale", expected_path)
            self.cache.delete(key)
            return None

        logger.debug("Cache hit for %s", expected_path)
        return record

    def store(self, key: str, path: Path, diagnostics: Sequence[Diagnostic]) -> None:
        try:
            record = CachedCompilation(
                path=path,
                size=path.stat().st_size,
                sha256=file_sha256(path),
                diagnostics=list(diagnostics),
            )
        except OSError as e:
            logger.warning("Not caching %s: %s", path, e)
            return
        try:
            self.cache.set(key, record.to_dict_full(), ttl=self.ttl_seconds)
        except Exception as e:
            logger.warning("Failed to cache compilation of %s: %s", path, e)
            return
        logger.debug("Cached compilation of %s", path)


def create_compilation_cache(
    cache_manager: CacheManager | None = None, ttl_hours: int | None = None
) -> CompilationCache:
    """Factory function to create a compilation cache."""
    return CompilationCache(cache_manager=cache_manager, ttl_hours=ttl_hours)
