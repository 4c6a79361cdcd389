"""Tests for the compilation result cache."""

import os
from pathlib import Path
from unittest.mock import Mock

import pytest

from c3bridge.compilation.compilation_cache import (
    CachedCompilation,
    CompilationCache,
    create_compilation_cache,
    file_sha256,
)
from c3bridge.core.cache import create_diskcache_manager, create_memory_cache
from c3bridge.models.diagnostics import Diagnostic, DiagnosticSource, Severity
from c3bridge.models.invocation import Invocation
from c3bridge.models.toolchain import ToolchainVersion
from tests.support import make_toolchain_info


WARNING = Diagnostic(
    severity=Severity.WARNING,
    message="Unused variable 'x'",
    file="a.c3",
    line=1,
    column=1,
    source=DiagnosticSource.WARNING,
)


@pytest.fixture
def source(tmp_path: Path) -> Path:
    path = tmp_path / "a.c3"
    path.write_text("module a;\n", encoding="utf-8")
    return path


@pytest.fixture
def artifact(tmp_path: Path) -> Path:
    path = tmp_path / "out" / "liba.a"
    path.parent.mkdir()
    path.write_bytes(b"archive contents")
    return path


@pytest.fixture
def invocation(source: Path, tmp_path: Path) -> Invocation:
    return Invocation(
        argv=("c3c", "static-lib", "-o", "liba", str(source)),
        cwd=tmp_path,
        env={"C3_FLAG": "1"},
    )


class TestCacheKey:
    """Test what the cache key depends on."""

    def test_stable(self, invocation: Invocation, source: Path):
        cache = create_compilation_cache()

        assert cache.key_for(invocation, [source]) == cache.key_for(invocation, [source])

    def test_changes_with_argv(self, invocation: Invocation, source: Path):
        cache = create_compilation_cache()
        other = invocation.model_copy(update={"argv": (*invocation.argv, "-DX")})

        assert cache.key_for(invocation, [source]) != cache.key_for(other, [source])

    def test_changes_with_environment(self, invocation: Invocation, source: Path):
        cache = create_compilation_cache()
        other = invocation.model_copy(update={"env": {"C3_FLAG": "2"}})

        assert cache.key_for(invocation, [source]) != cache.key_for(other, [source])

    def test_environment_order_irrelevant(self, source: Path):
        cache = create_compilation_cache()
        first = Invocation(argv=("c3c",), env={"A": "1", "B": "2"})
        second = Invocation(argv=("c3c",), env={"B": "2", "A": "1"})

        assert cache.key_for(first, [source]) == cache.key_for(second, [source])

    def test_changes_when_source_edited(self, invocation: Invocation, source: Path):
        cache = create_compilation_cache()
        before = cache.key_for(invocation, [source])

        source.write_text("module a;\nfn void f() {}\n", encoding="utf-8")

        assert cache.key_for(invocation, [source]) != before

    def test_changes_when_source_touched(self, invocation: Invocation, source: Path):
        cache = create_compilation_cache()
        before = cache.key_for(invocation, [source])

        stat = source.stat()
        os.utime(source, ns=(stat.st_atime_ns, stat.st_mtime_ns + 1_000_000_000))

        assert cache.key_for(invocation, [source]) != before

    def test_changes_when_library_edited(
        self, invocation: Invocation, source: Path, tmp_path: Path
    ):
        cache = create_compilation_cache()
        library = tmp_path / "libs" / "dep.c3l" / "dep.c3"
        library.parent.mkdir(parents=True)
        library.write_text("module dep;\n", encoding="utf-8")
        libdirs = [tmp_path / "libs"]
        before = cache.key_for(invocation, [source], library_dirs=libdirs)

        library.write_text("module dep;\nfn void g() {}\n", encoding="utf-8")

        assert cache.key_for(invocation, [source], library_dirs=libdirs) != before

    def test_relative_library_dir_follows_working_dir(
        self, invocation: Invocation, source: Path, tmp_path: Path
    ):
        cache = create_compilation_cache()
        archive = tmp_path / "libs" / "dep.c3l"
        archive.parent.mkdir()
        archive.write_bytes(b"PK first")
        before = cache.key_for(invocation, [source], library_dirs=[Path("libs")])

        archive.write_bytes(b"PK second version")

        assert cache.key_for(invocation, [source], library_dirs=[Path("libs")]) != before

    def test_unrelated_library_dir_files_ignored(
        self, invocation: Invocation, source: Path, tmp_path: Path
    ):
        cache = create_compilation_cache()
        libs = tmp_path / "libs"
        libs.mkdir()
        (libs / "README.md").write_text("v1", encoding="utf-8")
        before = cache.key_for(invocation, [source], library_dirs=[libs])

        (libs / "README.md").write_text("version two", encoding="utf-8")

        assert cache.key_for(invocation, [source], library_dirs=[libs]) == before

    def test_changes_with_compiler_version(self, invocation: Invocation, source: Path):
        cache = create_compilation_cache()
        toolchain = make_toolchain_info()
        upgraded = toolchain.model_copy(
            update={"version": ToolchainVersion(major=0, minor=7, patch=7)}
        )

        assert cache.key_for(invocation, [source], toolchain=toolchain) != cache.key_for(
            invocation, [source], toolchain=upgraded
        )

    def test_changes_when_compiler_replaced_in_place(
        self, invocation: Invocation, source: Path, tmp_path: Path
    ):
        cache = create_compilation_cache()
        binary = tmp_path / "bin" / "c3c"
        binary.parent.mkdir()
        binary.write_bytes(b"old compiler")
        toolchain = make_toolchain_info(str(binary))
        before = cache.key_for(invocation, [source], toolchain=toolchain)

        binary.write_bytes(b"rebuilt compiler binary")

        assert cache.key_for(invocation, [source], toolchain=toolchain) != before



class TestCompilationCache:
    """Test lookup and storage."""

    @pytest.fixture
    def cache(self) -> CompilationCache:
        return CompilationCache(create_memory_cache())

    def test_miss_on_empty_cache(self, cache: CompilationCache, artifact: Path):
        assert cache.lookup("missing", artifact) is None

    def test_store_then_hit(self, cache: CompilationCache, artifact: Path):
        cache.store("key", artifact, [WARNING])

        record = cache.lookup("key", artifact)

        assert record is not None
        assert record.path == artifact
        assert record.sha256 == file_sha256(artifact)
        assert record.diagnostics == [WARNING]

    def test_miss_when_artifact_deleted(self, cache: CompilationCache, artifact: Path):
        cache.store("key", artifact, [])
        artifact.unlink()

        assert cache.lookup("key", artifact) is None
        assert not cache.cache.exists("key")

    def test_miss_when_artifact_modified(self, cache: CompilationCache, artifact: Path):
        """Test a same-size edit is caught by the content hash."""
        cache.store("key", artifact, [])
        artifact.write_bytes(b"ARCHIVE CONTENTS")

        assert cache.lookup("key", artifact) is None

    def test_miss_for_different_output_path(
        self, cache: CompilationCache, artifact: Path, tmp_path: Path
    ):
        cache.store("key", artifact, [])

        assert cache.lookup("key", tmp_path / "other.a") is None

    def test_unreadable_entry_discarded(self, cache: CompilationCache, artifact: Path):
        cache.cache.set("key", {"unexpected": True})

        assert cache.lookup("key", artifact) is None
        assert not cache.cache.exists("key")

    def test_store_missing_artifact_is_ignored(
        self, cache: CompilationCache, tmp_path: Path
    ):
        cache.store("key", tmp_path / "never-built.a", [])

        assert not cache.cache.exists("key")

    def test_store_failure_is_not_fatal(self, artifact: Path):
        manager = Mock()
        manager.set.side_effect = RuntimeError("database is locked")
        cache = CompilationCache(manager)

        cache.store("key", artifact, [])

        manager.set.assert_called_once()

    def test_ttl_passed_to_manager(self, artifact: Path):
        manager = Mock()
        cache = CompilationCache(manager, ttl_hours=2)

        cache.store("key", artifact, [])

        assert manager.set.call_args.kwargs["ttl"] == 7200

    def test_persistent_backend(self, artifact: Path, tmp_path: Path):
        """Test records survive reopening a disk-backed cache."""
        first = CompilationCache(create_diskcache_manager(tmp_path / "cache"))
        first.store("key", artifact, [WARNING])
        first.cache.close()

        second = CompilationCache(create_diskcache_manager(tmp_path / "cache"))
        try:
            record = second.lookup("key", artifact)
        finally:
            second.cache.close()

        assert record is not None
        assert record.diagnostics[0].message == "Unused variable 'x'"


class TestCachedCompilation:
    """Test integrity checks of cached records."""

    def test_intact(self, artifact: Path):
        record = CachedCompilation(
            path=artifact,
            size=artifact.stat().st_size,
            sha256=file_sha256(artifact),
        )

        assert record.is_intact()

    def test_size_mismatch(self, artifact: Path):
        record = CachedCompilation(path=artifact, size=1, sha256=file_sha256(artifact))

        assert not record.is_intact()
