"""Tests for source set resolution."""

import os
from pathlib import Path

import pytest

from c3bridge.compilation.source_resolver import (
    SourceSetResolver,
    create_source_resolver,
)
from c3bridge.core.errors import EmptySourceSet, PathNotFound


def touch(path: Path, text: str = "module m;\n") -> Path:
    path.parent.mkdir(parents=True, exist_ok=True)
    path.write_text(text, encoding="utf-8")
    return path


class TestSourceSetResolver:
    """Test expansion of files and directories into C3 sources."""

    @pytest.fixture
    def resolver(self) -> SourceSetResolver:
        return create_source_resolver()

    def test_single_file(self, resolver: SourceSetResolver, tmp_path: Path):
        source = touch(tmp_path / "a.c3")

        assert resolver.resolve([source]) == [source.resolve()]

    def test_directory_walked_in_sorted_order(
        self, resolver: SourceSetResolver, tmp_path: Path
    ):
        """Test recursive walking yields a stable, sorted file order."""
        touch(tmp_path / "lib" / "z.c3")
        touch(tmp_path / "lib" / "a.c3")
        touch(tmp_path / "lib" / "nested" / "m.c3i")
        touch(tmp_path / "lib" / "b" / "x.c3")

        resolved = resolver.resolve([tmp_path / "lib"])

        root = (tmp_path / "lib").resolve()
        assert resolved == [
            root / "a.c3",
            root / "z.c3",
            root / "b" / "x.c3",
            root / "nested" / "m.c3i",
        ]

    def test_directory_skips_non_sources(
        self, resolver: SourceSetResolver, tmp_path: Path
    ):
        touch(tmp_path / "lib" / "a.c3")
        touch(tmp_path / "lib" / "README.md")
        touch(tmp_path / "lib" / "helper.c")

        assert resolver.resolve([tmp_path / "lib"]) == [
            (tmp_path / "lib" / "a.c3").resolve()
        ]

    def test_extension_case_insensitive(
        self, resolver: SourceSetResolver, tmp_path: Path
    ):
        touch(tmp_path / "lib" / "UPPER.C3")

        assert len(resolver.resolve([tmp_path / "lib"])) == 1

    def test_explicit_file_kept_whatever_extension(
        self, resolver: SourceSetResolver, tmp_path: Path
    ):
        """Test files named explicitly are trusted to be sources."""
        source = touch(tmp_path / "generated.txt")

        assert resolver.resolve([source]) == [source.resolve()]

    def test_duplicates_keep_first_position(
        self, resolver: SourceSetResolver, tmp_path: Path
    ):
        a = touch(tmp_path / "lib" / "a.c3")
        b = touch(tmp_path / "lib" / "b.c3")

        resolved = resolver.resolve([b, tmp_path / "lib", a])

        assert resolved == [b.resolve(), a.resolve()]

    def test_duplicate_through_dot_segments(
        self, resolver: SourceSetResolver, tmp_path: Path
    ):
        a = touch(tmp_path / "lib" / "a.c3")

        resolved = resolver.resolve([a, tmp_path / "lib" / ".." / "lib" / "a.c3"])

        assert resolved == [a.resolve()]

    @pytest.mark.skipif(not hasattr(os, "symlink"), reason="needs symlinks")
    def test_duplicate_through_symlink(
        self, resolver: SourceSetResolver, tmp_path: Path
    ):
        a = touch(tmp_path / "lib" / "a.c3")
        link = tmp_path / "link.c3"
        link.symlink_to(a)

        assert resolver.resolve([a, link]) == [a.resolve()]

    def test_relative_inputs_use_base_dir(self, tmp_path: Path):
        a = touch(tmp_path / "project" / "src" / "a.c3")
        resolver = SourceSetResolver(base_dir=tmp_path / "project")

        assert resolver.resolve(["src/a.c3"]) == [a.resolve()]

    def test_call_base_dir_overrides_resolver(
        self, resolver: SourceSetResolver, tmp_path: Path
    ):
        a = touch(tmp_path / "other" / "a.c3")

        assert resolver.resolve(["a.c3"], base_dir=tmp_path / "other") == [a.resolve()]

    def test_relative_inputs_default_to_cwd(
        self,
        resolver: SourceSetResolver,
        tmp_path: Path,
        monkeypatch: pytest.MonkeyPatch,
    ):
        a = touch(tmp_path / "a.c3")
        monkeypatch.chdir(tmp_path)

        assert resolver.resolve(["a.c3"]) == [a.resolve()]

    def test_missing_path(self, resolver: SourceSetResolver, tmp_path: Path):
        with pytest.raises(PathNotFound) as exc_info:
            resolver.resolve([tmp_path / "missing.c3"])

        assert exc_info.value.path == tmp_path / "missing.c3"

    def test_missing_path_after_valid_one(
        self, resolver: SourceSetResolver, tmp_path: Path
    ):
        a = touch(tmp_path / "a.c3")

        with pytest.raises(PathNotFound):
            resolver.resolve([a, tmp_path / "missing"])

    def test_empty_input_list(self, resolver: SourceSetResolver):
        with pytest.raises(EmptySourceSet):
            resolver.resolve([])

    def test_directory_without_sources(
        self, resolver: SourceSetResolver, tmp_path: Path
    ):
        touch(tmp_path / "docs" / "notes.md")

        with pytest.raises(EmptySourceSet):
            resolver.resolve([tmp_path / "docs"])

    def test_custom_extensions(self, tmp_path: Path):
        touch(tmp_path / "lib" / "a.c3")
        touch(tmp_path / "lib" / "b.c3t")
        resolver = SourceSetResolver(extensions=[".C3T"])

        assert resolver.resolve([tmp_path / "lib"]) == [
            (tmp_path / "lib" / "b.c3t").resolve()
        ]
