"""Core test fixtures for the c3bridge project."""

import logging
import os
import stat
import sys
from collections.abc import Callable, Generator
from pathlib import Path

import pytest
from typer.testing import CliRunner

from c3bridge.compilation.compilation_service import CompilationService
from c3bridge.compilation.process_runner import ProcessRunner
from c3bridge.compilation.session import BuildSession
from c3bridge.config.settings import C3BridgeSettings
from c3bridge.toolchain.locator import ToolchainLocator
from tests.support import FAKE_C3C_SCRIPT, TRIVIAL_SOURCE, RecordingRunner


# ---- Base Fixtures ----


@pytest.fixture
def cli_runner() -> CliRunner:
    """Return a Typer CLI test runner."""
    return CliRunner()


# ---- Test Isolation Fixtures ----


@pytest.fixture(autouse=True)
def isolated_environment(
    tmp_path: Path, monkeypatch: pytest.MonkeyPatch
) -> Generator[None, None, None]:
    """Keep developer settings and cargo variables out of tests.

    Builds also start from an empty process-wide session.
    """
    for name in list(os.environ):
        if name.startswith("C3BRIDGE_"):
            monkeypatch.delenv(name, raising=False)
    for name in ("OUT_DIR", "TARGET", "FAKE_C3C_DELAY", "FAKE_C3C_ECHO"):
        monkeypatch.delenv(name, raising=False)
    monkeypatch.setenv("XDG_CONFIG_HOME", str(tmp_path / "xdg-config"))
    monkeypatch.setenv("XDG_CACHE_HOME", str(tmp_path / "xdg-cache"))
    monkeypatch.setattr("c3bridge.build._shared_sessions", {})
    yield


@pytest.fixture
def restore_root_logger() -> Generator[None, None, None]:
    """Undo setup_logging, which replaces the root handlers."""
    root = logging.getLogger()
    handlers, level = root.handlers[:], root.level
    yield
    for handler in root.handlers:
        if handler not in handlers:
            handler.close()
    root.handlers = handlers
    root.setLevel(level)


@pytest.fixture
def test_settings(tmp_path: Path) -> C3BridgeSettings:
    """Settings writing artifacts and cache under tmp_path."""
    return C3BridgeSettings(
        output_dir=tmp_path / "out",
        cache_path=tmp_path / "cache",
        cache_strategy="disabled",
    )


# ---- Stand-in Compiler Fixtures ----


@pytest.fixture
def make_fake_c3c(tmp_path: Path) -> Callable[..., Path]:
    """Factory writing a stand-in c3c executable.

    Usage:
        def test_old_compiler(make_fake_c3c):
            c3c = make_fake_c3c(version="0.5.0", name="old/c3c")
    """

    def _make(
        version: str = "0.7.6", list_targets: bool = True, name: str = "bin/c3c"
    ) -> Path:
        script = tmp_path / name
        script.parent.mkdir(parents=True, exist_ok=True)
        script.write_text(
            FAKE_C3C_SCRIPT.replace("@PYTHON@", sys.executable)
            .replace("@VERSION@", version)
            .replace("@LIST_TARGETS@", repr(list_targets)),
            encoding="utf-8",
        )
        script.chmod(script.stat().st_mode | stat.S_IXUSR | stat.S_IXGRP | stat.S_IXOTH)
        return script

    return _make


@pytest.fixture
def fake_c3c(make_fake_c3c: Callable[..., Path]) -> Path:
    """Stand-in c3c reporting version 0.7.6."""
    return make_fake_c3c()


# ---- Source Fixtures ----


@pytest.fixture
def source_dir(tmp_path: Path) -> Path:
    directory = tmp_path / "src"
    directory.mkdir()
    return directory


@pytest.fixture
def c3_source(source_dir: Path) -> Path:
    """A single trivial C3 source exporting one function."""
    path = source_dir / "thing.c3"
    path.write_text(TRIVIAL_SOURCE, encoding="utf-8")
    return path


@pytest.fixture
def broken_source(source_dir: Path) -> Path:
    path = source_dir / "broken.c3"
    path.write_text(
        "module broken;\n\nfn void f()\n{\n    int x = SYNTAX_ERROR\n}\n",
        encoding="utf-8",
    )
    return path


# ---- Pipeline Fixtures ----


@pytest.fixture
def locator(fake_c3c: Path) -> ToolchainLocator:
    return ToolchainLocator(compiler_path=fake_c3c, search_dirs=[])


@pytest.fixture
def build_session(locator: ToolchainLocator) -> BuildSession:
    return BuildSession(locator)


@pytest.fixture
def compilation_service(build_session: BuildSession) -> CompilationService:
    """Service running the stand-in compiler without caching."""
    return CompilationService(session=build_session, runner=ProcessRunner())


@pytest.fixture
def recording_runner() -> RecordingRunner:
    return RecordingRunner()
