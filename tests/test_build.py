"""Tests for the fluent build-script API."""

import io
import threading
import time
from pathlib import Path
from unittest.mock import Mock

import pytest

from c3bridge import C3FFI, Build
from c3bridge.build import shared_session
from c3bridge.compilation.compilation_service import CompilationService
from c3bridge.compilation.session import BuildSession
from c3bridge.config.settings import C3BridgeSettings
from c3bridge.core.errors import (
    CompilationFailed,
    ConfigError,
    DuplicateOutputPath,
    EmptySourceSet,
)
from c3bridge.models.diagnostics import Diagnostic, DiagnosticSource, Severity
from c3bridge.models.request import (
    ExportMode,
    OptimizationLevel,
    OptimizationProfile,
    OutputKind,
)
from tests.support import needs_posix_exec, read_calls


class TestBuildOptions:
    """Test how builder calls become compile options."""

    @pytest.fixture
    def build(self, test_settings: C3BridgeSettings) -> Build:
        return Build(settings=test_settings, service=Mock())

    def test_defaults(self, build: Build, test_settings: C3BridgeSettings):
        options = build.options("thing")

        assert options.output_name == "thing"
        assert options.output_dir == test_settings.output_dir
        assert options.output_kind is OutputKind.STATIC
        assert options.optimization is OptimizationProfile.DEBUG
        assert options.export_mode is ExportMode.ALL
        assert options.target is None

    def test_chained_configuration(self, build: Build, tmp_path: Path):
        options = (
            build.linking_mode("dynamic")
            .optimization("release")
            .optimization_level("O2")
            .debug_info(True)
            .export_mode("explicit")
            .target("x86_64-unknown-linux-gnu")
            .output_dir(tmp_path / "custom")
            .working_dir(tmp_path)
            .options("thing")
        )

        assert options.output_kind is OutputKind.SHARED
        assert options.optimization is OptimizationProfile.RELEASE
        assert options.opt_level is OptimizationLevel.O2
        assert options.debug_info is True
        assert options.export_mode is ExportMode.EXPLICIT
        assert options.target == "x86_64-unknown-linux-gnu"
        assert options.output_dir == tmp_path / "custom"
        assert options.working_dir == tmp_path

    def test_adders_ignore_repeats(self, build: Build, tmp_path: Path):
        """Test values added twice appear once, in first-seen order."""
        options = (
            build.define("B")
            .defines(["A", "B"])
            .feature("C")
            .include_path(tmp_path / "libs")
            .c3_lib_dirs([tmp_path / "libs", tmp_path / "more"])
            .c3_lib("vec")
            .c3_libs(["vec", "json"])
            .compiled_lib_dir(tmp_path / "native")
            .compiled_libs(["m", "m", "pthread"])
            .linker_arguments(["--as-needed", "--as-needed"])
            .args(["--emit-llvm", "--emit-llvm"])
            .options("thing")
        )

        assert options.defines == ("B", "A", "C")
        assert options.include_paths == (tmp_path / "libs", tmp_path / "more")
        assert options.c3_libs == ("vec", "json")
        assert options.link_search_paths == (tmp_path / "native",)
        assert options.link_libs == ("m", "pthread")
        assert options.linker_args == ("--as-needed",)
        assert options.extra_args == ("--emit-llvm",)

    def test_environment_variables(self, build: Build):
        options = (
            build.environment_variable("A", "1")
            .environment_variables({"B": "2"})
            .environment_variables([("A", "3")])
            .options("thing")
        )

        assert options.environment == {"A": "3", "B": "2"}

    def test_cargo_target_used_when_unset(
        self, build: Build, monkeypatch: pytest.MonkeyPatch
    ):
        monkeypatch.setenv("TARGET", "aarch64-apple-darwin")

        assert build.options("thing").target == "aarch64-apple-darwin"
        assert build.target("linux-x64").options("thing").target == "linux-x64"

    def test_output_dir_falls_back_to_cargo(
        self, tmp_path: Path, monkeypatch: pytest.MonkeyPatch
    ):
        monkeypatch.setenv("OUT_DIR", str(tmp_path / "target" / "out"))
        build = Build(settings=C3BridgeSettings(cache_strategy="disabled"), service=Mock())

        assert build.options("thing").output_dir == tmp_path / "target" / "out"

    def test_invalid_enum_value(self, build: Build):
        with pytest.raises(ValueError):
            build.optimization("fastest")

    def test_unknown_directive_format(self, build: Build):
        with pytest.raises(ConfigError, match="yaml"):
            build.directive_format("yaml")

    def test_directive_format_case_insensitive(self, build: Build):
        build.directive_format(" JSON ")

        assert build._directive_format == "json"

    def test_alias(self):
        assert C3FFI is Build


class TestBuildCompile:
    """Test compile and try_compile with a mocked service."""

    @pytest.fixture
    def service(self) -> Mock:
        return Mock(spec=CompilationService)

    def test_try_compile_passes_inputs(
        self, service: Mock, test_settings: C3BridgeSettings, tmp_path: Path
    ):
        build = Build(settings=test_settings, service=service)

        (
            build.file(tmp_path / "a.c3")
            .files([tmp_path / "b.c3", tmp_path / "a.c3"])
            .directory(tmp_path / "lib")
            .compiler(tmp_path / "c3c")
            .cache(False)
            .try_compile("thing")
        )

        args, kwargs = service.compile.call_args
        assert args[0] == [tmp_path / "a.c3", tmp_path / "b.c3", tmp_path / "lib"]
        assert args[1].output_name == "thing"
        assert kwargs == {"compiler_path": tmp_path / "c3c", "use_cache": False}

    def test_try_compile_raises(self, service: Mock, test_settings: C3BridgeSettings):
        service.compile.side_effect = EmptySourceSet()

        with pytest.raises(EmptySourceSet):
            Build(settings=test_settings, service=service).try_compile("thing")

    def test_compile_failure_exits(self, service: Mock, test_settings: C3BridgeSettings):
        """Test compile reports diagnostics on stderr and exits with status 1."""
        diagnostic = Diagnostic(
            severity=Severity.ERROR,
            message="Expected ';'",
            file="a.c3",
            line=5,
            column=5,
            source=DiagnosticSource.ERROR,
        )
        service.compile.side_effect = CompilationFailed("boom", [diagnostic], 1)
        stdout, stderr = io.StringIO(), io.StringIO()

        with pytest.raises(SystemExit) as exc_info:
            Build(settings=test_settings, service=service).compile(
                "thing", stdout=stdout, stderr=stderr
            )

        assert exc_info.value.code == 1
        assert stdout.getvalue() == ""
        assert stderr.getvalue().splitlines() == [
            "error: boom",
            "a.c3:5:5: error: Expected ';'",
        ]


@needs_posix_exec
class TestBuildEndToEnd:
    """Test the builder driving the stand-in compiler."""

    def test_compile_prints_cargo_directives(
        self,
        test_settings: C3BridgeSettings,
        fake_c3c: Path,
        c3_source: Path,
        tmp_path: Path,
    ):
        stdout = io.StringIO()

        output = (
            Build(settings=test_settings)
            .compiler(fake_c3c)
            .file(c3_source)
            .compile("thing", stdout=stdout)
        )

        lines = stdout.getvalue().splitlines()
        assert output.path.is_file()
        assert f"cargo:rustc-link-search=native={output.path.parent}" in lines
        assert "cargo:rustc-link-lib=static=thing" in lines
        assert f"cargo:rerun-if-changed={c3_source.resolve()}" in lines

    def test_json_directives(
        self,
        test_settings: C3BridgeSettings,
        fake_c3c: Path,
        c3_source: Path,
    ):
        stdout = io.StringIO()

        Build(settings=test_settings).compiler(fake_c3c).file(c3_source).directive_format(
            "json"
        ).compile("thing", stdout=stdout)

        assert '"library_name": "thing"' in stdout.getvalue()

    def test_missing_source_exits(
        self, test_settings: C3BridgeSettings, fake_c3c: Path, tmp_path: Path
    ):
        stderr = io.StringIO()

        with pytest.raises(SystemExit):
            Build(settings=test_settings).compiler(fake_c3c).file(
                tmp_path / "missing.c3"
            ).compile("thing", stderr=stderr)

        assert "Source path does not exist" in stderr.getvalue()


class TestBuildSessionSharing:
    """Test builders in one process share toolchain probing and output claims."""

    def test_builds_share_session(self, test_settings: C3BridgeSettings):
        first = Build(settings=test_settings).service.session
        second = Build(settings=test_settings).service.session

        assert first is second
        assert first is shared_session(test_settings)

    def test_other_compiler_gets_own_session(
        self, test_settings: C3BridgeSettings, tmp_path: Path
    ):
        other = test_settings.model_copy(update={"compiler_path": tmp_path / "c3c"})

        assert shared_session(other) is not shared_session(test_settings)

    def test_explicit_session(self, test_settings: C3BridgeSettings):
        session = Mock(spec=BuildSession)

        build = Build(settings=test_settings, session=session)

        assert build.service.session is session
        assert shared_session(test_settings) is not session


@needs_posix_exec
class TestBuildSessionEndToEnd:
    """Test two builders compiling through the shared session."""

    def test_second_build_to_same_output_rejected(
        self, test_settings: C3BridgeSettings, fake_c3c: Path, c3_source: Path
    ):
        """Test two builders writing the same library collide while one runs."""

        def slow_build() -> Build:
            return (
                Build(settings=test_settings)
                .compiler(fake_c3c)
                .file(c3_source)
                .environment_variable("FAKE_C3C_DELAY", "1.5")
            )

        session = shared_session(test_settings)
        results: list[object] = []
        worker = threading.Thread(
            target=lambda: results.append(slow_build().try_compile("thing"))
        )
        worker.start()
        try:
            deadline = time.monotonic() + 10
            while not session.in_flight:
                assert time.monotonic() < deadline, "compilation never started"
                time.sleep(0.01)

            with pytest.raises(DuplicateOutputPath):
                slow_build().try_compile("thing")
        finally:
            worker.join()

        assert len(results) == 1
        assert session.in_flight == set()
        assert len(read_calls(fake_c3c)) == 1

    def test_toolchain_located_once(
        self, test_settings: C3BridgeSettings, fake_c3c: Path, c3_source: Path
    ):
        toolchains = shared_session(test_settings).toolchains
        toolchains.locator = Mock(wraps=toolchains.locator)

        Build(settings=test_settings).compiler(fake_c3c).file(c3_source).try_compile("one")
        Build(settings=test_settings).compiler(fake_c3c).file(c3_source).try_compile("two")

        assert toolchains.locator.locate.call_count == 1
        assert len(read_calls(fake_c3c)) == 2

    def test_unusable_cache_compiles_without_it(
        self,
        test_settings: C3BridgeSettings,
        fake_c3c: Path,
        c3_source: Path,
        tmp_path: Path,
    ):
        """Test a cache path that cannot be created does not fail the build."""
        (tmp_path / "not-a-dir").write_text("")
        settings = test_settings.model_copy(
            update={
                "cache_path": tmp_path / "not-a-dir" / "cache",
                "cache_strategy": "shared",
            }
        )

        output = (
            Build(settings=settings).compiler(fake_c3c).file(c3_source).try_compile("thing")
        )

        assert output.path.is_file()
        assert output.from_cache is False
