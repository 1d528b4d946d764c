"""
Unit tests for the build orchestrator.

Compilation is replaced by a recording driver so these tests only exercise
header generation, step ordering and the compiler hand-off.
"""

from pathlib import Path
from typing import List

import pytest

from qtbuild.build.compiler import CompileRequest, CompileResult
from qtbuild.build.orchestrator import BuildOrchestrator, compile_module, generate_module_headers
from qtbuild.configure.features import Scope
from qtbuild.errors import CompilerFailure, DirectoryCreationFailure, NonTextContent, SourceNotFound
from qtbuild.forwarding.scanner import ClassTokenScanner
from qtbuild.module_config import ModuleConfig
from qtbuild.settings import BuildSettings


class RecordingDriver:
    """Compiler driver that records requests instead of compiling."""

    def __init__(self, fail: bool = False):
        self.requests: List[CompileRequest] = []
        self.fail = fail

    def compile(self, request: CompileRequest) -> CompileResult:
        self.requests.append(request)
        if self.fail:
            raise CompilerFailure("Compilation failed for a.cpp", diagnostics="a.cpp:1: error: boom")
        return CompileResult(archive=request.archive_path, objects=())


@pytest.fixture
def coremod(tmp_path):
    """Two-header module: foo.h declares Widget, bar_p.h is private."""
    src = tmp_path / "src"
    src.mkdir()
    (src / "foo.h").write_text("class API Widget {};\n")
    (src / "bar_p.h").write_text("int bar();\n")
    (src / "foo.cpp").write_text("int foo() { return 0; }\n")
    config = (
        ModuleConfig.new("CoreMod")
        .with_feature(Scope.MODULE_PUBLIC, "THREAD", True)
        .with_define(Scope.MODULE_PUBLIC, "VERSION", "1")
        .with_headers([src / "foo.h", src / "bar_p.h"])
        .with_sources([src / "foo.cpp"])
    )
    return config


def _tree(root: Path) -> dict:
    return {p.relative_to(root).as_posix(): p.read_bytes() for p in sorted(root.rglob("*")) if p.is_file()}


class TestGenerate:
    """Header generation (steps 1-3)"""

    def test_coremod_output_tree(self, tmp_path, coremod):
        out = tmp_path / "out"
        headers = generate_module_headers(coremod, out, scanner=ClassTokenScanner("W"))

        assert (out / "CoreMod" / "coremod-config.h").read_text() == "#define QT_FEATURE_THREAD 1\n\n#define VERSION 1\n"
        assert (out / "CoreMod" / "qconfig.h").read_text() == "\n"
        assert (out / "CoreMod" / "private" / "qconfig_p.h").read_text() == "\n"
        assert (out / "CoreMod" / "private" / "coremod-config_p.h").read_text() == "\n"

        assert (out / "forwarding" / "CoreMod" / "foo.h").read_text() == '#include "../../../src/foo.h"\n'
        assert (out / "forwarding" / "CoreMod" / "Widget").read_text() == '#include "../../../src/foo.h"\n'
        assert (out / "forwarding" / "CoreMod" / "private" / "bar_p.h").read_text() == '#include "../../../../src/bar_p.h"\n'
        assert not (out / "forwarding" / "CoreMod" / "bar_p.h").exists()

        assert headers.public_headers == (out / "forwarding" / "CoreMod" / "foo.h",)
        assert headers.type_name_headers == (out / "forwarding" / "CoreMod" / "Widget",)
        assert headers.private_headers == (out / "forwarding" / "CoreMod" / "private" / "bar_p.h",)
        assert headers.platform_header is None

    def test_private_headers_are_not_scanned(self, tmp_path):
        src = tmp_path / "src"
        src.mkdir()
        (src / "qthing_p.h").write_text("class QThingPrivate {};\n")
        config = ModuleConfig.new("QtCore").with_headers([src / "qthing_p.h"])

        headers = generate_module_headers(config, tmp_path / "out")

        assert headers.type_name_headers == ()
        assert not (tmp_path / "out" / "forwarding" / "QtCore" / "QThingPrivate").exists()

    def test_platform_header_forwarded(self, tmp_path, qt_source):
        platform_defs = qt_source / "qtbase" / "mkspecs" / "linux-clang" / "qplatformdefs.h"
        config = ModuleConfig.new("QtCore").with_platform_defs(platform_defs)

        headers = generate_module_headers(config, tmp_path / "out")

        assert headers.platform_header == tmp_path / "out" / "QtCore" / "qplatformdefs.h"
        assert headers.platform_header.read_text() == '#include "../../qt-src/qtbase/mkspecs/linux-clang/qplatformdefs.h"\n'

    def test_deterministic_output(self, tmp_path, corelib):
        config = ModuleConfig.new("QtCore").with_headers(sorted(corelib.rglob("*.h")))

        generate_module_headers(config, tmp_path / "out1")
        generate_module_headers(config, tmp_path / "out2")

        assert _tree(tmp_path / "out1") == _tree(tmp_path / "out2")

    def test_regeneration_replaces_files(self, tmp_path, coremod):
        out = tmp_path / "out"
        generate_module_headers(coremod, out, scanner=ClassTokenScanner("W"))
        first = _tree(out)
        generate_module_headers(coremod, out, scanner=ClassTokenScanner("W"))
        assert _tree(out) == first

    def test_non_utf8_header_fails(self, tmp_path):
        src = tmp_path / "src"
        src.mkdir()
        (src / "qbad.h").write_bytes(b"class QBad \xff {};")
        config = ModuleConfig.new("QtCore").with_headers([src / "qbad.h"])

        with pytest.raises(NonTextContent):
            generate_module_headers(config, tmp_path / "out")

    def test_relative_paths_use_base_dir(self, qt_source, tmp_path):
        config = ModuleConfig.new("QtCore").with_headers(["qtbase/src/corelib/text/qstring.h"])

        headers = generate_module_headers(config, qt_source / "out", base_dir=qt_source)

        assert (qt_source / "out" / "forwarding" / "QtCore" / "QString").read_text() == (
            '#include "../../../qtbase/src/corelib/text/qstring.h"\n'
        )
        assert len(headers.type_name_headers) == 2

    def test_relative_out_dir_with_base_dir(self, tmp_path, monkeypatch):
        """A relative out dir is written under the working directory and its
        includes still reach headers declared relative to base_dir."""
        work = tmp_path / "work"
        work.mkdir()
        base = tmp_path / "base" / "deep"
        (base / "src").mkdir(parents=True)
        (base / "src" / "qfoo.h").write_text("class QFoo {};\n")
        monkeypatch.chdir(work)
        config = ModuleConfig.new("QtCore").with_headers(["src/qfoo.h"])

        headers = generate_module_headers(config, Path("out"), base_dir=base)

        forwarding_dir = work / "out" / "forwarding" / "QtCore"
        assert headers.layout.out_dir.resolve() == (work / "out").resolve()
        for name in ("qfoo.h", "QFoo"):
            text = (forwarding_dir / name).read_text()
            include_path = text[len('#include "') : -len('"\n')]
            assert (forwarding_dir / include_path).resolve() == (base / "src" / "qfoo.h").resolve()
        assert not (base / "out").exists()


class TestBuild:
    """Full build including the compiler hand-off (step 4)"""

    def test_compiler_receives_generated_include_dirs(self, tmp_path, coremod):
        driver = RecordingDriver()
        settings = BuildSettings(out_dir=tmp_path / "out", jobs=2, opt_level="2")

        result = compile_module(
            coremod.with_compile_define("QT_BOOTSTRAPPED").with_include_dirs([tmp_path / "extra"]),
            settings,
            driver=driver,
            scanner=ClassTokenScanner("W"),
        )

        assert len(driver.requests) == 1
        request = driver.requests[0]
        out = tmp_path / "out"
        assert request.include_dirs == (
            out,
            out / "CoreMod",
            out / "CoreMod" / "private",
            out / "forwarding",
            out / "forwarding" / "CoreMod",
            out / "forwarding" / "CoreMod" / "private",
            tmp_path / "extra",
        )
        assert request.sources == (tmp_path / "src" / "foo.cpp",)
        assert request.defines == (("QT_BOOTSTRAPPED", None),)
        assert request.lib_name == "coremod"
        assert request.opt_level == "2"
        assert request.jobs == 2
        assert result.archive == out / "libcoremod.a"

    def test_lib_name_override(self, tmp_path, coremod):
        driver = RecordingDriver()
        BuildOrchestrator(BuildSettings(out_dir=tmp_path / "out"), driver=driver).build(coremod, lib_name="qt6core")
        assert driver.requests[0].archive_path == tmp_path / "out" / "libqt6core.a"

    def test_generation_failure_skips_compile(self, tmp_path, coremod):
        driver = RecordingDriver()
        broken = coremod.with_headers([tmp_path / "src" / "missing.h"])

        with pytest.raises(SourceNotFound):
            compile_module(broken, BuildSettings(out_dir=tmp_path / "out"), driver=driver)

        assert driver.requests == []

    def test_compiler_failure_propagates(self, tmp_path, coremod):
        driver = RecordingDriver(fail=True)

        with pytest.raises(CompilerFailure) as exc_info:
            compile_module(coremod, BuildSettings(out_dir=tmp_path / "out"), driver=driver)

        assert "a.cpp:1: error: boom" in str(exc_info.value)
        # Headers were written before the compiler ran
        assert (tmp_path / "out" / "forwarding" / "CoreMod" / "foo.h").exists()

    def test_relative_sources_resolved_against_base_dir(self, tmp_path):
        (tmp_path / "a.cpp").write_text("")
        config = ModuleConfig.new("QtCore").with_sources(["a.cpp"])
        driver = RecordingDriver()

        BuildOrchestrator(BuildSettings(out_dir=tmp_path / "out"), driver=driver, base_dir=tmp_path).build(config)

        assert driver.requests[0].sources == (tmp_path / "a.cpp",)

    def test_unusable_out_dir_aborts_before_compile(self, tmp_path, coremod):
        """An output path that is a regular file fails directory creation."""
        out = tmp_path / "out"
        out.write_text("not a directory\n")
        driver = RecordingDriver()

        with pytest.raises(DirectoryCreationFailure) as exc_info:
            compile_module(coremod, BuildSettings(out_dir=out), driver=driver)

        assert exc_info.value.path is not None
        assert out in exc_info.value.path.parents
        assert driver.requests == []

    def test_relative_out_dir_passed_to_compiler_as_absolute(self, tmp_path, coremod, monkeypatch):
        monkeypatch.chdir(tmp_path)
        driver = RecordingDriver()

        BuildOrchestrator(BuildSettings(out_dir=Path("build")), driver=driver).build(coremod)

        request = driver.requests[0]
        assert request.out_dir.is_absolute()
        assert request.out_dir.resolve() == (tmp_path / "build").resolve()
        assert all(d.is_absolute() for d in request.include_dirs)
