"""
Unit tests for ModuleConfig.

ModuleConfig is a pure value: building one never touches the filesystem.
"""

from pathlib import Path

import pytest

from qtbuild.configure.features import ConfigLayer, FeatureFlag, Scope
from qtbuild.module_config import HeaderFile, ModuleConfig


class TestHeaderFile:
    """Tests for HeaderFile classification"""

    @pytest.mark.parametrize(
        "name,private",
        [
            ("qobject.h", False),
            ("qobject_p.h", True),
            ("qprivate.h", False),
            ("foo_p.h.in", True),
        ],
    )
    def test_is_private(self, name, private):
        assert HeaderFile(Path("src") / name).is_private is private

    def test_custom_marker(self):
        header = HeaderFile(Path("src/widget.internal.h"), private_marker=".internal")
        assert header.is_private

    def test_name(self):
        assert HeaderFile(Path("a/b/qstring.h")).name == "qstring.h"


class TestModuleConfig:
    """Tests for ModuleConfig builders"""

    def test_new_is_empty(self):
        config = ModuleConfig.new("QtCore")
        assert config.module == "QtCore"
        assert all(config.layer(scope) == ConfigLayer() for scope in Scope)
        assert config.headers == ()
        assert config.sources == ()
        assert config.platform_defs is None

    def test_empty_name_rejected(self):
        with pytest.raises(ValueError):
            ModuleConfig.new("")

    def test_config_name_is_lowercase(self):
        assert ModuleConfig.new("CoreMod").config_name == "coremod"

    def test_builders_do_not_mutate(self):
        base = ModuleConfig.new("QtCore")
        base.with_feature(Scope.MODULE_PUBLIC, "thread", True)
        base.with_headers(["a.h"])
        assert base == ModuleConfig.new("QtCore")

    def test_feature_goes_to_its_scope_only(self):
        config = ModuleConfig.new("QtCore").with_feature(Scope.GLOBAL_PRIVATE, "x", True)
        assert config.global_private.features == (FeatureFlag("x", True),)
        assert config.global_public.is_empty()
        assert config.module_public.is_empty()
        assert config.module_private.is_empty()

    def test_define_last_write_wins(self):
        config = (
            ModuleConfig.new("QtCore")
            .with_define(Scope.MODULE_PUBLIC, "VERSION", "1")
            .with_define(Scope.MODULE_PUBLIC, "VERSION", "2")
        )
        assert config.module_public.define("VERSION") == "2"
        assert len(config.module_public.defines) == 1

    def test_headers_keep_order_and_split_by_visibility(self):
        config = ModuleConfig.new("QtCore").with_headers(["b.h", "a_p.h", "a.h"])
        assert [h.name for h in config.headers] == ["b.h", "a_p.h", "a.h"]
        assert [h.name for h in config.public_headers] == ["b.h", "a.h"]
        assert [h.name for h in config.private_headers] == ["a_p.h"]

    def test_headers_do_not_require_existing_files(self):
        config = ModuleConfig.new("QtCore").with_headers(["does/not/exist.h"])
        assert config.headers[0].path == Path("does/not/exist.h")

    def test_prefixed_sources(self):
        config = ModuleConfig.new("QtCore").with_prefixed_sources("qtbase/src/corelib", ["global/qglobal.cpp", "text/qstring.cpp"])
        assert config.sources == (
            Path("qtbase/src/corelib/global/qglobal.cpp"),
            Path("qtbase/src/corelib/text/qstring.cpp"),
        )

    def test_compile_defines(self):
        config = (
            ModuleConfig.new("QtCore")
            .with_compile_define("QT_BOOTSTRAPPED")
            .with_compile_define("QT_VERSION_MAJOR", "6")
            .with_compile_define("QT_BOOTSTRAPPED", "1")
        )
        assert config.compile_defines == (("QT_BOOTSTRAPPED", "1"), ("QT_VERSION_MAJOR", "6"))

    def test_include_dirs_and_platform_defs(self):
        config = ModuleConfig.new("QtCore").with_include_dirs(["3rdparty/zlib"]).with_platform_defs("mkspecs/qplatformdefs.h")
        assert config.include_dirs == (Path("3rdparty/zlib"),)
        assert config.platform_defs == Path("mkspecs/qplatformdefs.h")
