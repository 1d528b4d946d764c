"""Pytest configuration and shared fixtures for qtbuild tests."""

from pathlib import Path

import pytest

from qtbuild import output


@pytest.fixture(autouse=True)
def _fresh_output():  # noqa: PT004
    """Send qtbuild output to the current sys.stdout and reset verbose mode."""
    output.init_timer()
    output.set_verbose(False)


@pytest.fixture
def qt_source(tmp_path: Path) -> Path:
    """Create a miniature Qt source tree.

    Layout:
        qt-src/qtbase/mkspecs/linux-clang/qplatformdefs.h
        qt-src/qtbase/src/corelib/kernel/qobject.h      (class Q_CORE_EXPORT QObject)
        qt-src/qtbase/src/corelib/kernel/qobject_p.h    (private)
        qt-src/qtbase/src/corelib/text/qstring.h        (class QString, class QChar)
        qt-src/qtbase/src/corelib/global/qglobal.cpp
        qt-src/qtbase/src/corelib/text/qstring.cpp
    """
    root = tmp_path / "qt-src"
    corelib = root / "qtbase" / "src" / "corelib"
    mkspec = root / "qtbase" / "mkspecs" / "linux-clang"
    for directory in (corelib / "kernel", corelib / "text", corelib / "global", mkspec):
        directory.mkdir(parents=True)

    (mkspec / "qplatformdefs.h").write_text("#define QPLATFORMDEFS_H\n")
    (corelib / "kernel" / "qobject.h").write_text(
        "#include <QtCore/qglobal.h>\n"
        "class QObjectPrivate;\n"
        "class Q_CORE_EXPORT QObject\n"
        "{\n"
        "    Q_OBJECT\n"
        "};\n"
    )
    (corelib / "kernel" / "qobject_p.h").write_text("class Q_CORE_EXPORT QObjectPrivate : public QObjectData {};\n")
    (corelib / "text" / "qstring.h").write_text(
        "class QChar;\n"
        "class Q_CORE_EXPORT QString\n"
        "{\n"
        "};\n"
        "class QChar { };\n"
    )
    (corelib / "global" / "qglobal.cpp").write_text("int qt_global = 0;\n")
    (corelib / "text" / "qstring.cpp").write_text("int qt_string = 0;\n")
    return root


@pytest.fixture
def corelib(qt_source: Path) -> Path:
    return qt_source / "qtbase" / "src" / "corelib"
