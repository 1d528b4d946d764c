"""Module configuration - everything needed to build one Qt module.

This module defines:
- HeaderFile: a module header plus its public/private classification
- ModuleConfig: immutable aggregate of features, defines, headers, sources

Design:
    ModuleConfig is a frozen value. It is built up through pure ``with_*``
    calls that each return a new value and never touch the filesystem.
    All side effects happen later, in a single call to the build
    orchestrator which consumes the finished value.

Example:
    config = (
        ModuleConfig.new("QtCore")
        .with_feature(Scope.GLOBAL_PUBLIC, "thread", True)
        .with_define(Scope.MODULE_PUBLIC, "QT_NO_FOREACH", "")
        .with_headers(find_files(corelib, ".h"))
        .with_sources(find_files(corelib, ".cpp"))
    )
"""

from dataclasses import dataclass, replace
from pathlib import Path
from typing import Iterable, Optional, Tuple, Union

from .configure.features import ConfigLayer, Scope

PathLike = Union[str, Path]

# Qt marks internal headers with a "_p.h" suffix (qobject_p.h, qthread_p.h, ...)
PRIVATE_HEADER_MARKER = "_p.h"


@dataclass(frozen=True)
class HeaderFile:
    """A header belonging to the module being built.

    Attributes:
        path: Header path as declared (may be relative to the working directory)
        private_marker: File-name marker identifying private headers
    """

    path: Path
    private_marker: str = PRIVATE_HEADER_MARKER

    @property
    def name(self) -> str:
        return self.path.name

    @property
    def is_private(self) -> bool:
        """True if the file name marks this as an internal header."""
        return self.private_marker in self.path.name


@dataclass(frozen=True)
class ModuleConfig:
    """Complete, immutable build configuration for one module.

    Attributes:
        module: Module name as used in include paths (e.g. "QtCore")
        global_public: Global features/defines, rendered to qconfig.h
        global_private: Global private features/defines, rendered to qconfig_p.h
        module_public: Module features/defines, rendered to <module>-config.h
        module_private: Module private features/defines, rendered to <module>-config_p.h
        platform_defs: qplatformdefs.h of the target platform, if any
        headers: Module headers to create forwarding headers for
        sources: Translation units to compile
        include_dirs: Extra include directories (e.g. bundled 3rdparty code)
        compile_defines: Defines passed on the compiler command line; a None
            value means a valueless define (-DNAME)
        private_marker: File-name marker identifying private headers
    """

    module: str
    global_public: ConfigLayer = ConfigLayer()
    global_private: ConfigLayer = ConfigLayer()
    module_public: ConfigLayer = ConfigLayer()
    module_private: ConfigLayer = ConfigLayer()
    platform_defs: Optional[Path] = None
    headers: Tuple[HeaderFile, ...] = ()
    sources: Tuple[Path, ...] = ()
    include_dirs: Tuple[Path, ...] = ()
    compile_defines: Tuple[Tuple[str, Optional[str]], ...] = ()
    private_marker: str = PRIVATE_HEADER_MARKER

    @classmethod
    def new(cls, module: str) -> "ModuleConfig":
        """Create an empty configuration for the named module."""
        if not module:
            raise ValueError("Module name must not be empty")
        return cls(module=module)

    @property
    def config_name(self) -> str:
        """Base name of the module config headers (e.g. "qtcore")."""
        return self.module.lower()

    def layer(self, scope: Scope) -> ConfigLayer:
        return getattr(self, scope.value)

    def with_layer(self, scope: Scope, layer: ConfigLayer) -> "ModuleConfig":
        return replace(self, **{scope.value: layer})

    def with_feature(self, scope: Scope, name: str, enabled: bool) -> "ModuleConfig":
        return self.with_layer(scope, self.layer(scope).with_feature(name, enabled))

    def with_features(self, scope: Scope, features: Iterable[Tuple[str, bool]]) -> "ModuleConfig":
        return self.with_layer(scope, self.layer(scope).with_features(features))

    def with_define(self, scope: Scope, key: str, value: str) -> "ModuleConfig":
        return self.with_layer(scope, self.layer(scope).with_define(key, value))

    def with_defines(self, scope: Scope, defines: Iterable[Tuple[str, str]]) -> "ModuleConfig":
        return self.with_layer(scope, self.layer(scope).with_defines(defines))

    def with_platform_defs(self, path: PathLike) -> "ModuleConfig":
        return replace(self, platform_defs=Path(path))

    def with_headers(self, headers: Iterable[PathLike]) -> "ModuleConfig":
        """Append headers. Order is kept; it decides base-name collisions."""
        added = tuple(HeaderFile(Path(h), self.private_marker) for h in headers)
        return replace(self, headers=self.headers + added)

    def with_sources(self, sources: Iterable[PathLike]) -> "ModuleConfig":
        return replace(self, sources=self.sources + tuple(Path(s) for s in sources))

    def with_prefixed_sources(self, prefix: PathLike, files: Iterable[PathLike]) -> "ModuleConfig":
        """Append sources given relative to a common directory."""
        return self.with_sources(Path(prefix) / f for f in files)

    def with_include_dirs(self, include_dirs: Iterable[PathLike]) -> "ModuleConfig":
        return replace(self, include_dirs=self.include_dirs + tuple(Path(d) for d in include_dirs))

    def with_compile_define(self, key: str, value: Optional[str] = None) -> "ModuleConfig":
        """Set a command-line define (last write wins, position kept)."""
        defines = list(self.compile_defines)
        for index, (existing, _) in enumerate(defines):
            if existing == key:
                defines[index] = (key, value)
                break
        else:
            defines.append((key, value))
        return replace(self, compile_defines=tuple(defines))

    @property
    def public_headers(self) -> Tuple[HeaderFile, ...]:
        return tuple(h for h in self.headers if not h.is_private)

    @property
    def private_headers(self) -> Tuple[HeaderFile, ...]:
        return tuple(h for h in self.headers if h.is_private)
