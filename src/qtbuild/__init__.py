"""qtbuild - compile Qt modules from source without Qt's build system.

qtbuild writes the configuration headers and forwarding headers a Qt module
expects to find, then compiles the module's sources into a static archive.

Typical use from a build script:

    from qtbuild import BuildSettings, ModuleConfig, Scope, compile_module
    from qtbuild.configure.presets import apply_preset, load_preset
    from qtbuild.discovery import discover_module_files

    files = discover_module_files(qt_src / "qtbase/src/corelib")
    config = apply_preset(ModuleConfig.new("QtCore"), load_preset(), qt_src)
    config = config.with_headers(files.headers).with_sources(files.sources)
    result = compile_module(config, BuildSettings.from_environment())
"""

from .build.orchestrator import BuildOrchestrator, compile_module, generate_module_headers
from .configure.features import ConfigLayer, DefineEntry, FeatureFlag, Scope
from .errors import (
    CompilerFailure,
    ConfigurationError,
    DirectoryCreationFailure,
    NonTextContent,
    PathResolutionError,
    QtBuildError,
    SourceNotFound,
    TargetNotFound,
    WriteFailure,
)
from .module_config import HeaderFile, ModuleConfig
from .settings import BuildSettings

__version__ = "0.1.0"

__all__ = [
    "BuildOrchestrator",
    "BuildSettings",
    "CompilerFailure",
    "ConfigLayer",
    "ConfigurationError",
    "DefineEntry",
    "DirectoryCreationFailure",
    "FeatureFlag",
    "HeaderFile",
    "ModuleConfig",
    "NonTextContent",
    "PathResolutionError",
    "QtBuildError",
    "Scope",
    "SourceNotFound",
    "TargetNotFound",
    "WriteFailure",
    "__version__",
    "compile_module",
    "generate_module_headers",
]
