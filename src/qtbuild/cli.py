"""
Command-line interface for qtbuild.

Commands:
    qtbuild configure   Write configuration and forwarding headers for a module
    qtbuild build       Write the headers, then compile the module to a static archive
    qtbuild presets     List packaged presets

Examples:
    qtbuild configure --module QtCore --qt-source qt-src \\
        --headers-dir qt-src/qtbase/src/corelib --out build/qt
    qtbuild build --module QtCore --qt-source qt-src \\
        --headers-dir qt-src/qtbase/src/corelib --sources-dir qt-src/qtbase/src/tools/bootstrap \\
        --compile-define QT_BOOTSTRAPPED --out build/qt
    qtbuild configure ... --feature thread=off --feature global:shared=off --define QT_NO_FOREACH=1

Features and defines apply to the module's public scope unless prefixed with
global:, global_private:, module: or module_private:.
"""

import argparse
import logging
import sys
from dataclasses import dataclass, field
from pathlib import Path
from typing import List, Optional, Tuple

from rich.console import Console
from rich.table import Table

from . import __version__
from .build.orchestrator import BuildOrchestrator, GeneratedHeaders
from .configure.features import Scope
from .configure.presets import DEFAULT_PRESET, apply_preset, list_presets, load_preset
from .discovery import discover_module_files, find_files
from .errors import ConfigurationError, QtBuildError
from .forwarding.scanner import QT_NAMESPACE_SENTINEL, ClassTokenScanner
from .module_config import ModuleConfig
from .output import init_timer, log, log_detail, log_error, log_header, set_verbose
from .settings import BuildSettings

logger = logging.getLogger(__name__)

SCOPE_PREFIXES = {
    "global": Scope.GLOBAL_PUBLIC,
    "global_private": Scope.GLOBAL_PRIVATE,
    "module": Scope.MODULE_PUBLIC,
    "module_private": Scope.MODULE_PRIVATE,
}

TRUE_VALUES = ("on", "1", "true", "yes")
FALSE_VALUES = ("off", "0", "false", "no")


@dataclass
class ConfigureArgs:
    """Arguments shared by the configure and build commands."""

    module: str
    headers_dir: Path
    out_dir: Optional[Path] = None
    qt_source: Optional[Path] = None
    preset: Optional[str] = DEFAULT_PRESET
    features: List[str] = field(default_factory=list)
    defines: List[str] = field(default_factory=list)
    namespace: str = QT_NAMESPACE_SENTINEL
    verbose: bool = False


@dataclass
class BuildArgs(ConfigureArgs):
    """Arguments for the build command."""

    sources_dir: Optional[Path] = None
    include_dirs: List[Path] = field(default_factory=list)
    compile_defines: List[str] = field(default_factory=list)
    lib_name: Optional[str] = None
    opt_level: Optional[str] = None
    target: Optional[str] = None
    jobs: Optional[int] = None


def _split_scope(text: str) -> Tuple[Scope, str]:
    prefix, sep, rest = text.partition(":")
    if sep and prefix in SCOPE_PREFIXES:
        return SCOPE_PREFIXES[prefix], rest
    return Scope.MODULE_PUBLIC, text


def parse_feature(text: str) -> Tuple[Scope, str, bool]:
    """Parse ``[scope:]NAME=on|off``.

    Raises:
        ConfigurationError: If the value is not a recognized boolean
    """
    scope, rest = _split_scope(text)
    name, sep, value = rest.partition("=")
    if not name or not sep:
        raise ConfigurationError(f"Feature must be given as NAME=on|off, got {text!r}")
    lowered = value.lower()
    if lowered in TRUE_VALUES:
        return scope, name, True
    if lowered in FALSE_VALUES:
        return scope, name, False
    raise ConfigurationError(f"Feature {name!r} must be on or off, got {value!r}")


def parse_define(text: str) -> Tuple[Scope, str, str]:
    """Parse ``[scope:]KEY=VALUE``. A bare KEY defines an empty value."""
    scope, rest = _split_scope(text)
    key, _, value = rest.partition("=")
    if not key:
        raise ConfigurationError(f"Define must be given as KEY=VALUE, got {text!r}")
    return scope, key, value


def parse_compile_define(text: str) -> Tuple[str, Optional[str]]:
    """Parse ``KEY=VALUE`` or a valueless ``KEY``."""
    key, sep, value = text.partition("=")
    if not key:
        raise ConfigurationError(f"Compile define must be given as KEY[=VALUE], got {text!r}")
    return key, (value if sep else None)


def build_module_config(args: ConfigureArgs) -> ModuleConfig:
    """Assemble the ModuleConfig described by the command line."""
    config = ModuleConfig.new(args.module)

    if args.preset:
        config = apply_preset(config, load_preset(args.preset), args.qt_source)

    for text in args.features:
        scope, name, enabled = parse_feature(text)
        config = config.with_feature(scope, name, enabled)
    for text in args.defines:
        scope, key, value = parse_define(text)
        config = config.with_define(scope, key, value)

    config = config.with_headers(find_files(args.headers_dir, ".h"))

    if isinstance(args, BuildArgs):
        if args.sources_dir is not None:
            config = config.with_sources(discover_module_files(args.sources_dir).sources)
        config = config.with_include_dirs(args.include_dirs)
        for text in args.compile_defines:
            key, value = parse_compile_define(text)
            config = config.with_compile_define(key, value)

    return config


def _settings_for(args: ConfigureArgs) -> BuildSettings:
    settings = BuildSettings.from_environment(out_dir=args.out_dir)
    if isinstance(args, BuildArgs):
        settings = settings.with_overrides(opt_level=args.opt_level, target=args.target, jobs=args.jobs)
    return settings


def _print_summary(headers: GeneratedHeaders, archive: Optional[Path] = None) -> None:
    table = Table(title=f"{headers.layout.module} output", show_header=True)
    table.add_column("Kind")
    table.add_column("Count", justify="right")
    table.add_column("Location")

    layout = headers.layout
    table.add_row("config headers", str(len(headers.config_headers)), str(layout.config_dir))
    if headers.platform_header is not None:
        table.add_row("platform header", "1", str(headers.platform_header))
    table.add_row("public forwarding", str(len(set(headers.public_headers))), str(layout.forwarding_dir))
    table.add_row("type-name forwarding", str(len(set(headers.type_name_headers))), str(layout.forwarding_dir))
    table.add_row("private forwarding", str(len(set(headers.private_headers))), str(layout.forwarding_private_dir))
    if archive is not None:
        table.add_row("archive", "1", str(archive))

    Console().print(table)


def configure_command(args: ConfigureArgs) -> None:
    """Write configuration and forwarding headers only."""
    settings = _settings_for(args)
    config = build_module_config(args)
    log(f"Configuring {config.module}: {len(config.headers)} headers -> {settings.out_dir}")

    orchestrator = BuildOrchestrator(settings, scanner=ClassTokenScanner(args.namespace))
    headers = orchestrator.generate(config)
    _print_summary(headers)


def build_command(args: BuildArgs) -> None:
    """Write the headers and compile the module."""
    settings = _settings_for(args)
    config = build_module_config(args)
    log(f"Building {config.module}: {len(config.headers)} headers, {len(config.sources)} sources -> {settings.out_dir}")
    log_detail(f"Target: {settings.target}  Opt level: {settings.opt_level}  Jobs: {settings.jobs}", verbose_only=True)

    orchestrator = BuildOrchestrator(settings, scanner=ClassTokenScanner(args.namespace))
    result = orchestrator.build(config, lib_name=args.lib_name)
    _print_summary(result.headers, result.archive)
    log(f"Build time: {result.build_time:.2f}s")


def presets_command() -> None:
    for name in list_presets():
        preset = load_preset(name)
        print(f"{name}\t{preset.description}")


def _add_configure_arguments(parser: argparse.ArgumentParser) -> None:
    parser.add_argument("--module", required=True, help="Module name, e.g. QtCore")
    parser.add_argument("--headers-dir", type=Path, required=True, help="Directory searched recursively for module headers")
    parser.add_argument("--out", dest="out_dir", type=Path, help="Output directory (OUT_DIR takes precedence)")
    parser.add_argument("--qt-source", type=Path, help="Qt source root, used to locate qplatformdefs.h")
    parser.add_argument("--preset", default=DEFAULT_PRESET, help=f"Configuration preset (default: {DEFAULT_PRESET})")
    parser.add_argument("--no-preset", dest="preset", action="store_const", const=None, help="Start from an empty configuration")
    parser.add_argument("--feature", dest="features", action="append", default=[], metavar="[SCOPE:]NAME=on|off")
    parser.add_argument("--define", dest="defines", action="append", default=[], metavar="[SCOPE:]KEY=VALUE")
    parser.add_argument("--namespace", default=QT_NAMESPACE_SENTINEL, help="Prefix of class names that get type-name headers")
    parser.add_argument("-v", "--verbose", action="store_true", help="Verbose output")


def create_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(prog="qtbuild", description="Compile Qt modules without Qt's build system")
    parser.add_argument("--version", action="version", version=f"qtbuild {__version__}")
    subparsers = parser.add_subparsers(dest="command", required=True)

    configure = subparsers.add_parser("configure", help="Write configuration and forwarding headers")
    _add_configure_arguments(configure)

    build = subparsers.add_parser("build", help="Write headers and compile the module")
    _add_configure_arguments(build)
    build.add_argument("--sources-dir", type=Path, help="Directory searched recursively for .cpp sources")
    build.add_argument("--include", dest="include_dirs", type=Path, action="append", default=[], help="Extra include directory")
    build.add_argument("--compile-define", dest="compile_defines", action="append", default=[], metavar="KEY[=VALUE]")
    build.add_argument("--lib-name", help="Archive name (default: lowercase module name)")
    build.add_argument("--opt-level", help="Optimization level: 0-3, s or z")
    build.add_argument("--target", help="Target triple")
    build.add_argument("-j", "--jobs", type=int, help="Parallel compile jobs")

    subparsers.add_parser("presets", help="List packaged presets")
    return parser


def _configure_logging(verbose: bool) -> None:
    logging.basicConfig(
        level=logging.DEBUG if verbose else logging.WARNING,
        format="%(asctime)s %(levelname)s %(name)s: %(message)s",
    )
    set_verbose(verbose)


def main(argv: Optional[List[str]] = None) -> int:
    """Entry point. Returns the process exit code."""
    parser = create_parser()
    ns = parser.parse_args(argv)

    if ns.command == "presets":
        presets_command()
        return 0

    init_timer()
    _configure_logging(ns.verbose)
    log_header("qtbuild", __version__)

    values = {k: v for k, v in vars(ns).items() if k != "command"}
    try:
        if ns.command == "configure":
            configure_command(ConfigureArgs(**values))
        else:
            build_command(BuildArgs(**values))
    except QtBuildError as e:
        log_error(str(e))
        logger.debug("Build failed", exc_info=True)
        return 1
    except KeyboardInterrupt:
        log_error("Interrupted")
        return 130
    return 0


def run() -> None:
    """Console script entry point."""
    sys.exit(main())
