"""
Module build orchestration.

Turns a finished ModuleConfig into generated headers and a compiled static
library. The steps run in strict order:

    1. Create the output directory tree
    2. Write the four configuration headers and the qplatformdefs.h
       forwarding header
    3. Write filename and type-name forwarding headers for all module
       headers (public and private run as parallel tasks)
    4. Hand include directories, sources and defines to the compiler driver

Step 1 gates steps 2-3 and step 4 only runs once steps 2-3 have fully
succeeded. The first error aborts the build; a partially written output tree
is simply regenerated on the next run.
"""

import logging
import os
import time
from concurrent.futures import FIRST_EXCEPTION, Future, ThreadPoolExecutor, wait
from dataclasses import dataclass
from pathlib import Path
from typing import Callable, Dict, List, Optional, Tuple

from ..configure.config_header import write_config_header
from ..configure.features import Scope
from ..forwarding.scanner import ClassTokenScanner, TypeNameScanner
from ..forwarding.writer import (
    ForwardingHeader,
    write_filename_headers,
    write_forwarding_header,
    write_type_name_headers,
)
from ..fsutil import ensure_directory
from ..module_config import ModuleConfig
from ..output import TimedLogger, log_detail
from ..settings import BuildSettings
from .compiler import CompileRequest, CompileResult, CompilerDriver, NativeCompilerDriver
from .layout import OutputLayout

logger = logging.getLogger(__name__)

TOTAL_PHASES = 4


@dataclass(frozen=True)
class GeneratedHeaders:
    """Files written by header generation.

    Attributes:
        layout: Output layout the files were written to
        config_headers: The four configuration headers
        platform_header: qplatformdefs.h forwarding header, if configured
        public_headers: Public filename forwarding headers
        type_name_headers: Type-name forwarding headers
        private_headers: Private filename forwarding headers
    """

    layout: OutputLayout
    config_headers: Tuple[Path, ...]
    platform_header: Optional[Path]
    public_headers: Tuple[Path, ...]
    type_name_headers: Tuple[Path, ...]
    private_headers: Tuple[Path, ...]

    @property
    def include_dirs(self) -> Tuple[Path, ...]:
        return self.layout.include_dirs()


@dataclass(frozen=True)
class BuildResult:
    """Result of a complete module build."""

    archive: Path
    headers: GeneratedHeaders
    compile_result: CompileResult
    build_time: float


def create_output_tree(layout: OutputLayout) -> None:
    """Create all output directories. Safe to call on an existing tree.

    Raises:
        DirectoryCreationFailure: If a directory cannot be created
    """
    for directory in layout.directories():
        ensure_directory(directory)


def write_config_headers(config: ModuleConfig, layout: OutputLayout, base_dir: Optional[Path] = None) -> Tuple[Tuple[Path, ...], Optional[Path]]:
    """Write the four configuration headers and the qplatformdefs.h forwarder.

    Returns:
        (config header paths, platform forwarding header path or None)
    """
    config_headers = (
        write_config_header(layout.global_config_header, config.layer(Scope.GLOBAL_PUBLIC)),
        write_config_header(layout.global_private_config_header, config.layer(Scope.GLOBAL_PRIVATE)),
        write_config_header(layout.module_config_header, config.layer(Scope.MODULE_PUBLIC)),
        write_config_header(layout.module_private_config_header, config.layer(Scope.MODULE_PRIVATE)),
    )

    platform_header = None
    if config.platform_defs is not None:
        platform_header = write_forwarding_header(
            layout.config_dir,
            ForwardingHeader(config.platform_defs.name, config.platform_defs),
            base_dir,
        )
    else:
        logger.debug(f"No platform definitions configured for {config.module}")

    return config_headers, platform_header


def write_module_forwarding_headers(
    config: ModuleConfig,
    layout: OutputLayout,
    scanner: TypeNameScanner,
    base_dir: Optional[Path] = None,
) -> Dict[str, Tuple[Path, ...]]:
    """Write all forwarding headers for a module.

    Public filename headers, public type-name headers and private filename
    headers are written by three concurrent tasks. They only read the
    immutable header list and write disjoint files, except that a type name
    equal to a public header's file name is written by two tasks with the
    same content.

    Returns:
        Written paths keyed by "public", "types" and "private"

    Raises:
        The first error raised by any task
    """
    headers = config.headers
    tasks: Dict[str, Callable[[], List[Path]]] = {
        "public": lambda: write_filename_headers(layout.forwarding_dir, headers, private=False, base_dir=base_dir),
        "types": lambda: write_type_name_headers(layout.forwarding_dir, config.public_headers, scanner, base_dir),
        "private": lambda: write_filename_headers(layout.forwarding_dir, headers, private=True, base_dir=base_dir),
    }

    with ThreadPoolExecutor(max_workers=len(tasks), thread_name_prefix="forwarding") as executor:
        futures: Dict[str, Future[List[Path]]] = {name: executor.submit(task) for name, task in tasks.items()}
        done, pending = wait(futures.values(), return_when=FIRST_EXCEPTION)
        for future in pending:
            future.cancel()
        for name, future in futures.items():
            if future in done and future.exception() is not None:
                logger.debug(f"Forwarding header task '{name}' failed")
                raise future.exception()  # type: ignore[misc]

    return {name: tuple(future.result()) for name, future in futures.items()}


class BuildOrchestrator:
    """
    Generates a module's headers and compiles it.

    Args:
        settings: Output directory, target and toolchain settings
        driver: Compiler driver (defaults to NativeCompilerDriver from settings)
        scanner: Type-name scanner (defaults to ClassTokenScanner for Qt)
        base_dir: Directory relative header and source paths are taken from
            (defaults to the current working directory at call time). A
            relative output directory is always taken from the current
            working directory, like the environment it usually comes from.
    """

    def __init__(
        self,
        settings: BuildSettings,
        driver: Optional[CompilerDriver] = None,
        scanner: Optional[TypeNameScanner] = None,
        base_dir: Optional[Path] = None,
    ):
        self.settings = settings
        self.driver = driver
        self.scanner = scanner if scanner is not None else ClassTokenScanner()
        self.base_dir = base_dir

    @property
    def out_dir(self) -> Path:
        """Absolute output directory. Layout, writes and include paths all use it."""
        return Path(self.settings.out_dir).absolute()

    def _input_path(self, path: Path) -> Path:
        base = Path(self.base_dir if self.base_dir is not None else os.getcwd())
        return path if path.is_absolute() else base / path

    def generate(self, config: ModuleConfig) -> GeneratedHeaders:
        """Run steps 1-3: directories, config headers, forwarding headers."""
        layout = OutputLayout.for_module(self.out_dir, config)

        with TimedLogger("Creating output directories", phase=(1, TOTAL_PHASES)):
            create_output_tree(layout)

        with TimedLogger("Writing configuration headers", phase=(2, TOTAL_PHASES)):
            config_headers, platform_header = write_config_headers(config, layout, self.base_dir)
            for path in config_headers:
                log_detail(str(path.relative_to(layout.out_dir)), verbose_only=True)

        with TimedLogger("Writing forwarding headers", phase=(3, TOTAL_PHASES)) as step:
            written = write_module_forwarding_headers(config, layout, self.scanner, self.base_dir)
            step.detail(
                f"{len(set(written['public']))} public, {len(set(written['private']))} private, "
                f"{len(set(written['types']))} type-name headers"
            )

        return GeneratedHeaders(
            layout=layout,
            config_headers=config_headers,
            platform_header=platform_header,
            public_headers=written["public"],
            type_name_headers=written["types"],
            private_headers=written["private"],
        )

    def make_compile_request(self, config: ModuleConfig, headers: GeneratedHeaders, lib_name: Optional[str] = None) -> CompileRequest:
        """Build the compiler hand-off for a module whose headers exist."""
        sources = tuple(self._input_path(s) for s in config.sources)
        include_dirs = headers.include_dirs + tuple(self._input_path(d) for d in config.include_dirs)
        return CompileRequest(
            lib_name=lib_name or config.config_name,
            out_dir=headers.layout.out_dir,
            include_dirs=include_dirs,
            sources=sources,
            defines=config.compile_defines,
            target=self.settings.target,
            host=self.settings.host,
            opt_level=self.settings.opt_level,
            std=self.settings.std,
            jobs=self.settings.jobs,
        )

    def build(self, config: ModuleConfig, lib_name: Optional[str] = None) -> BuildResult:
        """Generate headers, then compile the module exactly once.

        Raises:
            QtBuildError: The first error from any step; the compiler is not
                invoked if header generation fails
        """
        start_time = time.time()
        headers = self.generate(config)

        request = self.make_compile_request(config, headers, lib_name)
        with TimedLogger(f"Compiling {len(request.sources)} sources", phase=(4, TOTAL_PHASES)):
            driver = self.driver if self.driver is not None else NativeCompilerDriver.from_settings(self.settings)
            compile_result = driver.compile(request)

        return BuildResult(
            archive=compile_result.archive,
            headers=headers,
            compile_result=compile_result,
            build_time=time.time() - start_time,
        )


def generate_module_headers(
    config: ModuleConfig,
    out_dir: Path,
    scanner: Optional[TypeNameScanner] = None,
    base_dir: Optional[Path] = None,
) -> GeneratedHeaders:
    """Generate a module's headers into out_dir without compiling."""
    settings = BuildSettings(out_dir=Path(out_dir))
    return BuildOrchestrator(settings, scanner=scanner, base_dir=base_dir).generate(config)


def compile_module(
    config: ModuleConfig,
    settings: BuildSettings,
    driver: Optional[CompilerDriver] = None,
    scanner: Optional[TypeNameScanner] = None,
    lib_name: Optional[str] = None,
    base_dir: Optional[Path] = None,
) -> BuildResult:
    """Generate a module's headers and compile it into a static archive."""
    return BuildOrchestrator(settings, driver=driver, scanner=scanner, base_dir=base_dir).build(config, lib_name)

