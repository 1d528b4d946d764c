"""Compiler driver.

The orchestrator hands its include paths, sources and defines to a
CompilerDriver and gets a static archive back. Any object implementing the
CompilerDriver protocol can be used; NativeCompilerDriver runs a C++ compiler
and ``ar`` directly.

Compilation Process (NativeCompilerDriver):
    1. Check that every source exists
    2. Write include flags to a response file (avoids command line limits)
    3. Compile translation units in parallel (one worker per job)
    4. Archive all objects into lib<name>.a once every unit has compiled

Compiler diagnostics are never interpreted: a failing unit raises
CompilerFailure with the tool's output attached verbatim. Units already
running finish; units not yet started are cancelled.
"""

import hashlib
import logging
import subprocess
from concurrent.futures import FIRST_EXCEPTION, Future, ThreadPoolExecutor, wait
from dataclasses import dataclass
from pathlib import Path
from typing import List, Optional, Protocol, Sequence, Tuple

from ..errors import CompilerFailure, SourceNotFound
from ..fsutil import ensure_directory, write_text_file
from ..settings import DEFAULT_STD, BuildSettings
from ..subprocess_utils import format_command, safe_run

logger = logging.getLogger(__name__)

COMPILE_TIMEOUT = 300  # seconds per translation unit
ARCHIVE_TIMEOUT = 120


@dataclass(frozen=True)
class CompileRequest:
    """Everything a compiler driver needs to build one static library.

    Attributes:
        lib_name: Library name; the archive is lib<lib_name>.a
        out_dir: Directory for objects, response file and archive
        include_dirs: Include directories, in search order
        sources: Translation units to compile
        defines: Command-line defines; None values are valueless (-DNAME)
        target: Target triple
        host: Host triple
        opt_level: Optimization level ("0".."3", "s", "z")
        std: C++ language standard
        jobs: Maximum parallel compile jobs
    """

    lib_name: str
    out_dir: Path
    include_dirs: Tuple[Path, ...]
    sources: Tuple[Path, ...]
    defines: Tuple[Tuple[str, Optional[str]], ...] = ()
    target: str = "x86_64-unknown-linux-gnu"
    host: str = "x86_64-unknown-linux-gnu"
    opt_level: str = "0"
    std: str = DEFAULT_STD
    jobs: int = 1

    def define_flags(self) -> List[str]:
        return [f"-D{key}" if value is None else f"-D{key}={value}" for key, value in self.defines]

    def include_flags(self) -> List[str]:
        # Forward slashes for GCC/clang compatibility on Windows
        return [f"-I{str(path).replace(chr(92), '/')}" for path in self.include_dirs]

    @property
    def archive_path(self) -> Path:
        return self.out_dir / f"lib{self.lib_name}.a"


@dataclass(frozen=True)
class CompileResult:
    """Result of a successful compile."""

    archive: Path
    objects: Tuple[Path, ...]


class CompilerDriver(Protocol):
    """Builds a static library from a CompileRequest.

    Implementations raise CompilerFailure (or SourceNotFound) on failure and
    never retry.
    """

    def compile(self, request: CompileRequest) -> CompileResult: ...


def object_path(obj_dir: Path, source: Path) -> Path:
    """Object file for source. A path hash keeps same-named sources apart."""
    digest = hashlib.sha1(str(source.resolve()).encode("utf-8")).hexdigest()[:10]
    return obj_dir / f"{digest}-{source.stem}.o"


class NativeCompilerDriver:
    """Compiles with a gcc/clang compatible C++ compiler and archives with ar.

    Args:
        cxx: C++ compiler executable
        ar: Archiver executable
        extra_flags: Flags appended to every compile command
    """

    def __init__(self, cxx: str = "c++", ar: str = "ar", extra_flags: Sequence[str] = ()):
        self.cxx = cxx
        self.ar = ar
        self.extra_flags = list(extra_flags)

    @classmethod
    def from_settings(cls, settings: BuildSettings, extra_flags: Sequence[str] = ()) -> "NativeCompilerDriver":
        return cls(cxx=settings.cxx, ar=settings.ar, extra_flags=extra_flags)

    @property
    def is_clang(self) -> bool:
        return "clang" in Path(self.cxx).name

    def base_flags(self, request: CompileRequest) -> List[str]:
        flags = [f"-std={request.std}", f"-O{request.opt_level}", "-fPIC"]
        if self.is_clang:
            flags.append(f"--target={request.target}")
        return flags

    def build_command(self, request: CompileRequest, source: Path, obj: Path, response_file: Path) -> List[str]:
        """Build the compile command for one translation unit."""
        cmd = [self.cxx]
        cmd.extend(self.base_flags(request))
        cmd.extend(request.define_flags())
        cmd.extend(self.extra_flags)
        cmd.append(f"@{response_file}")
        cmd.extend(["-c", str(source), "-o", str(obj)])
        return cmd

    def compile_source(self, request: CompileRequest, source: Path, obj: Path, response_file: Path) -> Path:
        """Compile one translation unit.

        Raises:
            CompilerFailure: If the compiler cannot be run or exits non-zero
        """
        cmd = self.build_command(request, source, obj, response_file)
        logger.debug(f"Compiling {source.name}: {format_command(cmd)}")
        result = self._run(cmd, COMPILE_TIMEOUT, f"Compilation failed for {source.name}", source)
        if result.stderr:
            logger.debug(f"{source.name} warnings:\n{result.stderr}")
        return obj

    def archive(self, request: CompileRequest, objects: Sequence[Path]) -> Path:
        """Create the static archive from object files.

        Raises:
            CompilerFailure: If ar fails or produces no archive
        """
        archive_path = request.archive_path
        # ar appends to an existing archive; start clean
        if archive_path.exists():
            archive_path.unlink()

        cmd = [self.ar, "rcs", str(archive_path)]
        cmd.extend(str(obj) for obj in objects)
        self._run(cmd, ARCHIVE_TIMEOUT, "Archive creation failed", archive_path)

        if not archive_path.exists():
            raise CompilerFailure(f"Archive was not created: {archive_path}", command=cmd, path=archive_path)
        return archive_path

    def compile(self, request: CompileRequest) -> CompileResult:
        """Compile all sources and archive them.

        Raises:
            SourceNotFound: If a source file does not exist
            CompilerFailure: If any compile or the archive step fails
        """
        if not request.sources:
            raise CompilerFailure(f"No sources to compile for {request.lib_name}")
        for source in request.sources:
            if not source.is_file():
                raise SourceNotFound(f"Source file not found: {source}", source)

        obj_dir = ensure_directory(request.out_dir / "obj")
        response_file = write_text_file(request.out_dir / "includes.rsp", "\n".join(request.include_flags()) + "\n")

        jobs = [(source, object_path(obj_dir, source)) for source in request.sources]
        logger.info(f"Compiling {len(jobs)} sources for {request.lib_name} with {request.jobs} jobs")

        with ThreadPoolExecutor(max_workers=request.jobs, thread_name_prefix="compile") as executor:
            futures: List[Future[Path]] = [
                executor.submit(self.compile_source, request, source, obj, response_file) for source, obj in jobs
            ]
            done, pending = wait(futures, return_when=FIRST_EXCEPTION)
            for future in pending:
                future.cancel()
            for future in futures:
                if future in done and future.exception() is not None:
                    raise future.exception()  # type: ignore[misc]

        objects = tuple(obj for _, obj in jobs)
        archive = self.archive(request, objects)
        logger.info(f"Created {archive} from {len(objects)} objects")
        return CompileResult(archive=archive, objects=objects)

    def _run(self, cmd: List[str], timeout: int, failure_message: str, path: Path) -> subprocess.CompletedProcess:
        try:
            result = safe_run(cmd, capture_output=True, text=True, timeout=timeout)
        except subprocess.TimeoutExpired as e:
            raise CompilerFailure(f"{failure_message}: timed out after {timeout}s", command=cmd, path=path) from e
        except OSError as e:
            raise CompilerFailure(f"{failure_message}: unable to run {cmd[0]}: {e}", command=cmd, path=path) from e

        if result.returncode != 0:
            diagnostics = "\n".join(part for part in (result.stderr, result.stdout) if part)
            raise CompilerFailure(
                f"{failure_message} (exit code {result.returncode})",
                diagnostics=diagnostics,
                command=cmd,
                path=path,
            )
        return result
