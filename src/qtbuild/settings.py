"""
Build settings.

qtbuild can run standalone (CLI, tests) or from inside another build tool's
build script. Build scripts usually export their settings through the
environment, so BuildSettings can be read from it:

    OUT_DIR    Output directory (wins over an explicitly passed directory)
    HOST       Host triple (default: same as TARGET)
    TARGET     Target triple (default: x86_64-unknown-linux-gnu)
    OPT_LEVEL  Optimization level 0-3, "s" or "z" (default: 0)
    NUM_JOBS   Parallel compile jobs (default: CPU count)
    CXX        C++ compiler (default: c++)
    AR         Archiver (default: ar)
"""

import logging
import multiprocessing
import os
from dataclasses import dataclass, replace
from pathlib import Path
from typing import Mapping, Optional

from .errors import ConfigurationError

logger = logging.getLogger(__name__)

DEFAULT_TARGET = "x86_64-unknown-linux-gnu"
DEFAULT_STD = "c++17"
VALID_OPT_LEVELS = ("0", "1", "2", "3", "s", "z")


@dataclass(frozen=True)
class BuildSettings:
    """Settings that are not part of the module configuration itself.

    Attributes:
        out_dir: Root directory for generated headers and build artifacts
        host: Host triple
        target: Target triple
        opt_level: Optimization level ("0".."3", "s", "z")
        jobs: Number of parallel compile jobs
        cxx: C++ compiler executable
        ar: Archiver executable
        std: C++ language standard
    """

    out_dir: Path
    host: str = DEFAULT_TARGET
    target: str = DEFAULT_TARGET
    opt_level: str = "0"
    jobs: int = 1
    cxx: str = "c++"
    ar: str = "ar"
    std: str = DEFAULT_STD

    def __post_init__(self) -> None:
        if self.opt_level not in VALID_OPT_LEVELS:
            raise ConfigurationError(f"Invalid optimization level {self.opt_level!r} (expected one of {', '.join(VALID_OPT_LEVELS)})")
        if self.jobs < 1:
            raise ConfigurationError(f"Job count must be at least 1, got {self.jobs}")

    @classmethod
    def from_environment(cls, out_dir: Optional[Path] = None, environ: Optional[Mapping[str, str]] = None) -> "BuildSettings":
        """Read settings from the environment.

        Args:
            out_dir: Output directory used when OUT_DIR is not set
            environ: Environment mapping (defaults to os.environ)

        Raises:
            ConfigurationError: If no output directory is available or a
                value is malformed
        """
        env = os.environ if environ is None else environ

        env_out_dir = env.get("OUT_DIR")
        if env_out_dir:
            resolved_out_dir = Path(env_out_dir)
        elif out_dir is not None:
            resolved_out_dir = Path(out_dir)
        else:
            raise ConfigurationError("An output directory must be given when OUT_DIR is not set")

        target = env.get("TARGET") or DEFAULT_TARGET
        host = env.get("HOST") or target

        jobs_value = env.get("NUM_JOBS")
        try:
            jobs = int(jobs_value) if jobs_value else multiprocessing.cpu_count()
        except ValueError as e:
            raise ConfigurationError(f"NUM_JOBS must be an integer, got {jobs_value!r}") from e

        settings = cls(
            out_dir=resolved_out_dir,
            host=host,
            target=target,
            opt_level=env.get("OPT_LEVEL") or "0",
            jobs=jobs,
            cxx=env.get("CXX") or "c++",
            ar=env.get("AR") or "ar",
        )
        logger.debug(f"Build settings: {settings}")
        return settings

    def with_overrides(self, **changes: object) -> "BuildSettings":
        """Return a copy with the given non-None fields replaced."""
        return replace(self, **{k: v for k, v in changes.items() if v is not None})
