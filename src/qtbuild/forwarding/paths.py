"""Relative include path resolution.

A forwarding header includes its target through a path relative to the
forwarding header's own directory, e.g. ``#include "../../qtbase/src/corelib/kernel/qobject.h"``.
The compiler resolves quoted includes relative to the including file first,
so the generated tree keeps working wherever the build directory lives, as
long as the source tree and output tree keep their relative positions.

Both ends are canonicalized before diffing. The target must exist; the
forwarding directory may not have been created yet.
"""

import os
from pathlib import Path, PurePosixPath
from typing import Optional, Union

from ..errors import PathResolutionError, TargetNotFound

PathLike = Union[str, Path]


def canonicalize_target(target_header_path: PathLike, base_dir: Optional[PathLike] = None) -> Path:
    """Return the canonical path of an existing header.

    Args:
        target_header_path: Header path; relative paths are taken relative to
            base_dir
        base_dir: Directory for relative targets (defaults to the current
            working directory)

    Raises:
        TargetNotFound: If the target does not exist or cannot be resolved
    """
    target = Path(target_header_path)
    if not target.is_absolute():
        target = Path(base_dir if base_dir is not None else os.getcwd()) / target

    try:
        return target.resolve(strict=True)
    except (OSError, RuntimeError) as e:
        raise TargetNotFound(f"Forwarding target not found: {target}", target) from e


def resolve_include_path(
    forwarding_header_dir: PathLike,
    target_header_path: PathLike,
    base_dir: Optional[PathLike] = None,
) -> str:
    """Compute the include path from a forwarding directory to a real header.

    Args:
        forwarding_header_dir: Directory the forwarding header is written to
        target_header_path: Header the forwarding header points at
        base_dir: Directory for a relative target (defaults to the current
            working directory)

    Returns:
        Relative path with forward slashes

    Raises:
        TargetNotFound: If the target does not exist
        PathResolutionError: If no relative path exists between the two
            locations (e.g. different drives on Windows)
    """
    target = canonicalize_target(target_header_path, base_dir)
    forwarding_dir = Path(forwarding_header_dir)
    if not forwarding_dir.is_absolute():
        forwarding_dir = Path(base_dir if base_dir is not None else os.getcwd()) / forwarding_dir
    forwarding_dir = forwarding_dir.resolve()

    try:
        relative = os.path.relpath(target, forwarding_dir)
    except ValueError as e:
        raise PathResolutionError(f"Cannot include {target} from {forwarding_dir}: {e}", target) from e

    return PurePosixPath(*Path(relative).parts).as_posix()


def make_include_statement(include_path: str) -> str:
    """Return the full content of a forwarding header."""
    return f'#include "{include_path}"\n'
