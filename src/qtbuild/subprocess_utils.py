"""Subprocess helpers for running native tools.

Wraps subprocess.run so every compiler and archiver invocation gets the same
treatment: no console window on Windows, no inherited stdin, captured text
output.
"""

import subprocess
import sys
from typing import Any, Sequence


def get_subprocess_creation_flags() -> int:
    """Return CREATE_NO_WINDOW on Windows, 0 elsewhere."""
    if sys.platform == "win32":
        return subprocess.CREATE_NO_WINDOW
    return 0


def safe_run(cmd: Sequence[str], **kwargs: Any) -> subprocess.CompletedProcess:
    """Run a command with platform-specific flags applied.

    stdin is redirected to DEVNULL unless given explicitly, so a tool waiting
    for input fails instead of hanging the build. An explicit creationflags
    value is OR'd with the platform default.

    Args:
        cmd: Command and arguments
        **kwargs: Passed through to subprocess.run

    Returns:
        CompletedProcess from subprocess.run
    """
    default_flags = get_subprocess_creation_flags()

    if "creationflags" in kwargs:
        kwargs["creationflags"] = kwargs["creationflags"] | default_flags
    elif default_flags:
        kwargs["creationflags"] = default_flags

    if "stdin" not in kwargs:
        kwargs["stdin"] = subprocess.DEVNULL

    return subprocess.run(list(cmd), **kwargs)


def format_command(cmd: Sequence[str]) -> str:
    """Render a command line for logs and error messages."""
    return " ".join(cmd)
