"""Filesystem helpers that translate OS errors into qtbuild errors."""

from pathlib import Path

from .errors import DirectoryCreationFailure, WriteFailure


def ensure_directory(path: Path) -> Path:
    """Create a directory and its parents if missing.

    Raises:
        DirectoryCreationFailure: If the directory cannot be created
    """
    try:
        path.mkdir(parents=True, exist_ok=True)
    except OSError as e:
        raise DirectoryCreationFailure(f"Unable to create directory {path}: {e}", path) from e
    return path


def write_text_file(path: Path, content: str) -> Path:
    """Replace the file at path with content (UTF-8, LF line endings).

    Raises:
        WriteFailure: If the file cannot be written
    """
    try:
        with open(path, "w", encoding="utf-8", newline="\n") as f:
            f.write(content)
    except OSError as e:
        raise WriteFailure(f"Failed to write {path}: {e}", path) from e
    return path
