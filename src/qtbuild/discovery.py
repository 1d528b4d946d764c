"""Source discovery.

Walks a module's source directory and collects headers and translation
units by extension. Results are sorted so that repeated runs over the same
tree produce the same order, which keeps generated output deterministic
(the order decides which header wins a base-name collision).
"""

import logging
from dataclasses import dataclass
from pathlib import Path
from typing import List

from .errors import SourceNotFound

logger = logging.getLogger(__name__)

HEADER_EXTENSION = ".h"
SOURCE_EXTENSION = ".cpp"


@dataclass(frozen=True)
class ModuleFiles:
    """Headers and sources found under a module directory."""

    headers: List[Path]
    sources: List[Path]


def find_files(root: Path, extension: str) -> List[Path]:
    """Recursively find files with the given extension, sorted by path.

    Args:
        root: Directory to walk
        extension: File extension including the dot (e.g. ".h")

    Raises:
        SourceNotFound: If root is not a directory
    """
    if not root.is_dir():
        raise SourceNotFound(f"Source directory not found: {root}", root)
    return sorted(p for p in root.rglob(f"*{extension}") if p.is_file())


def discover_module_files(root: Path, header_extension: str = HEADER_EXTENSION, source_extension: str = SOURCE_EXTENSION) -> ModuleFiles:
    """Collect a module's headers and sources.

    Raises:
        SourceNotFound: If root is not a directory
    """
    files = ModuleFiles(headers=find_files(root, header_extension), sources=find_files(root, source_extension))
    logger.debug(f"Found {len(files.headers)} headers and {len(files.sources)} sources under {root}")
    return files
