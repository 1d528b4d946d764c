"""Forwarding header generation.

A forwarding header is a one-line file that includes a real header through a
relative path. Two kinds are generated for a module:

- Filename headers: ``forwarding/QtCore/qobject.h`` -> ``.../kernel/qobject.h``
  so that ``#include <QtCore/qobject.h>`` works without Qt's header sync step.
  Private headers (``*_p.h``) go to ``forwarding/QtCore/private/``.
- Type-name headers: ``forwarding/QtCore/QObject`` -> ``.../kernel/qobject.h``
  for every class found by the type-name scanner in a public header.

Planning (which file points where) is pure; writing resolves each target
against the filesystem and replaces the destination file.

Headers are processed in input order. If two headers share a base name, or two
headers declare the same type name, the later one wins and silently replaces
the earlier forwarding header.
"""

import logging
from dataclasses import dataclass
from pathlib import Path
from typing import Iterable, List, Optional

from ..fsutil import write_text_file
from ..module_config import HeaderFile
from .paths import make_include_statement, resolve_include_path
from .scanner import TypeNameScanner, scan_header

logger = logging.getLogger(__name__)

PRIVATE_SUBDIR = "private"


@dataclass(frozen=True)
class ForwardingHeader:
    """A generated header that includes target_path.

    Attributes:
        virtual_name: File name the header is written under
        target_path: Real header being forwarded to
    """

    virtual_name: str
    target_path: Path


def private_dir(dest_root: Path) -> Path:
    """Destination subtree for private headers."""
    return dest_root / PRIVATE_SUBDIR


def plan_filename_headers(headers: Iterable[HeaderFile]) -> List[ForwardingHeader]:
    """One forwarding header per input header, named after its base name."""
    return [ForwardingHeader(header.name, header.path) for header in headers]


def plan_type_name_headers(
    headers: Iterable[HeaderFile], scanner: TypeNameScanner, base_dir: Optional[Path] = None
) -> List[ForwardingHeader]:
    """One forwarding header per type name declared in each header.

    Relative header paths are read relative to base_dir (defaults to the
    current working directory).

    Raises:
        SourceNotFound: If a header cannot be read
        NonTextContent: If a header is not UTF-8
    """
    planned = []
    for header in headers:
        path = header.path if base_dir is None or header.path.is_absolute() else Path(base_dir) / header.path
        for type_name in scan_header(path, scanner):
            planned.append(ForwardingHeader(type_name, header.path))
    return planned


def write_forwarding_header(dest_dir: Path, header: ForwardingHeader, base_dir: Optional[Path] = None) -> Path:
    """Write one forwarding header into dest_dir.

    Args:
        dest_dir: Existing destination directory
        header: Forwarding header to write
        base_dir: Directory relative target paths are taken from (defaults
            to the current working directory)

    Returns:
        Path of the written file

    Raises:
        TargetNotFound: If the target header does not exist
        PathResolutionError: If no relative include path can be built
        WriteFailure: If the file cannot be written
    """
    include_path = resolve_include_path(dest_dir, header.target_path, base_dir)
    destination = dest_dir / header.virtual_name
    write_text_file(destination, make_include_statement(include_path))
    return destination


def write_forwarding_headers(
    dest_dir: Path, headers: Iterable[ForwardingHeader], base_dir: Optional[Path] = None
) -> List[Path]:
    """Write forwarding headers in order, stopping at the first failure.

    Returns:
        Paths written, in order (duplicates included when names collide)
    """
    written = [write_forwarding_header(dest_dir, header, base_dir) for header in headers]
    logger.debug(f"Wrote {len(written)} forwarding headers to {dest_dir}")
    return written


def write_filename_headers(
    dest_root: Path, headers: Iterable[HeaderFile], private: bool, base_dir: Optional[Path] = None
) -> List[Path]:
    """Write filename forwarding headers for one visibility.

    Args:
        dest_root: Public destination directory; private headers go to its
            ``private/`` subdirectory
        headers: All module headers; only those matching private are written
        private: Which visibility to generate
        base_dir: Directory relative target paths are taken from

    Returns:
        Paths written
    """
    selected = [h for h in headers if h.is_private == private]
    dest_dir = private_dir(dest_root) if private else dest_root
    return write_forwarding_headers(dest_dir, plan_filename_headers(selected), base_dir)


def write_type_name_headers(
    dest_dir: Path, headers: Iterable[HeaderFile], scanner: TypeNameScanner, base_dir: Optional[Path] = None
) -> List[Path]:
    """Scan headers for type names and write a forwarding header for each.

    Returns:
        Paths written
    """
    return write_forwarding_headers(dest_dir, plan_type_name_headers(headers, scanner, base_dir), base_dir)
