"""Type-name scanning for class forwarding headers.

Qt code includes many headers by class name (``#include <QString>``). To
support that, every public header is scanned for the classes it declares and
a forwarding header named after each class is generated.

Scanning is a strategy: anything implementing TypeNameScanner can be passed to
the orchestrator. The default ClassTokenScanner is a lexical heuristic, not a
parser. It looks at every whitespace-separated ``class`` token and the two
tokens after it:

    class QObject                      -> QObject
    class Q_CORE_EXPORT QObject        -> QObject   (export macro skipped)
    class Q_CORE_EXPORT Q_DECL_X QFoo  -> nothing   (two macros: missed)

A candidate qualifies if it starts with the namespace sentinel ("Q" for Qt)
and contains none of ``; : # _ < >``, which rules out macros, qualified names
and template arguments. Forward declarations (``class QFoo;``) carry the ';'
and are skipped. Anything else that happens to match is accepted.
"""

import logging
from itertools import islice
from pathlib import Path
from typing import Iterator, Protocol, Set, runtime_checkable

from ..errors import NonTextContent, SourceNotFound

logger = logging.getLogger(__name__)

QT_NAMESPACE_SENTINEL = "Q"

DISQUALIFYING_CHARACTERS = frozenset(";:#_<>")


@runtime_checkable
class TypeNameScanner(Protocol):
    """Strategy for finding public type names in header text."""

    def scan(self, header_text: str) -> Set[str]:
        """Return the type names declared in header_text."""
        ...


def _windows(tokens: list[str]) -> Iterator[tuple[str, str, str]]:
    return zip(tokens, islice(tokens, 1, None), islice(tokens, 2, None))


class ClassTokenScanner:
    """Finds ``class Name`` and ``class MACRO Name`` declarations.

    Args:
        namespace_sentinel: Prefix every reported name must start with
    """

    def __init__(self, namespace_sentinel: str = QT_NAMESPACE_SENTINEL):
        self.namespace_sentinel = namespace_sentinel

    def qualifies(self, token: str) -> bool:
        return token.startswith(self.namespace_sentinel) and not any(c in DISQUALIFYING_CHARACTERS for c in token)

    def iter_type_names(self, header_text: str) -> Iterator[str]:
        """Yield type names in order of appearance (duplicates included)."""
        for keyword, first, second in _windows(header_text.split()):
            if keyword != "class":
                continue
            if self.qualifies(first):
                yield first
            elif self.qualifies(second):
                yield second

    def scan(self, header_text: str) -> Set[str]:
        return set(self.iter_type_names(header_text))

    def __repr__(self) -> str:
        return f"ClassTokenScanner(namespace_sentinel={self.namespace_sentinel!r})"


def read_header_text(header_path: Path) -> str:
    """Read a header as UTF-8 text.

    Raises:
        SourceNotFound: If the header cannot be read
        NonTextContent: If the header is not valid UTF-8
    """
    try:
        data = header_path.read_bytes()
    except OSError as e:
        raise SourceNotFound(f"Unable to read header {header_path}: {e}", header_path) from e

    try:
        return data.decode("utf-8")
    except UnicodeDecodeError as e:
        raise NonTextContent(f"Header is not UTF-8 text: {header_path} ({e.reason} at byte {e.start})", header_path) from e


def scan_header(header_path: Path, scanner: TypeNameScanner) -> list[str]:
    """Scan a header file and return its type names in a stable order.

    Names are returned in order of first appearance when the scanner can
    report order (ClassTokenScanner), otherwise sorted.
    """
    text = read_header_text(header_path)
    if isinstance(scanner, ClassTokenScanner):
        names = list(dict.fromkeys(scanner.iter_type_names(text)))
    else:
        names = sorted(scanner.scan(text))
    logger.debug(f"{header_path.name}: {len(names)} type names")
    return names
