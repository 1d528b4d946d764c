"""Exception hierarchy for qtbuild.

Every failure in configuration, header generation or compilation is raised as a
subclass of QtBuildError. There is no local recovery: the first error aborts the
whole module build and carries the file or directory that triggered it.
"""

from pathlib import Path
from typing import Optional, Sequence


class QtBuildError(Exception):
    """Base class for all qtbuild errors.

    Attributes:
        path: File or directory the error refers to, if any
    """

    def __init__(self, message: str, path: Optional[Path] = None):
        super().__init__(message)
        self.path = path


class ConfigurationError(QtBuildError):
    """Raised when build settings or a preset cannot be loaded."""

    pass


class SourceNotFound(QtBuildError):
    """Raised when a declared header or source file does not exist."""

    pass


class NonTextContent(QtBuildError):
    """Raised when a header cannot be decoded as UTF-8 text."""

    pass


class PathResolutionError(QtBuildError):
    """Raised when no relative include path can be built for a target header."""

    pass


class TargetNotFound(PathResolutionError, SourceNotFound):
    """Raised when the target of a forwarding header cannot be canonicalized."""

    pass


class DirectoryCreationFailure(QtBuildError):
    """Raised when an output directory cannot be created."""

    pass


class WriteFailure(QtBuildError):
    """Raised when a generated header cannot be written."""

    pass


class CompilerFailure(QtBuildError):
    """Raised when the native compiler or archiver reports a failure.

    The diagnostic text is passed through untouched.

    Attributes:
        diagnostics: Combined stderr/stdout of the failing tool
        command: Command line that failed, if known
    """

    def __init__(
        self,
        message: str,
        diagnostics: str = "",
        command: Optional[Sequence[str]] = None,
        path: Optional[Path] = None,
    ):
        super().__init__(message, path)
        self.diagnostics = diagnostics
        self.command = list(command) if command else []

    def __str__(self) -> str:
        base = super().__str__()
        if self.diagnostics:
            return f"{base}\n{self.diagnostics}"
        return base
