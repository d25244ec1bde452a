"""Exception taxonomy.

Every failure a command can produce is a KubeSimError subclass.  Errors are
raised where they are detected and converted to a single line of terminal
output at the command boundary via ``render()``.

Server-side errors (the ones a real API server would return) render as
``Error from server (<Reason>): <message>``; everything else renders as
``error: <message>``.
"""

from __future__ import annotations


class KubeSimError(Exception):
    """Base class for every error surfaced to the user."""

    def __init__(self, message: str) -> None:
        super().__init__(message)
        self.message = message

    def render(self) -> str:
        return f"error: {self.message}"


class ParseError(KubeSimError):
    """Raised when a command line cannot be turned into a structured command."""


class UsageError(KubeSimError):
    """Raised when a well-formed command is missing something a handler needs."""


class ManifestError(KubeSimError):
    """Raised when manifest text is not valid YAML or fails schema validation."""


class FileSystemError(KubeSimError):
    """Raised by the virtual filesystem."""


class StorageError(KubeSimError):
    """Raised when persisting or loading cluster state fails."""


class ConflictError(KubeSimError):
    """Raised when a label or annotation key exists and --overwrite was not given."""


class _ServerError(KubeSimError):
    reason = ""

    def render(self) -> str:
        return f"Error from server ({self.reason}): {self.message}"


class NotFoundError(_ServerError):
    """Raised when the target resource does not exist."""

    reason = "NotFound"


class AlreadyExistsError(_ServerError):
    """Raised by ``create`` when the resource already exists."""

    reason = "AlreadyExists"
