"""Error taxonomy for ctx.

Core operations raise one of these; the CLI layer catches ``CtxError``
and decides how to present it. Nothing here is retried automatically.
"""


class CtxError(Exception):
    """Base class for all ctx errors."""


class NotFoundError(CtxError):
    """Raised when a context, exclude rule or history record does not exist."""

    def __init__(self, kind: str, name: str):
        self.kind = kind
        self.name = name
        super().__init__(f"{kind} '{name}' not found")


class FilesystemError(CtxError):
    """Raised when a stat, read or directory walk fails."""

    def __init__(self, path: str, message: str):
        self.path = path
        super().__init__(f"{path}: {message}")


class PersistenceError(CtxError):
    """Raised when a record cannot be written or parsed."""


class ClipboardError(CtxError):
    """Raised when no clipboard route accepted the text."""
