"""Error kinds raised and recorded while reconciling subtitles.

None of these stop a run. The reconciler catches them per movie, per
subdirectory or per candidate and appends them to
``ReconciliationResult.failures``.
"""

from __future__ import annotations

from typing import Optional


class SubsorterError(RuntimeError):
    """Base class for reconciliation errors."""

    def __init__(self, message: str, path: Optional[str] = None) -> None:
        super().__init__(message)
        self.path = path


class PathError(SubsorterError):
    """Raised when a movie path cannot be used (e.g. it has no parent directory)."""


class DirectoryError(SubsorterError):
    """Raised when a directory listing could not be read."""


class LinkError(SubsorterError):
    """Raised when symbolic link creation fails without an I/O fallback."""

    def __init__(self, message: str, path: Optional[str] = None, *, cause: Optional[BaseException] = None) -> None:
        super().__init__(message, path)
        self.cause = cause


class CopyError(SubsorterError):
    """Raised when the byte-copy fallback fails.

    ``link_error`` keeps the symbolic link failure that triggered the fallback.
    """

    def __init__(
        self,
        message: str,
        path: Optional[str] = None,
        *,
        cause: Optional[BaseException] = None,
        link_error: Optional[BaseException] = None,
    ) -> None:
        super().__init__(message, path)
        self.cause = cause
        self.link_error = link_error
