from __future__ import annotations

from collections.abc import Iterable
from typing import Protocol, runtime_checkable

from ..models import LibraryRoot, MovieEntry


@runtime_checkable
class MediaHost(Protocol):
    """Media server collaborators used by a reconciliation pass."""

    name: str

    def list_movies(self) -> Iterable[MovieEntry]:
        """Return every non-virtual movie, in a stable order (e.g. by sort name)."""
        ...

    def list_library_roots(self) -> Iterable[LibraryRoot]:
        ...

    def is_scan_in_progress(self) -> bool:
        ...

    def request_item_refresh(self, movie: MovieEntry) -> None:
        """Ask the host to re-read a single movie that gained subtitles."""
        ...

    def request_full_rescan(self) -> None:
        ...
