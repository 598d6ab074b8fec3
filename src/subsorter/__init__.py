"""subsorter core package.

Makes subtitles hidden in movie subfolders visible to media servers by
linking (or copying) them next to the movie under a recognised name.

- **root_filter**: skips movies placed directly in a library root
- **subtitle_discovery**: finds subtitle files one folder below a movie
- **destination_builder**: derives the sibling subtitle file name
- **materializer**: symlink with byte-copy fallback, never overwriting
- **reconciler**: drives a pass over all movies and reports progress
- **hosts**: filesystem and Plex adapters supplying movies and rescans

The main entry point is ``Reconciler`` (or ``run_reconciliation`` when the
caller already holds the movie and library lists).
"""

from .models import LibraryRoot, MaterializeOutcome, MovieEntry, OutcomeKind, ReconciliationResult
from .reconciler import ReconcileOptions, Reconciler, run_reconciliation
from .version import __version__

__all__ = [
    "__version__",
    "LibraryRoot",
    "MaterializeOutcome",
    "MovieEntry",
    "OutcomeKind",
    "ReconcileOptions",
    "Reconciler",
    "ReconciliationResult",
    "run_reconciliation",
]
