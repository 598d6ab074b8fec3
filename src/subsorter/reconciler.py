"""Subtitle reconciliation across an ordered list of movies.

``run_reconciliation`` is the engine: it walks the movies in the order given,
skips unusable entries and movies placed directly in a library root, links or
copies subtitles found one folder below each movie, and reports progress
after every movie. ``Reconciler`` binds the engine to a ``MediaHost`` and acts
on the refresh and rescan signals it produces.
"""

from __future__ import annotations

import logging
import time
from collections.abc import Callable, Collection, Iterable, Sequence
from dataclasses import dataclass
from typing import Optional, Protocol

from .destination_builder import NAMING_MODES, NAMING_SUBSTITUTE, build_destination
from .errors import PathError
from .hosts.base import MediaHost
from .logging_utils import render_fields_block
from .materializer import materialize
from .models import SUBTITLE_EXTENSIONS, LibraryRoot, MovieEntry, ReconciliationResult
from .root_filter import is_excluded, movie_parent_dir
from .run_summary import log_run_recap
from .subtitle_discovery import discover_subtitles

LOGGER = logging.getLogger(__name__)

ProgressSink = Callable[[float], None]


class CancelToken(Protocol):
    def is_set(self) -> bool: ...


@dataclass(frozen=True)
class ReconcileOptions:
    naming_mode: str = NAMING_SUBSTITUTE
    subtitle_extensions: Collection[str] = SUBTITLE_EXTENSIONS
    rescan_only_on_change: bool = False

    def __post_init__(self) -> None:
        if self.naming_mode not in NAMING_MODES:
            raise ValueError(f"Unsupported naming mode: {self.naming_mode}")


def reconcile_movie(
    movie: MovieEntry,
    roots: Sequence[LibraryRoot],
    result: ReconciliationResult,
    options: ReconcileOptions,
) -> Optional[bool]:
    """Reconcile the subtitles of one movie.

    Returns:
        None when the movie was skipped, otherwise whether any subtitle was
        linked or copied next to it.
    """
    if not movie.is_valid or not movie.path:
        LOGGER.debug("Skipping movie without a usable path: %s", movie.display_name)
        return None

    try:
        if is_excluded(movie, roots):
            LOGGER.debug("Skipping movie placed directly in a library root: %s", movie.path)
            return None
        movie_dir = movie_parent_dir(movie.path)
    except PathError as exc:
        LOGGER.warning(
            render_fields_block(
                "Skipping Movie",
                {
                    "Movie": movie.display_name,
                    "Reason": str(exc),
                },
                pad_top=True,
            )
        )
        result.register_failure(movie.path, exc)
        return None

    changed = False
    for candidate in discover_subtitles(movie_dir, result, extensions=options.subtitle_extensions):
        destination = build_destination(movie.path, candidate.path, options.naming_mode)
        outcome = materialize(candidate.path, destination)
        result.register_outcome(outcome)
        if outcome.error is not None:
            result.register_failure(candidate.path, outcome.error)
        elif outcome.created:
            changed = True
    return changed


def run_reconciliation(
    movies: Iterable[MovieEntry],
    roots: Iterable[LibraryRoot],
    *,
    progress: Optional[ProgressSink] = None,
    cancel: Optional[CancelToken] = None,
    scan_in_progress: Optional[Callable[[], bool]] = None,
    on_movie_changed: Optional[Callable[[MovieEntry], None]] = None,
    options: Optional[ReconcileOptions] = None,
) -> ReconciliationResult:
    """Run one reconciliation pass.

    Args:
        movies: Movies in processing order
        roots: Library roots; movies directly inside one are left alone
        progress: Receives ``completed / total * 100`` after every movie
        cancel: Checked before each movie; when set the pass stops early
        scan_in_progress: Queried once at the end to decide on a full rescan
        on_movie_changed: Called right after a movie gained a subtitle
        options: Naming mode, extensions and rescan policy

    Returns:
        The accumulated ReconciliationResult. A cancelled pass returns what
        was done so far with ``cancelled`` set.
    """
    options = options or ReconcileOptions()
    movie_list = list(movies)
    root_list = list(roots)
    result = ReconciliationResult()
    total = len(movie_list)
    completed = 0

    LOGGER.info("Found %d eligible movies", total)

    for movie in movie_list:
        if cancel is not None and cancel.is_set():
            result.cancelled = True
            LOGGER.warning(
                render_fields_block(
                    "Reconciliation Cancelled",
                    {
                        "Completed": completed,
                        "Remaining": total - completed,
                    },
                    pad_top=True,
                )
            )
            break

        LOGGER.debug("Checking movie: %s (%s)", movie.display_name, movie.path)
        result.movies_considered += 1
        changed = reconcile_movie(movie, root_list, result, options)
        if changed is None:
            result.movies_skipped += 1
        elif changed:
            result.register_changed(movie)
            if on_movie_changed is not None:
                on_movie_changed(movie)

        completed += 1
        if progress is not None:
            progress(completed / total * 100)

    if not result.cancelled:
        result.rescan_requested = _should_request_rescan(result, options, scan_in_progress)
    return result


def _should_request_rescan(
    result: ReconciliationResult,
    options: ReconcileOptions,
    scan_in_progress: Optional[Callable[[], bool]],
) -> bool:
    if options.rescan_only_on_change and not result.movies_changed:
        return False
    if scan_in_progress is not None and scan_in_progress():
        LOGGER.debug("Host scan already in progress; not requesting a full rescan")
        return False
    return True


class Reconciler:
    """Run reconciliation passes against a media host."""

    def __init__(self, host: MediaHost, options: Optional[ReconcileOptions] = None) -> None:
        self.host = host
        self.options = options or ReconcileOptions()

    def run(
        self,
        *,
        progress: Optional[ProgressSink] = None,
        cancel: Optional[CancelToken] = None,
    ) -> ReconciliationResult:
        started = time.perf_counter()
        movies = list(self.host.list_movies())
        roots = list(self.host.list_library_roots())
        LOGGER.debug(
            render_fields_block(
                "Starting Reconciliation",
                {
                    "Host": self.host.name,
                    "Movies": len(movies),
                    "Library Roots": sorted(location for root in roots for location in root.locations),
                    "Naming Mode": self.options.naming_mode,
                },
                pad_top=True,
            )
        )

        result = run_reconciliation(
            movies,
            roots,
            progress=progress,
            cancel=cancel,
            scan_in_progress=self.host.is_scan_in_progress,
            on_movie_changed=self.host.request_item_refresh,
            options=self.options,
        )
        if result.rescan_requested:
            self.host.request_full_rescan()

        log_run_recap(result, time.perf_counter() - started, host_name=self.host.name)
        return result
