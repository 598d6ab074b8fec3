"""Host backed by a Plex Media Server."""

from __future__ import annotations

import logging
from collections.abc import Sequence
from typing import Optional

from ..logging_utils import render_fields_block
from ..models import LibraryRoot, MovieEntry
from ..plex_client import PLEX_SECTION_MOVIE, PlexApiError, PlexClient, PlexLibrary

LOGGER = logging.getLogger(__name__)


class PlexHost:
    """Movies, roots and scan signals from the movie libraries of a Plex server.

    ``library_names`` limits the host to those libraries (case-insensitive);
    an empty list selects every movie library. Libraries are looked up once
    and cached for the lifetime of the host.
    """

    name = "plex"

    def __init__(self, client: PlexClient, *, library_names: Sequence[str] = ()) -> None:
        self.client = client
        self.library_names = [name.strip().lower() for name in library_names if name.strip()]
        self._libraries: Optional[list[PlexLibrary]] = None

    def _movie_libraries(self) -> list[PlexLibrary]:
        if self._libraries is None:
            libraries = self.client.list_libraries(type_filter=PLEX_SECTION_MOVIE)
            if self.library_names:
                selected = [lib for lib in libraries if lib.title.lower() in self.library_names]
                found = {lib.title.lower() for lib in selected}
                missing = [name for name in self.library_names if name not in found]
                if missing:
                    available = ", ".join(lib.title for lib in libraries) or "(none)"
                    raise PlexApiError(f"Plex movie libraries not found: {', '.join(missing)} (available: {available})")
                libraries = selected
            self._libraries = libraries
        return self._libraries

    def list_movies(self) -> list[MovieEntry]:
        plex_movies = []
        for library in self._movie_libraries():
            plex_movies.extend(self.client.list_movies(library.key))
        plex_movies.sort(key=lambda movie: (movie.sort_title.casefold(), movie.rating_key))
        return [
            MovieEntry(
                path=movie.primary_file,
                is_valid=bool(movie.primary_file),
                name=movie.title,
                key=movie.rating_key,
            )
            for movie in plex_movies
        ]

    def list_library_roots(self) -> list[LibraryRoot]:
        return [LibraryRoot.from_paths(lib.locations, name=lib.title) for lib in self._movie_libraries()]

    def is_scan_in_progress(self) -> bool:
        try:
            libraries = self.client.list_libraries(type_filter=PLEX_SECTION_MOVIE)
        except PlexApiError as exc:
            LOGGER.warning("Failed to read Plex scan status: %s", exc)
            return False
        return any(lib.refreshing for lib in libraries)

    def request_item_refresh(self, movie: MovieEntry) -> None:
        if not movie.key:
            return
        try:
            self.client.refresh_metadata(movie.key)
            LOGGER.debug("Plex refresh requested for %s", movie.display_name)
        except PlexApiError as exc:
            LOGGER.warning(
                render_fields_block(
                    "Plex Refresh Failed",
                    {
                        "Movie": movie.display_name,
                        "Error": str(exc),
                    },
                    pad_top=True,
                )
            )

    def request_full_rescan(self) -> None:
        for library in self._movie_libraries():
            try:
                self.client.scan_library(library.key)
                LOGGER.info("Plex scan triggered for library '%s'", library.title)
            except PlexApiError as exc:
                LOGGER.warning(
                    render_fields_block(
                        "Plex Scan Failed",
                        {
                            "Library": library.title,
                            "Error": str(exc),
                        },
                        pad_top=True,
                    )
                )
