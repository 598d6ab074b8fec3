"""Host backed by nothing but the configured library folders.

Movies are video files found anywhere below a library location. There is no
media server to notify, so refresh and rescan requests are only logged.
"""

from __future__ import annotations

import logging
import os
from collections.abc import Collection, Iterator, Sequence

from ..logging_utils import render_fields_block
from ..models import LibraryRoot, MovieEntry

LOGGER = logging.getLogger(__name__)

DEFAULT_VIDEO_EXTENSIONS = (".mkv", ".mp4", ".m4v", ".avi", ".ts")


def sort_name(path: str) -> str:
    return os.path.splitext(os.path.basename(path))[0].casefold()


class FilesystemHost:
    name = "filesystem"

    def __init__(
        self,
        libraries: Sequence[LibraryRoot],
        *,
        video_extensions: Collection[str] = DEFAULT_VIDEO_EXTENSIONS,
    ) -> None:
        # movie paths are joined onto these exact strings
        self.libraries = [
            LibraryRoot.from_paths((os.path.normpath(location) for location in library.locations), name=library.name)
            for library in libraries
        ]
        self.video_extensions = frozenset(ext.lower() for ext in video_extensions)
        self.refresh_requests: list[MovieEntry] = []
        self.rescan_requests = 0

    def _walk_videos(self, location: str) -> Iterator[str]:
        if not os.path.isdir(location):
            LOGGER.warning(
                render_fields_block(
                    "Library Location Missing",
                    {"Path": location},
                    pad_top=True,
                )
            )
            return

        def _on_error(exc: OSError) -> None:
            LOGGER.warning("Unable to list %s: %s", exc.filename, exc)

        for directory, _dirs, files in os.walk(location, onerror=_on_error):
            for filename in files:
                if filename.startswith("._"):
                    continue
                if os.path.splitext(filename)[1].lower() in self.video_extensions:
                    yield os.path.join(directory, filename)

    def list_movies(self) -> list[MovieEntry]:
        paths: set[str] = set()
        for library in self.libraries:
            for location in sorted(library.locations):
                paths.update(self._walk_videos(location))
        ordered = sorted(paths, key=lambda path: (sort_name(path), path))
        return [MovieEntry(path=path, name=os.path.basename(path)) for path in ordered]

    def list_library_roots(self) -> list[LibraryRoot]:
        return list(self.libraries)

    def is_scan_in_progress(self) -> bool:
        return False

    def request_item_refresh(self, movie: MovieEntry) -> None:
        self.refresh_requests.append(movie)
        LOGGER.debug("Movie gained subtitles: %s", movie.path)

    def request_full_rescan(self) -> None:
        self.rescan_requests += 1
        LOGGER.debug("Full rescan requested; no media server configured")
