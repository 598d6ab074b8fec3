"""Subtitle discovery inside a movie's immediate subfolders.

Only one level is scanned: ``<movie dir>/<subfolder>/<file>``. Deeper
folders and files next to the movie itself are ignored. Results are yielded
in directory listing order, which is not sorted.
"""

from __future__ import annotations

import logging
import os
from collections.abc import Collection, Iterator
from typing import Optional

from .errors import DirectoryError
from .logging_utils import render_fields_block
from .models import SUBTITLE_EXTENSIONS, ReconciliationResult, SubtitleCandidate

LOGGER = logging.getLogger(__name__)


def subtitle_extension(path: str, extensions: Collection[str] = SUBTITLE_EXTENSIONS) -> Optional[str]:
    """Return the lowercase extension of ``path`` if it is a recognised subtitle type."""
    extension = os.path.splitext(path)[1].lower()
    if extension and extension in extensions:
        return extension
    return None


def _list_entries(directory: str) -> list[os.DirEntry[str]]:
    try:
        with os.scandir(directory) as iterator:
            return list(iterator)
    except OSError as exc:
        raise DirectoryError(f"Unable to list {directory}: {exc}", directory) from exc


def _record(error: DirectoryError, result: Optional[ReconciliationResult]) -> None:
    LOGGER.warning(
        render_fields_block(
            "Directory Listing Failed",
            {
                "Path": error.path,
                "Error": str(error),
            },
            pad_top=True,
        )
    )
    if result is not None:
        result.register_failure(error.path or "", error)


def iter_subdirectories(movie_dir: str, result: Optional[ReconciliationResult] = None) -> Iterator[str]:
    """Yield the immediate subdirectories of ``movie_dir``."""
    try:
        entries = _list_entries(movie_dir)
    except DirectoryError as exc:
        _record(exc, result)
        return

    for entry in entries:
        try:
            is_dir = entry.is_dir()
        except OSError:
            continue
        if is_dir:
            yield entry.path


def iter_subtitle_files(
    subdirectory: str,
    extensions: Collection[str] = SUBTITLE_EXTENSIONS,
) -> Iterator[SubtitleCandidate]:
    """Yield subtitle files directly inside ``subdirectory``.

    Raises:
        DirectoryError: if the subdirectory cannot be listed.
    """
    for entry in _list_entries(subdirectory):
        try:
            if not entry.is_file():
                continue
        except OSError:
            continue
        extension = subtitle_extension(entry.name, extensions)
        if extension is None:
            continue
        yield SubtitleCandidate(path=entry.path, extension=extension)


def discover_subtitles(
    movie_dir: str,
    result: Optional[ReconciliationResult] = None,
    *,
    extensions: Collection[str] = SUBTITLE_EXTENSIONS,
) -> Iterator[SubtitleCandidate]:
    """Discover subtitle candidates one folder below ``movie_dir``.

    A subfolder that cannot be listed is recorded on ``result`` (when given)
    and skipped; discovery continues with the next subfolder.

    Args:
        movie_dir: Directory holding the movie file
        result: Optional run result used to record listing failures
        extensions: Lowercase extensions accepted as subtitles

    Yields:
        SubtitleCandidate objects in directory listing order
    """
    for subdirectory in iter_subdirectories(movie_dir, result):
        try:
            candidates = list(iter_subtitle_files(subdirectory, extensions))
        except DirectoryError as exc:
            _record(exc, result)
            continue
        for candidate in candidates:
            LOGGER.debug("Found subtitle candidate: %s", candidate.path)
            yield candidate
