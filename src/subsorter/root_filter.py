"""Library root exclusion.

Movies sitting directly inside a library root have no private folder, so
their sibling subfolders belong to other titles. Such movies are never
touched.
"""

from __future__ import annotations

import os
from collections.abc import Iterable

from .errors import PathError
from .models import LibraryRoot, MovieEntry


def movie_parent_dir(movie_path: str) -> str:
    """Return the directory holding ``movie_path`` as a plain string.

    Raises:
        PathError: if the path has no parent directory (empty, bare file name
            or the filesystem root itself).
    """
    if not movie_path:
        raise PathError("Movie path is empty", movie_path)
    parent = os.path.dirname(movie_path)
    if not parent or parent == movie_path:
        raise PathError(f"Movie path has no parent directory: {movie_path}", movie_path)
    return parent


def is_excluded(movie: MovieEntry, roots: Iterable[LibraryRoot]) -> bool:
    """Check whether the movie's parent directory is itself a library root.

    Comparison is exact string equality against every location of every root;
    paths are not resolved, case-folded or stripped of trailing separators.
    """
    parent = movie_parent_dir(movie.path)
    return any(parent == location for root in roots for location in root.locations)
