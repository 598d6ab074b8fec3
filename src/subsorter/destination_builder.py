"""Destination paths for reconciled subtitles.

Two naming modes are supported:

- ``substitute`` (default): the subtitle's base name, everything before the
  first dot of its file name, is replaced by the movie's base name.
  ``Movie (2020).mkv`` + ``sub/English.en.srt`` -> ``Movie (2020).en.srt``.
- ``append``: the subtitle's whole file name is appended after the movie's
  base name. ``Movie (2020).mkv`` + ``sub/English.srt`` ->
  ``Movie (2020).English.srt``.

Paths are handled as opaque strings; nothing here touches the filesystem.
"""

from __future__ import annotations

import os

NAMING_SUBSTITUTE = "substitute"
NAMING_APPEND = "append"
NAMING_MODES = frozenset({NAMING_SUBSTITUTE, NAMING_APPEND})


def strip_extension(path: str, extension: str) -> str:
    """Remove ``extension`` from the end of ``path`` when it is a literal suffix."""
    if extension and path.endswith(extension):
        return path[: path.rfind(extension)]
    return path


def movie_base(movie_path: str) -> str:
    return strip_extension(movie_path, os.path.splitext(movie_path)[1])


def subtitle_suffix(subtitle_path: str) -> str:
    """Return the dotted suffix kept from a subtitle file name.

    ``track.en.forced.srt`` -> ``.en.forced.srt``; a name without a dot yields
    an empty string.
    """
    name = os.path.basename(subtitle_path)
    index = name.find(".")
    if index < 0:
        return ""
    return name[index:]


def build_destination(movie_path: str, subtitle_path: str, mode: str = NAMING_SUBSTITUTE) -> str:
    """Compute the sibling destination for a subtitle found below the movie folder."""
    base = movie_base(movie_path)
    if mode == NAMING_SUBSTITUTE:
        return base + subtitle_suffix(subtitle_path)
    if mode == NAMING_APPEND:
        return base + "." + os.path.basename(subtitle_path)
    raise ValueError(f"Unsupported naming mode: {mode}")
