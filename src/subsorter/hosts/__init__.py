"""Media hosts that supply movies and receive refresh/rescan requests."""

from .base import MediaHost
from .filesystem import FilesystemHost
from .plex import PlexHost

__all__ = ["FilesystemHost", "MediaHost", "PlexHost"]
