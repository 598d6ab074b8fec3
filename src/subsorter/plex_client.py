from __future__ import annotations

import logging
import re
import time
from dataclasses import dataclass, field
from typing import Any, Dict, List, Optional
from urllib.parse import urljoin, urlparse

import requests
from requests.adapters import HTTPAdapter
from urllib3.util.retry import Retry

LOGGER = logging.getLogger(__name__)

# Plex metadata type code for movies
PLEX_TYPE_MOVIE = 1
PLEX_SECTION_MOVIE = "movie"

DEFAULT_RETRIES = 3
DEFAULT_BACKOFF_FACTOR = 0.5
RETRY_STATUS_CODES = frozenset({500, 502, 503, 504, 429})


class PlexApiError(RuntimeError):
    """Raised when Plex API requests fail."""

    def __init__(self, message: str, status_code: Optional[int] = None) -> None:
        super().__init__(message)
        self.status_code = status_code


def _build_url(base_url: str, path: str) -> str:
    return urljoin(base_url.rstrip("/") + "/", path.lstrip("/"))


def _sanitize_url_for_logging(url: str) -> str:
    return re.sub(r"[?&]X-Plex-Token=[^&]*", "", url)


def _parse_json_response(response: requests.Response) -> Dict[str, Any]:
    try:
        return response.json()
    except ValueError as exc:
        raise PlexApiError(
            f"Failed to parse Plex response as JSON ({response.status_code}): {response.text[:500]}",
            status_code=response.status_code,
        ) from exc


def validate_plex_url(url: Optional[str]) -> bool:
    """Validate that URL is a valid http/https URL."""
    if not url:
        return False
    parsed = urlparse(url)
    return parsed.scheme in ("http", "https") and bool(parsed.netloc)


@dataclass(slots=True)
class PlexLibrary:
    key: str
    title: str
    type: Optional[str]
    locations: List[str] = field(default_factory=list)
    refreshing: bool = False


@dataclass(slots=True)
class PlexMovie:
    rating_key: str
    title: str
    sort_title: str
    files: List[str] = field(default_factory=list)

    @property
    def primary_file(self) -> str:
        return self.files[0] if self.files else ""


def _parse_movie(entry: Dict[str, Any]) -> Optional[PlexMovie]:
    rating_key = entry.get("ratingKey")
    if rating_key is None:
        return None
    title = str(entry.get("title") or "")
    files: List[str] = []
    for media in entry.get("Media") or []:
        for part in media.get("Part") or []:
            path = part.get("file")
            if path:
                files.append(str(path))
    return PlexMovie(
        rating_key=str(rating_key),
        title=title,
        sort_title=str(entry.get("titleSort") or title),
        files=files,
    )


class PlexClient:
    """Thin wrapper around the Plex HTTP endpoints needed for subtitle reconciliation.

    The token travels in the X-Plex-Token header. Transient failures are
    retried with exponential backoff by the session adapter.
    """

    def __init__(
        self,
        base_url: str,
        token: str,
        *,
        timeout: float = 15.0,
        session: Optional[requests.Session] = None,
        max_retries: int = DEFAULT_RETRIES,
        backoff_factor: float = DEFAULT_BACKOFF_FACTOR,
    ) -> None:
        if not validate_plex_url(base_url):
            raise PlexApiError(f"Invalid Plex URL: {base_url}")

        self.base_url = base_url.rstrip("/")
        self.token = token
        self.timeout = timeout

        self.session = session or requests.Session()
        if session is None:
            retry_strategy = Retry(
                total=max_retries,
                backoff_factor=backoff_factor,
                status_forcelist=list(RETRY_STATUS_CODES),
                allowed_methods=["GET", "PUT"],
                raise_on_status=False,
            )
            adapter = HTTPAdapter(max_retries=retry_strategy, pool_maxsize=10)
            self.session.mount("http://", adapter)
            self.session.mount("https://", adapter)

    def _request(
        self,
        method: str,
        path: str,
        *,
        params: Optional[Dict[str, Any]] = None,
    ) -> requests.Response:
        url = _build_url(self.base_url, path)
        headers = {
            "Accept": "application/json",
            "X-Plex-Token": self.token,
        }
        LOGGER.debug("Plex %s %s", method.upper(), _sanitize_url_for_logging(url))

        started = time.monotonic()
        try:
            response = self.session.request(
                method,
                url,
                params=dict(params or {}),
                headers=headers,
                timeout=self.timeout,
            )
        except requests.RequestException as exc:
            raise PlexApiError(f"Plex request failed: {exc}") from exc
        LOGGER.debug("Plex responded %s in %.2fs", response.status_code, time.monotonic() - started)

        if response.status_code >= 400:
            raise PlexApiError(
                f"Plex request failed ({response.status_code}): {response.text[:200]}",
                status_code=response.status_code,
            )
        return response

    def list_libraries(self, *, type_filter: Optional[str] = None) -> List[PlexLibrary]:
        """List Plex libraries with their folder locations, optionally filtered by type."""
        payload = _parse_json_response(self._request("GET", "/library/sections"))
        directories = payload.get("MediaContainer", {}).get("Directory", []) or []
        libraries: List[PlexLibrary] = []
        for entry in directories:
            key = entry.get("key")
            title = entry.get("title")
            lib_type = entry.get("type")
            if key is None or title is None:
                continue
            if type_filter and lib_type != type_filter:
                continue
            locations = [str(loc["path"]) for loc in entry.get("Location", []) or [] if loc.get("path")]
            libraries.append(
                PlexLibrary(
                    key=str(key),
                    title=str(title),
                    type=lib_type,
                    locations=locations,
                    refreshing=bool(entry.get("refreshing", False)),
                )
            )
        return libraries

    def list_movies(self, library_key: str) -> List[PlexMovie]:
        """List every movie of a library section, sorted by sort title."""
        params = {"type": PLEX_TYPE_MOVIE, "sort": "titleSort"}
        payload = _parse_json_response(self._request("GET", f"/library/sections/{library_key}/all", params=params))
        movies: List[PlexMovie] = []
        for entry in payload.get("MediaContainer", {}).get("Metadata") or []:
            movie = _parse_movie(entry)
            if movie is not None:
                movies.append(movie)
        return movies

    def refresh_metadata(self, rating_key: str) -> None:
        """Trigger a metadata refresh for an item."""
        self._request("PUT", f"/library/metadata/{rating_key}/refresh")

    def scan_library(self, library_key: str, *, path: Optional[str] = None) -> None:
        """Trigger a library scan, limited to ``path`` when given."""
        params = {"path": path} if path else None
        self._request("GET", f"/library/sections/{library_key}/refresh", params=params)
