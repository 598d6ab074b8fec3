from __future__ import annotations

from dataclasses import dataclass, field
from pathlib import Path
from typing import Any

from .destination_builder import NAMING_MODES, NAMING_SUBSTITUTE
from .hosts.filesystem import DEFAULT_VIDEO_EXTENSIONS
from .models import SUBTITLE_EXTENSIONS, LibraryRoot
from .plex_client import validate_plex_url
from .reconciler import ReconcileOptions
from .utils import env_bool, env_list, env_str, load_yaml_file, parse_bool

HOST_FILESYSTEM = "filesystem"
HOST_PLEX = "plex"
HOSTS = frozenset({HOST_FILESYSTEM, HOST_PLEX})


@dataclass
class LibrarySettings:
    name: str
    locations: list[str] = field(default_factory=list)

    def to_root(self) -> LibraryRoot:
        return LibraryRoot.from_paths(self.locations, name=self.name)


@dataclass
class PlexSettings:
    url: str | None = None
    token: str | None = None
    library_names: list[str] = field(default_factory=list)
    timeout: float = 15.0


@dataclass
class LoggingSettings:
    level: str = "INFO"
    file: Path | None = None
    file_level: str = "DEBUG"


@dataclass
class Settings:
    host: str = HOST_FILESYSTEM
    naming_mode: str = NAMING_SUBSTITUTE
    rescan_only_on_change: bool = False
    subtitle_extensions: list[str] = field(default_factory=lambda: sorted(SUBTITLE_EXTENSIONS))
    video_extensions: list[str] = field(default_factory=lambda: list(DEFAULT_VIDEO_EXTENSIONS))
    libraries: list[LibrarySettings] = field(default_factory=list)
    plex: PlexSettings = field(default_factory=PlexSettings)
    logging: LoggingSettings = field(default_factory=LoggingSettings)


@dataclass
class AppConfig:
    settings: Settings
    source: Path | None = None

    def library_roots(self) -> list[LibraryRoot]:
        return [library.to_root() for library in self.settings.libraries]

    def reconcile_options(self) -> ReconcileOptions:
        return ReconcileOptions(
            naming_mode=self.settings.naming_mode,
            subtitle_extensions=frozenset(self.settings.subtitle_extensions),
            rescan_only_on_change=self.settings.rescan_only_on_change,
        )


def _clean_str(value: Any) -> str | None:
    if value is None:
        return None
    text = str(value).strip()
    return text or None


def _coerce_bool(value: Any, *, field_name: str, default: bool = False) -> bool:
    if value is None:
        return default
    if isinstance(value, bool):
        return value
    if isinstance(value, str):
        parsed = parse_bool(value)
        if parsed is not None:
            return parsed
    raise ValueError(f"'{field_name}' must be a boolean, got: {value!r}")


def _ensure_string_list(value: Any, *, field_name: str) -> list[str]:
    if value is None:
        return []
    if isinstance(value, str):
        value = [value]
    if not isinstance(value, list):
        raise ValueError(f"'{field_name}' must be provided as a list of strings")
    result: list[str] = []
    for index, entry in enumerate(value):
        if not isinstance(entry, str):
            raise ValueError(f"'{field_name}[{index}]' must be a string")
        cleaned = entry.strip()
        if cleaned:
            result.append(cleaned)
    return result


def _normalize_extensions(value: Any, *, field_name: str, default: list[str]) -> list[str]:
    if value is None:
        return list(default)
    extensions = []
    for entry in _ensure_string_list(value, field_name=field_name):
        lowered = entry.lower()
        extensions.append(lowered if lowered.startswith(".") else f".{lowered}")
    if not extensions:
        raise ValueError(f"'{field_name}' must contain at least one extension")
    return extensions


def _build_libraries(data: Any) -> list[LibrarySettings]:
    if data is None:
        return []
    if not isinstance(data, list):
        raise ValueError("'settings.libraries' must be provided as a list")
    libraries: list[LibrarySettings] = []
    for index, entry in enumerate(data):
        field_name = f"settings.libraries[{index}]"
        if isinstance(entry, str):
            libraries.append(LibrarySettings(name=entry, locations=[entry]))
            continue
        if not isinstance(entry, dict):
            raise ValueError(f"'{field_name}' must be a path or a mapping with 'locations'")
        # Location strings are kept verbatim; root exclusion compares them exactly.
        locations = _ensure_string_list(entry.get("locations"), field_name=f"{field_name}.locations")
        if not locations:
            raise ValueError(f"'{field_name}.locations' must list at least one directory")
        name = _clean_str(entry.get("name")) or locations[0]
        libraries.append(LibrarySettings(name=name, locations=locations))
    return libraries


def _build_plex_settings(data: Any) -> PlexSettings:
    if data is None:
        data = {}
    if not isinstance(data, dict):
        raise ValueError("'settings.plex' must be provided as a mapping when specified")

    timeout_raw = data.get("timeout", 15.0)
    try:
        timeout = float(timeout_raw)
    except (TypeError, ValueError) as exc:  # noqa: PERF203
        raise ValueError("'settings.plex.timeout' must be a number") from exc
    if timeout <= 0:
        raise ValueError("'settings.plex.timeout' must be greater than 0")

    library_names = _ensure_string_list(data.get("library_names"), field_name="settings.plex.library_names")
    if not library_names:
        library_names = env_list("PLEX_LIBRARY_NAMES") or []

    return PlexSettings(
        url=_clean_str(data.get("url")) or env_str("PLEX_URL"),
        token=_clean_str(data.get("token")) or env_str("PLEX_TOKEN"),
        library_names=library_names,
        timeout=timeout,
    )


def _build_logging_settings(data: Any) -> LoggingSettings:
    if data is None:
        return LoggingSettings()
    if not isinstance(data, dict):
        raise ValueError("'settings.logging' must be provided as a mapping when specified")
    log_file = _clean_str(data.get("file"))
    return LoggingSettings(
        level=_clean_str(data.get("level")) or "INFO",
        file=Path(log_file).expanduser() if log_file else None,
        file_level=_clean_str(data.get("file_level")) or "DEBUG",
    )


def _build_settings(data: dict[str, Any]) -> Settings:
    host = (env_str("SUBSORTER_HOST") or _clean_str(data.get("host")) or HOST_FILESYSTEM).lower()
    if host not in HOSTS:
        raise ValueError(f"'settings.host' must be one of {sorted(HOSTS)}, got: {host}")

    naming_mode = (env_str("SUBSORTER_NAMING_MODE") or _clean_str(data.get("naming_mode")) or NAMING_SUBSTITUTE).lower()
    if naming_mode not in NAMING_MODES:
        raise ValueError(f"'settings.naming_mode' must be one of {sorted(NAMING_MODES)}, got: {naming_mode}")

    rescan_only_on_change = env_bool("SUBSORTER_RESCAN_ONLY_ON_CHANGE")
    if rescan_only_on_change is None:
        rescan_only_on_change = _coerce_bool(
            data.get("rescan_only_on_change"),
            field_name="settings.rescan_only_on_change",
        )

    settings = Settings(
        host=host,
        naming_mode=naming_mode,
        rescan_only_on_change=rescan_only_on_change,
        subtitle_extensions=_normalize_extensions(
            data.get("subtitle_extensions"),
            field_name="settings.subtitle_extensions",
            default=sorted(SUBTITLE_EXTENSIONS),
        ),
        video_extensions=_normalize_extensions(
            data.get("video_extensions"),
            field_name="settings.video_extensions",
            default=list(DEFAULT_VIDEO_EXTENSIONS),
        ),
        libraries=_build_libraries(data.get("libraries")),
        plex=_build_plex_settings(data.get("plex")),
        logging=_build_logging_settings(data.get("logging")),
    )

    if host == HOST_FILESYSTEM and not settings.libraries:
        raise ValueError("'settings.libraries' must list at least one library for the filesystem host")
    if host == HOST_PLEX:
        if not validate_plex_url(settings.plex.url):
            raise ValueError(f"'settings.plex.url' must be a valid http/https URL, got: {settings.plex.url}")
        if not settings.plex.token:
            raise ValueError("'settings.plex.token' (or PLEX_TOKEN) is required for the plex host")
    return settings


def build_config(data: dict[str, Any], *, source: Path | None = None) -> AppConfig:
    settings_raw = data.get("settings", {}) or {}
    if not isinstance(settings_raw, dict):
        raise ValueError("'settings' must be provided as a mapping")
    return AppConfig(settings=_build_settings(settings_raw), source=source)


def load_config(path: Path) -> AppConfig:
    return build_config(load_yaml_file(path), source=path)
