from __future__ import annotations

import os
from pathlib import Path
from typing import Any, Dict, List, Optional

import yaml

_BOOL_WORDS = {
    "1": True,
    "true": True,
    "yes": True,
    "on": True,
    "0": False,
    "false": False,
    "no": False,
    "off": False,
}


def expand_env(value: Any) -> Any:
    """Expand ``$VAR``/``${VAR}`` references in every string of a parsed YAML tree."""
    if isinstance(value, dict):
        return {key: expand_env(item) for key, item in value.items()}
    if isinstance(value, list):
        return list(map(expand_env, value))
    return os.path.expandvars(value) if isinstance(value, str) else value


def load_yaml_file(path: Path) -> Dict[str, Any]:
    with path.open("r", encoding="utf-8") as handle:
        data = yaml.safe_load(handle)
    if data is None:
        return {}
    if not isinstance(data, dict):
        raise ValueError(f"Configuration file {path} must contain a mapping at the top level")
    return expand_env(data)


def parse_bool(value: Optional[str]) -> Optional[bool]:
    """Map ``yes``/``no`` style words to a bool; anything unrecognised gives None."""
    if value is None:
        return None
    return _BOOL_WORDS.get(value.strip().lower())


def env_str(name: str) -> Optional[str]:
    return (os.environ.get(name) or "").strip() or None


def env_bool(name: str) -> Optional[bool]:
    return parse_bool(os.environ.get(name))


def env_list(name: str, separator: str = ",") -> Optional[List[str]]:
    """Split a delimited environment variable; None when it is not set at all."""
    raw = os.environ.get(name)
    if raw is None:
        return None
    return [part for part in (piece.strip() for piece in raw.split(separator)) if part]
