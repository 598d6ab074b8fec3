from __future__ import annotations

import logging
from collections.abc import Iterable, Mapping
from pathlib import Path
from textwrap import wrap
from typing import Optional, Union

from rich.console import Console
from rich.logging import RichHandler

BLOCK_WIDTH = 110
MAX_LABEL_WIDTH = 22
INDENT = "    "
FILE_LOG_FORMAT = "%(asctime)s %(levelname)-8s %(name)s: %(message)s"


def _as_text(value: object) -> str:
    if value is None:
        return ""
    if isinstance(value, (list, tuple, set, frozenset)):
        return ", ".join(_as_text(item) for item in value)
    return str(value).strip()


def _wrapped(text: str, width: int) -> list[str]:
    return wrap(text, width=width) or [""]


class LogBlockBuilder:
    """Collect the lines of a titled multi-line log record.

    Fields are rendered as aligned ``label: value`` rows, sections as a
    heading followed by bullet items.
    """

    def __init__(self, title: str, *, pad_top: bool = True) -> None:
        self.lines: list[str] = [""] if pad_top else []
        self.lines += [title, "-" * len(title)]

    def add_fields(self, fields: Mapping[str, object]) -> None:
        if not fields:
            return
        label_width = min(max(len(label) for label in fields), MAX_LABEL_WIDTH)
        value_width = max(BLOCK_WIDTH - len(INDENT) - label_width - 2, 32)
        for label, value in fields.items():
            first, *rest = _wrapped(_as_text(value), value_width)
            self.lines.append(f"{INDENT}{label:<{label_width}}: {first}")
            self.lines += [f"{INDENT}{'':<{label_width}}  {line}" for line in rest]

    def add_section(self, heading: str, items: Iterable[str], *, empty_label: str = "(none)") -> None:
        if self.lines[-1]:
            self.lines.append("")
        self.lines.append(f"{heading}:")
        entries = [item for item in items if item is not None]
        if not entries:
            self.lines.append(f"{INDENT}{empty_label}")
            return
        for item in entries:
            first, *rest = _wrapped(_as_text(item), BLOCK_WIDTH - len(INDENT) - 2)
            self.lines.append(f"{INDENT}- {first}")
            self.lines += [f"{INDENT}  {line}" for line in rest]

    def render(self) -> str:
        return "\n".join(self.lines).rstrip()


def render_fields_block(title: str, fields: Mapping[str, object], *, pad_top: bool = True) -> str:
    builder = LogBlockBuilder(title, pad_top=pad_top)
    builder.add_fields(fields)
    return builder.render()


def parse_level(value: Union[str, int, None], default: int = logging.INFO) -> int:
    """Translate a level name such as ``"debug"`` into a logging level number."""
    if value is None:
        return default
    if isinstance(value, int):
        return value
    level = logging.getLevelName(value.strip().upper())
    if not isinstance(level, int):
        raise ValueError(f"Unknown log level: {value}")
    return level


def configure_logging(
    level: Union[str, int, None] = logging.INFO,
    *,
    log_file: Optional[Path] = None,
    file_level: Union[str, int, None] = logging.DEBUG,
    console: Optional[Console] = None,
) -> None:
    """Install a rich console handler and an optional plain-text file handler.

    Calling it again replaces the handlers installed by a previous call.
    """
    console_level = parse_level(level)
    root = logging.getLogger()
    for handler in list(root.handlers):
        if getattr(handler, "_subsorter_handler", False):
            root.removeHandler(handler)
            handler.close()

    rich_handler = RichHandler(
        console=console or Console(stderr=True),
        show_path=False,
        markup=False,
        rich_tracebacks=True,
    )
    rich_handler.setLevel(console_level)
    rich_handler._subsorter_handler = True  # type: ignore[attr-defined]
    root.addHandler(rich_handler)

    effective = console_level
    if log_file is not None:
        log_file.parent.mkdir(parents=True, exist_ok=True)
        file_handler = logging.FileHandler(log_file, encoding="utf-8")
        file_handler.setLevel(parse_level(file_level, logging.DEBUG))
        file_handler.setFormatter(logging.Formatter(FILE_LOG_FORMAT))
        file_handler._subsorter_handler = True  # type: ignore[attr-defined]
        root.addHandler(file_handler)
        effective = min(effective, file_handler.level)

    root.setLevel(effective)
    # requests/urllib3 debug output includes full URLs
    logging.getLogger("urllib3").setLevel(max(effective, logging.INFO))
