from __future__ import annotations

import argparse
import logging
import signal
import threading
from pathlib import Path
from typing import Callable, Optional, Sequence

from rich.console import Console
from rich.progress import BarColumn, Progress, TaskProgressColumn, TextColumn, TimeElapsedColumn
from rich.table import Table

from .config import HOST_PLEX, AppConfig, load_config
from .destination_builder import NAMING_MODES, NAMING_SUBSTITUTE, build_destination
from .hosts import FilesystemHost, MediaHost, PlexHost
from .logging_utils import configure_logging, render_fields_block
from .plex_client import PlexApiError, PlexClient
from .reconciler import Reconciler
from .version import __version__

LOGGER = logging.getLogger(__name__)
CONSOLE = Console()

DEFAULT_CONFIG_PATH = Path("/config/subsorter.yaml")


def build_host(config: AppConfig) -> MediaHost:
    settings = config.settings
    if settings.host == HOST_PLEX:
        client = PlexClient(settings.plex.url or "", settings.plex.token or "", timeout=settings.plex.timeout)
        return PlexHost(client, library_names=settings.plex.library_names)
    return FilesystemHost(config.library_roots(), video_extensions=settings.video_extensions)


def _setup_logging(args: argparse.Namespace, config: Optional[AppConfig]) -> None:
    logging_settings = config.settings.logging if config is not None else None
    level = args.log_level or (logging_settings.level if logging_settings else "INFO")
    if args.verbose:
        level = "DEBUG"
    log_file = args.log_file or (logging_settings.file if logging_settings else None)
    file_level = logging_settings.file_level if logging_settings else "DEBUG"
    configure_logging(level, log_file=log_file, file_level=file_level)


def _install_cancel_handler(cancel: threading.Event) -> Callable[[], None]:
    """Turn the first Ctrl-C into a cooperative cancel; a second one interrupts."""
    previous = signal.getsignal(signal.SIGINT)

    def _handler(signum, frame) -> None:  # noqa: ARG001
        if cancel.is_set():
            raise KeyboardInterrupt
        LOGGER.warning("Cancellation requested; finishing the current movie")
        cancel.set()

    signal.signal(signal.SIGINT, _handler)
    return lambda: signal.signal(signal.SIGINT, previous)


def run_reconcile(args: argparse.Namespace) -> int:
    try:
        config = load_config(args.config)
    except (OSError, ValueError) as exc:
        CONSOLE.print(f"[red]Failed to load configuration {args.config}: {exc}[/red]")
        return 2
    if args.naming_mode:
        config.settings.naming_mode = args.naming_mode
    _setup_logging(args, config)

    try:
        host = build_host(config)
        reconciler = Reconciler(host, config.reconcile_options())
    except (PlexApiError, ValueError) as exc:
        LOGGER.error(render_fields_block("Host Setup Failed", {"Error": str(exc)}, pad_top=True))
        return 2

    cancel = threading.Event()
    restore = _install_cancel_handler(cancel)
    try:
        with Progress(
            TextColumn("[progress.description]{task.description}"),
            BarColumn(),
            TaskProgressColumn(),
            TimeElapsedColumn(),
            console=CONSOLE,
            disable=not LOGGER.isEnabledFor(logging.INFO),
        ) as progress:
            task_id = progress.add_task("Reconciling subtitles", total=100)
            result = reconciler.run(
                progress=lambda percent: progress.update(task_id, completed=percent),
                cancel=cancel,
            )
    except PlexApiError as exc:
        LOGGER.error(render_fields_block("Plex Request Failed", {"Error": str(exc)}, pad_top=True))
        return 2
    finally:
        restore()

    if result.cancelled:
        return 130
    return 1 if result.failures else 0


def run_validate_config(args: argparse.Namespace) -> int:
    try:
        config = load_config(args.config)
    except (OSError, ValueError) as exc:
        CONSOLE.print(f"[red]✗ Configuration is invalid:[/red] {exc}")
        return 1

    settings = config.settings
    table = Table(title=f"subsorter {__version__}", show_header=False)
    table.add_column("Setting", style="cyan")
    table.add_column("Value")
    table.add_row("Config", str(args.config))
    table.add_row("Host", settings.host)
    table.add_row("Naming Mode", settings.naming_mode)
    table.add_row("Rescan Only On Change", str(settings.rescan_only_on_change))
    table.add_row("Subtitle Extensions", ", ".join(settings.subtitle_extensions))
    if settings.host == HOST_PLEX:
        table.add_row("Plex URL", settings.plex.url or "")
        table.add_row("Plex Libraries", ", ".join(settings.plex.library_names) or "(all movie libraries)")
    else:
        table.add_row("Video Extensions", ", ".join(settings.video_extensions))
        for library in settings.libraries:
            table.add_row(f"Library: {library.name}", "\n".join(library.locations))
    CONSOLE.print(table)
    CONSOLE.print("[green]✓ Configuration passed validation[/green]")
    return 0


def run_name(args: argparse.Namespace) -> int:
    CONSOLE.print(build_destination(args.movie, args.subtitle, args.naming_mode or NAMING_SUBSTITUTE))
    return 0


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="subsorter",
        description="Link subtitles hidden in movie subfolders next to their movie files.",
    )
    parser.add_argument("--version", action="version", version=f"%(prog)s {__version__}")
    subparsers = parser.add_subparsers(dest="command")

    def _add_common(sub: argparse.ArgumentParser) -> None:
        sub.add_argument(
            "-c",
            "--config",
            type=Path,
            default=DEFAULT_CONFIG_PATH,
            help=f"Path to the YAML configuration (default: {DEFAULT_CONFIG_PATH})",
        )

    run_parser = subparsers.add_parser("run", help="Run one reconciliation pass")
    _add_common(run_parser)
    run_parser.add_argument("-v", "--verbose", action="store_true", help="Enable debug logging")
    run_parser.add_argument("--log-level", default=None, help="Console log level (DEBUG, INFO, WARNING, ...)")
    run_parser.add_argument("--log-file", type=Path, default=None, help="Also write logs to this file")
    run_parser.add_argument("--naming-mode", choices=sorted(NAMING_MODES), default=None)
    run_parser.set_defaults(handler=run_reconcile)

    validate_parser = subparsers.add_parser("validate-config", help="Check the configuration and print a summary")
    _add_common(validate_parser)
    validate_parser.set_defaults(handler=run_validate_config)

    name_parser = subparsers.add_parser("name", help="Print the destination name for a movie/subtitle pair")
    name_parser.add_argument("movie")
    name_parser.add_argument("subtitle")
    name_parser.add_argument("--naming-mode", choices=sorted(NAMING_MODES), default=None)
    name_parser.set_defaults(handler=run_name)

    return parser


def main(argv: Optional[Sequence[str]] = None) -> int:
    parser = build_parser()
    args = parser.parse_args(argv)
    handler = getattr(args, "handler", None)
    if handler is None:
        parser.print_help()
        return 2
    return handler(args)


if __name__ == "__main__":
    raise SystemExit(main())
