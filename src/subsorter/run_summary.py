"""Run recap logging for reconciliation passes."""

from __future__ import annotations

import logging
from collections import Counter
from typing import List

from .logging_utils import LogBlockBuilder
from .models import OutcomeKind, ReconciliationResult

LOGGER = logging.getLogger(__name__)


def summarize_failures(result: ReconciliationResult, *, limit: int = 5) -> List[str]:
    """Group failures by error kind and list the first few of them.

    Args:
        result: Reconciliation result holding the failures.
        limit: Maximum number of individual failures to list.

    Returns:
        Summary lines, empty when nothing failed.
    """
    if not result.failures:
        return []
    kinds = Counter(type(failure.error).__name__ for failure in result.failures)
    lines = [f"{name}: {count}" for name, count in sorted(kinds.items(), key=lambda item: (-item[1], item[0]))]
    for failure in result.failures[:limit]:
        lines.append(failure.describe())
    remaining = len(result.failures) - limit
    if remaining > 0:
        lines.append(f"... {remaining} more (use --verbose for full list)")
    return lines


def format_duration(seconds: float) -> str:
    if seconds < 60:
        return f"{seconds:.1f}s"
    minutes, remainder = divmod(int(seconds), 60)
    return f"{minutes}m {remainder:02d}s"


def log_run_recap(result: ReconciliationResult, duration: float, *, host_name: str = "") -> None:
    builder = LogBlockBuilder("Run Recap")
    fields: dict[str, object] = {"Host": host_name} if host_name else {}
    fields.update(
        {
            "Duration": format_duration(duration),
            "Movies": result.movies_considered,
            "Changed": result.movies_changed,
            "Skipped Movies": result.movies_skipped,
            "Linked": result.outcomes.get(OutcomeKind.LINKED, 0),
            "Copied": result.outcomes.get(OutcomeKind.COPIED, 0),
            "Already Present": result.outcomes.get(OutcomeKind.SKIPPED, 0),
            "Failures": len(result.failures),
        }
    )
    if result.cancelled:
        fields["Cancelled"] = True
    fields["Full Rescan"] = "requested" if result.rescan_requested else "not requested"
    builder.add_fields(fields)

    if result.changed_movies:
        builder.add_section("Changed Movies", [movie.display_name for movie in result.changed_movies])
    failure_lines = summarize_failures(result)
    if failure_lines:
        builder.add_section("Failures", failure_lines)

    level = logging.WARNING if result.failures else logging.INFO
    LOGGER.log(level, builder.render())
