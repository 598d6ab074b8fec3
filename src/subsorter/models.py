from __future__ import annotations

import enum
from dataclasses import dataclass, field
from typing import Any, FrozenSet, Iterable, List, Optional

from .errors import SubsorterError

SUBTITLE_EXTENSIONS: FrozenSet[str] = frozenset({".ass", ".srt", ".ssa", ".sub", ".idx", ".vtt"})


@dataclass(slots=True)
class MovieEntry:
    path: str
    is_valid: bool = True
    name: Optional[str] = None
    key: Optional[str] = None  # host identifier used for targeted refreshes

    @property
    def display_name(self) -> str:
        return self.name or self.path or "(unnamed)"


@dataclass(frozen=True, slots=True)
class LibraryRoot:
    locations: FrozenSet[str]
    name: Optional[str] = None

    @classmethod
    def from_paths(cls, paths: Iterable[str], name: Optional[str] = None) -> "LibraryRoot":
        return cls(locations=frozenset(str(path) for path in paths), name=name)


@dataclass(frozen=True, slots=True)
class SubtitleCandidate:
    path: str
    extension: str


class OutcomeKind(str, enum.Enum):
    SKIPPED = "skipped"
    LINKED = "linked"
    COPIED = "copied"
    FAILED = "failed"


@dataclass(frozen=True, slots=True)
class MaterializeOutcome:
    kind: OutcomeKind
    error: Optional[SubsorterError] = None

    @classmethod
    def skipped(cls) -> "MaterializeOutcome":
        return cls(OutcomeKind.SKIPPED)

    @classmethod
    def linked(cls) -> "MaterializeOutcome":
        return cls(OutcomeKind.LINKED)

    @classmethod
    def copied(cls) -> "MaterializeOutcome":
        return cls(OutcomeKind.COPIED)

    @classmethod
    def failed(cls, error: SubsorterError) -> "MaterializeOutcome":
        return cls(OutcomeKind.FAILED, error)

    @property
    def created(self) -> bool:
        return self.kind in (OutcomeKind.LINKED, OutcomeKind.COPIED)


@dataclass(slots=True)
class FailureRecord:
    source_path: str
    error: SubsorterError

    def describe(self) -> str:
        return f"{self.source_path}: {self.error}"


@dataclass(slots=True)
class ReconciliationResult:
    movies_considered: int = 0
    movies_changed: int = 0
    movies_skipped: int = 0
    failures: List[FailureRecord] = field(default_factory=list)
    changed_movies: List[MovieEntry] = field(default_factory=list)
    outcomes: dict[OutcomeKind, int] = field(default_factory=lambda: {kind: 0 for kind in OutcomeKind})
    cancelled: bool = False
    rescan_requested: bool = False

    def register_outcome(self, outcome: MaterializeOutcome) -> None:
        self.outcomes[outcome.kind] = self.outcomes.get(outcome.kind, 0) + 1

    def register_failure(self, source_path: str, error: SubsorterError) -> None:
        self.failures.append(FailureRecord(source_path=source_path, error=error))

    def register_changed(self, movie: MovieEntry) -> None:
        self.movies_changed += 1
        self.changed_movies.append(movie)

    @property
    def created(self) -> int:
        return self.outcomes.get(OutcomeKind.LINKED, 0) + self.outcomes.get(OutcomeKind.COPIED, 0)

    def summary(self) -> dict[str, Any]:
        return {
            "movies": {
                "considered": self.movies_considered,
                "changed": self.movies_changed,
                "skipped": self.movies_skipped,
            },
            "subtitles": {kind.value: self.outcomes.get(kind, 0) for kind in OutcomeKind},
            "failures": len(self.failures),
            "cancelled": self.cancelled,
            "rescan_requested": self.rescan_requested,
        }
