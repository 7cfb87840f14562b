"""Core audiotally data models."""

from __future__ import annotations

from dataclasses import dataclass
from pathlib import Path
from typing import List

SECONDS_PER_HOUR = 3600.0

DurationTable = List[float]


@dataclass(frozen=True, slots=True)
class Job:
    """A discovered file and its position in discovery order."""

    path: Path
    index: int


@dataclass(frozen=True, slots=True)
class Result:
    """Outcome of exactly one job."""

    index: int
    duration: float = 0.0
    error: BaseException | None = None
    stopped_early: bool = False
    path: Path | None = None

    @property
    def ok(self) -> bool:
        return self.error is None


@dataclass(frozen=True, slots=True)
class DurationOutcome:
    seconds: float
    stopped_early: bool = False


@dataclass(frozen=True, slots=True)
class FileFailure:
    """Failure cause retained after aggregation for diagnostics."""

    index: int
    path: Path | None
    message: str


@dataclass(frozen=True, slots=True)
class StatisticsRecord:
    """Final statistics of a run, derived once after all results arrived."""

    total_files: int
    success_count: int
    error_count: int
    total_seconds: float
    mean_seconds_per_file: float

    @property
    def total_hours(self) -> float:
        return self.total_seconds / SECONDS_PER_HOUR

    @property
    def mean_hours(self) -> float:
        return self.mean_seconds_per_file / SECONDS_PER_HOUR

    @property
    def mean_minutes(self) -> float:
        return self.mean_seconds_per_file / 60.0
