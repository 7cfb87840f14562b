"""Reassemble results by index and derive run statistics."""

from __future__ import annotations

import logging
from enum import Enum
from typing import Iterable, List

from audiotally.models import DurationTable, FileFailure, Result, StatisticsRecord

LOGGER = logging.getLogger(__name__)


class CountMode(str, Enum):
    """How successfully processed files are counted.

    ``FAILURE`` counts every result without an error, so zero-length files are
    successes. ``DURATION`` counts table slots holding a positive duration,
    which cannot tell a zero-length file from a failed one.
    """

    FAILURE = "failure"
    DURATION = "duration"


class Aggregator:
    """Single-threaded consumer of the results stream."""

    def __init__(self, total_files: int, *, count_mode: CountMode | str = CountMode.FAILURE) -> None:
        if total_files < 0:
            raise ValueError("total_files must not be negative")
        self.total_files = total_files
        self.count_mode = CountMode(count_mode)
        self.table: DurationTable = [0.0] * total_files
        self.failures: List[FileFailure] = []
        self.early_stops: List[Result] = []
        self.error_count = 0
        self._seen = [False] * total_files
        self._ok = [False] * total_files

    @property
    def received(self) -> int:
        return sum(self._seen)

    def add(self, result: Result) -> None:
        index = result.index
        if not 0 <= index < self.total_files:
            raise ValueError(f"result index {index} out of range for {self.total_files} files")
        if self._seen[index]:
            raise ValueError(f"duplicate result for index {index}")
        self._seen[index] = True

        if result.error is not None:
            self.error_count += 1
            self.failures.append(FileFailure(index=index, path=result.path, message=str(result.error)))
            return

        self.table[index] = result.duration
        self._ok[index] = True
        if result.stopped_early:
            self.early_stops.append(result)

    def consume(self, results: Iterable[Result]) -> None:
        for result in results:
            self.add(result)
        if self.received != self.total_files:
            LOGGER.warning("Expected %d results, received %d", self.total_files, self.received)

    def statistics(self) -> StatisticsRecord:
        if self.count_mode is CountMode.DURATION:
            counted = [duration for duration in self.table if duration > 0]
        else:
            counted = [duration for duration, ok in zip(self.table, self._ok) if ok]

        total_seconds = sum(counted)
        success_count = len(counted)
        mean = total_seconds / success_count if success_count else 0.0
        return StatisticsRecord(
            total_files=self.total_files,
            success_count=success_count,
            error_count=self.error_count,
            total_seconds=total_seconds,
            mean_seconds_per_file=mean,
        )


def aggregate(
    results: Iterable[Result],
    total_files: int,
    *,
    count_mode: CountMode | str = CountMode.FAILURE,
) -> StatisticsRecord:
    """Consume ``results`` to the end and return the run statistics."""
    aggregator = Aggregator(total_files, count_mode=count_mode)
    aggregator.consume(results)
    return aggregator.statistics()
