"""Duration calculation pipeline."""

from __future__ import annotations

import logging
from dataclasses import dataclass, field
from pathlib import Path
from typing import List, Optional, Sequence

from audiotally.config import AppConfig
from audiotally.errors import IncompleteRunError, NoAudioFilesError
from audiotally.models import DurationTable, FileFailure, Job, Result, StatisticsRecord
from audiotally.parsers.dispatch import Resolver, resolve_duration
from audiotally.pipeline.aggregator import Aggregator
from audiotally.pipeline.channel import Channel
from audiotally.pipeline.pool import ProgressCallback, WorkerPool

LOGGER = logging.getLogger(__name__)


@dataclass(slots=True)
class ScanReport:
    statistics: StatisticsRecord
    durations: DurationTable
    failures: List[FileFailure] = field(default_factory=list)
    early_stops: List[Result] = field(default_factory=list)


class DurationCalculator:
    """Coordinates the worker pool and the aggregator for one run."""

    def __init__(
        self,
        config: AppConfig | None = None,
        *,
        progress: Optional[ProgressCallback] = None,
        resolver: Resolver = resolve_duration,
    ) -> None:
        self.config = config or AppConfig()
        self.progress = progress
        self.resolver = resolver

    def calculate(self, paths: Sequence[Path]) -> ScanReport:
        """Measure every path and return statistics in discovery order."""
        if not paths:
            raise NoAudioFilesError("No audio files to process")

        total = len(paths)
        jobs: Channel[Job] = Channel(total)
        results: Channel[Result] = Channel(total)

        pool = WorkerPool(
            self.config.workers,
            resolver=self.resolver,
            progress=self.progress,
            job_timeout=self.config.job_timeout,
        )
        LOGGER.info("Processing %d files with %d workers", total, pool.worker_count)
        supervisor = pool.run(jobs, results)

        for index, path in enumerate(paths):
            jobs.send(Job(path=Path(path), index=index))
        jobs.close()

        aggregator = Aggregator(total, count_mode=self.config.count_mode)
        aggregator.consume(results)
        supervisor.join()
        if aggregator.received != total:
            raise IncompleteRunError(total, aggregator.received)

        stats = aggregator.statistics()
        LOGGER.info(
            "Processed %d files: %d ok, %d errors", stats.total_files, stats.success_count, stats.error_count
        )
        return ScanReport(
            statistics=stats,
            durations=list(aggregator.table),
            failures=sorted(aggregator.failures, key=lambda failure: failure.index),
            early_stops=sorted(aggregator.early_stops, key=lambda result: result.index),
        )
