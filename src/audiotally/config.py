"""Application configuration defaults."""

from __future__ import annotations

from dataclasses import dataclass

from audiotally.formats import AUDIO_EXTENSIONS, normalize_extension
from audiotally.pipeline.aggregator import CountMode
from audiotally.pipeline.pool import default_worker_count


@dataclass(slots=True)
class AppConfig:
    workers: int | None = None
    count_mode: CountMode | str = CountMode.FAILURE
    job_timeout: float | None = None
    extensions: tuple[str, ...] = AUDIO_EXTENSIONS

    def __post_init__(self) -> None:
        if self.workers is None:
            self.workers = default_worker_count()
        if self.workers < 1:
            raise ValueError(f"workers must be at least 1, got {self.workers}")
        if self.job_timeout is not None and self.job_timeout <= 0:
            raise ValueError(f"job_timeout must be positive, got {self.job_timeout}")
        self.count_mode = CountMode(self.count_mode)
        self.extensions = tuple(normalize_extension(ext) for ext in self.extensions)
