"""Thread pool that turns jobs into results."""

from __future__ import annotations

import logging
import os
import threading
from typing import Callable, List, Optional

from audiotally.errors import JobTimeoutError
from audiotally.models import DurationOutcome, Job, Result
from audiotally.parsers.dispatch import Resolver, resolve_duration
from audiotally.pipeline.channel import Channel

LOGGER = logging.getLogger(__name__)

ProgressCallback = Callable[[], None]


def default_worker_count() -> int:
    return os.cpu_count() or 1


class WaitGroup:
    """Counter that lets one thread wait until every worker has finished."""

    def __init__(self) -> None:
        self._count = 0
        self._cond = threading.Condition()

    def add(self, delta: int = 1) -> None:
        with self._cond:
            self._count += delta
            if self._count < 0:
                raise ValueError("negative WaitGroup counter")
            if self._count == 0:
                self._cond.notify_all()

    def done(self) -> None:
        self.add(-1)

    def wait(self) -> None:
        with self._cond:
            self._cond.wait_for(lambda: self._count == 0)


class WorkerPool:
    """Fixed set of worker threads sharing a jobs and a results channel."""

    def __init__(
        self,
        worker_count: int | None = None,
        *,
        resolver: Resolver = resolve_duration,
        progress: Optional[ProgressCallback] = None,
        job_timeout: float | None = None,
    ) -> None:
        if worker_count is None:
            worker_count = default_worker_count()
        if worker_count < 1:
            raise ValueError(f"worker_count must be at least 1, got {worker_count}")
        if job_timeout is not None and job_timeout <= 0:
            raise ValueError(f"job_timeout must be positive, got {job_timeout}")
        self.worker_count = worker_count
        self.resolver = resolver
        self.progress = progress
        self.job_timeout = job_timeout

    def run(self, jobs: Channel[Job], results: Channel[Result]) -> threading.Thread:
        """Start the workers and a supervisor that closes ``results`` when all exit.

        Returns the supervisor thread; joining it waits for the whole pool.
        """
        group = WaitGroup()
        workers: List[threading.Thread] = []
        for number in range(self.worker_count):
            group.add(1)
            worker = threading.Thread(
                target=self._work,
                args=(jobs, results, group),
                name=f"audiotally-worker-{number}",
                daemon=True,
            )
            workers.append(worker)

        def supervise() -> None:
            group.wait()
            results.close()

        supervisor = threading.Thread(target=supervise, name="audiotally-supervisor", daemon=True)
        for worker in workers:
            worker.start()
        supervisor.start()
        return supervisor

    def _work(self, jobs: Channel[Job], results: Channel[Result], group: WaitGroup) -> None:
        try:
            for job in jobs:
                results.send(self.process(job))
                self._advance(job)
        finally:
            group.done()

    def _advance(self, job: Job) -> None:
        if self.progress is None:
            return
        try:
            self.progress()
        except Exception:
            LOGGER.exception("Progress callback failed after %s", job.path)

    def process(self, job: Job) -> Result:
        """Resolve a single job; any failure becomes the result's error."""
        try:
            outcome = self._resolve(job)
        except Exception as exc:
            LOGGER.debug("Failed to measure %s: %s", job.path, exc)
            return Result(index=job.index, error=exc, path=job.path)
        return Result(
            index=job.index,
            duration=outcome.seconds,
            stopped_early=outcome.stopped_early,
            path=job.path,
        )

    def _resolve(self, job: Job) -> DurationOutcome:
        if self.job_timeout is None:
            return self.resolver(job.path)

        box: dict = {}

        def target() -> None:
            try:
                box["outcome"] = self.resolver(job.path)
            except Exception as exc:
                box["error"] = exc

        # A stalled parse cannot be interrupted; its thread is left behind.
        runner = threading.Thread(target=target, name=f"audiotally-job-{job.index}", daemon=True)
        runner.start()
        runner.join(self.job_timeout)
        if runner.is_alive():
            raise JobTimeoutError(job.path, self.job_timeout)
        if "error" in box:
            raise box["error"]
        return box["outcome"]
