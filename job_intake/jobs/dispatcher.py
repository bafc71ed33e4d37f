"""Background work queue for job enrichment."""

from __future__ import annotations

import asyncio
import contextlib
import logging
from dataclasses import dataclass

from job_intake.jobs.errors import ExtractionFailedError, InvalidTransitionError
from job_intake.jobs.service import JobService

logger = logging.getLogger(__name__)


@dataclass
class DispatchStats:
    enqueued: int = 0
    processed: int = 0
    failed: int = 0
    skipped: int = 0


class ProcessingDispatcher:
    """Run ``JobService.process`` for queued job ids on a pool of workers.

    Enqueueing never blocks on the outcome; failures are logged by the
    worker that hit them. Per-job exclusion is handled by the service.
    """

    def __init__(self, service: JobService, *, worker_count: int = 2) -> None:
        if worker_count < 1:
            raise ValueError("worker_count must be at least 1")
        self.service = service
        self.worker_count = worker_count
        self.stats = DispatchStats()
        self._queue: asyncio.Queue[str] = asyncio.Queue()
        self._workers: list[asyncio.Task] = []

    @property
    def running(self) -> bool:
        return bool(self._workers)

    def enqueue(self, job_id: str) -> None:
        self._queue.put_nowait(job_id)
        self.stats.enqueued += 1

    async def start(self, *, recover: bool = False) -> None:
        """Start the worker tasks.

        Args:
            recover: Enqueue jobs left in raw state before starting.
        """
        if self.running:
            return

        if recover:
            for job_id in await self.service.recover_pending():
                self.enqueue(job_id)

        self._workers = [
            asyncio.create_task(self._worker(index), name=f"job-worker-{index}")
            for index in range(self.worker_count)
        ]
        logger.info(f"Started {self.worker_count} processing worker(s)")

    async def join(self) -> None:
        """Wait until every queued job has been handled."""
        await self._queue.join()

    async def stop(self, *, drain: bool = True) -> None:
        """Stop the workers, optionally after the queue is drained."""
        if drain and self.running:
            await self.join()

        for task in self._workers:
            task.cancel()
        for task in self._workers:
            with contextlib.suppress(asyncio.CancelledError):
                await task
        self._workers = []

    async def _worker(self, index: int) -> None:
        while True:
            job_id = await self._queue.get()
            try:
                await self.service.process(job_id)
                self.stats.processed += 1
            except InvalidTransitionError as e:
                self.stats.skipped += 1
                logger.info(f"Worker {index}: skipping job {job_id}: {e}")
            except ExtractionFailedError as e:
                self.stats.failed += 1
                logger.error(f"Worker {index}: {e}")
            except Exception as e:
                self.stats.failed += 1
                logger.exception(f"Worker {index}: job {job_id} processing failed: {e}")
            finally:
                self._queue.task_done()
