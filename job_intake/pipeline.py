"""Composition root wiring storage, services and workers together."""

from __future__ import annotations

import logging
from collections.abc import AsyncIterator
from contextlib import asynccontextmanager
from dataclasses import dataclass

from job_intake.collector.keyword_filter import KeywordFilter
from job_intake.collector.service import CollectorService
from job_intake.config.settings import Settings
from job_intake.jobs.dispatcher import ProcessingDispatcher
from job_intake.jobs.ports import Extractor, Generator
from job_intake.jobs.repository import JobRepository
from job_intake.jobs.service import JobService

logger = logging.getLogger(__name__)


@dataclass
class Pipeline:
    repository: JobRepository
    job_service: JobService
    dispatcher: ProcessingDispatcher
    collector: CollectorService


@asynccontextmanager
async def open_pipeline(
    settings: Settings,
    *,
    extractor: Extractor | None = None,
    generator: Generator | None = None,
    start_workers: bool = True,
) -> AsyncIterator[Pipeline]:
    """Open the database and build the pipeline.

    New jobs are enqueued on the dispatcher as soon as they are created.
    On exit the queue is drained and the database closed.

    Args:
        settings: Application settings.
        extractor: Extraction capability (LiteLLM-backed by default).
        generator: Offer generation capability (LiteLLM-backed by default).
        start_workers: Start the processing workers on entry.
    """
    if extractor is None or generator is None:
        from job_intake.llm import LLMClient, OfferGenerator, VacancyExtractor

        client = LLMClient()
        extractor = extractor or VacancyExtractor(client)
        generator = generator or OfferGenerator(client)

    repository = JobRepository(settings.db_path)
    await repository.initialize()

    job_service = JobService(
        repository,
        extractor,
        generator,
        offer_requires_processed=settings.offer_requires_processed,
    )
    dispatcher = ProcessingDispatcher(job_service, worker_count=settings.worker_count)
    job_service.on_job_created = dispatcher.enqueue

    collector = CollectorService(job_service, KeywordFilter.from_settings(settings))

    try:
        if start_workers:
            await dispatcher.start(recover=settings.recover_pending_on_start)
        yield Pipeline(
            repository=repository,
            job_service=job_service,
            dispatcher=dispatcher,
            collector=collector,
        )
    finally:
        await dispatcher.stop(drain=True)
        await repository.close()
