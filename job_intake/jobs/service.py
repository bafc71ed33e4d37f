"""Business logic service for the job pipeline.

This module provides the JobService class which handles:
- Raw job submission and duplicate detection
- LLM extraction driving a job from raw to processed/rejected
- Personalized offer generation per (user, job) pair
"""

from __future__ import annotations

import asyncio
import inspect
import json
import logging
from typing import Any

from job_intake.jobs.errors import (
    ExtractionFailedError,
    InvalidTransitionError,
    JobNotFoundError,
    JobNotReadyError,
    OfferGenerationError,
    PersistenceFailedError,
    UserNotFoundError,
)
from job_intake.jobs.locks import KeyedLocks
from job_intake.jobs.models import (
    Job,
    JobStatus,
    RawJobInput,
    UserJobOffer,
    UserProfile,
)
from job_intake.jobs.ports import (
    Extractor,
    Generator,
    JobCreatedCallback,
    JobStore,
)

logger = logging.getLogger(__name__)


async def _maybe_await(value: Any) -> Any:
    if inspect.isawaitable(value):
        return await value
    return value


class JobService:
    """Business logic service for job intake and enrichment.

    Coordinates the Job aggregate, the store and the LLM capabilities.
    Status changes always go through the aggregate's transition methods.
    """

    def __init__(
        self,
        store: JobStore,
        extractor: Extractor,
        generator: Generator,
        *,
        on_job_created: JobCreatedCallback | None = None,
        offer_requires_processed: bool = False,
    ):
        """Initialize the service.

        Args:
            store: Storage for jobs, user profiles and offers.
            extractor: Capability turning posting text into ParsedData.
            generator: Capability producing an offer from a CV and job text.
            on_job_created: Called with the new job id after every
                successful submission (typically enqueues processing).
            offer_requires_processed: Only generate offers for processed jobs.
        """
        self.store = store
        self.extractor = extractor
        self.generator = generator
        self.on_job_created = on_job_created
        self.offer_requires_processed = offer_requires_processed
        self._locks = KeyedLocks()

    async def submit_raw(self, data: RawJobInput) -> str:
        """Create a new job in raw state.

        Returns:
            The id of the created job.

        Raises:
            DuplicateJobError: If the dedup key is already taken.
        """
        job = Job.create(data)
        await self.store.insert_job(job)

        logger.info(
            f"Raw job submitted: id={job.id} channel={data.channel_id} "
            f"message={data.message_id}"
        )

        if self.on_job_created is not None:
            try:
                await _maybe_await(self.on_job_created(job.id))
            except Exception as e:
                logger.error(f"Job-created hook failed for {job.id}: {e}")

        return job.id

    async def check_duplicate(self, channel_id: int, message_id: int, hash: str) -> bool:
        """Check whether a job with the same origin pair or hash exists.

        Storage errors are logged and reported as "not a duplicate" so a
        flaky lookup never stalls ingestion.
        """
        try:
            existing = await self.store.find_duplicate(channel_id, message_id, hash)
        except Exception as e:
            logger.error(
                f"Duplicate check failed for channel={channel_id} "
                f"message={message_id}: {e}"
            )
            return False
        return existing is not None

    async def process(self, job_id: str) -> None:
        """Run LLM extraction on a raw job.

        Raises:
            JobNotFoundError: If the job does not exist.
            InvalidTransitionError: If the job is not in raw state, or another
                worker claimed it first.
            ExtractionFailedError: If the extractor failed (the job is rejected).
            PersistenceFailedError: If the processed job could not be saved.
        """
        async with self._locks.hold(job_id):
            job = await self.store.get_job(job_id)
            if job is None:
                raise JobNotFoundError(job_id)

            job.mark_processing()
            claimed = await self._claim(job)
            # Terminal writes only apply over our own processing state
            expected = JobStatus.PROCESSING if claimed else None

            try:
                parsed = await self.extractor.extract(job.original_text)
            except asyncio.CancelledError:
                logger.warning(f"Extraction cancelled for job {job_id}, rejecting")
                job.reject("extraction cancelled")
                await asyncio.shield(self._save_quietly(job, expected))
                raise
            except Exception as e:
                logger.error(f"Extraction failed for job {job_id}: {e}")
                job.reject("extraction failed")
                await self._save_quietly(job, expected)
                raise ExtractionFailedError(job_id, e) from e

            if not parsed.is_vacancy:
                logger.info(f"Job {job_id} is not a vacancy, rejecting")
                job.reject("not a vacancy")
                await self._save_quietly(job, expected)
                return

            job.complete(parsed)
            try:
                saved = await self.store.save_job(job, expected_status=expected)
            except Exception as e:
                raise PersistenceFailedError(
                    f"failed to save processed job {job_id}: {e}", e
                ) from e
            if not saved:
                raise PersistenceFailedError(
                    f"processed job {job_id} was changed by another worker"
                )

            logger.info(f"Job processed: id={job_id} title={job.title!r}")

    async def generate_offer(self, job_id: str, user_id: str) -> str:
        """Generate a personalized offer message for a job.

        The offer is upserted for the (user, job) pair; a storage failure is
        logged and the generated text is still returned.

        Raises:
            JobNotFoundError: If the job does not exist.
            UserNotFoundError: If the user has no profile.
            JobNotReadyError: If processed jobs are required and this one is not.
            OfferGenerationError: If the generator failed.
        """
        job = await self.store.get_job(job_id)
        if job is None:
            raise JobNotFoundError(job_id)

        profile = await self.store.get_user_profile(user_id)
        if profile is None:
            raise UserNotFoundError(user_id)

        if self.offer_requires_processed and job.status != JobStatus.PROCESSED:
            raise JobNotReadyError(job_id, job.status.value)

        cv = json.dumps(profile.cv, ensure_ascii=False)
        job_description = job.description + "\n" + job.original_text

        try:
            offer_text = await self.generator.generate(cv, job_description)
        except Exception as e:
            raise OfferGenerationError(job_id, e) from e

        try:
            await self.store.upsert_offer(
                UserJobOffer(user_id=user_id, job_id=job_id, offer_text=offer_text)
            )
        except Exception as e:
            logger.error(f"Failed to save offer for user={user_id} job={job_id}: {e}")

        return offer_text

    async def recover_pending(self) -> list[str]:
        """Return ids of jobs that still need processing.

        Jobs left in ``raw`` are returned for re-enqueueing. Jobs stuck in
        ``processing`` cannot move back to ``raw`` and are only reported.
        """
        pending = await self.store.list_job_ids(JobStatus.RAW)
        stuck = await self.store.list_job_ids(JobStatus.PROCESSING)
        for job_id in stuck:
            if not self._locks.locked(job_id):
                logger.warning(f"Job {job_id} is stuck in processing state")
        if pending:
            logger.info(f"Recovered {len(pending)} raw job(s) for processing")
        return pending

    async def list_jobs(
        self, status: JobStatus | None = None, limit: int = 10
    ) -> list[Job]:
        """List the most recent jobs, optionally filtered by status."""
        return await self.store.list_recent(limit=limit, status_filter=status)

    async def status_counts(self) -> dict[JobStatus, int]:
        counts = await self.store.get_status_counts()
        return {status: counts.get(status, 0) for status in JobStatus}

    async def save_user_profile(self, user_id: str, cv: dict[str, Any]) -> None:
        """Register or replace the CV used for a user's offers."""
        await self.store.save_user_profile(UserProfile(user_id=user_id, cv=cv))
        logger.info(f"Saved profile for user {user_id}")

    async def _claim(self, job: Job) -> bool:
        """Persist the processing state, failing if another worker won.

        Returns:
            True if the conditional write applied, False if it errored and
            processing continues without a stored claim.
        """
        try:
            claimed = await self.store.save_job(job, expected_status=JobStatus.RAW)
        except Exception as e:
            logger.error(f"Failed to save processing state for job {job.id}: {e}")
            return False

        if not claimed:
            current = await self.store.get_job(job.id)
            if current is None:
                raise JobNotFoundError(job.id)
            raise InvalidTransitionError(
                "mark processing", current.status.value, JobStatus.RAW.value
            )
        return True

    async def _save_quietly(
        self, job: Job, expected_status: JobStatus | None = None
    ) -> None:
        try:
            saved = await self.store.save_job(job, expected_status=expected_status)
        except Exception as e:
            logger.error(f"Failed to save {job.status.value} job {job.id}: {e}")
            return
        if not saved:
            logger.warning(
                f"Job {job.id} was changed by another worker, "
                f"not saving {job.status.value} state"
            )
