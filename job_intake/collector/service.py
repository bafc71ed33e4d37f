"""Collector service: turns incoming messages into raw jobs.

Each message goes through the keyword filter and the duplicate check
before a raw job is submitted. Enrichment is not done here; it is
triggered by the job-created hook of the job service.
"""

from __future__ import annotations

import logging

from job_intake.collector.fingerprint import compute_fingerprint
from job_intake.collector.keyword_filter import KeywordFilter
from job_intake.collector.models import Message
from job_intake.jobs.errors import DuplicateJobError
from job_intake.jobs.models import RawJobInput
from job_intake.jobs.service import JobService

logger = logging.getLogger(__name__)


class CollectorService:
    """Handle incoming messages from a feed transport."""

    def __init__(
        self,
        job_service: JobService,
        keyword_filter: KeywordFilter | None = None,
    ) -> None:
        self.job_service = job_service
        self.filter = keyword_filter or KeywordFilter()

    async def handle(self, message: Message) -> str | None:
        """Process one incoming message.

        Per-message failures are logged and never raised, so a transport
        loop can call this for every update without guarding it.

        Returns:
            The id of the submitted job, or None if the message was dropped.
        """
        if not message.text:
            return None

        if not self.filter.should_process(message.text):
            logger.debug(
                f"Message filtered out by keywords: channel={message.channel_id} "
                f"message={message.message_id}"
            )
            return None

        logger.info(
            f"Processing potential job posting: channel={message.channel_id} "
            f"message={message.message_id} length={len(message.text)}"
        )

        try:
            fingerprint = compute_fingerprint(message.text)

            if await self.job_service.check_duplicate(
                message.channel_id, message.message_id, fingerprint
            ):
                logger.debug(
                    f"Duplicate message, skipping: channel={message.channel_id} "
                    f"message={message.message_id} hash={fingerprint}"
                )
                return None

            job_id = await self.job_service.submit_raw(
                RawJobInput(
                    original_text=message.text,
                    channel_id=message.channel_id,
                    message_id=message.message_id,
                    hash=fingerprint,
                    raw=message.raw,
                )
            )
        except DuplicateJobError:
            # Lost the race against a concurrent copy of the same message
            logger.debug(
                f"Duplicate rejected by storage: channel={message.channel_id} "
                f"message={message.message_id}"
            )
            return None
        except Exception as e:
            logger.error(
                f"Failed to handle message: channel={message.channel_id} "
                f"message={message.message_id}: {e}"
            )
            return None

        return job_id
