"""Tests for the CollectorService."""

from unittest.mock import AsyncMock

import pytest

from job_intake.collector.fingerprint import compute_fingerprint
from job_intake.collector.models import Message
from job_intake.collector.service import CollectorService
from job_intake.jobs.errors import DuplicateJobError
from job_intake.jobs.models import RawJobInput


@pytest.fixture
def job_service() -> AsyncMock:
    service = AsyncMock()
    service.check_duplicate = AsyncMock(return_value=False)
    service.submit_raw = AsyncMock(return_value="job-1")
    return service


class TestHandle:
    async def test_submits_raw_job_for_new_posting(self, job_service, vacancy_text):
        collector = CollectorService(job_service)
        message = Message(
            text=vacancy_text, channel_id=10, message_id=20, raw={"id": 20}
        )

        result = await collector.handle(message)

        assert result == "job-1"
        fingerprint = compute_fingerprint(vacancy_text)
        job_service.check_duplicate.assert_awaited_once_with(10, 20, fingerprint)
        job_service.submit_raw.assert_awaited_once_with(
            RawJobInput(
                original_text=vacancy_text,
                channel_id=10,
                message_id=20,
                hash=fingerprint,
                raw={"id": 20},
            )
        )

    async def test_drops_empty_text(self, job_service):
        collector = CollectorService(job_service)

        result = await collector.handle(Message(text="", channel_id=1, message_id=1))

        assert result is None
        job_service.check_duplicate.assert_not_awaited()
        job_service.submit_raw.assert_not_awaited()

    async def test_drops_message_failing_filter(self, job_service):
        collector = CollectorService(job_service)

        result = await collector.handle(
            Message(text="too short to matter", channel_id=1, message_id=1)
        )

        assert result is None
        job_service.check_duplicate.assert_not_awaited()

    async def test_drops_duplicate(self, job_service, vacancy_text):
        job_service.check_duplicate = AsyncMock(return_value=True)
        collector = CollectorService(job_service)

        result = await collector.handle(
            Message(text=vacancy_text, channel_id=1, message_id=1)
        )

        assert result is None
        job_service.submit_raw.assert_not_awaited()

    async def test_storage_duplicate_is_dropped_quietly(self, job_service, vacancy_text):
        job_service.submit_raw = AsyncMock(side_effect=DuplicateJobError("taken"))
        collector = CollectorService(job_service)

        result = await collector.handle(
            Message(text=vacancy_text, channel_id=1, message_id=1)
        )

        assert result is None

    async def test_submission_failure_is_logged_not_raised(
        self, job_service, vacancy_text, caplog
    ):
        job_service.submit_raw = AsyncMock(side_effect=RuntimeError("db down"))
        collector = CollectorService(job_service)

        with caplog.at_level("ERROR", logger="job_intake"):
            result = await collector.handle(
                Message(text=vacancy_text, channel_id=3, message_id=4)
            )

        assert result is None
        assert "Failed to handle message" in caplog.text
        assert "db down" in caplog.text

    async def test_lone_surrogate_text_is_submitted(self, job_service):
        collector = CollectorService(job_service)
        text = "We are hiring a python developer. " * 4 + "\ud83d"

        result = await collector.handle(Message(text=text, channel_id=1, message_id=2))

        assert result == "job-1"
        submitted = job_service.submit_raw.await_args.args[0]
        assert submitted.hash == compute_fingerprint(text)

    async def test_duplicate_lookup_crash_is_logged_not_raised(
        self, job_service, vacancy_text, caplog
    ):
        job_service.check_duplicate = AsyncMock(side_effect=RuntimeError("boom"))
        collector = CollectorService(job_service)

        with caplog.at_level("ERROR", logger="job_intake"):
            result = await collector.handle(
                Message(text=vacancy_text, channel_id=3, message_id=4)
            )

        assert result is None
        assert "boom" in caplog.text
        job_service.submit_raw.assert_not_awaited()
