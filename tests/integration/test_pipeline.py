"""End-to-end tests through collector, service, dispatcher and SQLite storage.

The LLM capabilities are stubbed; everything else is real.
"""

from unittest.mock import AsyncMock

import pytest

from job_intake.collector.keyword_filter import KeywordFilter
from job_intake.collector.models import Message
from job_intake.collector.service import CollectorService
from job_intake.config.settings import Settings
from job_intake.jobs.models import JobStatus, ParsedData, UserProfile
from job_intake.jobs.service import JobService
from job_intake.pipeline import open_pipeline

GOLANG_POSTING = "We are hiring a Senior Golang Developer, remote, $4000-$6000"


@pytest.fixture
def job_service(repository, extractor, generator) -> JobService:
    return JobService(repository, extractor, generator)


@pytest.fixture
def collector(job_service) -> CollectorService:
    # The short posting below is well under the default length floor
    return CollectorService(job_service, KeywordFilter(min_length=40))


class TestScenarios:
    async def test_vacancy_is_enriched(self, collector, job_service, repository, extractor):
        extractor.extract = AsyncMock(
            return_value=ParsedData.model_validate(
                {
                    "isVacancy": True,
                    "title": "Senior Golang Developer",
                    "salaryMin": 4000,
                    "salaryMax": 6000,
                    "currency": "USD",
                    "isRemote": True,
                }
            )
        )

        job_id = await collector.handle(
            Message(text=GOLANG_POSTING, channel_id=1001, message_id=1)
        )
        assert (await repository.get_job(job_id)).status == JobStatus.RAW

        await job_service.process(job_id)

        job = await repository.get_job(job_id)
        assert job.status == JobStatus.PROCESSED
        assert job.title == "Senior Golang Developer"
        assert (job.salary_min, job.salary_max, job.currency) == (4000, 6000, "USD")
        assert job.is_remote is True
        assert job.url == "https://t.me/c/1001/1"

    async def test_non_vacancy_is_rejected(self, collector, job_service, repository, extractor):
        extractor.extract = AsyncMock(
            return_value=ParsedData.model_validate({"isVacancy": False})
        )

        job_id = await collector.handle(
            Message(text=GOLANG_POSTING, channel_id=1001, message_id=2)
        )
        await job_service.process(job_id)

        job = await repository.get_job(job_id)
        assert job.status == JobStatus.REJECTED
        assert job.title == GOLANG_POSTING
        assert job.company == ""
        assert job.salary_min == 0
        assert job.skills == []
        assert job.is_remote is False

    async def test_reposted_text_is_dropped(self, collector, repository):
        first = await collector.handle(
            Message(text=GOLANG_POSTING, channel_id=1, message_id=1)
        )
        repost = "  we are hiring a senior GOLANG developer,\nremote, $4000-$6000 "
        second = await collector.handle(Message(text=repost, channel_id=2, message_id=9))

        assert first is not None
        assert second is None
        assert await repository.get_status_counts() == {JobStatus.RAW: 1}

    async def test_offer_upsert_keeps_latest(
        self, collector, job_service, repository, generator
    ):
        await repository.save_user_profile(UserProfile(user_id="u1", cv={"name": "Ada"}))
        job_id = await collector.handle(
            Message(text=GOLANG_POSTING, channel_id=1, message_id=3)
        )
        await job_service.process(job_id)
        generator.generate = AsyncMock(side_effect=["first text", "second text"])

        await job_service.generate_offer(job_id, "u1")
        await job_service.generate_offer(job_id, "u1")

        offer = await repository.get_offer("u1", job_id)
        assert offer.offer_text == "second text"
        assert await repository.count_offers("u1", job_id) == 1


class TestOpenPipeline:
    @pytest.fixture
    def settings(self, tmp_path) -> Settings:
        return Settings(
            _env_file=None,
            db_path=tmp_path / "pipeline.db",
            filter_min_length=40,
            worker_count=2,
        )

    async def test_new_jobs_are_processed_in_background(
        self, settings, extractor, generator
    ):
        async with open_pipeline(
            settings, extractor=extractor, generator=generator
        ) as pipeline:
            job_ids = [
                await pipeline.collector.handle(
                    Message(
                        text=f"{GOLANG_POSTING} (team {i})",
                        channel_id=1,
                        message_id=i,
                    )
                )
                for i in range(3)
            ]
            await pipeline.dispatcher.join()

            for job_id in job_ids:
                job = await pipeline.repository.get_job(job_id)
                assert job.status == JobStatus.PROCESSED

            assert pipeline.dispatcher.stats.processed == 3
        assert extractor.extract.await_count == 3

    async def test_raw_jobs_are_recovered_on_start(self, settings, extractor, generator):
        async with open_pipeline(
            settings, extractor=extractor, generator=generator, start_workers=False
        ) as pipeline:
            job_id = await pipeline.collector.handle(
                Message(text=GOLANG_POSTING, channel_id=5, message_id=5)
            )

        async with open_pipeline(
            settings, extractor=extractor, generator=generator
        ) as pipeline:
            await pipeline.dispatcher.join()
            job = await pipeline.repository.get_job(job_id)

        assert job.status == JobStatus.PROCESSED
