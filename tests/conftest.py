"""Pytest configuration and shared fixtures."""

from unittest.mock import AsyncMock

import pytest

from job_intake.jobs.models import ParsedData, RawJobInput

VACANCY_TEXT = (
    "Senior Python Developer\n"
    "We are hiring a backend engineer to join our team. Remote, salary "
    "$4000-$6000, experience with FastAPI and PostgreSQL required."
)


@pytest.fixture
def vacancy_text() -> str:
    """A posting long enough to pass the keyword filter."""
    return VACANCY_TEXT


@pytest.fixture
def raw_input() -> RawJobInput:
    """Input for a raw job with a fixed identity."""
    return RawJobInput(
        original_text=VACANCY_TEXT,
        channel_id=1,
        message_id=5,
        hash="h" * 64,
        raw={"peer": "channel", "id": 5},
    )


@pytest.fixture
async def repository(tmp_path):
    """An initialized SQLite repository in a temp directory."""
    from job_intake.jobs.repository import JobRepository

    repo = JobRepository(tmp_path / "jobs.db")
    await repo.initialize()
    yield repo
    await repo.close()


@pytest.fixture
def extractor() -> AsyncMock:
    """Extractor stub returning a processed vacancy."""
    mock = AsyncMock()
    mock.extract = AsyncMock(
        return_value=ParsedData(
            is_vacancy=True,
            title="Senior Python Developer",
            company="ACME",
            salary_min=4000,
            salary_max=6000,
            currency="USD",
            skills=["python", "fastapi"],
            is_remote=True,
            grade="Senior",
            description="Backend work on APIs",
        )
    )
    return mock


@pytest.fixture
def generator() -> AsyncMock:
    """Offer generator stub."""
    mock = AsyncMock()
    mock.generate = AsyncMock(return_value="Hi team, I build Python backends.")
    return mock


@pytest.fixture(autouse=True)
def _reset_app_logging():
    """Undo configure_logging so caplog keeps seeing app records."""
    from job_intake.utils.logging import reset_logging

    yield
    reset_logging()
