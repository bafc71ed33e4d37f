"""Capabilities the job service depends on.

The service only talks to storage and the LLM through these protocols, so
tests and alternative backends can stand in for the SQLite repository and
the LiteLLM-backed clients.
"""

from __future__ import annotations

from typing import Any, Protocol

from job_intake.jobs.models import (
    Job,
    JobStatus,
    ParsedData,
    UserJobOffer,
    UserProfile,
)


class JobStore(Protocol):
    async def get_job(self, job_id: str) -> Job | None: ...

    async def find_duplicate(
        self, channel_id: int, message_id: int, hash: str
    ) -> Job | None: ...

    async def insert_job(self, job: Job) -> None: ...

    async def save_job(
        self, job: Job, expected_status: JobStatus | None = None
    ) -> bool: ...

    async def list_job_ids(self, status: JobStatus) -> list[str]: ...

    async def list_recent(
        self, limit: int = 10, status_filter: JobStatus | None = None
    ) -> list[Job]: ...

    async def get_status_counts(self) -> dict[JobStatus, int]: ...

    async def save_user_profile(self, profile: UserProfile) -> None: ...

    async def get_user_profile(self, user_id: str) -> UserProfile | None: ...

    async def upsert_offer(self, offer: UserJobOffer) -> None: ...


class Extractor(Protocol):
    async def extract(self, text: str) -> ParsedData: ...


class Generator(Protocol):
    async def generate(self, cv: str, job_description: str) -> str: ...


class JobCreatedCallback(Protocol):
    def __call__(self, job_id: str) -> Any: ...
