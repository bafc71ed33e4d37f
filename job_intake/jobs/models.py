"""Data models for the job pipeline.

The Job aggregate owns its lifecycle: every status change goes through
``mark_processing``, ``complete`` or ``reject``, which guard the
``raw -> processing -> processed | rejected`` state machine.
"""

from __future__ import annotations

import uuid
from dataclasses import dataclass, field
from datetime import datetime
from enum import Enum
from typing import Any

from pydantic import BaseModel, ConfigDict, Field

from job_intake.jobs.errors import InvalidTransitionError

# Title shown before the extractor has produced a real one
PLACEHOLDER_TITLE = "Pending Analysis"
MAX_TITLE_LENGTH = 100
POST_URL_TEMPLATE = "https://t.me/c/{channel_id}/{message_id}"


class JobStatus(str, Enum):
    """Processing state of a job."""

    RAW = "raw"
    PROCESSING = "processing"
    PROCESSED = "processed"
    REJECTED = "rejected"

    @property
    def is_terminal(self) -> bool:
        return self in (JobStatus.PROCESSED, JobStatus.REJECTED)


class ParsedData(BaseModel):
    """Structured output of the vacancy extractor.

    The camelCase aliases are the JSON contract enforced on the LLM side
    through the structured-output schema and must not be renamed.
    """

    model_config = ConfigDict(populate_by_name=True)

    is_vacancy: bool = Field(
        default=False,
        alias="isVacancy",
        description="False if spam/advertisement/not a job posting",
    )
    title: str = Field(default="", description="Job title")
    company: str = Field(default="", description="Company name if mentioned")
    salary_min: int = Field(
        default=0, alias="salaryMin", description="Minimum salary (0 if not specified)"
    )
    salary_max: int = Field(
        default=0, alias="salaryMax", description="Maximum salary (0 if not specified)"
    )
    currency: str = Field(
        default="", description="Currency code (USD, EUR, RUB, etc.)"
    )
    skills: list[str] = Field(
        default_factory=list, description="Required skills/technologies"
    )
    is_remote: bool = Field(
        default=False, alias="isRemote", description="Whether remote work is available"
    )
    grade: str = Field(default="", description="Junior, Middle, Senior, Lead, etc.")
    location: str = Field(default="", description="Office location if mentioned")
    description: str = Field(default="", description="Brief job description")


class RawJobInput(BaseModel):
    """Data needed to create a new job in raw state."""

    original_text: str
    channel_id: int
    message_id: int
    hash: str
    raw: Any = None


def derive_title(text: str) -> str:
    """Build a display title from the first line of a posting."""
    first_line = text.split("\n", 1)[0]
    if not first_line:
        return PLACEHOLDER_TITLE
    if len(first_line) > MAX_TITLE_LENGTH:
        return first_line[: MAX_TITLE_LENGTH - 3] + "..."
    return first_line


def build_post_url(channel_id: int, message_id: int) -> str:
    """Return the deep link to the origin message."""
    return POST_URL_TEMPLATE.format(channel_id=channel_id, message_id=message_id)


@dataclass
class Job:
    """A candidate job posting, from raw ingestion to enrichment outcome.

    Attributes:
        id: Opaque unique identifier assigned at creation.
        original_text: Message text as received; never changes.
        channel_id: Origin channel/chat id.
        message_id: Origin message id within the channel.
        hash: Normalized-content fingerprint of ``original_text``.
        url: Deep link to the origin message.
        status: Current lifecycle state.
        raw: Opaque transport payload, stored and returned untouched.
        title..skills: Enrichment fields, set by ``complete``.
        rejection_reason: Advisory reason recorded by ``reject``.
        created_at: Set by the repository on insert.
        updated_at: Set by the repository on every save.
    """

    id: str
    original_text: str
    channel_id: int
    message_id: int
    hash: str
    url: str
    status: JobStatus = JobStatus.RAW
    raw: Any = None
    title: str = ""
    company: str = ""
    salary_min: int = 0
    salary_max: int = 0
    currency: str = ""
    grade: str = ""
    location: str = ""
    is_remote: bool = False
    description: str = ""
    skills: list[str] = field(default_factory=list)
    rejection_reason: str | None = None
    created_at: datetime | None = None
    updated_at: datetime | None = None

    @classmethod
    def create(cls, data: RawJobInput) -> Job:
        """Build a new job in ``raw`` state from submitted input."""
        return cls(
            id=uuid.uuid4().hex,
            original_text=data.original_text,
            channel_id=data.channel_id,
            message_id=data.message_id,
            hash=data.hash,
            url=build_post_url(data.channel_id, data.message_id),
            status=JobStatus.RAW,
            raw=data.raw,
            title=derive_title(data.original_text),
        )

    @property
    def is_terminal(self) -> bool:
        return self.status.is_terminal

    @property
    def is_vacancy(self) -> bool:
        return self.status == JobStatus.PROCESSED

    def mark_processing(self) -> None:
        """Move from ``raw`` to ``processing``.

        Raises:
            InvalidTransitionError: If the job is not in ``raw`` state.
        """
        self._require(JobStatus.RAW, "mark processing")
        self.status = JobStatus.PROCESSING

    def complete(self, data: ParsedData) -> None:
        """Copy extracted data into the job and move to ``processed``.

        Raises:
            InvalidTransitionError: If the job is not in ``processing`` state.
        """
        self._require(JobStatus.PROCESSING, "complete")
        self.title = data.title
        self.company = data.company
        self.salary_min = data.salary_min
        self.salary_max = data.salary_max
        self.currency = data.currency
        self.grade = data.grade
        self.location = data.location
        self.is_remote = data.is_remote
        self.description = data.description
        self.skills = list(data.skills)
        self.status = JobStatus.PROCESSED

    def reject(self, reason: str) -> None:
        """Move from ``processing`` to ``rejected``.

        Raises:
            InvalidTransitionError: If the job is not in ``processing`` state.
        """
        self._require(JobStatus.PROCESSING, "reject")
        self.rejection_reason = reason
        self.status = JobStatus.REJECTED

    def _require(self, expected: JobStatus, action: str) -> None:
        if self.status != expected:
            raise InvalidTransitionError(action, self.status.value, expected.value)

    def to_dict(self) -> dict:
        """Serialize the job to a JSON-friendly dictionary."""
        return {
            "id": self.id,
            "status": self.status.value,
            "title": self.title,
            "company": self.company,
            "salary_min": self.salary_min,
            "salary_max": self.salary_max,
            "currency": self.currency,
            "grade": self.grade,
            "location": self.location,
            "is_remote": self.is_remote,
            "description": self.description,
            "skills": list(self.skills),
            "url": self.url,
            "channel_id": self.channel_id,
            "message_id": self.message_id,
            "hash": self.hash,
            "original_text": self.original_text,
            "rejection_reason": self.rejection_reason,
            "created_at": self.created_at.isoformat() if self.created_at else None,
            "updated_at": self.updated_at.isoformat() if self.updated_at else None,
        }


@dataclass
class UserProfile:
    """A user's CV, used as context for offer generation."""

    user_id: str
    cv: dict[str, Any] = field(default_factory=dict)


@dataclass
class UserJobOffer:
    """A generated outreach message for one (user, job) pair."""

    user_id: str
    job_id: str
    offer_text: str
    updated_at: datetime | None = None
