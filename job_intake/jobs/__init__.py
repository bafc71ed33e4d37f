"""Job aggregate, storage and enrichment orchestration.

Public API:
- JobService: Submission, extraction, offer generation, duplicate checks
- JobRepository: Async SQLite storage for jobs, profiles and offers
- ProcessingDispatcher: Worker pool running extraction in the background
- Job / JobStatus / ParsedData: Domain models
"""

from job_intake.jobs.dispatcher import ProcessingDispatcher
from job_intake.jobs.models import (
    Job,
    JobStatus,
    ParsedData,
    RawJobInput,
    UserJobOffer,
    UserProfile,
)
from job_intake.jobs.repository import JobRepository
from job_intake.jobs.service import JobService

__all__ = [
    "JobService",
    "JobRepository",
    "ProcessingDispatcher",
    "Job",
    "JobStatus",
    "ParsedData",
    "RawJobInput",
    "UserJobOffer",
    "UserProfile",
]
