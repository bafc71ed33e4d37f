"""Exceptions raised by the job pipeline."""

from __future__ import annotations


class JobIntakeError(Exception):
    """Base class for pipeline errors."""


class InvalidTransitionError(JobIntakeError):
    """Raised when a job state transition is not allowed from its current status."""

    def __init__(self, action: str, current: str, allowed: str):
        super().__init__(
            f"cannot {action} from '{current}' state (only from '{allowed}')"
        )
        self.action = action
        self.current = current
        self.allowed = allowed


class NotFoundError(JobIntakeError):
    """Raised when a requested record does not exist."""


class JobNotFoundError(NotFoundError):
    def __init__(self, job_id: str):
        super().__init__(f"job not found: {job_id}")
        self.job_id = job_id


class UserNotFoundError(NotFoundError):
    def __init__(self, user_id: str):
        super().__init__(f"user not found: {user_id}")
        self.user_id = user_id


class DuplicateJobError(JobIntakeError):
    """Raised by storage when a job with the same dedup key already exists."""


class DuplicateCheckFailedError(JobIntakeError):
    """Storage query failure during duplicate detection."""


class PersistenceFailedError(JobIntakeError):
    """Raised when a write fails after a successful domain operation."""

    def __init__(self, message: str, original_error: Exception | None = None):
        super().__init__(message)
        self.original_error = original_error


class ExtractionFailedError(JobIntakeError):
    """Raised when the extraction capability fails for a job."""

    def __init__(self, job_id: str, original_error: Exception | None = None):
        super().__init__(f"extraction failed for job {job_id}: {original_error}")
        self.job_id = job_id
        self.original_error = original_error


class OfferGenerationError(JobIntakeError):
    """Raised when the generation capability fails to produce an offer."""

    def __init__(self, job_id: str, original_error: Exception | None = None):
        super().__init__(f"failed to generate offer for job {job_id}: {original_error}")
        self.job_id = job_id
        self.original_error = original_error


class JobNotReadyError(JobIntakeError):
    """Raised when an offer is requested for a job that has not been processed."""

    def __init__(self, job_id: str, status: str):
        super().__init__(f"job {job_id} is '{status}', offers need a processed job")
        self.job_id = job_id
        self.status = status
