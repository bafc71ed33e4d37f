"""Database repository for jobs, user profiles and offers.

This module provides async SQLite storage for the job pipeline. The dedup
keys are enforced with unique indexes, so inserting a job is an atomic
insert-if-absent and offers are upserted per (user, job) pair.
"""

import json
import sqlite3
from collections.abc import AsyncGenerator
from contextlib import asynccontextmanager
from datetime import UTC, datetime
from pathlib import Path
from typing import Any

import aiosqlite

from job_intake.jobs.errors import DuplicateCheckFailedError, DuplicateJobError
from job_intake.jobs.models import Job, JobStatus, UserJobOffer, UserProfile

CREATE_TABLES_SQL = """
CREATE TABLE IF NOT EXISTS jobs (
    id TEXT PRIMARY KEY,
    status TEXT NOT NULL,
    original_text TEXT NOT NULL,
    channel_id INTEGER NOT NULL,
    message_id INTEGER NOT NULL,
    hash TEXT NOT NULL,
    url TEXT NOT NULL,
    raw TEXT,
    title TEXT NOT NULL DEFAULT '',
    company TEXT NOT NULL DEFAULT '',
    salary_min INTEGER NOT NULL DEFAULT 0,
    salary_max INTEGER NOT NULL DEFAULT 0,
    currency TEXT NOT NULL DEFAULT '',
    grade TEXT NOT NULL DEFAULT '',
    location TEXT NOT NULL DEFAULT '',
    is_remote INTEGER NOT NULL DEFAULT 0,
    description TEXT NOT NULL DEFAULT '',
    skills TEXT NOT NULL DEFAULT '[]',
    rejection_reason TEXT,
    created_at TEXT NOT NULL,
    updated_at TEXT NOT NULL
);
CREATE TABLE IF NOT EXISTS users (
    user_id TEXT PRIMARY KEY,
    cv TEXT NOT NULL DEFAULT '{}',
    updated_at TEXT NOT NULL
);
CREATE TABLE IF NOT EXISTS user_job_offers (
    user_id TEXT NOT NULL,
    job_id TEXT NOT NULL,
    offer_text TEXT NOT NULL,
    updated_at TEXT NOT NULL,
    PRIMARY KEY (user_id, job_id)
);
"""

CREATE_INDEX_SQL = """
CREATE UNIQUE INDEX IF NOT EXISTS ux_jobs_hash ON jobs(hash);
CREATE UNIQUE INDEX IF NOT EXISTS ux_jobs_origin ON jobs(channel_id, message_id);
CREATE INDEX IF NOT EXISTS idx_jobs_status ON jobs(status);
CREATE INDEX IF NOT EXISTS idx_jobs_created ON jobs(created_at);
"""

JOB_COLUMNS = (
    "id",
    "status",
    "original_text",
    "channel_id",
    "message_id",
    "hash",
    "url",
    "raw",
    "title",
    "company",
    "salary_min",
    "salary_max",
    "currency",
    "grade",
    "location",
    "is_remote",
    "description",
    "skills",
    "rejection_reason",
    "created_at",
    "updated_at",
)

# Columns a save may touch; the identity and original text are write-once
MUTABLE_JOB_COLUMNS = (
    "status",
    "title",
    "company",
    "salary_min",
    "salary_max",
    "currency",
    "grade",
    "location",
    "is_remote",
    "description",
    "skills",
    "rejection_reason",
    "updated_at",
)


def _now() -> datetime:
    return datetime.now(UTC)


def _encode_raw(raw: Any) -> str | None:
    if raw is None:
        return None
    return json.dumps(raw, default=repr, ensure_ascii=False)


def _decode_raw(value: str | None) -> Any:
    if value is None:
        return None
    return json.loads(value)


class JobRepository:
    """Async SQLite repository for the job pipeline.

    Implements the ``JobStore`` protocol using aiosqlite. A single
    connection is opened lazily and shared by all operations.
    """

    def __init__(self, db_path: Path | str):
        """Initialize the repository.

        Args:
            db_path: Path to the SQLite database file.
        """
        self.db_path = Path(db_path)
        self._connection: aiosqlite.Connection | None = None

    @asynccontextmanager
    async def _get_connection(self) -> AsyncGenerator[aiosqlite.Connection, None]:
        if self._connection is None:
            self._connection = await aiosqlite.connect(self.db_path)
            self._connection.row_factory = aiosqlite.Row
        yield self._connection

    async def initialize(self) -> None:
        """Initialize the database, creating tables if needed."""
        self.db_path.parent.mkdir(parents=True, exist_ok=True)

        async with self._get_connection() as conn:
            await conn.executescript(CREATE_TABLES_SQL)
            await conn.executescript(CREATE_INDEX_SQL)
            await conn.commit()

    async def close(self) -> None:
        """Close the database connection."""
        if self._connection is not None:
            await self._connection.close()
            self._connection = None

    # --- Jobs ---

    async def insert_job(self, job: Job) -> None:
        """Insert a new job.

        Sets ``created_at``/``updated_at`` on the job.

        Raises:
            DuplicateJobError: If a job with the same hash or the same
                (channel_id, message_id) pair already exists.
        """
        now = _now()
        job.created_at = now
        job.updated_at = now
        row = self._job_to_row(job)

        placeholders = ", ".join("?" for _ in JOB_COLUMNS)
        async with self._get_connection() as conn:
            try:
                await conn.execute(
                    f"INSERT INTO jobs ({', '.join(JOB_COLUMNS)}) VALUES ({placeholders})",
                    tuple(row[column] for column in JOB_COLUMNS),
                )
            except sqlite3.IntegrityError as e:
                await conn.rollback()
                raise DuplicateJobError(
                    f"job already exists for channel={job.channel_id} "
                    f"message={job.message_id} hash={job.hash}"
                ) from e
            await conn.commit()

    async def save_job(
        self, job: Job, expected_status: JobStatus | None = None
    ) -> bool:
        """Persist the mutable fields of an existing job.

        Args:
            job: The job to save.
            expected_status: When given, the write only applies if the stored
                status still equals this value (conditional update).

        Returns:
            True if a row was updated, False otherwise.
        """
        job.updated_at = _now()
        row = self._job_to_row(job)

        assignments = ", ".join(f"{column} = ?" for column in MUTABLE_JOB_COLUMNS)
        params: list[Any] = [row[column] for column in MUTABLE_JOB_COLUMNS]
        sql = f"UPDATE jobs SET {assignments} WHERE id = ?"
        params.append(job.id)
        if expected_status is not None:
            sql += " AND status = ?"
            params.append(expected_status.value)

        async with self._get_connection() as conn:
            cursor = await conn.execute(sql, tuple(params))
            await conn.commit()
            return cursor.rowcount > 0

    async def get_job(self, job_id: str) -> Job | None:
        """Get a job by id."""
        async with self._get_connection() as conn:
            cursor = await conn.execute("SELECT * FROM jobs WHERE id = ?", (job_id,))
            row = await cursor.fetchone()

        if row is None:
            return None
        return self._row_to_job(row)

    async def find_duplicate(
        self, channel_id: int, message_id: int, hash: str
    ) -> Job | None:
        """Return a job matching the origin pair OR the content hash.

        Raises:
            DuplicateCheckFailedError: If the lookup query fails.
        """
        async with self._get_connection() as conn:
            try:
                cursor = await conn.execute(
                    """
                    SELECT * FROM jobs
                    WHERE (channel_id = ? AND message_id = ?) OR hash = ?
                    LIMIT 1
                    """,
                    (channel_id, message_id, hash),
                )
                row = await cursor.fetchone()
            except sqlite3.Error as e:
                raise DuplicateCheckFailedError(f"duplicate lookup failed: {e}") from e

        if row is None:
            return None
        return self._row_to_job(row)

    async def list_job_ids(self, status: JobStatus) -> list[str]:
        """List ids of jobs in a given status, oldest first."""
        async with self._get_connection() as conn:
            cursor = await conn.execute(
                "SELECT id FROM jobs WHERE status = ? ORDER BY created_at ASC",
                (status.value,),
            )
            rows = await cursor.fetchall()
        return [row["id"] for row in rows]

    async def list_recent(
        self,
        limit: int = 10,
        status_filter: JobStatus | None = None,
    ) -> list[Job]:
        """List recent jobs, newest first."""
        async with self._get_connection() as conn:
            if status_filter is not None:
                cursor = await conn.execute(
                    """
                    SELECT * FROM jobs
                    WHERE status = ?
                    ORDER BY created_at DESC
                    LIMIT ?
                    """,
                    (status_filter.value, limit),
                )
            else:
                cursor = await conn.execute(
                    "SELECT * FROM jobs ORDER BY created_at DESC LIMIT ?",
                    (limit,),
                )
            rows = await cursor.fetchall()

        return [self._row_to_job(row) for row in rows]

    async def get_status_counts(self) -> dict[JobStatus, int]:
        """Return job counts grouped by status."""
        async with self._get_connection() as conn:
            cursor = await conn.execute(
                "SELECT status, COUNT(*) AS count FROM jobs GROUP BY status"
            )
            rows = await cursor.fetchall()

        return {JobStatus(row["status"]): int(row["count"]) for row in rows}

    # --- Users and offers ---

    async def save_user_profile(self, profile: UserProfile) -> None:
        """Create or replace a user's profile."""
        async with self._get_connection() as conn:
            await conn.execute(
                """
                INSERT INTO users (user_id, cv, updated_at) VALUES (?, ?, ?)
                ON CONFLICT (user_id) DO UPDATE
                SET cv = excluded.cv, updated_at = excluded.updated_at
                """,
                (
                    profile.user_id,
                    json.dumps(profile.cv, ensure_ascii=False),
                    _now().isoformat(),
                ),
            )
            await conn.commit()

    async def get_user_profile(self, user_id: str) -> UserProfile | None:
        async with self._get_connection() as conn:
            cursor = await conn.execute(
                "SELECT user_id, cv FROM users WHERE user_id = ?", (user_id,)
            )
            row = await cursor.fetchone()

        if row is None:
            return None
        return UserProfile(user_id=row["user_id"], cv=json.loads(row["cv"]))

    async def upsert_offer(self, offer: UserJobOffer) -> None:
        """Create or update the offer for a (user, job) pair; last write wins."""
        offer.updated_at = _now()
        async with self._get_connection() as conn:
            await conn.execute(
                """
                INSERT INTO user_job_offers (user_id, job_id, offer_text, updated_at)
                VALUES (?, ?, ?, ?)
                ON CONFLICT (user_id, job_id) DO UPDATE
                SET offer_text = excluded.offer_text, updated_at = excluded.updated_at
                """,
                (
                    offer.user_id,
                    offer.job_id,
                    offer.offer_text,
                    offer.updated_at.isoformat(),
                ),
            )
            await conn.commit()

    async def get_offer(self, user_id: str, job_id: str) -> UserJobOffer | None:
        async with self._get_connection() as conn:
            cursor = await conn.execute(
                """
                SELECT * FROM user_job_offers
                WHERE user_id = ? AND job_id = ?
                """,
                (user_id, job_id),
            )
            row = await cursor.fetchone()

        if row is None:
            return None
        return UserJobOffer(
            user_id=row["user_id"],
            job_id=row["job_id"],
            offer_text=row["offer_text"],
            updated_at=datetime.fromisoformat(row["updated_at"]),
        )

    async def count_offers(self, user_id: str, job_id: str) -> int:
        async with self._get_connection() as conn:
            cursor = await conn.execute(
                """
                SELECT COUNT(*) AS count FROM user_job_offers
                WHERE user_id = ? AND job_id = ?
                """,
                (user_id, job_id),
            )
            row = await cursor.fetchone()
        return int(row["count"])

    def _job_to_row(self, job: Job) -> dict[str, Any]:
        return {
            "id": job.id,
            "status": job.status.value,
            "original_text": job.original_text,
            "channel_id": job.channel_id,
            "message_id": job.message_id,
            "hash": job.hash,
            "url": job.url,
            "raw": _encode_raw(job.raw),
            "title": job.title,
            "company": job.company,
            "salary_min": job.salary_min,
            "salary_max": job.salary_max,
            "currency": job.currency,
            "grade": job.grade,
            "location": job.location,
            "is_remote": 1 if job.is_remote else 0,
            "description": job.description,
            "skills": json.dumps(job.skills, ensure_ascii=False),
            "rejection_reason": job.rejection_reason,
            "created_at": job.created_at.isoformat() if job.created_at else None,
            "updated_at": job.updated_at.isoformat() if job.updated_at else None,
        }

    def _row_to_job(self, row: aiosqlite.Row) -> Job:
        def parse_datetime(value: str | None) -> datetime | None:
            if value is None:
                return None
            return datetime.fromisoformat(value)

        return Job(
            id=row["id"],
            status=JobStatus(row["status"]),
            original_text=row["original_text"],
            channel_id=row["channel_id"],
            message_id=row["message_id"],
            hash=row["hash"],
            url=row["url"],
            raw=_decode_raw(row["raw"]),
            title=row["title"],
            company=row["company"],
            salary_min=row["salary_min"],
            salary_max=row["salary_max"],
            currency=row["currency"],
            grade=row["grade"],
            location=row["location"],
            is_remote=bool(row["is_remote"]),
            description=row["description"],
            skills=json.loads(row["skills"]),
            rejection_reason=row["rejection_reason"],
            created_at=parse_datetime(row["created_at"]),
            updated_at=parse_datetime(row["updated_at"]),
        )
