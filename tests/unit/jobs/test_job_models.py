"""Tests for the Job aggregate and its state machine."""

import pytest

from job_intake.jobs.errors import InvalidTransitionError
from job_intake.jobs.models import (
    PLACEHOLDER_TITLE,
    Job,
    JobStatus,
    ParsedData,
    RawJobInput,
    derive_title,
)


def _raw_job(text: str = "Python Developer\nDetails") -> Job:
    return Job.create(
        RawJobInput(original_text=text, channel_id=1001, message_id=42, hash="abc")
    )


class TestCreate:
    def test_new_job_is_raw(self):
        job = _raw_job()
        assert job.status == JobStatus.RAW
        assert job.id
        assert job.hash == "abc"

    def test_ids_are_unique(self):
        assert _raw_job().id != _raw_job().id

    def test_url_derived_from_origin(self):
        job = _raw_job()
        assert job.url == "https://t.me/c/1001/42"

    def test_title_from_first_line(self):
        assert _raw_job("Golang Lead\nmore text").title == "Golang Lead"

    def test_enrichment_fields_default_empty(self):
        job = _raw_job()
        assert job.company == ""
        assert job.salary_min == 0
        assert job.salary_max == 0
        assert job.skills == []
        assert job.is_remote is False


class TestDeriveTitle:
    def test_empty_first_line_uses_placeholder(self):
        assert derive_title("\nSecond line") == PLACEHOLDER_TITLE
        assert derive_title("") == PLACEHOLDER_TITLE

    def test_long_line_truncated_with_ellipsis(self):
        title = derive_title("x" * 150)
        assert title == "x" * 97 + "..."
        assert len(title) == 100

    def test_line_at_limit_kept(self):
        assert derive_title("y" * 100) == "y" * 100

    def test_truncation_counts_characters(self):
        title = derive_title("я" * 120)
        assert title == "я" * 97 + "..."


class TestTransitions:
    def test_mark_processing_from_raw(self):
        job = _raw_job()
        job.mark_processing()
        assert job.status == JobStatus.PROCESSING

    def test_mark_processing_twice_fails(self):
        job = _raw_job()
        job.mark_processing()
        with pytest.raises(InvalidTransitionError):
            job.mark_processing()

    def test_complete_copies_parsed_data(self):
        job = _raw_job()
        job.mark_processing()
        job.complete(
            ParsedData(
                is_vacancy=True,
                title="Senior Golang Developer",
                company="ACME",
                salary_min=4000,
                salary_max=6000,
                currency="USD",
                skills=["go", "k8s"],
                is_remote=True,
                grade="Senior",
                location="Berlin",
                description="Platform team",
            )
        )

        assert job.status == JobStatus.PROCESSED
        assert job.title == "Senior Golang Developer"
        assert job.company == "ACME"
        assert (job.salary_min, job.salary_max, job.currency) == (4000, 6000, "USD")
        assert job.skills == ["go", "k8s"]
        assert job.is_remote is True
        assert job.grade == "Senior"
        assert job.location == "Berlin"
        assert job.description == "Platform team"
        assert job.is_vacancy is True
        assert job.is_terminal is True

    def test_reject_records_reason(self):
        job = _raw_job()
        job.mark_processing()
        job.reject("not a vacancy")
        assert job.status == JobStatus.REJECTED
        assert job.rejection_reason == "not a vacancy"
        assert job.is_vacancy is False
        assert job.is_terminal is True

    @pytest.mark.parametrize(
        "status", [JobStatus.RAW, JobStatus.PROCESSED, JobStatus.REJECTED]
    )
    def test_complete_and_reject_require_processing(self, status):
        job = _raw_job()
        job.status = status

        with pytest.raises(InvalidTransitionError):
            job.complete(ParsedData(is_vacancy=True))
        with pytest.raises(InvalidTransitionError):
            job.reject("nope")
        assert job.status == status

    @pytest.mark.parametrize(
        "status", [JobStatus.PROCESSING, JobStatus.PROCESSED, JobStatus.REJECTED]
    )
    def test_mark_processing_requires_raw(self, status):
        job = _raw_job()
        job.status = status
        with pytest.raises(InvalidTransitionError) as exc_info:
            job.mark_processing()
        assert exc_info.value.current == status.value

    def test_failed_complete_leaves_fields_untouched(self):
        job = _raw_job()
        with pytest.raises(InvalidTransitionError):
            job.complete(ParsedData(is_vacancy=True, company="ACME"))
        assert job.company == ""


class TestParsedData:
    def test_parses_camel_case_json(self):
        data = ParsedData.model_validate_json(
            '{"isVacancy": true, "title": "Dev", "salaryMin": 1, "salaryMax": 2,'
            ' "isRemote": true, "skills": ["go"]}'
        )
        assert data.is_vacancy is True
        assert data.salary_min == 1
        assert data.salary_max == 2
        assert data.is_remote is True
        assert data.skills == ["go"]

    def test_missing_fields_default_empty(self):
        data = ParsedData.model_validate({"isVacancy": False})
        assert data.title == ""
        assert data.skills == []

    def test_schema_uses_contract_field_names(self):
        properties = ParsedData.model_json_schema()["properties"]
        assert set(properties) == {
            "isVacancy",
            "title",
            "company",
            "salaryMin",
            "salaryMax",
            "currency",
            "skills",
            "isRemote",
            "grade",
            "location",
            "description",
        }
