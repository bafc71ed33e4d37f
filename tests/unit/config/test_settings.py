"""Tests for Settings configuration class."""

from pathlib import Path

import pytest
from pydantic import ValidationError

ENV_VARS = [
    "DB_PATH",
    "FILTER_MIN_LENGTH",
    "FILTER_REQUIRE_WHITELIST",
    "FILTER_WHITELIST",
    "FILTER_BLACKLIST",
    "WORKER_COUNT",
    "RECOVER_PENDING_ON_START",
    "OFFER_REQUIRES_PROCESSED",
    "LOG_LEVEL",
]


@pytest.fixture(autouse=True)
def clean_env(monkeypatch):
    for var in ENV_VARS:
        monkeypatch.delenv(var, raising=False)


class TestSettingsDefaults:
    def test_settings_loads_with_defaults(self):
        from job_intake.config.settings import Settings

        settings = Settings(_env_file=None)

        assert settings.db_path == Path("./data/jobs.db")
        assert settings.filter_min_length == 100
        assert settings.filter_require_whitelist is False
        assert settings.filter_whitelist is None
        assert settings.filter_blacklist is None
        assert settings.worker_count == 2
        assert settings.recover_pending_on_start is True
        assert settings.offer_requires_processed is False
        assert settings.log_level == "INFO"


class TestSettingsFromEnv:
    def test_env_overrides(self, monkeypatch):
        from job_intake.config.settings import Settings

        monkeypatch.setenv("DB_PATH", "/tmp/other.db")
        monkeypatch.setenv("WORKER_COUNT", "5")
        monkeypatch.setenv("OFFER_REQUIRES_PROCESSED", "true")
        monkeypatch.setenv("LOG_LEVEL", "debug")

        settings = Settings(_env_file=None)

        assert settings.db_path == Path("/tmp/other.db")
        assert settings.worker_count == 5
        assert settings.offer_requires_processed is True
        assert settings.log_level == "DEBUG"

    @pytest.mark.parametrize(
        "raw",
        ['["vacancy", "hiring"]', "vacancy, hiring", "vacancy\nhiring\n"],
    )
    def test_keyword_list_formats(self, monkeypatch, raw):
        from job_intake.config.settings import Settings

        monkeypatch.setenv("FILTER_WHITELIST", raw)

        assert Settings(_env_file=None).filter_whitelist == ["vacancy", "hiring"]

    def test_blank_keyword_list_means_default(self, monkeypatch):
        from job_intake.config.settings import Settings

        monkeypatch.setenv("FILTER_BLACKLIST", "  ")

        assert Settings(_env_file=None).filter_blacklist is None


class TestSettingsValidation:
    def test_rejects_unknown_log_level(self):
        from job_intake.config.settings import Settings

        with pytest.raises(ValidationError):
            Settings(_env_file=None, log_level="LOUD")

    def test_rejects_zero_workers(self):
        from job_intake.config.settings import Settings

        with pytest.raises(ValidationError):
            Settings(_env_file=None, worker_count=0)


class TestSettingsSingleton:
    def test_get_settings_is_cached_until_reset(self):
        from job_intake.config.settings import get_settings, reset_settings

        reset_settings()
        first = get_settings()
        assert get_settings() is first

        reset_settings()
        assert get_settings() is not first
        reset_settings()
