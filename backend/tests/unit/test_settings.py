"""Tests for settings and logging configuration."""

import logging

import pytest
import structlog
from pydantic import ValidationError as PydanticValidationError

from domains.core.logging import (
    LogConfig,
    LogFormat,
    configure_logging,
)
from domains.core.settings import (
    DatabaseSettings,
    LoggingSettings,
    RecordsSettings,
    TagSettings,
    get_settings,
    reload_settings,
)
from domains.record_hub.hub import build_record_factory


@pytest.fixture(autouse=True)
def clean_env(monkeypatch):
    for name in ("DATABASE_URL", "RECORDS_DB_URL", "RECORDS_DB_POOL_MAX_SIZE", "RECORDS_TAG_MAX_LENGTH"):
        monkeypatch.delenv(name, raising=False)


class TestDatabaseSettings:
    """Tests for DatabaseSettings."""

    def test_defaults(self):
        """Pool defaults: 20 connections, 30s idle, 2s connect."""
        settings = DatabaseSettings()
        assert settings.url.startswith("postgresql://")
        assert settings.pool_max_size == 20
        assert settings.pool_min_size == 1
        assert settings.idle_timeout == 30.0
        assert settings.connect_timeout == 2.0

    def test_env_override(self, monkeypatch):
        """RECORDS_DB_ variables override defaults."""
        monkeypatch.setenv("RECORDS_DB_POOL_MAX_SIZE", "5")
        monkeypatch.setenv("RECORDS_DB_URL", "postgres://app@db/records")
        settings = DatabaseSettings()
        assert settings.pool_max_size == 5
        assert settings.url == "postgres://app@db/records"

    def test_database_url_fallback(self, monkeypatch):
        """The generic DATABASE_URL is used when nothing specific is set."""
        monkeypatch.setenv("DATABASE_URL", "postgresql://other@db/other")
        assert DatabaseSettings().url == "postgresql://other@db/other"

    def test_rejects_non_postgres(self):
        """Only PostgreSQL URLs are valid."""
        with pytest.raises(PydanticValidationError):
            DatabaseSettings(url="sqlite:///records.db")

    def test_rejects_inverted_pool_bounds(self):
        """min size cannot exceed max size."""
        with pytest.raises(PydanticValidationError):
            DatabaseSettings(pool_min_size=10, pool_max_size=2)


class TestTagAndLoggingSettings:
    """Tests for TagSettings and LoggingSettings."""

    def test_tag_defaults(self):
        """Tags default to 100 characters and 100 per record."""
        settings = TagSettings()
        assert settings.max_length == 100
        assert settings.max_tags_per_record == 100
        assert settings.lowercase and settings.remove_accents

    def test_tag_settings_drive_factory(self, monkeypatch):
        """The configured limits reach the tag factory."""
        monkeypatch.setenv("RECORDS_TAG_MAX_LENGTH", "3")
        factory = build_record_factory(TagSettings())
        assert factory.tag_factory.validator.max_length == 3

    def test_log_level_is_validated(self):
        """Unknown levels are rejected, known ones upper-cased."""
        assert LoggingSettings(level="debug").level == "DEBUG"
        with pytest.raises(PydanticValidationError):
            LoggingSettings(level="verbose")

    def test_aggregate_settings(self):
        """RecordsSettings bundles the sections."""
        settings = RecordsSettings(environment="prod")
        assert settings.is_production
        assert settings.database.pool_max_size == 20
        assert settings.tags.max_length == 100

    def test_get_settings_is_cached(self):
        """get_settings returns one instance until reloaded."""
        assert get_settings() is get_settings()
        assert reload_settings() is get_settings()


class TestLogging:
    """Tests for logging configuration."""

    @pytest.fixture
    def restore_logging(self):
        root = logging.getLogger()
        handlers, level = list(root.handlers), root.level
        yield
        root.handlers[:] = handlers
        root.setLevel(level)
        structlog.contextvars.clear_contextvars()
        structlog.reset_defaults()

    def test_from_settings(self):
        """JSON output is selected from settings."""
        config = LogConfig.from_settings(LoggingSettings(level="WARNING", json_format=True))
        assert config.format == LogFormat.JSON
        assert config.level == "WARNING"

    def test_configure_logging(self, restore_logging):
        """configure_logging installs a single root handler at the requested level."""
        configure_logging(LogConfig(level="DEBUG"))
        root = logging.getLogger()
        assert root.level == logging.DEBUG
        assert len(root.handlers) == 1
        assert logging.getLogger("asyncpg").level == logging.WARNING
        assert structlog.contextvars.get_contextvars()["service"] == "records"
