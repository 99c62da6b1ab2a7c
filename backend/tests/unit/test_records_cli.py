"""Tests for the scripts/records_db.py operator commands."""

import argparse
import importlib.util
import json
from pathlib import Path

import pytest
import structlog

from domains.core.logging import LogFormat
from domains.core.settings import LoggingSettings, RecordsSettings
from domains.record_hub.core.normalizer import TagNormalizer, TagNormalizerConfig
from domains.record_hub.core.record_factory import RecordFactory
from domains.record_hub.core.tag_factory import TagFactory
from domains.record_hub.hub import RecordHub
from domains.record_hub.services.record_service import RecordService
from domains.record_hub.services.tag_service import TagService

from ..fakes import InMemoryRecordStore

SCRIPT = Path(__file__).resolve().parents[3] / "scripts" / "records_db.py"


@pytest.fixture(autouse=True)
def _capture_structlog():
    """Keep structlog's default stdout logger out of captured CLI output."""
    with structlog.testing.capture_logs():
        yield


@pytest.fixture(scope="module")
def cli():
    spec = importlib.util.spec_from_file_location("records_db", SCRIPT)
    module = importlib.util.module_from_spec(spec)
    spec.loader.exec_module(module)
    return module


@pytest.fixture
def hub(store: InMemoryRecordStore, record_factory: RecordFactory) -> RecordHub:
    return RecordHub(
        pool=None,
        store=store,
        records=RecordService(store, record_factory),
        tags=TagService(store, record_factory.tag_factory.normalizer),
    )


class TestBuildLogConfig:
    """Tests for build_log_config."""

    def test_uses_logging_settings(self, cli):
        """Format, level and service name come from settings."""
        settings = RecordsSettings(
            logging=LoggingSettings(level="ERROR", json_format=True, include_timestamp=False),
            service_name="records-ops",
        )
        config = cli.build_log_config(settings)
        assert config.level == "ERROR"
        assert config.format == LogFormat.JSON
        assert config.add_timestamp is False
        assert config.service_name == "records-ops"

    def test_flag_overrides_level_only(self, cli):
        """--log-level changes the level and keeps the rest of the settings."""
        settings = RecordsSettings(logging=LoggingSettings(level="ERROR", json_format=True))
        config = cli.build_log_config(settings, "debug")
        assert config.level == "DEBUG"
        assert config.format == LogFormat.JSON


class TestCommands:
    """Tests for the command handlers over the in-memory store."""

    @pytest.mark.asyncio
    async def test_stats_json(self, cli, hub: RecordHub, capsys):
        """stats --format json prints the tag counts."""
        await hub.records.create("a b")
        await hub.records.create("a")
        args = argparse.Namespace(format="json", limit=0)

        assert await cli.cmd_stats(hub, args) == 0
        output = json.loads(capsys.readouterr().out)
        assert output[0] == {"tag": "a", "count": 2}

    @pytest.mark.asyncio
    async def test_renormalize(self, cli, hub: RecordHub, store: InMemoryRecordStore):
        """Records stored under older rules are rewritten; clashes are reported, not applied."""
        keep_accents = RecordService(store, RecordFactory(TagFactory(
            normalizer=TagNormalizer(TagNormalizerConfig(remove_accents=False)),
        )))
        cafe = await keep_accents.create("cafe")
        accented = await keep_accents.create("café")
        resume = await keep_accents.create("résumé")

        dry_run = argparse.Namespace(dry_run=True)
        assert await cli.cmd_renormalize(hub, dry_run) == 0
        assert (await store.find_by_id(resume.id)).sorted_normalized_tags == ["résumé"]

        apply = argparse.Namespace(dry_run=False)
        assert await cli.cmd_renormalize(hub, apply) == 1
        assert (await store.find_by_id(resume.id)).sorted_normalized_tags == ["resume"]
        assert (await store.find_by_id(accented.id)).sorted_normalized_tags == ["café"]
        assert (await store.find_by_id(cafe.id)).sorted_normalized_tags == ["cafe"]
