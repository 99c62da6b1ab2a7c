"""Pytest configuration and fixtures."""

import pytest

from domains.record_hub.core.normalizer import TagNormalizer
from domains.record_hub.core.record_factory import RecordFactory
from domains.record_hub.core.tag_factory import TagFactory
from domains.record_hub.core.validator import TagValidator
from domains.record_hub.services.record_service import RecordService
from domains.record_hub.services.tag_service import TagService

from .fakes import InMemoryRecordStore, SteppingClock


@pytest.fixture
def normalizer() -> TagNormalizer:
    """Provide a normalizer with default settings."""
    return TagNormalizer()


@pytest.fixture
def tag_factory(normalizer: TagNormalizer) -> TagFactory:
    """Provide a TagFactory with default limits."""
    return TagFactory(normalizer=normalizer, validator=TagValidator())


@pytest.fixture
def clock() -> SteppingClock:
    """Provide a deterministic, strictly increasing clock."""
    return SteppingClock()


@pytest.fixture
def record_factory(tag_factory: TagFactory, clock: SteppingClock) -> RecordFactory:
    """Provide a RecordFactory using the stepping clock."""
    return RecordFactory(tag_factory, clock=clock)


@pytest.fixture
def store() -> InMemoryRecordStore:
    """Provide an empty in-memory store."""
    return InMemoryRecordStore()


@pytest.fixture
def record_service(store: InMemoryRecordStore, record_factory: RecordFactory) -> RecordService:
    """Provide a RecordService over the in-memory store."""
    return RecordService(store, record_factory)


@pytest.fixture
def tag_service(store: InMemoryRecordStore, normalizer: TagNormalizer) -> TagService:
    """Provide a TagService over the in-memory store."""
    return TagService(store, normalizer)
