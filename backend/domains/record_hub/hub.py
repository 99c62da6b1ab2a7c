"""
启动与关闭装配

open_record_hub() 在启动时创建连接池并组装存储与服务，退出时关闭连接池:

    async with open_record_hub(settings) as hub:
        record = await hub.records.create("deadline проект")
"""

from contextlib import asynccontextmanager
from dataclasses import dataclass
from typing import AsyncIterator

from domains.core.database import DatabaseConfig, DatabasePool
from domains.core.logging import get_logger
from domains.core.settings import RecordsSettings, TagSettings

from .core.normalizer import TagNormalizer, TagNormalizerConfig
from .core.record_factory import RecordFactory
from .core.store import RecordStore
from .core.tag_factory import TagFactory
from .core.validator import TagValidator
from .services.record_service import RecordService
from .services.tag_service import TagService

logger = get_logger(__name__)


@dataclass
class RecordHub:
    """装配好的组件"""
    pool: DatabasePool
    store: RecordStore
    records: RecordService
    tags: TagService


def build_record_factory(settings: TagSettings) -> RecordFactory:
    """按标签配置构造记录工厂"""
    normalizer = TagNormalizer(TagNormalizerConfig(
        lowercase=settings.lowercase,
        remove_accents=settings.remove_accents,
    ))
    tag_factory = TagFactory(
        normalizer=normalizer,
        validator=TagValidator(max_length=settings.max_length),
        max_tags_per_record=settings.max_tags_per_record,
    )
    return RecordFactory(tag_factory)


@asynccontextmanager
async def open_record_hub(
    settings: RecordsSettings,
    ensure_schema: bool = True,
) -> AsyncIterator[RecordHub]:
    """
    打开连接池并组装服务

    Args:
        settings: 配置
        ensure_schema: 启动时是否建表
    """
    pool = DatabasePool(DatabaseConfig.from_settings(settings.database))
    await pool.open()
    try:
        store = RecordStore(pool)
        if ensure_schema:
            await store.ensure_schema()

        factory = build_record_factory(settings.tags)
        hub = RecordHub(
            pool=pool,
            store=store,
            records=RecordService(store, factory),
            tags=TagService(store, factory.tag_factory.normalizer),
        )
        logger.info("record_hub_started", environment=settings.environment)
        yield hub
    finally:
        await pool.close()
        logger.info("record_hub_stopped")
