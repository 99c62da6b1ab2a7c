"""
记录服务层

提供记录的业务逻辑封装，是外部 HTTP 层使用的唯一入口:
- 内容 -> 标签 -> 记录 的创建流程
- 写入前的重复预检查（最终以存储层唯一约束为准）
- 搜索参数校验与查询
- 批量导入（全部成功或全部回滚）

所有失败都以 domains.core.exceptions 中的异常抛出。
"""

import uuid
from typing import Any, Iterable, Sequence

from domains.core.exceptions import (
    DuplicateRecordError,
    RecordNotFoundError,
    StorageError,
    ValidationError,
)
from domains.core.logging import get_logger

from ..core.duplicate_checker import RecordDuplicateChecker
from ..core.models import Record, RecordSearchResult, TagStatistic
from ..core.normalizer import TagNormalizer
from ..core.record_factory import RecordFactory, parse_record_id
from ..core.search_query import RecordSearchOptions, SearchQuery
from ..core.store import RecordStore

logger = get_logger(__name__)


def _parse_tag_ids(values: Iterable[Any]) -> list[uuid.UUID]:
    tag_ids = []
    for value in values:
        try:
            tag_ids.append(value if isinstance(value, uuid.UUID) else uuid.UUID(str(value)))
        except ValueError:
            raise ValidationError(f"无效的标签 ID: {value}", field="tag_ids")
    return tag_ids


class RecordService:
    """
    记录服务

    store 可以是 RecordStore，也可以是实现相同协程接口的其他存储（测试用）。
    """

    def __init__(
        self,
        store: RecordStore,
        record_factory: RecordFactory | None = None,
    ):
        self.store = store
        self.record_factory = record_factory or RecordFactory()

    @property
    def normalizer(self) -> TagNormalizer:
        return self.record_factory.tag_factory.normalizer

    # ==================== CRUD ====================

    async def create(self, content: str) -> Record:
        """
        创建记录

        Raises:
            InvalidContentError / EmptyTagError / InvalidTagError / TagLimitExceededError
            DuplicateRecordError: 已存在相同标签集合的记录
        """
        record = self.record_factory.from_content(content)
        await self._ensure_unique(record)

        try:
            saved = await self.store.save(record)
        except DuplicateRecordError:
            logger.warning("record_create_conflict", normalized_tags=record.sorted_normalized_tags)
            raise
        except StorageError as e:
            logger.error("record_create_failed", code=e.code, error=e.message)
            raise

        logger.info("record_created", record_id=str(saved.id), tag_count=len(saved.tags))
        return saved

    async def update(self, record_id: str | uuid.UUID, content: str) -> Record:
        """
        以新内容整体替换记录

        标签集合与自身原有集合相同不算重复。

        Raises:
            InvalidRecordIdError / RecordNotFoundError / DuplicateRecordError
        """
        rid = parse_record_id(record_id)
        existing = await self.store.find_by_id(rid)
        if existing is None:
            raise RecordNotFoundError(rid)

        revised = self.record_factory.revise(existing, content)
        await self._ensure_unique(revised, exclude_record_id=rid)

        try:
            updated = await self.store.update(revised)
        except DuplicateRecordError:
            logger.warning("record_update_conflict", record_id=str(rid))
            raise
        except StorageError as e:
            logger.error("record_update_failed", record_id=str(rid), code=e.code, error=e.message)
            raise

        logger.info("record_updated", record_id=str(rid), tag_count=len(updated.tags))
        return updated

    async def delete(self, record_id: str | uuid.UUID) -> None:
        """
        Raises:
            InvalidRecordIdError / RecordNotFoundError
        """
        rid = parse_record_id(record_id)
        await self.store.delete(rid)
        logger.info("record_deleted", record_id=str(rid))

    async def get(self, record_id: str | uuid.UUID) -> Record | None:
        return await self.store.find_by_id(parse_record_id(record_id))

    # ==================== 查询 ====================

    async def search(
        self,
        query_text: str | None = None,
        limit: int = 100,
        offset: int = 0,
        sort_by: str = "created_at",
        sort_order: str = "desc",
    ) -> RecordSearchResult:
        """
        按标签搜索（AND 语义），空查询返回全部记录

        Raises:
            ValidationError: 分页或排序参数不合法
        """
        options = RecordSearchOptions(
            limit=limit, offset=offset, sort_by=sort_by, sort_order=sort_order
        )
        query = SearchQuery.parse(query_text, self.normalizer)
        result = await self.store.search(query, options)
        logger.debug("records_searched", tokens=list(query.tokens), total=result.total)
        return result

    async def find_by_tag_ids(
        self,
        tag_ids: Iterable[Any],
        limit: int = 100,
        offset: int = 0,
        sort_by: str = "created_at",
        sort_order: str = "desc",
    ) -> RecordSearchResult:
        """包含任一标签的记录"""
        options = RecordSearchOptions(
            limit=limit, offset=offset, sort_by=sort_by, sort_order=sort_order
        )
        return await self.store.find_by_tag_ids(_parse_tag_ids(tag_ids), options)

    async def find_exact(self, content: str) -> Record | None:
        """标签集合与 content 完全相同的记录"""
        tags = self.record_factory.tag_factory.create_many(content)
        matches = await self.store.find_by_tag_set([t.id for t in tags])
        return matches[0] if matches else None

    # ==================== 批量 ====================

    async def import_batch(self, contents: Sequence[str]) -> list[Record]:
        """
        批量导入

        所有内容先在内存中建好记录并检查批次内重复，再在单个事务中写入。
        任何一条失败则全部不写入。

        Raises:
            DuplicateRecordError: 批次内或与已有记录重复
        """
        records: list[Record] = []
        for content in contents:
            record = self.record_factory.from_content(content)
            duplicate = RecordDuplicateChecker(records).find_duplicate(record.tag_ids)
            if duplicate is not None:
                raise DuplicateRecordError(
                    record.sorted_normalized_tags,
                    existing_record_id=duplicate.id,
                )
            records.append(record)

        try:
            saved = await self.store.save_batch(records)
        except DuplicateRecordError as e:
            logger.warning("record_batch_conflict", normalized_tags=e.normalized_tags, size=len(records))
            raise

        logger.info("record_batch_imported", count=len(saved))
        return saved

    # ==================== 统计 ====================

    async def tag_statistics(self) -> list[TagStatistic]:
        """标签使用次数，按次数降序、标签升序"""
        return await self.store.tag_statistics()

    # ==================== 内部 ====================

    async def _ensure_unique(self, record: Record, exclude_record_id: uuid.UUID | None = None) -> None:
        """写入前的重复预检查"""
        existing = await self.store.find_by_tag_set(record.tag_ids, exclude_record_id)
        if existing:
            logger.warning(
                "record_duplicate_detected",
                normalized_tags=record.sorted_normalized_tags,
                existing_record_id=str(existing[0].id),
            )
            raise DuplicateRecordError(
                record.sorted_normalized_tags,
                existing_record_id=existing[0].id,
            )
