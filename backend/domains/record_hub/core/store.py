"""
记录存储层

基于 asyncpg 连接池的 PostgreSQL 存储:
- 标签集合唯一性由 UNIQUE(normalized_tags) 约束保证，唯一冲突转换为 DuplicateRecordError
- 标签查询走 GIN 索引：@>（AND 搜索）、&&（任一标签）
- 驱动错误在本层边界统一转换为领域异常，上层不接触 asyncpg 异常

连接池以参数传入，本模块没有全局状态。
"""

import uuid
from contextlib import asynccontextmanager
from typing import AsyncIterator, Iterable, Sequence

import asyncpg

from domains.core.database import DatabasePool, translate
from domains.core.exceptions import (
    ApplicationError,
    DuplicateRecordError,
    RecordNotFoundError,
)
from domains.core.logging import get_logger

from .mappers import RECORD_COLUMNS, record_to_row, row_to_record
from .models import Record, RecordSearchResult, TagStatistic
from .schema import TABLE_NAME, schema_statements
from .search_query import RecordSearchOptions, SearchQuery

logger = get_logger(__name__)


def _affected_rows(status: str) -> int:
    """解析 asyncpg execute() 返回的命令标签，如 'DELETE 3'"""
    try:
        return int(status.rsplit(" ", 1)[-1])
    except (ValueError, AttributeError):
        return 0


class RecordStore:
    """
    记录存储

    所有方法都是协程；每次调用在作用域内获取并归还一个连接。
    """

    def __init__(self, pool: DatabasePool):
        self.pool = pool

    @asynccontextmanager
    async def _connection(self, **context) -> AsyncIterator[asyncpg.Connection]:
        """
        获取连接并转换驱动错误

        Args:
            **context: 传给错误转换的上下文（normalized_tags / record_id）
        """
        try:
            async with self.pool.acquire() as conn:
                yield conn
        except ApplicationError:
            raise
        except Exception as e:
            error = translate(e, **context)
            if isinstance(error, DuplicateRecordError):
                logger.warning("record_duplicate_rejected", normalized_tags=error.normalized_tags)
            else:
                logger.error("record_store_error", code=error.code, error=str(e))
            raise error from e

    # ==================== 表结构 ====================

    async def ensure_schema(self) -> None:
        """建表和索引（可重复执行）"""
        async with self._connection() as conn:
            async with conn.transaction():
                for statement in schema_statements():
                    await conn.execute(statement)
        logger.info("record_schema_ensured", table=TABLE_NAME)

    # ==================== 查询 ====================

    async def find_by_id(self, record_id: uuid.UUID) -> Record | None:
        async with self._connection(record_id=record_id) as conn:
            row = await conn.fetchrow(
                f"SELECT {RECORD_COLUMNS} FROM {TABLE_NAME} WHERE id = $1",
                record_id,
            )
        return row_to_record(row) if row else None

    async def exists(self, record_id: uuid.UUID) -> bool:
        async with self._connection(record_id=record_id) as conn:
            return await conn.fetchval(
                f"SELECT EXISTS(SELECT 1 FROM {TABLE_NAME} WHERE id = $1)",
                record_id,
            )

    async def count(self) -> int:
        async with self._connection() as conn:
            return await conn.fetchval(f"SELECT COUNT(*) FROM {TABLE_NAME}")

    async def find_all(self, options: RecordSearchOptions | None = None) -> RecordSearchResult:
        """分页列出所有记录"""
        return await self._paginate("", [], options or RecordSearchOptions())

    async def search(
        self,
        query: SearchQuery,
        options: RecordSearchOptions | None = None,
    ) -> RecordSearchResult:
        """
        AND 语义标签搜索

        normalized_tags @> tokens，即记录包含全部查询词。空查询等同于 find_all。
        """
        options = options or RecordSearchOptions()
        if query.is_empty:
            return await self.find_all(options)
        return await self._paginate(
            "WHERE normalized_tags @> $1::text[]",
            [list(query.tokens)],
            options,
        )

    async def find_by_tag_ids(
        self,
        tag_ids: Iterable[uuid.UUID],
        options: RecordSearchOptions | None = None,
    ) -> RecordSearchResult:
        """包含任一给定标签的记录（OR 语义），空列表返回空结果"""
        ids = list(dict.fromkeys(tag_ids))
        if not ids:
            return RecordSearchResult.empty()
        return await self._paginate(
            "WHERE tags && $1::uuid[]",
            [ids],
            options or RecordSearchOptions(),
        )

    async def find_by_tag_set(
        self,
        tag_ids: Iterable[uuid.UUID],
        exclude_record_id: uuid.UUID | None = None,
    ) -> list[Record]:
        """
        标签集合完全相同的记录

        tags 数组没有重复元素，双向包含即集合相等。
        """
        ids = list(dict.fromkeys(tag_ids))
        sql = f"""
            SELECT {RECORD_COLUMNS} FROM {TABLE_NAME}
            WHERE tags @> $1::uuid[] AND tags <@ $1::uuid[]
        """
        params: list = [ids]
        if exclude_record_id is not None:
            sql += " AND id <> $2"
            params.append(exclude_record_id)

        async with self._connection() as conn:
            rows = await conn.fetch(sql, *params)
        return [row_to_record(row) for row in rows]

    async def exists_with_tag_set(
        self,
        tag_ids: Iterable[uuid.UUID],
        exclude_record_id: uuid.UUID | None = None,
    ) -> bool:
        """是否已有标签集合完全相同的记录"""
        return bool(await self.find_by_tag_set(tag_ids, exclude_record_id))

    async def _paginate(
        self,
        where: str,
        params: list,
        options: RecordSearchOptions,
    ) -> RecordSearchResult:
        # sort_by / sort_order 已在 RecordSearchOptions 中按白名单校验
        direction = "DESC" if options.descending else "ASC"
        n = len(params)
        sql = f"""
            SELECT {RECORD_COLUMNS} FROM {TABLE_NAME}
            {where}
            ORDER BY {options.sort_by} {direction}, id {direction}
            LIMIT ${n + 1} OFFSET ${n + 2}
        """

        # 计数与分页查询共用同一快照，total 与 records 一致
        async with self._connection() as conn:
            async with conn.transaction(isolation="repeatable_read", readonly=True):
                total = await conn.fetchval(f"SELECT COUNT(*) FROM {TABLE_NAME} {where}", *params)
                rows = await conn.fetch(sql, *params, options.limit, options.offset)

        records = [row_to_record(row) for row in rows]
        return RecordSearchResult.build(records, total, options.offset)

    # ==================== 写入 ====================

    async def save(self, record: Record) -> Record:
        """
        插入新记录

        Raises:
            DuplicateRecordError: 标签集合已存在（或 id 冲突）
            StorageConnectionError: 数据库不可达
        """
        async with self._connection(
            normalized_tags=record.sorted_normalized_tags, record_id=record.id
        ) as conn:
            row = await self._insert(conn, record)

        saved = row_to_record(row)
        logger.debug("record_saved", record_id=str(saved.id), tag_count=len(saved.tags))
        return saved

    async def update(self, record: Record) -> Record:
        """
        按 id 整体替换记录内容与标签

        Raises:
            RecordNotFoundError: 记录不存在
            DuplicateRecordError: 新标签集合与其他记录冲突
        """
        row_data = record_to_row(record)
        async with self._connection(
            normalized_tags=record.sorted_normalized_tags, record_id=record.id
        ) as conn:
            row = await conn.fetchrow(
                f"""
                UPDATE {TABLE_NAME}
                SET content = $2, tags = $3::uuid[], normalized_tags = $4::text[], updated_at = $5
                WHERE id = $1
                RETURNING {RECORD_COLUMNS}
                """,
                row_data['id'],
                row_data['content'],
                row_data['tags'],
                row_data['normalized_tags'],
                row_data['updated_at'],
            )

        if row is None:
            raise RecordNotFoundError(record.id)
        logger.debug("record_updated", record_id=str(record.id))
        return row_to_record(row)

    async def delete(self, record_id: uuid.UUID) -> None:
        """
        删除记录

        Raises:
            RecordNotFoundError: 记录不存在
        """
        async with self._connection(record_id=record_id) as conn:
            status = await conn.execute(f"DELETE FROM {TABLE_NAME} WHERE id = $1", record_id)

        if _affected_rows(status) == 0:
            raise RecordNotFoundError(record_id)
        logger.debug("record_deleted", record_id=str(record_id))

    async def save_batch(self, records: Sequence[Record]) -> list[Record]:
        """
        在单个事务中插入多条记录，任一失败则全部回滚

        Raises:
            DuplicateRecordError: 与已有记录或批次内其他记录标签集合相同
        """
        if not records:
            return []

        saved: list[Record] = []
        async with self._connection() as conn:
            async with conn.transaction():
                for record in records:
                    try:
                        row = await self._insert(conn, record)
                    except asyncpg.PostgresError as e:
                        raise translate(
                            e,
                            normalized_tags=record.sorted_normalized_tags,
                            record_id=record.id,
                        ) from e
                    saved.append(row_to_record(row))

        logger.info("record_batch_saved", count=len(saved))
        return saved

    async def delete_all(self) -> int:
        """删除全部记录，返回删除条数"""
        async with self._connection() as conn:
            status = await conn.execute(f"DELETE FROM {TABLE_NAME}")
        deleted = _affected_rows(status)
        logger.info("records_cleared", count=deleted)
        return deleted

    @staticmethod
    async def _insert(conn: asyncpg.Connection, record: Record) -> asyncpg.Record:
        row_data = record_to_row(record)
        return await conn.fetchrow(
            f"""
            INSERT INTO {TABLE_NAME} (id, content, tags, normalized_tags, created_at, updated_at)
            VALUES ($1, $2, $3::uuid[], $4::text[], $5, $6)
            RETURNING {RECORD_COLUMNS}
            """,
            row_data['id'],
            row_data['content'],
            row_data['tags'],
            row_data['normalized_tags'],
            row_data['created_at'],
            row_data['updated_at'],
        )

    # ==================== 统计 ====================

    async def tag_statistics(self, prefix: str | None = None) -> list[TagStatistic]:
        """
        标签使用次数

        按次数降序、标签升序（按码点比较）排列。

        Args:
            prefix: 只统计以该前缀开头的标签（前缀须已规范化）
        """
        where = ""
        params: list = []
        if prefix:
            where = "WHERE left(tag, char_length($1::text)) = $1::text"
            params.append(prefix)

        sql = f"""
            SELECT tag, COUNT(*) AS count
            FROM {TABLE_NAME}, unnest(normalized_tags) AS tag
            {where}
            GROUP BY tag
            ORDER BY count DESC, tag COLLATE "C" ASC
        """
        async with self._connection() as conn:
            rows = await conn.fetch(sql, *params)
        return [TagStatistic(tag=row['tag'], count=row['count']) for row in rows]
