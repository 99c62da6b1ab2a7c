"""记录与数据库行之间的转换"""

import uuid
from typing import Any, Mapping

from .models import Record, Tag

RECORD_COLUMNS = "id, content, tags, normalized_tags, created_at, updated_at"


def _as_uuid(value: Any) -> uuid.UUID:
    # asyncpg 返回自己的 UUID 子类，统一为标准库 uuid.UUID
    return uuid.UUID(str(value))


def record_to_row(record: Record) -> dict[str, Any]:
    """
    Record -> 行

    两个数组都按规范值排序（Record.tags 已是规范顺序）。
    """
    return {
        'id': record.id,
        'content': record.content,
        'tags': [t.id for t in record.tags],
        'normalized_tags': [t.normalized_value for t in record.tags],
        'created_at': record.created_at,
        'updated_at': record.updated_at,
    }


def row_to_record(row: Mapping[str, Any]) -> Record:
    """行 -> Record"""
    tag_ids = row['tags'] or []
    values = row['normalized_tags'] or []
    if len(tag_ids) != len(values):
        raise ValueError(
            f"记录 {row['id']} 的 tags 与 normalized_tags 长度不一致: {len(tag_ids)} != {len(values)}"
        )

    return Record(
        id=_as_uuid(row['id']),
        content=row['content'],
        tags=tuple(
            Tag(id=_as_uuid(tag_id), normalized_value=value)
            for tag_id, value in zip(tag_ids, values)
        ),
        created_at=row['created_at'],
        updated_at=row['updated_at'],
    )
