"""
记录匹配与排序（内存实现）

与存储层的 normalized_tags @> $tokens 查询语义一致：
查询中的每个词都必须出现在记录的标签中。
"""

from typing import Iterable

from .models import Record
from .search_query import SearchQuery, normalize_sort_field, normalize_sort_order


def matches(record: Record, query_tokens: Iterable[str]) -> bool:
    """所有查询词都是记录标签时返回 True，空查询匹配任何记录"""
    tags = record.normalized_tags
    return all(token in tags for token in query_tokens)


def filter_records(records: Iterable[Record], query: SearchQuery) -> list[Record]:
    return [r for r in records if matches(r, query.tokens)]


def sort_records(
    records: Iterable[Record],
    sort_by: str = "created_at",
    sort_order: str = "desc",
) -> list[Record]:
    """
    按时间字段排序，时间相同时按 id 排序（方向相同）

    Raises:
        ValidationError: 字段或方向不在白名单中
    """
    column = normalize_sort_field(sort_by)
    order = normalize_sort_order(sort_order)
    return sorted(
        records,
        key=lambda r: (getattr(r, column), r.id),
        reverse=order == "desc",
    )
