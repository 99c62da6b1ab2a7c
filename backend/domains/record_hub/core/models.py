"""
记录与标签数据模型

一条记录（Record）是一段短文本，其内容按空白切分后的每个词都是一个标签。
记录的身份语义由标签集合决定：标签集合相同（忽略顺序、大小写、变音符号）
的两条记录被视为同一条记录，存储层通过唯一约束保证不会同时存在。

记录是不可变值对象，修改内容即用 replace_content() 得到一条新记录
（保留 id 和 created_at）。
"""

import uuid
from dataclasses import dataclass, field
from datetime import datetime
from typing import Any, Iterable

from domains.core.exceptions import InvalidContentError, InvalidRecordError


@dataclass(frozen=True)
class Tag:
    """
    标签

    Attributes:
        id: 由 normalized_value 推导的 uuid5（见 identity.py）
        normalized_value: 规范形式
    """
    id: uuid.UUID
    normalized_value: str

    def __str__(self) -> str:
        return self.normalized_value


def _canonical_tags(tags: Iterable[Tag]) -> tuple[Tag, ...]:
    """按 ID 去重后按规范值排序，排序结果即存储层的数组顺序"""
    unique: dict[uuid.UUID, Tag] = {}
    for tag in tags:
        unique.setdefault(tag.id, tag)
    return tuple(sorted(unique.values(), key=lambda t: t.normalized_value))


@dataclass(frozen=True)
class Record:
    """
    记录实体

    Attributes:
        id: 记录 ID
        content: 原始内容（非空白）
        tags: 标签集合，构造时去重并规范排序，顺序不影响相等性
        created_at: 创建时间
        updated_at: 最后修改时间，不早于 created_at
    """
    id: uuid.UUID
    content: str
    tags: tuple[Tag, ...] = field(default_factory=tuple)
    created_at: datetime | None = None
    updated_at: datetime | None = None

    def __post_init__(self):
        if self.content is None or not self.content.strip():
            raise InvalidContentError()
        if self.created_at is None or self.updated_at is None:
            raise InvalidRecordError("记录必须包含 created_at 和 updated_at")
        if self.updated_at < self.created_at:
            raise InvalidRecordError(
                f"updated_at ({self.updated_at.isoformat()}) 早于 created_at ({self.created_at.isoformat()})"
            )
        object.__setattr__(self, "tags", _canonical_tags(self.tags))

    @property
    def tag_ids(self) -> frozenset[uuid.UUID]:
        return frozenset(t.id for t in self.tags)

    @property
    def normalized_tags(self) -> frozenset[str]:
        return frozenset(t.normalized_value for t in self.tags)

    @property
    def sorted_normalized_tags(self) -> list[str]:
        """规范排序的标签值列表（对应存储层的 normalized_tags 列）"""
        return [t.normalized_value for t in self.tags]

    def same_tag_set(self, other: "Record | Iterable[uuid.UUID]") -> bool:
        """标签集合是否与另一条记录（或一组标签 ID）完全相同"""
        other_ids = other.tag_ids if isinstance(other, Record) else frozenset(other)
        return self.tag_ids == other_ids

    def replace_content(self, content: str, tags: Iterable[Tag], now: datetime) -> "Record":
        """以新内容和标签替换，返回新记录"""
        return Record(
            id=self.id,
            content=content,
            tags=tuple(tags),
            created_at=self.created_at,
            updated_at=now,
        )

    def to_dict(self) -> dict[str, Any]:
        """转换为字典（JSON 友好）"""
        return {
            'id': str(self.id),
            'content': self.content,
            'tags': [str(t.id) for t in self.tags],
            'normalized_tags': self.sorted_normalized_tags,
            'created_at': self.created_at.isoformat(),
            'updated_at': self.updated_at.isoformat(),
        }


@dataclass
class RecordSearchResult:
    """分页查询结果"""
    records: list[Record]
    total: int
    has_more: bool = False

    @classmethod
    def build(cls, records: list[Record], total: int, offset: int) -> "RecordSearchResult":
        return cls(records=records, total=total, has_more=offset + len(records) < total)

    @classmethod
    def empty(cls) -> "RecordSearchResult":
        return cls(records=[], total=0, has_more=False)

    def to_dict(self) -> dict[str, Any]:
        return {
            'records': [r.to_dict() for r in self.records],
            'total': self.total,
            'has_more': self.has_more,
        }


@dataclass(frozen=True)
class TagStatistic:
    """标签使用次数"""
    tag: str
    count: int

    def to_dict(self) -> dict[str, Any]:
        return {'tag': self.tag, 'count': self.count}


@dataclass(frozen=True)
class TagSuggestion:
    """标签补全建议"""
    tag: str
    count: int
    score: float

    def to_dict(self) -> dict[str, Any]:
        return {'tag': self.tag, 'count': self.count, 'score': self.score}
