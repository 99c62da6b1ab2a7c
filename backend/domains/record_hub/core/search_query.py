"""
查询对象

- SearchQuery: 查询字符串切分并规范化后的词，AND 语义
- RecordSearchOptions: 分页与排序参数
"""

from dataclasses import dataclass, field
from typing import Any

from domains.core.exceptions import ValidationError

from .normalizer import TagNormalizer
from .parser import parse_tags

# 排序字段白名单，同时接受驼峰别名
SORT_FIELDS = {
    "created_at": "created_at",
    "createdAt": "created_at",
    "updated_at": "updated_at",
    "updatedAt": "updated_at",
}
SORT_ORDERS = ("asc", "desc")

DEFAULT_LIMIT = 100


@dataclass(frozen=True)
class SearchQuery:
    """
    搜索查询

    Attributes:
        raw: 原始查询字符串
        tokens: 规范化后的查询词，去重并保留首次出现顺序；为空表示匹配全部
    """
    raw: str
    tokens: tuple[str, ...] = field(default_factory=tuple)

    @classmethod
    def parse(cls, raw: str | None, normalizer: TagNormalizer | None = None) -> "SearchQuery":
        normalizer = normalizer or TagNormalizer()
        tokens: list[str] = []
        for word in parse_tags(raw):
            token = normalizer.normalize(word)
            if token and token not in tokens:
                tokens.append(token)
        return cls(raw=raw or "", tokens=tuple(tokens))

    @property
    def is_empty(self) -> bool:
        return not self.tokens


def normalize_sort_field(sort_by: str | None) -> str:
    """解析排序字段，非白名单字段抛 ValidationError"""
    if sort_by is None:
        return "created_at"
    column = SORT_FIELDS.get(sort_by)
    if column is None:
        raise ValidationError(
            f"不支持的排序字段: {sort_by}",
            errors=[f"sort_by 必须是 {', '.join(SORT_FIELDS)} 之一"],
            field="sort_by",
        )
    return column


def normalize_sort_order(sort_order: str | None) -> str:
    if sort_order is None:
        return "desc"
    order = sort_order.lower()
    if order not in SORT_ORDERS:
        raise ValidationError(
            f"不支持的排序方向: {sort_order}",
            errors=["sort_order 必须是 asc 或 desc"],
            field="sort_order",
        )
    return order


@dataclass(frozen=True)
class RecordSearchOptions:
    """分页与排序参数，构造时校验"""
    limit: int = DEFAULT_LIMIT
    offset: int = 0
    sort_by: str = "created_at"
    sort_order: str = "desc"

    def __post_init__(self):
        for name in ("limit", "offset"):
            value = getattr(self, name)
            if isinstance(value, bool) or not isinstance(value, int) or value < 0:
                raise ValidationError(
                    f"{name} 必须是非负整数: {value!r}",
                    field=name,
                )
        object.__setattr__(self, "sort_by", normalize_sort_field(self.sort_by))
        object.__setattr__(self, "sort_order", normalize_sort_order(self.sort_order))

    @classmethod
    def from_params(cls, params: dict[str, Any] | None = None) -> "RecordSearchOptions":
        """从查询参数构造，接受 sortBy / sortOrder 别名，缺省值跳过"""
        params = params or {}
        values = {
            "limit": params.get("limit"),
            "offset": params.get("offset"),
            "sort_by": params.get("sort_by", params.get("sortBy")),
            "sort_order": params.get("sort_order", params.get("sortOrder")),
        }
        return cls(**{k: v for k, v in values.items() if v is not None})

    @property
    def descending(self) -> bool:
        return self.sort_order == "desc"
