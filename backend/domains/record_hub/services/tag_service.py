"""
标签服务层

标签不单独存储，统计与补全都从 records.normalized_tags 聚合得到。
"""

from domains.core.exceptions import ValidationError
from domains.core.logging import get_logger

from ..core.models import TagStatistic, TagSuggestion
from ..core.normalizer import TagNormalizer
from ..core.store import RecordStore

logger = get_logger(__name__)

USAGE_SORT_FIELDS = ("usage", "tag")
DEFAULT_SUGGESTION_LIMIT = 10


def match_score(tag: str, prefix: str) -> float:
    """
    补全匹配分

    完全相同为 100；前缀匹配时标签越短分越高，落在 (50, 99) 区间；不匹配为 0。
    """
    if tag == prefix:
        return 100.0
    if prefix and tag.startswith(prefix):
        return 50 + 49 * len(prefix) / len(tag)
    return 0.0


class TagService:
    """标签统计与补全"""

    def __init__(self, store: RecordStore, normalizer: TagNormalizer | None = None):
        self.store = store
        self.normalizer = normalizer or TagNormalizer()

    async def statistics(self) -> list[TagStatistic]:
        """按使用次数降序、标签升序"""
        return await self.store.tag_statistics()

    async def usage(
        self,
        sort_by: str = "usage",
        sort_order: str = "desc",
        limit: int | None = None,
        offset: int = 0,
    ) -> list[TagStatistic]:
        """
        标签使用情况

        Args:
            sort_by: usage（次数）或 tag（标签值）
            sort_order: asc / desc
            limit: 返回条数，None 表示全部
            offset: 偏移

        Raises:
            ValidationError: 参数不合法
        """
        if sort_by not in USAGE_SORT_FIELDS:
            raise ValidationError(f"不支持的排序字段: {sort_by}", field="sort_by")
        if sort_order not in ("asc", "desc"):
            raise ValidationError(f"不支持的排序方向: {sort_order}", field="sort_order")
        if offset < 0 or (limit is not None and limit < 0):
            raise ValidationError("limit 和 offset 必须是非负整数", field="limit")

        stats = await self.store.tag_statistics()
        reverse = sort_order == "desc"
        if sort_by == "usage":
            # 次数相同时标签始终升序
            stats = sorted(stats, key=lambda s: s.tag)
            stats = sorted(stats, key=lambda s: s.count, reverse=reverse)
        else:
            stats = sorted(stats, key=lambda s: s.tag, reverse=reverse)

        end = None if limit is None else offset + limit
        return stats[offset:end]

    async def suggest(self, prefix: str, limit: int = DEFAULT_SUGGESTION_LIMIT) -> list[TagSuggestion]:
        """
        标签补全

        前缀先按标签规则规范化；结果按匹配分降序，再按次数降序、标签升序。
        """
        normalized = self.normalizer.normalize(prefix)
        if not normalized or limit <= 0:
            return []

        stats = await self.store.tag_statistics(prefix=normalized)
        suggestions = [
            TagSuggestion(tag=s.tag, count=s.count, score=match_score(s.tag, normalized))
            for s in stats
            if s.tag.startswith(normalized)
        ]
        suggestions.sort(key=lambda s: (-s.score, -s.count, s.tag))

        logger.debug("tag_suggestions", prefix=normalized, count=len(suggestions))
        return suggestions[:limit]
