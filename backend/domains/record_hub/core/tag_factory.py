"""
标签工厂

原始文本 -> 规范化 -> 校验 -> Tag。
"""

from domains.core.exceptions import EmptyTagError, InvalidTagError, TagLimitExceededError

from .identity import tag_identity
from .models import Tag
from .normalizer import TagNormalizer
from .parser import parse_tags
from .validator import TagValidator

DEFAULT_MAX_TAGS_PER_RECORD = 100


class TagFactory:
    """创建经过规范化与校验的标签"""

    def __init__(
        self,
        normalizer: TagNormalizer | None = None,
        validator: TagValidator | None = None,
        max_tags_per_record: int = DEFAULT_MAX_TAGS_PER_RECORD,
    ):
        self.normalizer = normalizer or TagNormalizer()
        self.validator = validator or TagValidator()
        self.max_tags_per_record = max_tags_per_record

    def create(self, raw: str | None) -> Tag:
        """
        创建单个标签

        Raises:
            EmptyTagError: 规范化后为空
            InvalidTagError: 未通过校验
        """
        normalized = self.normalizer.normalize(raw)
        if not normalized:
            raise EmptyTagError(raw)

        result = self.validator.validate(normalized)
        if not result.is_valid:
            raise InvalidTagError(normalized, list(result.errors))

        return Tag(id=tag_identity(normalized), normalized_value=normalized)

    def create_many(self, content: str | None) -> list[Tag]:
        """
        从内容创建标签列表

        遇到第一个非法词即失败。按标签 ID 去重，保留首次出现的顺序。

        Raises:
            EmptyTagError / InvalidTagError: 某个词不合法
            TagLimitExceededError: 去重后的标签数超过上限
        """
        tags: dict = {}
        for token in parse_tags(content):
            tag = self.create(token)
            tags.setdefault(tag.id, tag)

        if len(tags) > self.max_tags_per_record:
            raise TagLimitExceededError(len(tags), self.max_tags_per_record)

        return list(tags.values())
