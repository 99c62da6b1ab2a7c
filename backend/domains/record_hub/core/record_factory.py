"""
记录工厂

负责分配 ID、时间戳并构造 Record。不做重复检查：
重复与否取决于存储中已有的数据，由服务层和存储层判断。
"""

import re
import uuid
from datetime import datetime, timezone
from typing import Callable, Iterable

from domains.core.exceptions import (
    InvalidContentError,
    InvalidRecordIdError,
    TagLimitExceededError,
)

from .models import Record, Tag
from .tag_factory import TagFactory

_RECORD_ID_PATTERN = re.compile(
    r"[0-9a-f]{8}-[0-9a-f]{4}-[0-9a-f]{4}-[0-9a-f]{4}-[0-9a-f]{12}|[0-9a-f]{32}",
    re.IGNORECASE,
)


def utc_now() -> datetime:
    return datetime.now(timezone.utc)


def parse_record_id(value: str | uuid.UUID) -> uuid.UUID:
    """
    解析记录 ID

    接受带连字符或 32 位十六进制的 UUID 字符串，大小写不敏感。

    Raises:
        InvalidRecordIdError: 无法解析
    """
    if isinstance(value, uuid.UUID):
        return value
    if not isinstance(value, str):
        raise InvalidRecordIdError(value)

    text = value.strip()
    # uuid.UUID 还接受花括号与 urn:uuid: 前缀，这里只放行两种裸格式
    if not _RECORD_ID_PATTERN.fullmatch(text):
        raise InvalidRecordIdError(value)
    return uuid.UUID(text)


class RecordFactory:
    """记录工厂"""

    def __init__(
        self,
        tag_factory: TagFactory | None = None,
        clock: Callable[[], datetime] = utc_now,
    ):
        self.tag_factory = tag_factory or TagFactory()
        self.clock = clock

    def create(
        self,
        content: str,
        tags: Iterable[Tag],
        record_id: uuid.UUID | None = None,
        now: datetime | None = None,
    ) -> Record:
        """
        用已创建好的标签构造记录

        Raises:
            InvalidContentError: 内容为空或仅包含空白
            TagLimitExceededError: 标签数超过上限
        """
        if content is None or not content.strip():
            raise InvalidContentError()

        tags = tuple(tags)
        limit = self.tag_factory.max_tags_per_record
        distinct = len({t.id for t in tags})
        if distinct > limit:
            raise TagLimitExceededError(distinct, limit)

        timestamp = now or self.clock()
        return Record(
            id=record_id or uuid.uuid4(),
            content=content,
            tags=tags,
            created_at=timestamp,
            updated_at=timestamp,
        )

    def from_content(
        self,
        content: str,
        record_id: uuid.UUID | None = None,
        now: datetime | None = None,
    ) -> Record:
        """内容 -> 标签 -> 记录"""
        if content is None or not content.strip():
            raise InvalidContentError()
        tags = self.tag_factory.create_many(content)
        return self.create(content, tags, record_id=record_id, now=now)

    def revise(self, record: Record, content: str, now: datetime | None = None) -> Record:
        """用新内容替换已有记录，保留 id 和 created_at"""
        if content is None or not content.strip():
            raise InvalidContentError()
        tags = self.tag_factory.create_many(content)
        timestamp = now or self.clock()
        # 时钟回拨时不让 updated_at 早于 created_at
        if timestamp < record.created_at:
            timestamp = record.created_at
        return record.replace_content(content, tags, timestamp)
