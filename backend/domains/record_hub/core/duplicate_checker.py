"""
记录重复检查（内存预检查）

对一份记录快照做精确集合比较。结果只用于提前给出友好的错误，
最终以存储层的 UNIQUE(normalized_tags) 约束为准。
"""

import uuid
from typing import Iterable

from .models import Record


class RecordDuplicateChecker:
    """基于记录快照的重复检查"""

    def __init__(self, records: Iterable[Record]):
        self._records = list(records)

    def find_duplicate(
        self,
        tag_ids: Iterable[uuid.UUID],
        exclude_record_id: uuid.UUID | None = None,
    ) -> Record | None:
        """返回标签集合完全相同的记录（排除 exclude_record_id）"""
        wanted = frozenset(tag_ids)
        for record in self._records:
            if exclude_record_id is not None and record.id == exclude_record_id:
                continue
            if record.tag_ids == wanted:
                return record
        return None

    def exists(
        self,
        tag_ids: Iterable[uuid.UUID],
        exclude_record_id: uuid.UUID | None = None,
    ) -> bool:
        return self.find_duplicate(tag_ids, exclude_record_id) is not None
