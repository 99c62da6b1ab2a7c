"""
标签记录库领域模块

一条记录是一段短文本，内容中以空白分隔的每个词都是一个标签。
标签集合（忽略顺序、大小写、变音符号）决定记录身份，同一集合只能有一条记录；
按任意标签子集检索（AND 语义）。

核心功能：
- 标签规范化与校验，uuid5 确定性标签 ID
- 重复检测：服务层预检查 + 数据库 UNIQUE(normalized_tags) 约束
- 标签搜索：PostgreSQL 数组包含查询，GIN 索引
- 标签统计与补全
"""

from .core.models import Record, RecordSearchResult, Tag, TagStatistic, TagSuggestion
from .core.store import RecordStore
from .hub import RecordHub, open_record_hub
from .services.record_service import RecordService
from .services.tag_service import TagService

__all__ = [
    'Tag',
    'Record',
    'RecordSearchResult',
    'TagStatistic',
    'TagSuggestion',
    'RecordStore',
    'RecordService',
    'TagService',
    'RecordHub',
    'open_record_hub',
]
