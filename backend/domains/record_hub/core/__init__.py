"""
核心层：标签规则、数据模型和存储

- 标签：规范化、校验、解析、确定性身份
- 记录：不可变实体，标签集合唯一
- 存储：PostgreSQL 数组列 + GIN 索引
"""

from .duplicate_checker import RecordDuplicateChecker
from .identity import TAG_NAMESPACE, tag_identity
from .matcher import filter_records, matches, sort_records
from .models import Record, RecordSearchResult, Tag, TagStatistic, TagSuggestion
from .normalizer import TagNormalizer, TagNormalizerConfig, normalize_tag
from .parser import parse_tags
from .record_factory import RecordFactory, parse_record_id
from .search_query import RecordSearchOptions, SearchQuery
from .store import RecordStore
from .tag_factory import TagFactory
from .validator import TagValidationResult, TagValidator

__all__ = [
    'Tag',
    'Record',
    'RecordSearchResult',
    'TagStatistic',
    'TagSuggestion',
    'TagNormalizer',
    'TagNormalizerConfig',
    'normalize_tag',
    'TagValidator',
    'TagValidationResult',
    'parse_tags',
    'TAG_NAMESPACE',
    'tag_identity',
    'TagFactory',
    'RecordFactory',
    'parse_record_id',
    'RecordDuplicateChecker',
    'matches',
    'filter_records',
    'sort_records',
    'SearchQuery',
    'RecordSearchOptions',
    'RecordStore',
]
