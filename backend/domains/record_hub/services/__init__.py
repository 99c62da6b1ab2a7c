"""服务层"""

from .record_service import RecordService
from .tag_service import TagService

__all__ = ['RecordService', 'TagService']
