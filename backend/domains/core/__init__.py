"""
Core - 通用基础设施

提供与具体领域无关的基础设施组件:
- 统一异常体系
- 配置管理
- 结构化日志
- 数据库连接池与驱动错误转换（见 core.database）
"""

from .exceptions import (
    ApplicationError,
    ConflictError,
    ConstraintViolationError,
    DuplicateRecordError,
    EmptyTagError,
    ErrorCategory,
    InvalidContentError,
    InvalidRecordError,
    InvalidRecordIdError,
    InvalidTagError,
    NotFoundError,
    RecordNotFoundError,
    StorageConnectionError,
    StorageError,
    TagLimitExceededError,
    ValidationError,
)
from .settings import (
    DatabaseSettings,
    LoggingSettings,
    RecordsSettings,
    TagSettings,
    get_settings,
    reload_settings,
)

__all__ = [
    # Exceptions
    "ErrorCategory",
    "ApplicationError",
    "NotFoundError",
    "ValidationError",
    "ConflictError",
    "InvalidContentError",
    "InvalidRecordIdError",
    "InvalidRecordError",
    "RecordNotFoundError",
    "DuplicateRecordError",
    "EmptyTagError",
    "InvalidTagError",
    "TagLimitExceededError",
    "StorageError",
    "ConstraintViolationError",
    "StorageConnectionError",
    # Settings
    "RecordsSettings",
    "DatabaseSettings",
    "TagSettings",
    "LoggingSettings",
    "get_settings",
    "reload_settings",
]
