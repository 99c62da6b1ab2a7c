"""
数据库抽象层

提供 PostgreSQL 连接池句柄和驱动错误转换。
"""

from .connection import (
    DatabaseConfig,
    DatabasePool,
)
from .errors import (
    EngineError,
    EngineErrorKind,
    classify,
    to_application_error,
    translate,
)

__all__ = [
    "DatabaseConfig",
    "DatabasePool",
    "EngineError",
    "EngineErrorKind",
    "classify",
    "to_application_error",
    "translate",
]
