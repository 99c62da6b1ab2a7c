"""
存储引擎错误转换

驱动层抛出的异常种类繁多（asyncpg 的 SQLSTATE 异常、socket 错误、
连接池超时），这里先归类为封闭的 EngineErrorKind，再在存储层边界
一次性转换为 domains.core.exceptions 中的领域异常。
"""

import asyncio
from dataclasses import dataclass
from enum import Enum
from typing import Any, Iterable, Optional

import asyncpg
from asyncpg import exceptions as pg_exceptions

from domains.core.exceptions import (
    ApplicationError,
    ConstraintViolationError,
    DuplicateRecordError,
    StorageConnectionError,
    StorageError,
)

# SQLSTATE 常量
UNIQUE_VIOLATION = "23505"
INTEGRITY_CONSTRAINT_CLASS = "23"
CONNECTION_EXCEPTION_CLASS = "08"

# 不属于 08 类但同样表示"数据库暂时不可用"的状态码
_UNAVAILABLE_SQLSTATES = frozenset({
    "53300",  # too_many_connections
    "57P01",  # admin_shutdown
    "57P02",  # crash_shutdown
    "57P03",  # cannot_connect_now
})


class EngineErrorKind(str, Enum):
    """驱动错误分类"""
    UNIQUE_VIOLATION = "unique_violation"
    CONSTRAINT_VIOLATION = "constraint_violation"
    CONNECTION = "connection"
    UNKNOWN = "unknown"


@dataclass(frozen=True)
class EngineError:
    """归类后的驱动错误"""
    kind: EngineErrorKind
    message: str
    sqlstate: Optional[str] = None
    constraint: Optional[str] = None
    cause: Optional[BaseException] = None


def classify(exc: BaseException) -> EngineError:
    """
    将驱动异常归类为 EngineError

    Args:
        exc: asyncpg / OS / 超时异常

    Returns:
        EngineError
    """
    if isinstance(exc, asyncpg.PostgresError):
        sqlstate = getattr(exc, "sqlstate", None)
        constraint = getattr(exc, "constraint_name", None)
        message = str(exc) or exc.__class__.__name__

        if sqlstate == UNIQUE_VIOLATION:
            kind = EngineErrorKind.UNIQUE_VIOLATION
        elif sqlstate and sqlstate.startswith(INTEGRITY_CONSTRAINT_CLASS):
            kind = EngineErrorKind.CONSTRAINT_VIOLATION
        elif sqlstate and (
            sqlstate.startswith(CONNECTION_EXCEPTION_CLASS) or sqlstate in _UNAVAILABLE_SQLSTATES
        ):
            kind = EngineErrorKind.CONNECTION
        else:
            kind = EngineErrorKind.UNKNOWN

        return EngineError(
            kind=kind,
            message=message,
            sqlstate=sqlstate,
            constraint=constraint,
            cause=exc,
        )

    if isinstance(exc, asyncio.TimeoutError):
        return EngineError(
            kind=EngineErrorKind.CONNECTION,
            message="数据库连接超时或连接池已耗尽",
            cause=exc,
        )

    if isinstance(exc, (OSError, pg_exceptions.InterfaceError)):
        return EngineError(
            kind=EngineErrorKind.CONNECTION,
            message=f"数据库不可达: {exc}",
            cause=exc,
        )

    return EngineError(
        kind=EngineErrorKind.UNKNOWN,
        message=str(exc) or exc.__class__.__name__,
        cause=exc,
    )


def to_application_error(
    error: EngineError,
    normalized_tags: Optional[Iterable[str]] = None,
    record_id: Any = None,
) -> ApplicationError:
    """
    将 EngineError 转换为领域异常

    Args:
        error: 归类后的驱动错误
        normalized_tags: 写入的标签集合（用于重复错误的提示信息）
        record_id: 相关记录 ID

    Returns:
        ApplicationError 子类实例
    """
    # 主键冲突是调用方复用了 ID，不是标签集合重复
    if error.kind == EngineErrorKind.UNIQUE_VIOLATION and (error.constraint or "").endswith("_pkey"):
        return ConstraintViolationError(
            f"主键冲突: {error.message}",
            constraint=error.constraint,
            cause=error.cause,
        )

    if error.kind == EngineErrorKind.UNIQUE_VIOLATION:
        return DuplicateRecordError(
            list(normalized_tags or []),
            cause=error.cause,
        )

    if error.kind == EngineErrorKind.CONSTRAINT_VIOLATION:
        return ConstraintViolationError(
            f"违反完整性约束: {error.message}",
            constraint=error.constraint,
            cause=error.cause,
        )

    if error.kind == EngineErrorKind.CONNECTION:
        return StorageConnectionError(error.message, cause=error.cause)

    details = {"sqlstate": error.sqlstate} if error.sqlstate else None
    if record_id is not None:
        details = {**(details or {}), "record_id": str(record_id)}
    return StorageError(f"数据库错误: {error.message}", details=details, cause=error.cause)


def translate(exc: BaseException, **context) -> ApplicationError:
    """classify + to_application_error 的便捷组合"""
    return to_application_error(classify(exc), **context)
