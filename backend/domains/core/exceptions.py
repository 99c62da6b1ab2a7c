"""
统一异常体系

提供业务层和存储层的统一错误处理，包括:
- 业务异常基类 (ApplicationError)
- 常用业务异常类型
- 记录/标签领域异常
- 存储层异常（由存储引擎边界统一转换，调用方不接触驱动错误码）
- HTTP 状态码映射
"""

from enum import Enum
from typing import Any, Dict, Optional, List
from dataclasses import dataclass


class ErrorCategory(str, Enum):
    """错误分类"""
    VALIDATION = "validation"      # 参数验证错误
    NOT_FOUND = "not_found"        # 资源不存在
    CONFLICT = "conflict"          # 资源冲突
    EXTERNAL = "external"          # 外部服务错误（数据库不可达等）
    INTERNAL = "internal"          # 内部错误


@dataclass
class ApplicationError(Exception):
    """
    应用层异常基类

    所有业务相关的异常都应继承此类。
    提供统一的错误结构，便于外部 HTTP 层转换为响应。

    使用示例:
        raise RecordNotFoundError(record_id)
        raise InvalidTagError("ca\\x00fe", ["标签包含控制字符"])
        raise DuplicateRecordError(["deadline", "проект"])
    """
    code: str                                    # 错误码 (如 "RECORD_NOT_FOUND", "DUPLICATE_RECORD")
    message: str                                 # 用户可读的错误信息
    category: ErrorCategory = ErrorCategory.INTERNAL
    details: Optional[Dict[str, Any]] = None    # 附加详情
    cause: Optional[Exception] = None           # 原始异常

    def __post_init__(self):
        super().__init__(self.message)

    def __str__(self) -> str:
        return f"[{self.code}] {self.message}"

    @property
    def http_status_code(self) -> int:
        """映射到 HTTP 状态码"""
        mapping = {
            ErrorCategory.VALIDATION: 400,
            ErrorCategory.NOT_FOUND: 404,
            ErrorCategory.CONFLICT: 409,
            ErrorCategory.EXTERNAL: 503,
            ErrorCategory.INTERNAL: 500,
        }
        return mapping.get(self.category, 500)

    @property
    def retryable(self) -> bool:
        """调用方是否可以退避后重试"""
        return False

    def to_dict(self) -> Dict[str, Any]:
        """转换为字典格式（用于 API 响应）"""
        result = {
            "code": self.code,
            "message": self.message,
            "category": self.category.value,
        }
        if self.details:
            result["details"] = self.details
        return result


# ==================== 常用业务异常 ====================

class NotFoundError(ApplicationError):
    """资源不存在"""
    def __init__(
        self,
        resource_type: str,
        resource_id: Any,
        code: str = "NOT_FOUND",
        details: Optional[Dict] = None
    ):
        super().__init__(
            code=code,
            message=f"{resource_type}不存在: {resource_id}",
            category=ErrorCategory.NOT_FOUND,
            details=details or {"resource_type": resource_type, "resource_id": str(resource_id)}
        )
        self.resource_type = resource_type
        self.resource_id = resource_id


class ValidationError(ApplicationError):
    """参数验证错误"""
    def __init__(
        self,
        message: str,
        errors: Optional[List[Any]] = None,
        field: Optional[str] = None,
        code: str = "VALIDATION_ERROR"
    ):
        details = {}
        if errors:
            details["validation_errors"] = errors
        if field:
            details["field"] = field

        super().__init__(
            code=code,
            message=message,
            category=ErrorCategory.VALIDATION,
            details=details or None
        )
        self.errors = errors or []
        self.field = field


class ConflictError(ApplicationError):
    """资源冲突（如重复创建）"""
    def __init__(
        self,
        resource_type: str,
        conflict_field: str,
        conflict_value: Any,
        message: Optional[str] = None,
        code: str = "CONFLICT",
        cause: Optional[Exception] = None
    ):
        super().__init__(
            code=code,
            message=message or f"{resource_type}已存在: {conflict_field}={conflict_value}",
            category=ErrorCategory.CONFLICT,
            details={
                "resource_type": resource_type,
                "conflict_field": conflict_field,
                "conflict_value": str(conflict_value)
            },
            cause=cause
        )


# ==================== 记录相关异常 ====================

class InvalidContentError(ValidationError):
    """记录内容为空或仅包含空白"""
    def __init__(self, message: str = "记录内容不能为空"):
        super().__init__(message, field="content", code="INVALID_RECORD_CONTENT")


class InvalidRecordIdError(ValidationError):
    """记录 ID 不是合法的 UUID"""
    def __init__(self, value: Any):
        super().__init__(f"无效的记录 ID: {value}", field="id")
        self.value = value


class InvalidRecordError(ValidationError):
    """记录实体不满足不变量（如 updated_at 早于 created_at）"""
    def __init__(self, message: str):
        super().__init__(message, code="INVALID_RECORD")


class RecordNotFoundError(NotFoundError):
    """记录不存在"""
    def __init__(self, record_id: Any):
        super().__init__("记录", record_id, code="RECORD_NOT_FOUND")
        self.record_id = record_id


class DuplicateRecordError(ConflictError):
    """
    标签集合重复

    无论是写入前的预检查还是数据库唯一约束触发，都统一为此异常。
    重试相同的标签集合必然再次失败，调用方不应重试。
    """
    def __init__(
        self,
        normalized_tags: Optional[List[str]] = None,
        existing_record_id: Any = None,
        cause: Optional[Exception] = None
    ):
        tags = sorted(normalized_tags or [])
        super().__init__(
            "记录",
            "normalized_tags",
            " ".join(tags),
            message=f"已存在相同标签集合的记录: [{', '.join(tags)}]",
            code="DUPLICATE_RECORD",
            cause=cause
        )
        self.normalized_tags = tags
        self.existing_record_id = existing_record_id
        if existing_record_id is not None:
            self.details["existing_record_id"] = str(existing_record_id)


# ==================== 标签相关异常 ====================

class EmptyTagError(ValidationError):
    """标签在规范化后为空"""
    def __init__(self, raw_value: Any = None):
        super().__init__("标签不能为空", field="tag", code="INVALID_TAG")
        self.raw_value = raw_value


class InvalidTagError(ValidationError):
    """标签未通过校验"""
    def __init__(self, tag: str, reasons: List[str]):
        super().__init__(
            f"无效的标签 '{tag}': {', '.join(reasons)}",
            errors=list(reasons),
            field="tag",
            code="INVALID_TAG"
        )
        self.tag = tag
        self.reasons = list(reasons)


class TagLimitExceededError(ValidationError):
    """单条记录的标签数量超过上限"""
    def __init__(self, count: int, limit: int):
        super().__init__(
            f"标签数量超过上限: {count} > {limit}",
            field="tags",
            code="TAG_LIMIT_EXCEEDED"
        )
        self.count = count
        self.limit = limit


# ==================== 存储相关异常 ====================

class StorageError(ApplicationError):
    """存储引擎报告的其他错误"""
    def __init__(
        self,
        message: str,
        code: str = "DATABASE_ERROR",
        category: ErrorCategory = ErrorCategory.INTERNAL,
        details: Optional[Dict] = None,
        cause: Optional[Exception] = None
    ):
        super().__init__(
            code=code,
            message=message,
            category=category,
            details=details,
            cause=cause
        )


class ConstraintViolationError(StorageError):
    """除标签集合唯一性之外的完整性约束冲突"""
    def __init__(
        self,
        message: str,
        constraint: Optional[str] = None,
        cause: Optional[Exception] = None
    ):
        super().__init__(
            message=message,
            code="CONSTRAINT_VIOLATION",
            category=ErrorCategory.CONFLICT,
            details={"constraint": constraint} if constraint else None,
            cause=cause
        )
        self.constraint = constraint


class StorageConnectionError(StorageError):
    """存储不可达、连接超时或连接池耗尽，调用方可退避重试"""
    def __init__(self, message: str, cause: Optional[Exception] = None):
        super().__init__(
            message=message,
            code="CONNECTION_ERROR",
            category=ErrorCategory.EXTERNAL,
            cause=cause
        )

    @property
    def retryable(self) -> bool:
        return True


# ==================== 导出 ====================

__all__ = [
    # 基类
    "ErrorCategory",
    "ApplicationError",
    # 通用异常
    "NotFoundError",
    "ValidationError",
    "ConflictError",
    # 记录异常
    "InvalidContentError",
    "InvalidRecordIdError",
    "InvalidRecordError",
    "RecordNotFoundError",
    "DuplicateRecordError",
    # 标签异常
    "EmptyTagError",
    "InvalidTagError",
    "TagLimitExceededError",
    # 存储异常
    "StorageError",
    "ConstraintViolationError",
    "StorageConnectionError",
]
