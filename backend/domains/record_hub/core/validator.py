"""
标签校验

只校验规范化之后的值。所有违规项都会被收集，而不是遇到第一个就返回，
方便一次性告诉用户标签哪里不合法。
"""

import unicodedata
from dataclasses import dataclass, field

DEFAULT_MAX_TAG_LENGTH = 100


@dataclass(frozen=True)
class TagValidationResult:
    """校验结果"""
    is_valid: bool
    errors: tuple[str, ...] = field(default_factory=tuple)

    def __bool__(self) -> bool:
        return self.is_valid


class TagValidator:
    """
    标签校验器

    规则（按顺序检查，累积错误）:
    - 不能为空
    - 长度不超过 max_length
    - 不能包含控制字符或格式字符（Unicode 类别 C*）
    - 不能包含空白（标签由空白分隔，内部出现空白说明不是单个标签）
    """

    def __init__(self, max_length: int = DEFAULT_MAX_TAG_LENGTH):
        self.max_length = max_length

    def validate(self, normalized: str) -> TagValidationResult:
        errors: list[str] = []

        if not normalized:
            errors.append("标签不能为空")
        if len(normalized) > self.max_length:
            errors.append(f"标签长度不能超过 {self.max_length} 个字符")
        if any(unicodedata.category(ch).startswith("C") for ch in normalized):
            errors.append("标签不能包含控制字符")
        if any(ch.isspace() for ch in normalized):
            errors.append("标签不能包含空白字符")

        return TagValidationResult(is_valid=not errors, errors=tuple(errors))
