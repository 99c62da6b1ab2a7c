"""
标签规范化

把用户输入的原始文本转换为标签的规范形式，规范形式决定标签身份:
"Café"、"cafe"、"  CAFÉ " 都规范化为 "cafe"。

步骤:
1. 转为小写
2. NFD 分解后去除组合附加符号（Unicode 类别 Mn），再 NFC 合成
3. 去除首尾空白，连续空白折叠为单个空格

规范化是纯函数，对任何字符串都不会抛异常，且幂等。
"""

import re
import unicodedata
from dataclasses import dataclass

_WHITESPACE_RUN = re.compile(r"\s+")


@dataclass(frozen=True)
class TagNormalizerConfig:
    """规范化选项"""
    lowercase: bool = True
    remove_accents: bool = True


class TagNormalizer:
    """标签规范化器"""

    def __init__(self, config: TagNormalizerConfig | None = None):
        self.config = config or TagNormalizerConfig()

    def normalize(self, raw: str | None) -> str:
        """
        规范化单个标签

        Args:
            raw: 原始文本，None 视为空串

        Returns:
            规范形式，可能为空串（由调用方决定如何处理）
        """
        if raw is None:
            return ""

        value = raw

        if self.config.lowercase:
            value = value.lower()

        if self.config.remove_accents:
            value = self._strip_marks(value)

        # 须在去除附加符号之后，否则被去掉的符号两侧会留下空白
        return _WHITESPACE_RUN.sub(" ", value.strip())

    __call__ = normalize

    @staticmethod
    def _strip_marks(value: str) -> str:
        decomposed = unicodedata.normalize("NFD", value)
        stripped = "".join(ch for ch in decomposed if unicodedata.category(ch) != "Mn")
        return unicodedata.normalize("NFC", stripped)


_default_normalizer = TagNormalizer()


def normalize_tag(raw: str | None) -> str:
    """使用默认配置规范化标签"""
    return _default_normalizer.normalize(raw)
