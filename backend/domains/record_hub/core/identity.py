"""
标签身份

标签没有独立的表，身份由规范形式确定性地推导:
    tag_id = uuid5(TAG_NAMESPACE, normalized_value)

TAG_NAMESPACE 取 RFC 4122 的 DNS 命名空间。相同规范值在任何机器、
任何时间推导出的 ID 都相同，已落库的 tags 数组依赖这一点，不能更换。
"""

import uuid

TAG_NAMESPACE = uuid.UUID("6ba7b810-9dad-11d1-80b4-00c04fd430c8")


def tag_identity(normalized_value: str) -> uuid.UUID:
    """由规范形式推导标签 ID"""
    return uuid.uuid5(TAG_NAMESPACE, normalized_value)
