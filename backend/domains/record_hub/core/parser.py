"""标签解析：把记录内容按空白切分为原始标签"""


def parse_tags(content: str | None) -> list[str]:
    """
    按任意 Unicode 空白切分内容

    保持原始顺序，不去重，不支持引号或转义。空白内容返回空列表。
    """
    if not content:
        return []
    return content.split()
