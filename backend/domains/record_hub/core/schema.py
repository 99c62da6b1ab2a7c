"""
records 表结构

tags 与 normalized_tags 是一一对应的并行数组，写入时都按规范值排序，
因此 UNIQUE(normalized_tags) 比较的就是标签集合本身。
GIN 索引服务于数组包含 (@>) 和相交 (&&) 查询。

gen_random_uuid() 需要 PostgreSQL 13+（更早的版本需要 pgcrypto 扩展）。
"""

TABLE_NAME = "records"
UNIQUE_TAG_SET_CONSTRAINT = "records_normalized_tags_key"

CREATE_TABLE_SQL = f"""
CREATE TABLE IF NOT EXISTS {TABLE_NAME} (
    id UUID PRIMARY KEY DEFAULT gen_random_uuid(),
    content TEXT NOT NULL,
    tags UUID[] NOT NULL DEFAULT '{{}}',
    normalized_tags TEXT[] NOT NULL DEFAULT '{{}}',
    created_at TIMESTAMPTZ NOT NULL DEFAULT NOW(),
    updated_at TIMESTAMPTZ NOT NULL DEFAULT NOW(),
    CONSTRAINT {UNIQUE_TAG_SET_CONSTRAINT} UNIQUE (normalized_tags),
    CONSTRAINT records_updated_after_created CHECK (updated_at >= created_at)
)
"""

CREATE_INDEXES_SQL = [
    f"CREATE INDEX IF NOT EXISTS idx_records_normalized_tags ON {TABLE_NAME} USING GIN (normalized_tags)",
    f"CREATE INDEX IF NOT EXISTS idx_records_tags ON {TABLE_NAME} USING GIN (tags)",
    f"CREATE INDEX IF NOT EXISTS idx_records_created_at ON {TABLE_NAME} (created_at DESC)",
    f"CREATE INDEX IF NOT EXISTS idx_records_updated_at ON {TABLE_NAME} (updated_at DESC)",
]


def schema_statements() -> list[str]:
    """建表与建索引语句（均可重复执行）"""
    return [CREATE_TABLE_SQL.strip(), *CREATE_INDEXES_SQL]
