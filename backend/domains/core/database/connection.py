"""
数据库连接管理

PostgreSQL 连接池配置与显式的连接池句柄。

连接池在启动时创建一次，以参数形式传入存储层，不存在进程级单例:
    pool = DatabasePool(DatabaseConfig.from_url(url))
    await pool.open()
    store = RecordStore(pool)
    ...
    await pool.close()
"""

from contextlib import asynccontextmanager
from dataclasses import dataclass
from typing import TYPE_CHECKING, AsyncIterator, Optional

import asyncpg

from domains.core.exceptions import StorageError
from domains.core.logging import get_logger

from .errors import translate

if TYPE_CHECKING:
    from domains.core.settings import DatabaseSettings

logger = get_logger(__name__)


@dataclass
class DatabaseConfig:
    """数据库配置"""
    url: str
    min_size: int = 1
    max_size: int = 20
    idle_timeout: float = 30.0      # 空闲连接回收（秒）
    connect_timeout: float = 2.0    # 建立连接超时（秒）
    acquire_timeout: float = 2.0    # 获取连接超时（秒）
    command_timeout: float = 10.0   # 语句超时（秒）

    @classmethod
    def from_url(cls, url: str, **kwargs) -> "DatabaseConfig":
        """从 URL 创建配置"""
        if not url.startswith(("postgresql://", "postgres://")):
            raise ValueError(f"仅支持 PostgreSQL 数据库: {url}")
        return cls(url=url, **kwargs)

    @classmethod
    def from_settings(cls, settings: "DatabaseSettings") -> "DatabaseConfig":
        """从 pydantic 配置创建"""
        return cls.from_url(
            settings.url,
            min_size=settings.pool_min_size,
            max_size=settings.pool_max_size,
            idle_timeout=settings.idle_timeout,
            connect_timeout=settings.connect_timeout,
            acquire_timeout=settings.acquire_timeout,
            command_timeout=settings.command_timeout,
        )

    @property
    def safe_url(self) -> str:
        """隐藏账号密码的 URL（用于日志）"""
        return self.url.split('@')[-1] if '@' in self.url else self.url


class DatabasePool:
    """
    asyncpg 连接池句柄

    - 有界连接池（max_size），空闲连接按 idle_timeout 回收
    - 建立连接与获取连接均有超时，超时以 StorageConnectionError 抛出
    - acquire() 为作用域获取，任何退出路径都会归还连接
    """

    def __init__(self, config: DatabaseConfig):
        self.config = config
        self._pool: Optional[asyncpg.Pool] = None

    @property
    def is_open(self) -> bool:
        return self._pool is not None

    async def open(self) -> "DatabasePool":
        """创建连接池"""
        if self._pool is not None:
            return self

        try:
            self._pool = await asyncpg.create_pool(
                self.config.url,
                min_size=self.config.min_size,
                max_size=self.config.max_size,
                max_inactive_connection_lifetime=self.config.idle_timeout,
                timeout=self.config.connect_timeout,
                command_timeout=self.config.command_timeout,
            )
        except Exception as e:
            error = translate(e)
            logger.error("database_pool_open_failed", url=self.config.safe_url, error=str(error))
            raise error from e

        logger.info(
            "database_pool_opened",
            url=self.config.safe_url,
            max_size=self.config.max_size,
        )
        return self

    async def close(self) -> None:
        """关闭连接池，等待借出的连接归还"""
        if self._pool is None:
            return
        pool, self._pool = self._pool, None
        await pool.close()
        logger.info("database_pool_closed", url=self.config.safe_url)

    @asynccontextmanager
    async def acquire(self) -> AsyncIterator[asyncpg.Connection]:
        """
        获取连接的上下文管理器

        连接池耗尽时在 acquire_timeout 后抛出 asyncio.TimeoutError，
        由存储层统一转换为 StorageConnectionError。
        """
        if self._pool is None:
            raise StorageError("连接池未初始化，请先调用 open()")

        # 归还到借出时的池，close() 期间 self._pool 已被置空
        pool = self._pool
        conn = await pool.acquire(timeout=self.config.acquire_timeout)
        try:
            yield conn
        finally:
            await pool.release(conn)

    async def __aenter__(self) -> "DatabasePool":
        return await self.open()

    async def __aexit__(self, exc_type, exc_val, exc_tb):
        await self.close()
