"""
结构化日志模块

基于 structlog 提供统一的日志配置，支持控制台与 JSON 输出。
"""

from .config import (
    LogConfig,
    LogFormat,
    configure_logging,
    get_logger,
)

__all__ = [
    # 配置
    "configure_logging",
    "get_logger",
    "LogConfig",
    "LogFormat",
]
