"""配置模块 -- 可通过环境变量覆盖

包含数据库路径、订阅空闲停止延迟、日志格式等可配置项。
"""

import os
from pathlib import Path
from typing import Literal

import structlog
from pydantic import BaseModel, Field

log = structlog.get_logger()

# 最后一个订阅者离开后，上游 live query 保持的秒数
DEFAULT_STOP_TIMEOUT_S: float = 5.0


def _get_base_dir() -> Path:
    """获取 data 基础目录"""
    return Path(os.environ.get("MATRIXTODO_DATA_DIR", "data"))


def get_db_path() -> str:
    """获取 SQLite 数据库路径"""
    return os.environ.get(
        "MATRIXTODO_DB_PATH",
        str(_get_base_dir() / "sqlite" / "matrixtodo.db"),
    )


class AppConfig(BaseModel):
    """应用配置 -- 从环境变量加载

    环境变量:
        MATRIXTODO_DB_PATH: 数据库文件路径
        MATRIXTODO_STOP_TIMEOUT_S: 无订阅者后停止上游查询的延迟（秒，默认 5）
        MATRIXTODO_LOG_FORMAT: 日志格式（dev/json）
        MATRIXTODO_LOG_LEVEL: 日志级别
    """

    db_path: str = Field(default_factory=get_db_path, description="SQLite 数据库路径")
    stop_timeout_s: float = Field(
        default=DEFAULT_STOP_TIMEOUT_S,
        ge=0,
        description="无订阅者后停止上游 live query 的延迟（秒）",
    )
    log_format: Literal["dev", "json"] = Field(default="dev", description="日志渲染模式")
    log_level: str = Field(default="INFO", description="日志级别")


def load_config() -> AppConfig:
    """从环境变量加载应用配置

    Returns:
        AppConfig 实例
    """
    kwargs: dict = {}

    if val := os.environ.get("MATRIXTODO_STOP_TIMEOUT_S"):
        try:
            kwargs["stop_timeout_s"] = float(val)
        except ValueError:
            log.warning(
                "invalid_stop_timeout_config",
                env_var="MATRIXTODO_STOP_TIMEOUT_S",
                value=val,
                fallback=DEFAULT_STOP_TIMEOUT_S,
            )
            # 使用默认值，不阻塞启动

    if val := os.environ.get("MATRIXTODO_LOG_FORMAT"):
        kwargs["log_format"] = val

    if val := os.environ.get("MATRIXTODO_LOG_LEVEL"):
        kwargs["log_level"] = val

    return AppConfig(**kwargs)
