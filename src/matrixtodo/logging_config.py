"""structlog 配置模块

dev 模式：ConsoleRenderer 彩色输出，便于本地调试 live query 的订阅/取消
json 模式：单行 JSON，异常栈展开为字符串字段
"""

import logging
import sys
from typing import TextIO

import structlog

# aiosqlite 在 DEBUG 级别为每次调用打日志，淹没应用事件
_NOISY_LOGGERS = ("aiosqlite",)


def _shared_processors() -> list[structlog.types.Processor]:
    return [
        structlog.contextvars.merge_contextvars,
        structlog.stdlib.add_logger_name,
        structlog.stdlib.add_log_level,
        structlog.processors.TimeStamper(fmt="iso", utc=True),
        structlog.processors.StackInfoRenderer(),
        structlog.processors.UnicodeDecoder(),
    ]


def setup_logging(
    log_format: str = "dev",
    log_level: str = "INFO",
    stream: TextIO | None = None,
) -> None:
    """初始化 structlog + 标准库 logging

    Args:
        log_format: "json" 输出结构化 JSON，其余取值按 dev 处理
        log_level: 标准库 logging 级别名，无法识别时退回 INFO
        stream: 日志输出流，默认 stderr
    """
    shared = _shared_processors()

    if log_format == "json":
        final: list[structlog.types.Processor] = [
            structlog.processors.format_exc_info,
            structlog.processors.JSONRenderer(ensure_ascii=False),
        ]
    else:
        final = [structlog.dev.ConsoleRenderer()]

    structlog.configure(
        processors=[*shared, structlog.stdlib.ProcessorFormatter.wrap_for_formatter],
        logger_factory=structlog.stdlib.LoggerFactory(),
        wrapper_class=structlog.stdlib.BoundLogger,
        cache_logger_on_first_use=True,
    )

    formatter = structlog.stdlib.ProcessorFormatter(
        processors=[structlog.stdlib.ProcessorFormatter.remove_processors_meta, *final],
        foreign_pre_chain=shared,
    )
    handler = logging.StreamHandler(stream or sys.stderr)
    handler.setFormatter(formatter)

    level = getattr(logging, log_level.upper(), logging.INFO)
    root_logger = logging.getLogger()
    root_logger.handlers.clear()
    root_logger.addHandler(handler)
    root_logger.setLevel(level)

    for name in _NOISY_LOGGERS:
        logging.getLogger(name).setLevel(max(level, logging.INFO))
