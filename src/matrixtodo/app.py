"""应用装配 -- 显式依赖注入入口

进程启动时构建唯一的数据库连接、TaskRepository 与 ViewStateAggregator，
通过 AppContext 传给所有使用方；退出时按相反顺序清理。
"""

from collections.abc import AsyncGenerator
from contextlib import asynccontextmanager
from dataclasses import dataclass

import structlog

from .config import AppConfig, load_config
from .logging_config import setup_logging
from .services import TaskRepository, ViewStateAggregator
from .store import TaskDatabase, create_task_database

log = structlog.get_logger()


@dataclass
class AppContext:
    """已装配的应用组件"""

    config: AppConfig
    database: TaskDatabase
    repository: TaskRepository
    view_state: ViewStateAggregator


@asynccontextmanager
async def open_app(
    config: AppConfig | None = None,
    configure_logging: bool = True,
) -> AsyncGenerator[AppContext, None]:
    """应用生命周期管理：启动时初始化 DB 和服务，退出时清理连接"""
    config = config or load_config()
    if configure_logging:
        setup_logging(config.log_format, config.log_level)

    database = await create_task_database(config.db_path)
    repository = TaskRepository(database.task_store)
    view_state = ViewStateAggregator(repository, stop_timeout_s=config.stop_timeout_s)
    log.info(
        "app_started",
        db_path=config.db_path,
        stop_timeout_s=config.stop_timeout_s,
    )

    try:
        yield AppContext(
            config=config,
            database=database,
            repository=repository,
            view_state=view_state,
        )
    finally:
        await view_state.close()
        await database.close()
        log.info("app_stopped")
