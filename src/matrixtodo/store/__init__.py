"""matrixtodo Store -- SQLite 持久化实现

提供工厂函数创建共享数据库连接的 Store 实例组。
"""

from pathlib import Path

import aiosqlite
import structlog

from .change_hub import ChangeHub
from .live_query import LiveQuery
from .protocols import TaskStore
from .sqlite_init import init_db, verify_wal_mode
from .task_store import TASKS_TABLE, SqliteTaskStore

log = structlog.get_logger()


class TaskDatabase:
    """数据库实例组 -- 连接 + 变更广播器 + TaskStore"""

    def __init__(self, conn: aiosqlite.Connection, hub: ChangeHub) -> None:
        self.conn = conn
        self.hub = hub
        self.task_store = SqliteTaskStore(conn, hub)

    async def close(self) -> None:
        """关闭数据库连接"""
        await self.conn.close()


async def create_task_database(db_path: str) -> TaskDatabase:
    """打开（必要时创建）数据库并完成初始化

    Args:
        db_path: SQLite 数据库文件路径

    Returns:
        TaskDatabase 实例
    """
    # 确保数据库目录存在
    Path(db_path).parent.mkdir(parents=True, exist_ok=True)

    conn = await aiosqlite.connect(db_path)
    await init_db(conn)

    database = TaskDatabase(conn, ChangeHub())
    log.info(
        "task_database_ready",
        db_path=db_path,
        total=await database.task_store.count(),
    )
    return database


__all__ = [
    "TaskDatabase",
    "create_task_database",
    "ChangeHub",
    "LiveQuery",
    "TaskStore",
    "SqliteTaskStore",
    "TASKS_TABLE",
    "init_db",
    "verify_wal_mode",
]
