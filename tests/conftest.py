"""全局 pytest 配置 -- 临时 SQLite 数据库 + Store/Repository fixture"""

from collections.abc import AsyncGenerator
from datetime import UTC, datetime
from pathlib import Path

import aiosqlite
import pytest_asyncio
from matrixtodo.services import TaskRepository
from matrixtodo.store import ChangeHub, SqliteTaskStore
from matrixtodo.store.sqlite_init import init_db


class FakeClock:
    """可手动推进的时钟"""

    def __init__(self, now: datetime) -> None:
        self.now = now

    def __call__(self) -> datetime:
        return self.now


@pytest_asyncio.fixture
async def tmp_db_path(tmp_path: Path) -> Path:
    """提供临时 SQLite 数据库路径"""
    return tmp_path / "test.db"


@pytest_asyncio.fixture
async def db_conn(tmp_db_path: Path) -> AsyncGenerator[aiosqlite.Connection, None]:
    """提供已初始化的临时 SQLite 数据库连接"""
    conn = await aiosqlite.connect(str(tmp_db_path))
    await init_db(conn)
    yield conn
    await conn.close()


@pytest_asyncio.fixture
async def hub() -> ChangeHub:
    return ChangeHub()


@pytest_asyncio.fixture
async def store(db_conn: aiosqlite.Connection, hub: ChangeHub) -> SqliteTaskStore:
    return SqliteTaskStore(db_conn, hub)


@pytest_asyncio.fixture
async def clock() -> FakeClock:
    return FakeClock(datetime(2026, 1, 15, 9, 0, tzinfo=UTC))


@pytest_asyncio.fixture
async def repository(store: SqliteTaskStore, clock: FakeClock) -> TaskRepository:
    return TaskRepository(store, clock=clock)
