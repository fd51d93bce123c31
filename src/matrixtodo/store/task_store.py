"""TaskStore SQLite 实现

所有写操作在同一连接上提交，失败时回滚并重新抛出；
提交成功且确有行变更时，通过 ChangeHub 通知 tasks 表的 live query。
"""

from collections.abc import Callable
from datetime import datetime

import aiosqlite

from ..models.enums import Priority, Quadrant
from ..models.task import Task, from_epoch_ms, to_epoch_ms
from .change_hub import ChangeHub
from .live_query import LiveQuery

TASKS_TABLE = "tasks"

_COLUMNS = (
    "id, title, description, is_completed, quadrant, created_at, due_date, priority"
)

# 同一毫秒内创建的任务按插入顺序倒排
_NEWEST_FIRST = "ORDER BY created_at DESC, rowid DESC"


class SqliteTaskStore:
    """TaskStore 的 SQLite 实现"""

    def __init__(self, conn: aiosqlite.Connection, hub: ChangeHub) -> None:
        self._conn = conn
        self._hub = hub

    # ---- live queries ----

    def get_all(self) -> LiveQuery[Task]:
        """全部任务，按创建时间倒序"""
        return LiveQuery(self._hub, TASKS_TABLE, self.list_all, name="all")

    def get_by_quadrant(self, quadrant: Quadrant) -> LiveQuery[Task]:
        """指定象限的任务，按创建时间倒序"""
        return LiveQuery(
            self._hub,
            TASKS_TABLE,
            lambda: self.list_by_quadrant(quadrant),
            name=f"quadrant:{quadrant.value}",
        )

    def search(self, text: str) -> LiveQuery[Task]:
        """标题或描述包含 text 的任务（区分大小写的子串匹配）"""
        return LiveQuery(
            self._hub,
            TASKS_TABLE,
            lambda: self.search_once(text),
            name="search",
        )

    def get_upcoming(self, now: datetime | Callable[[], datetime]) -> LiveQuery[Task]:
        """截止时间晚于 now 的任务，按截止时间升序

        now 为函数时，每次重新查询都会重新取当前时间。
        """
        clock = now if callable(now) else (lambda: now)
        return LiveQuery(
            self._hub,
            TASKS_TABLE,
            lambda: self.list_upcoming(clock()),
            name="upcoming",
        )

    # ---- one-shot reads ----

    async def list_all(self) -> list[Task]:
        """查询全部任务，按创建时间倒序"""
        return await self._fetch_all(f"SELECT {_COLUMNS} FROM tasks {_NEWEST_FIRST}")

    async def list_by_quadrant(self, quadrant: Quadrant) -> list[Task]:
        """查询指定象限的任务，按创建时间倒序"""
        return await self._fetch_all(
            f"SELECT {_COLUMNS} FROM tasks WHERE quadrant = ? {_NEWEST_FIRST}",
            (Quadrant(quadrant).value,),
        )

    async def search_once(self, text: str) -> list[Task]:
        """子串搜索；instr 区分大小写，LIKE 不区分，所以这里不用 LIKE"""
        return await self._fetch_all(
            f"""
            SELECT {_COLUMNS} FROM tasks
            WHERE instr(title, ?) > 0 OR instr(description, ?) > 0
            {_NEWEST_FIRST}
            """,
            (text, text),
        )

    async def list_upcoming(self, now: datetime) -> list[Task]:
        """查询截止时间严格晚于 now 的任务"""
        return await self._fetch_all(
            f"""
            SELECT {_COLUMNS} FROM tasks
            WHERE due_date IS NOT NULL AND due_date > ?
            ORDER BY due_date ASC
            """,
            (to_epoch_ms(now),),
        )

    async def get_by_id(self, task_id: str) -> Task | None:
        """根据 id 查询任务"""
        cursor = await self._conn.execute(
            f"SELECT {_COLUMNS} FROM tasks WHERE id = ?",
            (task_id,),
        )
        row = await cursor.fetchone()
        if row is None:
            return None
        return self._row_to_task(row)

    async def count(self) -> int:
        """任务总数"""
        cursor = await self._conn.execute("SELECT COUNT(*) FROM tasks")
        row = await cursor.fetchone()
        return int(row[0]) if row else 0

    # ---- writes ----

    async def insert_or_replace(self, task: Task) -> None:
        """按 id 插入或覆盖任务记录"""
        await self._write(
            f"INSERT OR REPLACE INTO tasks ({_COLUMNS}) VALUES (?, ?, ?, ?, ?, ?, ?, ?)",
            self._task_to_params(task),
        )

    async def update(self, task: Task) -> bool:
        """覆盖已存在的任务记录

        Returns:
            False 表示 id 不存在，未做任何修改
        """
        params = self._task_to_params(task)
        changed = await self._write(
            """
            UPDATE tasks
            SET title = ?, description = ?, is_completed = ?, quadrant = ?,
                created_at = ?, due_date = ?, priority = ?
            WHERE id = ?
            """,
            (*params[1:], params[0]),
        )
        return changed > 0

    async def delete(self, task: Task) -> bool:
        """删除任务记录，id 不存在时返回 False"""
        changed = await self._write("DELETE FROM tasks WHERE id = ?", (task.id,))
        return changed > 0

    async def delete_completed(self) -> int:
        """删除全部已完成任务，返回删除数量"""
        return await self._write("DELETE FROM tasks WHERE is_completed = 1", ())

    async def _write(self, sql: str, params: tuple) -> int:
        """执行单条写语句并提交，返回受影响行数"""
        try:
            cursor = await self._conn.execute(sql, params)
            changed = cursor.rowcount
            await self._conn.commit()
        except Exception:
            await self._conn.rollback()
            raise

        if changed > 0:
            await self._hub.broadcast(TASKS_TABLE)
        return changed

    async def _fetch_all(self, sql: str, params: tuple = ()) -> list[Task]:
        cursor = await self._conn.execute(sql, params)
        rows = await cursor.fetchall()
        return [self._row_to_task(row) for row in rows]

    @staticmethod
    def _task_to_params(task: Task) -> tuple:
        """将 Task 模型转换为按 _COLUMNS 排列的参数"""
        return (
            task.id,
            task.title,
            task.description,
            1 if task.is_completed else 0,
            task.quadrant.value,
            to_epoch_ms(task.created_at),
            to_epoch_ms(task.due_date) if task.due_date is not None else None,
            int(task.priority),
        )

    @staticmethod
    def _row_to_task(row) -> Task:
        """将数据库行转换为 Task 模型"""
        return Task(
            id=row[0],
            title=row[1],
            description=row[2],
            is_completed=bool(row[3]),
            quadrant=Quadrant(row[4]),
            created_at=from_epoch_ms(row[5]),
            due_date=from_epoch_ms(row[6]) if row[6] is not None else None,
            priority=Priority(row[7]),
        )
