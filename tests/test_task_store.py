"""SqliteTaskStore 单元测试

测试内容：
1. 写操作：插入/覆盖/更新/删除/清除已完成
2. 查询：排序、按象限、区分大小写搜索、即将到期
3. 进程重启后数据完整 + WAL 模式
"""

from datetime import UTC, datetime, timedelta
from pathlib import Path

import aiosqlite
from matrixtodo.models import Priority, Quadrant, Task
from matrixtodo.store import ChangeHub, SqliteTaskStore, create_task_database
from matrixtodo.store.sqlite_init import init_db, verify_wal_mode

BASE_TIME = datetime(2026, 1, 15, 9, 0, tzinfo=UTC)


def make_task(
    task_id: str,
    title: str = "任务",
    quadrant: Quadrant = Quadrant.URGENT_IMPORTANT,
    minutes: int = 0,
    **kwargs,
) -> Task:
    return Task(
        id=task_id,
        title=title,
        quadrant=quadrant,
        created_at=BASE_TIME + timedelta(minutes=minutes),
        **kwargs,
    )


class TestWrites:
    async def test_insert_and_get_by_id(self, store: SqliteTaskStore):
        task = make_task(
            "t1",
            title="Write report",
            description="Q1 numbers",
            due_date=BASE_TIME + timedelta(days=1),
            priority=Priority.HIGH,
        )
        await store.insert_or_replace(task)

        loaded = await store.get_by_id("t1")
        assert loaded == task

    async def test_get_by_id_missing(self, store: SqliteTaskStore):
        assert await store.get_by_id("missing") is None

    async def test_insert_or_replace_upserts(self, store: SqliteTaskStore):
        await store.insert_or_replace(make_task("t1", title="old"))
        await store.insert_or_replace(make_task("t1", title="new"))

        assert await store.count() == 1
        loaded = await store.get_by_id("t1")
        assert loaded is not None
        assert loaded.title == "new"

    async def test_update_existing(self, store: SqliteTaskStore):
        task = make_task("t1")
        await store.insert_or_replace(task)

        changed = await store.update(task.model_copy(update={"is_completed": True}))
        assert changed is True
        loaded = await store.get_by_id("t1")
        assert loaded is not None
        assert loaded.is_completed is True

    async def test_update_missing_is_noop(self, store: SqliteTaskStore, hub: ChangeHub):
        queue = await hub.subscribe("tasks")
        changed = await store.update(make_task("ghost"))
        assert changed is False
        assert await store.count() == 0
        assert queue.empty()

    async def test_delete(self, store: SqliteTaskStore):
        task = make_task("t1")
        await store.insert_or_replace(task)
        assert await store.delete(task) is True
        assert await store.get_by_id("t1") is None
        assert await store.delete(task) is False

    async def test_delete_completed(self, store: SqliteTaskStore):
        await store.insert_or_replace(make_task("done-1", is_completed=True))
        await store.insert_or_replace(make_task("done-2", is_completed=True, minutes=1))
        await store.insert_or_replace(make_task("open", minutes=2))

        assert await store.delete_completed() == 2
        remaining = await store.list_all()
        assert [t.id for t in remaining] == ["open"]
        assert await store.delete_completed() == 0

    async def test_write_broadcasts_after_commit(self, store: SqliteTaskStore, hub: ChangeHub):
        queue = await hub.subscribe("tasks")
        await store.insert_or_replace(make_task("t1"))
        assert queue.get_nowait() == "tasks"


class TestQueries:
    async def test_list_all_newest_first(self, store: SqliteTaskStore):
        await store.insert_or_replace(make_task("old", minutes=0))
        await store.insert_or_replace(make_task("newest", minutes=10))
        await store.insert_or_replace(make_task("middle", minutes=5))

        tasks = await store.get_all().snapshot()
        assert [t.id for t in tasks] == ["newest", "middle", "old"]

    async def test_same_millisecond_newest_inserted_first(self, store: SqliteTaskStore):
        await store.insert_or_replace(make_task("a"))
        await store.insert_or_replace(make_task("b"))
        tasks = await store.list_all()
        assert [t.id for t in tasks] == ["b", "a"]

    async def test_by_quadrant_partitions_all(self, store: SqliteTaskStore):
        quadrants = list(Quadrant)
        for i in range(10):
            await store.insert_or_replace(
                make_task(f"t{i}", quadrant=quadrants[i % 4], minutes=i)
            )

        all_tasks = await store.list_all()
        for quadrant in Quadrant:
            by_quadrant = await store.get_by_quadrant(quadrant).snapshot()
            expected = [t for t in all_tasks if t.quadrant == quadrant]
            assert by_quadrant == expected

    async def test_search_title_or_description(self, store: SqliteTaskStore):
        await store.insert_or_replace(make_task("t1", title="Write report"))
        await store.insert_or_replace(
            make_task("t2", title="Email", description="attach the report", minutes=1)
        )
        await store.insert_or_replace(make_task("t3", title="Gym", minutes=2))

        found = await store.search("report").snapshot()
        assert {t.id for t in found} == {"t1", "t2"}

    async def test_search_is_case_sensitive(self, store: SqliteTaskStore):
        await store.insert_or_replace(make_task("t1", title="Write Report"))

        assert [t.id for t in await store.search_once("Report")] == ["t1"]
        assert await store.search_once("report") == []

    async def test_search_empty_text_matches_all(self, store: SqliteTaskStore):
        await store.insert_or_replace(make_task("t1"))
        await store.insert_or_replace(make_task("t2", minutes=1))
        assert len(await store.search_once("")) == 2

    async def test_upcoming_strictly_after_now_ascending(self, store: SqliteTaskStore):
        now = BASE_TIME
        await store.insert_or_replace(make_task("no-due"))
        await store.insert_or_replace(make_task("past", due_date=now - timedelta(hours=1)))
        await store.insert_or_replace(make_task("exactly-now", due_date=now))
        await store.insert_or_replace(make_task("later", due_date=now + timedelta(days=3)))
        await store.insert_or_replace(make_task("soon", due_date=now + timedelta(hours=2)))

        upcoming = await store.get_upcoming(now).snapshot()
        assert [t.id for t in upcoming] == ["soon", "later"]

    async def test_upcoming_with_clock_reads_time_per_fetch(self, store: SqliteTaskStore):
        current = {"now": BASE_TIME}
        await store.insert_or_replace(make_task("t1", due_date=BASE_TIME + timedelta(days=1)))

        query = store.get_upcoming(lambda: current["now"])
        assert [t.id for t in await query.snapshot()] == ["t1"]

        current["now"] = BASE_TIME + timedelta(days=2)
        assert await query.snapshot() == []


class TestDurability:
    """进程重启后任务不丢失"""

    async def test_data_survives_restart(self, tmp_path: Path):
        db_path = str(tmp_path / "durability.db")

        conn1 = await aiosqlite.connect(db_path)
        await init_db(conn1)
        store1 = SqliteTaskStore(conn1, ChangeHub())
        task = make_task("t1", title="持久性测试任务", due_date=BASE_TIME + timedelta(days=1))
        await store1.insert_or_replace(task)
        await conn1.close()

        conn2 = await aiosqlite.connect(db_path)
        await init_db(conn2)
        store2 = SqliteTaskStore(conn2, ChangeHub())
        assert await store2.get_by_id("t1") == task
        await conn2.close()

    async def test_wal_mode_enabled(self, db_conn: aiosqlite.Connection):
        assert await verify_wal_mode(db_conn) is True

    async def test_create_task_database_creates_parent_dir(self, tmp_path: Path):
        db_path = tmp_path / "nested" / "sqlite" / "todo.db"
        database = await create_task_database(str(db_path))
        try:
            assert db_path.parent.is_dir()
            assert await database.task_store.count() == 0
        finally:
            await database.close()
