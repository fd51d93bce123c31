"""TaskRepository -- 任务业务规则 + Store 之上的任务 API

- 创建时校验标题非空
- 所有变更操作返回 Result，不向调用方抛出异常
- 存储层异常统一包装为 StorageError
"""

from collections.abc import Callable
from datetime import UTC, datetime

import structlog

from ..exceptions import StorageError, TodoError, TodoNotFoundError
from ..models import (
    Priority,
    Quadrant,
    Result,
    Task,
    coerce_quadrant,
    create_task,
)
from ..store.live_query import LiveQuery
from ..store.protocols import TaskStore

log = structlog.get_logger()


def _utc_now() -> datetime:
    return datetime.now(UTC)


class TaskRepository:
    """任务仓库

    进程内只应构建一个实例，并显式传给所有使用方；
    自身除 Store 引用和时钟外不持有可变状态。
    """

    def __init__(
        self,
        store: TaskStore,
        clock: Callable[[], datetime] | None = None,
    ) -> None:
        self._store = store
        self._clock = clock or _utc_now

    @property
    def tasks(self) -> LiveQuery[Task]:
        """全部任务的 live query"""
        return self._store.get_all()

    def get_all(self) -> LiveQuery[Task]:
        return self._store.get_all()

    def get_by_quadrant(self, quadrant: Quadrant) -> LiveQuery[Task]:
        return self._store.get_by_quadrant(quadrant)

    def search_tasks(self, text: str) -> LiveQuery[Task]:
        return self._store.search(text)

    def get_upcoming(self) -> LiveQuery[Task]:
        """截止时间晚于当前时钟的任务；每次重新查询都会重新读取时钟"""
        return self._store.get_upcoming(self._clock)

    async def get_task(self, task_id: str) -> Task | None:
        return await self._store.get_by_id(task_id)

    async def add_task(
        self,
        title: str,
        description: str = "",
        quadrant: Quadrant | str = Quadrant.URGENT_IMPORTANT,
        due_date: datetime | None = None,
        priority: Priority | int = Priority.MEDIUM,
    ) -> Result[Task]:
        """创建任务

        Returns:
            成功时为新任务；标题为空时为 EmptyTitleError，且不写入任何记录
        """
        try:
            task = create_task(
                title=title,
                description=description,
                quadrant=quadrant,
                due_date=due_date,
                priority=priority,
                now=self._clock(),
            )
            await self._store.insert_or_replace(task)
        except Exception as e:
            return self._failure("add_task", e)

        log.info("task_added", task_id=task.id, quadrant=task.quadrant.value)
        return Result.success(task)

    async def update_task(self, task: Task) -> Result[Task]:
        """按原样持久化任务（不重新校验标题）"""
        try:
            if not await self._store.update(task):
                return self._failure("update_task", TodoNotFoundError(task.id))
        except Exception as e:
            return self._failure("update_task", e)

        log.info("task_updated", task_id=task.id)
        return Result.success(task)

    async def toggle_completion(self, task_id: str) -> Result[Task]:
        """翻转完成状态"""
        try:
            task = await self._store.get_by_id(task_id)
            if task is None:
                return self._failure("toggle_completion", TodoNotFoundError(task_id))

            updated = task.model_copy(update={"is_completed": not task.is_completed})
            if not await self._store.update(updated):
                # 读取与写入之间被删除
                return self._failure("toggle_completion", TodoNotFoundError(task_id))
        except Exception as e:
            return self._failure("toggle_completion", e)

        log.info(
            "task_completion_toggled",
            task_id=task_id,
            is_completed=updated.is_completed,
        )
        return Result.success(updated)

    async def move_to_quadrant(
        self,
        task_id: str,
        new_quadrant: Quadrant | str,
    ) -> Result[Task]:
        """移动任务到另一个象限"""
        try:
            quadrant = coerce_quadrant(new_quadrant)
            task = await self._store.get_by_id(task_id)
            if task is None:
                return self._failure("move_to_quadrant", TodoNotFoundError(task_id))

            updated = task.model_copy(update={"quadrant": quadrant})
            if not await self._store.update(updated):
                return self._failure("move_to_quadrant", TodoNotFoundError(task_id))
        except Exception as e:
            return self._failure("move_to_quadrant", e)

        log.info(
            "task_moved",
            task_id=task_id,
            from_quadrant=task.quadrant.value,
            to_quadrant=quadrant.value,
        )
        return Result.success(updated)

    async def delete_task(self, task_id: str) -> Result[None]:
        """删除任务"""
        try:
            task = await self._store.get_by_id(task_id)
            if task is None:
                return self._failure("delete_task", TodoNotFoundError(task_id))

            await self._store.delete(task)
        except Exception as e:
            return self._failure("delete_task", e)

        log.info("task_deleted", task_id=task_id)
        return Result.success(None)

    async def clear_completed(self) -> Result[int]:
        """删除全部已完成任务，返回删除数量"""
        try:
            deleted = await self._store.delete_completed()
        except Exception as e:
            return self._failure("clear_completed", e)

        log.info("completed_tasks_cleared", deleted=deleted)
        return Result.success(deleted)

    @staticmethod
    def _failure(operation: str, error: Exception) -> Result:
        """领域异常原样返回，其他异常包装为 StorageError"""
        if isinstance(error, TodoError):
            log.info(
                "task_operation_rejected",
                operation=operation,
                error_type=type(error).__name__,
            )
            return Result.failure(error)

        log.error(
            "task_storage_failed",
            operation=operation,
            error_type=type(error).__name__,
        )
        return Result.failure(StorageError(error))
