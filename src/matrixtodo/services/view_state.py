"""ViewStateAggregator -- 聚合视图状态

订阅四个象限的 live query，结合搜索词、是否显示已完成、选中截止日期，
在任一输入变化时重新计算 AggregatedViewState 并推送给订阅者。

上游订阅按引用计数管理：
1. 第一个订阅者到来时启动四个象限的收集 task
2. 订阅者归零后等待 stop_timeout_s 秒再停止上游
3. 等待期间有新订阅者则取消停止
4. 象限查询失败会结束对应的收集 task，下一次 subscribe 时整体重启
"""

import asyncio
from collections.abc import AsyncIterator
from datetime import datetime

import structlog

from ..config import DEFAULT_STOP_TIMEOUT_S
from ..exceptions import (
    EmptyTitleError,
    InvalidPriorityError,
    InvalidQuadrantError,
    TodoNotFoundError,
)
from ..models import (
    AggregatedViewState,
    Priority,
    Quadrant,
    QuadrantState,
    Result,
    Task,
    normalize_timestamp,
    quadrant_title,
)
from ..store.live_query import LiveQuery
from .task_repository import TaskRepository

log = structlog.get_logger()

UNEXPECTED_ERROR_MESSAGE = "An unexpected error occurred"


def error_message(error: Exception) -> str:
    """将失败结果翻译为用户可读的提示"""
    if isinstance(error, EmptyTitleError):
        return "Title cannot be empty"
    if isinstance(error, TodoNotFoundError):
        return "Todo not found"
    if isinstance(error, InvalidQuadrantError):
        return "Invalid quadrant"
    if isinstance(error, InvalidPriorityError):
        return "Invalid priority"
    return UNEXPECTED_ERROR_MESSAGE


def _offer(queue: asyncio.Queue, state: AggregatedViewState) -> None:
    """队列只保留最新状态"""
    if queue.full():
        queue.get_nowait()
    queue.put_nowait(state)


class ViewStateAggregator:
    """视图状态聚合器"""

    def __init__(
        self,
        repository: TaskRepository,
        stop_timeout_s: float = DEFAULT_STOP_TIMEOUT_S,
    ) -> None:
        self._repository = repository
        self._stop_timeout_s = stop_timeout_s

        self._search_query = ""
        self._show_completed = True
        self._selected_due_date: datetime | None = None
        self._error: str | None = None

        # 各象限最近一次快照；停止上游后保留
        self._snapshots: dict[Quadrant, list[Task]] = {}
        self._state = AggregatedViewState(is_loading=True)

        self._subscribers: set[asyncio.Queue] = set()
        self._collectors: list[asyncio.Task] = []
        self._stop_task: asyncio.Task | None = None

    # ---- 状态读取 ----

    @property
    def state(self) -> AggregatedViewState:
        """当前聚合状态"""
        return self._state

    @property
    def search_query(self) -> str:
        return self._search_query

    @property
    def show_completed(self) -> bool:
        return self._show_completed

    @property
    def selected_due_date(self) -> datetime | None:
        return self._selected_due_date

    @property
    def is_active(self) -> bool:
        """上游 live query 是否在运行；任一象限的收集 task 已结束即视为停止"""
        return bool(self._collectors) and not any(t.done() for t in self._collectors)

    @property
    def subscriber_count(self) -> int:
        return len(self._subscribers)

    # ---- 订阅管理 ----

    async def subscribe(self) -> asyncio.Queue:
        """订阅状态更新

        Returns:
            asyncio.Queue 实例，立即包含当前状态，之后只保留最新状态
        """
        queue: asyncio.Queue = asyncio.Queue(maxsize=1)
        queue.put_nowait(self._state)
        self._subscribers.add(queue)

        if self._stop_task is not None:
            self._stop_task.cancel()
            self._stop_task = None
        if not self.is_active:
            # 清理因查询失败而结束的收集 task 后重新启动
            await self._stop_upstream()
            self._start_upstream()
        return queue

    async def unsubscribe(self, queue: asyncio.Queue) -> None:
        """取消订阅；订阅者归零时启动停止计时"""
        self._subscribers.discard(queue)
        if not self._subscribers and self._collectors and self._stop_task is None:
            self._stop_task = asyncio.create_task(self._stop_after_timeout())

    async def states(self) -> AsyncIterator[AggregatedViewState]:
        """以异步迭代器形式消费状态更新"""
        queue = await self.subscribe()
        try:
            while True:
                yield await queue.get()
        finally:
            await self.unsubscribe(queue)

    async def close(self) -> None:
        """所属作用域结束：停止上游并清理订阅"""
        if self._stop_task is not None:
            self._stop_task.cancel()
            self._stop_task = None
        self._subscribers.clear()
        await self._stop_upstream()

    def _start_upstream(self) -> None:
        log.debug("view_state_upstream_started")
        self._collectors = [
            asyncio.create_task(self._collect(quadrant), name=f"collect-{quadrant.value}")
            for quadrant in Quadrant
        ]

    async def _stop_after_timeout(self) -> None:
        await asyncio.sleep(self._stop_timeout_s)
        self._stop_task = None
        await self._stop_upstream()

    async def _stop_upstream(self) -> None:
        collectors, self._collectors = self._collectors, []
        for task in collectors:
            task.cancel()
        if collectors:
            await asyncio.gather(*collectors, return_exceptions=True)
            log.debug("view_state_upstream_stopped")

    async def _collect(self, quadrant: Quadrant) -> None:
        """持续接收单个象限的快照"""
        try:
            async for tasks in self._repository.get_by_quadrant(quadrant).stream():
                self._snapshots[quadrant] = tasks
                self._recompute()
        except Exception as e:
            log.error(
                "quadrant_stream_failed",
                quadrant=quadrant.value,
                error_type=type(e).__name__,
            )
            self._error = UNEXPECTED_ERROR_MESSAGE
            self._recompute(force=True)

    # ---- 派生状态计算 ----

    def _visible(self, tasks: list[Task]) -> list[Task]:
        """按搜索词、完成状态、截止日期过滤，再按截止时间排序"""
        query = self._search_query
        due_limit = self._selected_due_date
        visible = [
            task
            for task in tasks
            if (query in task.title or query in task.description)
            and (self._show_completed or not task.is_completed)
            and (
                due_limit is None
                or (task.due_date is not None and task.due_date <= due_limit)
            )
        ]
        # 无截止时间的排在最后；sorted 稳定，同截止时间保持创建时间倒序
        return sorted(
            visible,
            key=lambda task: (task.due_date is None, task.due_date or datetime.min),
        )

    def _recompute(self, force: bool = False) -> None:
        loaded = all(quadrant in self._snapshots for quadrant in Quadrant)
        quadrants = [
            QuadrantState(
                quadrant=quadrant,
                title=quadrant_title(quadrant),
                tasks=self._visible(self._snapshots[quadrant]) if loaded else [],
            )
            for quadrant in Quadrant
        ]
        state = AggregatedViewState(
            quadrants=quadrants,
            is_loading=not loaded,
            error=self._error,
        )
        if state == self._state and not force:
            return
        self._state = state
        for queue in self._subscribers:
            _offer(queue, state)

    # ---- 过滤条件 ----

    def set_search_query(self, query: str) -> None:
        self._search_query = query
        self._recompute()

    def toggle_show_completed(self) -> None:
        self._show_completed = not self._show_completed
        self._recompute()

    def set_selected_due_date(self, due_date: datetime | None) -> None:
        """只显示截止时间不晚于 due_date 的任务；None 取消过滤"""
        self._selected_due_date = (
            normalize_timestamp(due_date) if due_date is not None else None
        )
        self._recompute()

    def clear_error(self) -> None:
        self._error = None
        self._recompute()

    # ---- 用户操作 ----

    async def add_task(
        self,
        title: str,
        description: str = "",
        quadrant: Quadrant | str = Quadrant.URGENT_IMPORTANT,
        due_date: datetime | None = None,
        priority: Priority | int = Priority.MEDIUM,
    ) -> Result[Task]:
        result = await self._repository.add_task(
            title, description, quadrant, due_date, priority
        )
        return self._handle(result)

    async def update_task(self, task: Task) -> Result[Task]:
        return self._handle(await self._repository.update_task(task))

    async def toggle_completion(self, task_id: str) -> Result[Task]:
        return self._handle(await self._repository.toggle_completion(task_id))

    async def move_to_quadrant(
        self,
        task_id: str,
        new_quadrant: Quadrant | str,
    ) -> Result[Task]:
        return self._handle(
            await self._repository.move_to_quadrant(task_id, new_quadrant)
        )

    async def delete_task(self, task_id: str) -> Result[None]:
        return self._handle(await self._repository.delete_task(task_id))

    async def clear_completed(self) -> Result[int]:
        return self._handle(await self._repository.clear_completed())

    def search_tasks(self) -> LiveQuery[Task]:
        """当前搜索词对应的 live query"""
        return self._repository.search_tasks(self._search_query)

    def get_upcoming(self) -> LiveQuery[Task]:
        return self._repository.get_upcoming()

    def _handle(self, result: Result) -> Result:
        """失败时写入错误提示，每次调用都推送一次"""
        if result.is_failure:
            self._error = error_message(result.error)
            self._recompute(force=True)
        return result
