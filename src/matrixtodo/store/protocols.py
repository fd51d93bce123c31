"""Store Protocol 接口定义

定义 TaskStore 的抽象接口，使用 Python Protocol 实现结构化子类型（duck typing），
便于测试中替换为假实现。
"""

from collections.abc import Callable
from datetime import datetime
from typing import Protocol

from ..models.enums import Quadrant
from ..models.task import Task
from .live_query import LiveQuery


class TaskStore(Protocol):
    """Task 存储接口"""

    def get_all(self) -> LiveQuery[Task]:
        """全部任务，按创建时间倒序"""
        ...

    def get_by_quadrant(self, quadrant: Quadrant) -> LiveQuery[Task]:
        """指定象限的任务，按创建时间倒序"""
        ...

    async def insert_or_replace(self, task: Task) -> None:
        """按 id 插入或覆盖"""
        ...

    async def update(self, task: Task) -> bool:
        """覆盖已存在的记录，id 不存在时返回 False"""
        ...

    async def delete(self, task: Task) -> bool:
        """删除记录，id 不存在时返回 False"""
        ...

    async def delete_completed(self) -> int:
        """删除全部已完成任务，返回删除数量"""
        ...

    async def get_by_id(self, task_id: str) -> Task | None:
        """根据 id 查询任务"""
        ...

    def search(self, text: str) -> LiveQuery[Task]:
        """标题或描述包含 text（区分大小写）的任务"""
        ...

    def get_upcoming(self, now: datetime | Callable[[], datetime]) -> LiveQuery[Task]:
        """截止时间晚于 now 的任务，按截止时间升序；now 为函数时每次查询重新取值"""
        ...

    async def list_upcoming(self, now: datetime) -> list[Task]:
        """一次性查询截止时间晚于 now 的任务"""
        ...
