"""ChangeHub -- 内存中的表变更广播器

每个订阅者持有一个容量为 1 的 asyncio.Queue。
写操作提交后按表名广播；队列中已有未消费的通知时新的通知被合并，
订阅者被唤醒后总是重新读取最新快照。
"""

import asyncio
from collections import defaultdict


class ChangeHub:
    """表变更广播器 -- 基于 asyncio.Queue 的发布/订阅模式"""

    def __init__(self) -> None:
        # table -> set of asyncio.Queue
        self._subscribers: dict[str, set[asyncio.Queue]] = defaultdict(set)

    async def subscribe(self, table: str) -> asyncio.Queue:
        """订阅指定表的变更通知

        Args:
            table: 表名

        Returns:
            asyncio.Queue 实例，表发生变更时会收到一个通知
        """
        queue: asyncio.Queue = asyncio.Queue(maxsize=1)
        self._subscribers[table].add(queue)
        return queue

    async def unsubscribe(self, table: str, queue: asyncio.Queue) -> None:
        """取消订阅

        Args:
            table: 表名
            queue: 之前订阅时返回的队列
        """
        subscribers = self._subscribers.get(table)
        if subscribers is None:
            return
        subscribers.discard(queue)
        if not subscribers:
            del self._subscribers[table]

    async def broadcast(self, table: str) -> None:
        """通知指定表的所有订阅者

        Args:
            table: 发生变更的表名
        """
        for queue in self._subscribers.get(table, set()):
            try:
                queue.put_nowait(table)
            except asyncio.QueueFull:
                # 已有待处理通知，合并
                pass

    def subscriber_count(self, table: str) -> int:
        """当前订阅者数量"""
        return len(self._subscribers.get(table, ()))
