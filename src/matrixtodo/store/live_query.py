"""LiveQuery -- 持续更新的只读查询

stream() 订阅后立即推送当前快照，之后每次收到所属表的变更通知
都重新查询，结果与上一次推送不同才再次推送。
迭代器关闭或所在 task 被取消时自动取消订阅。
"""

from collections.abc import AsyncIterator, Awaitable, Callable
from typing import Generic, TypeVar

import structlog

from .change_hub import ChangeHub

log = structlog.get_logger()

T = TypeVar("T")


class LiveQuery(Generic[T]):
    """绑定到一张表的可订阅查询"""

    def __init__(
        self,
        hub: ChangeHub,
        table: str,
        fetch: Callable[[], Awaitable[list[T]]],
        name: str = "",
    ) -> None:
        self._hub = hub
        self._table = table
        self._fetch = fetch
        self.name = name or table

    async def snapshot(self) -> list[T]:
        """一次性读取当前结果"""
        return await self._fetch()

    async def stream(self) -> AsyncIterator[list[T]]:
        """推送初始快照，之后在结果变化时推送新快照"""
        # 先订阅再读取，避免丢失两者之间的写入
        queue = await self._hub.subscribe(self._table)
        log.debug("live_query_subscribed", query=self.name)
        try:
            last = await self._fetch()
            yield last
            while True:
                await queue.get()
                current = await self._fetch()
                if current == last:
                    continue
                last = current
                yield current
        finally:
            await self._hub.unsubscribe(self._table, queue)
            log.debug("live_query_unsubscribed", query=self.name)

    def __aiter__(self) -> AsyncIterator[list[T]]:
        return self.stream()
