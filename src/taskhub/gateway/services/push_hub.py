"""PushHub -- 内存中按用户的通知推送器

每个订阅者持有一个 asyncio.Queue，支持 subscribe/unsubscribe/push。
满足 PushTransport 协议，SSE 路由消费队列把通知推给已连接的客户端。
"""

import asyncio
from collections import defaultdict
from typing import Any, Protocol

import structlog

from taskhub.core.config import PUSH_QUEUE_MAXSIZE

log = structlog.get_logger()


class PushTransport(Protocol):
    """推送通道接口：push(user_id, payload)

    任何传输（WebSocket、SSE、消息队列）都可实现；失败时抛出异常。
    """

    async def push(self, user_id: str, payload: dict[str, Any]) -> int:
        """推送 payload 给指定用户，返回送达的连接数"""
        ...


class PushHub:
    """按用户的发布/订阅推送器 -- 基于 asyncio.Queue"""

    def __init__(self, queue_maxsize: int = PUSH_QUEUE_MAXSIZE) -> None:
        # user_id -> set of asyncio.Queue
        self._subscribers: dict[str, set[asyncio.Queue]] = defaultdict(set)
        self._queue_maxsize = queue_maxsize

    async def subscribe(self, user_id: str) -> asyncio.Queue:
        """订阅指定用户的通知流

        Args:
            user_id: 要订阅的用户 ID

        Returns:
            asyncio.Queue 实例，新通知会被推送到此队列
        """
        queue: asyncio.Queue = asyncio.Queue(maxsize=self._queue_maxsize)
        self._subscribers[user_id].add(queue)
        return queue

    async def unsubscribe(self, user_id: str, queue: asyncio.Queue) -> None:
        """取消订阅

        Args:
            user_id: 用户 ID
            queue: 之前订阅时返回的队列
        """
        self._subscribers[user_id].discard(queue)
        if not self._subscribers[user_id]:
            del self._subscribers[user_id]

    def subscriber_count(self, user_id: str) -> int:
        """当前用户的在线连接数"""
        return len(self._subscribers.get(user_id, ()))

    async def push(self, user_id: str, payload: dict[str, Any]) -> int:
        """向指定用户的所有连接推送 payload

        用户离线时返回 0（通知已落库，上线后可查询）。

        Args:
            user_id: 接收人用户 ID
            payload: 推送内容

        Returns:
            成功入队的连接数
        """
        delivered = 0
        dead_queues = []
        for queue in self._subscribers.get(user_id, set()):
            try:
                queue.put_nowait(payload)
                delivered += 1
            except asyncio.QueueFull:
                dead_queues.append(queue)

        # 清理已满的队列（消费过慢的连接）
        for q in dead_queues:
            self._subscribers[user_id].discard(q)
            log.warning("push_subscriber_dropped", user_id=user_id)
        if user_id in self._subscribers and not self._subscribers[user_id]:
            del self._subscribers[user_id]

        return delivered
