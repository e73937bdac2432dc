"""NotificationFanout -- 通知构建、落库与推送

契约：先落库、后推送。落库在事务单元内完成（可由调用方的生命周期单元承载），
推送在提交之后并发执行；单个接收人推送失败只记录日志，不重试、不影响其他接收人。
"""

import asyncio
from collections.abc import Callable
from contextlib import AbstractAsyncContextManager
from datetime import UTC, datetime

import structlog
from ulid import ULID

from taskhub.core.config import get_push_concurrency
from taskhub.core.exceptions import ForbiddenError, NotFoundError
from taskhub.core.models import Notification
from taskhub.core.store.protocols import NotificationStore

from .push_hub import PushTransport

log = structlog.get_logger()


def assignment_message(task_title: str) -> str:
    """指派通知文本"""
    return f"New task: {task_title} assigned"


class NotificationFanout:
    """一个逻辑事件 -> 多条独立的按接收人通知"""

    def __init__(
        self,
        store: NotificationStore,
        unit_factory: Callable[[], AbstractAsyncContextManager],
        transport: PushTransport | None = None,
        concurrency: int | None = None,
        read_factory: Callable[[], AbstractAsyncContextManager] | None = None,
    ) -> None:
        """
        Args:
            store: 通知存储
            unit_factory: 事务单元工厂（通常为 StoreGroup.atomic）
            transport: 推送通道，None 表示只落库
            concurrency: 单次扇出最大并发推送数
            read_factory: 只读单元工厂（通常为 StoreGroup.read），缺省复用 unit_factory
        """
        self._store = store
        self._unit_factory = unit_factory
        self._read_factory = read_factory or unit_factory
        self._transport = transport
        self._concurrency = concurrency or get_push_concurrency()

    # ---- 构建 / 落库 / 推送 三段 ----

    @staticmethod
    def build(
        recipient_id: str,
        message: str,
        task_id: str | None = None,
        actor_id: str | None = None,
    ) -> Notification | None:
        """构建通知记录；接收人即操作者本人时返回 None（自我通知丢弃）"""
        if actor_id is not None and recipient_id == actor_id:
            return None
        return Notification(
            notification_id=str(ULID()),
            user_id=recipient_id,
            message=message,
            task_id=task_id,
            created_at=datetime.now(UTC),
        )

    async def stage(self, notifications: list[Notification]) -> None:
        """在当前事务单元内批量写入（不提交）"""
        if notifications:
            await self._store.add_notifications(notifications)

    async def push_all(self, notifications: list[Notification]) -> int:
        """提交后并发推送，返回推送成功的条数

        并发受 semaphore 限制；完成顺序不定。
        """
        if self._transport is None or not notifications:
            return 0

        semaphore = asyncio.Semaphore(self._concurrency)

        async def _push_one(notification: Notification) -> bool:
            async with semaphore:
                try:
                    await self._transport.push(
                        notification.user_id, notification.to_push_payload()
                    )
                    return True
                except Exception as e:
                    await log.awarning(
                        "notification_push_failed",
                        notification_id=notification.notification_id,
                        user_id=notification.user_id,
                        task_id=notification.task_id,
                        error_type=type(e).__name__,
                        error=str(e),
                    )
                    return False

        results = await asyncio.gather(
            *(_push_one(n) for n in notifications), return_exceptions=True
        )
        return sum(1 for r in results if r is True)

    async def _deliver(self, notifications: list[Notification]) -> list[Notification]:
        """独立单元：批量落库并提交，然后推送"""
        if not notifications:
            return []
        async with self._unit_factory():
            await self.stage(notifications)
        await self.push_all(notifications)
        return notifications

    # ---- 入口 ----

    async def notify_assignment(
        self,
        recipient_id: str,
        task_title: str,
        task_id: str,
        actor_id: str | None = None,
    ) -> Notification | None:
        """指派通知：单条，推送给新执行人"""
        notification = self.build(
            recipient_id, assignment_message(task_title), task_id, actor_id
        )
        if notification is None:
            return None
        await self._deliver([notification])
        return notification

    async def notify_mentions(
        self,
        messages: dict[str, str],
        task_id: str | None = None,
        actor_id: str | None = None,
    ) -> list[Notification]:
        """@提及扇出：一次批量写入 N 条，再逐个独立推送

        Args:
            messages: 接收人 ID -> 通知文本
            task_id: 关联任务
            actor_id: 评论作者（作为接收人时丢弃）

        Returns:
            已落库的通知列表
        """
        notifications = [
            n
            for recipient_id, message in messages.items()
            if (n := self.build(recipient_id, message, task_id, actor_id)) is not None
        ]
        return await self._deliver(notifications)

    async def notify_lifecycle_event(
        self,
        recipient_id: str,
        message: str,
        task_id: str | None = None,
        actor_id: str | None = None,
    ) -> Notification | None:
        """生命周期事件通知（接受 / 拒绝 / 退回修改等）"""
        notification = self.build(recipient_id, message, task_id, actor_id)
        if notification is None:
            return None
        await self._deliver([notification])
        return notification

    # ---- 收件箱 ----

    async def list_for_user(
        self, user_id: str, unread_only: bool = False
    ) -> list[Notification]:
        """用户通知列表，最新在前"""
        async with self._read_factory():
            return await self._store.list_for_user(user_id, unread_only=unread_only)

    async def unread_count(self, user_id: str) -> int:
        async with self._read_factory():
            return await self._store.count_unread(user_id)

    async def mark_read(
        self, notification_id: str, user_id: str | None = None
    ) -> Notification:
        """置为已读

        Raises:
            NotFoundError: 通知不存在
            ForbiddenError: 指定了 user_id 且不是接收人
        """
        async with self._unit_factory():
            notification = await self._store.get_notification(notification_id)
            if notification is None:
                raise NotFoundError("notification", notification_id)
            if user_id is not None and notification.user_id != user_id:
                raise ForbiddenError(
                    f"User {user_id} is not the recipient of {notification_id}",
                    reason=ForbiddenError.NOT_RECIPIENT,
                )
            await self._store.mark_read(notification_id)
        return notification.model_copy(update={"is_read": True})
