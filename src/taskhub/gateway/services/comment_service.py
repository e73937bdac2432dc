"""CommentService -- 评论提交与 @提及扇出

评论不经过 TaskLifecycle：校验 -> 解析提及 -> 评论落库（独立单元）
-> NotificationFanout.notify_mentions（批量落库后并发推送）。
"""

from datetime import UTC, datetime

import structlog
from ulid import ULID

from taskhub.core.config import MENTION_PREVIEW_LENGTH
from taskhub.core.exceptions import NotFoundError, ValidationFailedError
from taskhub.core.models import TaskComment
from taskhub.core.store import StoreGroup

from .mention_resolver import MentionResolver
from .notification_fanout import NotificationFanout

log = structlog.get_logger()


def mention_message(author_name: str, task_title: str, text: str) -> str:
    """@提及通知文本（评论内容截断）"""
    return f"{author_name} mentioned you in {task_title}: {text[:MENTION_PREVIEW_LENGTH]}"


class CommentService:
    """评论业务服务"""

    def __init__(self, store_group: StoreGroup, fanout: NotificationFanout) -> None:
        self._stores = store_group
        self._fanout = fanout
        self._resolver = MentionResolver(store_group.user_store)

    async def add_comment(self, task_id: str, author_id: str, text: str) -> TaskComment:
        """提交评论并通知被提及的用户

        Raises:
            ValidationFailedError: 评论内容或作者为空
            NotFoundError: 任务或作者不存在
        """
        if not text or not text.strip():
            raise ValidationFailedError("text")
        if not author_id or not author_id.strip():
            raise ValidationFailedError("author_id")

        # 存在性检查、提及解析与写入在同一单元内完成
        async with self._stores.atomic():
            task = await self._stores.task_store.get_task(task_id)
            if task is None:
                raise NotFoundError("task", task_id)
            author = await self._stores.user_store.get_user(author_id)
            if author is None:
                raise NotFoundError("user", author_id)

            mentioned = await self._resolver.resolve(text, author_id)
            comment = TaskComment(
                comment_id=str(ULID()),
                task_id=task_id,
                author_id=author_id,
                content=text,
                mentioned_user_ids=mentioned,
                created_at=datetime.now(UTC),
            )
            await self._stores.comment_store.add_comment(comment)

        if mentioned:
            author_name = author.display_name or author.username
            message = mention_message(author_name, task.title, text)
            await self._fanout.notify_mentions(
                {user_id: message for user_id in mentioned},
                task_id=task_id,
                actor_id=author_id,
            )

        await log.ainfo(
            "comment_added",
            task_id=task_id,
            comment_id=comment.comment_id,
            mention_count=len(mentioned),
        )
        return comment
