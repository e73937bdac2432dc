"""Store Protocol 接口定义

每个聚合一个窄接口，而不是一个泛型仓储；
使用 Python Protocol 实现结构化子类型（duck typing）。
"""

from datetime import datetime
from typing import Protocol

from ..models.comment import TaskComment
from ..models.notification import Notification
from ..models.performance import PerformancePoint
from ..models.task import Task
from ..models.transaction import TaskTransaction
from ..models.work_group import WorkGroup


class TaskStore(Protocol):
    """Task 存储接口"""

    async def create_task(self, task: Task) -> None:
        """创建任务记录"""
        ...

    async def get_task(self, task_id: str) -> Task | None:
        """根据 task_id 查询任务"""
        ...

    async def list_tasks(
        self,
        status: str | None = None,
        assigned_to: str | None = None,
    ) -> list[Task]:
        """查询任务列表"""
        ...

    async def list_overdue(self, now: datetime, statuses: list[str]) -> list[Task]:
        """查询已过截止时间的任务"""
        ...

    async def update_task(self, task: Task, expected_version: int) -> None:
        """按 version 条件写回任务（仅由生命周期流转调用）"""
        ...


class TransactionStore(Protocol):
    """审计流水存储接口 -- append-only"""

    async def append_transaction(self, record: TaskTransaction) -> None:
        """追加审计流水"""
        ...

    async def get_transactions_for_task(self, task_id: str) -> list[TaskTransaction]:
        """查询指定任务的审计流水"""
        ...


class CommentStore(Protocol):
    """评论存储接口"""

    async def add_comment(self, comment: TaskComment) -> None:
        """写入评论及提及关系"""
        ...

    async def list_comments_for_task(self, task_id: str) -> list[TaskComment]:
        """查询指定任务的评论"""
        ...


class NotificationStore(Protocol):
    """通知存储接口"""

    async def add_notifications(self, notifications: list[Notification]) -> None:
        """批量写入通知"""
        ...

    async def get_notification(self, notification_id: str) -> Notification | None:
        """查询单条通知"""
        ...

    async def list_for_user(
        self,
        user_id: str,
        unread_only: bool = False,
    ) -> list[Notification]:
        """查询用户通知，最新在前"""
        ...

    async def count_unread(self, user_id: str) -> int:
        """统计未读数"""
        ...

    async def mark_read(self, notification_id: str) -> None:
        """置为已读"""
        ...


class PerformanceStore(Protocol):
    """绩效积分存储接口"""

    async def add_point(self, point: PerformancePoint) -> None:
        """写入积分记录"""
        ...

    async def get_point_for_task(self, task_id: str) -> PerformancePoint | None:
        """查询任务对应的积分记录"""
        ...

    async def list_points_with_names(self) -> list[tuple[PerformancePoint, str]]:
        """查询全部积分记录及接收人展示名称"""
        ...

    async def sum_points_for_user(self, user_id: str) -> int:
        """统计单个用户积分"""
        ...


class WorkGroupStore(Protocol):
    """WorkGroup 存储接口"""

    async def create_group(self, group: WorkGroup) -> None:
        ...

    async def get_group(self, group_id: str) -> WorkGroup | None:
        ...

    async def list_member_ids(self, group_id: str) -> list[str]:
        ...

    async def add_member(self, group_id: str, user_id: str, joined_at: datetime) -> None:
        ...

    async def remove_member(self, group_id: str, user_id: str) -> None:
        ...


class UserDirectory(Protocol):
    """用户目录查询接口"""

    async def resolve_username(self, username: str) -> str | None:
        """用户名精确匹配，返回 user_id 或 None"""
        ...
