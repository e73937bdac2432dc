"""TaskLifecycle -- 任务状态机

所有状态流转的唯一入口。每个操作在一个事务单元内完成：
加载 -> 守卫检查 -> 变更 -> 审计 -> 通知落库；提交之后再推送通知。

守卫统一定义在 TRANSITION_RULES 中，检查顺序固定为先状态、后操作者。
"""

from collections.abc import Awaitable, Callable
from dataclasses import dataclass, field
from datetime import UTC, datetime
from enum import StrEnum

import structlog
from ulid import ULID

from taskhub.core.exceptions import (
    ForbiddenError,
    InvalidStateError,
    NotFoundError,
    ValidationFailedError,
)
from taskhub.core.models import (
    ACTION_SOURCE_STATES,
    Difficulty,
    LifecycleAction,
    Notification,
    Task,
    TaskStatus,
    TaskTransaction,
    validate_transition,
)
from taskhub.core.store import StoreGroup

from .audit_ledger import AuditLedger
from .notification_fanout import NotificationFanout, assignment_message

log = structlog.get_logger()

# 流转在提交前的扩展钩子（积分写入等），与流转同单元提交
BeforeCommitHook = Callable[[Task], Awaitable[None]]


class ActorRole(StrEnum):
    """操作者必须具备的身份"""

    CREATOR = "CREATOR"
    ASSIGNEE = "ASSIGNEE"
    SYSTEM = "SYSTEM"


@dataclass(frozen=True)
class TransitionRule:
    """单个操作的守卫：允许的起始状态 + 操作者身份"""

    action: LifecycleAction
    sources: frozenset[TaskStatus]
    actor: ActorRole


TRANSITION_RULES: dict[LifecycleAction, TransitionRule] = {
    action: TransitionRule(action, frozenset(ACTION_SOURCE_STATES[action]), role)
    for action, role in (
        (LifecycleAction.ASSIGN, ActorRole.CREATOR),
        (LifecycleAction.UNASSIGN, ActorRole.CREATOR),
        (LifecycleAction.ACCEPT, ActorRole.ASSIGNEE),
        (LifecycleAction.REJECT, ActorRole.ASSIGNEE),
        (LifecycleAction.FINISH, ActorRole.ASSIGNEE),
        (LifecycleAction.RETURN_FOR_REVISION, ActorRole.CREATOR),
        (LifecycleAction.COMPLETE, ActorRole.CREATOR),
        (LifecycleAction.EXPIRE, ActorRole.SYSTEM),
    )
}

SYSTEM_ACTOR = "system"


@dataclass
class _Change:
    """一次流转的产出：字段更新 + 审计行 + 待通知接收人"""

    update: dict
    audit_from: str
    audit_to: str
    audit_comment: str
    notices: list[tuple[str, str]] = field(default_factory=list)


def check_guard(task: Task, action: LifecycleAction, actor_id: str) -> None:
    """按 TRANSITION_RULES 检查守卫

    Raises:
        InvalidStateError: 当前状态不允许该操作
        ForbiddenError: 操作者不是创建者 / 当前执行人
    """
    rule = TRANSITION_RULES[action]
    if task.status not in rule.sources:
        raise InvalidStateError(
            f"Cannot {action.lower()} task {task.task_id} in status {task.status}",
            current_status=task.status,
        )
    if rule.actor == ActorRole.CREATOR and actor_id != task.created_by:
        raise ForbiddenError(
            f"Only the creator of task {task.task_id} may {action.lower()} it",
            reason=ForbiddenError.NOT_CREATOR,
        )
    if rule.actor == ActorRole.ASSIGNEE and (
        task.assigned_to is None or actor_id != task.assigned_to
    ):
        raise ForbiddenError(
            f"Only the assignee of task {task.task_id} may {action.lower()} it",
            reason=ForbiddenError.NOT_ASSIGNEE,
        )


def _require(field_name: str, value: str | None) -> str:
    if value is None or not value.strip():
        raise ValidationFailedError(field_name)
    return value.strip()


class TaskLifecycle:
    """任务生命周期服务"""

    def __init__(self, store_group: StoreGroup, fanout: NotificationFanout) -> None:
        self._stores = store_group
        self._fanout = fanout
        self._ledger = AuditLedger(store_group.transaction_store)

    @property
    def ledger(self) -> AuditLedger:
        return self._ledger

    # ---- 创建 / 查询 ----

    async def create_task(
        self,
        creator_id: str,
        title: str,
        description: str = "",
        difficulty: Difficulty = Difficulty.EASY,
        deadline: datetime | None = None,
        parent_task_id: str | None = None,
    ) -> Task:
        """创建 PENDING 任务

        创建不是状态流转，不写审计行；审计轨迹从第一次指派开始。
        """
        title = _require("title", title)
        creator_id = _require("creator_id", creator_id)
        now = datetime.now(UTC)
        task = Task(
            task_id=str(ULID()),
            title=title,
            description=description,
            difficulty=difficulty,
            deadline=deadline,
            created_by=creator_id,
            parent_task_id=parent_task_id,
            created_at=now,
            updated_at=now,
        )

        async with self._stores.atomic():
            if await self._stores.user_store.get_user(creator_id) is None:
                raise NotFoundError("user", creator_id)
            if parent_task_id is not None:
                if await self._stores.task_store.get_task(parent_task_id) is None:
                    raise NotFoundError("task", parent_task_id)
            await self._stores.task_store.create_task(task)

        await log.ainfo("task_created", task_id=task.task_id, created_by=creator_id)
        return task

    async def get_task(self, task_id: str) -> Task:
        async with self._stores.read():
            return await self._load(task_id)

    async def get_task_detail(self, task_id: str) -> tuple[Task, list[TaskTransaction]]:
        """任务详情：含评论列表与审计轨迹（同一只读单元内读取）"""
        async with self._stores.read():
            task = await self._load(task_id)
            comments = await self._stores.comment_store.list_comments_for_task(task_id)
            trail = await self._ledger.list_for_task(task_id)
        return task.model_copy(update={"comments": comments}), trail

    async def list_tasks(
        self,
        status: TaskStatus | None = None,
        assigned_to: str | None = None,
    ) -> list[Task]:
        async with self._stores.read():
            return await self._stores.task_store.list_tasks(
                status=status.value if status else None,
                assigned_to=assigned_to,
            )

    # ---- 流转 ----

    async def assign(self, task_id: str, actor_id: str, assignee_id: str) -> Task:
        """指派 / 改派：任意非终态 -> ASSIGNED，通知新执行人"""
        assignee_id = _require("assignee_id", assignee_id)

        async def plan(task: Task) -> _Change:
            if actor_id == assignee_id:
                raise ForbiddenError(
                    f"Creator of task {task.task_id} cannot assign it to themselves",
                    reason=ForbiddenError.SELF_ASSIGNMENT,
                )
            if await self._stores.user_store.get_user(assignee_id) is None:
                raise NotFoundError("user", assignee_id)
            return _Change(
                update={"status": TaskStatus.ASSIGNED, "assigned_to": assignee_id},
                audit_from=actor_id,
                audit_to=assignee_id,
                audit_comment="Task assigned",
                notices=[(assignee_id, assignment_message(task.title))],
            )

        return await self._apply(task_id, LifecycleAction.ASSIGN, actor_id, plan)

    async def unassign(self, task_id: str, actor_id: str) -> Task:
        """取消指派：状态不变，清空执行人"""

        async def plan(task: Task) -> _Change:
            return _Change(
                update={"assigned_to": None},
                audit_from=actor_id,
                audit_to=task.assigned_to or actor_id,
                audit_comment="Task unassigned",
            )

        return await self._apply(task_id, LifecycleAction.UNASSIGN, actor_id, plan)

    async def accept(self, task_id: str, actor_id: str) -> Task:
        """接受：ASSIGNED -> IN_PROGRESS，通知创建者"""

        async def plan(task: Task) -> _Change:
            name = await self._display_name(actor_id)
            return _Change(
                update={"status": TaskStatus.IN_PROGRESS},
                audit_from=actor_id,
                audit_to=task.created_by,
                audit_comment="Task accepted",
                notices=[(task.created_by, f"{name} accepted {task.title}")],
            )

        return await self._apply(task_id, LifecycleAction.ACCEPT, actor_id, plan)

    async def reject(self, task_id: str, actor_id: str, reason: str) -> Task:
        """拒绝：ASSIGNED -> ASSIGNED，清空执行人，通知创建者"""
        reason = _require("reason", reason)

        async def plan(task: Task) -> _Change:
            name = await self._display_name(actor_id)
            return _Change(
                update={"status": TaskStatus.ASSIGNED, "assigned_to": None},
                audit_from=actor_id,
                audit_to=task.created_by,
                audit_comment=f"Task rejected: {reason}",
                notices=[(task.created_by, f"{name} rejected {task.title}: {reason}")],
            )

        return await self._apply(task_id, LifecycleAction.REJECT, actor_id, plan)

    async def finish(self, task_id: str, actor_id: str) -> Task:
        """完成执行：IN_PROGRESS -> UNDER_REVIEW，通知创建者审核"""

        async def plan(task: Task) -> _Change:
            name = await self._display_name(actor_id)
            return _Change(
                update={"status": TaskStatus.UNDER_REVIEW},
                audit_from=actor_id,
                audit_to=task.created_by,
                audit_comment="Task finished",
                notices=[
                    (task.created_by, f"{name} finished {task.title}, ready for review")
                ],
            )

        return await self._apply(task_id, LifecycleAction.FINISH, actor_id, plan)

    async def return_for_revision(self, task_id: str, actor_id: str, reason: str) -> Task:
        """退回修改：UNDER_REVIEW -> IN_PROGRESS，带原因通知执行人"""
        reason = _require("reason", reason)

        async def plan(task: Task) -> _Change:
            notices = []
            if task.assigned_to is not None:
                notices.append(
                    (task.assigned_to, f"{task.title} returned for revision: {reason}")
                )
            return _Change(
                update={"status": TaskStatus.IN_PROGRESS},
                audit_from=actor_id,
                audit_to=task.assigned_to or actor_id,
                audit_comment=f"Task returned for revision: {reason}",
                notices=notices,
            )

        return await self._apply(
            task_id, LifecycleAction.RETURN_FOR_REVISION, actor_id, plan
        )

    async def complete(
        self,
        task_id: str,
        actor_id: str,
        before_commit: BeforeCommitHook | None = None,
    ) -> Task:
        """审核通过：UNDER_REVIEW -> COMPLETED

        仅供 ScoringEngine 调用；积分记录通过 before_commit 与流转同单元写入。

        Raises:
            InvalidStateError: 状态不是 UNDER_REVIEW，或任务没有执行人
            ForbiddenError: 操作者不是创建者
        """

        async def plan(task: Task) -> _Change:
            if task.assigned_to is None:
                raise InvalidStateError(
                    f"Task {task.task_id} has no assignee to score",
                    current_status=task.status,
                )
            return _Change(
                update={"status": TaskStatus.COMPLETED},
                audit_from=actor_id,
                audit_to=task.assigned_to,
                audit_comment="Performance Point Added",
            )

        return await self._apply(
            task_id, LifecycleAction.COMPLETE, actor_id, plan, before_commit
        )

    async def expire(self, task_id: str) -> Task:
        """截止时间触发的过期：任意非终态 -> EXPIRED"""

        async def plan(task: Task) -> _Change:
            recipient = task.assigned_to or task.created_by
            return _Change(
                update={"status": TaskStatus.EXPIRED},
                audit_from=task.created_by,
                audit_to=recipient,
                audit_comment="Task expired",
                notices=[(recipient, f"{task.title} expired")],
            )

        return await self._apply(task_id, LifecycleAction.EXPIRE, SYSTEM_ACTOR, plan)

    async def expire_overdue(self, now: datetime | None = None) -> list[Task]:
        """扫描截止时间已过的非终态任务并逐个过期

        单个任务流转失败（并发竞争已改变其状态）只记录日志，不影响其他任务。
        """
        now = now or datetime.now(UTC)
        active = sorted(ACTION_SOURCE_STATES[LifecycleAction.EXPIRE])
        async with self._stores.read():
            overdue = await self._stores.task_store.list_overdue(
                now, [s.value for s in active]
            )

        expired: list[Task] = []
        for task in overdue:
            try:
                expired.append(await self.expire(task.task_id))
            except InvalidStateError as e:
                await log.awarning(
                    "task_expire_skipped",
                    task_id=task.task_id,
                    error_type=type(e).__name__,
                    error=e.message,
                )
        return expired

    # ---- 内部 ----

    async def _load(self, task_id: str) -> Task:
        task = await self._stores.task_store.get_task(task_id)
        if task is None:
            raise NotFoundError("task", task_id)
        return task

    async def _display_name(self, user_id: str) -> str:
        user = await self._stores.user_store.get_user(user_id)
        if user is None:
            return user_id
        return user.display_name or user.username

    async def _apply(
        self,
        task_id: str,
        action: LifecycleAction,
        actor_id: str,
        plan: Callable[[Task], Awaitable[_Change]],
        before_commit: BeforeCommitHook | None = None,
    ) -> Task:
        """执行一次流转（单事务单元），提交后推送通知"""
        actor_id = _require("actor_id", actor_id)
        notifications: list[Notification] = []

        async with self._stores.atomic():
            task = await self._load(task_id)
            check_guard(task, action, actor_id)
            change = await plan(task)

            updated = task.model_copy(
                update={
                    **change.update,
                    "updated_at": datetime.now(UTC),
                    "version": task.version + 1,
                }
            )
            if not validate_transition(task.status, updated.status):
                raise InvalidStateError(
                    f"Invalid transition: {task.status} -> {updated.status}",
                    current_status=task.status,
                )

            # version 条件更新；竞争失败抛 TaskStatusConflictError
            await self._stores.task_store.update_task(updated, expected_version=task.version)
            await self._ledger.record(
                task_id, change.audit_from, change.audit_to, change.audit_comment
            )
            if before_commit is not None:
                await before_commit(updated)

            for recipient_id, message in change.notices:
                notification = self._fanout.build(
                    recipient_id, message, task_id=task_id, actor_id=actor_id
                )
                if notification is not None:
                    notifications.append(notification)
            await self._fanout.stage(notifications)

        await log.ainfo(
            "task_transition_applied",
            task_id=task_id,
            action=action.value,
            actor_id=actor_id,
            from_status=task.status.value,
            to_status=updated.status.value,
            assigned_to=updated.assigned_to,
            notification_count=len(notifications),
        )

        await self._fanout.push_all(notifications)
        return updated
