"""WorkGroupService -- 工作组成员管理与组内排行

成员变更先落库，提交后经 NotificationFanout.notify_lifecycle_event
通知被加入 / 移出的用户。只有组长可以调整成员。
"""

from datetime import UTC, datetime

import structlog
from ulid import ULID

from taskhub.core.exceptions import (
    ForbiddenError,
    InvalidStateError,
    NotFoundError,
    ValidationFailedError,
)
from taskhub.core.leaderboard import aggregate
from taskhub.core.models import LeaderboardEntry, WorkGroup
from taskhub.core.store import StoreGroup

from .notification_fanout import NotificationFanout

log = structlog.get_logger()


def member_added_message(group_name: str) -> str:
    return f"You were added to work group {group_name}"


def member_removed_message(group_name: str) -> str:
    return f"You were removed from work group {group_name}"


class WorkGroupService:
    """工作组业务服务"""

    def __init__(self, store_group: StoreGroup, fanout: NotificationFanout) -> None:
        self._stores = store_group
        self._fanout = fanout

    async def create_group(self, name: str, leader_id: str) -> WorkGroup:
        """创建工作组，创建者即组长

        Raises:
            ValidationFailedError: 名称或组长为空
            NotFoundError: 组长不存在
        """
        if not name or not name.strip():
            raise ValidationFailedError("name")
        if not leader_id or not leader_id.strip():
            raise ValidationFailedError("leader_id")

        group = WorkGroup(
            group_id=str(ULID()),
            name=name.strip(),
            leader_id=leader_id,
            created_at=datetime.now(UTC),
        )
        async with self._stores.atomic():
            if await self._stores.user_store.get_user(leader_id) is None:
                raise NotFoundError("user", leader_id)
            await self._stores.work_group_store.create_group(group)

        await log.ainfo("work_group_created", group_id=group.group_id, leader_id=leader_id)
        return group

    async def get_group(self, group_id: str) -> WorkGroup:
        async with self._stores.read():
            return await self._load(group_id)

    async def add_member(self, group_id: str, user_id: str, actor_id: str) -> WorkGroup:
        """组长把用户加入工作组，并通知该用户

        Raises:
            NotFoundError: 工作组或用户不存在
            ForbiddenError: 操作者不是组长
            InvalidStateError: 用户已是成员
        """
        async with self._stores.atomic():
            group = await self._load(group_id)
            self._check_leader(group, actor_id)
            if await self._stores.user_store.get_user(user_id) is None:
                raise NotFoundError("user", user_id)
            if user_id in group.member_ids:
                raise InvalidStateError(
                    f"User {user_id} is already a member of work group {group_id}"
                )
            await self._stores.work_group_store.add_member(
                group_id, user_id, datetime.now(UTC)
            )

        updated = group.model_copy(update={"member_ids": [*group.member_ids, user_id]})
        await self._membership_changed(
            updated, user_id, actor_id, member_added_message(group.name), "added"
        )
        return updated

    async def remove_member(self, group_id: str, user_id: str, actor_id: str) -> WorkGroup:
        """组长把成员移出工作组，并通知该用户

        Raises:
            NotFoundError: 工作组不存在
            ForbiddenError: 操作者不是组长
            InvalidStateError: 用户不是成员
        """
        async with self._stores.atomic():
            group = await self._load(group_id)
            self._check_leader(group, actor_id)
            if user_id not in group.member_ids:
                raise InvalidStateError(
                    f"User {user_id} is not a member of work group {group_id}"
                )
            await self._stores.work_group_store.remove_member(group_id, user_id)

        updated = group.model_copy(
            update={"member_ids": [m for m in group.member_ids if m != user_id]}
        )
        await self._membership_changed(
            updated, user_id, actor_id, member_removed_message(group.name), "removed"
        )
        return updated

    async def ranking(self, group_id: str) -> list[LeaderboardEntry]:
        """组内排行：只统计成员积分，没有积分的成员以 0 分排在后面"""
        async with self._stores.read():
            group = await self._load(group_id)
            points = await self._stores.performance_store.list_points_with_names()
            members = set(group.member_ids)
            entries = aggregate([(p, name) for p, name in points if p.user_id in members])

            scored = {e.user_id for e in entries}
            for member_id in group.member_ids:
                if member_id in scored:
                    continue
                user = await self._stores.user_store.get_user(member_id)
                name = (user.display_name or user.username) if user else member_id
                entries.append(LeaderboardEntry(user_id=member_id, user_name=name))
        return entries

    # ---- 内部 ----

    async def _load(self, group_id: str) -> WorkGroup:
        group = await self._stores.work_group_store.get_group(group_id)
        if group is None:
            raise NotFoundError("work_group", group_id)
        return group

    @staticmethod
    def _check_leader(group: WorkGroup, actor_id: str) -> None:
        if actor_id != group.leader_id:
            raise ForbiddenError(
                f"Only the leader of work group {group.group_id} may change its members",
                reason=ForbiddenError.NOT_LEADER,
            )

    async def _membership_changed(
        self,
        group: WorkGroup,
        user_id: str,
        actor_id: str,
        message: str,
        change: str,
    ) -> None:
        await self._fanout.notify_lifecycle_event(user_id, message, actor_id=actor_id)
        await log.ainfo(
            "work_group_membership_changed",
            group_id=group.group_id,
            user_id=user_id,
            change=change,
            member_count=len(group.member_ids),
        )
