"""ScoringEngine -- 审核通过计分与排行榜

complete_with_score 通过 TaskLifecycle 完成 UNDER_REVIEW -> COMPLETED 流转，
积分记录在同一事务单元内写入：要么流转、审计、积分全部落库，要么全部回滚。
"""

from datetime import UTC, datetime

import structlog
from ulid import ULID

from taskhub.core.leaderboard import compute_leaderboard
from taskhub.core.models import (
    DIFFICULTY_POINTS,
    Difficulty,
    LeaderboardEntry,
    PerformancePoint,
    Task,
)
from taskhub.core.store import StoreGroup

from .task_lifecycle import TaskLifecycle

log = structlog.get_logger()


def points_for(difficulty: Difficulty) -> int:
    """难度对应的积分"""
    return DIFFICULTY_POINTS[difficulty]


class ScoringEngine:
    """绩效计分服务"""

    def __init__(self, store_group: StoreGroup, lifecycle: TaskLifecycle) -> None:
        self._stores = store_group
        self._lifecycle = lifecycle

    async def complete_with_score(
        self, task_id: str, reviewer_id: str, reason: str = ""
    ) -> tuple[Task, PerformancePoint]:
        """审核通过并为执行人记分

        Returns:
            (已完成的任务, 积分记录)

        Raises:
            NotFoundError: 任务不存在
            InvalidStateError: 状态不是 UNDER_REVIEW，或没有执行人
            ForbiddenError: 审核人不是创建者
        """
        recorded: list[PerformancePoint] = []

        async def add_point(task: Task) -> None:
            point = PerformancePoint(
                point_id=str(ULID()),
                user_id=task.assigned_to,
                task_id=task.task_id,
                points=points_for(task.difficulty),
                reason=reason or "",
                created_at=datetime.now(UTC),
            )
            await self._stores.performance_store.add_point(point)
            recorded.append(point)

        task = await self._lifecycle.complete(task_id, reviewer_id, before_commit=add_point)
        point = recorded[0]

        await log.ainfo(
            "performance_point_added",
            task_id=task_id,
            user_id=point.user_id,
            points=point.points,
        )
        return task, point

    async def leaderboard(self) -> list[LeaderboardEntry]:
        """按接收人汇总积分，总分降序；同分保持首次出现顺序"""
        async with self._stores.read():
            return await compute_leaderboard(self._stores.performance_store)

    async def total_points(self, user_id: str) -> int:
        """单个用户的积分合计（无记录为 0）"""
        async with self._stores.read():
            return await self._stores.performance_store.sum_points_for_user(user_id)
