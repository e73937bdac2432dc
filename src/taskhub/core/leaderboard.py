"""排行榜聚合模块

从 performance_points 表按需计算排行榜（派生数据，不落库）。
聚合结果与积分写入顺序无关；同分时保持首次出现顺序（稳定排序）。
"""

import time

import structlog

from .models.performance import LeaderboardEntry, PerformancePoint
from .store.protocols import PerformanceStore

log = structlog.get_logger()


def aggregate(points: list[tuple[PerformancePoint, str]]) -> list[LeaderboardEntry]:
    """按接收人分组求和并按总分降序排列（内存中操作）

    Args:
        points: (积分记录, 接收人展示名称) 列表

    Returns:
        排行榜条目列表，空输入返回空列表
    """
    entries: dict[str, LeaderboardEntry] = {}
    for point, user_name in points:
        entry = entries.get(point.user_id)
        if entry is None:
            entries[point.user_id] = LeaderboardEntry(
                user_id=point.user_id,
                user_name=user_name,
                total_points=point.points,
            )
        else:
            entry.total_points += point.points

    # sorted 是稳定排序，同分保持首次出现顺序
    return sorted(entries.values(), key=lambda e: e.total_points, reverse=True)


async def compute_leaderboard(
    performance_store: PerformanceStore,
) -> list[LeaderboardEntry]:
    """读取全部积分记录并聚合为排行榜

    Args:
        performance_store: PerformanceStore 实例

    Returns:
        排行榜条目列表
    """
    start_time = time.monotonic()

    points = await performance_store.list_points_with_names()
    entries = aggregate(points)

    elapsed_ms = int((time.monotonic() - start_time) * 1000)
    await log.adebug(
        "leaderboard_computed",
        point_count=len(points),
        entry_count=len(entries),
        elapsed_ms=elapsed_ms,
    )
    return entries
