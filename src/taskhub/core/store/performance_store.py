"""PerformanceStore SQLite 实现

积分记录不可变；task_id 唯一索引保证每个任务至多一条。
"""

from datetime import datetime

import aiosqlite

from ..models.performance import PerformancePoint


class SqlitePerformanceStore:
    """PerformanceStore 的 SQLite 实现"""

    def __init__(self, conn: aiosqlite.Connection) -> None:
        self._conn = conn

    async def add_point(self, point: PerformancePoint) -> None:
        """写入积分记录

        注意：此方法不自动提交事务，需由调用方管理事务。
        """
        await self._conn.execute(
            """
            INSERT INTO performance_points (point_id, user_id, task_id, points,
                                            reason, created_at)
            VALUES (?, ?, ?, ?, ?, ?)
            """,
            (
                point.point_id,
                point.user_id,
                point.task_id,
                point.points,
                point.reason,
                point.created_at.isoformat(),
            ),
        )

    async def get_point_for_task(self, task_id: str) -> PerformancePoint | None:
        """查询任务对应的积分记录"""
        cursor = await self._conn.execute(
            """
            SELECT point_id, user_id, task_id, points, reason, created_at
            FROM performance_points WHERE task_id = ?
            """,
            (task_id,),
        )
        row = await cursor.fetchone()
        if row is None:
            return None
        return self._row_to_point(row)

    async def list_points_with_names(self) -> list[tuple[PerformancePoint, str]]:
        """按写入顺序查询全部积分记录，附带接收人展示名称

        展示名称优先 display_name，其次 username；用户缺失时为空字符串。
        """
        cursor = await self._conn.execute(
            """
            SELECT p.point_id, p.user_id, p.task_id, p.points, p.reason, p.created_at,
                   COALESCE(NULLIF(u.display_name, ''), u.username, '')
            FROM performance_points p
            LEFT JOIN users u ON u.user_id = p.user_id
            ORDER BY p.rowid ASC
            """
        )
        rows = await cursor.fetchall()
        return [(self._row_to_point(row), row[6]) for row in rows]

    async def sum_points_for_user(self, user_id: str) -> int:
        """统计单个用户的积分总和"""
        cursor = await self._conn.execute(
            "SELECT COALESCE(SUM(points), 0) FROM performance_points WHERE user_id = ?",
            (user_id,),
        )
        row = await cursor.fetchone()
        return row[0] if row else 0

    @staticmethod
    def _row_to_point(row: aiosqlite.Row) -> PerformancePoint:
        """将数据库行转换为 PerformancePoint 模型"""
        return PerformancePoint(
            point_id=row[0],
            user_id=row[1],
            task_id=row[2],
            points=row[3],
            reason=row[4],
            created_at=datetime.fromisoformat(row[5]),
        )
