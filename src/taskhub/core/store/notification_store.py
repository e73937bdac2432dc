"""NotificationStore SQLite 实现

通知只增不删；唯一允许的更新是 is_read 置位。
"""

from datetime import datetime

import aiosqlite

from ..models.notification import Notification


class SqliteNotificationStore:
    """NotificationStore 的 SQLite 实现"""

    def __init__(self, conn: aiosqlite.Connection) -> None:
        self._conn = conn

    async def add_notifications(self, notifications: list[Notification]) -> None:
        """批量写入通知（单次 executemany）

        注意：此方法不自动提交事务，需由调用方管理事务。
        """
        if not notifications:
            return
        await self._conn.executemany(
            """
            INSERT INTO notifications (notification_id, user_id, message, task_id,
                                       is_read, created_at)
            VALUES (?, ?, ?, ?, ?, ?)
            """,
            [
                (
                    n.notification_id,
                    n.user_id,
                    n.message,
                    n.task_id,
                    int(n.is_read),
                    n.created_at.isoformat(),
                )
                for n in notifications
            ],
        )

    async def get_notification(self, notification_id: str) -> Notification | None:
        """根据 notification_id 查询通知"""
        cursor = await self._conn.execute(
            """
            SELECT notification_id, user_id, message, task_id, is_read, created_at
            FROM notifications WHERE notification_id = ?
            """,
            (notification_id,),
        )
        row = await cursor.fetchone()
        if row is None:
            return None
        return self._row_to_notification(row)

    async def list_for_user(
        self,
        user_id: str,
        unread_only: bool = False,
    ) -> list[Notification]:
        """查询用户的通知，最新在前"""
        sql = """
            SELECT notification_id, user_id, message, task_id, is_read, created_at
            FROM notifications WHERE user_id = ?
        """
        if unread_only:
            sql += " AND is_read = 0"
        sql += " ORDER BY created_at DESC, rowid DESC"
        cursor = await self._conn.execute(sql, (user_id,))
        rows = await cursor.fetchall()
        return [self._row_to_notification(row) for row in rows]

    async def count_unread(self, user_id: str) -> int:
        """统计用户未读通知数"""
        cursor = await self._conn.execute(
            "SELECT COUNT(*) FROM notifications WHERE user_id = ? AND is_read = 0",
            (user_id,),
        )
        row = await cursor.fetchone()
        return row[0] if row else 0

    async def mark_read(self, notification_id: str) -> None:
        """将通知置为已读

        注意：此方法不自动提交事务，需由调用方管理事务。
        """
        await self._conn.execute(
            "UPDATE notifications SET is_read = 1 WHERE notification_id = ?",
            (notification_id,),
        )

    @staticmethod
    def _row_to_notification(row: aiosqlite.Row) -> Notification:
        """将数据库行转换为 Notification 模型"""
        return Notification(
            notification_id=row[0],
            user_id=row[1],
            message=row[2],
            task_id=row[3],
            is_read=bool(row[4]),
            created_at=datetime.fromisoformat(row[5]),
        )
