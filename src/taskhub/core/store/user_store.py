"""UserStore SQLite 实现 -- 用户目录查询

满足 UserDirectory 协议：resolve_username 只做精确匹配。
"""

from datetime import datetime

import aiosqlite

from ..models.user import User


class SqliteUserStore:
    """UserStore 的 SQLite 实现"""

    def __init__(self, conn: aiosqlite.Connection) -> None:
        self._conn = conn

    async def create_user(self, user: User) -> None:
        """创建用户记录

        注意：此方法不自动提交事务，需由调用方管理事务。
        """
        await self._conn.execute(
            """
            INSERT INTO users (user_id, username, display_name, created_at)
            VALUES (?, ?, ?, ?)
            """,
            (
                user.user_id,
                user.username,
                user.display_name,
                user.created_at.isoformat(),
            ),
        )

    async def get_user(self, user_id: str) -> User | None:
        """根据 user_id 查询用户"""
        cursor = await self._conn.execute(
            "SELECT user_id, username, display_name, created_at FROM users WHERE user_id = ?",
            (user_id,),
        )
        row = await cursor.fetchone()
        if row is None:
            return None
        return self._row_to_user(row)

    async def resolve_username(self, username: str) -> str | None:
        """按用户名精确匹配，返回 user_id 或 None"""
        cursor = await self._conn.execute(
            "SELECT user_id FROM users WHERE username = ?",
            (username,),
        )
        row = await cursor.fetchone()
        return row[0] if row else None

    @staticmethod
    def _row_to_user(row: aiosqlite.Row) -> User:
        """将数据库行转换为 User 模型"""
        return User(
            user_id=row[0],
            username=row[1],
            display_name=row[2],
            created_at=datetime.fromisoformat(row[3]),
        )
