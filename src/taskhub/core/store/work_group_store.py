"""WorkGroupStore SQLite 实现

成员关系单独落表，joined_at 保持加入顺序。
"""

from datetime import datetime

import aiosqlite

from ..models.work_group import WorkGroup


class SqliteWorkGroupStore:
    """WorkGroupStore 的 SQLite 实现"""

    def __init__(self, conn: aiosqlite.Connection) -> None:
        self._conn = conn

    async def create_group(self, group: WorkGroup) -> None:
        """创建工作组记录（不含成员）

        注意：此方法不自动提交事务，需由调用方管理事务。
        """
        await self._conn.execute(
            """
            INSERT INTO work_groups (group_id, name, leader_id, created_at)
            VALUES (?, ?, ?, ?)
            """,
            (group.group_id, group.name, group.leader_id, group.created_at.isoformat()),
        )

    async def get_group(self, group_id: str) -> WorkGroup | None:
        """查询工作组及其成员"""
        cursor = await self._conn.execute(
            "SELECT group_id, name, leader_id, created_at FROM work_groups WHERE group_id = ?",
            (group_id,),
        )
        row = await cursor.fetchone()
        if row is None:
            return None
        return WorkGroup(
            group_id=row[0],
            name=row[1],
            leader_id=row[2],
            member_ids=await self.list_member_ids(group_id),
            created_at=datetime.fromisoformat(row[3]),
        )

    async def list_member_ids(self, group_id: str) -> list[str]:
        """成员用户 ID，按加入顺序"""
        cursor = await self._conn.execute(
            """
            SELECT user_id FROM work_group_members
            WHERE group_id = ?
            ORDER BY joined_at ASC, rowid ASC
            """,
            (group_id,),
        )
        return [row[0] for row in await cursor.fetchall()]

    async def add_member(self, group_id: str, user_id: str, joined_at: datetime) -> None:
        """写入成员关系

        注意：此方法不自动提交事务，需由调用方管理事务。
        """
        await self._conn.execute(
            "INSERT INTO work_group_members (group_id, user_id, joined_at) VALUES (?, ?, ?)",
            (group_id, user_id, joined_at.isoformat()),
        )

    async def remove_member(self, group_id: str, user_id: str) -> None:
        """删除成员关系

        注意：此方法不自动提交事务，需由调用方管理事务。
        """
        await self._conn.execute(
            "DELETE FROM work_group_members WHERE group_id = ? AND user_id = ?",
            (group_id, user_id),
        )
