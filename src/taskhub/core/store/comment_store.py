"""CommentStore SQLite 实现

评论提交后不可变；提及关系单独落表，position 保持首次出现顺序。
"""

from datetime import datetime

import aiosqlite

from ..models.comment import TaskComment


class SqliteCommentStore:
    """CommentStore 的 SQLite 实现"""

    def __init__(self, conn: aiosqlite.Connection) -> None:
        self._conn = conn

    async def add_comment(self, comment: TaskComment) -> None:
        """写入评论及其提及关系

        注意：此方法不自动提交事务，需由调用方管理事务。
        """
        await self._conn.execute(
            """
            INSERT INTO task_comments (comment_id, task_id, author_id, content, created_at)
            VALUES (?, ?, ?, ?, ?)
            """,
            (
                comment.comment_id,
                comment.task_id,
                comment.author_id,
                comment.content,
                comment.created_at.isoformat(),
            ),
        )
        if comment.mentioned_user_ids:
            await self._conn.executemany(
                """
                INSERT INTO task_comment_mentions (comment_id, mentioned_user_id, position)
                VALUES (?, ?, ?)
                """,
                [
                    (comment.comment_id, user_id, position)
                    for position, user_id in enumerate(comment.mentioned_user_ids)
                ],
            )

    async def list_comments_for_task(self, task_id: str) -> list[TaskComment]:
        """查询指定任务的评论（含提及），按创建时间正序"""
        cursor = await self._conn.execute(
            """
            SELECT comment_id, task_id, author_id, content, created_at
            FROM task_comments
            WHERE task_id = ?
            ORDER BY created_at ASC, rowid ASC
            """,
            (task_id,),
        )
        rows = await cursor.fetchall()
        if not rows:
            return []

        mentions = await self._get_mentions([row[0] for row in rows])
        return [
            TaskComment(
                comment_id=row[0],
                task_id=row[1],
                author_id=row[2],
                content=row[3],
                mentioned_user_ids=mentions.get(row[0], []),
                created_at=datetime.fromisoformat(row[4]),
            )
            for row in rows
        ]

    async def _get_mentions(self, comment_ids: list[str]) -> dict[str, list[str]]:
        """批量查询评论的提及用户"""
        placeholders = ", ".join("?" for _ in comment_ids)
        cursor = await self._conn.execute(
            f"""
            SELECT comment_id, mentioned_user_id FROM task_comment_mentions
            WHERE comment_id IN ({placeholders})
            ORDER BY comment_id, position ASC
            """,
            comment_ids,
        )
        result: dict[str, list[str]] = {}
        for row in await cursor.fetchall():
            result.setdefault(row[0], []).append(row[1])
        return result
