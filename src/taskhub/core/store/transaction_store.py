"""TransactionStore SQLite 实现

审计流水表 append-only：只允许插入，不允许更新或删除。
"""

from datetime import datetime

import aiosqlite

from ..models.transaction import TaskTransaction


class SqliteTransactionStore:
    """TransactionStore 的 SQLite 实现"""

    def __init__(self, conn: aiosqlite.Connection) -> None:
        self._conn = conn

    async def append_transaction(self, record: TaskTransaction) -> None:
        """追加审计流水（append-only）

        注意：此方法不自动提交事务，需由调用方管理事务。
        """
        await self._conn.execute(
            """
            INSERT INTO task_transactions (transaction_id, task_id, from_user_id,
                                           to_user_id, comment, ts)
            VALUES (?, ?, ?, ?, ?, ?)
            """,
            (
                record.transaction_id,
                record.task_id,
                record.from_user_id,
                record.to_user_id,
                record.comment,
                record.ts.isoformat(),
            ),
        )

    async def get_transactions_for_task(self, task_id: str) -> list[TaskTransaction]:
        """查询指定任务的审计流水，按写入顺序"""
        cursor = await self._conn.execute(
            """
            SELECT transaction_id, task_id, from_user_id, to_user_id, comment, ts
            FROM task_transactions
            WHERE task_id = ?
            ORDER BY ts ASC, rowid ASC
            """,
            (task_id,),
        )
        rows = await cursor.fetchall()
        return [self._row_to_transaction(row) for row in rows]

    @staticmethod
    def _row_to_transaction(row: aiosqlite.Row) -> TaskTransaction:
        """将数据库行转换为 TaskTransaction 模型"""
        return TaskTransaction(
            transaction_id=row[0],
            task_id=row[1],
            from_user_id=row[2],
            to_user_id=row[3],
            comment=row[4],
            ts=datetime.fromisoformat(row[5]),
        )
