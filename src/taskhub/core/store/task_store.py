"""TaskStore SQLite 实现

所有状态更新必须经过生命周期流转，此处仅提供数据库操作。
update_task 以 version 做条件更新，未命中即视为并发冲突。
"""

from datetime import datetime

import aiosqlite

from ..exceptions import TaskStatusConflictError
from ..models.task import Task

_COLUMNS = (
    "task_id, title, description, difficulty, deadline, status, created_by, "
    "assigned_to, parent_task_id, created_at, updated_at, version"
)


class SqliteTaskStore:
    """TaskStore 的 SQLite 实现"""

    def __init__(self, conn: aiosqlite.Connection) -> None:
        self._conn = conn

    async def create_task(self, task: Task) -> None:
        """创建任务记录

        注意：此方法不自动提交事务，需由调用方管理事务。
        """
        await self._conn.execute(
            f"""
            INSERT INTO tasks ({_COLUMNS})
            VALUES (?, ?, ?, ?, ?, ?, ?, ?, ?, ?, ?, ?)
            """,
            (
                task.task_id,
                task.title,
                task.description,
                task.difficulty.value,
                task.deadline.isoformat() if task.deadline else None,
                task.status.value,
                task.created_by,
                task.assigned_to,
                task.parent_task_id,
                task.created_at.isoformat(),
                task.updated_at.isoformat(),
                task.version,
            ),
        )

    async def get_task(self, task_id: str) -> Task | None:
        """根据 task_id 查询任务"""
        cursor = await self._conn.execute(
            f"SELECT {_COLUMNS} FROM tasks WHERE task_id = ?",
            (task_id,),
        )
        row = await cursor.fetchone()
        if row is None:
            return None
        return self._row_to_task(row)

    async def list_tasks(
        self,
        status: str | None = None,
        assigned_to: str | None = None,
    ) -> list[Task]:
        """查询任务列表，支持按状态 / 执行人筛选，按 created_at 倒序"""
        clauses: list[str] = []
        params: list[str] = []
        if status:
            clauses.append("status = ?")
            params.append(status)
        if assigned_to:
            clauses.append("assigned_to = ?")
            params.append(assigned_to)
        where = f"WHERE {' AND '.join(clauses)}" if clauses else ""
        cursor = await self._conn.execute(
            f"SELECT {_COLUMNS} FROM tasks {where} ORDER BY created_at DESC",
            params,
        )
        rows = await cursor.fetchall()
        return [self._row_to_task(row) for row in rows]

    async def list_overdue(self, now: datetime, statuses: list[str]) -> list[Task]:
        """查询截止时间早于 now 且处于给定状态的任务"""
        placeholders = ", ".join("?" for _ in statuses)
        cursor = await self._conn.execute(
            f"""
            SELECT {_COLUMNS} FROM tasks
            WHERE deadline IS NOT NULL AND deadline < ?
              AND status IN ({placeholders})
            ORDER BY deadline ASC
            """,
            (now.isoformat(), *statuses),
        )
        rows = await cursor.fetchall()
        return [self._row_to_task(row) for row in rows]

    async def update_task(self, task: Task, expected_version: int) -> None:
        """按 version 条件写回流转后的任务

        task.version 应已递增；未命中任何行时抛出 TaskStatusConflictError。
        """
        cursor = await self._conn.execute(
            """
            UPDATE tasks
            SET status = ?, assigned_to = ?, updated_at = ?, version = ?
            WHERE task_id = ? AND version = ?
            """,
            (
                task.status.value,
                task.assigned_to,
                task.updated_at.isoformat(),
                task.version,
                task.task_id,
                expected_version,
            ),
        )
        if cursor.rowcount == 0:
            raise TaskStatusConflictError(task.task_id, expected_version)

    @staticmethod
    def _row_to_task(row: aiosqlite.Row) -> Task:
        """将数据库行转换为 Task 模型"""
        return Task(
            task_id=row[0],
            title=row[1],
            description=row[2],
            difficulty=row[3],
            deadline=datetime.fromisoformat(row[4]) if row[4] else None,
            status=row[5],
            created_by=row[6],
            assigned_to=row[7],
            parent_task_id=row[8],
            created_at=datetime.fromisoformat(row[9]),
            updated_at=datetime.fromisoformat(row[10]),
            version=row[11],
        )
