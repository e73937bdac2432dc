"""核心层测试配置 -- 任务构造 fixture"""

from datetime import UTC, datetime

import pytest
from taskhub.core.models import Difficulty, Task, TaskStatus
from ulid import ULID


@pytest.fixture
def make_task():
    """返回构造 Task 的辅助函数"""

    def _make(
        created_by: str,
        status: TaskStatus = TaskStatus.PENDING,
        assigned_to: str | None = None,
        difficulty: Difficulty = Difficulty.EASY,
        deadline: datetime | None = None,
        title: str = "Write quarterly report",
    ) -> Task:
        now = datetime.now(UTC)
        return Task(
            task_id=str(ULID()),
            title=title,
            difficulty=difficulty,
            deadline=deadline,
            status=status,
            created_by=created_by,
            assigned_to=assigned_to,
            created_at=now,
            updated_at=now,
        )

    return _make
