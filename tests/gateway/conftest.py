"""gateway 测试配置 -- 服务组装 + FastAPI AsyncClient fixture"""

import os
from collections.abc import AsyncGenerator
from pathlib import Path

import pytest
import pytest_asyncio
from httpx import ASGITransport, AsyncClient
from taskhub.core.models import Difficulty, Task, TaskStatus
from taskhub.gateway.services.comment_service import CommentService
from taskhub.gateway.services.notification_fanout import NotificationFanout
from taskhub.gateway.services.push_hub import PushHub
from taskhub.gateway.services.scoring_engine import ScoringEngine
from taskhub.gateway.services.task_lifecycle import TaskLifecycle
from taskhub.gateway.services.work_groups import WorkGroupService


class RecordingTransport:
    """记录所有推送的传输实现"""

    def __init__(self) -> None:
        self.pushed: list[tuple[str, dict]] = []

    async def push(self, user_id: str, payload: dict) -> int:
        self.pushed.append((user_id, payload))
        return 1


class FailingTransport:
    """每次推送都失败的传输实现"""

    def __init__(self) -> None:
        self.attempts = 0

    async def push(self, user_id: str, payload: dict) -> int:
        self.attempts += 1
        raise ConnectionError(f"push to {user_id} failed")


@pytest.fixture
def transport() -> RecordingTransport:
    return RecordingTransport()


@pytest.fixture
def failing_transport() -> FailingTransport:
    return FailingTransport()


@pytest.fixture
def fanout(store_group, transport) -> NotificationFanout:
    return NotificationFanout(
        store_group.notification_store,
        store_group.atomic,
        transport=transport,
        read_factory=store_group.read,
    )


@pytest.fixture
def lifecycle(store_group, fanout) -> TaskLifecycle:
    return TaskLifecycle(store_group, fanout)


@pytest.fixture
def scoring(store_group, lifecycle) -> ScoringEngine:
    return ScoringEngine(store_group, lifecycle)


@pytest.fixture
def comment_service(store_group, fanout) -> CommentService:
    return CommentService(store_group, fanout)


@pytest.fixture
def work_groups(store_group, fanout) -> WorkGroupService:
    return WorkGroupService(store_group, fanout)


@pytest.fixture
def task_in(lifecycle, users):
    """返回辅助函数：创建任务（carol 创建、alice 执行）并推进到目标状态"""

    async def _task_in(
        status: TaskStatus, difficulty: Difficulty = Difficulty.EASY
    ) -> Task:
        carol, alice = users["carol"], users["alice"]
        task = await lifecycle.create_task(carol, "Ship release", difficulty=difficulty)
        if status == TaskStatus.PENDING:
            return task
        task = await lifecycle.assign(task.task_id, carol, alice)
        if status == TaskStatus.ASSIGNED:
            return task
        task = await lifecycle.accept(task.task_id, alice)
        if status == TaskStatus.IN_PROGRESS:
            return task
        task = await lifecycle.finish(task.task_id, alice)
        if status == TaskStatus.UNDER_REVIEW:
            return task
        raise ValueError(f"unsupported fixture status {status}")

    return _task_in


@pytest_asyncio.fixture
async def app(store_group, tmp_path: Path):
    """创建测试用 FastAPI app 实例（手动组装，绕过 lifespan）"""
    os.environ["TASKHUB_DB_PATH"] = str(tmp_path / "test.db")
    os.environ["LOGFIRE_SEND_TO_LOGFIRE"] = "false"

    from taskhub.gateway.main import create_app, init_app_state

    application = create_app()
    init_app_state(application, store_group, PushHub())
    yield application

    for key in ["TASKHUB_DB_PATH", "LOGFIRE_SEND_TO_LOGFIRE"]:
        os.environ.pop(key, None)


@pytest_asyncio.fixture
async def client(app) -> AsyncGenerator[AsyncClient, None]:
    """提供 httpx AsyncClient 用于测试"""
    async with AsyncClient(
        transport=ASGITransport(app=app),
        base_url="http://test",
    ) as ac:
        yield ac
