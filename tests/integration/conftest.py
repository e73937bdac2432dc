"""集成测试共享 fixture"""

import os
from collections.abc import AsyncGenerator
from datetime import UTC, datetime
from pathlib import Path

import pytest_asyncio
from httpx import ASGITransport, AsyncClient
from taskhub.core.models import User
from taskhub.core.store import create_store_group
from taskhub.gateway.services.push_hub import PushHub
from ulid import ULID


@pytest_asyncio.fixture
async def integration_app(tmp_path: Path):
    """集成测试用 FastAPI app（预置 carol / alice / bob 三个用户）"""
    os.environ["TASKHUB_DB_PATH"] = str(tmp_path / "test.db")
    os.environ["LOGFIRE_SEND_TO_LOGFIRE"] = "false"

    from taskhub.gateway.main import create_app, init_app_state

    app = create_app()

    store_group = await create_store_group(str(tmp_path / "test.db"))
    init_app_state(app, store_group, PushHub())

    app.state.test_users = {}
    async with store_group.atomic():
        for username, display_name in (("carol", "Carol"), ("alice", "Alice"), ("bob", "")):
            user = User(
                user_id=str(ULID()),
                username=username,
                display_name=display_name,
                created_at=datetime.now(UTC),
            )
            await store_group.user_store.create_user(user)
            app.state.test_users[username] = user.user_id

    yield app

    await store_group.conn.close()
    os.environ.pop("TASKHUB_DB_PATH", None)
    os.environ.pop("LOGFIRE_SEND_TO_LOGFIRE", None)


@pytest_asyncio.fixture
async def client(integration_app) -> AsyncGenerator[AsyncClient, None]:
    async with AsyncClient(
        transport=ASGITransport(app=integration_app),
        base_url="http://test",
    ) as ac:
        yield ac


@pytest_asyncio.fixture
async def team(integration_app) -> dict[str, str]:
    """username -> user_id"""
    return integration_app.state.test_users
