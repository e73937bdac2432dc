"""全局 pytest 配置 -- 临时 SQLite 数据库 + 用户目录 fixture"""

from collections.abc import AsyncGenerator
from datetime import UTC, datetime
from pathlib import Path

import aiosqlite
import pytest
import pytest_asyncio
from ulid import ULID


@pytest_asyncio.fixture
async def tmp_db_path(tmp_path: Path) -> Path:
    """提供临时 SQLite 数据库路径"""
    return tmp_path / "test.db"


@pytest_asyncio.fixture
async def db_conn(tmp_db_path: Path) -> AsyncGenerator[aiosqlite.Connection, None]:
    """提供已初始化的临时 SQLite 数据库连接"""
    from taskhub.core.store.sqlite_init import init_db

    conn = await aiosqlite.connect(str(tmp_db_path))
    conn.row_factory = aiosqlite.Row
    await init_db(conn)
    yield conn
    await conn.close()


@pytest_asyncio.fixture
async def store_group(tmp_db_path: Path):
    """提供完整的 StoreGroup（共享连接 + 写锁）"""
    from taskhub.core.store import create_store_group

    group = await create_store_group(str(tmp_db_path))
    yield group
    await group.conn.close()


@pytest.fixture
def add_user(store_group):
    """返回辅助函数：写入用户目录并返回 user_id"""
    from taskhub.core.models import User

    async def _add(username: str, display_name: str = "") -> str:
        user = User(
            user_id=str(ULID()),
            username=username,
            display_name=display_name,
            created_at=datetime.now(UTC),
        )
        async with store_group.atomic():
            await store_group.user_store.create_user(user)
        return user.user_id

    return _add


@pytest_asyncio.fixture
async def users(add_user) -> dict[str, str]:
    """预置用户：创建者 carol、执行人 alice / bob"""
    return {
        "carol": await add_user("carol", "Carol"),
        "alice": await add_user("alice", "Alice"),
        "bob": await add_user("bob"),
    }
