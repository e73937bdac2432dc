"""TaskHub Core Store -- SQLite 持久化实现

提供工厂函数创建共享数据库连接的 Store 实例组。
"""

import asyncio
from contextlib import AbstractAsyncContextManager
from pathlib import Path

import aiosqlite

from .comment_store import SqliteCommentStore
from .notification_store import SqliteNotificationStore
from .performance_store import SqlitePerformanceStore
from .sqlite_init import init_db, verify_wal_mode
from .task_store import SqliteTaskStore
from .transaction import atomic, read_unit
from .transaction_store import SqliteTransactionStore
from .user_store import SqliteUserStore
from .work_group_store import SqliteWorkGroupStore


class StoreGroup:
    """Store 实例组 -- 共享同一个数据库连接与写锁"""

    def __init__(self, conn: aiosqlite.Connection) -> None:
        self.conn = conn
        self.write_lock = asyncio.Lock()
        self.user_store = SqliteUserStore(conn)
        self.task_store = SqliteTaskStore(conn)
        self.transaction_store = SqliteTransactionStore(conn)
        self.comment_store = SqliteCommentStore(conn)
        self.notification_store = SqliteNotificationStore(conn)
        self.performance_store = SqlitePerformanceStore(conn)
        self.work_group_store = SqliteWorkGroupStore(conn)

    def atomic(self) -> AbstractAsyncContextManager[aiosqlite.Connection]:
        """开启一个事务单元（写锁 + commit/rollback）"""
        return atomic(self.conn, self.write_lock)

    def read(self) -> AbstractAsyncContextManager[aiosqlite.Connection]:
        """只读单元：与事务单元互斥，只能看到已提交的状态"""
        return read_unit(self.conn, self.write_lock)


async def create_store_group(db_path: str) -> StoreGroup:
    """创建 Store 实例组

    Args:
        db_path: SQLite 数据库文件路径

    Returns:
        StoreGroup 实例
    """
    # 确保数据库目录存在
    db_dir = Path(db_path).parent
    db_dir.mkdir(parents=True, exist_ok=True)

    conn = await aiosqlite.connect(db_path)
    conn.row_factory = aiosqlite.Row
    await init_db(conn)

    return StoreGroup(conn=conn)


__all__ = [
    "StoreGroup",
    "create_store_group",
    "SqliteUserStore",
    "SqliteTaskStore",
    "SqliteTransactionStore",
    "SqliteCommentStore",
    "SqliteNotificationStore",
    "SqlitePerformanceStore",
    "SqliteWorkGroupStore",
    "init_db",
    "verify_wal_mode",
    "atomic",
    "read_unit",
]
