"""原子事务封装

同一进程内所有 Store 共享一个 aiosqlite 连接，
写锁保证一个协程的事务单元不会被另一个协程的 commit 提前落盘。
任务流转、审计流水、通知落库在同一单元内原子提交。
"""

import asyncio
from collections.abc import AsyncIterator
from contextlib import asynccontextmanager

import aiosqlite


@asynccontextmanager
async def atomic(
    conn: aiosqlite.Connection,
    write_lock: asyncio.Lock,
) -> AsyncIterator[aiosqlite.Connection]:
    """在写锁保护下执行一个事务单元：正常退出提交，异常回滚后重新抛出

    Args:
        conn: 数据库连接（需在同一连接上操作以保证事务性）
        write_lock: StoreGroup 共享的写锁

    Raises:
        Exception: 单元内任何异常，回滚后原样抛出
    """
    async with write_lock:
        try:
            yield conn
            await conn.commit()
        except BaseException:
            await conn.rollback()
            raise


@asynccontextmanager
async def read_unit(
    conn: aiosqlite.Connection,
    write_lock: asyncio.Lock,
) -> AsyncIterator[aiosqlite.Connection]:
    """在写锁保护下执行只读查询

    共享连接上未提交的写入对同连接读可见，持锁读取保证只看到已提交状态。
    单元内不得再开启 atomic（asyncio.Lock 不可重入）。
    """
    async with write_lock:
        yield conn
