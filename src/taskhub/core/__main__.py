"""CLI 入口模块 -- python -m taskhub.core <command>

支持的命令：
  init-db               初始化数据库表结构
  add-user <username>   向用户目录添加用户
  leaderboard           打印绩效排行榜
"""

import asyncio
import sys
from datetime import UTC, datetime

from ulid import ULID

from .config import get_db_path

_USAGE = """用法: python -m taskhub.core <command>
命令:
  init-db               初始化数据库表结构
  add-user <username>   向用户目录添加用户
  leaderboard           打印绩效排行榜"""


def main() -> None:
    """CLI 主入口"""
    if len(sys.argv) < 2:
        print(_USAGE)
        sys.exit(1)

    command = sys.argv[1]

    if command == "init-db":
        asyncio.run(init_database())
    elif command == "add-user":
        if len(sys.argv) < 3:
            print("用法: python -m taskhub.core add-user <username> [display_name]")
            sys.exit(1)
        display_name = sys.argv[3] if len(sys.argv) > 3 else ""
        asyncio.run(add_user(sys.argv[2], display_name))
    elif command == "leaderboard":
        asyncio.run(print_leaderboard())
    else:
        print(f"未知命令: {command}")
        print("可用命令: init-db, add-user, leaderboard")
        sys.exit(1)


async def init_database() -> None:
    """创建数据库与表结构"""
    from .store import create_store_group

    db_path = get_db_path()
    print(f"数据库路径: {db_path}")

    store_group = await create_store_group(db_path)
    await store_group.conn.close()
    print("初始化完成")


async def add_user(username: str, display_name: str = "") -> None:
    """添加用户目录记录"""
    from .models.user import User
    from .store import create_store_group

    store_group = await create_store_group(get_db_path())
    try:
        user = User(
            user_id=str(ULID()),
            username=username,
            display_name=display_name,
            created_at=datetime.now(UTC),
        )
        async with store_group.atomic():
            await store_group.user_store.create_user(user)
        print(f"已添加用户 {username}: {user.user_id}")
    finally:
        await store_group.conn.close()


async def print_leaderboard() -> None:
    """打印排行榜"""
    from .leaderboard import compute_leaderboard
    from .store import create_store_group

    store_group = await create_store_group(get_db_path())
    try:
        entries = await compute_leaderboard(store_group.performance_store)
        if not entries:
            print("暂无积分记录")
            return
        for rank, entry in enumerate(entries, start=1):
            name = entry.user_name or entry.user_id
            print(f"{rank:>3}. {name:<24} {entry.total_points:>6}")
    finally:
        await store_group.conn.close()


if __name__ == "__main__":
    main()
