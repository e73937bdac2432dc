"""配置常量模块 -- 可通过环境变量覆盖

包含数据库路径、推送并发上限、SSE 心跳间隔等可配置常量。
"""

import os
from pathlib import Path


def _get_base_dir() -> Path:
    """获取项目 data 基础目录"""
    return Path(os.environ.get("TASKHUB_DATA_DIR", "data"))


def get_db_path() -> str:
    """获取 SQLite 数据库路径"""
    return os.environ.get(
        "TASKHUB_DB_PATH",
        str(_get_base_dir() / "sqlite" / "taskhub.db"),
    )


def get_push_concurrency() -> int:
    """获取单次扇出的最大并发推送数"""
    return max(1, int(os.environ.get("TASKHUB_PUSH_CONCURRENCY", "8")))


# 单个订阅者推送队列上限（满则断开该订阅者）
PUSH_QUEUE_MAXSIZE: int = int(
    os.environ.get("TASKHUB_PUSH_QUEUE_MAXSIZE", "100")
)

# SSE 心跳间隔（秒）
SSE_HEARTBEAT_INTERVAL: int = int(
    os.environ.get("TASKHUB_SSE_HEARTBEAT_INTERVAL", "15")
)

# @提及通知中评论内容的截断长度
MENTION_PREVIEW_LENGTH: int = 200
