"""TaskHub Core Domain Models -- 公共类型导出

所有公共模型类型从此入口导入。
"""

from .comment import TaskComment
from .enums import (
    ACTION_SOURCE_STATES,
    DIFFICULTY_POINTS,
    TERMINAL_STATES,
    VALID_TRANSITIONS,
    Difficulty,
    LifecycleAction,
    TaskStatus,
    validate_transition,
)
from .notification import Notification
from .performance import LeaderboardEntry, PerformancePoint
from .task import Task
from .transaction import TaskTransaction
from .user import User
from .work_group import WorkGroup

__all__ = [
    # 枚举
    "TaskStatus",
    "Difficulty",
    "LifecycleAction",
    # 状态机
    "VALID_TRANSITIONS",
    "TERMINAL_STATES",
    "ACTION_SOURCE_STATES",
    "DIFFICULTY_POINTS",
    "validate_transition",
    # 聚合与记录
    "Task",
    "TaskComment",
    "TaskTransaction",
    "Notification",
    "PerformancePoint",
    "LeaderboardEntry",
    "User",
    "WorkGroup",
]
