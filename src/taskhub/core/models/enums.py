"""枚举定义 -- 任务状态机与难度

包含 TaskStatus 状态机、Difficulty、LifecycleAction 枚举，
以及 VALID_TRANSITIONS 合法流转映射、TERMINAL_STATES 终态集合
和 DIFFICULTY_POINTS 固定积分表。
"""

from enum import StrEnum


class TaskStatus(StrEnum):
    """Task 状态机"""

    PENDING = "PENDING"
    ASSIGNED = "ASSIGNED"
    IN_PROGRESS = "IN_PROGRESS"
    UNDER_REVIEW = "UNDER_REVIEW"

    # 终态
    COMPLETED = "COMPLETED"
    EXPIRED = "EXPIRED"


class Difficulty(StrEnum):
    """任务难度"""

    EASY = "EASY"
    MEDIUM = "MEDIUM"
    HARD = "HARD"


class LifecycleAction(StrEnum):
    """生命周期操作"""

    ASSIGN = "ASSIGN"
    UNASSIGN = "UNASSIGN"
    ACCEPT = "ACCEPT"
    REJECT = "REJECT"
    FINISH = "FINISH"
    RETURN_FOR_REVISION = "RETURN_FOR_REVISION"
    COMPLETE = "COMPLETE"
    EXPIRE = "EXPIRE"


TERMINAL_STATES: set[TaskStatus] = {
    TaskStatus.COMPLETED,
    TaskStatus.EXPIRED,
}

_ACTIVE_STATES: set[TaskStatus] = set(TaskStatus) - TERMINAL_STATES

# 合法状态流转（含自环：ASSIGNED 上的改派 / 拒绝，PENDING / ASSIGNED 上的取消指派）
VALID_TRANSITIONS: dict[TaskStatus, set[TaskStatus]] = {
    TaskStatus.PENDING: {TaskStatus.PENDING, TaskStatus.ASSIGNED, TaskStatus.EXPIRED},
    TaskStatus.ASSIGNED: {TaskStatus.ASSIGNED, TaskStatus.IN_PROGRESS, TaskStatus.EXPIRED},
    TaskStatus.IN_PROGRESS: {
        TaskStatus.ASSIGNED,
        TaskStatus.UNDER_REVIEW,
        TaskStatus.EXPIRED,
    },
    TaskStatus.UNDER_REVIEW: {
        TaskStatus.ASSIGNED,
        TaskStatus.IN_PROGRESS,
        TaskStatus.COMPLETED,
        TaskStatus.EXPIRED,
    },
    # 终态不可再流转
    TaskStatus.COMPLETED: set(),
    TaskStatus.EXPIRED: set(),
}

# 各操作允许的起始状态
ACTION_SOURCE_STATES: dict[LifecycleAction, set[TaskStatus]] = {
    LifecycleAction.ASSIGN: _ACTIVE_STATES,
    # 只在尚未开始执行时取消指派：进行中的任务必须有执行人
    LifecycleAction.UNASSIGN: {TaskStatus.PENDING, TaskStatus.ASSIGNED},
    LifecycleAction.ACCEPT: {TaskStatus.ASSIGNED},
    LifecycleAction.REJECT: {TaskStatus.ASSIGNED},
    LifecycleAction.FINISH: {TaskStatus.IN_PROGRESS},
    LifecycleAction.RETURN_FOR_REVISION: {TaskStatus.UNDER_REVIEW},
    LifecycleAction.COMPLETE: {TaskStatus.UNDER_REVIEW},
    LifecycleAction.EXPIRE: _ACTIVE_STATES,
}

# 难度 -> 积分（固定表，运行时不可配置）
DIFFICULTY_POINTS: dict[Difficulty, int] = {
    Difficulty.EASY: 10,
    Difficulty.MEDIUM: 20,
    Difficulty.HARD: 30,
}


def validate_transition(from_status: TaskStatus, to_status: TaskStatus) -> bool:
    """验证状态流转是否合法

    Args:
        from_status: 当前状态
        to_status: 目标状态

    Returns:
        True 如果流转合法，否则 False
    """
    allowed = VALID_TRANSITIONS.get(from_status, set())
    return to_status in allowed
