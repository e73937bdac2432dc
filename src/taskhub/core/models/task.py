"""Task Domain Model

Task 是评论与状态的聚合根。
所有状态更新必须经过 TaskLifecycle 的流转函数，不允许直接改写。
"""

from datetime import datetime

from pydantic import BaseModel, Field

from .comment import TaskComment
from .enums import Difficulty, TaskStatus


class Task(BaseModel):
    """Task 数据模型

    assigned_to 为空仅出现在 PENDING 或被拒绝 / 取消指派后的非终态；
    COMPLETED 任务的 assigned_to 恒等于完成时 PerformancePoint 的接收人。
    """

    task_id: str = Field(description="唯一标识，ULID 格式")
    title: str = Field(description="任务标题")
    description: str = Field(default="", description="任务描述")
    difficulty: Difficulty = Field(default=Difficulty.EASY, description="难度")
    deadline: datetime | None = Field(default=None, description="截止时间")
    status: TaskStatus = Field(default=TaskStatus.PENDING, description="当前状态")
    created_by: str = Field(description="创建者用户 ID")
    assigned_to: str | None = Field(default=None, description="执行人用户 ID")
    parent_task_id: str | None = Field(default=None, description="父任务 ID")
    created_at: datetime = Field(description="创建时间")
    updated_at: datetime = Field(description="更新时间")
    version: int = Field(default=1, description="乐观并发版本号，每次流转 +1")
    comments: list[TaskComment] = Field(
        default_factory=list,
        description="评论列表（仅详情查询时填充，按时间正序）",
    )
