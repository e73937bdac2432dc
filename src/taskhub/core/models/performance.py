"""PerformancePoint / LeaderboardEntry Domain Model"""

from datetime import datetime

from pydantic import BaseModel, Field


class PerformancePoint(BaseModel):
    """绩效积分记录 -- 每个已完成任务恰好一条，不可变"""

    point_id: str = Field(description="唯一标识，ULID 格式")
    user_id: str = Field(description="积分接收人用户 ID")
    task_id: str = Field(description="关联的 Task ID")
    points: int = Field(description="积分")
    reason: str = Field(default="", description="评语")
    created_at: datetime = Field(description="创建时间")


class LeaderboardEntry(BaseModel):
    """排行榜条目（派生数据，不落库）"""

    user_id: str
    user_name: str = Field(default="", description="展示名称")
    total_points: int = Field(default=0)
