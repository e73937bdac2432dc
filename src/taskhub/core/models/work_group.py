"""WorkGroup Domain Model -- 工作组与成员"""

from datetime import datetime

from pydantic import BaseModel, Field


class WorkGroup(BaseModel):
    """工作组：一个组长 + 有序成员列表"""

    group_id: str = Field(description="唯一标识，ULID 格式")
    name: str = Field(description="工作组名称")
    leader_id: str = Field(description="组长用户 ID，只有组长可以调整成员")
    member_ids: list[str] = Field(default_factory=list, description="成员用户 ID，按加入顺序")
    created_at: datetime = Field(description="创建时间")
