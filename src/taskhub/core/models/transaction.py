"""TaskTransaction Domain Model -- 审计流水

流水表 append-only，不允许更新或删除。
每次状态流转恰好写入一条记录。
"""

from datetime import datetime

from pydantic import BaseModel, Field


class TaskTransaction(BaseModel):
    """审计流水记录"""

    transaction_id: str = Field(description="唯一标识，ULID 格式，时间有序")
    task_id: str = Field(description="关联的 Task ID")
    from_user_id: str = Field(description="发起方用户 ID")
    to_user_id: str = Field(description="接收方用户 ID")
    comment: str = Field(description="流转描述")
    ts: datetime = Field(description="记录时间戳")
