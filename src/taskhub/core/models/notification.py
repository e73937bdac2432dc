"""Notification Domain Model

仅允许 mark read 翻转 is_read，从不删除。
"""

from datetime import datetime
from typing import Any

from pydantic import BaseModel, Field


class Notification(BaseModel):
    """站内通知"""

    notification_id: str = Field(description="唯一标识，ULID 格式")
    user_id: str = Field(description="接收人用户 ID")
    message: str = Field(description="通知文本")
    task_id: str | None = Field(default=None, description="关联的 Task ID")
    is_read: bool = Field(default=False, description="是否已读")
    created_at: datetime = Field(description="创建时间")

    def to_push_payload(self) -> dict[str, Any]:
        """转换为推送给客户端的 payload"""
        return {
            "notification_id": self.notification_id,
            "message": self.message,
            "task_id": self.task_id,
            "created_at": self.created_at.isoformat(),
        }
