"""TaskComment Domain Model -- 提交后不可变"""

from datetime import datetime

from pydantic import BaseModel, Field


class TaskComment(BaseModel):
    """任务评论"""

    comment_id: str = Field(description="唯一标识，ULID 格式")
    task_id: str = Field(description="关联的 Task ID")
    author_id: str = Field(description="作者用户 ID")
    content: str = Field(description="评论原文")
    mentioned_user_ids: list[str] = Field(
        default_factory=list,
        description="被 @提及的用户 ID（首次出现顺序，已去重，不含作者）",
    )
    created_at: datetime = Field(description="创建时间")
