"""User Domain Model -- 用户目录记录

身份认证与密码管理不在本系统范围内，此处只保留提及解析与排行榜展示所需字段。
"""

from datetime import datetime

from pydantic import BaseModel, Field


class User(BaseModel):
    """用户目录记录"""

    user_id: str = Field(description="唯一标识")
    username: str = Field(description="用户名，@提及按此精确匹配（区分大小写）")
    display_name: str = Field(default="", description="展示名称")
    created_at: datetime = Field(description="创建时间")
