"""依赖注入模块 -- 通过 FastAPI Depends 注入 Store 与服务实例

实例通过 app.state 管理，在 lifespan 中初始化/清理。
"""

from fastapi import Header, Request
from taskhub.core.exceptions import ValidationFailedError
from taskhub.core.store import StoreGroup

from .services.comment_service import CommentService
from .services.notification_fanout import NotificationFanout
from .services.push_hub import PushHub
from .services.scoring_engine import ScoringEngine
from .services.task_lifecycle import TaskLifecycle
from .services.work_groups import WorkGroupService


def get_store_group(request: Request) -> StoreGroup:
    """从 app.state 获取 StoreGroup 实例"""
    return request.app.state.store_group


def get_push_hub(request: Request) -> PushHub:
    """从 app.state 获取 PushHub 实例"""
    return request.app.state.push_hub


def get_fanout(request: Request) -> NotificationFanout:
    return request.app.state.fanout


def get_lifecycle(request: Request) -> TaskLifecycle:
    return request.app.state.lifecycle


def get_scoring(request: Request) -> ScoringEngine:
    return request.app.state.scoring


def get_comment_service(request: Request) -> CommentService:
    return request.app.state.comment_service


def get_work_groups(request: Request) -> WorkGroupService:
    return request.app.state.work_groups


def get_actor_id(x_user_id: str | None = Header(default=None)) -> str:
    """从 X-User-Id 请求头读取操作者身份（令牌签发不在本服务内）"""
    if x_user_id is None or not x_user_id.strip():
        raise ValidationFailedError("X-User-Id", "X-User-Id header is required")
    return x_user_id.strip()
