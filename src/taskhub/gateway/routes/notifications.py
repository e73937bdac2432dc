"""通知收件箱路由

GET /api/notifications: 当前用户通知列表（最新在前），可只看未读。
POST /api/notifications/{notification_id}/read: 置为已读，仅接收人可操作。
"""

from fastapi import APIRouter, Depends, Query

from ..deps import get_actor_id, get_fanout
from ..services.notification_fanout import NotificationFanout

router = APIRouter()


@router.get("/api/notifications")
async def list_notifications(
    unread_only: bool = Query(default=False, description="只返回未读通知"),
    actor_id: str = Depends(get_actor_id),
    fanout: NotificationFanout = Depends(get_fanout),
):
    notifications = await fanout.list_for_user(actor_id, unread_only=unread_only)
    return {
        "notifications": [n.model_dump(mode="json") for n in notifications],
        "unread_count": await fanout.unread_count(actor_id),
    }


@router.post("/api/notifications/{notification_id}/read")
async def mark_read(
    notification_id: str,
    actor_id: str = Depends(get_actor_id),
    fanout: NotificationFanout = Depends(get_fanout),
):
    notification = await fanout.mark_read(notification_id, user_id=actor_id)
    return notification.model_dump(mode="json")
