"""SSE 通知流路由

GET /api/stream/notifications: 为当前用户实时推送新通知，定时心跳保活。
通知先落库后推送，断线期间的通知可通过 /api/notifications 查询补齐。
"""

import asyncio
import json

from fastapi import APIRouter, Depends
from sse_starlette.sse import EventSourceResponse
from taskhub.core.config import SSE_HEARTBEAT_INTERVAL

from ..deps import get_actor_id, get_push_hub
from ..services.push_hub import PushHub

router = APIRouter()


@router.get("/api/stream/notifications")
async def stream_notifications(
    actor_id: str = Depends(get_actor_id),
    push_hub: PushHub = Depends(get_push_hub),
):
    """SSE 通知流端点"""
    queue = await push_hub.subscribe(actor_id)

    async def event_generator():
        try:
            while True:
                try:
                    payload = await asyncio.wait_for(
                        queue.get(), timeout=SSE_HEARTBEAT_INTERVAL
                    )
                    yield {
                        "id": payload["notification_id"],
                        "event": "notification",
                        "data": json.dumps(payload, ensure_ascii=False),
                    }
                except TimeoutError:
                    yield {"comment": "heartbeat"}
        finally:
            await push_hub.unsubscribe(actor_id, queue)

    return EventSourceResponse(event_generator())
