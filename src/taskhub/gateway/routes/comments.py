"""评论路由

POST /api/tasks/{task_id}/comments: 提交评论，@提及的用户收到通知。
"""

from fastapi import APIRouter, Depends
from pydantic import BaseModel, Field
from starlette.responses import JSONResponse

from ..deps import get_actor_id, get_comment_service
from ..services.comment_service import CommentService

router = APIRouter()


class CommentRequest(BaseModel):
    """评论请求体"""

    text: str = Field(description="评论内容，可包含 @username")


@router.post("/api/tasks/{task_id}/comments")
async def add_comment(
    task_id: str,
    body: CommentRequest,
    actor_id: str = Depends(get_actor_id),
    service: CommentService = Depends(get_comment_service),
):
    comment = await service.add_comment(task_id, actor_id, body.text)
    return JSONResponse(status_code=201, content=comment.model_dump(mode="json"))
