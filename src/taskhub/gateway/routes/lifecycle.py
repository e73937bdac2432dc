"""生命周期流转路由

POST /api/tasks/{task_id}/{assign|unassign|accept|reject|finish|revision|complete}
操作者身份来自 X-User-Id；守卫失败由全局错误处理映射为 403 / 409 / 422。
"""

from fastapi import APIRouter, Depends
from pydantic import BaseModel, Field

from ..deps import get_actor_id, get_lifecycle, get_scoring
from ..services.scoring_engine import ScoringEngine
from ..services.task_lifecycle import TaskLifecycle
from .tasks import serialize_task

router = APIRouter()


class AssignRequest(BaseModel):
    assignee_id: str = Field(description="新执行人用户 ID")


class ReasonRequest(BaseModel):
    reason: str = Field(default="", description="原因 / 审核意见")


@router.post("/api/tasks/{task_id}/assign")
async def assign_task(
    task_id: str,
    body: AssignRequest,
    actor_id: str = Depends(get_actor_id),
    lifecycle: TaskLifecycle = Depends(get_lifecycle),
):
    task = await lifecycle.assign(task_id, actor_id, body.assignee_id)
    return serialize_task(task)


@router.post("/api/tasks/{task_id}/unassign")
async def unassign_task(
    task_id: str,
    actor_id: str = Depends(get_actor_id),
    lifecycle: TaskLifecycle = Depends(get_lifecycle),
):
    task = await lifecycle.unassign(task_id, actor_id)
    return serialize_task(task)


@router.post("/api/tasks/{task_id}/accept")
async def accept_task(
    task_id: str,
    actor_id: str = Depends(get_actor_id),
    lifecycle: TaskLifecycle = Depends(get_lifecycle),
):
    task = await lifecycle.accept(task_id, actor_id)
    return serialize_task(task)


@router.post("/api/tasks/{task_id}/reject")
async def reject_task(
    task_id: str,
    body: ReasonRequest,
    actor_id: str = Depends(get_actor_id),
    lifecycle: TaskLifecycle = Depends(get_lifecycle),
):
    task = await lifecycle.reject(task_id, actor_id, body.reason)
    return serialize_task(task)


@router.post("/api/tasks/{task_id}/finish")
async def finish_task(
    task_id: str,
    actor_id: str = Depends(get_actor_id),
    lifecycle: TaskLifecycle = Depends(get_lifecycle),
):
    task = await lifecycle.finish(task_id, actor_id)
    return serialize_task(task)


@router.post("/api/tasks/{task_id}/revision")
async def return_for_revision(
    task_id: str,
    body: ReasonRequest,
    actor_id: str = Depends(get_actor_id),
    lifecycle: TaskLifecycle = Depends(get_lifecycle),
):
    task = await lifecycle.return_for_revision(task_id, actor_id, body.reason)
    return serialize_task(task)


@router.post("/api/tasks/{task_id}/complete")
async def complete_task(
    task_id: str,
    body: ReasonRequest,
    actor_id: str = Depends(get_actor_id),
    scoring: ScoringEngine = Depends(get_scoring),
):
    """审核通过并为执行人记分"""
    task, point = await scoring.complete_with_score(task_id, actor_id, body.reason)
    return {
        "task": serialize_task(task),
        "performance_point": point.model_dump(mode="json"),
    }
