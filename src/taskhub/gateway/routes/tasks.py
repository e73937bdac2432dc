"""任务路由

POST /api/tasks: 创建任务（PENDING）。
GET /api/tasks: 任务列表查询，支持 status / assigned_to 筛选。
GET /api/tasks/{task_id}: 任务详情，含评论与审计轨迹。
POST /api/tasks/expire-overdue: 截止时间触发器，批量过期超时任务。
"""

from datetime import datetime

from fastapi import APIRouter, Depends, Query
from pydantic import BaseModel, Field
from starlette.responses import JSONResponse
from taskhub.core.models import Difficulty, Task, TaskStatus

from ..deps import get_actor_id, get_lifecycle
from ..services.task_lifecycle import TaskLifecycle

router = APIRouter()


class CreateTaskRequest(BaseModel):
    """创建任务请求体"""

    title: str = Field(description="任务标题")
    description: str = Field(default="", description="任务描述")
    difficulty: Difficulty = Field(default=Difficulty.EASY, description="难度")
    deadline: datetime | None = Field(default=None, description="截止时间（ISO-8601）")
    parent_task_id: str | None = Field(default=None, description="父任务 ID")


class ExpireOverdueRequest(BaseModel):
    """过期扫描请求体；now 为空时取当前时间"""

    now: datetime | None = None


def serialize_task(task: Task, include_comments: bool = False) -> dict:
    """Task -> JSON 字典（snake_case 字段，枚举为大写字符串）"""
    exclude = None if include_comments else {"comments"}
    return task.model_dump(mode="json", exclude=exclude)


@router.post("/api/tasks")
async def create_task(
    body: CreateTaskRequest,
    actor_id: str = Depends(get_actor_id),
    lifecycle: TaskLifecycle = Depends(get_lifecycle),
):
    """创建任务，返回 201"""
    task = await lifecycle.create_task(
        actor_id,
        body.title,
        description=body.description,
        difficulty=body.difficulty,
        deadline=body.deadline,
        parent_task_id=body.parent_task_id,
    )
    return JSONResponse(status_code=201, content=serialize_task(task))


@router.get("/api/tasks")
async def list_tasks(
    status: TaskStatus | None = Query(default=None, description="按状态筛选"),
    assigned_to: str | None = Query(default=None, description="按执行人筛选"),
    lifecycle: TaskLifecycle = Depends(get_lifecycle),
):
    """查询任务列表，按 created_at 倒序"""
    tasks = await lifecycle.list_tasks(status=status, assigned_to=assigned_to)
    return {"tasks": [serialize_task(t) for t in tasks]}


@router.post("/api/tasks/expire-overdue")
async def expire_overdue(
    body: ExpireOverdueRequest | None = None,
    lifecycle: TaskLifecycle = Depends(get_lifecycle),
):
    """过期所有截止时间已过的非终态任务"""
    expired = await lifecycle.expire_overdue(body.now if body else None)
    return {"expired": [serialize_task(t) for t in expired]}


@router.get("/api/tasks/{task_id}")
async def get_task_detail(
    task_id: str,
    lifecycle: TaskLifecycle = Depends(get_lifecycle),
):
    """查询任务详情，包含评论与审计轨迹"""
    task, trail = await lifecycle.get_task_detail(task_id)
    return {
        "task": serialize_task(task, include_comments=True),
        "transactions": [t.model_dump(mode="json") for t in trail],
    }
