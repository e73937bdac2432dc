"""工作组路由

POST /api/work-groups: 创建工作组，操作者即组长。
GET /api/work-groups/{group_id}: 工作组详情（含成员）。
POST /api/work-groups/{group_id}/members/{user_id}: 组长加入成员。
DELETE /api/work-groups/{group_id}/members/{user_id}: 组长移出成员。
GET /api/work-groups/{group_id}/ranking: 组内积分排行。
"""

from fastapi import APIRouter, Depends
from pydantic import BaseModel, Field
from starlette.responses import JSONResponse

from ..deps import get_actor_id, get_work_groups
from ..services.work_groups import WorkGroupService

router = APIRouter()


class CreateWorkGroupRequest(BaseModel):
    """创建工作组请求体"""

    name: str = Field(description="工作组名称")


@router.post("/api/work-groups")
async def create_work_group(
    body: CreateWorkGroupRequest,
    actor_id: str = Depends(get_actor_id),
    service: WorkGroupService = Depends(get_work_groups),
):
    group = await service.create_group(body.name, actor_id)
    return JSONResponse(status_code=201, content=group.model_dump(mode="json"))


@router.get("/api/work-groups/{group_id}")
async def get_work_group(
    group_id: str,
    service: WorkGroupService = Depends(get_work_groups),
):
    group = await service.get_group(group_id)
    return group.model_dump(mode="json")


@router.post("/api/work-groups/{group_id}/members/{user_id}")
async def add_member(
    group_id: str,
    user_id: str,
    actor_id: str = Depends(get_actor_id),
    service: WorkGroupService = Depends(get_work_groups),
):
    group = await service.add_member(group_id, user_id, actor_id)
    return group.model_dump(mode="json")


@router.delete("/api/work-groups/{group_id}/members/{user_id}")
async def remove_member(
    group_id: str,
    user_id: str,
    actor_id: str = Depends(get_actor_id),
    service: WorkGroupService = Depends(get_work_groups),
):
    group = await service.remove_member(group_id, user_id, actor_id)
    return group.model_dump(mode="json")


@router.get("/api/work-groups/{group_id}/ranking")
async def group_ranking(
    group_id: str,
    service: WorkGroupService = Depends(get_work_groups),
):
    entries = await service.ranking(group_id)
    return {"group_id": group_id, "entries": [e.model_dump(mode="json") for e in entries]}
