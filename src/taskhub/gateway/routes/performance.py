"""绩效路由

GET /api/performance/leaderboard: 排行榜（总分降序）。
GET /api/performance/me: 当前用户的积分合计。
"""

from fastapi import APIRouter, Depends

from ..deps import get_actor_id, get_scoring
from ..services.scoring_engine import ScoringEngine

router = APIRouter()


@router.get("/api/performance/leaderboard")
async def leaderboard(scoring: ScoringEngine = Depends(get_scoring)):
    entries = await scoring.leaderboard()
    return {"entries": [e.model_dump(mode="json") for e in entries]}


@router.get("/api/performance/me")
async def my_points(
    actor_id: str = Depends(get_actor_id),
    scoring: ScoringEngine = Depends(get_scoring),
):
    return {"user_id": actor_id, "total_points": await scoring.total_points(actor_id)}
