"""TraceMiddleware -- 任务级日志上下文

从 /api/tasks/{task_id}/... 路径中提取 task_id 并绑定到 structlog contextvars，
同一任务的流转日志可按 task_id 串联。
"""

import structlog
from starlette.middleware.base import BaseHTTPMiddleware, RequestResponseEndpoint
from starlette.requests import Request
from starlette.responses import Response

# ULID 字符串长度
_ULID_LENGTH = 26


def extract_task_id(path: str) -> str | None:
    """从请求路径中提取 task_id；子路由（如 expire-overdue）返回 None"""
    parts = path.strip("/").split("/")
    for i, part in enumerate(parts[:-1]):
        if part == "tasks":
            candidate = parts[i + 1]
            if len(candidate) == _ULID_LENGTH:
                return candidate
    return None


class TraceMiddleware(BaseHTTPMiddleware):
    """任务级追踪中间件"""

    async def dispatch(
        self, request: Request, call_next: RequestResponseEndpoint
    ) -> Response:
        task_id = extract_task_id(request.url.path)
        if task_id:
            structlog.contextvars.bind_contextvars(task_id=task_id)

        return await call_next(request)
