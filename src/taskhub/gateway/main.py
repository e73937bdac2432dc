"""FastAPI 应用主文件

app 创建 + lifespan 管理：DB 初始化/关闭 + 服务组装 + 路由注册 + 错误映射。
"""

from collections.abc import AsyncGenerator
from contextlib import asynccontextmanager

import structlog
from fastapi import FastAPI, Request
from starlette.responses import JSONResponse
from taskhub.core.config import get_db_path, get_push_concurrency
from taskhub.core.exceptions import (
    ForbiddenError,
    InvalidStateError,
    NotFoundError,
    TaskHubError,
    ValidationFailedError,
)
from taskhub.core.store import StoreGroup, create_store_group

from .middleware.logging_config import setup_logfire, setup_logging
from .middleware.logging_mw import LoggingMiddleware
from .middleware.trace_mw import TraceMiddleware
from .routes import (
    comments,
    health,
    lifecycle,
    notifications,
    performance,
    stream,
    tasks,
    work_groups,
)
from .services.comment_service import CommentService
from .services.notification_fanout import NotificationFanout
from .services.push_hub import PushHub
from .services.scoring_engine import ScoringEngine
from .services.task_lifecycle import TaskLifecycle
from .services.work_groups import WorkGroupService

log = structlog.get_logger()

# 类型化错误 -> HTTP 状态码（子类在前）
_ERROR_STATUS: list[tuple[type[TaskHubError], int]] = [
    (NotFoundError, 404),
    (ForbiddenError, 403),
    (InvalidStateError, 409),
    (ValidationFailedError, 422),
]


def error_status(exc: TaskHubError) -> int:
    """类型化错误对应的 HTTP 状态码"""
    for exc_type, status_code in _ERROR_STATUS:
        if isinstance(exc, exc_type):
            return status_code
    return 400


async def taskhub_error_handler(request: Request, exc: TaskHubError) -> JSONResponse:
    """TaskHubError -> {"error": {"code", "message"}}"""
    status_code = error_status(exc)
    await log.ainfo(
        "request_rejected",
        error_code=exc.code,
        status_code=status_code,
        error=exc.message,
    )
    content = {"error": {"code": exc.code, "message": exc.message}}
    if isinstance(exc, ForbiddenError):
        content["error"]["reason"] = exc.reason
    if isinstance(exc, InvalidStateError) and exc.current_status is not None:
        content["error"]["current_status"] = str(exc.current_status)
    return JSONResponse(status_code=status_code, content=content)


def init_app_state(app: FastAPI, store_group: StoreGroup, push_hub: PushHub) -> None:
    """组装服务并挂到 app.state"""
    app.state.store_group = store_group
    app.state.push_hub = push_hub

    fanout = NotificationFanout(
        store_group.notification_store,
        store_group.atomic,
        transport=push_hub,
        concurrency=get_push_concurrency(),
        read_factory=store_group.read,
    )
    lifecycle = TaskLifecycle(store_group, fanout)
    app.state.fanout = fanout
    app.state.lifecycle = lifecycle
    app.state.scoring = ScoringEngine(store_group, lifecycle)
    app.state.comment_service = CommentService(store_group, fanout)
    app.state.work_groups = WorkGroupService(store_group, fanout)


@asynccontextmanager
async def lifespan(app: FastAPI) -> AsyncGenerator[None, None]:
    """应用生命周期管理：启动时初始化 DB 与服务，关闭时清理连接"""
    store_group = await create_store_group(get_db_path())
    init_app_state(app, store_group, PushHub())
    await log.ainfo("services_initialized", push_concurrency=get_push_concurrency())

    yield

    if hasattr(app.state, "store_group") and app.state.store_group:
        await app.state.store_group.conn.close()


def create_app() -> FastAPI:
    """创建 FastAPI 应用实例"""
    app = FastAPI(
        title="TaskHub Gateway",
        version="0.1.0",
        description="TaskHub 任务生命周期与协作 API",
        lifespan=lifespan,
    )

    # 注册中间件（顺序：先 Trace 后 Logging）
    app.add_middleware(TraceMiddleware)
    app.add_middleware(LoggingMiddleware)
    app.add_exception_handler(TaskHubError, taskhub_error_handler)

    setup_logging()
    setup_logfire(app)

    app.include_router(tasks.router, tags=["tasks"])
    app.include_router(lifecycle.router, tags=["lifecycle"])
    app.include_router(comments.router, tags=["comments"])
    app.include_router(performance.router, tags=["performance"])
    app.include_router(notifications.router, tags=["notifications"])
    app.include_router(work_groups.router, tags=["work-groups"])
    app.include_router(stream.router, tags=["stream"])
    app.include_router(health.router, tags=["health"])

    return app


# 默认 app 实例（uvicorn 入口）
app = create_app()
