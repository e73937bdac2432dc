"""TaskHub 异常体系

生命周期与积分操作向调用方抛出的类型化错误。
每个异常携带稳定的 code，供 HTTP 层映射为错误响应。
"""


class TaskHubError(Exception):
    """TaskHub 基础异常"""

    code: str = "TASKHUB_ERROR"

    def __init__(self, message: str, code: str | None = None) -> None:
        """
        Args:
            message: 错误描述
            code: 覆盖默认错误码
        """
        super().__init__(message)
        self.message = message
        if code is not None:
            self.code = code


class NotFoundError(TaskHubError):
    """任务 / 用户 / 通知不存在"""

    code = "NOT_FOUND"

    def __init__(self, entity: str, entity_id: str) -> None:
        super().__init__(
            f"{entity} with id {entity_id} does not exist",
            code=f"{entity.upper()}_NOT_FOUND",
        )
        self.entity = entity
        self.entity_id = entity_id


class ForbiddenError(TaskHubError):
    """操作者缺少所需关系（非创建者、非执行人、自我指派、非组长等）"""

    code = "FORBIDDEN"

    # reason 取值
    NOT_CREATOR = "NOT_CREATOR"
    NOT_ASSIGNEE = "NOT_ASSIGNEE"
    SELF_ASSIGNMENT = "SELF_ASSIGNMENT"
    NOT_RECIPIENT = "NOT_RECIPIENT"
    NOT_LEADER = "NOT_LEADER"

    def __init__(self, message: str, reason: str) -> None:
        super().__init__(message)
        self.reason = reason


class InvalidStateError(TaskHubError):
    """当前状态下操作不合法"""

    code = "INVALID_STATE"

    def __init__(self, message: str, current_status: str | None = None) -> None:
        super().__init__(message)
        self.current_status = current_status


class TaskStatusConflictError(InvalidStateError):
    """并发竞争失败：加载后任务已被其他操作修改

    条件更新（version 校验）未命中任何行时抛出。
    """

    code = "TASK_STATUS_CONFLICT"

    def __init__(self, task_id: str, expected_version: int) -> None:
        super().__init__(
            f"Task {task_id} was modified concurrently (expected version {expected_version})"
        )
        self.task_id = task_id
        self.expected_version = expected_version


class ValidationFailedError(TaskHubError):
    """必填输入缺失或为空"""

    code = "VALIDATION_FAILED"

    def __init__(self, field: str, message: str | None = None) -> None:
        super().__init__(message or f"{field} must not be empty")
        self.field = field
