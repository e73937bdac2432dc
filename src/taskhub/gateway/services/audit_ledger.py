"""AuditLedger -- 审计流水写入器

只做必填字段校验与 append；在调用方的事务单元内写入，
自身从不提交，因此与所属流转一同提交或一同回滚。
"""

from datetime import UTC, datetime

from taskhub.core.exceptions import ValidationFailedError
from taskhub.core.models import TaskTransaction
from taskhub.core.store.protocols import TransactionStore
from ulid import ULID


class AuditLedger:
    """审计流水（append-only）"""

    def __init__(self, store: TransactionStore) -> None:
        self._store = store

    async def record(
        self,
        task_id: str,
        from_user_id: str,
        to_user_id: str,
        comment: str,
    ) -> TaskTransaction:
        """追加一条审计流水

        Raises:
            ValidationFailedError: task_id / from_user_id / to_user_id 为空
        """
        for field, value in (
            ("task_id", task_id),
            ("from_user_id", from_user_id),
            ("to_user_id", to_user_id),
        ):
            if not value or not value.strip():
                raise ValidationFailedError(field)

        record = TaskTransaction(
            transaction_id=str(ULID()),
            task_id=task_id,
            from_user_id=from_user_id,
            to_user_id=to_user_id,
            comment=comment,
            ts=datetime.now(UTC),
        )
        await self._store.append_transaction(record)
        return record

    async def list_for_task(self, task_id: str) -> list[TaskTransaction]:
        """查询任务的审计轨迹（写入顺序）"""
        return await self._store.get_transactions_for_task(task_id)
