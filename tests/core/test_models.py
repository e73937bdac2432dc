"""领域模型单元测试

测试内容：
1. 枚举值为大写字符串
2. Task 默认值
3. Notification 推送 payload
4. 模型 JSON 序列化使用 snake_case 字段
"""

from datetime import UTC, datetime

from taskhub.core.models import (
    DIFFICULTY_POINTS,
    Difficulty,
    LifecycleAction,
    Notification,
    PerformancePoint,
    Task,
    TaskStatus,
)


class TestEnums:
    """枚举定义"""

    def test_task_status_values(self):
        assert [s.value for s in TaskStatus] == [
            "PENDING",
            "ASSIGNED",
            "IN_PROGRESS",
            "UNDER_REVIEW",
            "COMPLETED",
            "EXPIRED",
        ]

    def test_difficulty_values(self):
        assert {d.value for d in Difficulty} == {"EASY", "MEDIUM", "HARD"}

    def test_lifecycle_action_is_str(self):
        assert LifecycleAction.RETURN_FOR_REVISION == "RETURN_FOR_REVISION"

    def test_difficulty_points_table(self):
        """固定积分表：10 / 20 / 30"""
        assert DIFFICULTY_POINTS == {
            Difficulty.EASY: 10,
            Difficulty.MEDIUM: 20,
            Difficulty.HARD: 30,
        }


class TestTaskModel:
    """Task 模型"""

    def test_defaults(self):
        now = datetime.now(UTC)
        task = Task(
            task_id="01JTASK0000000000000000001",
            title="Prepare demo",
            created_by="u-1",
            created_at=now,
            updated_at=now,
        )
        assert task.status == TaskStatus.PENDING
        assert task.difficulty == Difficulty.EASY
        assert task.assigned_to is None
        assert task.version == 1
        assert task.comments == []

    def test_model_copy_transition(self):
        """流转以 model_copy 产生新聚合，原对象不变"""
        now = datetime.now(UTC)
        task = Task(
            task_id="01JTASK0000000000000000002",
            title="Prepare demo",
            created_by="u-1",
            created_at=now,
            updated_at=now,
        )
        moved = task.model_copy(
            update={"status": TaskStatus.ASSIGNED, "assigned_to": "u-2"}
        )
        assert moved.status == TaskStatus.ASSIGNED
        assert task.status == TaskStatus.PENDING
        assert task.assigned_to is None

    def test_json_dump_snake_case(self):
        now = datetime.now(UTC)
        task = Task(
            task_id="01JTASK0000000000000000003",
            title="Prepare demo",
            difficulty=Difficulty.HARD,
            created_by="u-1",
            created_at=now,
            updated_at=now,
        )
        data = task.model_dump(mode="json")
        assert data["difficulty"] == "HARD"
        assert data["created_by"] == "u-1"
        assert "assigned_to" in data
        assert "createdBy" not in data


class TestNotificationModel:
    """Notification 模型"""

    def test_default_unread(self):
        n = Notification(
            notification_id="n-1",
            user_id="u-1",
            message="hello",
            created_at=datetime.now(UTC),
        )
        assert n.is_read is False
        assert n.task_id is None

    def test_push_payload(self):
        ts = datetime(2026, 3, 1, 12, 0, tzinfo=UTC)
        n = Notification(
            notification_id="n-1",
            user_id="u-1",
            message="New task: Deploy assigned",
            task_id="t-1",
            created_at=ts,
        )
        payload = n.to_push_payload()
        assert payload == {
            "notification_id": "n-1",
            "message": "New task: Deploy assigned",
            "task_id": "t-1",
            "created_at": ts.isoformat(),
        }


class TestPerformancePoint:
    def test_reason_defaults_empty(self):
        p = PerformancePoint(
            point_id="p-1",
            user_id="u-1",
            task_id="t-1",
            points=30,
            created_at=datetime.now(UTC),
        )
        assert p.reason == ""
