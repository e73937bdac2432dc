"""Store 单元测试

测试内容：
1. TaskStore 查询与筛选
2. CommentStore 提及关系保持顺序
3. NotificationStore 批量写入 / 未读 / 已读
4. PerformanceStore 每任务唯一 + 求和
5. UserStore 用户名精确匹配
6. WorkGroupStore 成员按加入顺序 + 重复加入违反主键
"""

import sqlite3
from datetime import UTC, datetime, timedelta

import pytest
from taskhub.core.models import (
    Notification,
    PerformancePoint,
    TaskComment,
    TaskStatus,
    WorkGroup,
)


class TestTaskStore:
    async def test_get_missing_returns_none(self, store_group):
        assert await store_group.task_store.get_task("missing") is None

    async def test_list_filters(self, store_group, users, make_task):
        pending = make_task(users["carol"])
        assigned = make_task(
            users["carol"], status=TaskStatus.ASSIGNED, assigned_to=users["alice"]
        )
        async with store_group.atomic():
            await store_group.task_store.create_task(pending)
            await store_group.task_store.create_task(assigned)

        all_tasks = await store_group.task_store.list_tasks()
        assert {t.task_id for t in all_tasks} == {pending.task_id, assigned.task_id}

        by_status = await store_group.task_store.list_tasks(status="ASSIGNED")
        assert [t.task_id for t in by_status] == [assigned.task_id]

        by_assignee = await store_group.task_store.list_tasks(assigned_to=users["alice"])
        assert [t.task_id for t in by_assignee] == [assigned.task_id]

    async def test_list_overdue(self, store_group, users, make_task):
        now = datetime.now(UTC)
        overdue = make_task(users["carol"], deadline=now - timedelta(hours=1))
        future = make_task(users["carol"], deadline=now + timedelta(hours=1))
        no_deadline = make_task(users["carol"])
        done = make_task(
            users["carol"],
            status=TaskStatus.COMPLETED,
            assigned_to=users["alice"],
            deadline=now - timedelta(days=1),
        )
        async with store_group.atomic():
            for task in (overdue, future, no_deadline, done):
                await store_group.task_store.create_task(task)

        result = await store_group.task_store.list_overdue(
            now, ["PENDING", "ASSIGNED", "IN_PROGRESS", "UNDER_REVIEW"]
        )
        assert [t.task_id for t in result] == [overdue.task_id]

    async def test_deadline_round_trip(self, store_group, users, make_task):
        deadline = datetime(2026, 6, 30, 17, 0, tzinfo=UTC)
        task = make_task(users["carol"], deadline=deadline)
        async with store_group.atomic():
            await store_group.task_store.create_task(task)
        stored = await store_group.task_store.get_task(task.task_id)
        assert stored.deadline == deadline


class TestCommentStore:
    async def test_mentions_keep_order(self, store_group, users, make_task):
        task = make_task(users["carol"])
        comment = TaskComment(
            comment_id="c-1",
            task_id=task.task_id,
            author_id=users["carol"],
            content="@bob @alice please check",
            mentioned_user_ids=[users["bob"], users["alice"]],
            created_at=datetime.now(UTC),
        )
        async with store_group.atomic():
            await store_group.task_store.create_task(task)
            await store_group.comment_store.add_comment(comment)

        comments = await store_group.comment_store.list_comments_for_task(task.task_id)
        assert len(comments) == 1
        assert comments[0].mentioned_user_ids == [users["bob"], users["alice"]]

    async def test_empty_task(self, store_group):
        assert await store_group.comment_store.list_comments_for_task("none") == []


class TestNotificationStore:
    def _make(self, n: int, user_id: str) -> list[Notification]:
        base = datetime(2026, 1, 1, tzinfo=UTC)
        return [
            Notification(
                notification_id=f"n-{i}",
                user_id=user_id,
                message=f"message {i}",
                created_at=base + timedelta(minutes=i),
            )
            for i in range(n)
        ]

    async def test_batch_insert_and_newest_first(self, store_group):
        async with store_group.atomic():
            await store_group.notification_store.add_notifications(self._make(3, "u-1"))

        listed = await store_group.notification_store.list_for_user("u-1")
        assert [n.notification_id for n in listed] == ["n-2", "n-1", "n-0"]
        assert await store_group.notification_store.count_unread("u-1") == 3

    async def test_mark_read(self, store_group):
        async with store_group.atomic():
            await store_group.notification_store.add_notifications(self._make(2, "u-1"))
            await store_group.notification_store.mark_read("n-0")

        unread = await store_group.notification_store.list_for_user("u-1", unread_only=True)
        assert [n.notification_id for n in unread] == ["n-1"]
        stored = await store_group.notification_store.get_notification("n-0")
        assert stored.is_read is True
        assert await store_group.notification_store.count_unread("u-1") == 1

    async def test_empty_batch_is_noop(self, store_group):
        async with store_group.atomic():
            await store_group.notification_store.add_notifications([])
        assert await store_group.notification_store.list_for_user("u-1") == []


class TestPerformanceStore:
    def _point(self, point_id: str, user_id: str, task_id: str, points: int):
        return PerformancePoint(
            point_id=point_id,
            user_id=user_id,
            task_id=task_id,
            points=points,
            created_at=datetime.now(UTC),
        )

    async def test_one_point_per_task(self, store_group, users):
        async with store_group.atomic():
            await store_group.performance_store.add_point(
                self._point("p-1", users["alice"], "t-1", 30)
            )

        with pytest.raises(sqlite3.IntegrityError):
            async with store_group.atomic():
                await store_group.performance_store.add_point(
                    self._point("p-2", users["bob"], "t-1", 30)
                )

        point = await store_group.performance_store.get_point_for_task("t-1")
        assert point.user_id == users["alice"]

    async def test_sum_and_names(self, store_group, users):
        async with store_group.atomic():
            await store_group.performance_store.add_point(
                self._point("p-1", users["alice"], "t-1", 10)
            )
            await store_group.performance_store.add_point(
                self._point("p-2", users["bob"], "t-2", 20)
            )
            await store_group.performance_store.add_point(
                self._point("p-3", users["alice"], "t-3", 30)
            )

        assert await store_group.performance_store.sum_points_for_user(users["alice"]) == 40
        assert await store_group.performance_store.sum_points_for_user("nobody") == 0

        rows = await store_group.performance_store.list_points_with_names()
        # display_name 优先，为空时回退到 username
        assert [name for _, name in rows] == ["Alice", "bob", "Alice"]


class TestUserStore:
    async def test_resolve_username_exact(self, store_group, users):
        assert await store_group.user_store.resolve_username("alice") == users["alice"]
        assert await store_group.user_store.resolve_username("Alice") is None
        assert await store_group.user_store.resolve_username("ali") is None


class TestWorkGroupStore:
    async def test_members_in_join_order(self, store_group, users):
        base = datetime.now(UTC)
        group = WorkGroup(
            group_id="g-1", name="Platform", leader_id=users["carol"], created_at=base
        )
        async with store_group.atomic():
            await store_group.work_group_store.create_group(group)
            await store_group.work_group_store.add_member("g-1", users["bob"], base)
            await store_group.work_group_store.add_member(
                "g-1", users["alice"], base + timedelta(seconds=1)
            )

        stored = await store_group.work_group_store.get_group("g-1")
        assert stored.leader_id == users["carol"]
        assert stored.member_ids == [users["bob"], users["alice"]]

        async with store_group.atomic():
            await store_group.work_group_store.remove_member("g-1", users["bob"])
        assert await store_group.work_group_store.list_member_ids("g-1") == [users["alice"]]
        assert await store_group.work_group_store.get_group("missing") is None

    async def test_duplicate_member_rejected(self, store_group, users):
        now = datetime.now(UTC)
        group = WorkGroup(group_id="g-1", name="Platform", leader_id=users["carol"], created_at=now)
        async with store_group.atomic():
            await store_group.work_group_store.create_group(group)
            await store_group.work_group_store.add_member("g-1", users["bob"], now)

        with pytest.raises(sqlite3.IntegrityError):
            async with store_group.atomic():
                await store_group.work_group_store.add_member("g-1", users["bob"], now)
