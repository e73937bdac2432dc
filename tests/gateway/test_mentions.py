"""MentionResolver + CommentService 测试

测试内容：
1. 提及解析去重、保持首次出现顺序
2. 未知用户名静默丢弃；不含作者本人
3. 评论落库 + 被提及用户收到通知
"""

import pytest
from taskhub.core.exceptions import NotFoundError, ValidationFailedError
from taskhub.core.models import TaskStatus
from taskhub.gateway.services.comment_service import mention_message
from taskhub.gateway.services.mention_resolver import MentionResolver, extract_usernames


class TestExtractUsernames:
    def test_dedup_first_seen(self):
        assert extract_usernames("@a @b @a hello") == ["a", "b"]

    def test_word_characters_only(self):
        assert extract_usernames("ping @bob_2, @carol! mail@ x@ @") == [
            "bob_2",
            "carol",
        ]

    def test_no_mentions(self):
        assert extract_usernames("plain text") == []
        assert extract_usernames("") == []


class TestMentionResolver:
    async def test_resolve_ordered_and_deduplicated(self, store_group, users):
        resolver = MentionResolver(store_group.user_store)
        result = await resolver.resolve("@bob @alice @bob hello")
        assert result == [users["bob"], users["alice"]]

    async def test_idempotent(self, store_group, users):
        resolver = MentionResolver(store_group.user_store)
        text = "@alice @ghost @bob"
        assert await resolver.resolve(text) == await resolver.resolve(text)

    async def test_unknown_dropped(self, store_group, users):
        resolver = MentionResolver(store_group.user_store)
        assert await resolver.resolve("@ghost @nobody") == []

    async def test_exact_match_only(self, store_group, users):
        resolver = MentionResolver(store_group.user_store)
        assert await resolver.resolve("@ali @ALICE") == []

    async def test_excludes_author(self, store_group, users):
        resolver = MentionResolver(store_group.user_store)
        result = await resolver.resolve("@alice @carol", author_id=users["carol"])
        assert result == [users["alice"]]


class TestCommentService:
    async def test_comment_notifies_mentioned(
        self, comment_service, lifecycle, fanout, transport, users, task_in
    ):
        task = await task_in(TaskStatus.PENDING)
        comment = await comment_service.add_comment(
            task.task_id, users["carol"], "@alice @bob @carol please review"
        )

        assert comment.mentioned_user_ids == [users["alice"], users["bob"]]
        expected = mention_message("Carol", "Ship release", "@alice @bob @carol please review")
        for name in ("alice", "bob"):
            inbox = await fanout.list_for_user(users[name])
            assert [n.message for n in inbox] == [expected]
        assert await fanout.list_for_user(users["carol"]) == []
        assert {user_id for user_id, _ in transport.pushed} == {users["alice"], users["bob"]}

        detail, _ = await lifecycle.get_task_detail(task.task_id)
        assert [c.comment_id for c in detail.comments] == [comment.comment_id]
        assert detail.comments[0].mentioned_user_ids == comment.mentioned_user_ids

    async def test_comment_without_mentions(self, comment_service, transport, users, task_in):
        task = await task_in(TaskStatus.PENDING)
        comment = await comment_service.add_comment(task.task_id, users["alice"], "LGTM")
        assert comment.mentioned_user_ids == []
        assert transport.pushed == []

    async def test_empty_text(self, comment_service, users, task_in):
        task = await task_in(TaskStatus.PENDING)
        with pytest.raises(ValidationFailedError):
            await comment_service.add_comment(task.task_id, users["alice"], "   ")

    async def test_unknown_task(self, comment_service, users):
        with pytest.raises(NotFoundError):
            await comment_service.add_comment("missing", users["alice"], "@bob hi")

    def test_preview_truncated(self):
        message = mention_message("Carol", "Ship", "x" * 500)
        assert message.startswith("Carol mentioned you in Ship: ")
        assert message.endswith("x" * 200)
        assert len(message) == len("Carol mentioned you in Ship: ") + 200
