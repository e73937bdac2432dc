"""状态机单元测试

测试内容：
1. 合法流转映射
2. 终态不可流转
3. 各操作允许的起始状态
"""

import pytest
from taskhub.core.models import (
    ACTION_SOURCE_STATES,
    TERMINAL_STATES,
    VALID_TRANSITIONS,
    LifecycleAction,
    TaskStatus,
    validate_transition,
)


class TestValidTransitions:
    """合法流转"""

    @pytest.mark.parametrize(
        "from_status,to_status",
        [
            (TaskStatus.PENDING, TaskStatus.ASSIGNED),
            (TaskStatus.ASSIGNED, TaskStatus.ASSIGNED),
            (TaskStatus.ASSIGNED, TaskStatus.IN_PROGRESS),
            (TaskStatus.IN_PROGRESS, TaskStatus.UNDER_REVIEW),
            (TaskStatus.UNDER_REVIEW, TaskStatus.IN_PROGRESS),
            (TaskStatus.UNDER_REVIEW, TaskStatus.COMPLETED),
            (TaskStatus.IN_PROGRESS, TaskStatus.EXPIRED),
        ],
    )
    def test_allowed(self, from_status, to_status):
        assert validate_transition(from_status, to_status) is True

    @pytest.mark.parametrize(
        "from_status,to_status",
        [
            (TaskStatus.PENDING, TaskStatus.IN_PROGRESS),
            (TaskStatus.PENDING, TaskStatus.COMPLETED),
            (TaskStatus.ASSIGNED, TaskStatus.UNDER_REVIEW),
            (TaskStatus.IN_PROGRESS, TaskStatus.COMPLETED),
            (TaskStatus.UNDER_REVIEW, TaskStatus.PENDING),
        ],
    )
    def test_rejected(self, from_status, to_status):
        assert validate_transition(from_status, to_status) is False

    def test_every_non_terminal_can_expire(self):
        for status in set(TaskStatus) - TERMINAL_STATES:
            assert validate_transition(status, TaskStatus.EXPIRED)


class TestTerminalStates:
    """终态"""

    def test_terminal_set(self):
        assert TERMINAL_STATES == {TaskStatus.COMPLETED, TaskStatus.EXPIRED}

    @pytest.mark.parametrize("terminal", [TaskStatus.COMPLETED, TaskStatus.EXPIRED])
    def test_no_transition_out_of_terminal(self, terminal):
        assert VALID_TRANSITIONS[terminal] == set()
        for target in TaskStatus:
            assert validate_transition(terminal, target) is False


class TestActionSourceStates:
    """操作起始状态"""

    def test_accept_reject_only_from_assigned(self):
        assert ACTION_SOURCE_STATES[LifecycleAction.ACCEPT] == {TaskStatus.ASSIGNED}
        assert ACTION_SOURCE_STATES[LifecycleAction.REJECT] == {TaskStatus.ASSIGNED}

    def test_finish_only_from_in_progress(self):
        assert ACTION_SOURCE_STATES[LifecycleAction.FINISH] == {TaskStatus.IN_PROGRESS}

    def test_review_actions_only_from_under_review(self):
        for action in (LifecycleAction.RETURN_FOR_REVISION, LifecycleAction.COMPLETE):
            assert ACTION_SOURCE_STATES[action] == {TaskStatus.UNDER_REVIEW}

    def test_assign_excludes_terminal(self):
        sources = ACTION_SOURCE_STATES[LifecycleAction.ASSIGN]
        assert sources.isdisjoint(TERMINAL_STATES)
        assert TaskStatus.UNDER_REVIEW in sources

    def test_every_action_has_sources(self):
        assert set(ACTION_SOURCE_STATES) == set(LifecycleAction)

    def test_unassign_only_before_work_starts(self):
        """进行中 / 待审核的任务必须保留执行人"""
        sources = ACTION_SOURCE_STATES[LifecycleAction.UNASSIGN]
        assert sources == {TaskStatus.PENDING, TaskStatus.ASSIGNED}
        assert not validate_transition(TaskStatus.IN_PROGRESS, TaskStatus.IN_PROGRESS)
        assert not validate_transition(TaskStatus.UNDER_REVIEW, TaskStatus.UNDER_REVIEW)
