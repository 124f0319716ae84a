"""Unit tests for the notification lifecycle state machine."""

import pytest

from modules.notifications.domain.errors import ConflictError
from modules.notifications.domain.lifecycle import can_transition, ensure_transition
from modules.notifications.domain.models import NotificationStatus as S


@pytest.mark.unit
class TestTransitions:
    @pytest.mark.parametrize(
        "current,target",
        [
            (S.PENDING, S.SENT),
            (S.PENDING, S.DELIVERED),
            (S.PENDING, S.FAILED),
            (S.SENT, S.DELIVERED),
            (S.SENT, S.READ),
            (S.FAILED, S.READ),
            (S.READ, S.ARCHIVED),
            (S.PENDING, S.ARCHIVED),
        ],
    )
    def test_allowed(self, current, target):
        assert can_transition(current, target)

    @pytest.mark.parametrize(
        "current,target",
        [
            (S.PENDING, S.READ),
            (S.DELIVERED, S.SENT),
            (S.READ, S.DELIVERED),
            (S.ARCHIVED, S.READ),
            (S.ARCHIVED, S.PENDING),
            (S.FAILED, S.SENT),
        ],
    )
    def test_disallowed(self, current, target):
        assert not can_transition(current, target)

    def test_archived_is_terminal(self):
        assert not any(can_transition(S.ARCHIVED, target) for target in S)

    def test_ensure_transition_raises_conflict(self):
        with pytest.raises(ConflictError) as exc_info:
            ensure_transition(S.ARCHIVED, S.READ)

        assert exc_info.value.status_code == 409
        assert exc_info.value.details == {
            "current_status": "archived",
            "target_status": "read",
        }
