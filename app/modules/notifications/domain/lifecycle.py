"""Notification lifecycle state machine.

    pending -> sent -> delivered
    pending -> delivered          (immediate confirmation, e.g. in-app)
    pending -> failed
    sent | delivered | failed -> read
    any non-archived -> archived

No transition moves backward and `archived` is terminal.
"""

from typing import Dict, FrozenSet

from modules.notifications.domain.errors import ConflictError
from modules.notifications.domain.models import NotificationStatus

ALLOWED_TRANSITIONS: Dict[NotificationStatus, FrozenSet[NotificationStatus]] = {
    NotificationStatus.PENDING: frozenset(
        {
            NotificationStatus.SENT,
            NotificationStatus.DELIVERED,
            NotificationStatus.FAILED,
            NotificationStatus.ARCHIVED,
        }
    ),
    NotificationStatus.SENT: frozenset(
        {
            NotificationStatus.DELIVERED,
            NotificationStatus.READ,
            NotificationStatus.ARCHIVED,
        }
    ),
    NotificationStatus.DELIVERED: frozenset(
        {NotificationStatus.READ, NotificationStatus.ARCHIVED}
    ),
    NotificationStatus.FAILED: frozenset(
        {NotificationStatus.READ, NotificationStatus.ARCHIVED}
    ),
    NotificationStatus.READ: frozenset({NotificationStatus.ARCHIVED}),
    NotificationStatus.ARCHIVED: frozenset(),
}

READABLE_STATUSES = frozenset(
    {NotificationStatus.SENT, NotificationStatus.DELIVERED, NotificationStatus.FAILED}
)


def can_transition(current: NotificationStatus, target: NotificationStatus) -> bool:
    return target in ALLOWED_TRANSITIONS.get(current, frozenset())


def ensure_transition(current: NotificationStatus, target: NotificationStatus) -> None:
    """Raise ConflictError if `current -> target` is not allowed."""
    if not can_transition(current, target):
        raise ConflictError(
            f"Cannot move notification from '{current.value}' to '{target.value}'",
            details={"current_status": current.value, "target_status": target.value},
        )
