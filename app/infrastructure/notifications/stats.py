"""Channel delivery statistics."""

from datetime import datetime, timezone
from typing import Any, Dict, Optional

from infrastructure.logging import get_module_logger
from infrastructure.notifications.models import (
    ChannelConfig,
    DeliveryOutcome,
    DeliveryStats,
)
from infrastructure.persistence import RecordStore

logger = get_module_logger()


def record_delivery_attempt(
    store: RecordStore[ChannelConfig],
    channel_name: Optional[str],
    outcome: DeliveryOutcome,
) -> Optional[ChannelConfig]:
    """Count one delivery attempt against a channel record.

    Accepted sends increment `sent` and stamp `last_sent_at`; outcomes
    confirming delivery also increment `delivered`; failures increment
    `failed`. The read-modify-write runs atomically in the store.

    Returns:
        The updated channel, or None when the attempt had no channel record
    """
    if not channel_name:
        return None
    matches = store.find(where={"name": channel_name}, limit=1)
    if not matches:
        return None

    now = datetime.now(timezone.utc)

    def bump(current: ChannelConfig) -> Dict[str, Any]:
        stats = current.stats.model_copy()
        if outcome.success:
            stats.sent += 1
            stats.last_sent_at = now
            if outcome.delivered_at is not None:
                stats.delivered += 1
        else:
            stats.failed += 1
        return {"stats": stats.model_dump()}

    updated = store.apply(matches[0].id, bump)
    logger.debug(
        "delivery_attempt_recorded",
        channel_name=channel_name,
        success=outcome.success,
    )
    return updated


def format_success_rate(stats: DeliveryStats) -> str:
    """`delivered / sent` as a percentage with two decimals, or "0%"."""
    if stats.sent <= 0:
        return "0%"
    return f"{stats.delivered / stats.sent * 100:.2f}%"
