"""Unit tests for channel delivery statistics."""

from datetime import datetime, timezone

import pytest

from infrastructure.notifications import (
    DeliveryOutcome,
    DeliveryStats,
    format_success_rate,
    record_delivery_attempt,
)
from tests.factories import make_channel


@pytest.mark.unit
class TestRecordDeliveryAttempt:
    def test_success_increments_sent(self, channel_store):
        channel_store.create(make_channel(name="mail"))

        updated = record_delivery_attempt(
            channel_store, "mail", DeliveryOutcome(success=True)
        )

        assert updated.stats.sent == 1
        assert updated.stats.delivered == 0
        assert updated.stats.last_sent_at is not None

    def test_confirmed_delivery_increments_delivered(self, channel_store):
        channel_store.create(make_channel(name="mail"))
        outcome = DeliveryOutcome(
            success=True, delivered_at=datetime.now(timezone.utc)
        )

        updated = record_delivery_attempt(channel_store, "mail", outcome)

        assert updated.stats.delivered == 1

    def test_failure_increments_failed(self, channel_store):
        channel_store.create(make_channel(name="mail"))

        record_delivery_attempt(channel_store, "mail", DeliveryOutcome.failed("x"))
        updated = record_delivery_attempt(
            channel_store, "mail", DeliveryOutcome.failed("y")
        )

        assert updated.stats.failed == 2
        assert updated.stats.sent == 0

    def test_unknown_channel_is_ignored(self, channel_store):
        assert (
            record_delivery_attempt(
                channel_store, "ghost", DeliveryOutcome(success=True)
            )
            is None
        )
        outcome = DeliveryOutcome.failed("x")
        assert record_delivery_attempt(channel_store, None, outcome) is None


@pytest.mark.unit
class TestFormatSuccessRate:
    @pytest.mark.parametrize(
        "sent,delivered,expected",
        [
            (0, 0, "0%"),
            (4, 3, "75.00%"),
            (3, 1, "33.33%"),
        ],
    )
    def test_format(self, sent, delivered, expected):
        stats = DeliveryStats(sent=sent, delivered=delivered)

        assert format_success_rate(stats) == expected
