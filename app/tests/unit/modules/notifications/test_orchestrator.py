"""Unit tests for NotificationOrchestrator."""

import threading
from datetime import timedelta

import pytest

from infrastructure.notifications import ChannelType, DeliveryOutcome
from modules.notifications.core import NotificationOrchestrator
from modules.notifications.domain.errors import (
    ConflictError,
    NotFoundError,
    ValidationError,
)
from modules.notifications.domain.models import NotificationStatus
from tests.factories import FIXED_NOW, make_channel


def _request(**overrides):
    request = {
        "recipient": "user-1",
        "type": "deployment",
        "category": "system",
        "title": "Deploy finished",
        "message": "Build 42 is live",
    }
    request.update(overrides)
    return request


@pytest.fixture
def email_channel(channel_store):
    return channel_store.create(make_channel(name="mail"))


@pytest.mark.unit
class TestCreateAndSend:
    def test_in_app_is_delivered_immediately(self, orchestrator):
        result = orchestrator.create_and_send(_request())

        assert result.success
        notification = result.notification
        assert notification.status == NotificationStatus.DELIVERED
        assert notification.delivered_at is not None
        assert notification.created_at == FIXED_NOW

    def test_email_is_sent_through_channel(
        self, orchestrator, email_channel, channel_store
    ):
        result = orchestrator.create_and_send(_request(channel="email"))

        assert result.notification.status == NotificationStatus.SENT
        assert result.notification.metadata["delivered_via"] == "mail"
        assert result.notification.metadata["message_id"] == "msg-1"
        assert channel_store.get(email_channel.id).stats.sent == 1

    def test_delivery_failure_is_recorded(
        self, orchestrator, email_channel, channel_store, stub_adapters
    ):
        stub_adapters[ChannelType.EMAIL].outcome = DeliveryOutcome.failed(
            "Rejected (HTTP 400)"
        )

        result = orchestrator.create_and_send(_request(channel="email"))

        assert not result.success
        assert result.error == "Rejected (HTTP 400)"
        assert result.notification.status == NotificationStatus.FAILED
        assert channel_store.get(email_channel.id).stats.failed == 1

    def test_no_channel_available_fails(self, orchestrator):
        result = orchestrator.create_and_send(_request(channel="sms"))

        assert result.notification.status == NotificationStatus.FAILED
        assert result.notification.error_message == "No sms channel available"

    def test_queued_email_is_flagged(
        self, orchestrator, email_channel, stub_adapters
    ):
        stub_adapters[ChannelType.EMAIL].outcome = DeliveryOutcome(
            success=True, queued=True
        )

        result = orchestrator.create_and_send(_request(channel="email"))

        assert result.notification.metadata["queued"] is True

    def test_payload_address_fills_missing_preference(
        self, orchestrator, email_channel, stub_adapters
    ):
        orchestrator.create_and_send(
            _request(channel="email", data={"email": {"to": "ops@example.com"}})
        )

        _, _, settings = stub_adapters[ChannelType.EMAIL].deliveries[0]
        assert settings.email_address == "ops@example.com"

    def test_skipped_by_preferences(
        self, orchestrator, preference_service, notification_store
    ):
        preference_service.update_preferences("user-1", {"enabled": False})

        result = orchestrator.create_and_send(_request())

        assert result.success
        assert result.skipped
        assert result.reason == "User preferences"
        assert result.notification is None
        assert notification_store.count() == 0

    def test_missing_required_fields(self, orchestrator):
        with pytest.raises(ValidationError) as exc_info:
            orchestrator.create_and_send(_request(recipient=None))

        assert exc_info.value.message == (
            "Missing required fields: recipient, type, and category are required"
        )

    def test_missing_content(self, orchestrator):
        with pytest.raises(ValidationError):
            orchestrator.create_and_send(_request(message=None))

    def test_invalid_channel(self, orchestrator):
        with pytest.raises(ValidationError):
            orchestrator.create_and_send(_request(channel="custom"))


@pytest.mark.unit
class TestTemplates:
    @pytest.fixture(autouse=True)
    def template(self, template_service):
        return template_service.create_template(
            {
                "name": "deploy",
                "title_template": "Deployed {{service}}",
                "message_template": "{{service}} is live in {{env}}",
                "default_priority": "high",
                "email": {"subject": "[{{env}}] {{service}}"},
                "variables": [
                    {"name": "service", "required": True},
                    {"name": "env", "default_value": "staging"},
                ],
            }
        )

    def test_renders_template(self, orchestrator, email_channel, stub_adapters):
        result = orchestrator.create_and_send(
            _request(
                title=None,
                message=None,
                template="deploy",
                template_data={"service": "api"},
                channel="email",
                data={"email": {"to": "ops@example.com"}},
            )
        )

        notification = result.notification
        assert notification.title == "Deployed api"
        assert notification.message == "api is live in staging"
        assert notification.priority.value == "high"
        assert notification.template == "deploy"
        assert notification.data["email"] == {
            "subject": "[staging] api",
            "html_body": "api is live in staging",
            "text_body": "api is live in staging",
            "to": "ops@example.com",
        }

    def test_unknown_template(self, orchestrator):
        with pytest.raises(NotFoundError):
            orchestrator.create_and_send(_request(template="missing"))

    def test_lenient_rendering_keeps_placeholders(self, orchestrator):
        result = orchestrator.create_and_send(_request(template="deploy"))

        assert result.notification.title == "Deployed {{service}}"

    def test_strict_rendering_rejects_missing_variables(
        self,
        notification_store,
        template_service,
        preference_service,
        registry,
        channel_store,
    ):
        strict = NotificationOrchestrator(
            store=notification_store,
            templates=template_service,
            preferences=preference_service,
            registry=registry,
            channel_store=channel_store,
            strict_template_variables=True,
        )

        with pytest.raises(ValidationError) as exc_info:
            strict.create_and_send(_request(template="deploy"))

        assert exc_info.value.details == {
            "errors": ["Required variable 'service' is missing"]
        }


@pytest.mark.unit
class TestBatch:
    def test_invalid_item_fails_alone(self, orchestrator, preference_service):
        preference_service.update_preferences(
            "muted", {"channels": {"in_app": {"enabled": False}}}
        )

        summary = orchestrator.send_batch(
            [
                _request(),
                _request(recipient=None),
                _request(recipient="muted"),
                _request(recipient="user-2"),
            ]
        )

        assert summary["total"] == 4
        assert summary["sent"] == 2
        assert summary["skipped"] == 1
        assert summary["failed"] == 1
        assert [d["index"] for d in summary["details"]] == [0, 1, 2, 3]
        assert summary["details"][1]["error"].startswith("Missing required fields")
        assert summary["details"][2]["skipped"] is True

    def test_empty_batch(self, orchestrator):
        with pytest.raises(ValidationError):
            orchestrator.send_batch([])


@pytest.mark.unit
class TestSweeps:
    def test_scheduled_notification_waits(self, orchestrator, clock):
        later = FIXED_NOW + timedelta(hours=1)

        result = orchestrator.create_and_send(_request(scheduled_for=later))

        assert result.notification.status == NotificationStatus.PENDING
        assert orchestrator.process_scheduled_notifications()["total"] == 0

        clock.now = FIXED_NOW + timedelta(hours=2)
        sweep = orchestrator.process_scheduled_notifications()

        assert sweep["total"] == 1
        assert sweep["sent"] == 1
        notification = orchestrator.get_notification_by_id(result.notification.id)
        assert notification.status == NotificationStatus.DELIVERED

    def test_scheduled_failure_is_counted(self, orchestrator, clock):
        later = FIXED_NOW + timedelta(minutes=5)
        orchestrator.create_and_send(_request(channel="sms", scheduled_for=later))
        clock.now = later

        sweep = orchestrator.process_scheduled_notifications()

        assert sweep["failed"] == 1
        assert sweep["details"][0]["error"] == "No sms channel available"

    def test_scheduled_sweep_respects_limit(self, orchestrator, clock):
        later = FIXED_NOW + timedelta(minutes=5)
        for _ in range(3):
            orchestrator.create_and_send(_request(scheduled_for=later))
        clock.now = later

        assert orchestrator.process_scheduled_notifications(limit=2)["total"] == 2
        assert orchestrator.process_scheduled_notifications()["total"] == 1

    def test_expired_notifications_are_archived(self, orchestrator, clock):
        expiring = orchestrator.create_and_send(
            _request(expires_at=FIXED_NOW + timedelta(hours=1))
        ).notification
        keeper = orchestrator.create_and_send(_request()).notification

        clock.now = FIXED_NOW + timedelta(hours=2)
        result = orchestrator.process_expired_notifications()

        assert result == {"total": 1, "archived": 1, "failed": 0}
        archived = orchestrator.get_notification_by_id(expiring.id)
        assert archived.status == NotificationStatus.ARCHIVED
        assert not archived.is_active
        assert orchestrator.get_notification_by_id(keeper.id).is_active

    def test_sweep_skips_record_claimed_by_another_dispatcher(
        self, orchestrator, notification_store, clock
    ):
        later = FIXED_NOW + timedelta(minutes=5)
        result = orchestrator.create_and_send(_request(scheduled_for=later))
        notification_store.update(
            result.notification.id, {"dispatch_claimed_at": FIXED_NOW}
        )
        clock.now = later

        sweep = orchestrator.process_scheduled_notifications()

        assert sweep["total"] == 0
        notification = orchestrator.get_notification_by_id(result.notification.id)
        assert notification.status == NotificationStatus.PENDING


@pytest.mark.unit
class TestConcurrentDispatch:
    def test_sweep_does_not_resend_in_flight_immediate_send(
        self, orchestrator, email_channel, channel_store, stub_adapters
    ):
        adapter = stub_adapters[ChannelType.EMAIL]
        entered = threading.Event()
        release = threading.Event()
        deliver = adapter.deliver

        def held_deliver(*args):
            entered.set()
            release.wait(timeout=5)
            return deliver(*args)

        adapter.deliver = held_deliver
        results = []
        sender = threading.Thread(
            target=lambda: results.append(
                orchestrator.create_and_send(_request(channel="email"))
            )
        )
        sender.start()
        assert entered.wait(timeout=5)

        sweep = orchestrator.process_scheduled_notifications()
        release.set()
        sender.join(timeout=5)

        assert sweep["total"] == 0
        assert len(adapter.deliveries) == 1
        assert results[0].notification.status == NotificationStatus.SENT
        assert channel_store.get(email_channel.id).stats.sent == 1

    def test_immediate_send_is_claimed_before_delivery(self, orchestrator):
        result = orchestrator.create_and_send(_request())

        assert result.notification.dispatch_claimed_at == FIXED_NOW

    def test_scheduled_send_stays_unclaimed_until_due(self, orchestrator, clock):
        later = FIXED_NOW + timedelta(minutes=5)
        result = orchestrator.create_and_send(_request(scheduled_for=later))

        assert result.notification.dispatch_claimed_at is None

        clock.now = later
        orchestrator.process_scheduled_notifications()

        notification = orchestrator.get_notification_by_id(result.notification.id)
        assert notification.dispatch_claimed_at == later
        assert notification.status == NotificationStatus.DELIVERED


@pytest.mark.unit
class TestUserActions:
    def test_mark_as_read(self, orchestrator):
        notification = orchestrator.create_and_send(_request()).notification

        read = orchestrator.mark_as_read(notification.id)

        assert read.status == NotificationStatus.READ
        assert read.read_at == FIXED_NOW
        assert orchestrator.mark_as_read(notification.id).read_at == FIXED_NOW

    def test_pending_cannot_be_read(self, orchestrator):
        later = FIXED_NOW + timedelta(hours=1)
        notification = orchestrator.create_and_send(
            _request(scheduled_for=later)
        ).notification

        with pytest.raises(ConflictError):
            orchestrator.mark_as_read(notification.id)

    def test_archived_cannot_be_read(self, orchestrator):
        notification = orchestrator.create_and_send(_request()).notification
        orchestrator.archive_notification(notification.id)

        with pytest.raises(ConflictError):
            orchestrator.mark_as_read(notification.id)

    def test_archive_is_idempotent(self, orchestrator):
        notification = orchestrator.create_and_send(_request()).notification

        first = orchestrator.archive_notification(notification.id)
        second = orchestrator.archive_notification(notification.id)

        assert first.status == second.status == NotificationStatus.ARCHIVED

    def test_mark_all_as_read_and_unread_count(self, orchestrator):
        orchestrator.create_and_send(_request())
        orchestrator.create_and_send(_request(category="billing"))
        orchestrator.create_and_send(_request(recipient="user-2"))

        assert orchestrator.count_unread("user-1") == 2
        assert orchestrator.mark_all_as_read("user-1", category="billing") == 1
        assert orchestrator.count_unread("user-1") == 1
        assert orchestrator.mark_all_as_read("user-1") == 1
        assert orchestrator.count_unread("user-1") == 0

    def test_user_listing_newest_first(self, orchestrator, clock):
        first = orchestrator.create_and_send(_request(title="first")).notification
        clock.now = FIXED_NOW + timedelta(minutes=1)
        second = orchestrator.create_and_send(_request(title="second")).notification

        page = orchestrator.get_user_notifications("user-1", limit=1)

        assert [n.id for n in page.data] == [second.id]
        assert page.pagination.total == 2
        assert page.pagination.pages == 2
        other = orchestrator.get_user_notifications("user-1", page=2, limit=1)
        assert [n.id for n in other.data] == [first.id]

    def test_listing_hides_archived_by_default(self, orchestrator):
        notification = orchestrator.create_and_send(_request()).notification
        orchestrator.archive_notification(notification.id)

        assert orchestrator.get_user_notifications("user-1").data == []
        archived = orchestrator.get_user_notifications("user-1", is_active=False)
        assert len(archived.data) == 1

    def test_delete(self, orchestrator):
        notification = orchestrator.create_and_send(_request()).notification

        orchestrator.delete_notification(notification.id)

        with pytest.raises(NotFoundError):
            orchestrator.get_notification_by_id(notification.id)
        with pytest.raises(NotFoundError):
            orchestrator.delete_notification(notification.id)
