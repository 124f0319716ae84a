"""Unit tests for the email channel adapter."""

from unittest.mock import MagicMock

import pytest

from infrastructure.configuration.integrations import EmailSettings
from infrastructure.notifications.channels.email import EmailAdapter, text_to_html
from infrastructure.notifications.models import ChannelType, EmailFrequency
from infrastructure.notifications.providers.email import (
    EmailMessage,
    SendGridEmailProvider,
    SmtpEmailProvider,
)
from infrastructure.operations import OperationResult
from tests.factories import make_channel, make_delivery_settings, make_outbound


@pytest.fixture
def adapter():
    return EmailAdapter(EmailSettings())


@pytest.fixture
def client():
    client = MagicMock()
    client.send.return_value = OperationResult.success(data={"message_id": "em-1"})
    return client


@pytest.mark.unit
class TestEmailAdapterDeliver:
    def test_sends_with_channel_defaults(self, adapter, client):
        channel = make_channel(
            config={"sendgrid": {"api_key": "k"}, "default_from": "ops@acme.io"}
        )
        settings = make_delivery_settings(email_address="ada@example.com")

        outcome = adapter.send(client, channel, make_outbound(), settings)

        assert outcome.success
        assert outcome.message_id == "em-1"
        message: EmailMessage = client.send.call_args.args[0]
        assert message.to == "ada@example.com"
        assert message.from_address == "ops@acme.io"
        assert message.subject == "Deploy finished"
        assert message.text_body == "Build 42 is live"

    def test_falls_back_to_settings_sender(self, adapter, client):
        settings = make_delivery_settings(email_address="ada@example.com")

        adapter.send(client, make_channel(), make_outbound(), settings)

        message = client.send.call_args.args[0]
        assert message.from_address == "notifications@example.com"

    def test_uses_rendered_email_payload(self, adapter, client):
        notification = make_outbound(
            data={"email": {"subject": "Custom", "html_body": "<b>Hi</b>"}}
        )
        settings = make_delivery_settings(email_address="ada@example.com")

        adapter.send(client, make_channel(), notification, settings)

        message = client.send.call_args.args[0]
        assert message.subject == "Custom"
        assert message.html_body == "<b>Hi</b>"

    def test_missing_address_fails_without_sending(self, adapter, client):
        outcome = adapter.send(
            client, make_channel(), make_outbound(), make_delivery_settings()
        )

        assert not outcome.success
        assert outcome.error == "No email address available for recipient"
        client.send.assert_not_called()

    @pytest.mark.parametrize(
        "frequency",
        [EmailFrequency.DIGEST, EmailFrequency.DAILY, EmailFrequency.WEEKLY],
    )
    def test_non_immediate_frequency_is_queued(self, adapter, client, frequency):
        settings = make_delivery_settings(
            email_address="ada@example.com", email_frequency=frequency
        )

        outcome = adapter.send(client, make_channel(), make_outbound(), settings)

        assert outcome.success
        assert outcome.queued
        client.send.assert_not_called()

    def test_provider_failure(self, adapter, client):
        client.send.return_value = OperationResult.permanent_error(
            "Request rejected (HTTP 400)", error_code="HTTP_400"
        )
        settings = make_delivery_settings(email_address="ada@example.com")

        outcome = adapter.send(client, make_channel(), make_outbound(), settings)

        assert not outcome.success
        assert outcome.error == "Request rejected (HTTP 400)"

    def test_unexpected_exception_becomes_failed_outcome(self, adapter, client):
        client.send.side_effect = RuntimeError("boom")
        settings = make_delivery_settings(email_address="ada@example.com")

        outcome = adapter.send(client, make_channel(), make_outbound(), settings)

        assert not outcome.success
        assert outcome.error == "boom"


@pytest.mark.unit
class TestEmailAdapterBuildClient:
    def test_builds_sendgrid(self, adapter):
        client = adapter.build_client(make_channel())

        assert isinstance(client, SendGridEmailProvider)

    def test_builds_smtp(self, adapter):
        channel = make_channel(provider="smtp", config={"smtp": {"host": "mail"}})

        assert isinstance(adapter.build_client(channel), SmtpEmailProvider)

    def test_unknown_provider(self, adapter):
        with pytest.raises(ValueError, match="Unsupported email provider"):
            adapter.build_client(make_channel(provider="postmark", config={}))

    def test_missing_credentials(self, adapter):
        with pytest.raises(ValueError):
            adapter.build_client(make_channel(config={"sendgrid": {}}))


@pytest.mark.unit
def test_text_to_html_escapes_and_breaks_lines():
    assert text_to_html("a < b\nnext") == "a &lt; b<br>next"


@pytest.mark.unit
def test_channel_type():
    assert EmailAdapter(EmailSettings()).channel_type == ChannelType.EMAIL
