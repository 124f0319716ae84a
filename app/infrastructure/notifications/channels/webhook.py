"""Webhook channel adapter.

Posts a JSON payload to every subscribed endpoint of the recipient. Each
request is signed with the endpoint secret (HMAC-SHA256 over the exact body
bytes) and sent through the delivery retry policy.
"""

import hashlib
import hmac
import json
import time
from dataclasses import dataclass, field
from datetime import datetime, timezone
from typing import Any, Callable, Dict, List, Optional, Tuple, TYPE_CHECKING

import requests

from infrastructure.logging import get_module_logger
from infrastructure.notifications.channels.base import ChannelAdapter
from infrastructure.notifications.models import (
    ChannelConfig,
    ChannelType,
    DeliveryOutcome,
    DeliverySettings,
    OutboundNotification,
    WebhookEndpoint,
)
from infrastructure.operations import (
    OperationResult,
    classify_http_response,
    classify_request_exception,
)
from infrastructure.resilience import RetryConfig, RetryExhaustedError, RetryPolicy

if TYPE_CHECKING:
    from infrastructure.configuration.infrastructure import (
        RetrySettings,
        WebhookSettings,
    )

logger = get_module_logger()


def sign_payload(body: bytes, secret: str) -> str:
    """Hex HMAC-SHA256 of `body` keyed with `secret`."""
    return hmac.new(secret.encode("utf-8"), body, hashlib.sha256).hexdigest()


@dataclass
class WebhookClient:
    """Per-channel webhook settings resolved from the channel record."""

    session: requests.Session
    retry: RetryConfig
    timeout: float
    default_headers: Dict[str, str] = field(default_factory=dict)
    auth: Optional[Tuple[str, str]] = None


def default_webhook_payload(notification: OutboundNotification) -> Dict[str, Any]:
    return {
        "id": notification.id,
        "type": notification.type,
        "category": notification.category,
        "title": notification.title,
        "message": notification.message,
        "priority": notification.priority.value,
        "timestamp": datetime.now(timezone.utc).isoformat(),
        "data": {
            key: value
            for key, value in notification.data.items()
            if key not in ("email", "sms", "push", "webhook")
        },
        "actions": [action.model_dump(mode="json") for action in notification.actions],
    }


class WebhookAdapter(ChannelAdapter):
    channel_type = ChannelType.WEBHOOK

    def __init__(
        self,
        settings: "WebhookSettings",
        retry_settings: "RetrySettings",
        sleep: Callable[[float], None] = time.sleep,
    ):
        self.settings = settings
        self.retry_defaults = RetryConfig.from_settings(retry_settings)
        self._sleep = sleep

    def build_client(self, channel: ChannelConfig) -> WebhookClient:
        config = channel.config
        session = requests.Session()
        headers = {
            str(k): str(v) for k, v in (config.get("default_headers") or {}).items()
        }

        auth_block = config.get("auth") or {}
        auth_type = (auth_block.get("type") or "none").lower()
        basic_auth = None
        if auth_type == "basic":
            if not auth_block.get("username") or not auth_block.get("password"):
                raise ValueError("Basic auth requires username and password")
            basic_auth = (auth_block["username"], auth_block["password"])
        elif auth_type == "bearer":
            if not auth_block.get("token"):
                raise ValueError("Bearer auth requires a token")
            headers["Authorization"] = f"Bearer {auth_block['token']}"
        elif auth_type != "none":
            raise ValueError(f"Unsupported webhook auth type: {auth_type}")

        return WebhookClient(
            session=session,
            retry=RetryConfig.from_channel_config(
                config.get("retry"), defaults=self.retry_defaults
            ),
            timeout=float(
                config.get("timeout") or self.settings.WEBHOOK_TIMEOUT_SECONDS
            ),
            default_headers=headers,
            auth=basic_auth,
        )

    def _headers(
        self, client: WebhookClient, endpoint: WebhookEndpoint, body: bytes
    ) -> Dict[str, str]:
        prefix = self.settings.WEBHOOK_HEADER_PREFIX
        headers = {
            "Content-Type": "application/json",
            "User-Agent": self.settings.WEBHOOK_USER_AGENT,
            f"{prefix}-Timestamp": datetime.now(timezone.utc).isoformat(),
        }
        headers.update(client.default_headers)
        if endpoint.secret:
            headers[f"{prefix}-Signature"] = sign_payload(body, endpoint.secret)
        return headers

    def _post(
        self, client: WebhookClient, endpoint: WebhookEndpoint, body: bytes
    ) -> OperationResult:
        try:
            response = client.session.post(
                endpoint.url,
                data=body,
                headers=self._headers(client, endpoint, body),
                auth=client.auth,
                timeout=client.timeout,
            )
        except requests.RequestException as e:
            return classify_request_exception(e)
        return classify_http_response(response)

    def send_to_endpoint(
        self, client: WebhookClient, endpoint: WebhookEndpoint, payload: Any
    ) -> OperationResult:
        """POST `payload` to one endpoint under the channel's retry policy.

        Raises:
            RetryExhaustedError: When the endpoint fails terminally or
                attempts run out
        """
        body = json.dumps(payload, default=str).encode("utf-8")
        policy = RetryPolicy(client.retry, sleep=self._sleep)
        return policy.execute(
            lambda: self._post(client, endpoint, body), operation="webhook"
        )

    def deliver(
        self,
        client: WebhookClient,
        channel: Optional[ChannelConfig],
        notification: OutboundNotification,
        delivery_settings: DeliverySettings,
    ) -> DeliveryOutcome:
        endpoints = [e for e in delivery_settings.webhook_endpoints if e.active]
        if not endpoints:
            return DeliveryOutcome.failed("No webhook endpoints provided")

        payload = notification.channel_payload("webhook").get("payload")
        if payload is None:
            payload = default_webhook_payload(notification)

        event_key = f"{notification.category}.{notification.type}"
        sent = 0
        failed = 0
        responses: List[Dict[str, Any]] = []

        for endpoint in endpoints:
            if not endpoint.accepts(event_key):
                logger.debug(
                    "webhook_endpoint_skipped", url=endpoint.url, event=event_key
                )
                continue
            try:
                result = self.send_to_endpoint(client, endpoint, payload)
            except RetryExhaustedError as e:
                failed += 1
                error = f"Failed to send webhook after {e.attempts} attempts: {e}"
                responses.append(
                    {"url": endpoint.url, "success": False, "error": error}
                )
                logger.error(
                    "webhook_delivery_failed",
                    url=endpoint.url,
                    attempts=e.attempts,
                    error=str(e),
                )
                continue
            sent += 1
            responses.append(
                {
                    "url": endpoint.url,
                    "success": True,
                    "status_code": (result.data or {}).get("status_code"),
                }
            )

        logger.info(
            "webhook_notification_sent",
            notification_id=notification.id,
            sent=sent,
            failed=failed,
        )

        success = failed == 0 or sent > 0
        errors = [r["error"] for r in responses if not r["success"]]
        return DeliveryOutcome(
            success=success,
            error=None if success else errors[0],
            details={"sent": sent, "failed": failed, "responses": responses},
        )
