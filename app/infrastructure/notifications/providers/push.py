"""Push provider clients.

FcmPushProvider covers Android, iOS and (optionally) web tokens through the
FCM HTTP v1 API, authenticated with a service account. WebPushProvider
delivers to standard browser push subscriptions with VAPID.
"""

import json
from dataclasses import dataclass, field
from typing import Any, Dict, List, Optional, Tuple, TYPE_CHECKING

import requests
from google.auth.transport.requests import AuthorizedSession
from google.oauth2 import service_account
from pywebpush import WebPushException, webpush

from infrastructure.logging import get_module_logger
from infrastructure.notifications.models import NotificationPriority, PushPlatform
from infrastructure.operations import (
    OperationResult,
    classify_http_response,
    classify_http_status,
    classify_request_exception,
)

if TYPE_CHECKING:
    from infrastructure.configuration.integrations import PushSettings

logger = get_module_logger()


@dataclass
class PushMessage:
    title: str
    body: str
    data: Dict[str, str] = field(default_factory=dict)
    icon: Optional[str] = None
    link: Optional[str] = None
    priority: NotificationPriority = NotificationPriority.NORMAL


TokenResult = Tuple[str, OperationResult]


class FcmPushProvider:
    """Firebase Cloud Messaging HTTP v1 client.

    FCM v1 accepts one token per request; `send_multicast` fans out over
    the tokens and returns one result per token in input order.
    """

    name = "fcm"

    def __init__(
        self,
        service_account_info: Dict[str, Any],
        base_url: str,
        scope: str,
        project_id: Optional[str] = None,
        timeout: float = 10.0,
        session: Optional[requests.Session] = None,
    ):
        self.project_id = project_id or service_account_info.get("project_id")
        if not self.project_id:
            raise ValueError("FCM project_id is required")
        self.url = f"{base_url.rstrip('/')}/projects/{self.project_id}/messages:send"
        self.timeout = timeout
        if session is None:
            credentials = service_account.Credentials.from_service_account_info(
                service_account_info, scopes=[scope]
            )
            session = AuthorizedSession(credentials)
        self._session = session

    def _build_message(
        self, token: str, message: PushMessage, platform: PushPlatform
    ) -> Dict[str, Any]:
        urgent = message.priority in (
            NotificationPriority.HIGH,
            NotificationPriority.URGENT,
        )
        payload: Dict[str, Any] = {
            "token": token,
            "notification": {"title": message.title, "body": message.body},
            "data": {key: str(value) for key, value in message.data.items()},
        }
        if platform == PushPlatform.ANDROID:
            payload["android"] = {"priority": "high" if urgent else "normal"}
        elif platform == PushPlatform.IOS:
            payload["apns"] = {
                "headers": {"apns-priority": "10" if urgent else "5"},
                "payload": {"aps": {"sound": "default"}},
            }
        else:
            webpush_block: Dict[str, Any] = {"notification": {}}
            if message.icon:
                webpush_block["notification"]["icon"] = message.icon
            if message.link:
                webpush_block["fcm_options"] = {"link": message.link}
            payload["webpush"] = webpush_block
        return {"message": payload}

    def send(
        self, token: str, message: PushMessage, platform: PushPlatform
    ) -> OperationResult:
        try:
            response = self._session.post(
                self.url,
                json=self._build_message(token, message, platform),
                timeout=self.timeout,
            )
        except requests.RequestException as e:
            return classify_request_exception(e)

        result = classify_http_response(response)
        if result.is_success:
            body = result.data.get("body") if result.data else None
            message_id = body.get("name") if isinstance(body, dict) else None
            return OperationResult.success(
                data={"message_id": message_id}, message="Sent via FCM"
            )
        return result

    def send_multicast(
        self, tokens: List[str], message: PushMessage, platform: PushPlatform
    ) -> List[TokenResult]:
        return [(token, self.send(token, message, platform)) for token in tokens]


class WebPushProvider:
    """VAPID web push to browser subscriptions.

    Tokens are JSON-encoded subscription objects
    (`{"endpoint": ..., "keys": {"p256dh": ..., "auth": ...}}`).
    """

    name = "web_push"

    def __init__(
        self,
        vapid_private_key: str,
        subject: str,
        vapid_public_key: Optional[str] = None,
        ttl: int = 86400,
        default_icon: Optional[str] = None,
    ):
        if not vapid_private_key or not subject:
            raise ValueError("Web push vapid_private_key and subject are required")
        self.vapid_private_key = vapid_private_key
        self.vapid_public_key = vapid_public_key
        self.subject = subject
        self.ttl = ttl
        self.default_icon = default_icon

    def send(self, token: str, message: PushMessage) -> OperationResult:
        try:
            subscription = json.loads(token)
        except (TypeError, ValueError):
            return OperationResult.permanent_error(
                "Invalid web push subscription", error_code="INVALID_SUBSCRIPTION"
            )

        data: Dict[str, Any] = {
            "title": message.title,
            "body": message.body,
            "icon": message.icon or self.default_icon,
            "data": dict(message.data),
        }
        if message.link:
            data["data"]["url"] = message.link

        try:
            response = webpush(
                subscription_info=subscription,
                data=json.dumps(data),
                vapid_private_key=self.vapid_private_key,
                vapid_claims={"sub": self.subject},
                ttl=self.ttl,
            )
        except WebPushException as e:
            status_code = e.response.status_code if e.response is not None else None
            if status_code in (404, 410):
                return OperationResult.permanent_error(
                    "Push subscription expired", error_code="SUBSCRIPTION_EXPIRED"
                )
            if status_code is not None:
                return classify_http_status(status_code, message=str(e))
            return OperationResult.transient_error(
                f"Web push failed: {e}", error_code="WEB_PUSH_ERROR"
            )
        except requests.RequestException as e:
            return classify_request_exception(e)

        headers = getattr(response, "headers", None) or {}
        return OperationResult.success(
            data={"message_id": headers.get("Location")},
            message="Sent via web push",
        )


@dataclass
class PushClients:
    """The provider pair a push channel record resolves to."""

    fcm: Optional[FcmPushProvider] = None
    web_push: Optional[WebPushProvider] = None


def build_push_clients(
    provider: Optional[str], config: Dict[str, Any], settings: "PushSettings"
) -> PushClients:
    """Build push clients from a channel record.

    The record may configure `fcm`, `web_push` or both; `apns` is not
    supported.

    Raises:
        ValueError: Unsupported provider or no usable configuration
    """
    if (provider or "").lower() == "apns":
        raise ValueError("Unsupported push provider: apns")

    clients = PushClients()

    fcm_block = config.get("fcm")
    if fcm_block:
        info = fcm_block.get("service_account_json")
        if isinstance(info, str):
            info = json.loads(info)
        if not isinstance(info, dict):
            raise ValueError("FCM service_account_json is required")
        clients.fcm = FcmPushProvider(
            service_account_info=info,
            base_url=settings.FCM_API_BASE_URL,
            scope=settings.FCM_OAUTH_SCOPE,
            project_id=fcm_block.get("project_id"),
            timeout=settings.PUSH_HTTP_TIMEOUT_SECONDS,
        )

    web_block = config.get("web_push")
    if web_block:
        clients.web_push = WebPushProvider(
            vapid_private_key=web_block.get("vapid_private_key", ""),
            vapid_public_key=web_block.get("vapid_public_key"),
            subject=web_block.get("subject", ""),
            ttl=settings.WEB_PUSH_TTL_SECONDS,
            default_icon=settings.WEB_PUSH_DEFAULT_ICON,
        )

    if clients.fcm is None and clients.web_push is None:
        raise ValueError("Push channel requires an fcm or web_push configuration")

    logger.debug(
        "push_clients_built",
        fcm=clients.fcm is not None,
        web_push=clients.web_push is not None,
    )
    return clients
