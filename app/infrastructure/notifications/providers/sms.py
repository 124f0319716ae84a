"""SMS provider clients."""

from abc import ABC, abstractmethod
from typing import Any, Dict, Optional, TYPE_CHECKING

import boto3
import requests
from twilio.rest import Client

from infrastructure.logging import get_module_logger
from infrastructure.operations import (
    OperationResult,
    classify_aws_error,
    classify_http_response,
    classify_request_exception,
    classify_twilio_error,
)

if TYPE_CHECKING:
    from infrastructure.configuration.integrations import SmsSettings

logger = get_module_logger()


class SmsProvider(ABC):
    """Sends a single SMS. Never raises for delivery failures."""

    name: str = "sms"

    @abstractmethod
    def send(self, to: str, body: str) -> OperationResult:
        """Send `body` to `to` (E.164); data carries {"message_id": ...}."""


class TwilioSmsProvider(SmsProvider):
    name = "twilio"

    def __init__(
        self,
        account_sid: str,
        auth_token: str,
        phone_number: str,
        client: Optional[Client] = None,
    ):
        if not account_sid or not auth_token:
            raise ValueError("Twilio account_sid and auth_token are required")
        if not phone_number:
            raise ValueError("Twilio phone_number is required")
        self.phone_number = phone_number
        self._client = client or Client(account_sid, auth_token)

    def send(self, to: str, body: str) -> OperationResult:
        try:
            message = self._client.messages.create(
                to=to, from_=self.phone_number, body=body
            )
        except Exception as e:  # pylint: disable=broad-except
            logger.warning("twilio_send_error", error=str(e))
            return classify_twilio_error(e)

        return OperationResult.success(
            data={"message_id": message.sid}, message="Sent via Twilio"
        )


class SnsSmsProvider(SmsProvider):
    name = "sns"

    def __init__(
        self,
        region: str = "us-east-1",
        access_key_id: Optional[str] = None,
        secret_access_key: Optional[str] = None,
        sender_id: Optional[str] = None,
        client: Any = None,
    ):
        self.sender_id = sender_id
        self._client = client or boto3.client(
            "sns",
            region_name=region,
            aws_access_key_id=access_key_id,
            aws_secret_access_key=secret_access_key,
        )

    def send(self, to: str, body: str) -> OperationResult:
        attributes: Dict[str, Any] = {
            "AWS.SNS.SMS.SMSType": {
                "DataType": "String",
                "StringValue": "Transactional",
            }
        }
        if self.sender_id:
            attributes["AWS.SNS.SMS.SenderID"] = {
                "DataType": "String",
                "StringValue": self.sender_id,
            }

        try:
            response = self._client.publish(
                PhoneNumber=to, Message=body, MessageAttributes=attributes
            )
        except Exception as e:  # pylint: disable=broad-except
            return classify_aws_error(e)

        return OperationResult.success(
            data={"message_id": response.get("MessageId")}, message="Sent via SNS"
        )


class NexmoSmsProvider(SmsProvider):
    """Nexmo/Vonage SMS API. Status "0" on the first message part means accepted."""

    name = "nexmo"

    def __init__(
        self,
        api_key: str,
        api_secret: str,
        from_number: str,
        api_url: str,
        timeout: float = 10.0,
    ):
        if not api_key or not api_secret:
            raise ValueError("Nexmo api_key and api_secret are required")
        self.api_key = api_key
        self.api_secret = api_secret
        self.from_number = from_number
        self.api_url = api_url
        self.timeout = timeout

    def send(self, to: str, body: str) -> OperationResult:
        form = {
            "api_key": self.api_key,
            "api_secret": self.api_secret,
            "from": self.from_number,
            "to": to.lstrip("+"),
            "text": body,
        }
        try:
            response = requests.post(self.api_url, data=form, timeout=self.timeout)
        except requests.RequestException as e:
            return classify_request_exception(e)

        result = classify_http_response(response)
        if not result.is_success:
            return result

        body_json = result.data.get("body") if result.data else None
        messages = body_json.get("messages", []) if isinstance(body_json, dict) else []
        first = messages[0] if messages else {}
        if first.get("status") != "0":
            return OperationResult.permanent_error(
                f"Nexmo rejected message: {first.get('error-text', 'unknown error')}",
                error_code="NEXMO_REJECTED",
            )
        return OperationResult.success(
            data={"message_id": first.get("message-id")}, message="Sent via Nexmo"
        )


def build_sms_provider(
    provider: Optional[str], config: Dict[str, Any], settings: "SmsSettings"
) -> SmsProvider:
    """Build the provider named by a channel record.

    Raises:
        ValueError: Unsupported provider or missing configuration block
    """
    provider = (provider or "twilio").lower()
    block = config.get(provider) or {}

    if provider == "twilio":
        return TwilioSmsProvider(
            account_sid=block.get("account_sid", ""),
            auth_token=block.get("auth_token", ""),
            phone_number=block.get("phone_number", ""),
        )
    if provider == "sns":
        return SnsSmsProvider(
            region=block.get("region", "us-east-1"),
            access_key_id=block.get("access_key_id"),
            secret_access_key=block.get("secret_access_key"),
            sender_id=block.get("sender_id"),
        )
    if provider == "nexmo":
        return NexmoSmsProvider(
            api_key=block.get("api_key", ""),
            api_secret=block.get("api_secret", ""),
            from_number=block.get("from_number", ""),
            api_url=settings.NEXMO_API_URL,
            timeout=settings.SMS_HTTP_TIMEOUT_SECONDS,
        )

    raise ValueError(f"Unsupported SMS provider: {provider}")
