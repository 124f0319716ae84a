"""Email provider clients.

One class per provider family behind the EmailProvider interface. The email
channel adapter picks the class from the channel record's `provider` field
and builds it from the matching config block.
"""

import smtplib
from abc import ABC, abstractmethod
from dataclasses import dataclass
from email.mime.multipart import MIMEMultipart
from email.mime.text import MIMEText
from email.utils import make_msgid
from typing import Any, Dict, Optional, TYPE_CHECKING

import boto3
import requests

from infrastructure.logging import get_module_logger
from infrastructure.operations import (
    OperationResult,
    classify_aws_error,
    classify_http_response,
    classify_request_exception,
)

if TYPE_CHECKING:
    from infrastructure.configuration.integrations import EmailSettings

logger = get_module_logger()


@dataclass
class EmailMessage:
    to: str
    subject: str
    text_body: str
    from_address: str
    html_body: Optional[str] = None
    reply_to: Optional[str] = None


class EmailProvider(ABC):
    """Sends a single email. Never raises for delivery failures."""

    name: str = "email"

    @abstractmethod
    def send(self, message: EmailMessage) -> OperationResult:
        """Send `message`; data carries {"message_id": ...} on success."""

    def verify(self) -> OperationResult:
        """Check credentials/connectivity. Providers without a cheap check pass."""
        return OperationResult.success(message=f"{self.name} provider configured")


class SmtpEmailProvider(EmailProvider):
    """SMTP delivery with optional implicit TLS (`secure`) or STARTTLS."""

    name = "smtp"

    def __init__(
        self,
        host: str,
        port: int = 587,
        username: Optional[str] = None,
        password: Optional[str] = None,
        secure: bool = False,
        use_tls: bool = True,
        timeout: float = 10.0,
    ):
        if not host:
            raise ValueError("SMTP host is required")
        self.host = host
        self.port = port
        self.username = username
        self.password = password
        self.secure = secure
        self.use_tls = use_tls
        self.timeout = timeout

    def _connect(self) -> smtplib.SMTP:
        if self.secure:
            server: smtplib.SMTP = smtplib.SMTP_SSL(
                self.host, self.port, timeout=self.timeout
            )
        else:
            server = smtplib.SMTP(self.host, self.port, timeout=self.timeout)
            if self.use_tls:
                server.starttls()
        if self.username and self.password:
            server.login(self.username, self.password)
        return server

    def send(self, message: EmailMessage) -> OperationResult:
        msg = MIMEMultipart("alternative")
        msg["Subject"] = message.subject
        msg["From"] = message.from_address
        msg["To"] = message.to
        msg["Message-ID"] = make_msgid()
        if message.reply_to:
            msg["Reply-To"] = message.reply_to
        msg.attach(MIMEText(message.text_body, "plain"))
        if message.html_body:
            msg.attach(MIMEText(message.html_body, "html"))

        try:
            with self._connect() as server:
                server.send_message(msg)
        except (
            smtplib.SMTPAuthenticationError,
            smtplib.SMTPRecipientsRefused,
            smtplib.SMTPSenderRefused,
        ) as e:
            return OperationResult.permanent_error(
                f"SMTP rejected message: {e}", error_code="SMTP_REJECTED"
            )
        except (smtplib.SMTPException, OSError) as e:
            logger.warning("smtp_send_error", host=self.host, error=str(e))
            return OperationResult.transient_error(
                f"SMTP error: {e}", error_code="SMTP_ERROR"
            )

        return OperationResult.success(
            data={"message_id": msg["Message-ID"]}, message="Sent via SMTP"
        )

    def verify(self) -> OperationResult:
        try:
            with self._connect() as server:
                server.noop()
        except (smtplib.SMTPException, OSError) as e:
            return OperationResult.permanent_error(
                f"SMTP connection failed: {e}", error_code="SMTP_UNREACHABLE"
            )
        return OperationResult.success(message="SMTP server reachable")


class SendGridEmailProvider(EmailProvider):
    """SendGrid v3 mail send over HTTPS."""

    name = "sendgrid"

    def __init__(self, api_key: str, api_url: str, timeout: float = 10.0):
        if not api_key:
            raise ValueError("SendGrid api_key is required")
        self.api_url = api_url
        self.timeout = timeout
        self._session = requests.Session()
        self._session.headers.update(
            {
                "Authorization": f"Bearer {api_key}",
                "Content-Type": "application/json",
            }
        )

    def send(self, message: EmailMessage) -> OperationResult:
        content = [{"type": "text/plain", "value": message.text_body}]
        if message.html_body:
            content.append({"type": "text/html", "value": message.html_body})
        payload: Dict[str, Any] = {
            "personalizations": [{"to": [{"email": message.to}]}],
            "from": {"email": message.from_address},
            "subject": message.subject,
            "content": content,
        }
        if message.reply_to:
            payload["reply_to"] = {"email": message.reply_to}

        try:
            response = self._session.post(
                self.api_url, json=payload, timeout=self.timeout
            )
        except requests.RequestException as e:
            return classify_request_exception(e)

        result = classify_http_response(response)
        if result.is_success:
            return OperationResult.success(
                data={"message_id": response.headers.get("X-Message-Id")},
                message="Sent via SendGrid",
            )
        return result


class MailgunEmailProvider(EmailProvider):
    """Mailgun messages API over HTTPS."""

    name = "mailgun"

    def __init__(
        self, api_key: str, domain: str, base_url: str, timeout: float = 10.0
    ):
        if not api_key or not domain:
            raise ValueError("Mailgun api_key and domain are required")
        self.url = f"{base_url.rstrip('/')}/{domain}/messages"
        self.timeout = timeout
        self._session = requests.Session()
        self._session.auth = ("api", api_key)

    def send(self, message: EmailMessage) -> OperationResult:
        form = {
            "from": message.from_address,
            "to": message.to,
            "subject": message.subject,
            "text": message.text_body,
        }
        if message.html_body:
            form["html"] = message.html_body
        if message.reply_to:
            form["h:Reply-To"] = message.reply_to

        try:
            response = self._session.post(self.url, data=form, timeout=self.timeout)
        except requests.RequestException as e:
            return classify_request_exception(e)

        result = classify_http_response(response)
        if result.is_success:
            body = result.data.get("body") if result.data else None
            message_id = body.get("id") if isinstance(body, dict) else None
            return OperationResult.success(
                data={"message_id": message_id}, message="Sent via Mailgun"
            )
        return result


class SesEmailProvider(EmailProvider):
    """Amazon SES via boto3."""

    name = "ses"

    def __init__(
        self,
        region: str = "us-east-1",
        access_key_id: Optional[str] = None,
        secret_access_key: Optional[str] = None,
        client: Any = None,
    ):
        self._client = client or boto3.client(
            "ses",
            region_name=region,
            aws_access_key_id=access_key_id,
            aws_secret_access_key=secret_access_key,
        )

    def send(self, message: EmailMessage) -> OperationResult:
        body: Dict[str, Any] = {"Text": {"Data": message.text_body}}
        if message.html_body:
            body["Html"] = {"Data": message.html_body}
        kwargs: Dict[str, Any] = {
            "Source": message.from_address,
            "Destination": {"ToAddresses": [message.to]},
            "Message": {"Subject": {"Data": message.subject}, "Body": body},
        }
        if message.reply_to:
            kwargs["ReplyToAddresses"] = [message.reply_to]

        try:
            response = self._client.send_email(**kwargs)
        except Exception as e:  # pylint: disable=broad-except
            return classify_aws_error(e)

        return OperationResult.success(
            data={"message_id": response.get("MessageId")}, message="Sent via SES"
        )


def build_email_provider(
    provider: Optional[str], config: Dict[str, Any], settings: "EmailSettings"
) -> EmailProvider:
    """Build the provider named by a channel record.

    Raises:
        ValueError: Unsupported provider or missing configuration block
    """
    provider = (provider or "smtp").lower()
    block = config.get(provider) or {}

    if provider == "smtp":
        return SmtpEmailProvider(
            host=block.get("host", ""),
            port=int(block.get("port", 587)),
            username=block.get("username"),
            password=block.get("password"),
            secure=bool(block.get("secure", False)),
            use_tls=bool(block.get("use_tls", True)),
            timeout=settings.EMAIL_SMTP_TIMEOUT_SECONDS,
        )
    if provider == "sendgrid":
        return SendGridEmailProvider(
            api_key=block.get("api_key", ""),
            api_url=settings.SENDGRID_API_URL,
            timeout=settings.EMAIL_HTTP_TIMEOUT_SECONDS,
        )
    if provider == "mailgun":
        return MailgunEmailProvider(
            api_key=block.get("api_key", ""),
            domain=block.get("domain", ""),
            base_url=block.get("base_url") or settings.MAILGUN_API_BASE_URL,
            timeout=settings.EMAIL_HTTP_TIMEOUT_SECONDS,
        )
    if provider == "ses":
        return SesEmailProvider(
            region=block.get("region", "us-east-1"),
            access_key_id=block.get("access_key_id"),
            secret_access_key=block.get("secret_access_key"),
        )

    raise ValueError(f"Unsupported email provider: {provider}")
