"""Notification orchestrator.

Turns a send request into a persisted, preference-filtered, dispatched
notification and owns the notification lifecycle:

    request -> validate -> render template -> evaluate preferences
            -> persist (pending, claimed unless scheduled) -> [scheduled? stop]
            -> resolve delivery settings -> channel registry -> adapter
            -> record delivery statistics -> persist terminal status

Batch send and both sweeps run their items on a bounded thread pool; one
failing item never aborts the others. Only the orchestrator writes
terminal notification status. A pending record reaches a provider only
through the dispatcher that claimed it.
"""

from concurrent.futures import ThreadPoolExecutor
from datetime import datetime, timezone
from typing import Any, Callable, Dict, List, Optional, Sequence, Union

from pydantic import ValidationError as PydanticValidationError

from infrastructure.logging import bind_request_context, get_correlation_id
from infrastructure.logging import get_module_logger
from infrastructure.models import InfrastructureModel, PaginatedData
from infrastructure.notifications import (
    ChannelConfig,
    ChannelRegistry,
    ChannelType,
    DeliveryOutcome,
    DeliverySettings,
    NotificationPriority,
    record_delivery_attempt,
)
from infrastructure.persistence import (
    DEFAULT_PAGE_SIZE,
    GuardRejectedError,
    RecordStore,
    paginate,
)
from modules.notifications.domain.errors import (
    ConflictError,
    NotFoundError,
    NotificationError,
    ValidationError,
)
from modules.notifications.domain.lifecycle import READABLE_STATUSES, can_transition
from modules.notifications.domain.models import (
    Notification,
    NotificationPreference,
    NotificationRequest,
    NotificationStatus,
)
from modules.notifications.preferences.evaluator import (
    get_delivery_settings,
    is_enabled,
)
from modules.notifications.preferences.service import PreferenceService
from modules.notifications.templates.renderer import render, validate_variables
from modules.notifications.templates.service import TemplateService

logger = get_module_logger()

MISSING_FIELDS_MESSAGE = (
    "Missing required fields: recipient, type, and category are required"
)
MISSING_CONTENT_MESSAGE = "Either template or title and message are required"
PREFERENCE_SKIP_REASON = "User preferences"
DEFAULT_FAILURE_MESSAGE = "Failed to send notification"

RequestLike = Union[NotificationRequest, Dict[str, Any]]


class SendResult(InfrastructureModel):
    """Outcome of one create-and-send.

    Attributes:
        success: False only when delivery was attempted and failed
        skipped: True when preferences denied delivery (nothing persisted)
        reason: Why the notification was skipped
        notification: The persisted record, if any
        error: Delivery error message
    """

    success: bool
    skipped: bool = False
    reason: Optional[str] = None
    notification: Optional[Notification] = None
    error: Optional[str] = None


def _utcnow() -> datetime:
    return datetime.now(timezone.utc)


def _as_aware(value: Optional[datetime]) -> Optional[datetime]:
    if value is not None and value.tzinfo is None:
        return value.replace(tzinfo=timezone.utc)
    return value


class NotificationOrchestrator:
    """Create, dispatch and manage notifications.

    Attributes:
        store: Notification records
        templates: Template lookups for rendering
        preferences: Preference records and delivery settings
        registry: Channel registry used for dispatch
        channel_store: Channel records, for delivery statistics
        max_workers: Thread pool size for batch send and sweeps
        sweep_limit: Default limit for the sweeps
        strict_template_variables: Reject sends missing required template
            variables instead of rendering leniently
        clock: Current time provider
    """

    def __init__(
        self,
        store: RecordStore[Notification],
        templates: TemplateService,
        preferences: PreferenceService,
        registry: ChannelRegistry,
        channel_store: RecordStore[ChannelConfig],
        max_workers: int = 8,
        sweep_limit: int = 100,
        strict_template_variables: bool = False,
        clock: Callable[[], datetime] = _utcnow,
    ):
        self.store = store
        self.templates = templates
        self.preferences = preferences
        self.registry = registry
        self.channel_store = channel_store
        self.max_workers = max(1, max_workers)
        self.sweep_limit = sweep_limit
        self.strict_template_variables = strict_template_variables
        self.clock = clock

    # Sending

    def _coerce_request(self, request: RequestLike) -> NotificationRequest:
        if isinstance(request, NotificationRequest):
            return request
        if not isinstance(request, dict):
            raise ValidationError("Notification request must be an object")
        try:
            return NotificationRequest.model_validate(request)
        except PydanticValidationError as e:
            raise ValidationError(
                "Invalid notification request",
                details={"errors": e.errors(include_url=False, include_context=False)},
            ) from e

    def _build_notification(self, request: NotificationRequest) -> Notification:
        """Validate the request and assemble the (unsaved) record."""
        if not (request.recipient and request.type and request.category):
            raise ValidationError(MISSING_FIELDS_MESSAGE)

        channel = request.channel
        data = dict(request.data)
        title = request.title
        message = request.message
        priority = request.priority
        actions = request.actions

        if request.template:
            template = self.templates.get_template_by_name(
                request.template, request.template_version
            )
            if self.strict_template_variables:
                validation = validate_variables(template, request.template_data)
                if not validation.is_valid:
                    raise ValidationError(
                        "Template variable validation failed",
                        details={"errors": validation.errors},
                    )
            content = render(template, request.template_data, channel)
            title = content.title
            message = content.message
            priority = priority or content.priority
            if actions is None:
                actions = content.actions
            for key, sub_payload in content.channel_data().items():
                data[key] = {**sub_payload, **(data.get(key) or {})}
        elif not (title and message):
            raise ValidationError(MISSING_CONTENT_MESSAGE)

        metadata = dict(request.metadata)
        if request.source:
            metadata["source"] = request.source
        if request.channel_name:
            metadata["channel_name"] = request.channel_name
        if request.template_version is not None:
            metadata["template_version"] = request.template_version

        now = self.clock()
        return Notification(
            recipient=request.recipient,
            type=request.type,
            category=request.category,
            title=title,
            message=message,
            data=data,
            priority=priority or NotificationPriority.NORMAL,
            channel=channel,
            template=request.template,
            actions=actions or [],
            status=NotificationStatus.PENDING,
            scheduled_for=_as_aware(request.scheduled_for) or now,
            expires_at=_as_aware(request.expires_at),
            metadata=metadata,
            created_at=now,
            updated_at=now,
        )

    def create_and_send(self, request: RequestLike) -> SendResult:
        """Create a notification and dispatch it unless scheduled for later.

        Raises:
            ValidationError: Missing fields, invalid values, or strict
                template variable validation failed
            NotFoundError: Unknown template
        """
        request = self._coerce_request(request)
        notification = self._build_notification(request)

        preference = self.preferences.get(notification.recipient)
        if not is_enabled(
            preference,
            notification.category,
            notification.type,
            notification.channel,
            notification.priority,
            notification.template,
        ):
            logger.info(
                "notification_skipped",
                recipient=notification.recipient,
                category=notification.category,
                type=notification.type,
                channel=notification.channel.value,
                reason=PREFERENCE_SKIP_REASON,
            )
            return SendResult(
                success=True, skipped=True, reason=PREFERENCE_SKIP_REASON
            )

        now = self.clock()
        due_now = notification.scheduled_for <= now
        if due_now:
            notification.dispatch_claimed_at = now
        notification = self.store.create(notification)
        logger.info(
            "notification_created",
            notification_id=notification.id,
            recipient=notification.recipient,
            channel=notification.channel.value,
        )

        if not due_now:
            logger.info(
                "notification_scheduled",
                notification_id=notification.id,
                scheduled_for=notification.scheduled_for.isoformat(),
            )
            return SendResult(success=True, notification=notification)

        notification = self._dispatch(notification, preference)
        failed = notification.status == NotificationStatus.FAILED
        return SendResult(
            success=not failed,
            notification=notification,
            error=notification.error_message if failed else None,
        )

    def _claim(self, notification: Notification) -> Optional[Notification]:
        """Take ownership of a pending record before sending it.

        Returns None when another dispatcher already claimed it or it left
        `pending` in the meantime.
        """
        try:
            return self.store.update(
                notification.id,
                {"dispatch_claimed_at": self.clock()},
                guard=lambda n: n.status == NotificationStatus.PENDING
                and n.dispatch_claimed_at is None,
            )
        except GuardRejectedError as e:
            logger.info(
                "notification_already_claimed",
                notification_id=notification.id,
                status=e.current.status.value,
            )
            return None

    def _delivery_settings(
        self,
        notification: Notification,
        preference: Optional[NotificationPreference],
    ) -> DeliverySettings:
        settings = get_delivery_settings(
            preference, notification.channel, notification.category, notification.type
        )
        # Explicit destinations in the payload fill gaps in the preferences
        if notification.channel == ChannelType.EMAIL and not settings.email_address:
            address = notification.to_outbound().channel_payload("email").get("to")
            if address:
                settings = settings.model_copy(update={"email_address": address})
        elif notification.channel == ChannelType.SMS and not settings.phone_number:
            number = notification.to_outbound().channel_payload("sms").get("to")
            if number:
                settings = settings.model_copy(update={"phone_number": number})
        return settings

    def _dispatch(
        self,
        notification: Notification,
        preference: Optional[NotificationPreference] = None,
        correlation_id: Optional[str] = None,
    ) -> Notification:
        """Send a persisted pending notification and record the result.

        Never raises for delivery failures; the returned record carries the
        terminal status.
        """
        with bind_request_context(
            correlation_id=correlation_id,
            recipient=notification.recipient,
            notification_id=notification.id,
        ):
            if preference is None:
                preference = self.preferences.get(notification.recipient)
            settings = self._delivery_settings(notification, preference)
            outcome = self.registry.send_notification(
                notification.channel,
                notification.to_outbound(),
                settings,
                channel_name=notification.metadata.get("channel_name"),
            )
            record_delivery_attempt(self.channel_store, outcome.channel_name, outcome)
            return self._apply_outcome(notification, outcome)

    def _apply_outcome(
        self, notification: Notification, outcome: DeliveryOutcome
    ) -> Notification:
        now = self.clock()
        changes: Dict[str, Any] = {"updated_at": now}
        if outcome.success:
            if outcome.delivered_at is not None:
                target = NotificationStatus.DELIVERED
                changes["delivered_at"] = outcome.delivered_at
            else:
                target = NotificationStatus.SENT
            changes["error_message"] = None
            metadata = dict(notification.metadata)
            if outcome.channel_name:
                metadata["delivered_via"] = outcome.channel_name
            if outcome.message_id:
                metadata["message_id"] = outcome.message_id
            if outcome.queued:
                metadata["queued"] = True
            changes["metadata"] = metadata
        else:
            target = NotificationStatus.FAILED
            changes["error_message"] = outcome.error or DEFAULT_FAILURE_MESSAGE
        changes["status"] = target

        try:
            updated = self.store.update(
                notification.id,
                changes,
                guard=lambda current: can_transition(current.status, target),
            )
        except GuardRejectedError as e:
            logger.warning(
                "notification_status_conflict",
                notification_id=notification.id,
                current_status=e.current.status.value,
                target_status=target.value,
            )
            return e.current
        if updated is None:
            logger.warning("notification_vanished", notification_id=notification.id)
            return notification

        log = logger.info if outcome.success else logger.warning
        log(
            "notification_dispatched",
            notification_id=notification.id,
            channel=notification.channel.value,
            status=target.value,
            error=changes.get("error_message"),
        )
        return updated

    def _run_parallel(
        self, func: Callable[[Any], Any], items: Sequence[Any]
    ) -> List[Any]:
        """Run `func` over `items` on the worker pool, preserving input order."""
        if not items:
            return []
        workers = min(self.max_workers, len(items))
        with ThreadPoolExecutor(
            max_workers=workers, thread_name_prefix="notification-dispatch"
        ) as executor:
            return list(executor.map(func, items))

    def send_batch(self, requests: Sequence[RequestLike]) -> Dict[str, Any]:
        """Create and send each request independently.

        Returns:
            {total, sent, skipped, failed, details[]} with details in input order

        Raises:
            ValidationError: If `requests` is empty or not a list
        """
        if not isinstance(requests, (list, tuple)) or not requests:
            raise ValidationError("Notifications array is required")

        correlation_id = get_correlation_id()

        def process(indexed: tuple) -> Dict[str, Any]:
            index, request = indexed
            with bind_request_context(correlation_id=correlation_id, batch_index=index):
                try:
                    result = self.create_and_send(request)
                except NotificationError as e:
                    return {"index": index, "success": False, "error": e.message}
                except Exception as e:  # pylint: disable=broad-except
                    logger.error(
                        "batch_item_failed", index=index, error=str(e), exc_info=True
                    )
                    return {"index": index, "success": False, "error": str(e)}

            detail: Dict[str, Any] = {"index": index, "success": result.success}
            if result.skipped:
                detail.update(skipped=True, reason=result.reason)
            if result.notification is not None:
                detail["notification_id"] = result.notification.id
                detail["status"] = result.notification.status.value
            if result.error:
                detail["error"] = result.error
            return detail

        details = self._run_parallel(process, list(enumerate(requests)))
        skipped = sum(1 for d in details if d.get("skipped"))
        failed = sum(1 for d in details if not d["success"])
        summary = {
            "total": len(details),
            "sent": len(details) - skipped - failed,
            "skipped": skipped,
            "failed": failed,
            "details": details,
        }
        logger.info(
            "batch_processed",
            total=summary["total"],
            sent=summary["sent"],
            skipped=skipped,
            failed=failed,
        )
        return summary

    # Sweeps

    def process_scheduled_notifications(
        self, limit: Optional[int] = None
    ) -> Dict[str, Any]:
        """Dispatch pending notifications whose scheduled time has passed.

        Returns:
            {total, sent, failed, details[{id, success, error}]}
        """
        now = self.clock()
        due = self.store.find(
            where={"status": NotificationStatus.PENDING, "is_active": True},
            predicate=lambda n: n.dispatch_claimed_at is None
            and n.scheduled_for is not None
            and _as_aware(n.scheduled_for) <= now,
            sort_by="scheduled_for",
            limit=limit or self.sweep_limit,
        )
        correlation_id = get_correlation_id()

        def process(notification: Notification) -> Optional[Dict[str, Any]]:
            claimed = self._claim(notification)
            if claimed is None:
                return None
            try:
                updated = self._dispatch(claimed, correlation_id=correlation_id)
            except Exception as e:  # pylint: disable=broad-except
                logger.error(
                    "scheduled_dispatch_failed",
                    notification_id=notification.id,
                    error=str(e),
                    exc_info=True,
                )
                return {"id": notification.id, "success": False, "error": str(e)}
            success = updated.status in (
                NotificationStatus.SENT,
                NotificationStatus.DELIVERED,
            )
            return {
                "id": notification.id,
                "success": success,
                "error": None if success else updated.error_message,
            }

        details = [d for d in self._run_parallel(process, due) if d is not None]
        sent = sum(1 for d in details if d["success"])
        result = {
            "total": len(details),
            "sent": sent,
            "failed": len(details) - sent,
            "details": details,
        }
        logger.info(
            "scheduled_sweep_completed",
            total=result["total"],
            sent=sent,
            failed=result["failed"],
        )
        return result

    def process_expired_notifications(
        self, limit: Optional[int] = None
    ) -> Dict[str, Any]:
        """Archive active notifications whose expiry has passed.

        Returns:
            {total, archived, failed}
        """
        now = self.clock()
        expired = self.store.find(
            where={"is_active": True},
            predicate=lambda n: n.status != NotificationStatus.ARCHIVED
            and n.expires_at is not None
            and _as_aware(n.expires_at) <= now,
            sort_by="expires_at",
            limit=limit or self.sweep_limit,
        )

        def process(notification: Notification) -> bool:
            try:
                self.archive_notification(notification.id)
            except Exception as e:  # pylint: disable=broad-except
                logger.error(
                    "expired_archive_failed",
                    notification_id=notification.id,
                    error=str(e),
                )
                return False
            return True

        outcomes = self._run_parallel(process, expired)
        archived = sum(1 for ok in outcomes if ok)
        result = {
            "total": len(outcomes),
            "archived": archived,
            "failed": len(outcomes) - archived,
        }
        logger.info("expired_sweep_completed", **result)
        return result

    # Read side and user actions

    def get_notification_by_id(self, notification_id: str) -> Notification:
        notification = self.store.get(notification_id)
        if notification is None:
            raise NotFoundError(f"Notification not found: {notification_id}")
        return notification

    def get_user_notifications(
        self,
        user_id: str,
        status: Optional[NotificationStatus] = None,
        category: Optional[str] = None,
        type: Optional[str] = None,
        channel: Optional[ChannelType] = None,
        priority: Optional[NotificationPriority] = None,
        is_active: Optional[bool] = True,
        page: int = 1,
        limit: int = DEFAULT_PAGE_SIZE,
    ) -> PaginatedData:
        """List a recipient's notifications, newest first."""
        where: Dict[str, Any] = {"recipient": user_id}
        for field, value in (
            ("status", status),
            ("category", category),
            ("type", type),
            ("channel", channel),
            ("priority", priority),
            ("is_active", is_active),
        ):
            if value is not None:
                where[field] = value
        return paginate(self.store, where=where, page=page, limit=limit)

    def mark_as_read(self, notification_id: str) -> Notification:
        """Mark a notification read. Already-read notifications are returned as is.

        Raises:
            NotFoundError: Unknown id
            ConflictError: The notification is pending or archived
        """
        now = self.clock()
        try:
            updated = self.store.update(
                notification_id,
                {"status": NotificationStatus.READ, "read_at": now, "updated_at": now},
                guard=lambda n: can_transition(n.status, NotificationStatus.READ),
            )
        except GuardRejectedError as e:
            if e.current.status == NotificationStatus.READ:
                return e.current
            raise ConflictError(
                f"Cannot mark a {e.current.status.value} notification as read",
                details={"current_status": e.current.status.value},
            ) from e
        if updated is None:
            raise NotFoundError(f"Notification not found: {notification_id}")
        return updated

    def mark_all_as_read(self, user_id: str, category: Optional[str] = None) -> int:
        """Mark every sent, delivered or failed notification of a user read.

        Returns:
            Number of notifications updated
        """
        where: Dict[str, Any] = {"recipient": user_id, "is_active": True}
        if category:
            where["category"] = category
        now = self.clock()
        count = self.store.update_many(
            {"status": NotificationStatus.READ, "read_at": now, "updated_at": now},
            where=where,
            predicate=lambda n: n.status in READABLE_STATUSES,
        )
        logger.info("notifications_marked_read", user_id=user_id, count=count)
        return count

    def count_unread(self, user_id: str) -> int:
        return self.store.count(
            where={"recipient": user_id, "is_active": True},
            predicate=lambda n: n.status != NotificationStatus.READ,
        )

    def archive_notification(self, notification_id: str) -> Notification:
        """Archive a notification. Archiving twice is a no-op."""
        now = self.clock()
        try:
            updated = self.store.update(
                notification_id,
                {
                    "status": NotificationStatus.ARCHIVED,
                    "is_active": False,
                    "updated_at": now,
                },
                guard=lambda n: n.status != NotificationStatus.ARCHIVED,
            )
        except GuardRejectedError as e:
            return e.current
        if updated is None:
            raise NotFoundError(f"Notification not found: {notification_id}")
        logger.info("notification_archived", notification_id=notification_id)
        return updated

    def delete_notification(self, notification_id: str) -> None:
        if not self.store.delete(notification_id):
            raise NotFoundError(f"Notification not found: {notification_id}")
        logger.info("notification_deleted", notification_id=notification_id)
