"""HTTP controllers for notifications, templates, preferences and channels.

Controllers are thin adapters: they parse the request, call one service
operation and wrap the result in the `APIResponse` envelope. Domain errors
propagate to the application exception handlers.
"""

from typing import Any, Dict, List, Optional

from fastapi import APIRouter, Body, Query, status

from infrastructure.logging.formatters import SENSITIVE_PATTERNS
from infrastructure.models import APIResponse, PaginatedData
from infrastructure.notifications.models import (
    ChannelConfig,
    ChannelStatus,
    ChannelType,
    NotificationPriority,
    redact_config,
)
from modules.notifications.api import schemas
from modules.notifications.api.dependencies import (
    ChannelAdminDep,
    OrchestratorDep,
    PreferenceServiceDep,
    TemplateServiceDep,
)
from modules.notifications.domain.models import NotificationRequest, NotificationStatus

notifications_router = APIRouter(prefix="/notifications", tags=["notifications"])
templates_router = APIRouter(prefix="/templates", tags=["templates"])
preferences_router = APIRouter(prefix="/preferences", tags=["preferences"])
channels_router = APIRouter(prefix="/channels", tags=["channels"])


def _public_channel(channel: ChannelConfig) -> ChannelConfig:
    return channel.model_copy(
        update={"config": redact_config(channel.config, SENSITIVE_PATTERNS)}
    )


def _public_channels(page: PaginatedData) -> PaginatedData:
    return page.model_copy(update={"data": [_public_channel(c) for c in page.data]})


# Notifications


@notifications_router.post("", status_code=status.HTTP_201_CREATED)
def create_notification(request: NotificationRequest, orchestrator: OrchestratorDep):
    """Create a notification and send it unless it is scheduled for later.

    A notification denied by the recipient's preferences is not persisted;
    the response reports it as skipped. Delivery failures are reported
    through the notification's own status, not as a request error.
    """
    result = orchestrator.create_and_send(request)
    if result.skipped:
        message = "Notification skipped due to user preferences"
    else:
        message = "Notification created successfully"
    return APIResponse(success=True, data=result, message=message)


@notifications_router.post("/batch")
def send_batch(request: schemas.BatchSendRequest, orchestrator: OrchestratorDep):
    summary = orchestrator.send_batch(request.notifications)
    return APIResponse(
        success=True, data=summary, message="Batch processed successfully"
    )


@notifications_router.get("/user/{user_id}")
def list_user_notifications(
    user_id: str,
    orchestrator: OrchestratorDep,
    status_filter: Optional[NotificationStatus] = Query(default=None, alias="status"),
    category: Optional[str] = None,
    type: Optional[str] = None,
    channel: Optional[ChannelType] = None,
    priority: Optional[NotificationPriority] = None,
    is_active: Optional[bool] = True,
    page: int = Query(default=1, ge=1),
    limit: int = Query(default=20, ge=1, le=100),
):
    result = orchestrator.get_user_notifications(
        user_id,
        status=status_filter,
        category=category,
        type=type,
        channel=channel,
        priority=priority,
        is_active=is_active,
        page=page,
        limit=limit,
    )
    return APIResponse(success=True, data=result)


@notifications_router.get("/user/{user_id}/unread-count")
def count_unread(user_id: str, orchestrator: OrchestratorDep):
    return APIResponse(success=True, data={"count": orchestrator.count_unread(user_id)})


@notifications_router.put("/user/{user_id}/read-all")
def mark_all_as_read(
    user_id: str,
    orchestrator: OrchestratorDep,
    request: schemas.MarkAllReadRequest = Body(
        default_factory=schemas.MarkAllReadRequest
    ),
):
    count = orchestrator.mark_all_as_read(user_id, request.category)
    return APIResponse(
        success=True,
        data={"count": count},
        message=f"{count} notifications marked as read",
    )


@notifications_router.post("/process-scheduled")
def process_scheduled(
    orchestrator: OrchestratorDep,
    request: schemas.SweepRequest = Body(default_factory=schemas.SweepRequest),
):
    result = orchestrator.process_scheduled_notifications(request.limit)
    return APIResponse(
        success=True,
        data=result,
        message=f"Processed {result['total']} scheduled notifications",
    )


@notifications_router.post("/process-expired")
def process_expired(
    orchestrator: OrchestratorDep,
    request: schemas.SweepRequest = Body(default_factory=schemas.SweepRequest),
):
    result = orchestrator.process_expired_notifications(request.limit)
    return APIResponse(
        success=True,
        data=result,
        message=f"Archived {result['archived']} expired notifications",
    )


@notifications_router.get("/{notification_id}")
def get_notification(notification_id: str, orchestrator: OrchestratorDep):
    return APIResponse(
        success=True, data=orchestrator.get_notification_by_id(notification_id)
    )


@notifications_router.put("/{notification_id}/read")
def mark_as_read(notification_id: str, orchestrator: OrchestratorDep):
    return APIResponse(
        success=True,
        data=orchestrator.mark_as_read(notification_id),
        message="Notification marked as read",
    )


@notifications_router.put("/{notification_id}/archive")
def archive_notification(notification_id: str, orchestrator: OrchestratorDep):
    return APIResponse(
        success=True,
        data=orchestrator.archive_notification(notification_id),
        message="Notification archived",
    )


@notifications_router.delete("/{notification_id}")
def delete_notification(notification_id: str, orchestrator: OrchestratorDep):
    orchestrator.delete_notification(notification_id)
    return APIResponse(success=True, message="Notification deleted")


# Templates


@templates_router.post("", status_code=status.HTTP_201_CREATED)
def create_template(service: TemplateServiceDep, data: Dict[str, Any] = Body(...)):
    return APIResponse(
        success=True,
        data=service.create_template(data),
        message="Template created successfully",
    )


@templates_router.get("")
def list_templates(
    service: TemplateServiceDep,
    category: Optional[str] = None,
    type: Optional[str] = None,
    is_active: Optional[bool] = None,
    search: Optional[str] = None,
    page: int = Query(default=1, ge=1),
    limit: int = Query(default=20, ge=1, le=100),
):
    result = service.list_templates(
        category=category,
        type=type,
        is_active=is_active,
        search=search,
        page=page,
        limit=limit,
    )
    return APIResponse(success=True, data=result)


@templates_router.get("/name/{name}")
def get_template_by_name(
    name: str,
    service: TemplateServiceDep,
    version: Optional[int] = Query(default=None, ge=1),
):
    return APIResponse(success=True, data=service.get_template_by_name(name, version))


@templates_router.get("/name/{name}/variables")
def get_template_variables(name: str, service: TemplateServiceDep):
    return APIResponse(success=True, data=service.get_template_variables(name))


@templates_router.post("/name/{name}/versions", status_code=status.HTTP_201_CREATED)
def create_template_version(
    name: str, service: TemplateServiceDep, changes: Dict[str, Any] = Body(...)
):
    template = service.create_new_version(name, changes)
    return APIResponse(
        success=True,
        data=template,
        message=f"Template version {template.version} created",
    )


@templates_router.post("/name/{name}/preview")
def preview_template(
    name: str, request: schemas.TemplatePreviewRequest, service: TemplateServiceDep
):
    preview = service.preview_template(
        name, request.variables, request.channel, request.version
    )
    return APIResponse(success=True, data=preview)


@templates_router.get("/{template_id}")
def get_template(template_id: str, service: TemplateServiceDep):
    return APIResponse(success=True, data=service.get_template_by_id(template_id))


@templates_router.put("/{template_id}")
def update_template(
    template_id: str, service: TemplateServiceDep, changes: Dict[str, Any] = Body(...)
):
    return APIResponse(
        success=True,
        data=service.update_template(template_id, changes),
        message="Template updated successfully",
    )


@templates_router.patch("/{template_id}/toggle")
def toggle_template(template_id: str, service: TemplateServiceDep):
    template = service.toggle_template_active(template_id)
    state = "activated" if template.is_active else "deactivated"
    return APIResponse(success=True, data=template, message=f"Template {state}")


@templates_router.delete("/{template_id}")
def delete_template(template_id: str, service: TemplateServiceDep):
    service.delete_template(template_id)
    return APIResponse(success=True, message="Template deleted")


# Preferences


@preferences_router.get("/{user_id}")
def get_preferences(user_id: str, service: PreferenceServiceDep):
    return APIResponse(success=True, data=service.get_or_create(user_id))


@preferences_router.put("/{user_id}")
def update_preferences(
    user_id: str, service: PreferenceServiceDep, changes: Dict[str, Any] = Body(...)
):
    return APIResponse(
        success=True,
        data=service.update_preferences(user_id, changes),
        message="Preferences updated successfully",
    )


@preferences_router.post("/{user_id}/reset")
def reset_preferences(user_id: str, service: PreferenceServiceDep):
    return APIResponse(
        success=True,
        data=service.reset_preferences(user_id),
        message="Preferences reset to defaults",
    )


@preferences_router.post("/{user_id}/push-tokens")
def add_push_token(
    user_id: str, request: schemas.PushTokenRequest, service: PreferenceServiceDep
):
    return APIResponse(
        success=True,
        data=service.add_push_token(
            user_id, request.token, request.platform, request.device
        ),
        message="Push token registered",
    )


@preferences_router.delete("/{user_id}/push-tokens")
def remove_push_token(
    user_id: str, service: PreferenceServiceDep, token: str = Query(..., min_length=1)
):
    return APIResponse(
        success=True,
        data=service.remove_push_token(user_id, token),
        message="Push token removed",
    )


@preferences_router.post("/{user_id}/webhooks")
def add_webhook_endpoint(
    user_id: str,
    request: schemas.WebhookEndpointRequest,
    service: PreferenceServiceDep,
):
    return APIResponse(
        success=True,
        data=service.add_webhook_endpoint(
            user_id, request.url, request.secret, request.description, request.events
        ),
        message="Webhook endpoint added",
    )


@preferences_router.delete("/{user_id}/webhooks")
def remove_webhook_endpoint(
    user_id: str, service: PreferenceServiceDep, url: str = Query(..., min_length=1)
):
    return APIResponse(
        success=True,
        data=service.remove_webhook_endpoint(user_id, url),
        message="Webhook endpoint removed",
    )


@preferences_router.get("/{user_id}/delivery-settings")
def get_delivery_settings(
    user_id: str,
    channel: ChannelType,
    service: PreferenceServiceDep,
    category: Optional[str] = None,
    type: Optional[str] = None,
):
    return APIResponse(
        success=True,
        data=service.get_delivery_settings(user_id, channel, category, type),
    )


@preferences_router.get("/{user_id}/check")
def check_delivery(
    user_id: str,
    category: str,
    type: str,
    channel: ChannelType,
    service: PreferenceServiceDep,
    priority: NotificationPriority = NotificationPriority.NORMAL,
    template: Optional[str] = None,
):
    return APIResponse(
        success=True,
        data=service.check_delivery(
            user_id, category, type, channel, priority, template
        ),
    )


# Channels


@channels_router.post("", status_code=status.HTTP_201_CREATED)
def create_channel(service: ChannelAdminDep, data: Dict[str, Any] = Body(...)):
    return APIResponse(
        success=True,
        data=_public_channel(service.create_channel(data)),
        message="Channel created successfully",
    )


@channels_router.get("")
def list_channels(
    service: ChannelAdminDep,
    type: Optional[ChannelType] = None,
    status_filter: Optional[ChannelStatus] = Query(default=None, alias="status"),
    provider: Optional[str] = None,
    tag: Optional[str] = None,
    page: int = Query(default=1, ge=1),
    limit: int = Query(default=20, ge=1, le=100),
):
    result = service.list_channels(
        type=type,
        status=status_filter,
        provider=provider,
        tag=tag,
        page=page,
        limit=limit,
    )
    return APIResponse(success=True, data=_public_channels(result))


@channels_router.get("/type/{channel_type}")
def get_channels_by_type(channel_type: str, service: ChannelAdminDep):
    channels: List[ChannelConfig] = service.get_channels_by_type(channel_type)
    return APIResponse(success=True, data=[_public_channel(c) for c in channels])


@channels_router.get("/{channel_id}")
def get_channel(channel_id: str, service: ChannelAdminDep):
    channel = service.get_channel(channel_id)
    return APIResponse(success=True, data=_public_channel(channel))


@channels_router.put("/{channel_id}")
def update_channel(
    channel_id: str, service: ChannelAdminDep, changes: Dict[str, Any] = Body(...)
):
    return APIResponse(
        success=True,
        data=_public_channel(service.update_channel(channel_id, changes)),
        message="Channel updated successfully",
    )


@channels_router.delete("/{channel_id}")
def delete_channel(channel_id: str, service: ChannelAdminDep):
    service.delete_channel(channel_id)
    return APIResponse(success=True, message="Channel deleted")


@channels_router.post("/{channel_id}/test")
def test_channel(channel_id: str, service: ChannelAdminDep):
    result = service.test_channel(channel_id)
    return APIResponse(
        success=result["success"],
        data=_public_channel(result["channel"]),
        message=result["message"],
    )


@channels_router.post("/{channel_id}/default")
def set_as_default(channel_id: str, service: ChannelAdminDep):
    return APIResponse(
        success=True,
        data=_public_channel(service.set_as_default(channel_id)),
        message="Channel set as default",
    )


@channels_router.get("/{channel_id}/stats")
def get_channel_stats(channel_id: str, service: ChannelAdminDep):
    return APIResponse(success=True, data=service.get_channel_stats(channel_id))
