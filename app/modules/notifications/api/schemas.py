"""API request schemas for the notifications module.

Create-and-send uses `NotificationRequest` from the domain directly. Batch
items stay plain objects so each one is validated on its own and a bad
item fails alone instead of rejecting the whole batch.
"""

from typing import Any, Dict, List, Optional

from pydantic import BaseModel, Field

from infrastructure.notifications.models import ChannelType, PushPlatform


class BatchSendRequest(BaseModel):
    notifications: List[Dict[str, Any]] = Field(default_factory=list)


class MarkAllReadRequest(BaseModel):
    category: Optional[str] = None


class SweepRequest(BaseModel):
    limit: Optional[int] = Field(default=None, ge=1, le=1000)


class TemplatePreviewRequest(BaseModel):
    variables: Dict[str, Any] = Field(default_factory=dict)
    channel: ChannelType = ChannelType.IN_APP
    version: Optional[int] = Field(default=None, ge=1)


class PushTokenRequest(BaseModel):
    token: str = Field(..., min_length=1)
    platform: PushPlatform = PushPlatform.ANDROID
    device: Optional[str] = None


class WebhookEndpointRequest(BaseModel):
    url: str = Field(..., min_length=1)
    secret: Optional[str] = None
    description: Optional[str] = None
    events: List[str] = Field(default_factory=list)
