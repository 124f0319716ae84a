"""Template rendering.

Pure functions: `render` substitutes `{{name}}` placeholders in a template's
title, message, action URLs and the requested channel's overrides;
`validate_variables` reports missing required variables.

Unresolved placeholders are left verbatim, so rendering is idempotent for
the same inputs.
"""

import re
from typing import Any, Dict, List, Optional

from pydantic import Field

from infrastructure.models import InfrastructureModel
from infrastructure.notifications.models import (
    ChannelType,
    NotificationAction,
    NotificationPriority,
)
from modules.notifications.domain.models import NotificationTemplate

PLACEHOLDER = re.compile(r"\{\{([^}]+)\}\}")


class RenderedContent(InfrastructureModel):
    """Rendered template content.

    Exactly one of the channel sub-objects (`email`, `sms`, `push`,
    `webhook`) is set, matching the channel rendered for; none for in-app.
    """

    title: str
    message: str
    type: str
    category: str
    priority: NotificationPriority
    actions: List[NotificationAction] = Field(default_factory=list)
    email: Optional[Dict[str, Any]] = None
    sms: Optional[Dict[str, Any]] = None
    push: Optional[Dict[str, Any]] = None
    webhook: Optional[Dict[str, Any]] = None

    def channel_data(self) -> Dict[str, Any]:
        """The channel sub-object keyed by channel name, for `Notification.data`."""
        return {
            key: value
            for key, value in (
                ("email", self.email),
                ("sms", self.sms),
                ("push", self.push),
                ("webhook", self.webhook),
            )
            if value is not None
        }


class VariableValidation(InfrastructureModel):
    is_valid: bool
    errors: List[str] = Field(default_factory=list)


def substitute(text: Optional[str], variables: Dict[str, Any]) -> Optional[str]:
    """Replace `{{name}}` tokens whose trimmed name is in `variables`."""
    if text is None:
        return None

    def replace(match: re.Match) -> str:
        name = match.group(1).strip()
        if name in variables and variables[name] is not None:
            return str(variables[name])
        return match.group(0)

    return PLACEHOLDER.sub(replace, text)


def substitute_structure(value: Any, variables: Dict[str, Any]) -> Any:
    """Recursively substitute string leaves of a JSON-like value.

    Lists and dicts are rebuilt; numbers, booleans and None pass through.
    """
    if isinstance(value, str):
        return substitute(value, variables)
    if isinstance(value, list):
        return [substitute_structure(item, variables) for item in value]
    if isinstance(value, dict):
        return {
            key: substitute_structure(item, variables) for key, item in value.items()
        }
    return value


def resolve_variables(
    template: NotificationTemplate, variables: Optional[Dict[str, Any]]
) -> Dict[str, Any]:
    """Declared default values overlaid with the supplied variables."""
    resolved = {
        var.name: var.default_value
        for var in template.variables
        if var.default_value is not None
    }
    resolved.update(variables or {})
    return resolved


def validate_variables(
    template: NotificationTemplate, variables: Optional[Dict[str, Any]]
) -> VariableValidation:
    """Check every required variable is supplied or has a default."""
    resolved = resolve_variables(template, variables)
    errors = [
        f"Required variable '{var.name}' is missing"
        for var in template.variables
        if var.required and resolved.get(var.name) is None
    ]
    return VariableValidation(is_valid=not errors, errors=errors)


def render(
    template: NotificationTemplate,
    variables: Optional[Dict[str, Any]],
    channel: ChannelType = ChannelType.IN_APP,
) -> RenderedContent:
    values = resolve_variables(template, variables)
    title = substitute(template.title_template, values)
    message = substitute(template.message_template, values)

    content = RenderedContent(
        title=title,
        message=message,
        type=template.type,
        category=template.category,
        priority=template.default_priority,
        actions=[
            NotificationAction(
                name=action.name,
                text=substitute(action.text, values),
                url=substitute(action.url_template, values),
                icon=action.icon,
                is_primary=action.is_primary,
            )
            for action in template.actions
        ],
    )

    if channel == ChannelType.EMAIL:
        content.email = {
            "subject": substitute(template.email.subject, values) or title,
            "html_body": substitute(template.email.html_body, values) or message,
            "text_body": substitute(template.email.text_body, values) or message,
        }
    elif channel == ChannelType.SMS:
        content.sms = {"text": substitute(template.sms.text, values) or message}
    elif channel == ChannelType.PUSH:
        content.push = {
            "title": substitute(template.push.title, values) or title,
            "body": substitute(template.push.body, values) or message,
        }
    elif channel == ChannelType.WEBHOOK:
        if template.webhook.payload is not None:
            payload = substitute_structure(template.webhook.payload, values)
        else:
            payload = {
                "title": title,
                "message": message,
                "type": template.type,
                "category": template.category,
            }
        content.webhook = {"payload": payload}

    return content
