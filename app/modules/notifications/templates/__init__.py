"""Template rendering and administration."""

from modules.notifications.templates.renderer import (
    PLACEHOLDER,
    RenderedContent,
    VariableValidation,
    render,
    resolve_variables,
    substitute,
    substitute_structure,
    validate_variables,
)
from modules.notifications.templates.service import TemplateService

__all__ = [
    "PLACEHOLDER",
    "RenderedContent",
    "VariableValidation",
    "render",
    "resolve_variables",
    "substitute",
    "substitute_structure",
    "validate_variables",
    "TemplateService",
]
