"""Template administration: CRUD, versioning and preview."""

from datetime import datetime, timezone
from typing import Any, Dict, List, Optional

from pydantic import ValidationError as PydanticValidationError

from infrastructure.logging import get_module_logger
from infrastructure.models import PaginatedData
from infrastructure.notifications.models import ChannelType
from infrastructure.persistence import DEFAULT_PAGE_SIZE, RecordStore, paginate
from modules.notifications.domain.errors import (
    ConflictError,
    NotFoundError,
    ValidationError,
)
from modules.notifications.domain.models import NotificationTemplate, TemplateVariable
from modules.notifications.templates.renderer import render, validate_variables

logger = get_module_logger()

# Fields a caller may never set directly on update
PROTECTED_FIELDS = ("id", "version", "previous_version", "created_at")


def _now() -> datetime:
    return datetime.now(timezone.utc)


def _validation_error(e: PydanticValidationError) -> ValidationError:
    return ValidationError(
        "Invalid template data",
        details={"errors": e.errors(include_url=False, include_context=False)},
    )


class TemplateService:
    """Administrative operations over NotificationTemplate records.

    Versions of a template share its name. `get_template_by_name` without
    a version returns the active record with the highest version.
    """

    def __init__(self, store: RecordStore[NotificationTemplate]):
        self.store = store

    def create_template(self, data: Dict[str, Any]) -> NotificationTemplate:
        missing = [
            field
            for field in ("name", "title_template", "message_template")
            if not data.get(field)
        ]
        if missing:
            raise ValidationError(
                "Missing required fields: name, title_template and "
                "message_template are required",
                details={"missing": missing},
            )
        if self.store.count(where={"name": data["name"]}):
            raise ConflictError(f"Template with name '{data['name']}' already exists")

        now = _now()
        payload = {k: v for k, v in data.items() if k not in PROTECTED_FIELDS}
        try:
            template = NotificationTemplate.model_validate(
                {**payload, "version": 1, "created_at": now, "updated_at": now}
            )
        except PydanticValidationError as e:
            raise _validation_error(e) from e

        created = self.store.create(template)
        logger.info(
            "template_created", template_name=created.name, template_id=created.id
        )
        return created

    def get_template_by_id(self, template_id: str) -> NotificationTemplate:
        template = self.store.get(template_id)
        if template is None:
            raise NotFoundError(f"Template not found: {template_id}")
        return template

    def get_template_by_name(
        self, name: str, version: Optional[int] = None
    ) -> NotificationTemplate:
        if version is not None:
            matches = self.store.find(where={"name": name, "version": version}, limit=1)
            if not matches:
                raise NotFoundError(f"Template not found: {name} (version {version})")
            return matches[0]

        matches = self.store.find(
            where={"name": name, "is_active": True},
            sort_by="version",
            descending=True,
            limit=1,
        )
        if not matches:
            raise NotFoundError(f"Template not found: {name}")
        return matches[0]

    def list_templates(
        self,
        category: Optional[str] = None,
        type: Optional[str] = None,
        is_active: Optional[bool] = None,
        search: Optional[str] = None,
        page: int = 1,
        limit: int = DEFAULT_PAGE_SIZE,
    ) -> PaginatedData:
        where: Dict[str, Any] = {}
        if category:
            where["category"] = category
        if type:
            where["type"] = type
        if is_active is not None:
            where["is_active"] = is_active

        predicate = None
        if search:
            needle = search.lower()

            def predicate(t: NotificationTemplate) -> bool:
                return any(
                    needle in (value or "").lower()
                    for value in (t.name, t.display_name, t.description)
                )

        return paginate(
            self.store, where=where, predicate=predicate, page=page, limit=limit
        )

    def update_template(
        self, template_id: str, changes: Dict[str, Any]
    ) -> NotificationTemplate:
        current = self.get_template_by_id(template_id)
        changes = {k: v for k, v in changes.items() if k not in PROTECTED_FIELDS}

        new_name = changes.get("name")
        if new_name and new_name != current.name and self.store.count(
            where={"name": new_name}
        ):
            raise ConflictError(f"Template with name '{new_name}' already exists")

        try:
            updated = self.store.update(template_id, {**changes, "updated_at": _now()})
        except PydanticValidationError as e:
            raise _validation_error(e) from e
        if updated is None:
            raise NotFoundError(f"Template not found: {template_id}")
        logger.info("template_updated", template_id=template_id)
        return updated

    def create_new_version(
        self, name: str, changes: Dict[str, Any]
    ) -> NotificationTemplate:
        """Create version N+1 from the latest version of `name`.

        The new record links back through `previous_version` and becomes
        the active one; the superseded record is deactivated but stays
        queryable by explicit version.
        """
        latest = self.store.find(
            where={"name": name}, sort_by="version", descending=True, limit=1
        )
        if not latest:
            raise NotFoundError(f"Template not found: {name}")
        current = latest[0]

        data = current.model_dump()
        data.update({k: v for k, v in changes.items() if k not in PROTECTED_FIELDS})
        now = _now()
        data.update(
            {
                "id": None,
                "name": name,
                "version": current.version + 1,
                "previous_version": current.id,
                "is_active": True,
                "created_at": now,
                "updated_at": now,
            }
        )
        try:
            new_version = NotificationTemplate.model_validate(data)
        except PydanticValidationError as e:
            raise _validation_error(e) from e

        created = self.store.create(new_version)
        self.store.update(current.id, {"is_active": False, "updated_at": now})
        logger.info(
            "template_version_created",
            template_name=name,
            version=created.version,
            previous_version=current.id,
        )
        return created

    def toggle_template_active(self, template_id: str) -> NotificationTemplate:
        updated = self.store.apply(
            template_id,
            lambda t: {"is_active": not t.is_active, "updated_at": _now()},
        )
        if updated is None:
            raise NotFoundError(f"Template not found: {template_id}")
        return updated

    def delete_template(self, template_id: str) -> None:
        if not self.store.delete(template_id):
            raise NotFoundError(f"Template not found: {template_id}")
        logger.info("template_deleted", template_id=template_id)

    def get_template_variables(self, name: str) -> List[TemplateVariable]:
        return self.get_template_by_name(name).variables

    def preview_template(
        self,
        name: str,
        variables: Optional[Dict[str, Any]] = None,
        channel: ChannelType = ChannelType.IN_APP,
        version: Optional[int] = None,
    ) -> Dict[str, Any]:
        """Render a template with sample values filling the gaps.

        Missing required variables use their `example_value`, else
        `[Example <name>]`. Validation reports on the supplied variables.
        """
        template = self.get_template_by_name(name, version)
        supplied = dict(variables or {})
        sample = dict(supplied)
        for var in template.variables:
            if not var.required or var.default_value is not None:
                continue
            if sample.get(var.name) is None:
                sample[var.name] = (
                    var.example_value
                    if var.example_value is not None
                    else f"[Example {var.name}]"
                )

        return {
            "content": render(template, sample, channel),
            "validation": validate_variables(template, supplied),
        }
