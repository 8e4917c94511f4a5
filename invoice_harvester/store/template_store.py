"""
In-memory template store.

Holds upload-guidance and export templates. Default templates are locked:
they can be viewed and copied, never mutated or deleted. Editing a locked
template forks it into a new custom template.
"""

import uuid
from typing import Iterable

from invoice_harvester.core.models import Template, TemplateUpdate, seed_templates
from invoice_harvester.core.rules import RuleEngine, template_rules
from invoice_harvester.core.validators import ValidationError, parse_columns
from invoice_harvester.observability.logger import get_logger
from invoice_harvester.observability.metrics import record_template_operation

logger = get_logger(__name__)

FORK_SUFFIX = "Custom"


class TemplateNotFoundError(LookupError):
    """Raised when a template id is unknown."""

    def __init__(self, template_id: str):
        self.template_id = template_id
        super().__init__(f"Template not found: {template_id}")


class ProtectedEntityError(Exception):
    """Raised when a locked default template would be deleted."""

    def __init__(self, template: Template, operation: str):
        self.template = template
        self.operation = operation
        super().__init__(f"Default template \"{template.name}\" cannot be {operation}")


class TemplateStore:
    """
    Ordered collection of templates, partitioned by for_upload.

    Names are unique case-insensitively within a partition and column lists
    are never empty. Every failed operation leaves the store unchanged.
    """

    def __init__(self, templates: Iterable[Template] | None = None):
        """
        Args:
            templates: Initial templates (defaults to the built-in seed set)
        """
        self._templates: dict[str, Template] = {}
        for template in (seed_templates() if templates is None else templates):
            if template.id in self._templates:
                raise ValueError(f"Duplicate template id: {template.id}")
            self._templates[template.id] = template.model_copy(deep=True)

    def list(self, for_upload: bool | None = None) -> list[Template]:
        """All templates in insertion order, optionally one partition only."""
        return [
            t.model_copy(deep=True)
            for t in self._templates.values()
            if for_upload is None or t.for_upload == for_upload
        ]

    def get(self, template_id: str) -> Template | None:
        template = self._templates.get(template_id)
        return template.model_copy(deep=True) if template else None

    def find_by_name(self, name: str | None, for_upload: bool | None = None) -> Template | None:
        """Case-insensitive lookup by name."""
        if not name:
            return None
        wanted = name.strip().lower()
        for template in self._templates.values():
            if template.name.lower() == wanted and (for_upload is None or template.for_upload == for_upload):
                return template.model_copy(deep=True)
        return None

    def add(self, name: str | None, columns: str | Iterable[str] | None, for_upload: bool = False) -> Template:
        """
        Create a custom template.

        Raises:
            ValidationError: Blank name, empty columns or duplicate name
        """
        template = self._validated(name, columns, for_upload)
        self._templates[template.id] = template
        record_template_operation("add", "added")
        logger.info(
            "Template added",
            extra={"template_id": template.id, "template_name": template.name, "for_upload": for_upload},
        )
        return template.model_copy(deep=True)

    def update(
        self,
        template_id: str,
        name: str | None = None,
        columns: str | Iterable[str] | None = None,
        for_upload: bool | None = None,
    ) -> TemplateUpdate:
        """
        Edit a template.

        Arguments left as None keep their current value. A locked default is
        never mutated: different values are forked into a new custom
        template, identical values are reported as unchanged.

        Raises:
            TemplateNotFoundError: Unknown template id
            ValidationError: Blank name, empty columns or duplicate name
        """
        current = self._templates.get(template_id)
        if current is None:
            raise TemplateNotFoundError(template_id)

        new_name = current.name if name is None else name.strip()
        new_columns = list(current.columns) if columns is None else parse_columns(columns)
        new_for_upload = current.for_upload if for_upload is None else for_upload

        if current.same_values(new_name, new_columns, new_for_upload):
            record_template_operation("update", "unchanged")
            return TemplateUpdate(action="unchanged", template=current.model_copy(deep=True))

        if current.is_locked:
            if new_name.lower() == current.name.lower():
                new_name = self._fork_name(new_name, new_for_upload)
            forked = self._validated(new_name, new_columns, new_for_upload)
            self._templates[forked.id] = forked
            record_template_operation("update", "forked")
            logger.info(
                "Default template forked",
                extra={"template_id": template_id, "fork_id": forked.id, "template_name": forked.name},
            )
            return TemplateUpdate(action="forked", template=forked.model_copy(deep=True))

        updated = self._validated(new_name, new_columns, new_for_upload, exclude_id=template_id)
        updated = updated.model_copy(update={"id": template_id})
        self._templates[template_id] = updated
        record_template_operation("update", "updated")
        logger.info("Template updated", extra={"template_id": template_id, "template_name": updated.name})
        return TemplateUpdate(action="updated", template=updated.model_copy(deep=True))

    def remove(self, template_id: str) -> Template:
        """
        Delete a custom template.

        Records that used the template keep its name as plain text.

        Raises:
            TemplateNotFoundError: Unknown template id
            ProtectedEntityError: The template is a default
        """
        template = self._templates.get(template_id)
        if template is None:
            raise TemplateNotFoundError(template_id)

        if template.is_default:
            record_template_operation("remove", "rejected")
            raise ProtectedEntityError(template, "deleted")

        del self._templates[template_id]
        record_template_operation("remove", "removed")
        logger.info("Template removed", extra={"template_id": template_id, "template_name": template.name})
        return template

    def _validated(
        self,
        name: str | None,
        columns: str | Iterable[str] | None,
        for_upload: bool,
        exclude_id: str | None = None,
    ) -> Template:
        parsed_columns = parse_columns(columns)
        taken = [
            t.name for t in self._templates.values()
            if t.for_upload == for_upload and t.id != exclude_id
        ]
        engine = RuleEngine(template_rules(taken))
        try:
            engine.check({"name": name, "columns": parsed_columns})
        except ValidationError as e:
            record_template_operation("validate", "rejected")
            logger.warning("Template rejected", extra={"reason": e.message, "template_name": name})
            raise

        return Template(
            id=f"template-{uuid.uuid4().hex[:12]}",
            name=name.strip(),
            columns=parsed_columns,
            is_default=False,
            for_upload=for_upload,
        )

    def _fork_name(self, base: str, for_upload: bool) -> str:
        taken = {t.name.lower() for t in self._templates.values() if t.for_upload == for_upload}
        candidate = f"{base} ({FORK_SUFFIX})"
        counter = 2
        while candidate.lower() in taken:
            candidate = f"{base} ({FORK_SUFFIX} {counter})"
            counter += 1
        return candidate

    def __len__(self) -> int:
        return len(self._templates)

    def __contains__(self, template_id: object) -> bool:
        return template_id in self._templates
