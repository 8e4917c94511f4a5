"""
Tabular editor over tracked records.

Renders records against an ordered schema and lets exactly one cell at a
time, identified by (record_id, field_key), hold an edit buffer. Committing
parses the buffer by field type; input that does not parse reverts silently
so the table always stays renderable.
"""

import json
from typing import Any, Callable, Literal

from pydantic import BaseModel, Field

from invoice_harvester.core.models import (
    ACTIONS_FIELD,
    RECORD_ATTRIBUTE_KEYS,
    Record,
    RecordStatus,
    Schema,
    SchemaField,
    Template,
)
from invoice_harvester.core.validators import TypeValidator, ValidationError
from invoice_harvester.observability.logger import get_logger
from invoice_harvester.observability.metrics import record_cell_edit
from invoice_harvester.store.record_tracker import RecordTracker
from invoice_harvester.utils.formatting import (
    PLACEHOLDER,
    format_amount,
    format_product_value,
    format_quantity,
    is_number,
)

logger = get_logger(__name__)

STATUS_LABELS: dict[str, str] = {
    "pending": "Pending",
    "uploading": "Uploading",
    "processing": "Processing",
    "processed": "Processed",
    "needs_validation": "Needs validation",
    "error": "Error",
}

TemplateLookup = Callable[[str], Template | None]


class ParseRevert(Exception):
    """Edit buffer could not be parsed; the cell keeps its pre-edit value."""

    def __init__(self, field_key: str, reason: str):
        self.field_key = field_key
        self.reason = reason
        super().__init__(f"{field_key}: {reason}")


class EditTarget(BaseModel):
    record_id: str
    field_key: str


class EditResult(BaseModel):
    """
    Outcome of closing an edit.

    Attributes:
        action: "committed", "reverted", "cancelled" or "ignored" (no open edit
                or the record disappeared)
        record_id: Edited record
        field_key: Edited field
        value: Value held by the cell afterwards
    """

    action: Literal["committed", "reverted", "cancelled", "ignored"]
    record_id: str | None = None
    field_key: str | None = None
    value: Any = None


class RenderedCell(BaseModel):
    """
    Display state of one cell.

    Attributes:
        key: Field key
        text: Display text (the edit buffer while editing)
        editable: Whether clicking the cell starts an edit
        editing: Whether this cell holds the open edit buffer
        status: Lifecycle status (status cells only)
        message: Error message attached to an error status
        lines: One entry per product (product-list cells only)
        actions: Available row actions (actions cells only)
        link: Preview URL for the preview action
    """

    key: str
    text: str = ""
    editable: bool = False
    editing: bool = False
    status: RecordStatus | None = None
    message: str | None = None
    lines: list[str] = Field(default_factory=list)
    actions: list[str] = Field(default_factory=list)
    link: str | None = None


class RenderedRow(BaseModel):
    record_id: str
    cells: list[RenderedCell]


class TabularEditor:
    """
    Single-cell inline editor for tracked records.

    Starting a new edit while another cell is open commits the open one
    first (loss of focus), it is never discarded.
    """

    def __init__(
        self,
        tracker: RecordTracker,
        schema: Schema,
        template_lookup: TemplateLookup | None = None,
        on_delete: Callable[[str], Any] | None = None,
    ):
        """
        Args:
            tracker: Record lifecycle tracker receiving committed edits
            schema: Ordered field definitions
            template_lookup: Resolves a record's upload template name for
                             template-driven product rendering
            on_delete: Deletion collaborator; enables the actions column
        """
        self.tracker = tracker
        self.schema = schema
        self.template_lookup = template_lookup
        self.on_delete = on_delete

        self._editing: EditTarget | None = None
        self._field: SchemaField | None = None
        self._buffer: str = ""

    # ------------------------------------------------------------------
    # Columns
    # ------------------------------------------------------------------

    def columns(self) -> list[SchemaField]:
        """Schema fields plus the synthesized actions column when deletion is wired."""
        fields = list(self.schema.fields)
        if self.on_delete is not None:
            fields.append(ACTIONS_FIELD)
        return fields

    # ------------------------------------------------------------------
    # Edit lifecycle
    # ------------------------------------------------------------------

    @property
    def editing(self) -> EditTarget | None:
        return self._editing

    @property
    def buffer(self) -> str:
        return self._buffer

    def set_buffer(self, text: str) -> None:
        if self._editing is not None:
            self._buffer = text

    def begin_edit(self, record_id: str, field_key: str) -> bool:
        """
        Open the edit buffer on a cell.

        Returns:
            False (and changes nothing) for unknown records, unknown or
            non-editable fields
        """
        field = self.schema.get(field_key)
        if field is None or not field.editable or field.type in ("status", "actions"):
            return False
        if field_key in RECORD_ATTRIBUTE_KEYS:
            return False

        record = self.tracker.get(record_id)
        if record is None:
            return False

        target = EditTarget(record_id=record_id, field_key=field_key)
        if self._editing == target:
            return True
        if self._editing is not None:
            self.commit_edit()

        self._editing = target
        self._field = field
        self._buffer = self._seed_buffer(field, record.value_for(field_key))
        return True

    def commit_edit(self) -> EditResult:
        """
        Parse the buffer and apply it as a single-key patch.

        Never raises: unparseable input leaves the record untouched.
        """
        if self._editing is None:
            return EditResult(action="ignored")

        target, field, buffer = self._editing, self._field, self._buffer
        self._clear()

        record = self.tracker.get(target.record_id)
        if record is None:
            return EditResult(action="ignored", record_id=target.record_id, field_key=target.field_key)

        try:
            value = self._parse(field, buffer)
        except ParseRevert as e:
            record_cell_edit(field.type, "reverted")
            logger.info(
                "Cell edit reverted",
                extra={"record_id": target.record_id, "field_key": target.field_key, "reason": e.reason},
            )
            return EditResult(
                action="reverted",
                record_id=target.record_id,
                field_key=target.field_key,
                value=record.value_for(target.field_key),
            )

        self.tracker.update(target.record_id, {target.field_key: value})
        record_cell_edit(field.type, "committed")
        return EditResult(action="committed", record_id=target.record_id, field_key=target.field_key, value=value)

    def cancel_edit(self) -> EditResult:
        if self._editing is None:
            return EditResult(action="ignored")

        target, field = self._editing, self._field
        self._clear()
        record_cell_edit(field.type, "cancelled")
        return EditResult(action="cancelled", record_id=target.record_id, field_key=target.field_key)

    def blur(self) -> EditResult:
        """Loss of focus commits."""
        return self.commit_edit()

    def handle_key(self, key: str, shift: bool = False) -> EditResult | None:
        """
        Keyboard handling for the open cell.

        Enter commits (Shift+Enter, and Enter inside product lists, insert a
        newline instead); Escape cancels.
        """
        if self._editing is None:
            return None
        if key == "Escape":
            return self.cancel_edit()
        if key == "Enter" and not shift and self._field.type != "product-list":
            return self.commit_edit()
        return None

    def delete(self, record_id: str) -> bool:
        """Invoke the deletion collaborator, closing any edit on that record."""
        if self.on_delete is None:
            return False
        if self._editing is not None and self._editing.record_id == record_id:
            self.cancel_edit()
        self.on_delete(record_id)
        return True

    def _clear(self) -> None:
        self._editing = None
        self._field = None
        self._buffer = ""

    @staticmethod
    def _seed_buffer(field: SchemaField, value: Any) -> str:
        if value is None:
            return ""
        if field.type == "product-list" and isinstance(value, list):
            return json.dumps(value, indent=2, ensure_ascii=False)
        return str(value)

    @staticmethod
    def _parse(field: SchemaField, buffer: str) -> Any:
        if field.type not in ("number", "product-list"):
            return buffer

        try:
            return TypeValidator(field.key, {"expected_type": field.type}).coerce(buffer)
        except ValidationError as e:
            raise ParseRevert(field.key, e.message)

    # ------------------------------------------------------------------
    # Rendering
    # ------------------------------------------------------------------

    def render_rows(self, records: list[Record]) -> list[RenderedRow]:
        columns = self.columns()
        return [
            RenderedRow(record_id=record.id, cells=[self.render_cell(record, field) for field in columns])
            for record in records
        ]

    def render_cell(self, record: Record, field: SchemaField) -> RenderedCell:
        is_editing = self._editing is not None and self._editing == EditTarget(
            record_id=record.id, field_key=field.key,
        )
        if is_editing:
            return RenderedCell(key=field.key, text=self._buffer, editable=True, editing=True)

        if field.type == "actions":
            actions = ["delete"]
            if record.source_url:
                actions.append("preview")
            return RenderedCell(key=field.key, actions=actions, link=record.source_url)

        if field.type == "status":
            return RenderedCell(
                key=field.key,
                text=STATUS_LABELS.get(record.status, record.status),
                status=record.status,
                message=record.error_message if record.status == "error" else None,
            )

        value = record.value_for(field.key)
        editable = field.editable and field.key not in RECORD_ATTRIBUTE_KEYS

        if value is None:
            return RenderedCell(key=field.key, text=PLACEHOLDER, editable=editable)

        if field.type == "product-list" and isinstance(value, list):
            lines = [self._render_product(record, product) for product in value]
            return RenderedCell(key=field.key, text="\n".join(lines), lines=lines, editable=editable)

        if field.type == "number" and is_number(value):
            return RenderedCell(key=field.key, text=format_amount(value), editable=editable)

        return RenderedCell(key=field.key, text=str(value), editable=editable)

    def _render_product(self, record: Record, product: Any) -> str:
        if not isinstance(product, dict):
            return str(product)

        template = None
        if self.template_lookup is not None and record.active_template_name:
            template = self.template_lookup(record.active_template_name)

        if template is not None and template.columns:
            parts = []
            for column in template.columns:
                value = product.get(column)
                parts.append(f"{column}: {PLACEHOLDER if value is None else format_product_value(column, value)}")
            return " | ".join(parts)

        name = product.get("name")
        quantity = product.get("quantity")
        price = product.get("price")
        return "{} ({} × {})".format(
            PLACEHOLDER if name is None else name,
            PLACEHOLDER if quantity is None else format_quantity(quantity),
            PLACEHOLDER if price is None else format_amount(price),
        )
