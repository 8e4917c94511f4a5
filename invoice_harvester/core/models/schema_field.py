"""
Schema model: the ordered field definitions that drive table columns and
CSV headers.
"""

from typing import Literal

from pydantic import BaseModel, Field, field_validator

FieldType = Literal["text", "number", "date", "product-list", "status", "actions"]

# Keys that resolve to Record attributes rather than extracted values.
RECORD_ATTRIBUTE_KEYS: frozenset[str] = frozenset({"file_name", "status", "active_template_name"})


class SchemaField(BaseModel):
    """
    A single displayable / editable column.

    Attributes:
        key: Field key (record attribute or extracted-values key)
        label: Human-readable column header
        type: Value type controlling parsing and rendering
        editable: Whether the cell can enter edit mode
        tooltip: Optional help text
    """

    key: str = Field(..., min_length=1)
    label: str = Field(..., min_length=1)
    type: FieldType = "text"
    editable: bool = False
    tooltip: str | None = None


ACTIONS_FIELD = SchemaField(key="actions", label="Actions", type="actions", editable=False)


class Schema(BaseModel):
    """
    Ordered sequence of fields.

    A schema never contains an `actions` field (those are synthesized at
    render time) and holds at most one `status` field.
    """

    fields: list[SchemaField] = Field(default_factory=list)

    @field_validator("fields")
    @classmethod
    def check_field_invariants(cls, v: list[SchemaField]) -> list[SchemaField]:
        keys = [f.key for f in v]
        duplicates = sorted({k for k in keys if keys.count(k) > 1})
        if duplicates:
            raise ValueError(f"duplicate field keys: {', '.join(duplicates)}")
        if sum(1 for f in v if f.type == "status") > 1:
            raise ValueError("a schema may hold at most one status field")
        if any(f.type == "actions" for f in v):
            raise ValueError("actions fields are synthesized and cannot be part of a schema")
        return v

    def get(self, key: str) -> SchemaField | None:
        for field in self.fields:
            if field.key == key:
                return field
        return None

    def keys(self) -> list[str]:
        return [f.key for f in self.fields]

    def select(self, keys: list[str] | None) -> list[SchemaField]:
        """Fields whose key is in keys, in schema order (all fields when keys is None)."""
        if keys is None:
            return list(self.fields)
        wanted = set(keys)
        return [f for f in self.fields if f.key in wanted]


def default_schema() -> Schema:
    """The built-in invoice schema."""
    return Schema(fields=[
        SchemaField(key="file_name", label="File", type="text"),
        SchemaField(key="status", label="Status", type="status"),
        SchemaField(
            key="active_template_name", label="Upload Template", type="text",
            tooltip="Template used when the document was uploaded and extracted.",
        ),
        SchemaField(key="invoice_number", label="Invoice No.", type="text", editable=True),
        SchemaField(key="date", label="Invoice Date", type="date", editable=True),
        SchemaField(key="due_date", label="Due Date", type="date", editable=True),
        SchemaField(key="supplier", label="Supplier", type="text", editable=True),
        SchemaField(
            key="subtotal", label="Subtotal", type="number", editable=True,
            tooltip="Invoice subtotal before overall taxes and discounts.",
        ),
        SchemaField(
            key="total_discount_amount", label="Discount", type="number", editable=True,
            tooltip="Discount applied to the whole invoice.",
        ),
        SchemaField(
            key="total_tax_amount", label="Tax (VAT)", type="number", editable=True,
            tooltip="Total tax amount for the whole invoice.",
        ),
        SchemaField(
            key="total_price", label="Total", type="number", editable=True,
            tooltip="Final amount due.",
        ),
        SchemaField(key="currency", label="Currency", type="text", editable=True),
        SchemaField(key="document_language", label="Language", type="text", editable=True),
        SchemaField(key="payment_terms", label="Payment Terms", type="text", editable=True),
        SchemaField(
            key="products", label="Products", type="product-list", editable=True,
            tooltip="Product / service line items.",
        ),
    ])
