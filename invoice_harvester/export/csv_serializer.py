"""
CSV serialization of the current record set.

Two layouts:
    summary     one row per record, product lists collapsed into one cell
    line_items  one row per product line, parent fields repeated

Only processed and needs_validation records are exported. Every cell is
quoted and embedded quotes are doubled.
"""

import csv
import io
from typing import Any, Callable, Iterable

from invoice_harvester.core.models import (
    EXPORTABLE_STATUSES,
    Record,
    Schema,
    SchemaField,
    Template,
)
from invoice_harvester.core.validators import ValidationError
from invoice_harvester.observability.logger import get_logger
from invoice_harvester.observability.metrics import exported_rows_total, increment_counter
from invoice_harvester.utils.formatting import (
    PLACEHOLDER,
    format_amount,
    format_product_value,
    format_quantity,
    is_number,
)

logger = get_logger(__name__)

TemplateLookup = Callable[[str], Template | None]

PRODUCT_SEPARATOR = "; "
COLUMN_SEPARATOR = " | "


def _writer(buffer: io.StringIO):
    return csv.writer(buffer, quoting=csv.QUOTE_ALL, doublequote=True, lineterminator="\n")


def _exportable(records: Iterable[Record]) -> list[Record]:
    return [r for r in records if r.status in EXPORTABLE_STATUSES]


def _export_fields(schema: Schema, selected_keys: Iterable[str] | None) -> list[SchemaField]:
    return [f for f in schema.select(selected_keys) if f.type != "actions"]


def _cell(value: Any) -> str:
    """Absent values export as an empty cell."""
    if value is None:
        return ""
    if is_number(value):
        return format_quantity(value)
    return str(value)


def _product_column(column: str, value: Any) -> str:
    return "" if value is None else format_product_value(column, value)


def _describe_product(product: Any, template: Template | None) -> str:
    if not isinstance(product, dict):
        return _cell(product)

    if template is not None and template.columns:
        return COLUMN_SEPARATOR.join(_product_column(c, product.get(c)) for c in template.columns)

    name = product.get("name")
    quantity = product.get("quantity")
    price = product.get("price")
    return "{} ({}x{})".format(
        PLACEHOLDER if name is None else name,
        PLACEHOLDER if quantity is None else format_quantity(quantity),
        PLACEHOLDER if price is None else format_amount(price),
    )


def _field_value(
    record: Record,
    field: SchemaField,
    template_lookup: TemplateLookup | None,
) -> str:
    value = record.value_for(field.key)
    if value is None:
        return ""

    if field.type == "product-list" and isinstance(value, list):
        template = None
        if template_lookup is not None and record.active_template_name:
            template = template_lookup(record.active_template_name)
        return PRODUCT_SEPARATOR.join(_describe_product(p, template) for p in value)

    if field.type == "number" and is_number(value):
        return format_amount(value)

    return _cell(value)


def to_delimited_text(
    records: Iterable[Record],
    schema: Schema,
    selected_keys: Iterable[str] | None = None,
    template_lookup: TemplateLookup | None = None,
) -> str:
    """
    Serialize records as one CSV row each.

    Args:
        records: Current record snapshot (non-exportable statuses are skipped)
        schema: Ordered schema whose labels form the header
        selected_keys: Restrict the export to these field keys (schema order is kept)
        template_lookup: Resolves a record's upload template name; products
                         of records with a known template export their
                         template columns instead of name/quantity/price

    Returns:
        CSV text, header first
    """
    fields = _export_fields(schema, selected_keys)
    rows = _exportable(records)

    buffer = io.StringIO()
    writer = _writer(buffer)
    writer.writerow([f.label for f in fields])
    for record in rows:
        writer.writerow([_field_value(record, f, template_lookup) for f in fields])

    increment_counter(exported_rows_total, len(rows), mode="summary")
    logger.info("CSV export generated", extra={"mode": "summary", "rows": len(rows), "columns": len(fields)})
    return buffer.getvalue()


def to_line_items_text(
    records: Iterable[Record],
    schema: Schema,
    export_template: Template | None,
    selected_keys: Iterable[str] | None = None,
) -> str:
    """
    Serialize records as one CSV row per product line.

    Parent columns are the selected schema fields minus the product list,
    followed by the export template's columns. A record without products
    still yields one row (empty product cells) when parent columns exist.

    Raises:
        ValidationError: If no export template with columns is given
    """
    if export_template is None or not export_template.columns:
        raise ValidationError(
            rule_name="export_template",
            field_name="export_template",
            message="A product export template is required for line-item export",
        )

    parent_fields = [f for f in _export_fields(schema, selected_keys) if f.type != "product-list"]
    product_columns = list(export_template.columns)

    buffer = io.StringIO()
    writer = _writer(buffer)
    writer.writerow([f.label for f in parent_fields] + product_columns)

    written = 0
    for record in _exportable(records):
        parent = [_field_value(record, f, None) for f in parent_fields]
        products = record.extracted_values.get("products")
        if isinstance(products, list) and products:
            for product in products:
                item = product if isinstance(product, dict) else {}
                writer.writerow(parent + [_product_column(c, item.get(c)) for c in product_columns])
                written += 1
        elif parent_fields:
            writer.writerow(parent + [""] * len(product_columns))
            written += 1

    increment_counter(exported_rows_total, written, mode="line_items")
    logger.info(
        "CSV export generated",
        extra={"mode": "line_items", "rows": written, "template_name": export_template.name},
    )
    return buffer.getvalue()
