"""
Value formatting helpers shared by the editor, dashboard and exporter.
"""

from typing import Any

PLACEHOLDER = "N/A"

# Substrings marking a product column as a monetary amount.
PRICE_LIKE_MARKERS = ("price", "preis", "valoare", "total", "sum", "betrag", "amount", "rate")


def is_number(value: Any) -> bool:
    """True for ints and floats, excluding bools."""
    return isinstance(value, (int, float)) and not isinstance(value, bool)


def format_amount(value: Any) -> str:
    """
    Two-decimal rendering for numbers, str() for anything else.

    Examples:
        >>> format_amount(42.5)
        '42.50'
        >>> format_amount("12 EUR")
        '12 EUR'
    """
    if is_number(value):
        return f"{float(value):.2f}"
    return str(value)


def format_quantity(value: Any) -> str:
    """
    Render a quantity without a spurious trailing ".0".

    Examples:
        >>> format_quantity(2.0)
        '2'
        >>> format_quantity(1.5)
        '1.5'
    """
    if isinstance(value, float) and value.is_integer():
        return str(int(value))
    return str(value)


def is_price_like(column: str) -> bool:
    lowered = column.lower()
    return any(marker in lowered for marker in PRICE_LIKE_MARKERS)


def stringify(value: Any) -> str:
    """
    Flat string form used for searching.

    Product lists are stringified field by field: every value of every
    product, joined by spaces, so a search matches what the table shows.
    """
    if value is None:
        return ""
    if isinstance(value, list):
        parts = []
        for item in value:
            if isinstance(item, dict):
                parts.extend(stringify(v) for v in item.values())
            else:
                parts.append(stringify(item))
        return " ".join(p for p in parts if p)
    return str(value)


def format_product_value(column: str, value: Any) -> str:
    """
    Render one product column value (value must not be None).

    Numbers in price-like columns get two decimals, other numbers drop a
    trailing ".0".
    """
    if is_number(value):
        return format_amount(value) if is_price_like(column) else format_quantity(value)
    return str(value)
