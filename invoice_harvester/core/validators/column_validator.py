"""
ColumnListValidator - parses and checks template column definitions.
"""

from typing import Any, Iterable

from .base_validator import BaseValidator

QUOTE_CHARS = "\"'"


def parse_columns(columns: str | Iterable[str] | None) -> list[str]:
    """
    Normalize a column definition into an ordered, de-duplicated list.

    Accepts either raw comma-separated text ("ArtNr, 'Qty', Price") or a
    sequence of names. Each token is trimmed and stripped of embedded quote
    characters; empty tokens are discarded.

    Examples:
        >>> parse_columns(' "ArtNr" , Qty,, Price ')
        ['ArtNr', 'Qty', 'Price']
    """
    if columns is None:
        return []

    tokens = columns.split(",") if isinstance(columns, str) else list(columns)

    parsed: list[str] = []
    for token in tokens:
        cleaned = str(token)
        for quote in QUOTE_CHARS:
            cleaned = cleaned.replace(quote, "")
        cleaned = cleaned.strip()
        if cleaned and cleaned not in parsed:
            parsed.append(cleaned)
    return parsed


class ColumnListValidator(BaseValidator):
    """
    Validates that a column definition yields at least one column.
    """

    def validate(self, value: Any, record: dict[str, Any]) -> None:
        if not parse_columns(value):
            raise self.fail("at least one column must be specified")

    @property
    def rule_type(self) -> str:
        return "columns"
