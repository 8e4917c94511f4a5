"""
Template model: a named column set for product line items.

Upload templates (for_upload=True) guide extraction; export templates shape
line-item CSV output.
"""

from typing import Literal

from pydantic import BaseModel, Field


class Template(BaseModel):
    """
    A named, user-manageable column set.

    Attributes:
        id: Unique identifier
        name: Display name, unique case-insensitively within its partition
        columns: Ordered product sub-field names (never empty)
        is_default: Built-in template; locked against edits and deletion
        for_upload: Upload-guidance template (True) or export template (False)
    """

    id: str = Field(..., min_length=1)
    name: str = Field(..., min_length=1)
    columns: list[str] = Field(..., min_length=1)
    is_default: bool = False
    for_upload: bool = False

    @property
    def is_locked(self) -> bool:
        return self.is_default

    def same_values(self, name: str, columns: list[str], for_upload: bool) -> bool:
        return self.name == name and self.columns == columns and self.for_upload == for_upload

    class Config:
        json_schema_extra = {
            "example": {
                "id": "template-6f1c2d9a",
                "name": "Shop ABC Articles",
                "columns": ["ArtNr", "Description", "Qty", "Unit Price"],
                "is_default": False,
                "for_upload": True
            }
        }


class TemplateUpdate(BaseModel):
    """
    Result of TemplateStore.update.

    Attributes:
        action: "updated" (mutated in place), "forked" (a locked default was
                copied into a new custom template) or "unchanged"
        template: The template holding the resulting values
    """

    action: Literal["updated", "forked", "unchanged"]
    template: Template


def seed_templates() -> list[Template]:
    """Templates available before the user creates any."""
    comprehensive = [
        "item_code", "name", "description", "quantity", "unit", "price",
        "discount_value", "discount_percent", "net_amount", "tax_percent", "tax_amount", "amount",
    ]
    return [
        Template(
            id="ai-standard-upload-template",
            name="AI Standard Extraction (Upload)",
            columns=["item_code", "name", "quantity", "price", "amount"],
            is_default=True,
            for_upload=True,
        ),
        Template(
            id="erpnext-article-default",
            name="ERPNext Article Default (Export)",
            columns=["item_code", "item_name", "qty", "uom", "rate", "amount", "item_group", "stock_uom"],
            is_default=True,
            for_upload=False,
        ),
        Template(
            id="comprehensive-invoice-upload-template",
            name="Comprehensive Details (Upload)",
            columns=list(comprehensive),
            for_upload=True,
        ),
        Template(
            id="comprehensive-invoice-export-template",
            name="Comprehensive Details (Export)",
            columns=list(comprehensive),
            for_upload=False,
        ),
        Template(
            id="erpnext-export-fixed-v1",
            name="ERPNext Export (Fixed: Artikel-Code, Name, Gruppe, ME)",
            columns=["Artikel-Code", "Artikelname", "Artikelgruppe", "Standardmaßeinheit"],
            for_upload=False,
        ),
    ]
