"""
Wire models for the extraction service.

The prompt service speaks camelCase JSON; models accept both the wire alias
and the snake_case field name. Responses are normalized on the way in:
string sentinels such as "n/a" become None, numeric strings are cleaned
("12,50 €" -> 12.5) and missing product amounts are derived from the other
line-item figures.
"""

import math
import re
from typing import Any

from pydantic import BaseModel, Field, field_validator, model_validator

from invoice_harvester.core.models import ExtractedValue

NULL_SENTINELS = frozenset({"", "null", "n/a", "none", "undefined"})

PRODUCT_TEXT_KEYS = ("item_code", "name", "unit")
PRODUCT_NUMBER_KEYS = (
    "quantity",
    "price",
    "discount_value",
    "discount_percent",
    "net_amount",
    "tax_percent",
    "tax_amount",
    "amount",
)

_NON_NUMERIC = re.compile(r"[^\d.\-]")
_LEADING_NUMBER = re.compile(r"-?\d*\.?\d+")


def clean_text(value: Any) -> str | None:
    """
    Trimmed string, or None for blanks and null sentinels.

    Examples:
        >>> clean_text("  Acme  ")
        'Acme'
        >>> clean_text("N/A") is None
        True
    """
    if value is None:
        return None
    if isinstance(value, str):
        trimmed = value.strip()
        return None if trimmed.lower() in NULL_SENTINELS else trimmed
    return str(value)


def clean_number(value: Any) -> float | None:
    """
    Parse a possibly decorated numeric string.

    The first comma is read as the decimal separator and everything that is
    not a digit, dot or minus sign is dropped. Unparseable input and NaN
    become None.

    Examples:
        >>> clean_number("12,50 EUR")
        12.5
        >>> clean_number("19%")
        19.0
        >>> clean_number("n/a") is None
        True
    """
    if value is None or isinstance(value, bool):
        return None
    if isinstance(value, (int, float)):
        return None if math.isnan(value) or math.isinf(value) else value
    if not isinstance(value, str):
        return None

    lowered = value.strip().lower()
    if lowered in NULL_SENTINELS:
        return None

    cleaned = _NON_NUMERIC.sub("", lowered.replace(",", ".", 1))
    match = _LEADING_NUMBER.match(cleaned)
    if match is None:
        return None
    number = float(match.group(0))
    return None if math.isnan(number) else number


def _scalar(value: Any) -> str | int | float | bool | None:
    if value is None or isinstance(value, (str, int, float, bool)):
        return value
    return str(value)


class ExtractionRequest(BaseModel):
    """
    Payload sent to the prompt service.

    Attributes:
        pdf_data_uri: The document as a data URI (data:application/pdf;base64,...)
        line_item_columns: Upload template columns, a hint for extra product keys
    """

    pdf_data_uri: str = Field(..., alias="pdfDataUri", min_length=1)
    line_item_columns: list[str] | None = Field(None, alias="lineItemColumns")

    class Config:
        populate_by_name = True

    def to_wire(self) -> dict[str, Any]:
        return self.model_dump(by_alias=True, exclude_none=True)


class ExtractedProduct(BaseModel):
    """
    One product line from an extraction response.

    Standard keys are typed; template-driven extra keys are kept as scalars.
    """

    item_code: str | None = None
    name: str | None = None
    unit: str | None = None
    quantity: float | None = None
    price: float | None = None
    discount_value: float | None = None
    discount_percent: float | None = None
    net_amount: float | None = None
    tax_percent: float | None = None
    tax_amount: float | None = None
    amount: float | None = None

    class Config:
        extra = "allow"

    @model_validator(mode="before")
    @classmethod
    def normalize_values(cls, data: Any) -> Any:
        if not isinstance(data, dict):
            return data
        normalized = {}
        for key, value in data.items():
            if key in PRODUCT_TEXT_KEYS:
                normalized[key] = clean_text(value)
            elif key in PRODUCT_NUMBER_KEYS:
                normalized[key] = clean_number(value)
            elif isinstance(value, str):
                normalized[key] = clean_text(value)
            else:
                normalized[key] = _scalar(value)
        return normalized

    @model_validator(mode="after")
    def derive_amounts(self) -> "ExtractedProduct":
        discount = self.discount_value or 0.0

        if self.amount is None:
            if self.net_amount is not None and self.tax_amount is not None:
                self.amount = self.net_amount + self.tax_amount
            elif self.quantity is not None and self.price is not None:
                net = self.quantity * self.price - discount
                if self.tax_percent is not None:
                    self.amount = net * (1 + self.tax_percent / 100)
                else:
                    self.amount = net

        if self.net_amount is None and self.quantity is not None and self.price is not None:
            self.net_amount = self.quantity * self.price - discount

        return self

    def to_product(self) -> dict[str, Any]:
        """Plain mapping, template extras included, absent keys dropped."""
        return self.model_dump(exclude_none=True)


class ExtractedInvoice(BaseModel):
    """
    Normalized extraction response.

    Attributes:
        date: Issue date as printed (or ISO)
        supplier: Supplier name
        products: Line items
        total_price: Grand total (gross)
        currency: Currency code
        document_language: Two-letter language code
        invoice_number: Invoice number
        subtotal: Subtotal before overall taxes and discounts
        total_discount_amount: Overall discount
        total_tax_amount: Overall tax
        payment_terms: Payment terms text
        due_date: Payment due date
    """

    date: str | None = None
    supplier: str | None = None
    products: list[ExtractedProduct] | None = None
    total_price: float | None = Field(None, alias="totalPrice")
    currency: str | None = None
    document_language: str | None = Field(None, alias="documentLanguage")
    invoice_number: str | None = Field(None, alias="invoiceNumber")
    subtotal: float | None = None
    total_discount_amount: float | None = Field(None, alias="totalDiscountAmount")
    total_tax_amount: float | None = Field(None, alias="totalTaxAmount")
    payment_terms: str | None = Field(None, alias="paymentTerms")
    due_date: str | None = Field(None, alias="dueDate")

    class Config:
        populate_by_name = True
        json_schema_extra = {
            "example": {
                "date": "2024-03-01",
                "supplier": "Acme Ltd",
                "totalPrice": "42,50",
                "currency": "EUR",
                "products": [{"name": "Widget", "quantity": 2, "price": 10}],
            }
        }

    @field_validator(
        "date", "supplier", "currency", "document_language", "invoice_number", "payment_terms", "due_date",
        mode="before",
    )
    @classmethod
    def normalize_text(cls, v: Any) -> str | None:
        return clean_text(v)

    @field_validator("total_price", "subtotal", "total_discount_amount", "total_tax_amount", mode="before")
    @classmethod
    def normalize_number(cls, v: Any) -> float | None:
        return clean_number(v)

    @field_validator("products", mode="before")
    @classmethod
    def normalize_products(cls, v: Any) -> Any:
        if v is None:
            return None
        if not isinstance(v, list):
            raise ValueError("products must be a list")
        return [item for item in v if isinstance(item, (dict, ExtractedProduct))]

    def is_empty(self) -> bool:
        """True when nothing at all was extracted."""
        if self.products:
            return False
        return all(value is None for value in self.model_dump(exclude={"products"}).values())

    def to_extracted_values(self) -> dict[str, ExtractedValue]:
        """Schema-keyed values for the tracker; products default to an empty list."""
        values: dict[str, ExtractedValue] = {
            "date": self.date,
            "supplier": self.supplier,
            "products": [p.to_product() for p in self.products or []],
            "total_price": self.total_price,
            "currency": self.currency,
            "document_language": self.document_language,
            "invoice_number": self.invoice_number,
            "subtotal": self.subtotal,
            "total_discount_amount": self.total_discount_amount,
            "total_tax_amount": self.total_tax_amount,
            "payment_terms": self.payment_terms,
            "due_date": self.due_date,
        }
        return values
