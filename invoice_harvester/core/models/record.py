"""
Record model representing one uploaded invoice and its extracted data.
"""

from datetime import datetime
from typing import Any, Literal, Union

from pydantic import BaseModel, Field

RecordStatus = Literal["pending", "uploading", "processing", "processed", "needs_validation", "error"]

ALL_STATUSES: tuple[str, ...] = ("pending", "uploading", "processing", "processed", "needs_validation", "error")
TERMINAL_STATUSES: frozenset[str] = frozenset({"processed", "needs_validation", "error"})
EXPORTABLE_STATUSES: frozenset[str] = frozenset({"processed", "needs_validation"})

# Position in the lifecycle graph; a transition must move to a higher rank.
STATUS_RANK: dict[str, int] = {
    "pending": 0,
    "uploading": 1,
    "processing": 2,
    "processed": 3,
    "needs_validation": 3,
    "error": 3,
}

ProductValue = Union[str, int, float, bool, None]
Product = dict[str, ProductValue]
ExtractedValue = Union[str, int, float, None, list[Product]]


def can_transition(current: str, target: str) -> bool:
    """Return True when moving from current to target advances the lifecycle."""
    if current in TERMINAL_STATUSES or target not in STATUS_RANK:
        return False
    return STATUS_RANK[target] > STATUS_RANK[current]


class UploadedFile(BaseModel):
    """
    Descriptor of a file the user selected for upload.

    Attributes:
        file_name: Original file name
        content: Raw bytes (None when the caller streams the file elsewhere)
        content_type: MIME type, used to build the data URI sent for extraction
        source_url: Location the document can be previewed from
    """

    file_name: str = Field(..., min_length=1)
    content: bytes | None = None
    content_type: str = "application/pdf"
    source_url: str | None = None


class Record(BaseModel):
    """
    One tracked uploaded document.

    Attributes:
        id: Unique identifier, immutable once assigned
        file_name: Name of the uploaded file
        status: Lifecycle status
        extracted_values: Field key -> value, keys follow the active schema
        source_url: Preview location of the original PDF
        error_message: Reason attached to error / needs_validation records
        active_template_name: Name of the upload template used for extraction
        created_at: When the record was enqueued
    """

    id: str = Field(..., min_length=1, frozen=True)
    file_name: str
    status: RecordStatus = "pending"
    extracted_values: dict[str, ExtractedValue] = Field(default_factory=dict)
    source_url: str | None = None
    error_message: str | None = None
    active_template_name: str | None = None
    created_at: datetime = Field(default_factory=datetime.utcnow)

    def value_for(self, key: str) -> Any:
        """Resolve a schema key against record attributes, then extracted values."""
        if key in ("file_name", "status", "active_template_name"):
            return getattr(self, key)
        return self.extracted_values.get(key)

    class Config:
        json_schema_extra = {
            "example": {
                "id": "invoice1-3f2a9c1b7d4e",
                "file_name": "invoice1.pdf",
                "status": "processed",
                "extracted_values": {
                    "supplier": "Acme Ltd",
                    "total_price": 42.5,
                    "products": [{"name": "Widget", "quantity": 2, "price": 10}]
                },
                "active_template_name": "AI Standard Extraction (Upload)"
            }
        }


class RecordEvent(BaseModel):
    """
    Notification published by the tracker for every state change.

    Attributes:
        kind: "enqueued", "advanced", "updated" or "removed"
        record_id: Affected record
        status: Status after the change
        previous_status: Status before the change (advanced only)
        record: Snapshot of the record after the change (None for removals)
    """

    kind: Literal["enqueued", "advanced", "updated", "removed"]
    record_id: str
    status: RecordStatus
    previous_status: RecordStatus | None = None
    record: Record | None = None
