"""
Core data models for invoice-harvester.

All models use Pydantic for runtime validation and type safety.
"""

from .outcome import Outcome
from .record import (
    ALL_STATUSES,
    EXPORTABLE_STATUSES,
    TERMINAL_STATUSES,
    ExtractedValue,
    Product,
    Record,
    RecordEvent,
    RecordStatus,
    UploadedFile,
    can_transition,
)
from .schema_field import ACTIONS_FIELD, RECORD_ATTRIBUTE_KEYS, Schema, SchemaField, default_schema
from .template import Template, TemplateUpdate, seed_templates

__all__ = [
    "ALL_STATUSES",
    "EXPORTABLE_STATUSES",
    "TERMINAL_STATUSES",
    "ExtractedValue",
    "Product",
    "Record",
    "RecordEvent",
    "RecordStatus",
    "UploadedFile",
    "can_transition",
    "ACTIONS_FIELD",
    "RECORD_ATTRIBUTE_KEYS",
    "Schema",
    "SchemaField",
    "default_schema",
    "Template",
    "TemplateUpdate",
    "seed_templates",
    "Outcome",
]
