"""
Validator implementations.

Provides validators for required fields, template column lists, unique
template names, and type-aware cell coercion.
"""

from .base_validator import BaseValidator, ValidationError
from .column_validator import ColumnListValidator, parse_columns
from .required_field_validator import RequiredFieldValidator
from .type_validator import TypeValidator
from .unique_name_validator import UniqueNameValidator

__all__ = [
    "BaseValidator",
    "ValidationError",
    "ColumnListValidator",
    "RequiredFieldValidator",
    "TypeValidator",
    "UniqueNameValidator",
    "parse_columns",
]
