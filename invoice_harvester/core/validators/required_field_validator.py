"""
RequiredFieldValidator - ensures a field is present and not blank.
"""

from typing import Any

from .base_validator import BaseValidator


class RequiredFieldValidator(BaseValidator):
    """
    Validates that a required field is present and not null/blank.

    Fails if:
    - Field is missing from the candidate
    - Field value is None
    - Field value is a string containing only whitespace
    """

    def validate(self, value: Any, record: dict[str, Any]) -> None:
        if self.field_name not in record or value is None:
            raise self.fail("a value is required")

        if isinstance(value, str) and value.strip() == "":
            raise self.fail("value cannot be blank")

    @property
    def rule_type(self) -> str:
        return "required_field"
