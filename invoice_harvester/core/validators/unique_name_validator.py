"""
UniqueNameValidator - enforces case-insensitive name uniqueness.
"""

from typing import Any

from .base_validator import BaseValidator


class UniqueNameValidator(BaseValidator):
    """
    Validates that a name is not already taken.

    Parameters:
    - taken: iterable of existing names (compared case-insensitively after
      trimming)
    """

    def __init__(self, field_name: str, parameters: dict[str, Any] | None = None):
        super().__init__(field_name, parameters)
        self.taken = {str(name).strip().lower() for name in self.parameters.get("taken", ())}

    def validate(self, value: Any, record: dict[str, Any]) -> None:
        if value is None:
            return

        if str(value).strip().lower() in self.taken:
            raise self.fail(f"a template named \"{str(value).strip()}\" already exists")

    @property
    def rule_type(self) -> str:
        return "unique_name"
