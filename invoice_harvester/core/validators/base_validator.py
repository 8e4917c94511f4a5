"""
Validator interface shared by template drafts and edit buffers.

A validator owns one key of a candidate mapping ({"name": ..., "columns": ...}
for templates, a single field for cell edits) and rejects it by raising
ValidationError with a message fit for a user notification.
"""

from abc import ABC, abstractmethod
from typing import Any


class ValidationError(Exception):
    """
    User input was rejected: a template draft, an edit buffer or an export request.

    `message` is shown to the user as-is; `rule_name` and `field_name`
    identify the failing rule in logs and metrics.
    """

    def __init__(self, rule_name: str, field_name: str, message: str):
        self.rule_name = rule_name
        self.field_name = field_name
        self.message = message
        super().__init__(f"[{rule_name}] {field_name}: {message}")


class BaseValidator(ABC):
    """
    One rule applied to one key of a candidate mapping.

    Subclasses implement validate() and raise through fail(), so every
    error carries the validator's rule_type and field_name.
    """

    def __init__(self, field_name: str, parameters: dict[str, Any] | None = None):
        """
        Args:
            field_name: Candidate key this rule checks ("name", "columns", a schema field key)
            parameters: Rule parameters (taken names, expected field type)
        """
        self.field_name = field_name
        self.parameters = parameters or {}

    @abstractmethod
    def validate(self, value: Any, record: dict[str, Any]) -> None:
        """
        Args:
            value: The candidate's value for field_name
            record: The whole candidate, for rules that look at other keys

        Raises:
            ValidationError: If the value is rejected
        """

    @property
    @abstractmethod
    def rule_type(self) -> str:
        """Identifier used as ValidationError.rule_name."""

    def check(self, candidate: dict[str, Any]) -> None:
        """Validate this rule's key of a candidate mapping."""
        self.validate(candidate.get(self.field_name), candidate)

    def fail(self, message: str) -> ValidationError:
        return ValidationError(rule_name=self.rule_type, field_name=self.field_name, message=message)

    def __repr__(self) -> str:
        return f"{self.__class__.__name__}(field={self.field_name}, params={self.parameters})"
