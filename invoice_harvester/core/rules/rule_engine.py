"""
Rule engine for validating candidate mappings (template drafts).

The rule engine instantiates validators from rule configurations, applies
them to a candidate in order, and collects every failure.
"""

from typing import Any

from invoice_harvester.core.validators import (
    BaseValidator,
    ColumnListValidator,
    RequiredFieldValidator,
    UniqueNameValidator,
    ValidationError,
)


class RuleEngine:
    """
    Orchestrates validation rules on a candidate mapping.
    """

    VALIDATOR_REGISTRY = {
        "required_field": RequiredFieldValidator,
        "columns": ColumnListValidator,
        "unique_name": UniqueNameValidator,
    }

    def __init__(self, rules: list[dict[str, Any]]):
        """
        Initialize the rule engine.

        Args:
            rules: List of rule configurations, each containing:
                   - rule_name: str
                   - rule_type: str (required_field, columns, unique_name)
                   - field_name: str
                   - parameters: Dict[str, Any] (optional)
                   - enabled: bool (default True)
        """
        self.rules = rules
        self.validators: list[tuple[str, BaseValidator]] = []
        self._build_validators()

    def _build_validators(self) -> None:
        for rule in self.rules:
            if not rule.get("enabled", True):
                continue

            rule_name = rule["rule_name"]
            rule_type = rule["rule_type"]

            validator_class = self.VALIDATOR_REGISTRY.get(rule_type)
            if not validator_class:
                raise ValueError(f"Unknown rule type: {rule_type}")

            validator = validator_class(rule["field_name"], rule.get("parameters", {}))
            self.validators.append((rule_name, validator))

    def collect_failures(self, candidate: dict[str, Any]) -> list[ValidationError]:
        """
        Apply every rule to the candidate.

        Returns:
            ValidationErrors for the rules that failed, in rule order
        """
        failures = []
        for _, validator in self.validators:
            try:
                validator.check(candidate)
            except ValidationError as e:
                failures.append(e)
        return failures

    def check(self, candidate: dict[str, Any]) -> None:
        """
        Raise the first failure, if any.

        Raises:
            ValidationError: When any rule fails
        """
        failures = self.collect_failures(candidate)
        if failures:
            raise failures[0]
