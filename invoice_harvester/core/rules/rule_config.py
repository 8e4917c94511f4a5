"""
Programmatic rule configuration.

Builds the rule dictionaries consumed by RuleEngine.
"""

from typing import Any, Iterable


class RuleConfigBuilder:
    """
    Fluent builder for rule configurations.

    Usage:
        rules = RuleConfigBuilder() \\
            .add_required_field("name") \\
            .add_columns("columns") \\
            .build()
    """

    def __init__(self):
        self.rules: list[dict[str, Any]] = []

    def _add(self, field_name: str, rule_type: str, parameters: dict[str, Any] | None = None) -> "RuleConfigBuilder":
        self.rules.append({
            "rule_name": f"{field_name}_{rule_type}",
            "rule_type": rule_type,
            "field_name": field_name,
            "parameters": parameters or {},
            "enabled": True,
        })
        return self

    def add_required_field(self, field_name: str) -> "RuleConfigBuilder":
        return self._add(field_name, "required_field")

    def add_columns(self, field_name: str) -> "RuleConfigBuilder":
        return self._add(field_name, "columns")

    def add_unique_name(self, field_name: str, taken: Iterable[str]) -> "RuleConfigBuilder":
        return self._add(field_name, "unique_name", {"taken": list(taken)})

    def build(self) -> list[dict[str, Any]]:
        return self.rules


def template_rules(taken_names: Iterable[str] = ()) -> list[dict[str, Any]]:
    """Rules every template draft must satisfy."""
    return RuleConfigBuilder() \
        .add_required_field("name") \
        .add_columns("columns") \
        .add_unique_name("name", taken_names) \
        .build()
