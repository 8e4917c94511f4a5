"""
Unit tests for the rule engine and rule configuration builder.
"""

import pytest

from invoice_harvester.core.rules import RuleConfigBuilder, RuleEngine, template_rules
from invoice_harvester.core.validators import ValidationError


@pytest.mark.unit
class TestRuleEngine:
    """Tests for RuleEngine"""

    @pytest.mark.parametrize("rule_type", ["regex", "type_check"])
    def test_unknown_rule_type(self, rule_type):
        """Test template rules are limited to required_field, columns and unique_name"""
        rules = [{"rule_name": "x", "rule_type": rule_type, "field_name": "name"}]

        with pytest.raises(ValueError) as exc_info:
            RuleEngine(rules)

        assert "Unknown rule type" in str(exc_info.value)

    def test_disabled_rules_are_skipped(self):
        rules = RuleConfigBuilder().add_required_field("name").build()
        rules[0]["enabled"] = False

        engine = RuleEngine(rules)

        assert engine.collect_failures({}) == []

    def test_collect_failures_in_rule_order(self):
        engine = RuleEngine(template_rules())

        failures = engine.collect_failures({"name": " ", "columns": []})

        assert [f.rule_name for f in failures] == ["required_field", "columns"]

    def test_check_raises_first_failure(self):
        engine = RuleEngine(template_rules(["Shop ABC"]))

        with pytest.raises(ValidationError) as exc_info:
            engine.check({"name": "SHOP abc", "columns": ["name"]})

        assert exc_info.value.rule_name == "unique_name"

    def test_check_passes_valid_candidate(self):
        engine = RuleEngine(template_rules(["Shop ABC"]))
        engine.check({"name": "Shop XYZ", "columns": ["name", "qty"]})  # Should not raise
