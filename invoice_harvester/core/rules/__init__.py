"""
Rule engine and rule configuration for template validation.
"""

from .rule_config import RuleConfigBuilder, template_rules
from .rule_engine import RuleEngine

__all__ = ["RuleEngine", "RuleConfigBuilder", "template_rules"]
