"""
Schema configuration: YAML loading and programmatic building.
"""

from .loader import HarvesterConfig, HarvesterConfigLoader, SchemaBuilder

__all__ = ["HarvesterConfig", "HarvesterConfigLoader", "SchemaBuilder"]
