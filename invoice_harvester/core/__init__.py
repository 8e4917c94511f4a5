"""
Core models, validators, rules and schema configuration.
"""
