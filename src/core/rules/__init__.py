"""
Validation rule engine and configuration management.
"""

from .rule_config import RuleConfigBuilder, RuleConfigLoader, default_product_rules
from .rule_engine import RuleEngine, default_engine, validate, validate_all

__all__ = [
    "RuleEngine",
    "RuleConfigLoader",
    "RuleConfigBuilder",
    "default_product_rules",
    "default_engine",
    "validate",
    "validate_all",
]
