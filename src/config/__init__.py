"""
Engine configuration models and loaders.
"""

from .settings import DEFAULT_RULES_PATH, AnalyticsConfig, CleanerConfig, Settings, load_settings

__all__ = [
    "DEFAULT_RULES_PATH",
    "AnalyticsConfig",
    "CleanerConfig",
    "Settings",
    "load_settings",
]
