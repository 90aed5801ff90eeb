"""
Infrastructure - configuration and logging setup.
"""

from .configuration import (
    PROVIDER, Environment, LoggingConfig, EntityTestSettings,
    configure_logging, set_settings, get_settings
)

__all__ = [
    "PROVIDER", "Environment", "LoggingConfig", "EntityTestSettings",
    "configure_logging", "set_settings", "get_settings"
]
