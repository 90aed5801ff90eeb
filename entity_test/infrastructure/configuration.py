"""
Configuration Management for the Entity Test Module

🔧 Settings injected into every hook callback:
Replaces process-wide globals with one explicit settings object. The
debug exception flag that makes presave and predelete fail lives here,
together with the logging configuration used by the harness.
"""

from typing import Dict, Any, Optional, Union
from dataclasses import dataclass, field
from enum import Enum
from logging.handlers import RotatingFileHandler
from pathlib import Path
import json
import logging
import os

import yaml

PROVIDER = "entity_test"


class Environment(Enum):
    """Runtime environments"""
    DEVELOPMENT = "development"
    TESTING = "testing"
    PRODUCTION = "production"


@dataclass
class LoggingConfig:
    """Logging configuration"""
    level: str = "INFO"
    format: str = "%(asctime)s - %(name)s - %(levelname)s - %(message)s"
    file_path: Optional[str] = None
    max_file_size: int = 10 * 1024 * 1024  # 10MB
    backup_count: int = 5


@dataclass
class EntityTestSettings:
    """Complete module configuration"""
    environment: Environment = Environment.TESTING
    provider: str = PROVIDER

    # When set, presave and predelete hooks raise
    throw_exception: bool = False

    logging: LoggingConfig = field(default_factory=LoggingConfig)
    custom: Dict[str, Any] = field(default_factory=dict)

    @classmethod
    def for_environment(cls, environment: Environment) -> 'EntityTestSettings':
        """Create settings for a specific environment"""
        settings = cls(environment=environment)

        if environment == Environment.DEVELOPMENT:
            settings.logging.level = "DEBUG"
        elif environment == Environment.TESTING:
            settings.logging.level = "WARNING"
        elif environment == Environment.PRODUCTION:
            settings.logging.level = "INFO"

        return settings

    @classmethod
    def from_dict(cls, config_dict: Dict[str, Any]) -> 'EntityTestSettings':
        """Create settings from a dictionary"""
        environment = Environment(config_dict.get("environment", Environment.TESTING.value))
        settings = cls.for_environment(environment)

        if "provider" in config_dict:
            settings.provider = config_dict["provider"]

        if "throw_exception" in config_dict:
            settings.throw_exception = bool(config_dict["throw_exception"])

        for key, value in config_dict.get("logging", {}).items():
            if hasattr(settings.logging, key):
                setattr(settings.logging, key, value)

        settings.custom.update(config_dict.get("custom", {}))
        return settings

    @classmethod
    def from_file(cls, config_path: Union[str, Path]) -> 'EntityTestSettings':
        """Load settings from a JSON or YAML file"""
        config_path = Path(config_path)

        if not config_path.exists():
            raise FileNotFoundError(f"Configuration file not found: {config_path}")

        if config_path.suffix == '.json':
            with open(config_path) as f:
                config_dict = json.load(f)
        elif config_path.suffix in ('.yml', '.yaml'):
            with open(config_path) as f:
                config_dict = yaml.safe_load(f) or {}
        else:
            raise ValueError(f"Unsupported configuration file format: {config_path.suffix}")

        return cls.from_dict(config_dict)

    @classmethod
    def from_environment(cls) -> 'EntityTestSettings':
        """Create settings from environment variables"""
        env_name = os.getenv('ENTITY_TEST_ENV', Environment.TESTING.value)
        settings = cls.for_environment(Environment(env_name))

        if os.getenv('ENTITY_TEST_THROW_EXCEPTION'):
            settings.throw_exception = os.getenv('ENTITY_TEST_THROW_EXCEPTION').lower() == 'true'

        if os.getenv('ENTITY_TEST_LOG_LEVEL'):
            settings.logging.level = os.getenv('ENTITY_TEST_LOG_LEVEL').upper()

        if os.getenv('ENTITY_TEST_LOG_FILE'):
            settings.logging.file_path = os.getenv('ENTITY_TEST_LOG_FILE')

        return settings

    def to_dict(self) -> Dict[str, Any]:
        """Convert settings to a dictionary"""
        return {
            "environment": self.environment.value,
            "provider": self.provider,
            "throw_exception": self.throw_exception,
            "logging": {
                "level": self.logging.level,
                "format": self.logging.format,
                "file_path": self.logging.file_path,
                "max_file_size": self.logging.max_file_size,
                "backup_count": self.logging.backup_count
            },
            "custom": self.custom
        }


def configure_logging(settings: EntityTestSettings) -> logging.Logger:
    """Install a handler on the package logger according to the settings"""
    config = settings.logging
    logger = logging.getLogger("entity_test")
    logger.setLevel(config.level)

    for handler in list(logger.handlers):
        logger.removeHandler(handler)

    if config.file_path:
        Path(config.file_path).parent.mkdir(parents=True, exist_ok=True)
        handler = RotatingFileHandler(
            config.file_path,
            maxBytes=config.max_file_size,
            backupCount=config.backup_count
        )
    else:
        handler = logging.StreamHandler()

    handler.setFormatter(logging.Formatter(config.format))
    logger.addHandler(handler)
    return logger


# Global settings for callers that do not inject their own
_current_settings: Optional[EntityTestSettings] = None


def set_settings(settings: EntityTestSettings):
    """Set the global settings"""
    global _current_settings
    _current_settings = settings


def get_settings() -> EntityTestSettings:
    """Get the current global settings"""
    global _current_settings

    if _current_settings is None:
        _current_settings = EntityTestSettings.from_environment()

    return _current_settings


# Export main components
__all__ = [
    "PROVIDER", "Environment", "LoggingConfig", "EntityTestSettings",
    "configure_logging", "set_settings", "get_settings"
]
