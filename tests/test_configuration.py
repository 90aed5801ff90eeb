"""
Settings loading, logging setup and kernel configuration.
"""

import json
import logging
from logging.handlers import RotatingFileHandler

import pytest
import yaml

from entity_test.access.account import Account
from entity_test.exceptions import EntityStorageError
from entity_test.infrastructure.configuration import (
    Environment, EntityTestSettings, configure_logging, get_settings, set_settings
)
from entity_test.infrastructure.configurator import EntityTestConfigurator, configure_entity_test


class TestSettings:
    def test_environment_log_levels(self):
        assert EntityTestSettings.for_environment(Environment.DEVELOPMENT).logging.level == "DEBUG"
        assert EntityTestSettings.for_environment(Environment.TESTING).logging.level == "WARNING"
        assert EntityTestSettings.for_environment(Environment.PRODUCTION).logging.level == "INFO"

    def test_from_dict(self):
        settings = EntityTestSettings.from_dict({
            "environment": "production",
            "throw_exception": True,
            "logging": {"level": "ERROR", "unknown": 1},
            "custom": {"extra": "value"},
        })
        assert settings.environment is Environment.PRODUCTION
        assert settings.throw_exception is True
        assert settings.logging.level == "ERROR"
        assert not hasattr(settings.logging, "unknown")
        assert settings.custom == {"extra": "value"}

    def test_from_yaml_file(self, tmp_path):
        path = tmp_path / "entity_test.yaml"
        path.write_text(yaml.safe_dump({"environment": "development", "throw_exception": True}))
        settings = EntityTestSettings.from_file(path)
        assert settings.environment is Environment.DEVELOPMENT
        assert settings.throw_exception

    def test_from_json_file(self, tmp_path):
        path = tmp_path / "entity_test.json"
        path.write_text(json.dumps({"provider": "other_module"}))
        assert EntityTestSettings.from_file(path).provider == "other_module"

    def test_from_file_errors(self, tmp_path):
        with pytest.raises(FileNotFoundError):
            EntityTestSettings.from_file(tmp_path / "missing.yaml")
        path = tmp_path / "settings.ini"
        path.write_text("")
        with pytest.raises(ValueError):
            EntityTestSettings.from_file(path)

    def test_from_environment(self, monkeypatch, tmp_path):
        monkeypatch.setenv("ENTITY_TEST_ENV", "development")
        monkeypatch.setenv("ENTITY_TEST_THROW_EXCEPTION", "TRUE")
        monkeypatch.setenv("ENTITY_TEST_LOG_LEVEL", "error")
        monkeypatch.setenv("ENTITY_TEST_LOG_FILE", str(tmp_path / "log.txt"))
        settings = EntityTestSettings.from_environment()
        assert settings.environment is Environment.DEVELOPMENT
        assert settings.throw_exception
        assert settings.logging.level == "ERROR"
        assert settings.logging.file_path.endswith("log.txt")

    def test_to_dict_round_trip(self):
        settings = EntityTestSettings.for_environment(Environment.DEVELOPMENT)
        settings.throw_exception = True
        restored = EntityTestSettings.from_dict(settings.to_dict())
        assert restored.to_dict() == settings.to_dict()

    def test_global_settings(self):
        previous = get_settings()
        replacement = EntityTestSettings(throw_exception=True)
        try:
            set_settings(replacement)
            assert get_settings() is replacement
        finally:
            set_settings(previous)


class TestLogging:
    def teardown_method(self):
        logger = logging.getLogger("entity_test")
        for handler in list(logger.handlers):
            handler.close()
            logger.removeHandler(handler)
        logger.setLevel(logging.NOTSET)

    def test_stream_handler(self):
        logger = configure_logging(EntityTestSettings.for_environment(Environment.DEVELOPMENT))
        assert logger.name == "entity_test"
        assert logger.level == logging.DEBUG
        assert len(logger.handlers) == 1
        assert isinstance(logger.handlers[0], logging.StreamHandler)

    def test_rotating_file_handler(self, tmp_path):
        settings = EntityTestSettings()
        settings.logging.file_path = str(tmp_path / "logs" / "entity_test.log")
        logger = configure_logging(settings)
        assert isinstance(logger.handlers[0], RotatingFileHandler)
        assert (tmp_path / "logs").is_dir()

    def test_storage_rollback_is_logged(self, settings, storage, caplog):
        with caplog.at_level(logging.ERROR, logger="entity_test"):
            with pytest.raises(EntityStorageError):
                storage.save(storage.create({"name": "fail_insert"}))
        assert "rolled back" in caplog.text


class TestConfigurator:
    def test_kernel_wiring(self, settings):
        kernel = EntityTestConfigurator(settings).configure()
        assert kernel.context.entity_type_manager is kernel.manager
        assert kernel.registry.context is kernel.context
        assert kernel.settings is settings

    def test_shortcut_seeds_state_and_account(self, settings):
        account = Account(uid=4, name="editor")
        kernel = configure_entity_test(settings, state={"entity_test_new": True}, account=account)
        assert kernel.state.get("entity_test_new") is True
        assert kernel.context.current_account is account

    def test_without_module_hooks(self, settings):
        kernel = EntityTestConfigurator(settings).with_state({"entity_test_new": True}).without_module_hooks().configure()
        assert kernel.registry.get_stats()["handlers"] == 0
        assert kernel.manager.has_definition("entity_test_new")
