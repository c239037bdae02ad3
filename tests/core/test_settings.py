"""Tests for Settings and logging configuration."""

import logging

import pytest
from pydantic import ValidationError

import statekeeper.core.settings as settings_module
from statekeeper.core.settings import Settings, configure_logging, get_settings, reload_settings
from statekeeper.core.state_manager import StateManager


@pytest.fixture
def restore_settings(monkeypatch):
    yield
    monkeypatch.undo()
    reload_settings()


class TestSettings:
    def test_defaults(self, monkeypatch):
        monkeypatch.delenv("STATEKEEPER_DEFAULT_STATE", raising=False)
        monkeypatch.delenv("STATEKEEPER_LOG_LEVEL", raising=False)

        config = Settings()

        assert config.default_state == "Default"
        assert config.log_level == "WARNING"

    def test_reads_prefixed_environment(self, monkeypatch):
        monkeypatch.setenv("STATEKEEPER_DEFAULT_STATE", "Idle")
        monkeypatch.setenv("STATEKEEPER_LOG_LEVEL", "debug")

        config = Settings()

        assert config.default_state == "Idle"
        assert config.log_level == "DEBUG"

    def test_rejects_unknown_log_level(self):
        with pytest.raises(ValidationError):
            Settings(log_level="LOUD")

    def test_rejects_empty_default_state(self):
        with pytest.raises(ValidationError):
            Settings(default_state="")

    def test_reload_replaces_singleton(self, monkeypatch, restore_settings):
        monkeypatch.setenv("STATEKEEPER_DEFAULT_STATE", "Boot")

        reloaded = reload_settings()

        assert get_settings() is reloaded
        assert settings_module.settings is reloaded
        assert StateManager.with_default().current_state == "Boot"


class TestConfigureLogging:
    def test_applies_level_to_package_logger(self):
        package_logger = logging.getLogger("statekeeper")
        original_level = package_logger.level
        try:
            returned = configure_logging(Settings(log_level="DEBUG"))

            assert returned is package_logger
            assert package_logger.level == logging.DEBUG
        finally:
            package_logger.setLevel(original_level)
