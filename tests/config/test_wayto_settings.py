"""Tests for settings loading."""

from pathlib import Path

import pytest
from pydantic import ValidationError

from wayto.config import WaytoSettings, configure, get_settings, reset_settings
from wayto.config import settings as settings_module


class TestGetSettings:
    def test_test_environment_selects_testing_settings(self):
        settings = get_settings()
        assert isinstance(settings, settings_module.TestingSettings)
        assert settings.roundtime_poll_interval == 0.01

    def test_singleton(self):
        assert get_settings() is get_settings()

    def test_explicit_env_name(self, monkeypatch):
        monkeypatch.delenv("WAYTO_ENV")
        reset_settings()
        settings = get_settings("default")
        assert type(settings) is WaytoSettings

    def test_environment_overrides(self, monkeypatch, tmp_path):
        monkeypatch.setenv("WAYTO_MAX_CALL_DEPTH", "4")
        monkeypatch.setenv("WAYTO_STRICT_LOADING", "false")
        reset_settings()
        settings = get_settings()
        assert settings.max_call_depth == 4
        assert settings.strict_loading is False
        assert settings.cache_path == tmp_path / "cache"

    def test_configure_replaces_singleton(self):
        settings = configure(default_wait_timeout=3.0, log_level="debug")
        assert get_settings() is settings
        assert settings.default_wait_timeout == 3.0
        assert settings.log_level == "DEBUG"


class TestValidation:
    def test_defaults(self):
        settings = WaytoSettings()
        assert settings.script_marker == ";e"
        assert settings.default_wait_timeout is None
        assert settings.max_call_depth == 16
        assert settings.strict_loading is True
        assert isinstance(settings.cache_path, Path)

    @pytest.mark.parametrize(
        "overrides",
        [
            {"script_marker": "  "},
            {"log_level": "LOUD"},
            {"default_wait_timeout": 0},
            {"max_call_depth": 0},
            {"unknown_option": True},
        ],
    )
    def test_invalid_values(self, overrides):
        with pytest.raises(ValidationError):
            WaytoSettings(**overrides)
