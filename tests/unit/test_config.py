"""Tests for configuration validation"""
import pytest

from habitplanet import config
from habitplanet.exceptions import ConfigurationError


def test_defaults_are_valid():
    config.validate_config()


def test_unknown_storage_backend(monkeypatch):
    monkeypatch.setattr(config, "STORAGE_BACKEND", "redis")
    with pytest.raises(ConfigurationError) as exc_info:
        config.validate_config()
    assert exc_info.value.config_key == "STORAGE_BACKEND"


def test_draw_cost_must_be_positive(monkeypatch):
    monkeypatch.setattr(config, "DRAW_COST", 0)
    with pytest.raises(ConfigurationError):
        config.validate_config()


def test_timeout_must_be_positive(monkeypatch):
    monkeypatch.setattr(config, "CONTENT_GENERATION_TIMEOUT", 0)
    with pytest.raises(ConfigurationError):
        config.validate_config()


def test_invalid_timezone(monkeypatch):
    monkeypatch.setattr(config, "APP_TIMEZONE", "Mars/Olympus_Mons")
    with pytest.raises(ConfigurationError) as exc_info:
        config.validate_config()
    assert exc_info.value.config_key == "APP_TIMEZONE"
