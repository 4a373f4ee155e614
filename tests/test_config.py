"""Tests for environment-driven configuration."""

import pytest

from script_analyzer import config
from script_analyzer.errors import ConfigurationError, MissingCredentialError


@pytest.fixture(autouse=True)
def clean_env(monkeypatch):
    for name in ["GEMINI_API_KEY", "API_KEY", "SCRIPT_ANALYZER_MODEL",
                 "SCRIPT_ANALYZER_TIMEOUT", "SCRIPT_ANALYZER_LIVE_DELAY_MS"]:
        monkeypatch.delenv(name, raising=False)


def test_missing_api_key():
    with pytest.raises(MissingCredentialError):
        config.get_api_key()


def test_gemini_key_preferred(monkeypatch):
    monkeypatch.setenv("API_KEY", "fallback")
    assert config.get_api_key() == "fallback"
    monkeypatch.setenv("GEMINI_API_KEY", "primary")
    assert config.get_api_key() == "primary"


def test_defaults():
    assert config.get_model_name() == "gemini-2.5-flash"
    assert config.get_request_timeout() == 120.0
    assert config.get_live_delay_ms() == 1500


def test_overrides(monkeypatch):
    monkeypatch.setenv("SCRIPT_ANALYZER_MODEL", "gemini-2.5-pro")
    monkeypatch.setenv("SCRIPT_ANALYZER_TIMEOUT", "30.5")
    monkeypatch.setenv("SCRIPT_ANALYZER_LIVE_DELAY_MS", "400")
    assert config.get_model_name() == "gemini-2.5-pro"
    assert config.get_request_timeout() == 30.5
    assert config.get_live_delay_ms() == 400


@pytest.mark.parametrize("value", ["soon", "-5"])
def test_invalid_number(monkeypatch, value):
    monkeypatch.setenv("SCRIPT_ANALYZER_LIVE_DELAY_MS", value)
    with pytest.raises(ConfigurationError, match="SCRIPT_ANALYZER_LIVE_DELAY_MS"):
        config.get_live_delay_ms()


def test_invalid_number_chains_cause(monkeypatch):
    monkeypatch.setenv("SCRIPT_ANALYZER_TIMEOUT", "soon")
    with pytest.raises(ConfigurationError) as excinfo:
        config.get_request_timeout()
    assert isinstance(excinfo.value.__cause__, ValueError)
