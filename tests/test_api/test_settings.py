"""Tests for configuration defaults, environment overrides and validation."""

import pytest

from ecoscout.config.settings import (
    CatalogConfig,
    EcoScoutConfig,
    GeminiConfig,
    ResolutionPolicy,
    TimeoutConfig,
)


def test_timeout_defaults(monkeypatch):
    for var in ("ECOSCOUT_AI_TIMEOUT_S", "ECOSCOUT_CATALOG_TIMEOUT_S", "ECOSCOUT_SCOUT_TIMEOUT_S"):
        monkeypatch.delenv(var, raising=False)
    cfg = TimeoutConfig()
    assert cfg.ai_timeout_s == 6.0
    assert cfg.catalog_timeout_s == 3.0
    assert cfg.scout_timeout_s == 6.0


def test_timeout_env_override(monkeypatch):
    monkeypatch.setenv("ECOSCOUT_AI_TIMEOUT_S", "2.5")
    assert TimeoutConfig().ai_timeout_s == 2.5


def test_timeout_rejects_non_positive():
    with pytest.raises(ValueError):
        TimeoutConfig(catalog_timeout_s=0)


def test_gemini_config_reads_environment(monkeypatch):
    monkeypatch.setenv("GEMINI_API_KEY", "env-key")
    monkeypatch.setenv("ECOSCOUT_AI_BACKEND", "Vertex")
    cfg = GeminiConfig()
    assert cfg.api_key == "env-key"
    assert cfg.backend == "vertex"


def test_gemini_config_rejects_unknown_backend(monkeypatch):
    monkeypatch.setenv("ECOSCOUT_AI_BACKEND", "openai")
    with pytest.raises(ValueError):
        GeminiConfig()


def test_catalog_page_size_must_be_positive():
    with pytest.raises(ValueError):
        CatalogConfig(page_size=0)


def test_min_confidence_off_by_default():
    assert ResolutionPolicy().min_confidence is None


def test_min_confidence_range_checked():
    with pytest.raises(ValueError):
        ResolutionPolicy(min_confidence=1.5)


def test_root_config_log_level(monkeypatch):
    monkeypatch.setenv("ECOSCOUT_LOG_LEVEL", "DEBUG")
    assert EcoScoutConfig().log_level == "DEBUG"
