"""Unit tests for environment-driven configuration."""

from __future__ import annotations

from datetime import timedelta

from credkeep.core import config as cfg
from credkeep.services.credentials import CredentialConfig


def test_env_helpers(monkeypatch):
    monkeypatch.setenv("FLAG", "Yes")
    monkeypatch.setenv("NUM", " 42 ")
    monkeypatch.setenv("BAD_NUM", "forty")
    monkeypatch.setenv("LIST", "https://a.com*, ,https://b.com/cb")

    assert cfg.env_bool("FLAG") is True
    assert cfg.env_bool("MISSING_FLAG", True) is True
    assert cfg.env_int("NUM", 1) == 42
    assert cfg.env_int("BAD_NUM", 7) == 7
    assert cfg.env_list("LIST") == ["https://a.com*", "https://b.com/cb"]
    assert cfg.env_list("MISSING_LIST") == []


def test_get_config_follows_app_env(monkeypatch):
    monkeypatch.setenv(cfg.ENV_VAR, "Testing")
    assert cfg.get_config() is cfg.TestingConfig

    monkeypatch.setenv(cfg.ENV_VAR, "unknown")
    assert cfg.get_config() is cfg.DevelopmentConfig


def test_credential_defaults():
    built = CredentialConfig.from_mapping(vars(cfg.BaseConfig))

    assert built.token_ttl == timedelta(days=14)
    assert built.grace_window == timedelta(seconds=5)
    assert built.max_clients is None
    assert built.max_retries == 3
    assert cfg.TestingConfig.REDIS_URL is None
