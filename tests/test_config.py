"""Tests for environment-driven settings."""

from content_mapper.config import Settings


def test_defaults(monkeypatch):
    for name in (
        "CONTENT_MAPPER_OVERWRITE",
        "CONTENT_MAPPER_FAIL_FAST",
        "CONTENT_MAPPER_SLOT_PREFIX",
        "CONTENT_MAPPER_LOCALE",
        "SOURCE_MAX_RETRIES",
        "SOURCE_API_KEY",
    ):
        monkeypatch.delenv(name, raising=False)
    settings = Settings.from_env(dotenv=False)
    assert settings.overwrite_key_values is True
    assert settings.fail_fast is False
    assert settings.slot_prefix == "amor-"
    assert settings.locale == "en"
    assert settings.source.max_retries == 3
    assert settings.source.api_key is None


def test_environment_overrides(monkeypatch):
    monkeypatch.setenv("CONTENT_MAPPER_OVERWRITE", "no")
    monkeypatch.setenv("CONTENT_MAPPER_FAIL_FAST", "1")
    monkeypatch.setenv("CONTENT_MAPPER_SLOT_PREFIX", "slot-")
    monkeypatch.setenv("CONTENT_MAPPER_MAX_ALLOCATION_ATTEMPTS", "0")
    monkeypatch.setenv("SOURCE_TIMEOUT", "2.5")
    monkeypatch.setenv("SOURCE_API_KEY", "")
    monkeypatch.setenv("LOG_LEVEL", "debug")
    settings = Settings.from_env(dotenv=False)
    assert settings.overwrite_key_values is False
    assert settings.fail_fast is True
    assert settings.slot_prefix == "slot-"
    assert settings.max_allocation_attempts == 1
    assert settings.source.timeout == 2.5
    assert settings.source.api_key is None
    assert settings.log_level == "DEBUG"


def test_malformed_values_fall_back(monkeypatch):
    monkeypatch.setenv("CONTENT_MAPPER_FAIL_FAST", "maybe")
    monkeypatch.setenv("SOURCE_MAX_RETRIES", "many")
    monkeypatch.setenv("SOURCE_BACKOFF_FACTOR", "fast")
    settings = Settings.from_env(dotenv=False)
    assert settings.fail_fast is False
    assert settings.source.max_retries == 3
    assert settings.source.backoff_factor == 1.0


def test_blank_and_negative_values(monkeypatch):
    monkeypatch.setenv("SOURCE_TIMEOUT", "  ")
    monkeypatch.setenv("SOURCE_MAX_RETRIES", "-2")
    monkeypatch.setenv("SOURCE_BACKOFF_MAX", " 4.5 ")
    monkeypatch.setenv("CONTENT_MAPPER_OVERWRITE", " OFF ")
    settings = Settings.from_env(dotenv=False)
    assert settings.source.timeout == 30.0
    assert settings.source.max_retries == 0
    assert settings.source.backoff_max == 4.5
    assert settings.overwrite_key_values is False
