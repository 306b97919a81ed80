"""
Tests for skill configuration.

Verifies:
- Configuration loading from environment
- Default values
- Tolerant parsing of numeric values
"""
import pytest

from kexp_skill import config as config_module
from kexp_skill.config import SkillConfig, get_config, load_env_file

ENV_KEYS = [
    "KEXP_STREAM_URL",
    "KEXP_STREAM_TOKEN",
    "ALEXA_TIMESTAMP_TOLERANCE_SECONDS",
    "ALEXA_CERT_TIMEOUT_SECONDS",
    "SKILL_HOST",
    "SKILL_PORT",
    "LOG_LEVEL",
    "LOG_JSON",
]


@pytest.fixture(autouse=True)
def clean_env(monkeypatch):
    # setenv first so monkeypatch restores keys that load_env_file adds
    for key in ENV_KEYS:
        monkeypatch.setenv(key, "")
        monkeypatch.delenv(key)
    monkeypatch.setattr(config_module, "_config", None)


def test_config_defaults():
    config = SkillConfig.from_env()

    assert config.stream_url == "https://live-aacplus-64.streamguys1.com/"
    assert config.stream_token == "token"
    assert config.timestamp_tolerance_seconds == 150
    assert config.cert_timeout_seconds == 5.0
    assert config.host == "0.0.0.0"
    assert config.port == 8000
    assert config.log_level == "INFO"
    assert config.log_json is True


def test_config_from_env_all_fields(monkeypatch):
    monkeypatch.setenv("KEXP_STREAM_URL", "https://example.org/stream")
    monkeypatch.setenv("KEXP_STREAM_TOKEN", "abc")
    monkeypatch.setenv("ALEXA_TIMESTAMP_TOLERANCE_SECONDS", "60")
    monkeypatch.setenv("ALEXA_CERT_TIMEOUT_SECONDS", "2.5")
    monkeypatch.setenv("SKILL_HOST", "127.0.0.1")
    monkeypatch.setenv("SKILL_PORT", "9000")
    monkeypatch.setenv("LOG_LEVEL", "debug")
    monkeypatch.setenv("LOG_JSON", "0")

    config = SkillConfig.from_env()

    assert config.stream_url == "https://example.org/stream"
    assert config.stream_token == "abc"
    assert config.timestamp_tolerance_seconds == 60
    assert config.cert_timeout_seconds == 2.5
    assert config.host == "127.0.0.1"
    assert config.port == 9000
    assert config.log_level == "DEBUG"
    assert config.log_json is False


def test_numeric_values_with_comments(monkeypatch):
    monkeypatch.setenv("ALEXA_TIMESTAMP_TOLERANCE_SECONDS", "120  # two minutes")
    monkeypatch.setenv("SKILL_PORT", "not-a-port")

    config = SkillConfig.from_env()

    assert config.timestamp_tolerance_seconds == 120
    assert config.port == 8000


def test_config_is_frozen():
    config = SkillConfig()
    with pytest.raises(AttributeError):
        config.port = 1


def test_get_config_is_cached():
    assert get_config() is get_config()


def test_load_env_file(tmp_path, monkeypatch):
    env_file = tmp_path / ".env"
    env_file.write_text("KEXP_STREAM_TOKEN=from-file\nSKILL_PORT=7000\n")
    monkeypatch.setenv("SKILL_PORT", "8080")

    load_env_file(env_file)
    config = SkillConfig.from_env()

    assert config.stream_token == "from-file"
    # Real environment wins over the file
    assert config.port == 8080
