"""
Skill configuration.

Loads stream, verification and server settings from environment variables,
optionally seeded from a `.env` file next to the project root.
"""
import os
from dataclasses import dataclass
from pathlib import Path
from typing import Optional

from dotenv import load_dotenv

DEFAULT_STREAM_URL = "https://live-aacplus-64.streamguys1.com/"
DEFAULT_STREAM_TOKEN = "token"

# Alexa rejects requests older than 150 seconds; we apply the same window.
DEFAULT_TIMESTAMP_TOLERANCE_SECONDS = 150
DEFAULT_CERT_TIMEOUT_SECONDS = 5.0


def _clean_env(key: str) -> Optional[str]:
    """
    Read an environment variable, stripping comments and whitespace.

    Handles cases like:
    - "150  # comment" -> "150"
    - "" -> None
    """
    value = os.environ.get(key)
    if not value:
        return None

    if "#" in value:
        value = value.split("#")[0]

    value = value.strip()
    return value or None


def _parse_int_env(key: str, default: int) -> int:
    value = _clean_env(key)
    if value is None:
        return default
    try:
        return int(value)
    except ValueError:
        return default


def _parse_float_env(key: str, default: float) -> float:
    value = _clean_env(key)
    if value is None:
        return default
    try:
        return float(value)
    except ValueError:
        return default


def _parse_bool_env(key: str, default: bool) -> bool:
    value = _clean_env(key)
    if value is None:
        return default
    return value.lower() in {"1", "true", "yes", "on"}


@dataclass(frozen=True)
class SkillConfig:
    """KEXP skill configuration."""

    # Live stream handed to the Alexa AudioPlayer
    stream_url: str = DEFAULT_STREAM_URL
    stream_token: str = DEFAULT_STREAM_TOKEN

    # Request verification
    timestamp_tolerance_seconds: int = DEFAULT_TIMESTAMP_TOLERANCE_SECONDS
    cert_timeout_seconds: float = DEFAULT_CERT_TIMEOUT_SECONDS

    # HTTP server
    host: str = "0.0.0.0"
    port: int = 8000

    # Logging
    log_level: str = "INFO"
    log_json: bool = True

    @classmethod
    def from_env(cls) -> "SkillConfig":
        """Load configuration from environment variables."""
        return cls(
            stream_url=_clean_env("KEXP_STREAM_URL") or DEFAULT_STREAM_URL,
            stream_token=_clean_env("KEXP_STREAM_TOKEN") or DEFAULT_STREAM_TOKEN,
            timestamp_tolerance_seconds=_parse_int_env(
                "ALEXA_TIMESTAMP_TOLERANCE_SECONDS", DEFAULT_TIMESTAMP_TOLERANCE_SECONDS
            ),
            cert_timeout_seconds=_parse_float_env(
                "ALEXA_CERT_TIMEOUT_SECONDS", DEFAULT_CERT_TIMEOUT_SECONDS
            ),
            host=_clean_env("SKILL_HOST") or "0.0.0.0",
            port=_parse_int_env("SKILL_PORT", 8000),
            log_level=(_clean_env("LOG_LEVEL") or "INFO").upper(),
            log_json=_parse_bool_env("LOG_JSON", True),
        )


def load_env_file(path: Optional[Path] = None) -> None:
    """Seed os.environ from a .env file without overriding real variables."""
    env_file = path or Path(__file__).resolve().parent.parent / ".env"
    if env_file.exists():
        load_dotenv(env_file, override=False)


def get_config() -> SkillConfig:
    """Get or create global config instance."""
    global _config
    if _config is None:
        load_env_file()
        _config = SkillConfig.from_env()
    return _config


# Global config instance (lazy loaded)
_config: Optional[SkillConfig] = None
