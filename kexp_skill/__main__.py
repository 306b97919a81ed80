"""
Entry point for running the skill endpoint.

Usage:
    python -m kexp_skill

This starts the FastAPI server on the configured SKILL_HOST:SKILL_PORT
(http://0.0.0.0:8000 by default).
"""
import uvicorn

from logging_setup import setup_logging

from .config import get_config

if __name__ == "__main__":
    config = get_config()
    setup_logging(level=config.log_level, use_json=config.log_json)

    uvicorn.run(
        "kexp_skill.server:app",
        host=config.host,
        port=config.port,
        log_level=config.log_level.lower(),
    )
