"""Shared fixtures: log capture and throwaway certificate chains."""
import logging
from io import StringIO

import pytest

from logging_setup import JSONFormatter
from skill_helpers import CertChain


@pytest.fixture
def capture_logs():
    """Capture log output to a string buffer."""
    buffer = StringIO()
    handler = logging.StreamHandler(buffer)
    handler.setFormatter(JSONFormatter())

    logger = logging.getLogger()
    old_handlers = logger.handlers[:]
    old_level = logger.level
    logger.handlers = []
    logger.addHandler(handler)
    logger.setLevel(logging.DEBUG)

    yield buffer

    logger.handlers = old_handlers
    logger.setLevel(old_level)


@pytest.fixture(scope="session")
def cert_chain():
    return CertChain()


@pytest.fixture(scope="session")
def foreign_cert_chain():
    """A chain whose leaf is not issued to echo-api.amazon.com."""
    return CertChain(san="example.com")
