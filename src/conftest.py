"""Root conftest: test env vars from .env.tests, structlog routed into caplog."""

from pathlib import Path

import pytest
import structlog
from dotenv import load_dotenv

from buildinfo.logging import configure_structlog

load_dotenv(Path(__file__).resolve().parent.parent / ".env.tests")

configure_structlog()


@pytest.fixture(autouse=True)
def _reset_structlog():
    """Clear bound context and undo any setup_logging() reconfiguration between tests."""
    structlog.contextvars.clear_contextvars()
    yield
    structlog.contextvars.clear_contextvars()
    configure_structlog()
