import logging

import pytest
import structlog

from pouch_admin.config import get_settings


@pytest.fixture(autouse=True)
def reset_cli_state():
    """The CLI callback configures logging on CliRunner's streams; undo it after each test."""
    get_settings.cache_clear()
    yield
    get_settings.cache_clear()
    root = logging.getLogger()
    for handler in root.handlers[:]:
        root.removeHandler(handler)
    structlog.reset_defaults()
    structlog.contextvars.clear_contextvars()
