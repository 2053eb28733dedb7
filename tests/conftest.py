"""Pytest fixtures shared by the project-level tests."""
import copy

import pytest

from syncdash import logging as sd_logging


@pytest.fixture(autouse=True)
def isolated_logging():
    """Restore logging config and close sinks after every test."""
    saved = copy.deepcopy(sd_logging._config)
    yield
    sd_logging.close_all_sinks()
    sd_logging._config.clear()
    sd_logging._config.update(saved)
