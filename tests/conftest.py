"""Shared fixtures for Task-Master tests."""

import logging

import pytest

from taskmaster.taskmaster_logging import observability_hooks, performance_monitor


SAMPLE_REQUIREMENTS = """Project Name: Inventory Tracker

Project Description:
A small web service that keeps track of warehouse stock levels.
Operators update counts from a browser.

Environment Setup:
python -m venv .venv
pip install -r requirements.txt

Tasks:
- Design database schema
- Build stock update form
- Write user documentation (optional)
- Add CSV export
"""


@pytest.fixture
def sample_requirements():
    """Requirements text with every recognized section."""
    return SAMPLE_REQUIREMENTS


@pytest.fixture(autouse=True)
def reset_observability():
    """Keep global metrics, hooks and logger state from leaking between tests."""
    performance_monitor.reset()
    observability_hooks.hooks.clear()
    yield
    performance_monitor.reset()
    observability_hooks.hooks.clear()
    logger = logging.getLogger("taskmaster")
    for handler in list(logger.handlers):
        handler.close()
        logger.removeHandler(handler)
    logger.setLevel(logging.NOTSET)
