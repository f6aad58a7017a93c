"""Shared test fixtures for unit tests."""

import logging

import pytest


@pytest.fixture(autouse=True)
def _reset_docindex_logging():
    """CLI tests install handlers on captured streams; drop them afterwards."""
    yield
    logger = logging.getLogger("docindex")
    for handler in logger.handlers[:]:
        handler.close()
        logger.removeHandler(handler)
    logger.setLevel(logging.NOTSET)
