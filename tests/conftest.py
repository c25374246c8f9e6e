from __future__ import annotations

import logging
from pathlib import Path

import pytest

from tests._fixtures.repo_builder import RepoBuilder


@pytest.fixture
def repo_builder(tmp_path: Path) -> RepoBuilder:
    """Provide a reusable repo builder rooted at the pytest tmp_path."""
    return RepoBuilder(tmp_path)


@pytest.fixture(autouse=True)
def _reset_schemascope_logging():
    """Drop handlers installed by CLI runs so they do not outlive the test."""
    yield
    logger = logging.getLogger("schemascope")
    for handler in list(logger.handlers):
        logger.removeHandler(handler)
        handler.close()
