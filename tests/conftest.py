"""
Shared fixtures: sample diffs and an isolated user directory.
"""
from __future__ import annotations

import pytest
from loguru import logger

from prpromptbuilder.config import loader

from diff_samples import SIMPLE_DIFF_CONTENT, BINARY_DIFF_CONTENT, TWO_FILE_DIFF


@pytest.fixture
def multi_file_diff() -> str:
    return SIMPLE_DIFF_CONTENT + "\n" + BINARY_DIFF_CONTENT + "\n"


@pytest.fixture
def two_file_diff() -> str:
    return TWO_FILE_DIFF


@pytest.fixture(autouse=True)
def isolated_home(tmp_path, monkeypatch):
    """Point config/log paths at a temp dir and start with a clean config cache."""
    home = tmp_path / "home"
    monkeypatch.setenv("PRPROMPTBUILDER_HOME", str(home))
    loader.reset_config_cache()
    yield home
    loader.reset_config_cache()
    # CLI tests add sinks bound to CliRunner's streams
    logger.remove()
