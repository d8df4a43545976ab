"""
Shared fixtures for codesum tests.
"""

import logging
from pathlib import Path

import pytest


@pytest.fixture(autouse=True)
def _reset_codesum_logger():
    """Undo CLI logging setup so caplog sees records from every test."""
    yield
    logger = logging.getLogger("codesum")
    for handler in list(logger.handlers):
        logger.removeHandler(handler)
    logger.propagate = True
    logger.setLevel(logging.NOTSET)


@pytest.fixture
def make_tree(tmp_path: Path):
    """Create files under tmp_path from a {relative_path: content} mapping."""

    def _make(files: dict[str, str]) -> Path:
        for rel_path, content in files.items():
            path = tmp_path / rel_path
            path.parent.mkdir(parents=True, exist_ok=True)
            path.write_bytes(content.encode("utf-8"))
        return tmp_path

    return _make
