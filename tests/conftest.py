"""Pytest configuration and fixtures."""

import logging
import tempfile
import textwrap
from pathlib import Path

import pytest

from docconform.config import Config, reset_config
from docconform.models import DocumentationBlock, SourceLocation
from docconform.utils.logging_config import LOGGER_NAME


@pytest.fixture(autouse=True)
def reset_logging():
    """Detach handlers that CLI commands bind to captured streams."""
    yield
    logger = logging.getLogger(LOGGER_NAME)
    logger.handlers.clear()
    logger.propagate = True
    logger.setLevel(logging.NOTSET)


@pytest.fixture
def temp_dir():
    """Create a temporary directory for test files."""
    with tempfile.TemporaryDirectory() as tmpdir:
        yield Path(tmpdir)


@pytest.fixture
def test_config(monkeypatch):
    """Create a test configuration unaffected by the environment."""
    for name in ("DOCCONFORM_RULES", "DOCCONFORM_RULES_FILE", "DOCCONFORM_WORKERS"):
        monkeypatch.delenv(name, raising=False)
    reset_config()

    config = Config(_env_file=None, workers=2)

    yield config

    reset_config()


@pytest.fixture
def make_block():
    """Factory for documentation blocks from indented literal text."""

    def _make(text, method="Array#count", markup="rdoc", file="array.c", line_start=1):
        return DocumentationBlock(
            method=method,
            text=textwrap.dedent(text).strip("\n"),
            location=SourceLocation(file=file, line_start=line_start),
            markup=markup,
        )

    return _make


COUNT_DOC = """
    call-seq:
      array.count -> integer
      array.count(obj) -> integer
      array.count {|element| ... } -> integer

    Returns a count of specified elements.
"""


@pytest.fixture
def count_doc():
    """The documentation of Array#count used as a known-good block."""
    return COUNT_DOC
