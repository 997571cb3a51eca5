"""Logging for the conformance engine.

Reports are written to stdout, so log output goes to an explicit stream
(stderr from the CLI) and, optionally, a file. Records logged while a block
is evaluated carry the block's method name::

    logger.warning("nesting too deep", extra=block_context(block.method))
"""

import json
import logging
import sys
from pathlib import Path
from typing import Dict, Optional, TextIO

LOGGER_NAME = "docconform"

TEXT_FORMAT = "%(asctime)s %(levelname)-8s %(block)s%(message)s"
DATE_FORMAT = "%H:%M:%S"


def block_context(method: str) -> Dict[str, str]:
    """``extra`` mapping attaching a block's method name to a record."""
    return {"method": method}


class BlockFilter(logging.Filter):
    """Fill the ``block`` prefix used by the text format."""

    def filter(self, record: logging.LogRecord) -> bool:
        method = getattr(record, "method", None)
        record.block = f"[{method}] " if method else ""
        return True


class JsonFormatter(logging.Formatter):
    """One JSON object per record, with the block's method when known."""

    def format(self, record: logging.LogRecord) -> str:
        log_obj = {
            "timestamp": self.formatTime(record),
            "level": record.levelname,
            "logger": record.name,
            "message": record.getMessage(),
        }
        method = getattr(record, "method", None)
        if method:
            log_obj["method"] = method
        if record.exc_info:
            log_obj["exception"] = self.formatException(record.exc_info)
        return json.dumps(log_obj)


def setup_logging(
    log_file: Optional[Path] = None,
    log_level: str = "WARNING",
    json_logs: bool = False,
    stream: Optional[TextIO] = None,
) -> logging.Logger:
    """Configure the docconform logger.

    Args:
        log_file: Also write records to this file
        log_level: Logging level name, case-insensitive
        json_logs: Write the file log as JSON lines
        stream: Console stream (defaults to sys.stderr)

    Returns:
        Configured logger instance
    """
    level = log_level.upper()
    logger = logging.getLogger(LOGGER_NAME)
    logger.setLevel(level)

    # Handlers from a previous command would write to stale streams
    for handler in list(logger.handlers):
        logger.removeHandler(handler)
        handler.close()

    text_formatter = logging.Formatter(TEXT_FORMAT, datefmt=DATE_FORMAT)

    console_handler = logging.StreamHandler(stream if stream is not None else sys.stderr)
    console_handler.setLevel(level)
    console_handler.addFilter(BlockFilter())
    console_handler.setFormatter(text_formatter)
    logger.addHandler(console_handler)

    if log_file:
        log_file.parent.mkdir(parents=True, exist_ok=True)
        file_handler = logging.FileHandler(log_file, encoding="utf-8")
        file_handler.setLevel(level)
        file_handler.addFilter(BlockFilter())
        file_handler.setFormatter(JsonFormatter() if json_logs else text_formatter)
        logger.addHandler(file_handler)

    logger.propagate = False
    return logger


def get_logger() -> logging.Logger:
    """Get the docconform logger instance."""
    return logging.getLogger(LOGGER_NAME)
