"""Documentation conformance engine for Ruby method documentation."""

__version__ = "0.1.0"

from .config import Config, get_config, reset_config
from .models import (
    BlockReport,
    DocumentationBlock,
    Finding,
    Report,
    SectionMap,
    SectionTag,
    Severity,
    SourceLocation,
)
from .pipeline import check_blocks, evaluate_block

__all__ = [
    "Config",
    "get_config",
    "reset_config",
    "BlockReport",
    "DocumentationBlock",
    "Finding",
    "Report",
    "SectionMap",
    "SectionTag",
    "Severity",
    "SourceLocation",
    "check_blocks",
    "evaluate_block",
]
