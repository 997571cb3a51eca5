"""Markup parsers for documentation blocks."""

from .base import BaseParser, get_parser
from .callseq import looks_like_signature, parse_call_seq, parse_call_seq_line
from .markdown_parser import MarkdownParser
from .rdoc_parser import RDocParser

__all__ = [
    "BaseParser",
    "get_parser",
    "looks_like_signature",
    "parse_call_seq",
    "parse_call_seq_line",
    "MarkdownParser",
    "RDocParser",
]
