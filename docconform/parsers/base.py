"""Base parser interface for documentation markup."""

from abc import ABC, abstractmethod

from docconform.models import Document

DEFAULT_MAX_NESTING_DEPTH = 8


class BaseParser(ABC):
    """Abstract base class for markup parsers."""

    def __init__(self, max_nesting_depth: int = DEFAULT_MAX_NESTING_DEPTH):
        self.max_nesting_depth = max_nesting_depth

    @abstractmethod
    def parse(self, text: str) -> Document:
        """Parse documentation text into a document tree.

        Malformed constructs are recovered and reported through
        ``Document.issues``.

        Args:
            text: Raw documentation text

        Returns:
            Document with block nodes and parse issues

        Raises:
            NestingDepthExceeded: If lists nest deeper than the guard allows
        """
        pass

    @abstractmethod
    def supports_format(self, markup: str) -> bool:
        """Check if this parser handles the given markup dialect.

        Args:
            markup: Dialect name (e.g., 'rdoc', 'markdown')

        Returns:
            True if supported, False otherwise
        """
        pass


def get_parser(markup: str, max_nesting_depth: int = DEFAULT_MAX_NESTING_DEPTH) -> BaseParser:
    """Get the parser for a markup dialect.

    Args:
        markup: Dialect name
        max_nesting_depth: List nesting guard passed to the parser

    Returns:
        Parser instance for the dialect

    Raises:
        ValueError: If no parser supports the dialect
    """
    from docconform.parsers.markdown_parser import MarkdownParser
    from docconform.parsers.rdoc_parser import RDocParser

    parsers = [
        RDocParser(max_nesting_depth=max_nesting_depth),
        MarkdownParser(max_nesting_depth=max_nesting_depth),
    ]

    for parser in parsers:
        if parser.supports_format(markup):
            return parser

    raise ValueError(f"No parser available for markup: {markup}")
