"""Error taxonomy for the conformance engine.

Unresolvable section boundaries are not exceptions: the segmenter records
them as ``Ambiguity`` entries on the ``SectionMap`` and carries on.
"""

from typing import Optional


class DocConformError(Exception):
    """Base class for engine errors."""


class ParseError(DocConformError):
    """Malformed markup.

    Most parse errors are recovered by the parser and surface as
    ``ParseIssue`` records; only ``NestingDepthExceeded`` escapes a parse.
    """

    def __init__(self, message: str, line: int = 0, markup_construct: str = "markup"):
        super().__init__(message)
        self.message = message
        self.line = line
        self.markup_construct = markup_construct

    def __str__(self) -> str:
        return f"line {self.line}: {self.message}"


class NestingDepthExceeded(ParseError):
    """List nesting deeper than the configured guard."""

    def __init__(self, line: int, limit: int):
        super().__init__(
            f"list nesting exceeds maximum depth of {limit}",
            line=line,
            markup_construct="list",
        )
        self.limit = limit


class RuleEvaluationError(DocConformError):
    """A rule precondition is not met."""

    def __init__(self, message: str, line: Optional[int] = None):
        super().__init__(message)
        self.message = message
        self.line = line


class CallSeqSyntaxError(RuleEvaluationError):
    """A call-seq line does not match the signature grammar."""
