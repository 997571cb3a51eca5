"""Markdown dialect of the documentation parser."""

import re
from typing import Optional, Tuple

from docconform.parsers.rdoc_parser import RDocParser, _ParseState


class MarkdownParser(RDocParser):
    """Parser for Markdown-formatted documentation.

    Differs from RDoc in heading syntax (``#``), horizontal rules
    (``***``/``___`` as well as ``---``) and definition lists, which may be
    written as a term line followed by ``: description``. Bracketed
    ``[term]`` labels are links in Markdown and are not definitions.
    """

    HEADING = re.compile(r"^(#{1,6})\s+(.*?)\s*#*\s*$")
    EMPTY_HEADING = re.compile(r"^#{1,6}\s*$")
    RULE = re.compile(r"^(?:-{3,}|\*{3,}|_{3,})\s*$")
    DEFINITION = re.compile(r"^:\s+(.*)$")
    BACKTICK_SPANS = True

    def supports_format(self, markup: str) -> bool:
        """Check if markup is Markdown."""
        return markup.lower() in ("markdown", "md")

    def _match_heading(self, content: str) -> Optional[Tuple[int, str]]:
        if self.EMPTY_HEADING.match(content):
            return len(content.strip()), ""
        return super()._match_heading(content)

    def _match_definition(self, state: _ParseState, i: int) -> Optional[Tuple[str, str, int]]:
        line = state.lines[i]
        if line.indent > 0:
            return None

        match = self.NOTE.match(line.content)
        if match is not None:
            return match.group(1).strip(), (match.group(2) or "").strip(), 1

        if i + 1 < len(state.lines) and not self.DEFINITION.match(line.content):
            following = state.lines[i + 1]
            definition = self.DEFINITION.match(following.content)
            if definition is not None and following.indent == 0:
                return line.content, definition.group(1).strip(), 2

        return None
