"""Line-oriented parser for RDoc markup."""

import re
from dataclasses import dataclass, field
from typing import List, Optional, Tuple

from docconform.exceptions import NestingDepthExceeded
from docconform.models import (
    BlockNode,
    DefinitionEntry,
    DefinitionList,
    Document,
    Heading,
    HorizontalRule,
    ListItem,
    ListNode,
    Paragraph,
    ParseIssue,
    Verbatim,
)
from docconform.parsers.base import BaseParser
from docconform.parsers.inline import parse_inline
from docconform.utils.logging_config import get_logger

logger = get_logger()


@dataclass
class _Line:
    number: int
    indent: int
    content: str
    raw: str

    @property
    def blank(self) -> bool:
        return not self.content


@dataclass
class _ParseState:
    lines: List[_Line]
    issues: List[ParseIssue] = field(default_factory=list)

    def next_nonblank(self, index: int) -> Optional[int]:
        for k in range(index, len(self.lines)):
            if not self.lines[k].blank:
                return k
        return None

    def issue(self, line: int, construct: str, message: str) -> None:
        self.issues.append(ParseIssue(line=line, markup_construct=construct, message=message))


class RDocParser(BaseParser):
    """Parser for RDoc markup.

    Parsing is a single pass over the lines. Each block construct is
    recognized from its first line; list nesting is tracked by indentation
    and bounded by ``max_nesting_depth``.
    """

    HEADING = re.compile(r"^(=+)\s*(.*?)\s*$")
    RULE = re.compile(r"^-{3,}\s*$")
    FENCE = re.compile(r"^(```+|~~~+)\s*([\w+#.-]*)\s*$")
    BULLET = re.compile(r"^([*-])\s+(.*)$")
    ORDERED = re.compile(r"^(\d+|[a-zA-Z])\.\s+(.*)$")
    NOTE = re.compile(r"^(\S.*?)\s*::(?:\s+(.*))?$")
    LABELED = re.compile(r"^\[([^\]]+)\]\s*(.*)$")
    UNCLOSED_LABEL = re.compile(r"^\[[^\]]*$")
    CALL_SEQ = re.compile(r"^:?call-seq:\s*(.*)$")
    BACKTICK_SPANS = False

    def supports_format(self, markup: str) -> bool:
        """Check if markup is RDoc."""
        return markup.lower() in ("rdoc", "rd")

    def parse(self, text: str) -> Document:
        """Parse RDoc text into a document tree."""
        state = _ParseState(lines=self._split_lines(text))
        nodes: List[BlockNode] = []

        i = 0
        while i < len(state.lines):
            node, i = self._parse_block(state, i)
            if node is not None:
                nodes.append(node)

        logger.debug(f"Parsed {len(nodes)} nodes with {len(state.issues)} issues")
        return Document(nodes=nodes, issues=state.issues)

    def _split_lines(self, text: str) -> List[_Line]:
        """Split text into lines relative to the common left margin."""
        raw_lines = [line.expandtabs(8).rstrip() for line in text.splitlines()]
        indents = [len(line) - len(line.lstrip()) for line in raw_lines if line.strip()]
        margin = min(indents) if indents else 0

        lines = []
        for number, line in enumerate(raw_lines, 1):
            stripped = line.lstrip()
            indent = len(line) - len(stripped) - margin if stripped else 0
            lines.append(
                _Line(number=number, indent=indent, content=stripped, raw=line[margin:])
            )
        return lines

    # Block dispatch

    def _parse_block(self, state: _ParseState, i: int) -> Tuple[Optional[BlockNode], int]:
        line = state.lines[i]
        if line.blank:
            return None, i + 1

        fence = self.FENCE.match(line.content)
        if fence:
            return self._parse_fence(state, i, fence)

        if line.indent > 0:
            return self._parse_verbatim(state, i)

        call_seq = self.CALL_SEQ.match(line.content)
        if call_seq:
            return self._parse_call_seq(state, i, call_seq.group(1))

        heading = self._match_heading(line.content)
        if heading is not None:
            level, text = heading
            if not text:
                state.issue(line.number, "heading", "heading marker without text")
                return None, i + 1
            inlines, issues = parse_inline(text, line.number, backticks=self.BACKTICK_SPANS)
            state.issues.extend(issues)
            return Heading(line=line.number, level=level, text=text, inlines=inlines), i + 1

        if self._is_rule(line.content):
            return HorizontalRule(line=line.number), i + 1

        if self._list_marker(line.content) is not None:
            return self._parse_list(state, i, line.indent, depth=1)

        if self._match_definition(state, i) is not None:
            return self._parse_definitions(state, i)

        if self.UNCLOSED_LABEL.match(line.content):
            state.issue(
                line.number,
                "definition",
                "definition-list term opened with '[' is never closed",
            )

        return self._parse_paragraph(state, i)

    def _starts_block(self, state: _ParseState, i: int) -> bool:
        """Whether line i opens a construct other than a paragraph."""
        line = state.lines[i]
        content = line.content
        return bool(
            line.indent > 0
            or self.FENCE.match(content)
            or self.CALL_SEQ.match(content)
            or self._match_heading(content) is not None
            or self._is_rule(content)
            or self._list_marker(content) is not None
            or self._match_definition(state, i) is not None
        )

    # Dialect hooks

    def _match_heading(self, content: str) -> Optional[Tuple[int, str]]:
        match = self.HEADING.match(content)
        if match is None:
            return None
        return len(match.group(1)), match.group(2)

    def _is_rule(self, content: str) -> bool:
        return bool(self.RULE.match(content))

    def _list_marker(self, content: str) -> Optional[Tuple[bool, str]]:
        """Return (ordered, item text) if content opens a list item."""
        if self._is_rule(content):
            return None
        match = self.BULLET.match(content)
        if match:
            return False, match.group(2)
        match = self.ORDERED.match(content)
        if match:
            return True, match.group(2)
        return None

    def _match_definition(self, state: _ParseState, i: int) -> Optional[Tuple[str, str, int]]:
        """Return (term, description, lines consumed) for a definition entry."""
        line = state.lines[i]
        if line.indent > 0:
            return None
        match = self.LABELED.match(line.content) or self.NOTE.match(line.content)
        if match is None:
            return None
        return match.group(1).strip(), (match.group(2) or "").strip(), 1

    # Constructs

    def _parse_paragraph(self, state: _ParseState, i: int) -> Tuple[Paragraph, int]:
        start = state.lines[i]
        contents = [start.content]
        i += 1
        while i < len(state.lines):
            line = state.lines[i]
            if line.blank or self._starts_block(state, i):
                break
            contents.append(line.content)
            i += 1

        inlines, issues = parse_inline(
            " ".join(contents), start.number, backticks=self.BACKTICK_SPANS
        )
        state.issues.extend(issues)
        return Paragraph(line=start.number, lines=contents, inlines=inlines), i

    def _parse_fence(self, state: _ParseState, i: int, fence: re.Match) -> Tuple[Verbatim, int]:
        opener = state.lines[i]
        marker = fence.group(1)
        language = fence.group(2) or None
        body = []
        j = i + 1
        while j < len(state.lines):
            if state.lines[j].content.startswith(marker):
                return Verbatim(
                    line=opener.number, lines=body, fenced=True, language=language
                ), j + 1
            body.append(state.lines[j].raw)
            j += 1

        state.issue(opener.number, "fence", f"code fence {marker!r} is never closed")
        return Verbatim(line=opener.number, lines=body, fenced=True, language=language), j

    def _parse_verbatim(self, state: _ParseState, i: int) -> Tuple[Verbatim, int]:
        start = i
        j = i
        while j < len(state.lines):
            line = state.lines[j]
            if line.blank:
                k = state.next_nonblank(j)
                if k is None or state.lines[k].indent == 0:
                    break
                j += 1
                continue
            if line.indent == 0:
                break
            j += 1

        block = state.lines[start:j]
        indent = min(line.indent for line in block if not line.blank)
        lines = [line.raw[indent:] if not line.blank else "" for line in block]
        return Verbatim(line=state.lines[start].number, lines=lines), j

    def _parse_call_seq(self, state: _ParseState, i: int, inline_text: str) -> Tuple[Verbatim, int]:
        """Collect the indented signature lines following a call-seq directive."""
        directive = state.lines[i]
        lines = [inline_text.strip()]
        j = i + 1
        while j < len(state.lines):
            line = state.lines[j]
            if line.blank:
                k = state.next_nonblank(j)
                if k is None or state.lines[k].indent == 0:
                    break
                lines.append("")
                j += 1
                continue
            if line.indent == 0:
                break
            lines.append(line.content)
            j += 1

        return Verbatim(line=directive.number, lines=lines, directive="call-seq"), j

    def _parse_definitions(self, state: _ParseState, i: int) -> Tuple[DefinitionList, int]:
        first = state.lines[i]
        entries = []
        while i < len(state.lines):
            if state.lines[i].blank:
                k = state.next_nonblank(i)
                if k is None or self._match_definition(state, k) is None:
                    break
                i = k

            match = self._match_definition(state, i)
            if match is None:
                break
            term, description, consumed = match
            entry_line = state.lines[i].number
            parts = [description] if description else []
            i += consumed
            while i < len(state.lines):
                line = state.lines[i]
                if line.blank or line.indent == 0:
                    break
                parts.append(line.content)
                i += 1

            text = " ".join(parts)
            inlines, issues = parse_inline(text, entry_line, backticks=self.BACKTICK_SPANS)
            state.issues.extend(issues)
            entries.append(
                DefinitionEntry(line=entry_line, term=term, description=text, inlines=inlines)
            )

        return DefinitionList(line=first.number, entries=entries), i

    def _parse_list(self, state: _ParseState, i: int, indent: int, depth: int) -> Tuple[ListNode, int]:
        first = state.lines[i]
        if depth > self.max_nesting_depth:
            raise NestingDepthExceeded(line=first.number, limit=self.max_nesting_depth)

        ordered = self._list_marker(first.content)[0]
        items = []

        while i < len(state.lines):
            line = state.lines[i]
            if line.blank:
                k = state.next_nonblank(i)
                if k is None or not self._is_item(state.lines[k], indent, ordered):
                    break
                i = k
                continue

            if not self._is_item(line, indent, ordered):
                break

            item, i = self._parse_item(state, i, indent, depth)
            items.append(item)

        return ListNode(line=first.number, ordered=ordered, items=items), i

    def _is_item(self, line: _Line, indent: int, ordered: bool) -> bool:
        if line.indent != indent:
            return False
        marker = self._list_marker(line.content)
        return marker is not None and marker[0] == ordered

    def _parse_item(self, state: _ParseState, i: int, indent: int, depth: int) -> Tuple[ListItem, int]:
        line = state.lines[i]
        children: List[BlockNode] = []
        text_lines = [self._list_marker(line.content)[1]]
        text_start = line.number

        def flush() -> None:
            if text_lines:
                inlines, issues = parse_inline(
                    " ".join(text_lines), text_start, backticks=self.BACKTICK_SPANS
                )
                state.issues.extend(issues)
                children.append(Paragraph(line=text_start, lines=list(text_lines), inlines=inlines))
                text_lines.clear()

        i += 1
        while i < len(state.lines):
            current = state.lines[i]
            if current.blank:
                k = state.next_nonblank(i)
                if k is None or state.lines[k].indent <= indent:
                    break
                flush()
                i = k
                continue
            if current.indent <= indent:
                break
            if self._list_marker(current.content) is not None:
                flush()
                nested, i = self._parse_list(state, i, current.indent, depth + 1)
                children.append(nested)
                continue
            if not text_lines:
                text_start = current.number
            text_lines.append(current.content)
            i += 1

        flush()
        return ListItem(line=line.number, children=children), i
