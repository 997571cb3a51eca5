"""Inline markup: monospace spans and cross-references."""

import re
from typing import List, Tuple

from docconform.models import CodeSpan, CrossReference, InlineNode, ParseIssue, Text

_METHOD_NAME = r"(?:[a-z_]\w*[?!=]?|\[\]=?|<=>|===?|=~|<<|>>)"

CROSS_REFERENCE = re.compile(
    r"(?<![\w\\#:.\x00])"
    r"("
    r"(?:[A-Z]\w*(?:::[A-Z]\w*)*)?(?:#|::)" + _METHOD_NAME +
    r"|[A-Z]\w*(?:::[A-Z]\w*)*\.[a-z_]\w*[?!]?"
    r")"
)

PLUS_SPAN = re.compile(r"(?<![\w+\\])\+([^\s+](?:[^+]*?[^\s+])?)\+(?![\w+])")

_OPENERS = re.compile(r"<tt>|<code>|\\[#+<]|(?<![\w+\\])\+(?=[^\s+])")

# Markdown adds backtick code spans
_MARKDOWN_OPENERS = re.compile(r"<tt>|<code>|`|\\[#+`<]|(?<![\w+\\])\+(?=[^\s+])")


def is_cross_reference(token: str) -> bool:
    """Check whether a whole token is a cross-reference."""
    match = CROSS_REFERENCE.fullmatch(token)
    return match is not None


def parse_inline(
    text: str, line: int = 0, backticks: bool = False
) -> Tuple[List[InlineNode], List[ParseIssue]]:
    """Parse inline markup in one run of text.

    Args:
        text: Text to parse (already joined across lines)
        line: Line number used for issues
        backticks: Whether `code` spans are markup (Markdown only; RDoc
            prose uses `quotes' literally)

    Returns:
        Tuple of inline nodes and non-fatal parse issues
    """
    nodes: List[InlineNode] = []
    issues: List[ParseIssue] = []
    buffer: List[str] = []
    pos = 0
    openers = _MARKDOWN_OPENERS if backticks else _OPENERS

    def flush() -> None:
        if buffer:
            nodes.extend(_split_cross_references("".join(buffer)))
            buffer.clear()

    while pos < len(text):
        match = openers.search(text, pos)
        if match is None:
            buffer.append(text[pos:])
            break

        buffer.append(text[pos:match.start()])
        opener = match.group(0)

        if opener.startswith("\\"):
            # Escaped marker, keep it literally
            buffer.append("\x00" + opener[1])
            pos = match.end()
            continue

        if opener == "+":
            span = PLUS_SPAN.match(text, match.start())
            if span is None:
                buffer.append(opener)
                pos = match.end()
                continue
            flush()
            nodes.append(CodeSpan(text=span.group(1)))
            pos = span.end()
            continue

        closer = "`" if opener == "`" else opener.replace("<", "</")
        end = text.find(closer, match.end())
        if end == -1:
            issues.append(
                ParseIssue(
                    line=line,
                    markup_construct="monospace",
                    message=f"unterminated monospace span opened with {opener!r}",
                )
            )
            buffer.append(text[match.end():])
            break

        flush()
        nodes.append(CodeSpan(text=text[match.end():end]))
        pos = end + len(closer)

    flush()
    return _restore_escapes(nodes), issues


def _split_cross_references(text: str) -> List[InlineNode]:
    """Split plain text into Text and CrossReference nodes."""
    nodes: List[InlineNode] = []
    last = 0
    for match in CROSS_REFERENCE.finditer(text):
        if match.start() > last:
            nodes.append(Text(text=text[last:match.start()]))
        nodes.append(CrossReference(target=match.group(1)))
        last = match.end()
    if last < len(text):
        nodes.append(Text(text=text[last:]))
    return nodes


def _restore_escapes(nodes: List[InlineNode]) -> List[InlineNode]:
    """Drop escape sentinels and merge adjacent text nodes."""
    merged: List[InlineNode] = []
    for node in nodes:
        if isinstance(node, Text):
            value = node.text.replace("\x00", "")
            if merged and isinstance(merged[-1], Text):
                merged[-1] = Text(text=merged[-1].text + value)
            elif value:
                merged.append(Text(text=value))
        else:
            merged.append(node)
    return merged


def extract_cross_references(nodes: List[InlineNode]) -> List[str]:
    """Targets of all cross-references in a run of inline nodes."""
    return [node.target for node in nodes if isinstance(node, CrossReference)]
