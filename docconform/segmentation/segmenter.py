"""Partition a parsed document into named sections."""

import re
from typing import List, Optional, Tuple

from docconform.config import Config
from docconform.models import (
    Ambiguity,
    BlockNode,
    CodeSpan,
    DefinitionList,
    Document,
    Paragraph,
    RelatedLine,
    Section,
    SectionMap,
    SectionTag,
    SourceLine,
    Text,
    Verbatim,
)
from docconform.parsers.callseq import looks_like_signature
from docconform.parsers.inline import is_cross_reference
from docconform.rules.heuristics import PatternMatcher
from docconform.utils.logging_config import get_logger

logger = get_logger()

RELATED_MARKER = "Related:"

# Words allowed between references on a Related: line
CONNECTORS = {"and", "or", "see", "also", "see also"}

_TOKEN_TRIM = ".;"


def segment(document: Document, config: Optional[Config] = None) -> SectionMap:
    """Segment a document into sections.

    Sections are detected positionally: CallSeq leads, Synopsis follows,
    RelatedMethods closes the block, ArgumentDescription and CornerCases are
    found by lexical patterns, and Details is whatever lies between
    Synopsis and the first of those. Anything that cannot be placed with
    confidence is left Absent and recorded as an ambiguity.

    Args:
        document: Parsed document
        config: Configuration supplying the lexical patterns

    Returns:
        SectionMap with present sections and recorded ambiguities
    """
    config = config or Config()
    matcher = PatternMatcher(config.patterns)
    nodes = document.nodes
    ambiguities: List[Ambiguity] = []
    sections = {}

    # CallSeq
    call_seq_end, call_seq_lines = _detect_call_seq(nodes)
    if call_seq_end:
        sections[SectionTag.CALL_SEQ] = _section(SectionTag.CALL_SEQ, nodes, 0, call_seq_end)
    for node in nodes[call_seq_end:]:
        if isinstance(node, Verbatim) and node.directive == "call-seq":
            ambiguities.append(
                Ambiguity(line=node.line, message="call-seq directive appears after other content")
            )

    # Synopsis
    cursor = call_seq_end
    if (
        cursor < len(nodes)
        and isinstance(nodes[cursor], Paragraph)
        and not nodes[cursor].raw.startswith(RELATED_MARKER)
    ):
        sections[SectionTag.SYNOPSIS] = _section(SectionTag.SYNOPSIS, nodes, cursor, cursor + 1)
        cursor += 1

    # RelatedMethods
    end = len(nodes)
    related = None
    related_index = _find_related(nodes, cursor, ambiguities)
    if related_index is not None:
        related = _parse_related(nodes[related_index])
        sections[SectionTag.RELATED_METHODS] = _section(
            SectionTag.RELATED_METHODS, nodes, related_index, related_index + 1
        )
        end = related_index

    # ArgumentDescription
    argument_index = None
    for index in range(cursor, end):
        node = nodes[index]
        if not isinstance(node, DefinitionList) or not _is_argument_list(node, matcher):
            continue
        if argument_index is None:
            argument_index = index
        else:
            ambiguities.append(
                Ambiguity(line=node.line, message="more than one argument description list")
            )

    # CornerCases: trailing run of corner-case paragraphs
    floor = argument_index + 1 if argument_index is not None else cursor
    corner_start = end
    while corner_start > floor:
        node = nodes[corner_start - 1]
        if isinstance(node, Paragraph) and matcher.is_corner_case(node.text):
            corner_start -= 1
        else:
            break
    if corner_start < end:
        sections[SectionTag.CORNER_CASES] = _section(
            SectionTag.CORNER_CASES, nodes, corner_start, end
        )

    # Details: up to the first definition list of any kind
    first_list = next(
        (i for i in range(cursor, end) if isinstance(nodes[i], DefinitionList)), None
    )
    details_end = first_list if first_list is not None else corner_start
    if details_end > cursor:
        sections[SectionTag.DETAILS] = _section(SectionTag.DETAILS, nodes, cursor, details_end)

    if argument_index is not None:
        sections[SectionTag.ARGUMENT_DESCRIPTION] = _section(
            SectionTag.ARGUMENT_DESCRIPTION, nodes, argument_index, argument_index + 1
        )
        _record_stray(
            nodes[details_end:argument_index], "before the argument description", ambiguities
        )
        _record_stray(
            nodes[argument_index + 1:corner_start], "after the argument description", ambiguities
        )
    else:
        _record_stray(nodes[details_end:corner_start], "after the details", ambiguities)

    section_map = SectionMap(
        call_seq=sections.get(SectionTag.CALL_SEQ),
        synopsis=sections.get(SectionTag.SYNOPSIS),
        details=sections.get(SectionTag.DETAILS),
        argument_description=sections.get(SectionTag.ARGUMENT_DESCRIPTION),
        corner_cases=sections.get(SectionTag.CORNER_CASES),
        related_methods=sections.get(SectionTag.RELATED_METHODS),
        call_seq_lines=call_seq_lines,
        related=related,
        ambiguities=ambiguities,
    )

    logger.debug(
        f"Segmented {len(nodes)} nodes into "
        f"{[s.tag.value for s in section_map.present()]}"
    )
    return section_map


def _section(tag: SectionTag, nodes: List[BlockNode], start: int, end: int) -> Section:
    return Section(tag=tag, start=start, end=end, nodes=nodes[start:end])


def _detect_call_seq(nodes: List[BlockNode]) -> Tuple[int, List[SourceLine]]:
    """Find the leading run of monospace-only signature nodes.

    Returns:
        Tuple of the index just past the run and the signature lines
    """
    lines: List[SourceLine] = []
    index = 0
    while index < len(nodes):
        node_lines = _signature_lines(nodes[index], directive_allowed=index == 0)
        if node_lines is None:
            break
        lines.extend(node_lines)
        index += 1
    return index, lines


def _signature_lines(node: BlockNode, directive_allowed: bool) -> Optional[List[SourceLine]]:
    """Signature lines of a node, or None if the node is not monospace call-seq."""
    if isinstance(node, Verbatim):
        numbered = [
            SourceLine(line=node.line + offset, text=text.strip())
            for offset, text in enumerate(node.lines)
            if text.strip()
        ]
        if node.directive == "call-seq":
            return numbered if directive_allowed else None
        if numbered and all(looks_like_signature(s.text) for s in numbered):
            return numbered
        return None

    if isinstance(node, Paragraph):
        numbered = []
        for offset, raw in enumerate(node.lines):
            code = _monospace_only(raw)
            if code is None or not looks_like_signature(code):
                return None
            numbered.append(SourceLine(line=node.line + offset, text=code))
        return numbered

    return None


_MONOSPACE_LINE = re.compile(r"^(?:\+(.+)\+|<tt>(.+)</tt>|<code>(.+)</code>|`(.+)`)$")


def _monospace_only(raw: str) -> Optional[str]:
    """The code text of a line that is a single monospace span."""
    match = _MONOSPACE_LINE.match(raw.strip())
    if match is None:
        return None
    return next(group for group in match.groups() if group is not None).strip()


def _find_related(
    nodes: List[BlockNode], start: int, ambiguities: List[Ambiguity]
) -> Optional[int]:
    """Index of the trailing Related: paragraph, if well-formed."""
    found = None
    for index in range(start, len(nodes)):
        node = nodes[index]
        if not (isinstance(node, Paragraph) and node.raw.startswith(RELATED_MARKER)):
            continue
        is_last = index == len(nodes) - 1
        if is_last and len(node.lines) == 1:
            found = index
        elif not is_last:
            ambiguities.append(
                Ambiguity(line=node.line, message="'Related:' line is not at the end of the block")
            )
        else:
            ambiguities.append(
                Ambiguity(line=node.line, message="'Related:' paragraph spans more than one line")
            )
    return found


def _parse_related(node: Paragraph) -> RelatedLine:
    """Resolve the tokens of a Related: line to cross-references."""
    body = node.raw[len(RELATED_MARKER):]
    references = []
    unresolved = []

    for inline in _strip_marker(node):
        if isinstance(inline, CodeSpan):
            # Monospace names are not links
            unresolved.append(inline.text)
            continue
        if not isinstance(inline, Text):
            references.append(inline.target)
            continue
        for token in re.split(r"[,\s]+", inline.text):
            token = token.strip(_TOKEN_TRIM)
            if not token or token.lower() in CONNECTORS:
                continue
            if is_cross_reference(token):
                references.append(token)
            else:
                unresolved.append(token)

    logger.debug(f"Related line {body.strip()!r}: {references} / {unresolved}")
    return RelatedLine(line=node.line, references=references, unresolved=unresolved)


def _strip_marker(node: Paragraph) -> list:
    """Inline nodes of a Related: paragraph without the marker itself."""
    inlines = list(node.inlines)
    if inlines and isinstance(inlines[0], Text):
        text = inlines[0].text.lstrip()
        if text.startswith(RELATED_MARKER):
            remainder = text[len(RELATED_MARKER):]
            inlines[0] = Text(text=remainder)
    return inlines


def _is_argument_list(node: DefinitionList, matcher: PatternMatcher) -> bool:
    if not node.entries:
        return False
    return matcher.is_type_like(node.entries[0].description_text)



def _record_stray(stray: List[BlockNode], where: str, ambiguities: List[Ambiguity]) -> None:
    if stray:
        ambiguities.append(
            Ambiguity(
                line=stray[0].line,
                message=f"{len(stray)} node(s) {where} belong to no section",
            )
        )
