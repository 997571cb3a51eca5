"""Pydantic models for domain objects."""

from enum import Enum
from typing import Annotated, Literal, Optional, Union

from pydantic import BaseModel, ConfigDict, Field, model_validator


class SourceLocation(BaseModel):
    """Where a documentation block lives in its source file."""

    model_config = ConfigDict(frozen=True)

    file: str
    line_start: int = 1
    line_end: Optional[int] = None

    def to_string(self) -> str:
        """Format as `file:line`."""
        return f"{self.file}:{self.line_start}"


class DocumentationBlock(BaseModel):
    """Raw documentation text attached to one method."""

    model_config = ConfigDict(frozen=True)

    method: str
    text: str
    location: Optional[SourceLocation] = None
    markup: str = "rdoc"  # 'rdoc' or 'markdown'

    def absolute_line(self, line: Optional[int]) -> Optional[int]:
        """Map a 1-based line inside the block to a source file line."""
        if line is None:
            return None
        if self.location is None:
            return line
        return self.location.line_start + line - 1


# Inline nodes


class Text(BaseModel):
    model_config = ConfigDict(frozen=True)

    kind: Literal["text"] = "text"
    text: str


class CodeSpan(BaseModel):
    model_config = ConfigDict(frozen=True)

    kind: Literal["code"] = "code"
    text: str


class CrossReference(BaseModel):
    model_config = ConfigDict(frozen=True)

    kind: Literal["xref"] = "xref"
    target: str


InlineNode = Annotated[Union[Text, CodeSpan, CrossReference], Field(discriminator="kind")]


def inline_text(inlines: list[InlineNode]) -> str:
    """Plain text of a run of inline nodes, markup markers removed."""
    parts = []
    for node in inlines:
        if isinstance(node, CrossReference):
            parts.append(node.target)
        else:
            parts.append(node.text)
    return "".join(parts)


# Block nodes


class Paragraph(BaseModel):
    """A run of non-blank prose lines."""

    model_config = ConfigDict(frozen=True)

    kind: Literal["paragraph"] = "paragraph"
    line: int
    lines: list[str]
    inlines: list[InlineNode] = []

    @property
    def text(self) -> str:
        return inline_text(self.inlines) if self.inlines else " ".join(self.lines)

    @property
    def raw(self) -> str:
        return " ".join(line.strip() for line in self.lines)


class Heading(BaseModel):
    model_config = ConfigDict(frozen=True)

    kind: Literal["heading"] = "heading"
    line: int
    level: int
    text: str
    inlines: list[InlineNode] = []


class HorizontalRule(BaseModel):
    model_config = ConfigDict(frozen=True)

    kind: Literal["rule"] = "rule"
    line: int


class Verbatim(BaseModel):
    """Indented or fenced code; never parsed for markup."""

    model_config = ConfigDict(frozen=True)

    kind: Literal["verbatim"] = "verbatim"
    line: int
    lines: list[str]
    fenced: bool = False
    language: Optional[str] = None
    directive: Optional[str] = None  # 'call-seq' for the call-seq directive

    @property
    def text(self) -> str:
        return "\n".join(self.lines)


class DefinitionEntry(BaseModel):
    model_config = ConfigDict(frozen=True)

    line: int
    term: str
    description: str
    inlines: list[InlineNode] = []

    @property
    def description_text(self) -> str:
        return inline_text(self.inlines) if self.inlines else self.description


class DefinitionList(BaseModel):
    model_config = ConfigDict(frozen=True)

    kind: Literal["definitions"] = "definitions"
    line: int
    entries: list[DefinitionEntry]


class ListItem(BaseModel):
    model_config = ConfigDict(frozen=True)

    line: int
    children: list["BlockNode"] = []


class ListNode(BaseModel):
    model_config = ConfigDict(frozen=True)

    kind: Literal["list"] = "list"
    line: int
    ordered: bool = False
    items: list[ListItem]


BlockNode = Annotated[
    Union[Paragraph, Heading, HorizontalRule, Verbatim, DefinitionList, ListNode],
    Field(discriminator="kind"),
]

ListItem.model_rebuild()
ListNode.model_rebuild()


def node_text(node: BlockNode) -> str:
    """Plain text of a block node, recursing into lists."""
    if isinstance(node, (Paragraph, Heading, Verbatim)):
        return node.text
    if isinstance(node, DefinitionList):
        return " ".join(f"{e.term} {e.description_text}" for e in node.entries)
    if isinstance(node, ListNode):
        return " ".join(
            node_text(child) for item in node.items for child in item.children
        )
    return ""


class ParseIssue(BaseModel):
    """A non-fatal markup problem recovered by the parser."""

    model_config = ConfigDict(frozen=True)

    line: int
    markup_construct: str
    message: str


class Document(BaseModel):
    """Result of parsing a documentation block."""

    nodes: list[BlockNode] = []
    issues: list[ParseIssue] = []


# Call-seq


class ArgumentKind(str, Enum):
    POSITIONAL = "positional"
    KEYWORD = "keyword"
    SPLAT = "splat"
    DOUBLE_SPLAT = "double_splat"
    BLOCK = "block"
    FORWARD = "forward"


class ArgumentDescriptor(BaseModel):
    model_config = ConfigDict(frozen=True)

    name: str
    kind: ArgumentKind = ArgumentKind.POSITIONAL
    default: Optional[str] = None  # Default-value marker, e.g. '0' or 'nil'

    @property
    def has_default(self) -> bool:
        return self.default is not None


class BlockDescriptor(BaseModel):
    model_config = ConfigDict(frozen=True)

    params: list[str] = []
    rendering: str = "braces"  # 'braces', 'do' or 'ampersand'


class CallSeqEntry(BaseModel):
    """One declared invocation signature."""

    model_config = ConfigDict(frozen=True)

    receiver: Optional[str] = None
    name: str
    arguments: list[ArgumentDescriptor] = []
    block: Optional[BlockDescriptor] = None
    returns: list[str] = []
    arrow: str = "->"
    parenthesized: bool = False
    text: str = ""
    line: int = 0

    @property
    def return_sentinel(self) -> Optional[str]:
        """'self' or 'object' when the return type is one of the sentinels."""
        if len(self.returns) == 1 and self.returns[0] in ("self", "object"):
            return self.returns[0]
        return None

    @property
    def accepts_arguments(self) -> bool:
        return any(a.kind != ArgumentKind.BLOCK for a in self.arguments)

    @property
    def accepts_block(self) -> bool:
        return self.block is not None


class CallSeqLineError(BaseModel):
    model_config = ConfigDict(frozen=True)

    line: int
    text: str
    message: str


class CallSeqParse(BaseModel):
    """Entries parsed from the CallSeq section, plus lines that failed."""

    entries: list[CallSeqEntry] = []
    errors: list[CallSeqLineError] = []


# Sections


class SectionTag(str, Enum):
    CALL_SEQ = "call_seq"
    SYNOPSIS = "synopsis"
    DETAILS = "details"
    ARGUMENT_DESCRIPTION = "argument_description"
    CORNER_CASES = "corner_cases"
    RELATED_METHODS = "related_methods"

    @property
    def order(self) -> int:
        return SECTION_ORDER.index(self)


SECTION_ORDER = list(SectionTag)


class Section(BaseModel):
    """A contiguous node range [start, end) of the document."""

    model_config = ConfigDict(frozen=True)

    tag: SectionTag
    start: int
    end: int
    nodes: list[BlockNode] = []

    @property
    def line(self) -> Optional[int]:
        return self.nodes[0].line if self.nodes else None

    @property
    def text(self) -> str:
        return "\n".join(node_text(node) for node in self.nodes)


class SourceLine(BaseModel):
    model_config = ConfigDict(frozen=True)

    line: int
    text: str


class RelatedLine(BaseModel):
    model_config = ConfigDict(frozen=True)

    line: int
    references: list[str] = []
    unresolved: list[str] = []


class Ambiguity(BaseModel):
    model_config = ConfigDict(frozen=True)

    line: Optional[int] = None
    message: str


class SectionMap(BaseModel):
    """Enum-keyed section map; each tag appears at most once."""

    call_seq: Optional[Section] = None
    synopsis: Optional[Section] = None
    details: Optional[Section] = None
    argument_description: Optional[Section] = None
    corner_cases: Optional[Section] = None
    related_methods: Optional[Section] = None

    call_seq_lines: list[SourceLine] = []
    related: Optional[RelatedLine] = None
    ambiguities: list[Ambiguity] = []

    @model_validator(mode="after")
    def _check_order(self) -> "SectionMap":
        if self.call_seq is not None and self.call_seq.start != 0:
            raise ValueError("call-seq section must be first")
        previous_end = 0
        for section in self.present():
            if section.start < previous_end:
                raise ValueError(f"section {section.tag.value} is out of order")
            previous_end = section.end
        return self

    def get(self, tag: SectionTag) -> Optional[Section]:
        return getattr(self, tag.value)

    def has(self, tag: SectionTag) -> bool:
        return self.get(tag) is not None

    def present(self) -> list[Section]:
        """Present sections in tag order."""
        return [s for s in (self.get(tag) for tag in SECTION_ORDER) if s is not None]

    def text(self, tag: SectionTag) -> str:
        section = self.get(tag)
        return section.text if section is not None else ""


# Findings and reports


class Severity(str, Enum):
    VIOLATION = "violation"
    SUGGESTION = "suggestion"

    @property
    def rank(self) -> int:
        return 0 if self is Severity.VIOLATION else 1


class Finding(BaseModel):
    """One diagnostic produced by a rule."""

    model_config = ConfigDict(frozen=True)

    severity: Severity
    rule_id: str
    message: str
    section: Optional[SectionTag] = None
    line: Optional[int] = None
    rationale: str = ""

    def sort_key(self) -> tuple:
        return (
            self.severity.rank,
            self.section.order if self.section is not None else len(SECTION_ORDER),
            self.line if self.line is not None else 0,
            self.rule_id,
            self.message,
        )


class Summary(BaseModel):
    model_config = ConfigDict(frozen=True)

    violations: int = 0
    suggestions: int = 0

    @property
    def total(self) -> int:
        return self.violations + self.suggestions


class BlockReport(BaseModel):
    """Ordered findings for one documentation block."""

    model_config = ConfigDict(frozen=True)

    method: str
    location: Optional[SourceLocation] = None
    findings: list[Finding] = []
    summary: Summary = Summary()


class Report(BaseModel):
    """Findings for a batch of blocks plus counts by severity."""

    model_config = ConfigDict(frozen=True)

    blocks: list[BlockReport] = []
    summary: Summary = Summary()
    cancelled: bool = False

    @property
    def exit_status(self) -> int:
        return 1 if self.summary.violations else 0
