"""Conformance rules for method documentation.

Each rule is a pure function of the section map, the parsed call-seq and
its settings, returning zero or more findings. Rules never mutate their
inputs. Line numbers in findings are relative to the documentation block;
the evaluator maps them to source lines.
"""

from dataclasses import dataclass
from typing import Callable, Dict, List, Optional

from docconform.config import RuleSettings
from docconform.exceptions import RuleEvaluationError
from docconform.models import (
    ArgumentKind,
    CallSeqEntry,
    CallSeqParse,
    Finding,
    Heading,
    HorizontalRule,
    Section,
    SectionMap,
    SectionTag,
    Severity,
    Verbatim,
    node_text,
)
from docconform.rules.heuristics import PatternMatcher
from docconform.utils.text import compute_similarity, split_into_sentences

RuleFunction = Callable[[SectionMap, CallSeqParse, RuleSettings, PatternMatcher], List[Finding]]


@dataclass(frozen=True)
class RuleSpec:
    """A rule and its catalog metadata."""

    rule_id: str
    title: str
    severity: Severity
    check: RuleFunction
    parameters: tuple = ()


def _prose(section: Optional[Section]) -> str:
    """Text of a section without verbatim blocks."""
    if section is None:
        return ""
    return "\n".join(node_text(n) for n in section.nodes if not isinstance(n, Verbatim))


def _group_by_name(entries: List[CallSeqEntry]) -> Dict[str, List[CallSeqEntry]]:
    groups: Dict[str, List[CallSeqEntry]] = {}
    for entry in entries:
        groups.setdefault(entry.name, []).append(entry)
    return groups


def check_arguments_described(
    sections: SectionMap, call_seq: CallSeqParse, settings: RuleSettings, matcher: PatternMatcher
) -> List[Finding]:
    """R1: no argument description for a method that takes no arguments."""
    section = sections.argument_description
    if section is None or sections.call_seq is None:
        return []
    if call_seq.errors:
        raise RuleEvaluationError(
            "call-seq arguments could not be extracted", line=call_seq.errors[0].line
        )
    if not call_seq.entries:
        return []
    if any(e.accepts_arguments or e.accepts_block for e in call_seq.entries):
        return []
    return [
        Finding(
            severity=Severity.VIOLATION,
            rule_id="R1",
            message="Argument description given, but no call-seq form accepts arguments or a block",
            section=SectionTag.ARGUMENT_DESCRIPTION,
            line=section.line,
            rationale="There are no arguments to describe; remove the argument description.",
        )
    ]


def check_block_forms(
    sections: SectionMap, call_seq: CallSeqParse, settings: RuleSettings, matcher: PatternMatcher
) -> List[Finding]:
    """R2: block and non-block behavior described but only one form documented."""
    details = _prose(sections.details)
    if not details or not call_seq.entries or not matcher.states_block_divergence(details):
        return []

    findings = []
    for name, entries in _group_by_name(call_seq.entries).items():
        with_block = [e for e in entries if e.accepts_block]
        if with_block and len(with_block) < len(entries):
            continue
        documented = "with" if with_block else "without"
        missing = "without" if with_block else "with"
        findings.append(
            Finding(
                severity=Severity.VIOLATION,
                rule_id="R2",
                message=(
                    f"Details describe behavior with and without a block, but the call-seq "
                    f"for '{name}' only shows the form {documented} a block"
                ),
                section=SectionTag.CALL_SEQ,
                line=entries[0].line,
                rationale=f"Add a call-seq line for the form {missing} a block.",
            )
        )
    return findings


def check_synopsis_redundancy(
    sections: SectionMap, call_seq: CallSeqParse, settings: RuleSettings, matcher: PatternMatcher
) -> List[Finding]:
    """R3: long multi-sentence synopsis restated by the details."""
    synopsis = sections.synopsis
    if synopsis is None or sections.details is None:
        return []

    text = _prose(synopsis)
    sentences = split_into_sentences(text)
    if len(sentences) <= 1 or len(text) <= settings.param("max_chars", 140):
        return []

    overlap = settings.param("overlap", 0.5)
    details_sentences = split_into_sentences(_prose(sections.details))
    for sentence in sentences:
        for other in details_sentences:
            if compute_similarity(sentence, other) >= overlap:
                return [
                    Finding(
                        severity=Severity.SUGGESTION,
                        rule_id="R3",
                        message=(
                            f"Synopsis has {len(sentences)} sentences ({len(text)} characters) "
                            f"and the details restate: {sentence!r}"
                        ),
                        section=SectionTag.SYNOPSIS,
                        line=synopsis.line,
                        rationale="Keep the synopsis to one short sentence and leave the rest to the details.",
                    )
                ]
    return []


def check_related_count(
    sections: SectionMap, call_seq: CallSeqParse, settings: RuleSettings, matcher: PatternMatcher
) -> List[Finding]:
    """R4: at most three related methods."""
    related = sections.related
    limit = int(settings.param("max_references", 3))
    if related is None or len(related.references) <= limit:
        return []
    return [
        Finding(
            severity=Severity.VIOLATION,
            rule_id="R4",
            message=(
                f"Related line lists {len(related.references)} methods; at most {limit} are allowed"
            ),
            section=SectionTag.RELATED_METHODS,
            line=related.line,
            rationale="Mention only the most closely related methods.",
        )
    ]


def check_obvious_exceptions(
    sections: SectionMap, call_seq: CallSeqParse, settings: RuleSettings, matcher: PatternMatcher
) -> List[Finding]:
    """R5: exceptions that follow directly from a stated argument type."""
    constraint_stated = sections.argument_description is not None or matcher.states_type_constraint(
        "\n".join(_prose(s) for s in sections.present())
    )
    if not constraint_stated:
        return []

    examples = "\n".join(
        node.text
        for section in sections.present()
        for node in section.nodes
        if isinstance(node, Verbatim) and node.directive is None
    )

    findings = []
    for tag in (SectionTag.DETAILS, SectionTag.CORNER_CASES):
        section = sections.get(tag)
        for name in matcher.exception_names(_prose(section)):
            if not matcher.is_obvious_exception(name) or name in examples:
                continue
            if any(f.message.startswith(f"{name} ") for f in findings):
                continue
            findings.append(
                Finding(
                    severity=Severity.SUGGESTION,
                    rule_id="R5",
                    message=f"{name} follows from the stated argument type and need not be documented",
                    section=tag,
                    line=section.line,
                    rationale="Document only exceptions that are not obvious from the argument types.",
                )
            )
    return findings


def check_call_seq_grammar(
    sections: SectionMap, call_seq: CallSeqParse, settings: RuleSettings, matcher: PatternMatcher
) -> List[Finding]:
    """R6: call-seq lines must follow the signature grammar."""
    if sections.call_seq is None:
        return []

    if not sections.call_seq_lines:
        return [
            Finding(
                severity=Severity.VIOLATION,
                rule_id="R6",
                message="call-seq directive has no signature lines",
                section=SectionTag.CALL_SEQ,
                line=sections.call_seq.line,
            )
        ]

    findings = [
        Finding(
            severity=Severity.VIOLATION,
            rule_id="R6",
            message=f"Malformed call-seq line {error.text!r}: {error.message}",
            section=SectionTag.CALL_SEQ,
            line=error.line,
            rationale="Write each form as 'receiver.method(args) {|params| ... } -> type'.",
        )
        for error in call_seq.errors
    ]

    for entry in call_seq.entries:
        # Only a parenthesized argument list must be followed by a {|...|} block
        if not entry.parenthesized or entry.block is None or entry.block.rendering == "braces":
            continue
        if entry.block.rendering == "ampersand":
            message = f"Block given as a '&' argument in {entry.text!r} instead of {{|...| ... }}"
        else:
            message = f"Block given as do ... end in {entry.text!r} instead of {{|...| ... }}"
        findings.append(
            Finding(
                severity=Severity.VIOLATION,
                rule_id="R6",
                message=message,
                section=SectionTag.CALL_SEQ,
                line=entry.line,
                rationale="Render block forms as '{|params| ... }' after the argument list.",
            )
        )
    return findings


def check_headings_in_short_docs(
    sections: SectionMap, call_seq: CallSeqParse, settings: RuleSettings, matcher: PatternMatcher
) -> List[Finding]:
    """R7: headings and rules are for long documentation only."""
    constructs = [
        node
        for section in sections.present()
        for node in section.nodes
        if isinstance(node, (Heading, HorizontalRule))
    ]
    if not constructs:
        return []

    threshold = settings.param("threshold_chars", 300)
    length = len(sections.text(SectionTag.DETAILS))
    if length >= threshold:
        return []

    first = constructs[0]
    return [
        Finding(
            severity=Severity.SUGGESTION,
            rule_id="R7",
            message=(
                f"{len(constructs)} heading/rule construct(s) in documentation whose details "
                f"are only {length} characters (threshold {threshold:g})"
            ),
            section=SectionTag.DETAILS if sections.details is not None else None,
            line=first.line,
            rationale="Headings are reserved for long, complex documentation.",
        )
    ]


def check_default_markers(
    sections: SectionMap, call_seq: CallSeqParse, settings: RuleSettings, matcher: PatternMatcher
) -> List[Finding]:
    """R8: defaulted argument whose omission changes behavior."""
    details = _prose(sections.details)
    if not details:
        return []

    findings = []
    for name, entries in _group_by_name(call_seq.entries).items():
        for entry in entries:
            positional = [a for a in entry.arguments if a.kind != ArgumentKind.BLOCK]
            for argument in positional:
                if not argument.has_default:
                    continue
                split = any(
                    len([a for a in other.arguments if a.kind != ArgumentKind.BLOCK]) < len(positional)
                    for other in entries
                    if other is not entry
                )
                if split:
                    continue
                divergent = matcher.states_argument_divergence(details, argument.name) or (
                    len(positional) == 1 and matcher.states_argument_divergence(details, "argument")
                )
                if not divergent:
                    continue
                findings.append(
                    Finding(
                        severity=Severity.SUGGESTION,
                        rule_id="R8",
                        message=(
                            f"Details describe different behavior when '{argument.name}' is omitted; "
                            f"document {entry.name} with and without it as separate call-seq lines"
                        ),
                        section=SectionTag.CALL_SEQ,
                        line=entry.line,
                        rationale="Heuristic: based on wording in the details, not on the method itself.",
                    )
                )
    return findings


def check_synopsis_present(
    sections: SectionMap, call_seq: CallSeqParse, settings: RuleSettings, matcher: PatternMatcher
) -> List[Finding]:
    """R9: every method has a synopsis."""
    if sections.synopsis is not None:
        return []
    line = sections.call_seq.nodes[-1].line if sections.call_seq is not None else 1
    return [
        Finding(
            severity=Severity.VIOLATION,
            rule_id="R9",
            message="Missing synopsis paragraph",
            section=SectionTag.SYNOPSIS,
            line=line,
            rationale="Start with a short sentence saying what the method does.",
        )
    ]


def check_return_arrow(
    sections: SectionMap, call_seq: CallSeqParse, settings: RuleSettings, matcher: PatternMatcher
) -> List[Finding]:
    """R10: return types follow '->'."""
    return [
        Finding(
            severity=Severity.SUGGESTION,
            rule_id="R10",
            message=f"Use '->' rather than {entry.arrow!r} before the return type in {entry.text!r}",
            section=SectionTag.CALL_SEQ,
            line=entry.line,
        )
        for entry in call_seq.entries
        if entry.arrow != "->"
    ]


def check_receivers(
    sections: SectionMap, call_seq: CallSeqParse, settings: RuleSettings, matcher: PatternMatcher
) -> List[Finding]:
    """R11: one receiver label across all call-seq lines."""
    receivers = sorted({e.receiver or "" for e in call_seq.entries})
    if len(receivers) <= 1:
        return []
    labels = ", ".join(repr(r) if r else "(none)" for r in receivers)
    return [
        Finding(
            severity=Severity.SUGGESTION,
            rule_id="R11",
            message=f"call-seq lines use different receivers: {labels}",
            section=SectionTag.CALL_SEQ,
            line=call_seq.entries[0].line,
            rationale="Name the receiver the same way on every line.",
        )
    ]


def check_related_references(
    sections: SectionMap, call_seq: CallSeqParse, settings: RuleSettings, matcher: PatternMatcher
) -> List[Finding]:
    """R12: related methods are written as cross-references."""
    related = sections.related
    if related is None or not related.unresolved:
        return []
    tokens = ", ".join(repr(t) for t in related.unresolved)
    return [
        Finding(
            severity=Severity.SUGGESTION,
            rule_id="R12",
            message=f"Related line has entries that are not method references: {tokens}",
            section=SectionTag.RELATED_METHODS,
            line=related.line,
            rationale="Write related methods as cross-references such as #each or Array#map.",
        )
    ]


RULES = (
    RuleSpec("R1", "Argument description without arguments", Severity.VIOLATION, check_arguments_described),
    RuleSpec("R2", "Block forms match described behavior", Severity.VIOLATION, check_block_forms),
    RuleSpec(
        "R3", "Concise synopsis", Severity.SUGGESTION, check_synopsis_redundancy, ("max_chars", "overlap")
    ),
    RuleSpec(
        "R4", "At most three related methods", Severity.VIOLATION, check_related_count, ("max_references",)
    ),
    RuleSpec("R5", "No obvious exceptions", Severity.SUGGESTION, check_obvious_exceptions),
    RuleSpec("R6", "Call-seq grammar", Severity.VIOLATION, check_call_seq_grammar),
    RuleSpec(
        "R7",
        "Headings only in long documentation",
        Severity.SUGGESTION,
        check_headings_in_short_docs,
        ("threshold_chars",),
    ),
    RuleSpec("R8", "Split divergent default arguments", Severity.SUGGESTION, check_default_markers),
    RuleSpec("R9", "Synopsis present", Severity.VIOLATION, check_synopsis_present),
    RuleSpec("R10", "Return arrow", Severity.SUGGESTION, check_return_arrow),
    RuleSpec("R11", "Consistent receiver", Severity.SUGGESTION, check_receivers),
    RuleSpec("R12", "Related methods are cross-references", Severity.SUGGESTION, check_related_references),
)

# Findings raised by the engine itself rather than a catalog rule
PARSE_RULE = "PARSE"
SEGMENT_RULE = "SEGMENT"
ENGINE_RULE = "ENGINE"


def get_rule(rule_id: str) -> RuleSpec:
    """Look up a rule by id.

    Raises:
        KeyError: If the rule id is unknown
    """
    for spec in RULES:
        if spec.rule_id == rule_id:
            return spec
    raise KeyError(f"Unknown rule: {rule_id}")
