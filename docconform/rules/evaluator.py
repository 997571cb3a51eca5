"""Apply the rule catalog to a segmented documentation block."""

from typing import Iterable, List, Optional

from docconform.config import Config
from docconform.exceptions import RuleEvaluationError
from docconform.models import (
    CallSeqParse,
    Document,
    Finding,
    SectionMap,
    SectionTag,
    Severity,
)
from docconform.parsers.callseq import parse_call_seq
from docconform.rules.catalog import PARSE_RULE, RULES, SEGMENT_RULE, RuleSpec
from docconform.rules.heuristics import PatternMatcher
from docconform.utils.logging_config import get_logger

logger = get_logger()


def evaluate(
    sections: SectionMap,
    config: Config,
    call_seq: Optional[CallSeqParse] = None,
    rules: Iterable[RuleSpec] = RULES,
) -> List[Finding]:
    """Run every enabled rule against a section map.

    Args:
        sections: Segmented documentation block
        config: Configuration with per-rule settings and patterns
        call_seq: Parsed call-seq; parsed from ``sections`` when omitted
        rules: Rules to apply (defaults to the full catalog)

    Returns:
        Findings in rule order, with severity overrides applied
    """
    if call_seq is None:
        call_seq = parse_call_seq(sections.call_seq_lines)
    matcher = PatternMatcher(config.patterns)

    findings: List[Finding] = []
    for spec in rules:
        settings = config.rule(spec.rule_id)
        if not settings.enabled:
            continue

        try:
            produced = spec.check(sections, call_seq, settings, matcher)
        except RuleEvaluationError as e:
            logger.debug(f"Rule {spec.rule_id} precondition failed: {e.message}")
            produced = [
                Finding(
                    severity=Severity.VIOLATION,
                    rule_id="R6",
                    message=f"{spec.rule_id} could not be evaluated: {e.message}",
                    section=SectionTag.CALL_SEQ,
                    line=e.line,
                )
            ]

        findings.extend(_apply_severity(produced, settings.severity))

    return findings


def parse_findings(document: Document, config: Config) -> List[Finding]:
    """Findings for markup the parser had to recover from."""
    settings = config.rule(PARSE_RULE)
    if not settings.enabled:
        return []
    findings = [
        Finding(
            severity=Severity.VIOLATION,
            rule_id=PARSE_RULE,
            message=f"Malformed {issue.markup_construct}: {issue.message}",
            line=issue.line,
            rationale="The markup was parsed on a best-effort basis.",
        )
        for issue in document.issues
    ]
    return _apply_severity(findings, settings.severity)


def segmentation_findings(sections: SectionMap, config: Config) -> List[Finding]:
    """Informational findings for unresolved section boundaries."""
    settings = config.rule(SEGMENT_RULE)
    if not settings.enabled:
        return []
    findings = [
        Finding(
            severity=Severity.SUGGESTION,
            rule_id=SEGMENT_RULE,
            message=f"Ambiguous structure: {ambiguity.message}",
            line=ambiguity.line,
            rationale="Ambiguous regions are treated as absent sections.",
        )
        for ambiguity in sections.ambiguities
    ]
    return _apply_severity(findings, settings.severity)


def _apply_severity(findings: List[Finding], severity: Optional[Severity]) -> List[Finding]:
    if severity is None:
        return findings
    return [f.model_copy(update={"severity": severity}) for f in findings]
