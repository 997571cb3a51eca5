"""Report assembly and rendering."""

import json
from typing import Iterable, List

from docconform.models import (
    BlockReport,
    DocumentationBlock,
    Finding,
    Report,
    Severity,
    Summary,
)


def summarize(findings: Iterable[Finding]) -> Summary:
    """Count findings by severity."""
    violations = 0
    suggestions = 0
    for finding in findings:
        if finding.severity == Severity.VIOLATION:
            violations += 1
        else:
            suggestions += 1
    return Summary(violations=violations, suggestions=suggestions)


def build_block_report(block: DocumentationBlock, findings: Iterable[Finding]) -> BlockReport:
    """Order a block's findings by severity, section and line.

    Args:
        block: The evaluated documentation block
        findings: Findings in any order

    Returns:
        BlockReport with findings in their stable order
    """
    ordered = sorted(findings, key=Finding.sort_key)
    return BlockReport(
        method=block.method,
        location=block.location,
        findings=ordered,
        summary=summarize(ordered),
    )


def build_report(block_reports: List[BlockReport], cancelled: bool = False) -> Report:
    """Merge block reports, kept in input order, into one report."""
    return Report(
        blocks=list(block_reports),
        summary=Summary(
            violations=sum(b.summary.violations for b in block_reports),
            suggestions=sum(b.summary.suggestions for b in block_reports),
        ),
        cancelled=cancelled,
    )


def format_location(block: BlockReport, finding: Finding) -> str:
    """Location prefix for one finding, e.g. ``array.c:120``."""
    if block.location is None:
        return f"{block.method}:{finding.line}" if finding.line is not None else block.method
    line = finding.line if finding.line is not None else block.location.line_start
    return f"{block.location.file}:{line}"


def render_text(report: Report) -> str:
    """Render the report as one line per finding plus a summary line.

    Args:
        report: Report to render

    Returns:
        Plain text report ending with a newline
    """
    lines = []
    for block in report.blocks:
        for finding in block.findings:
            lines.append(
                f"{format_location(block, finding)}: {finding.severity.value} "
                f"[{finding.rule_id}] {block.method}: {finding.message}"
            )

    summary = report.summary
    lines.append(
        f"{len(report.blocks)} block(s) checked: "
        f"{summary.violations} violation(s), {summary.suggestions} suggestion(s)"
        + (" (cancelled)" if report.cancelled else "")
    )
    return "\n".join(lines) + "\n"


def render_json(report: Report) -> str:
    """Render the report as structured JSON records."""
    return json.dumps(report.model_dump(mode="json"), indent=2) + "\n"
