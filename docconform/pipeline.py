"""Parse, segment and evaluate documentation blocks."""

import threading
from concurrent.futures import ALL_COMPLETED, FIRST_COMPLETED, Future, ThreadPoolExecutor, wait
from typing import Dict, List, Optional, Sequence

from tqdm import tqdm

from docconform.config import Config
from docconform.exceptions import NestingDepthExceeded
from docconform.models import BlockReport, DocumentationBlock, Finding, Report, Severity
from docconform.parsers.base import get_parser
from docconform.parsers.callseq import parse_call_seq
from docconform.reporting.reporter import build_block_report, build_report
from docconform.rules.catalog import ENGINE_RULE, PARSE_RULE
from docconform.rules.evaluator import evaluate, parse_findings, segmentation_findings
from docconform.segmentation.segmenter import segment
from docconform.utils.logging_config import block_context, get_logger

logger = get_logger()


def collect_findings(block: DocumentationBlock, config: Config) -> List[Finding]:
    """Run the full pipeline on one block.

    Lines in the returned findings are relative to the block text.

    Raises:
        NestingDepthExceeded: If list nesting exceeds the configured limit
    """
    parser = get_parser(block.markup, config.max_nesting_depth)
    document = parser.parse(block.text)
    sections = segment(document, config)
    call_seq = parse_call_seq(sections.call_seq_lines)

    findings = parse_findings(document, config)
    findings.extend(segmentation_findings(sections, config))
    findings.extend(evaluate(sections, config, call_seq=call_seq))
    return findings


def evaluate_block(block: DocumentationBlock, config: Config) -> BlockReport:
    """Evaluate one block, isolating any failure to that block.

    Args:
        block: Documentation block to check
        config: Engine configuration

    Returns:
        BlockReport with findings mapped to source file lines
    """
    context = block_context(block.method)
    logger.debug("Evaluating block", extra=context)

    try:
        findings = collect_findings(block, config)
    except NestingDepthExceeded as e:
        logger.warning(str(e), extra=context)
        findings = [
            Finding(
                severity=Severity.VIOLATION,
                rule_id=PARSE_RULE,
                message=f"Malformed {e.markup_construct}: {e.message}",
                line=e.line,
                rationale="The block could not be parsed, so no rules were applied.",
            )
        ]
    except Exception as e:
        logger.error(f"Failed to evaluate block: {e}", exc_info=True, extra=context)
        findings = [
            Finding(
                severity=Severity.VIOLATION,
                rule_id=ENGINE_RULE,
                message=f"Internal error while evaluating block: {e}",
            )
        ]

    mapped = [
        f.model_copy(update={"line": block.absolute_line(f.line)}) for f in findings
    ]
    return build_block_report(block, mapped)


def check_blocks(
    blocks: Sequence[DocumentationBlock],
    config: Config,
    workers: Optional[int] = None,
    cancel_event: Optional[threading.Event] = None,
    show_progress: bool = False,
) -> Report:
    """Evaluate a batch of blocks on a thread pool.

    Each block is independent, so blocks are evaluated in parallel and the
    results merged back in input order. Setting ``cancel_event`` stops new
    blocks from being scheduled; blocks already running finish.

    Args:
        blocks: Blocks to evaluate
        config: Shared, read-only configuration
        workers: Worker threads (defaults to config.workers)
        cancel_event: Event checked before each block is scheduled
        show_progress: Show a progress bar on stderr

    Returns:
        Report for the evaluated blocks, flagged if cancelled early
    """
    workers = max(1, workers or config.workers)
    max_in_flight = 2 * workers

    logger.info(f"Checking {len(blocks)} blocks with {workers} workers")

    results: Dict[int, BlockReport] = {}
    pending: Dict[Future, int] = {}
    cancelled = False

    progress = tqdm(total=len(blocks), desc="Checking", unit="block", disable=not show_progress)
    try:
        with ThreadPoolExecutor(max_workers=workers) as executor:
            for index, block in enumerate(blocks):
                if cancel_event is not None and cancel_event.is_set():
                    cancelled = True
                    break

                if len(pending) >= max_in_flight:
                    _drain(pending, results, progress, return_when=FIRST_COMPLETED)

                pending[executor.submit(evaluate_block, block, config)] = index

            _drain(pending, results, progress)
    finally:
        progress.close()

    report = build_report([results[i] for i in sorted(results)], cancelled=cancelled)

    if cancelled:
        logger.warning(f"Cancelled after {len(results)}/{len(blocks)} blocks")
    logger.info(
        f"Check complete: {report.summary.violations} violations, "
        f"{report.summary.suggestions} suggestions"
    )
    return report


def _drain(
    pending: Dict[Future, int],
    results: Dict[int, BlockReport],
    progress: tqdm,
    return_when: str = ALL_COMPLETED,
) -> None:
    """Collect finished futures into results."""
    done, _ = wait(list(pending), return_when=return_when)
    for future in done:
        results[pending.pop(future)] = future.result()
        progress.update(1)
