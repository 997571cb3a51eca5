"""CLI application using Typer."""

import signal
import sys
import threading
from enum import Enum
from pathlib import Path
from typing import List, Optional

import typer
from rich.console import Console
from rich.table import Table

from docconform.config import Config, get_config
from docconform.exceptions import ParseError
from docconform.models import Report, SectionTag, Severity
from docconform.utils.logging_config import setup_logging

app = typer.Typer(
    name="docconform",
    help="Check method documentation against the documentation policy",
    no_args_is_help=True,
)
console = Console()
err_console = Console(stderr=True)


class OutputFormat(str, Enum):
    TEXT = "text"
    JSON = "json"
    TABLE = "table"


def load_config(config_file: Optional[Path]) -> Config:
    """Global config, or a fresh one merging a rule override file."""
    config = get_config() if config_file is None else Config(rules_file=config_file)
    setup_logging(config.log_file, config.log_level, config.json_logs, stream=sys.stderr)
    return config


def print_findings_table(report: Report) -> None:
    """Print findings as a rich table."""
    table = Table(title="Documentation Findings")
    table.add_column("Location", style="cyan")
    table.add_column("Method", style="white")
    table.add_column("Rule", style="magenta")
    table.add_column("Severity")
    table.add_column("Message", style="white")

    for block in report.blocks:
        for finding in block.findings:
            location = block.location.file if block.location else ""
            if finding.line is not None:
                location = f"{location}:{finding.line}" if location else str(finding.line)
            severity = (
                "[red]violation[/red]"
                if finding.severity == Severity.VIOLATION
                else "[yellow]suggestion[/yellow]"
            )
            table.add_row(location, block.method, finding.rule_id, severity, finding.message)

    console.print(table)
    console.print(
        f"\n[bold]{len(report.blocks)} block(s):[/bold] "
        f"[red]{report.summary.violations} violation(s)[/red], "
        f"[yellow]{report.summary.suggestions} suggestion(s)[/yellow]"
    )


@app.command()
def check(
    paths: List[Path] = typer.Argument(
        ...,
        help="Block files (.json, .jsonl, .rdoc, .md, .txt) or folders",
        exists=True,
    ),
    output_format: OutputFormat = typer.Option(
        OutputFormat.TEXT,
        "--format",
        "-f",
        help="Output format",
    ),
    config_file: Optional[Path] = typer.Option(
        None,
        "--config",
        "-c",
        help="JSON file with per-rule settings",
        exists=True,
        dir_okay=False,
    ),
    workers: Optional[int] = typer.Option(
        None,
        "--workers",
        "-w",
        min=1,
        help="Worker threads (defaults to DOCCONFORM_WORKERS)",
    ),
    progress: bool = typer.Option(
        False,
        "--progress",
        help="Show a progress bar",
    ),
    recursive: bool = typer.Option(
        True,
        "--recursive/--no-recursive",
        help="Recursively scan subfolders",
    ),
):
    """Check documentation blocks and report findings.

    Exits with status 1 when any violation is found.
    """
    from docconform.ingest.loader import load_blocks
    from docconform.pipeline import check_blocks
    from docconform.reporting.reporter import render_json, render_text

    config = load_config(config_file)

    try:
        blocks = load_blocks(paths, recursive=recursive, default_markup=config.default_markup)
    except (OSError, ValueError) as e:
        err_console.print(f"[red]Failed to load blocks: {e}[/red]")
        raise typer.Exit(2)

    cancel_event = threading.Event()
    previous_handler = signal.signal(signal.SIGINT, lambda signum, frame: cancel_event.set())
    try:
        report = check_blocks(
            blocks,
            config,
            workers=workers,
            cancel_event=cancel_event,
            show_progress=progress,
        )
    finally:
        signal.signal(signal.SIGINT, previous_handler)

    if output_format == OutputFormat.JSON:
        typer.echo(render_json(report), nl=False)
    elif output_format == OutputFormat.TABLE:
        print_findings_table(report)
    else:
        typer.echo(render_text(report), nl=False)

    if report.cancelled:
        err_console.print("[yellow]Check cancelled; report is partial.[/yellow]")

    raise typer.Exit(report.exit_status)


@app.command()
def sections(
    path: Path = typer.Argument(
        ...,
        help="Block file or folder",
        exists=True,
    ),
):
    """Show how each documentation block is divided into sections."""
    from docconform.ingest.loader import load_blocks
    from docconform.parsers.base import get_parser
    from docconform.segmentation.segmenter import segment

    config = load_config(None)

    try:
        blocks = load_blocks([path], default_markup=config.default_markup)
    except (OSError, ValueError) as e:
        err_console.print(f"[red]Failed to load blocks: {e}[/red]")
        raise typer.Exit(2)

    for block in blocks:
        parser = get_parser(block.markup, config.max_nesting_depth)
        try:
            section_map = segment(parser.parse(block.text), config)
        except ParseError as e:
            err_console.print(f"[red]{block.method}: {e}[/red]")
            continue

        table = Table(title=block.method)
        table.add_column("Section", style="cyan")
        table.add_column("Line", style="green", justify="right")
        table.add_column("Text", style="white")

        for tag in SectionTag:
            section = section_map.get(tag)
            if section is None:
                table.add_row(tag.value, "", "[dim]absent[/dim]")
                continue
            line = block.absolute_line(section.line)
            text = section.text.replace("\n", " ")
            table.add_row(
                tag.value,
                str(line) if line is not None else "",
                text[:80] + ("..." if len(text) > 80 else ""),
            )

        console.print(table)
        for ambiguity in section_map.ambiguities:
            console.print(f"[yellow]Ambiguous:[/yellow] {ambiguity.message}")


@app.command(name="rules")
def list_rules():
    """List the rule catalog."""
    from docconform.rules.catalog import RULES

    config = load_config(None)

    table = Table(title="Documentation Rules")
    table.add_column("Rule", style="cyan")
    table.add_column("Title", style="white")
    table.add_column("Severity")
    table.add_column("Parameters", style="dim")
    table.add_column("Enabled", justify="center")

    for spec in RULES:
        settings = config.rule(spec.rule_id)
        severity = settings.severity or spec.severity
        table.add_row(
            spec.rule_id,
            spec.title,
            severity.value,
            ", ".join(spec.parameters),
            "yes" if settings.enabled else "[red]no[/red]",
        )

    console.print(table)


if __name__ == "__main__":
    app()
