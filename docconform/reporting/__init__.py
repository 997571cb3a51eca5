"""Diagnostic report assembly and rendering."""

from .reporter import build_block_report, build_report, render_json, render_text, summarize

__all__ = ["build_block_report", "build_report", "render_json", "render_text", "summarize"]
