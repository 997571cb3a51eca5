"""Conformance rules and their evaluation."""

from .catalog import RULES, RuleSpec, get_rule
from .evaluator import evaluate, parse_findings, segmentation_findings
from .heuristics import PatternMatcher

__all__ = [
    "RULES",
    "RuleSpec",
    "get_rule",
    "evaluate",
    "parse_findings",
    "segmentation_findings",
    "PatternMatcher",
]
