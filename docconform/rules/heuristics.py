"""Configurable lexical pattern matching.

The policy's conditional rules depend on what the prose *says* (for example
"with a block ... without a block ..."). These checks are lexical heuristics
over the text, not semantic understanding: a documentation block can state
divergent behavior in words none of the patterns anticipate, in which case
the dependent rule stays silent.
"""

import re
from functools import lru_cache
from typing import Iterable, List

from docconform.config import PatternSettings

EXCEPTION_NAME = re.compile(r"\b((?:[A-Z]\w*::)*[A-Z]\w*(?:Error|Exception))\b")


@lru_cache(maxsize=512)
def _compile(pattern: str, flags: int = 0) -> re.Pattern:
    return re.compile(pattern, re.MULTILINE | flags)


def _any(patterns: Iterable[str], text: str, flags: int = 0) -> bool:
    return any(_compile(p, flags).search(text) for p in patterns)


class PatternMatcher:
    """Lexical matchers built from pattern settings."""

    def __init__(self, settings: PatternSettings):
        self.settings = settings

    def states_block_divergence(self, text: str) -> bool:
        """Text describes behavior both with and without a block."""
        return _any(self.settings.block_given, text, re.IGNORECASE) and _any(
            self.settings.block_absent, text, re.IGNORECASE
        )

    def states_argument_divergence(self, text: str, name: str) -> bool:
        """Text describes behavior both with and without the named argument."""
        escaped = re.escape(name)
        omitted = [p.replace("{name}", escaped) for p in self.settings.argument_omitted]
        given = [p.replace("{name}", escaped) for p in self.settings.argument_given]
        return _any(omitted, text, re.IGNORECASE) and _any(given, text, re.IGNORECASE)

    def is_type_like(self, text: str) -> bool:
        return _any(self.settings.type_like, text)

    def states_type_constraint(self, text: str) -> bool:
        return _any(self.settings.type_constraint, text)

    def is_corner_case(self, text: str) -> bool:
        return _any(self.settings.corner_case, text.strip())

    def exception_names(self, text: str) -> List[str]:
        """Exception class names mentioned in text, in order of first mention."""
        seen: List[str] = []
        for match in EXCEPTION_NAME.finditer(text):
            name = match.group(1)
            if name not in seen:
                seen.append(name)
        return seen

    def is_obvious_exception(self, name: str) -> bool:
        short = name.rsplit("::", 1)[-1]
        return short in self.settings.obvious_exceptions
